"""
FaceReader Backend — Image Preparation Service
================================================

What:  Turns an upload (or a remote URL) into bytes the vision model accepts.
Why:   iPhones upload HEIC by default; Gemini and browsers want JPEG. Every
       analysis endpoint needs the same validate → convert step.
How:   HEIC is recognised from the ISO-BMFF brand at bytes 4-12 and re-encoded
       with Pillow + pillow-heif. Everything else is validated by FileService.
Who:   Called by AnalysisService.
"""

import io
import logging
from typing import Optional

import httpx
import pillow_heif
from PIL import Image
from pydantic import BaseModel

from facereader.config import settings
from facereader.exceptions import ImageConversionError, ValidationError
from facereader.services.file_service import ALLOWED_MIME_TYPES, FileService, file_service
from facereader.services.llm_base import VisionImage

logger = logging.getLogger(__name__)

# Registers the HEIF decoder with Pillow so Image.open() reads HEIC
pillow_heif.register_heif_opener()

# ftyp brands that mark a HEIC/HEIF container
_HEIC_BRANDS = ("heic", "mif1")


class PreparedImage(BaseModel):
    """Validated image bytes ready for storage and the model."""

    data: bytes
    mime_type: str
    extension: str
    converted: bool = False

    def as_vision_image(self) -> VisionImage:
        return VisionImage(data=self.data, mime_type=self.mime_type)


def is_heic(data: bytes) -> bool:
    """True when bytes 4-12 (the ftyp box) name a HEIC brand."""
    if len(data) < 12:
        return False
    header = data[4:12].decode("ascii", errors="ignore")
    return any(brand in header for brand in _HEIC_BRANDS)


def convert_heic_to_jpeg(data: bytes, quality: Optional[int] = None) -> bytes:
    """
    Re-encode HEIC bytes as JPEG.

    Raises:
        ImageConversionError if the bytes cannot be decoded.
    """
    quality = quality or settings.heic_jpeg_quality
    try:
        with Image.open(io.BytesIO(data)) as image:
            output = io.BytesIO()
            image.convert("RGB").save(output, format="JPEG", quality=quality)
    except (OSError, ValueError, RuntimeError) as e:
        logger.error("HEIC conversion failed: %s", str(e))
        raise ImageConversionError(context={"error": str(e), "size": len(data)}) from e

    converted = output.getvalue()
    logger.info("HEIC converted to JPEG: %d → %d bytes", len(data), len(converted))
    return converted


class ImageService:
    """
    Validates and normalises images for analysis.

    Flow per image:
        size check → HEIC? convert to JPEG : magic-byte MIME check
    """

    def __init__(self, files: Optional[FileService] = None):
        self.files = files or file_service

    def prepare(self, content: bytes, filename: str = "upload", field: str = "image") -> PreparedImage:
        """
        Validate one image and convert it when it is HEIC.

        Raises:
            ValidationError:      empty, oversized, or not an image
            ImageConversionError: HEIC bytes that do not decode
        """
        self.files.validate_size(len(content), field=field)

        if is_heic(content):
            logger.info("HEIC upload detected in '%s', converting to JPEG", field)
            return PreparedImage(
                data=convert_heic_to_jpeg(content),
                mime_type="image/jpeg",
                extension=".jpg",
                converted=True,
            )

        mime_type = self.files.validate_mime_type(content, filename, field=field)
        return PreparedImage(
            data=content,
            mime_type=mime_type,
            extension=ALLOWED_MIME_TYPES[mime_type],
        )

    async def fetch_remote(self, url: str, field: str = "imageUrl") -> PreparedImage:
        """
        Download an image by URL and prepare it.

        Used by compatibility analysis when the client sends previously
        stored image URLs instead of files.

        Raises:
            ValidationError if the URL cannot be fetched.
        """
        if not url.startswith(("http://", "https://")):
            raise ValidationError(message="이미지 URL 형식이 올바르지 않습니다.", field=field)

        try:
            async with httpx.AsyncClient(
                timeout=settings.remote_fetch_timeout, follow_redirects=True
            ) as client:
                response = await client.get(url)
                response.raise_for_status()
        except httpx.HTTPError as e:
            logger.warning("Failed to fetch remote image %s: %s", url, str(e))
            raise ValidationError(
                message="이미지 URL에서 이미지를 불러올 수 없습니다.",
                field=field,
                context={"url": url, "error": str(e)},
            ) from e

        filename = url.rsplit("/", 1)[-1].split("?", 1)[0] or "remote"
        return self.prepare(response.content, filename=filename, field=field)


# ── Singleton Instance ────────────────────────────────────────────────────
image_service = ImageService()
