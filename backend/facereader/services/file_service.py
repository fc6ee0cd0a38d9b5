"""
FaceReader Backend — File Storage Service
============================================

What:  "Store bytes, get URL" for uploaded portraits, plus read access to the
       JSON documents kept on the same volume (dummy analysis responses).
Why:   Analysis responses hand the client an absolute URL to the image that
       was analyzed; all storage details stay behind this service.
How:   Validates size and content type, writes with async I/O into
       <prefix>/YYYY/MM/DD/<uuid>.<ext>, and builds public URLs served by
       GET /api/files/{path}.
Who:   Called by ImageService (validation) and AnalysisService (storage).

Security Model:
    - Size check before anything else touches the bytes
    - Content type read from magic bytes, not from the client's header
    - UUID filenames: no user input ever reaches the file system path
    - resolve() refuses paths that escape the storage root
"""

import json
import logging
import os
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional

import aiofiles
from pydantic import BaseModel

from facereader.config import settings
from facereader.exceptions import FileStorageError, NotFoundError, ValidationError

logger = logging.getLogger(__name__)

# ── Allowed File Types ────────────────────────────────────────────────────
# HEIC/HEIF are accepted here because ImageService re-encodes them to JPEG
# before they are stored or sent to the model.
ALLOWED_MIME_TYPES = {
    "image/png": ".png",
    "image/jpeg": ".jpg",
    "image/jpg": ".jpg",
    "image/webp": ".webp",
    "image/heic": ".heic",
    "image/heif": ".heif",
}

_EXTENSION_MIME_MAP = {
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".webp": "image/webp",
    ".heic": "image/heic",
    ".heif": "image/heif",
}


class StoredFile(BaseModel):
    """Location of a stored upload."""

    absolute_path: str
    relative_path: str
    public_url: str


class FileService:
    """
    Manages upload validation, storage, and retrieval on the storage volume.

    Directory Structure:
        storage/
        ├── fortune-prediction/2024/01/15/<uuid>.jpg
        ├── compatibility-analysis/2024/01/15/<uuid>.png
        └── dummy-data/fortune-prediction.json
    """

    def __init__(self, storage_root: Optional[str] = None, public_base_url: Optional[str] = None):
        """
        Args:
            storage_root:    Override settings.storage_root (used in tests)
            public_base_url: Override settings.public_base_url (used in tests)
        """
        self.storage_root = Path(storage_root or settings.storage_root).resolve()
        self.public_base_url = (public_base_url or settings.public_base_url).rstrip("/")
        self.storage_root.mkdir(parents=True, exist_ok=True)
        logger.info("FileService initialized with storage_root=%s", self.storage_root)

    # ── Validation ────────────────────────────────────────────────────────

    def validate_size(self, actual_size: int, field: str = "image") -> None:
        """
        Reject empty uploads and uploads above settings.max_file_size.

        Raises:
            ValidationError with a human-readable size message
        """
        if actual_size == 0:
            raise ValidationError(
                message="이미지 파일이 비어 있습니다.",
                field=field,
            )

        max_mb = settings.max_file_size / (1024 * 1024)
        if actual_size > settings.max_file_size:
            raise ValidationError(
                message=f"File size ({actual_size / (1024 * 1024):.1f}MB) exceeds maximum of {max_mb:.0f}MB.",
                field=field,
                context={"max_size_mb": max_mb, "actual_size": actual_size},
            )

    def validate_mime_type(self, file_content: bytes, filename: str, field: str = "image") -> str:
        """
        Determine the real content type from magic bytes.

        Returns:
            Detected MIME type (one of ALLOWED_MIME_TYPES)

        Raises:
            ValidationError if the content is not a supported image
            FileStorageError if detection itself fails
        """
        try:
            import magic
            mime_type = magic.from_buffer(file_content, mime=True)
        except ImportError:
            # python-magic missing (e.g. CI without libmagic): trust the extension
            logger.warning(
                "python-magic not available — falling back to extension-based type detection. "
                "Install libmagic for production security."
            )
            ext = Path(filename).suffix.lower()
            mime_type = _EXTENSION_MIME_MAP.get(ext, "application/octet-stream")
        except Exception as e:
            logger.error("MIME type detection failed: %s", str(e))
            raise FileStorageError(
                message="Could not verify file type. Please try again.",
                context={"error": str(e)},
            )

        if mime_type not in ALLOWED_MIME_TYPES:
            raise ValidationError(
                message=(
                    f"File content type '{mime_type}' is not supported. "
                    f"The file must be a valid image (JPEG, PNG, WEBP or HEIC)."
                ),
                field=field,
                context={"detected_mime": mime_type, "allowed": list(ALLOWED_MIME_TYPES.keys())},
            )

        return mime_type

    # ── Paths & URLs ──────────────────────────────────────────────────────

    def _generate_storage_path(self, prefix: str, extension: str) -> tuple:
        """Creates <prefix>/YYYY/MM/DD/<uuid><ext>; returns (absolute, relative)."""
        now = datetime.now(timezone.utc)
        date_dir = now.strftime("%Y/%m/%d")
        unique_name = f"{uuid.uuid4()}{extension}"

        relative_path = f"{prefix}/{date_dir}/{unique_name}"
        return self.storage_root / relative_path, relative_path

    def public_url(self, relative_path: str) -> str:
        return f"{self.public_base_url}/api/files/{relative_path}"

    def resolve(self, relative_path: str) -> Path:
        """
        Map a relative storage path to an existing file.

        Raises:
            ValidationError: the path escapes the storage root
            NotFoundError:   no such file
        """
        full_path = (self.storage_root / relative_path).resolve()
        if not full_path.is_relative_to(self.storage_root):
            raise ValidationError(message="Invalid file path", field="path")
        if not full_path.is_file():
            raise NotFoundError(resource="file", resource_id=relative_path)
        return full_path

    # ── Read / Write ──────────────────────────────────────────────────────

    async def store(self, content: bytes, extension: str, prefix: str) -> StoredFile:
        """
        Write already-validated bytes to storage.

        Args:
            content:   Image bytes
            extension: File extension including the dot (".jpg")
            prefix:    Top-level folder, one per endpoint ("fortune-prediction")

        Raises:
            FileStorageError if the directory or the file cannot be written.
        """
        absolute_path, relative_path = self._generate_storage_path(prefix, extension)

        try:
            absolute_path.parent.mkdir(parents=True, exist_ok=True)
            async with aiofiles.open(absolute_path, "wb") as f:
                await f.write(content)
        except OSError as e:
            logger.error("Failed to store file at %s: %s", absolute_path, str(e))
            raise FileStorageError(
                message="이미지 업로드 중 오류가 발생했습니다.",
                context={"path": str(absolute_path), "os_error": str(e)},
            )

        logger.info("File stored: %s (%d bytes)", relative_path, len(content))
        return StoredFile(
            absolute_path=str(absolute_path),
            relative_path=relative_path,
            public_url=self.public_url(relative_path),
        )

    async def read_json(self, relative_path: str) -> Any:
        """
        Load a JSON document from storage.

        Raises:
            NotFoundError:    document missing
            FileStorageError: unreadable or not valid JSON
        """
        path = self.resolve(relative_path)
        try:
            async with aiofiles.open(path, "r", encoding="utf-8") as f:
                raw = await f.read()
            return json.loads(raw)
        except (OSError, ValueError) as e:
            logger.error("Failed to read JSON document %s: %s", relative_path, str(e))
            raise FileStorageError(
                message="저장된 문서를 읽을 수 없습니다.",
                context={"path": relative_path, "error": str(e)},
            )

    async def cleanup_file(self, file_path: str) -> None:
        """
        Best-effort removal of a stored file (after a failed analysis).

        Never raises: a leftover image is not a user-facing error.
        """
        try:
            path = Path(file_path)
            if path.exists():
                os.remove(path)
                logger.info("Cleaned up file: %s", path.name)
            else:
                logger.debug("Cleanup: file already gone: %s", path.name)
        except OSError as e:
            logger.warning("Failed to clean up file %s: %s", file_path, str(e))


# ── Singleton Instance ────────────────────────────────────────────────────
file_service = FileService()
