"""
FaceReader Backend — Image Preparation Tests
==============================================

What we test:
    ✅ HEIC detection from the ftyp brand
    ✅ Undecodable HEIC → ImageConversionError
    ✅ Non-HEIC uploads keep their bytes and detected type
    ✅ Remote fetch: URL validation, HTTP failures, success path
"""

import sys
from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

from facereader.exceptions import ImageConversionError, ValidationError
from facereader.services.file_service import FileService
from facereader.services.image_service import (
    ImageService,
    convert_heic_to_jpeg,
    is_heic,
)


@pytest.fixture
def image_service(temp_storage):
    return ImageService(files=FileService(storage_root=temp_storage))


class TestHeicDetection:

    def test_heic_brand(self, sample_heic_header):
        assert is_heic(sample_heic_header)

    def test_mif1_brand(self):
        assert is_heic(b"\x00\x00\x00\x1cftypmif1" + b"\x00" * 16)

    def test_jpeg_is_not_heic(self, sample_image_bytes):
        assert not is_heic(sample_image_bytes)

    def test_short_input_is_not_heic(self):
        assert not is_heic(b"\x00\x00\x00\x18ftyp")


class TestConversion:

    def test_undecodable_heic_raises(self, sample_heic_header):
        with pytest.raises(ImageConversionError):
            convert_heic_to_jpeg(sample_heic_header)

    def test_heic_upload_is_converted(self, image_service, sample_heic_header):
        with patch(
            "facereader.services.image_service.convert_heic_to_jpeg",
            return_value=b"\xff\xd8converted",
        ) as convert:
            prepared = image_service.prepare(sample_heic_header, "IMG_0001.HEIC")

        convert.assert_called_once_with(sample_heic_header)
        assert prepared.data == b"\xff\xd8converted"
        assert prepared.mime_type == "image/jpeg"
        assert prepared.extension == ".jpg"
        assert prepared.converted is True

    def test_png_passes_through(self, image_service, sample_png_bytes):
        fake_magic = MagicMock()
        fake_magic.from_buffer.return_value = "image/png"
        with patch.dict(sys.modules, {"magic": fake_magic}):
            prepared = image_service.prepare(sample_png_bytes, "face.png")

        assert prepared.data == sample_png_bytes
        assert prepared.extension == ".png"
        assert prepared.converted is False
        vision = prepared.as_vision_image()
        assert vision.mime_type == "image/png"

    def test_empty_upload_rejected(self, image_service):
        with pytest.raises(ValidationError):
            image_service.prepare(b"", "face.jpg", field="image")


def _mock_http_client(response=None, error=None):
    client = MagicMock()
    client.get = AsyncMock(return_value=response, side_effect=error)
    client.__aenter__ = AsyncMock(return_value=client)
    client.__aexit__ = AsyncMock(return_value=False)
    return client


class TestFetchRemote:

    @pytest.mark.asyncio
    async def test_non_http_url_rejected(self, image_service):
        with pytest.raises(ValidationError, match="URL 형식"):
            await image_service.fetch_remote("file:///etc/passwd", field="image1Url")

    @pytest.mark.asyncio
    async def test_http_error_becomes_validation_error(self, image_service):
        client = _mock_http_client(error=httpx.ConnectError("refused"))
        with patch("facereader.services.image_service.httpx.AsyncClient", return_value=client):
            with pytest.raises(ValidationError, match="불러올 수 없습니다") as exc_info:
                await image_service.fetch_remote("https://cdn.example.com/a.jpg", field="image1Url")
        assert exc_info.value.field == "image1Url"

    @pytest.mark.asyncio
    async def test_downloaded_bytes_are_prepared(self, image_service, sample_png_bytes):
        response = MagicMock()
        response.content = sample_png_bytes
        response.raise_for_status = MagicMock()
        client = _mock_http_client(response=response)

        fake_magic = MagicMock()
        fake_magic.from_buffer.return_value = "image/png"
        with patch("facereader.services.image_service.httpx.AsyncClient", return_value=client), \
                patch.dict(sys.modules, {"magic": fake_magic}):
            prepared = await image_service.fetch_remote("https://cdn.example.com/face.png?v=2")

        client.get.assert_awaited_once_with("https://cdn.example.com/face.png?v=2")
        assert prepared.mime_type == "image/png"
        assert prepared.data == sample_png_bytes
