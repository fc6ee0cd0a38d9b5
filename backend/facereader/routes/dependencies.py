"""
FaceReader Backend — Route Dependencies
=========================================

What:  FastAPI dependencies shared by route modules.
Why:   Routes receive services through Depends() so tests can swap them with
       app.dependency_overrides instead of patching module globals.
"""

from typing import Optional

from fastapi import Header, UploadFile

from facereader.services.analysis_service import AnalysisService, ImageUpload, analysis_service
from facereader.services.file_service import FileService, file_service
from facereader.services.prompt_service import detect_language
from facereader.services.settings_service import SettingsService, settings_service
from facereader.services.share_service import ShareService, share_service


def get_analysis_service() -> AnalysisService:
    return analysis_service


def get_share_service() -> ShareService:
    return share_service


def get_settings_service() -> SettingsService:
    return settings_service


def get_file_service() -> FileService:
    return file_service


def get_language(accept_language: Optional[str] = Header(default=None)) -> str:
    """Response language from the Accept-Language header (ko, en, ja, zh)."""
    return detect_language(accept_language)


async def read_upload(upload: Optional[UploadFile], field: str) -> Optional[ImageUpload]:
    """Read a multipart file into memory; None when the field was not sent."""
    if upload is None:
        return None
    try:
        content = await upload.read()
    finally:
        await upload.close()
    return ImageUpload(content=content, filename=upload.filename or "upload", field=field)
