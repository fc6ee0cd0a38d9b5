"""
FaceReader Backend — Analysis Service (Workflow Orchestrator)
==============================================================

What:  Runs one analysis request end to end for every analysis endpoint.
Why:   The six endpoints differ only in descriptor, prompt, number of images,
       and envelope. The workflow itself is shared.
How:   Composes SettingsService, ImageService, FileService, PromptService,
       an LLMService, and the response normalizer.

Orchestration Flow:
    ┌────────────┐   ┌──────────────┐   ┌─────────┐   ┌──────────┐   ┌───────────┐
    │ Dummy mode?│──▶│ Validate +   │──▶│  Store  │──▶│  Gemini  │──▶│ Normalize │
    │ (settings) │   │ HEIC → JPEG  │   │ (files) │   │ (prompt) │   │ + envelope│
    └────────────┘   └──────────────┘   └─────────┘   └──────────┘   └───────────┘
          │ on
          ▼
    dummy-data/<route>.json returned verbatim

    On failure after storage the stored images are removed and the error
    propagates to the global handlers.
"""

import logging
from typing import Any, Dict, List, Optional, Sequence, Tuple

from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from facereader.analysis import NormalizationOutcome, get_schema, normalize
from facereader.exceptions import ValidationError
from facereader.schemas.analysis import (
    AnalysisEnvelope,
    CompatibilityEnvelope,
    CompatibilityImages,
    EmotionEnvelope,
    FortuneEnvelope,
)
from facereader.services.file_service import FileService, StoredFile, file_service
from facereader.services.gemini_service import gemini_service
from facereader.services.image_service import ImageService, PreparedImage, image_service
from facereader.services.llm_base import LLMService
from facereader.services.prompt_service import PromptService, prompt_service
from facereader.services.settings_service import SettingsService, settings_service

logger = logging.getLogger(__name__)

# Registry endpoint key -> public route name (storage folder and dummy document)
ROUTE_NAMES: Dict[str, str] = {
    "codi_feedback": "codi-feedback",
    "compatibility": "compatibility-analysis",
    "condition": "condition-analysis",
    "fortune": "fortune-prediction",
    "personality": "personality-analysis",
    "emotion": "emotion-analysis",
}

# Endpoints answered with {success, analysis, timestamp}
PORTRAIT_ENDPOINTS = ("codi_feedback", "condition", "personality")

_IMAGE_REQUIRED = "이미지 파일이 필요합니다."
_TWO_IMAGES_REQUIRED = (
    "두 개의 이미지 파일(image1, image2) 또는 두 개의 이미지 URL(image1Url, image2Url)이 필요합니다."
)


class ImageUpload(BaseModel):
    """An uploaded file as read by the route."""

    content: bytes
    filename: str = "upload"
    field: str = "image"


class AnalysisService:
    """
    Stateless orchestrator; every collaborator can be replaced in tests.

    Error Recovery:
        Validation fails     → ValidationError (400), nothing stored
        HEIC decode fails    → ImageConversionError (422), nothing stored
        Model fails          → LLMServiceError / CircuitBreakerOpenError (503),
                               stored images removed
        Completion not JSON  → AnalysisParseError (500), stored images removed
        Completion incomplete→ fallback object, normal 200 response
    """

    def __init__(
        self,
        llm: Optional[LLMService] = None,
        files: Optional[FileService] = None,
        images: Optional[ImageService] = None,
        prompts: Optional[PromptService] = None,
        settings_store: Optional[SettingsService] = None,
    ):
        self.llm = llm or gemini_service
        self.files = files or file_service
        self.images = images or image_service
        self.prompts = prompts or prompt_service
        self.settings_store = settings_store or settings_service

    # ── Shared Steps ──────────────────────────────────────────────────────

    async def _dummy_response(self, db: AsyncSession, endpoint: str) -> Optional[Dict[str, Any]]:
        if not await self.settings_store.is_dummy_enabled(db):
            return None
        logger.info("Dummy mode on: serving canned %s response", endpoint)
        return await self.settings_store.load_dummy_data(ROUTE_NAMES[endpoint])

    def _prepare(self, upload: Optional[ImageUpload]) -> PreparedImage:
        if upload is None or not upload.content:
            raise ValidationError(message=_IMAGE_REQUIRED, field="image")
        return self.images.prepare(upload.content, filename=upload.filename, field=upload.field)

    async def _store(self, endpoint: str, prepared: Sequence[PreparedImage]) -> List[StoredFile]:
        stored: List[StoredFile] = []
        try:
            for image in prepared:
                stored.append(
                    await self.files.store(image.data, image.extension, ROUTE_NAMES[endpoint])
                )
        except Exception:
            await self._cleanup(stored)
            raise
        return stored

    async def _cleanup(self, stored: Sequence[StoredFile]) -> None:
        for item in stored:
            await self.files.cleanup_file(item.absolute_path)

    async def _run_model(
        self,
        endpoint: str,
        prepared: Sequence[PreparedImage],
        language: str,
        platform: Optional[str] = None,
        json_response: bool = True,
    ) -> NormalizationOutcome:
        """Prompt → model → normalize. Raises whatever the model or parser raises."""
        schema = get_schema(endpoint, platform)
        prompt = await self.prompts.load(endpoint, language, platform)

        raw_text = await self.llm.analyze(
            prompt,
            [image.as_vision_image() for image in prepared],
            json_response=json_response,
        )
        outcome = normalize(raw_text, schema)

        logger.info(
            "%s analysis normalized (schema=%s, fallback=%s)",
            endpoint,
            schema.name,
            outcome.used_fallback,
        )
        return outcome

    async def _store_and_run(
        self,
        endpoint: str,
        prepared: Sequence[PreparedImage],
        language: str,
        platform: Optional[str] = None,
    ) -> Tuple[List[StoredFile], NormalizationOutcome]:
        stored = await self._store(endpoint, prepared)
        try:
            outcome = await self._run_model(endpoint, prepared, language, platform)
        except Exception:
            await self._cleanup(stored)
            raise
        return stored, outcome

    # ── Endpoints ─────────────────────────────────────────────────────────

    async def analyze_portrait(
        self,
        db: AsyncSession,
        endpoint: str,
        upload: Optional[ImageUpload],
        language: str,
    ) -> Dict[str, Any]:
        """Codi feedback, condition, and personality analysis (one image)."""
        if endpoint not in PORTRAIT_ENDPOINTS:
            raise ValueError(f"'{endpoint}' is not a single-portrait analysis endpoint")

        dummy = await self._dummy_response(db, endpoint)
        if dummy is not None:
            return dummy

        prepared = self._prepare(upload)
        _, outcome = await self._store_and_run(endpoint, [prepared], language)
        return AnalysisEnvelope(analysis=outcome.data).model_dump()

    async def predict_fortune(
        self,
        db: AsyncSession,
        upload: Optional[ImageUpload],
        language: str,
        platform: str = "android",
    ) -> Dict[str, Any]:
        """Fortune reading; iOS receives the behaviour-analysis variant."""
        dummy = await self._dummy_response(db, "fortune")
        if dummy is not None:
            return dummy

        prepared = self._prepare(upload)
        stored, outcome = await self._store_and_run("fortune", [prepared], language, platform)
        return FortuneEnvelope(fortune=outcome.data, image=stored[0].public_url).model_dump()

    async def analyze_compatibility(
        self,
        db: AsyncSession,
        language: str,
        platform: Optional[str] = None,
        uploads: Sequence[Optional[ImageUpload]] = (),
        image_urls: Sequence[Optional[str]] = (),
    ) -> Dict[str, Any]:
        """
        Compatibility of two people.

        Two URLs take precedence over two files. URL images are fetched for
        the model but not stored again; the given URLs are echoed back.

        Raises:
            ValidationError: neither two files nor two URLs were supplied
        """
        dummy = await self._dummy_response(db, "compatibility")
        if dummy is not None:
            return dummy

        urls = [url for url in image_urls if url]
        files = [upload for upload in uploads if upload is not None and upload.content]

        if len(urls) == 2:
            logger.info("Compatibility analysis in URL mode")
            prepared = [
                await self.images.fetch_remote(urls[0], field="image1Url"),
                await self.images.fetch_remote(urls[1], field="image2Url"),
            ]
            outcome = await self._run_model("compatibility", prepared, language, platform)
            person1, person2 = urls
        elif len(files) == 2:
            logger.info("Compatibility analysis in upload mode")
            prepared = [self._prepare(upload) for upload in files]
            stored, outcome = await self._store_and_run("compatibility", prepared, language, platform)
            person1, person2 = (item.public_url for item in stored)
        else:
            raise ValidationError(message=_TWO_IMAGES_REQUIRED, field="image1")

        return CompatibilityEnvelope(
            compatibility=outcome.data,
            images=CompatibilityImages(person1=person1, person2=person2),
        ).model_dump()

    async def analyze_emotion(
        self,
        db: AsyncSession,
        upload: Optional[ImageUpload],
        language: str,
    ) -> Dict[str, Any]:
        """Free-form emotion analysis; the image is not stored."""
        dummy = await self._dummy_response(db, "emotion")
        if dummy is not None:
            return dummy

        if upload is None or not upload.content:
            raise ValidationError(message="이미지가 제공되지 않았습니다.", field="image")
        prepared = self.images.prepare(upload.content, filename=upload.filename, field=upload.field)

        outcome = await self._run_model("emotion", [prepared], language, json_response=False)
        return EmotionEnvelope(data=outcome.data).model_dump()


# ── Singleton Instance ────────────────────────────────────────────────────
analysis_service = AnalysisService()
