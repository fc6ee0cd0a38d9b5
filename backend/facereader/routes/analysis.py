"""
FaceReader Backend — Analysis Route Handlers
==============================================

What:  POST endpoints for the six face/outfit analyses, plus a GET on each
       path that describes the endpoint.
How:   Multipart form in, AnalysisService does the work, the envelope dict is
       returned as-is (dummy mode returns stored documents of any shape, so
       no response_model is enforced).

Request Flow:
    1. Read the multipart fields (files are read fully into memory; size is
       bounded by FileService validation)
    2. Resolve the response language from Accept-Language
    3. Delegate to AnalysisService
    4. Errors propagate to the global exception handlers
"""

import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from facereader.database import get_db_session
from facereader.routes.dependencies import get_analysis_service, get_language, read_upload
from facereader.schemas.analysis import (
    AnalysisEnvelope,
    CompatibilityEnvelope,
    EmotionEnvelope,
    FortuneEnvelope,
)
from facereader.schemas.common import EndpointInfo, ErrorResponse
from facereader.services.analysis_service import AnalysisService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Analysis"])

_ERRORS = {
    400: {"description": "Missing or invalid image", "model": ErrorResponse},
    422: {"description": "HEIC image could not be converted", "model": ErrorResponse},
    500: {"description": "Model output was not valid JSON", "model": ErrorResponse},
    503: {"description": "AI service unavailable", "model": ErrorResponse},
}


def _responses(model) -> Dict[Any, Any]:
    return {200: {"model": model}, **_ERRORS}


# ══════════════════════════════════════════════════════════════════════════
# Single-portrait analyses
# ══════════════════════════════════════════════════════════════════════════

@router.post(
    "/codi-feedback",
    responses=_responses(AnalysisEnvelope),
    summary="Outfit (codi) feedback",
)
async def codi_feedback(
    image: Optional[UploadFile] = File(default=None, description="Full-body or outfit photo"),
    language: str = Depends(get_language),
    db: AsyncSession = Depends(get_db_session),
    service: AnalysisService = Depends(get_analysis_service),
) -> Dict[str, Any]:
    upload = await read_upload(image, "image")
    return await service.analyze_portrait(db, "codi_feedback", upload, language)


@router.post(
    "/condition-analysis",
    responses=_responses(AnalysisEnvelope),
    summary="Today's condition and energy from a face photo",
)
async def condition_analysis(
    image: Optional[UploadFile] = File(default=None, description="Face photo"),
    language: str = Depends(get_language),
    db: AsyncSession = Depends(get_db_session),
    service: AnalysisService = Depends(get_analysis_service),
) -> Dict[str, Any]:
    upload = await read_upload(image, "image")
    return await service.analyze_portrait(db, "condition", upload, language)


@router.post(
    "/personality-analysis",
    responses=_responses(AnalysisEnvelope),
    summary="Character personality reading from a face photo",
)
async def personality_analysis(
    image: Optional[UploadFile] = File(default=None, description="Face photo"),
    language: str = Depends(get_language),
    db: AsyncSession = Depends(get_db_session),
    service: AnalysisService = Depends(get_analysis_service),
) -> Dict[str, Any]:
    upload = await read_upload(image, "image")
    return await service.analyze_portrait(db, "personality", upload, language)


@router.post(
    "/fortune-prediction",
    responses=_responses(FortuneEnvelope),
    summary="Fortune reading (behaviour analysis on iOS)",
)
async def fortune_prediction(
    image: Optional[UploadFile] = File(default=None, description="Face photo"),
    platform: str = Form(default="android", description="Client platform: ios or android"),
    language: str = Depends(get_language),
    db: AsyncSession = Depends(get_db_session),
    service: AnalysisService = Depends(get_analysis_service),
) -> Dict[str, Any]:
    upload = await read_upload(image, "image")
    return await service.predict_fortune(db, upload, language, platform=platform)


@router.post(
    "/emotion-analysis",
    responses=_responses(EmotionEnvelope),
    summary="Free-form emotion analysis",
)
async def emotion_analysis(
    image: Optional[UploadFile] = File(default=None, description="Face photo"),
    language: str = Depends(get_language),
    db: AsyncSession = Depends(get_db_session),
    service: AnalysisService = Depends(get_analysis_service),
) -> Dict[str, Any]:
    upload = await read_upload(image, "image")
    return await service.analyze_emotion(db, upload, language)


# ══════════════════════════════════════════════════════════════════════════
# Two-person compatibility
# ══════════════════════════════════════════════════════════════════════════

@router.post(
    "/compatibility-analysis",
    responses=_responses(CompatibilityEnvelope),
    summary="Compatibility between two people",
    description=(
        "Send either two files (image1, image2) or two previously stored image "
        "URLs (image1Url, image2Url). URLs take precedence when both are sent."
    ),
)
async def compatibility_analysis(
    image1: Optional[UploadFile] = File(default=None),
    image2: Optional[UploadFile] = File(default=None),
    image1_url: Optional[str] = Form(default=None, alias="image1Url"),
    image2_url: Optional[str] = Form(default=None, alias="image2Url"),
    platform: Optional[str] = Form(default=None),
    language: str = Depends(get_language),
    db: AsyncSession = Depends(get_db_session),
    service: AnalysisService = Depends(get_analysis_service),
) -> Dict[str, Any]:
    uploads = (await read_upload(image1, "image1"), await read_upload(image2, "image2"))
    return await service.analyze_compatibility(
        db,
        language,
        platform=platform,
        uploads=uploads,
        image_urls=(image1_url, image2_url),
    )


# ══════════════════════════════════════════════════════════════════════════
# Endpoint descriptions (GET)
# ══════════════════════════════════════════════════════════════════════════

_SINGLE_IMAGE_USAGE = {"method": "POST", "content_type": "multipart/form-data", "fields": "image"}

_ENDPOINT_INFO = {
    "/codi-feedback": EndpointInfo(
        message="코디 피드백 API입니다. POST 요청으로 이미지를 업로드해주세요.",
        usage=_SINGLE_IMAGE_USAGE,
        features=["무드 타입 분석", "컬러 팔레트 추천", "액세서리 추천", "스타일 개선 팁"],
    ),
    "/condition-analysis": EndpointInfo(
        message="컨디션 분석 API입니다. POST 요청으로 얼굴 사진을 업로드해주세요.",
        usage=_SINGLE_IMAGE_USAGE,
        features=["에너지 점수", "기분 및 집중도 분석", "컨디션 관리 팁", "추천 활동"],
    ),
    "/personality-analysis": EndpointInfo(
        message="성격 분석 API입니다. POST 요청으로 얼굴 사진을 업로드해주세요.",
        usage=_SINGLE_IMAGE_USAGE,
        features=["성격 특성", "강점과 약점", "소통 스타일", "매력 포인트"],
    ),
    "/fortune-prediction": EndpointInfo(
        message="운세 예측 API입니다. POST 요청으로 얼굴 사진을 업로드해주세요.",
        usage={**_SINGLE_IMAGE_USAGE, "fields": "image, platform (ios | android)"},
        features=["재물운", "건강운", "연애운", "직장운", "iOS: 행동 경향 분석"],
    ),
    "/emotion-analysis": EndpointInfo(
        message="감정 분석 API입니다. POST 요청으로 얼굴 사진을 업로드해주세요.",
        usage=_SINGLE_IMAGE_USAGE,
        features=["표정 기반 감정 분석"],
    ),
    "/compatibility-analysis": EndpointInfo(
        message="궁합 분석 API입니다. POST 요청으로 두 사람의 사진을 업로드해주세요.",
        usage={
            "method": "POST",
            "content_type": "multipart/form-data",
            "fields": "image1 + image2, or image1Url + image2Url; platform",
        },
        features=["종합 궁합 점수", "성격 궁합", "감정 궁합", "소통 궁합", "장기적 전망"],
    ),
}


def _info_route(path: str, info: EndpointInfo) -> None:
    async def describe() -> EndpointInfo:
        return info

    router.add_api_route(
        path,
        describe,
        methods=["GET"],
        response_model=EndpointInfo,
        summary=f"Describe {path}",
        name=f"describe_{path.strip('/').replace('-', '_')}",
    )


for _path, _info in _ENDPOINT_INFO.items():
    _info_route(_path, _info)
