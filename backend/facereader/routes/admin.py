"""
FaceReader Backend — Admin Routes
===================================

What:  Read and toggle dummy mode (canned responses instead of model calls).
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from facereader.database import get_db_session
from facereader.routes.dependencies import get_settings_service
from facereader.schemas.settings import DummySettingsResponse, DummySettingsUpdate
from facereader.services.settings_service import SettingsService

router = APIRouter(prefix="/api/admin", tags=["Admin"])


@router.get("/dummy-settings", response_model=DummySettingsResponse)
async def get_dummy_settings(
    db: AsyncSession = Depends(get_db_session),
    service: SettingsService = Depends(get_settings_service),
) -> DummySettingsResponse:
    return DummySettingsResponse(data=await service.get_dummy_settings(db))


@router.post("/dummy-settings", response_model=DummySettingsResponse)
async def update_dummy_settings(
    body: DummySettingsUpdate,
    db: AsyncSession = Depends(get_db_session),
    service: SettingsService = Depends(get_settings_service),
) -> DummySettingsResponse:
    updated = await service.set_dummy(db, body.use_dummy)
    state = "활성화" if updated.use_dummy else "비활성화"
    return DummySettingsResponse(
        message=f"더미 데이터 사용이 {state}되었습니다.",
        data=updated,
    )
