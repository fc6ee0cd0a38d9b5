"""
FaceReader Backend — Settings Service (Dummy Mode)
====================================================

What:  Reads and writes the "use_dummy" switch and loads the canned responses
       served while it is on.
Why:   Dummy mode lets the apps be demoed and tested without spending model
       quota. Each analysis endpoint has one stored document,
       dummy-data/<route-name>.json, returned verbatim.

Failure policy:
    - Reading the switch never fails a request: any database error means
      "dummy mode off" and the real analysis runs.
    - A missing or broken dummy document produces the error envelope
      {"success": false, "error": ...} instead of an exception.
"""

import logging
from typing import Any, Dict, Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from facereader.exceptions import DatabaseError, FaceReaderError
from facereader.models.app_setting import AppSetting
from facereader.schemas.settings import DummySettings
from facereader.services.file_service import FileService, file_service

logger = logging.getLogger(__name__)

DUMMY_SETTING_KEY = "use_dummy"
DUMMY_SETTING_DESCRIPTION = "AI 분석 대신 더미 데이터 사용 여부 설정"
DUMMY_DATA_PREFIX = "dummy-data"
DUMMY_DATA_UNAVAILABLE = "더미 데이터를 불러올 수 없습니다."


class SettingsService:
    def __init__(self, files: Optional[FileService] = None):
        self.files = files or file_service

    async def _get_row(self, db: AsyncSession) -> Optional[AppSetting]:
        result = await db.execute(select(AppSetting).where(AppSetting.key == DUMMY_SETTING_KEY))
        return result.scalar_one_or_none()

    async def get_dummy_settings(self, db: AsyncSession) -> DummySettings:
        """
        Current dummy-mode setting ({"use_dummy": false} when never set).

        Raises:
            DatabaseError if the settings table cannot be read.
        """
        try:
            row = await self._get_row(db)
        except SQLAlchemyError as e:
            logger.error("Failed to read dummy settings: %s", str(e))
            raise DatabaseError(message="설정 조회 실패", context={"error": str(e)}) from e

        if row is None:
            return DummySettings()
        if not isinstance(row.data, dict):
            logger.warning("Dummy settings row is not an object, treating as off")
            return DummySettings()
        return DummySettings(use_dummy=row.data.get(DUMMY_SETTING_KEY) is True)

    async def is_dummy_enabled(self, db: AsyncSession) -> bool:
        """True only when the stored setting is exactly `true`; errors read as off."""
        try:
            settings_ = await self.get_dummy_settings(db)
        except DatabaseError:
            logger.warning("Dummy settings unavailable, defaulting to live analysis")
            return False
        return settings_.use_dummy

    async def set_dummy(self, db: AsyncSession, use_dummy: bool) -> DummySettings:
        """
        Upsert the dummy-mode switch.

        Raises:
            DatabaseError if the write fails.
        """
        try:
            row = await self._get_row(db)
            if row is None:
                row = AppSetting(key=DUMMY_SETTING_KEY, description=DUMMY_SETTING_DESCRIPTION)
                db.add(row)
            row.data = {DUMMY_SETTING_KEY: use_dummy}
            await db.flush()
        except SQLAlchemyError as e:
            logger.error("Failed to update dummy settings: %s", str(e))
            raise DatabaseError(message="설정 업데이트 실패", context={"error": str(e)}) from e

        logger.info("Dummy mode %s", "enabled" if use_dummy else "disabled")
        return DummySettings(use_dummy=use_dummy)

    async def load_dummy_data(self, name: str) -> Dict[str, Any]:
        """
        Load dummy-data/<name>.json.

        Returns the stored document, or the error envelope when it cannot be read.
        """
        relative_path = f"{DUMMY_DATA_PREFIX}/{name}.json"
        try:
            document = await self.files.read_json(relative_path)
        except FaceReaderError as e:
            logger.error("Failed to load dummy data %s: %s", relative_path, e.message)
            return {"success": False, "error": DUMMY_DATA_UNAVAILABLE}

        if not isinstance(document, dict):
            logger.error("Dummy data %s is not a JSON object", relative_path)
            return {"success": False, "error": DUMMY_DATA_UNAVAILABLE}
        return document


# ── Singleton Instance ────────────────────────────────────────────────────
settings_service = SettingsService()
