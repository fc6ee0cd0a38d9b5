"""
FaceReader Backend — Settings Service Tests (Dummy Mode)
==========================================================

What we test:
    ✅ Missing setting reads as off
    ✅ Only a stored `true` turns dummy mode on
    ✅ Database errors read as off
    ✅ Upsert creates or updates the row
    ✅ Dummy documents: verbatim, or the error envelope
"""

import json
from pathlib import Path
from unittest.mock import MagicMock

import pytest
from sqlalchemy.exc import OperationalError

from facereader.exceptions import DatabaseError
from facereader.models.app_setting import AppSetting
from facereader.services.file_service import FileService
from facereader.services.settings_service import SettingsService


def _row_result(row):
    result = MagicMock()
    result.scalar_one_or_none.return_value = row
    return result


@pytest.fixture
def service(temp_storage):
    return SettingsService(files=FileService(storage_root=temp_storage))


class TestDummySwitch:

    @pytest.mark.asyncio
    async def test_no_row_means_off(self, service, mock_db_session):
        mock_db_session.execute.return_value = _row_result(None)
        assert (await service.get_dummy_settings(mock_db_session)).use_dummy is False
        assert await service.is_dummy_enabled(mock_db_session) is False

    @pytest.mark.asyncio
    @pytest.mark.parametrize("stored, expected", [(True, True), (False, False), ("true", False), (1, False)])
    async def test_only_boolean_true_enables(self, service, mock_db_session, stored, expected):
        row = AppSetting(key="use_dummy", data={"use_dummy": stored})
        mock_db_session.execute.return_value = _row_result(row)
        assert await service.is_dummy_enabled(mock_db_session) is expected

    @pytest.mark.asyncio
    @pytest.mark.parametrize("stored", [[True], "true", True])
    async def test_non_object_row_means_off(self, service, mock_db_session, stored):
        row = AppSetting(key="use_dummy", data=stored)
        mock_db_session.execute.return_value = _row_result(row)
        assert (await service.get_dummy_settings(mock_db_session)).use_dummy is False
        assert await service.is_dummy_enabled(mock_db_session) is False

    @pytest.mark.asyncio
    async def test_read_error_is_database_error(self, service, mock_db_session):
        mock_db_session.execute.side_effect = OperationalError("SELECT", {}, Exception("down"))
        with pytest.raises(DatabaseError, match="설정 조회 실패"):
            await service.get_dummy_settings(mock_db_session)

    @pytest.mark.asyncio
    async def test_read_error_means_off(self, service, mock_db_session):
        mock_db_session.execute.side_effect = OperationalError("SELECT", {}, Exception("down"))
        assert await service.is_dummy_enabled(mock_db_session) is False

    @pytest.mark.asyncio
    async def test_set_creates_row(self, service, mock_db_session):
        mock_db_session.execute.return_value = _row_result(None)

        result = await service.set_dummy(mock_db_session, True)

        assert result.use_dummy is True
        added = mock_db_session.add.call_args[0][0]
        assert added.key == "use_dummy"
        assert added.data == {"use_dummy": True}
        mock_db_session.flush.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_set_updates_existing_row(self, service, mock_db_session):
        row = AppSetting(key="use_dummy", data={"use_dummy": True})
        mock_db_session.execute.return_value = _row_result(row)

        await service.set_dummy(mock_db_session, False)

        assert row.data == {"use_dummy": False}
        mock_db_session.add.assert_not_called()

    @pytest.mark.asyncio
    async def test_set_error_is_database_error(self, service, mock_db_session):
        mock_db_session.execute.return_value = _row_result(None)
        mock_db_session.flush.side_effect = OperationalError("UPDATE", {}, Exception("down"))
        with pytest.raises(DatabaseError, match="설정 업데이트 실패"):
            await service.set_dummy(mock_db_session, True)


class TestDummyDocuments:

    @pytest.mark.asyncio
    async def test_document_returned_verbatim(self, service, temp_storage):
        doc = {"success": True, "analysis": {"mood_type": "시크"}, "timestamp": "2024-01-01T00:00:00.000Z"}
        folder = Path(temp_storage) / "dummy-data"
        folder.mkdir()
        (folder / "codi-feedback.json").write_text(json.dumps(doc, ensure_ascii=False), encoding="utf-8")

        assert await service.load_dummy_data("codi-feedback") == doc

    @pytest.mark.asyncio
    async def test_missing_document_gives_error_envelope(self, service):
        assert await service.load_dummy_data("fortune-prediction") == {
            "success": False,
            "error": "더미 데이터를 불러올 수 없습니다.",
        }

    @pytest.mark.asyncio
    async def test_non_object_document_gives_error_envelope(self, service, temp_storage):
        folder = Path(temp_storage) / "dummy-data"
        folder.mkdir()
        (folder / "emotion-analysis.json").write_text("[1, 2]", encoding="utf-8")

        result = await service.load_dummy_data("emotion-analysis")
        assert result["success"] is False
