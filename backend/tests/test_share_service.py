"""
FaceReader Backend — Share Service Unit Tests
================================================

What:  ShareService logic with a mocked AsyncSession.
How:   The session's execute/get return canned rows; SQL itself is not run.

What we test:
    ✅ Create: new pair stored, duplicate pair → DUPLICATE_SHARE conflict
    ✅ List: requires an ID, maps rows to ShareItem
    ✅ Interaction update and NotFoundError
    ✅ Two-sided delete (soft, then hard)
"""

import uuid
from datetime import datetime, timezone
from unittest.mock import MagicMock

import pytest
from sqlalchemy.exc import IntegrityError, OperationalError

from facereader.exceptions import ConflictError, DatabaseError, NotFoundError, ValidationError
from facereader.models.compatibility_share import CompatibilityShare
from facereader.schemas.share import ShareCreateRequest
from facereader.services.share_service import DUPLICATE_SHARE, ShareService


def _share(**overrides):
    values = dict(
        id=uuid.uuid4(),
        sender_id="user-a",
        receiver_id="user-b",
        compatibility_result={"overall_score": 88},
        interaction=None,
        sender_delete=False,
        receiver_delete=False,
        created_at=datetime(2024, 1, 15, 12, 0, tzinfo=timezone.utc),
        updated_at=None,
    )
    values.update(overrides)
    return CompatibilityShare(**values)


def _scalar_result(value):
    result = MagicMock()
    result.scalar_one_or_none.return_value = value
    return result


def _request():
    return ShareCreateRequest(
        senderId="user-a",
        receiverId="user-b",
        compatibility={"overall_score": 88},
    )


@pytest.fixture
def service():
    return ShareService()


class TestCreateShare:

    @pytest.mark.asyncio
    async def test_new_pair_is_stored(self, service, mock_db_session):
        mock_db_session.execute.return_value = _scalar_result(None)

        response = await service.create_share(mock_db_session, _request())

        added = mock_db_session.add.call_args[0][0]
        assert added.sender_id == "user-a"
        assert added.compatibility_result == {"overall_score": 88}
        assert response.share_id == added.id
        assert response.share_url.endswith("/compatibility-share")

        body = response.model_dump(by_alias=True)
        assert set(body) == {"success", "shareId", "message", "shareUrl"}

    @pytest.mark.asyncio
    async def test_existing_pair_conflicts(self, service, mock_db_session):
        mock_db_session.execute.return_value = _scalar_result(uuid.uuid4())

        with pytest.raises(ConflictError) as exc_info:
            await service.create_share(mock_db_session, _request())

        assert exc_info.value.code == DUPLICATE_SHARE
        mock_db_session.add.assert_not_called()

    @pytest.mark.asyncio
    async def test_unique_violation_on_flush_conflicts(self, service, mock_db_session):
        mock_db_session.execute.return_value = _scalar_result(None)
        mock_db_session.flush.side_effect = IntegrityError("INSERT", {}, Exception("uq"))

        with pytest.raises(ConflictError) as exc_info:
            await service.create_share(mock_db_session, _request())
        assert exc_info.value.code == DUPLICATE_SHARE

    @pytest.mark.asyncio
    async def test_other_db_error_is_database_error(self, service, mock_db_session):
        mock_db_session.execute.side_effect = OperationalError("SELECT", {}, Exception("down"))

        with pytest.raises(DatabaseError):
            await service.create_share(mock_db_session, _request())


class TestListShares:

    @pytest.mark.asyncio
    async def test_requires_an_id(self, service, mock_db_session):
        with pytest.raises(ValidationError, match="receiverId 또는 senderId"):
            await service.list_shares(mock_db_session)

    @pytest.mark.asyncio
    async def test_rows_mapped_to_items(self, service, mock_db_session):
        rows = [_share(), _share(sender_id="user-c", interaction="interested")]
        result = MagicMock()
        result.scalars.return_value.all.return_value = rows
        mock_db_session.execute.return_value = result

        items = await service.list_shares(mock_db_session, receiver_id="user-b")

        assert [item.sender_id for item in items] == ["user-a", "user-c"]
        assert items[1].interaction == "interested"
        assert items[0].compatibility_result == {"overall_score": 88}

    @pytest.mark.asyncio
    async def test_receiver_query_filters_deleted_rows(self, service, mock_db_session):
        result = MagicMock()
        result.scalars.return_value.all.return_value = []
        mock_db_session.execute.return_value = result

        await service.list_shares(mock_db_session, receiver_id="user-b", sender_id="user-a")

        sql = str(mock_db_session.execute.call_args[0][0])
        where_clause = sql.split("WHERE", 1)[1]
        assert "receiver_delete" in where_clause
        assert "sender_delete" not in where_clause
        assert "ORDER BY compatibility_shares.created_at DESC" in where_clause


class TestUpdateInteraction:

    @pytest.mark.asyncio
    async def test_interaction_saved(self, service, mock_db_session):
        share = _share()
        mock_db_session.get.return_value = share

        response = await service.update_interaction(mock_db_session, share.id, "chatRequest")

        assert share.interaction == "chatRequest"
        assert share.updated_at is not None
        assert response.model_dump(by_alias=True)["receiverId"] == "user-b"

    @pytest.mark.asyncio
    async def test_unknown_share(self, service, mock_db_session):
        mock_db_session.get.return_value = None
        with pytest.raises(NotFoundError):
            await service.update_interaction(mock_db_session, uuid.uuid4(), "interested")


class TestDeleteShare:

    @pytest.mark.asyncio
    async def test_first_side_soft_deletes(self, service, mock_db_session):
        share = _share()
        mock_db_session.get.return_value = share

        response = await service.delete_share(mock_db_session, share.id, "sender")

        assert share.sender_delete is True
        assert response.action == "updated"
        assert response.message == "보낸 사람 삭제 처리 완료"
        mock_db_session.delete.assert_not_called()

    @pytest.mark.asyncio
    async def test_second_side_removes_row(self, service, mock_db_session):
        share = _share(sender_delete=True)
        mock_db_session.get.return_value = share

        response = await service.delete_share(mock_db_session, share.id, "receiver")

        assert response.action == "deleted"
        mock_db_session.delete.assert_awaited_once_with(share)

    @pytest.mark.asyncio
    async def test_unknown_share(self, service, mock_db_session):
        mock_db_session.get.return_value = None
        with pytest.raises(NotFoundError):
            await service.delete_share(mock_db_session, uuid.uuid4(), "receiver")
