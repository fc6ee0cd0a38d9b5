"""
FaceReader Backend — Compatibility Share Service
==================================================

What:  Create, list, react to, and delete shared compatibility results.
Who:   Called by routes/shares.py.

Deletion model:
    Each side deletes independently (soft delete via sender_delete /
    receiver_delete). The row disappears from that side's list at once and
    is removed from the table when both sides have deleted it.
"""

import logging
import uuid
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from facereader.config import settings
from facereader.exceptions import ConflictError, DatabaseError, NotFoundError, ValidationError
from facereader.models.compatibility_share import CompatibilityShare
from facereader.schemas.share import (
    InteractionUpdateResponse,
    ShareCreateRequest,
    ShareCreateResponse,
    ShareDeleteResponse,
    ShareItem,
)

logger = logging.getLogger(__name__)

DUPLICATE_SHARE = "DUPLICATE_SHARE"
_DUPLICATE_MESSAGE = "이미 공유한 사용자입니다."


class ShareService:
    """
    Stateless; every method receives the request's session.

    Database errors are wrapped in DatabaseError; NotFoundError, ConflictError
    and ValidationError propagate as-is.
    """

    async def create_share(self, db: AsyncSession, request: ShareCreateRequest) -> ShareCreateResponse:
        """
        Store a compatibility result for sender → receiver.

        Raises:
            ConflictError (code DUPLICATE_SHARE): the pair already has a share
        """
        try:
            existing = await db.execute(
                select(CompatibilityShare.id).where(
                    CompatibilityShare.sender_id == request.sender_id,
                    CompatibilityShare.receiver_id == request.receiver_id,
                )
            )
            if existing.scalar_one_or_none() is not None:
                logger.info(
                    "Duplicate share rejected: sender=%s receiver=%s",
                    request.sender_id,
                    request.receiver_id,
                )
                raise ConflictError(message=_DUPLICATE_MESSAGE, code=DUPLICATE_SHARE)

            share = CompatibilityShare(
                id=uuid.uuid4(),
                sender_id=request.sender_id,
                receiver_id=request.receiver_id,
                compatibility_result=request.compatibility,
            )
            db.add(share)
            await db.flush()
        except IntegrityError as e:
            # Unique constraint hit by a concurrent create for the same pair
            raise ConflictError(message=_DUPLICATE_MESSAGE, code=DUPLICATE_SHARE) from e
        except SQLAlchemyError as e:
            logger.error("Failed to create share: %s", str(e), exc_info=True)
            raise DatabaseError(message="궁합 결과 저장 중 오류가 발생했습니다.") from e

        logger.info("Compatibility share %s created", share.id)
        return ShareCreateResponse(
            share_id=share.id,
            share_url=f"{settings.share_base_url}/compatibility-share",
        )

    async def list_shares(
        self,
        db: AsyncSession,
        receiver_id: Optional[str] = None,
        sender_id: Optional[str] = None,
    ) -> List[ShareItem]:
        """
        Shares received by `receiver_id`, or else sent by `sender_id`,
        newest first, excluding rows that side has deleted.

        Raises:
            ValidationError: neither ID given
        """
        if not receiver_id and not sender_id:
            raise ValidationError(message="receiverId 또는 senderId가 필요합니다.", field="receiverId")

        query = select(CompatibilityShare).order_by(CompatibilityShare.created_at.desc())
        if receiver_id:
            query = query.where(
                CompatibilityShare.receiver_id == receiver_id,
                CompatibilityShare.receiver_delete.is_(False),
            )
        else:
            query = query.where(
                CompatibilityShare.sender_id == sender_id,
                CompatibilityShare.sender_delete.is_(False),
            )

        try:
            result = await db.execute(query)
            shares = list(result.scalars().all())
        except SQLAlchemyError as e:
            logger.error("Failed to list shares: %s", str(e), exc_info=True)
            raise DatabaseError(message="궁합 결과를 조회할 수 없습니다.") from e

        return [ShareItem.model_validate(share) for share in shares]

    async def _get(self, db: AsyncSession, share_id: uuid.UUID) -> CompatibilityShare:
        share = await db.get(CompatibilityShare, share_id)
        if share is None:
            raise NotFoundError(resource="compatibility share", resource_id=str(share_id))
        return share

    async def update_interaction(
        self, db: AsyncSession, share_id: uuid.UUID, interaction: str
    ) -> InteractionUpdateResponse:
        """Record the receiver's reaction. `interaction` is pre-validated by the schema."""
        try:
            share = await self._get(db, share_id)
            share.interaction = interaction
            share.updated_at = datetime.now(timezone.utc)
            await db.flush()
        except SQLAlchemyError as e:
            logger.error("Failed to update interaction on %s: %s", share_id, str(e), exc_info=True)
            raise DatabaseError(message="상호작용 상태 업데이트 중 오류가 발생했습니다.") from e

        logger.info("Share %s interaction set to %s", share_id, interaction)
        return InteractionUpdateResponse(
            receiver_id=share.receiver_id,
            sender_id=share.sender_id,
        )

    async def delete_share(
        self, db: AsyncSession, share_id: uuid.UUID, delete_type: str
    ) -> ShareDeleteResponse:
        """
        Soft-delete for one side; hard-delete once both sides have deleted.

        Raises:
            NotFoundError: no such share
        """
        try:
            share = await self._get(db, share_id)
            if delete_type == "sender":
                share.sender_delete = True
            else:
                share.receiver_delete = True

            if share.sender_delete and share.receiver_delete:
                await db.delete(share)
                await db.flush()
                logger.info("Share %s deleted by both sides, row removed", share_id)
                return ShareDeleteResponse(message="레코드가 완전히 삭제되었습니다.", action="deleted")

            await db.flush()
        except SQLAlchemyError as e:
            logger.error("Failed to delete share %s: %s", share_id, str(e), exc_info=True)
            raise DatabaseError(message="삭제 처리 중 오류가 발생했습니다.") from e

        side = "보낸 사람" if delete_type == "sender" else "받은 사람"
        logger.info("Share %s hidden for %s", share_id, delete_type)
        return ShareDeleteResponse(message=f"{side} 삭제 처리 완료", action="updated")


# ── Singleton Instance ────────────────────────────────────────────────────
share_service = ShareService()
