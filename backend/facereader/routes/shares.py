"""
FaceReader Backend — Compatibility Share Routes
=================================================

What:  Share a compatibility result with another user, list shares, record
       the receiver's reaction, and delete shares per side.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from facereader.database import get_db_session
from facereader.routes.dependencies import get_share_service
from facereader.schemas.common import ErrorResponse
from facereader.schemas.share import (
    InteractionUpdateRequest,
    InteractionUpdateResponse,
    ShareCreateRequest,
    ShareCreateResponse,
    ShareDeleteRequest,
    ShareDeleteResponse,
    ShareListResponse,
)
from facereader.services.share_service import ShareService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/compatibility-share", tags=["Compatibility Share"])


@router.post(
    "",
    response_model=ShareCreateResponse,
    responses={
        400: {"description": "Missing senderId, receiverId or compatibility", "model": ErrorResponse},
        409: {"description": "Already shared with this receiver (DUPLICATE_SHARE)", "model": ErrorResponse},
    },
    summary="Share a compatibility result",
)
async def create_share(
    body: ShareCreateRequest,
    db: AsyncSession = Depends(get_db_session),
    service: ShareService = Depends(get_share_service),
) -> ShareCreateResponse:
    return await service.create_share(db, body)


@router.get(
    "",
    response_model=ShareListResponse,
    summary="List received (receiverId) or sent (senderId) shares",
)
async def list_shares(
    receiver_id: Optional[str] = Query(default=None, alias="receiverId"),
    sender_id: Optional[str] = Query(default=None, alias="senderId"),
    db: AsyncSession = Depends(get_db_session),
    service: ShareService = Depends(get_share_service),
) -> ShareListResponse:
    shares = await service.list_shares(db, receiver_id=receiver_id, sender_id=sender_id)
    return ShareListResponse(shares=shares)


@router.patch(
    "",
    response_model=InteractionUpdateResponse,
    responses={404: {"description": "Unknown shareId", "model": ErrorResponse}},
    summary="Record the receiver's reaction",
)
async def update_interaction(
    body: InteractionUpdateRequest,
    db: AsyncSession = Depends(get_db_session),
    service: ShareService = Depends(get_share_service),
) -> InteractionUpdateResponse:
    return await service.update_interaction(db, body.share_id, body.interaction)


@router.post(
    "/delete",
    response_model=ShareDeleteResponse,
    responses={404: {"description": "Unknown shareId", "model": ErrorResponse}},
    summary="Delete a share for the sender or the receiver",
)
async def delete_share(
    body: ShareDeleteRequest,
    db: AsyncSession = Depends(get_db_session),
    service: ShareService = Depends(get_share_service),
) -> ShareDeleteResponse:
    return await service.delete_share(db, body.share_id, body.delete_type)
