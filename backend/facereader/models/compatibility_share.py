"""
FaceReader Backend — Compatibility Share Model
================================================

What:  ORM model for the `compatibility_shares` table.
Why:   A user can send a compatibility result to another user, who can then
       react to it (interested, chat request, ...).

Lifecycle:
    1. Created by the sender (one row per sender/receiver pair)
    2. Receiver updates `interaction`
    3. Either side hides the row by setting its *_delete flag
    4. Once both flags are set the row is deleted

Query Patterns:
    - Received list: WHERE receiver_id = :id AND receiver_delete = false
    - Sent list:     WHERE sender_id = :id AND sender_delete = false
    Both ordered by created_at DESC.
"""

import uuid
from datetime import datetime, timezone
from typing import Any, Optional

from sqlalchemy import Boolean, CheckConstraint, Index, String, UniqueConstraint, text
from sqlalchemy.dialects.postgresql import JSONB, TIMESTAMP, UUID
from sqlalchemy.orm import Mapped, mapped_column

from facereader.database import Base

ALLOWED_INTERACTIONS = (
    "interested",
    "notInterested",
    "chatRequest",
    "chatDenied",
    "chatAccepted",
    "chatCompleted",
)


class CompatibilityShare(Base):
    """A compatibility result shared from one user to another."""

    __tablename__ = "compatibility_shares"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
        server_default=text("gen_random_uuid()"),
    )

    # User IDs are issued by the client app's auth provider (opaque strings)
    sender_id: Mapped[str] = mapped_column(String(255), nullable=False)
    receiver_id: Mapped[str] = mapped_column(String(255), nullable=False)

    compatibility_result: Mapped[dict[str, Any]] = mapped_column(JSONB, nullable=False)

    # One of ALLOWED_INTERACTIONS, NULL until the receiver reacts
    interaction: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)

    sender_delete: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=text("false")
    )
    receiver_delete: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=text("false")
    )

    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        server_default=text("CURRENT_TIMESTAMP"),
    )
    updated_at: Mapped[Optional[datetime]] = mapped_column(
        TIMESTAMP(timezone=True),
        nullable=True,
    )

    __table_args__ = (
        UniqueConstraint("sender_id", "receiver_id", name="uq_compatibility_shares_pair"),
        CheckConstraint(
            "interaction IS NULL OR interaction IN ("
            + ", ".join(f"'{value}'" for value in ALLOWED_INTERACTIONS)
            + ")",
            name="ck_compatibility_shares_interaction",
        ),
        Index("idx_compatibility_shares_receiver", "receiver_id", created_at.desc()),
        Index("idx_compatibility_shares_sender", "sender_id", created_at.desc()),
    )

    def __repr__(self) -> str:
        return (
            f"<CompatibilityShare(id={self.id}, sender='{self.sender_id}', "
            f"receiver='{self.receiver_id}', interaction={self.interaction!r})>"
        )
