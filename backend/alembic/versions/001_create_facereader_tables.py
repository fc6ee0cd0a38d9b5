"""Create app_settings and compatibility_shares tables

Revision ID: 001
Revises: None
Create Date: 2024-06-01 00:00:00.000000+00:00

What:  Initial schema: the key/value settings table (dummy-mode switch) and
       the shared compatibility results.
Rollback: downgrade() drops both tables (all shares are lost).
"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "app_settings",
        sa.Column("key", sa.String(100), nullable=False),
        sa.Column(
            "data",
            postgresql.JSONB(),
            nullable=False,
            server_default=sa.text("'{}'::jsonb"),
        ),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column(
            "updated_at",
            sa.TIMESTAMP(timezone=True),
            nullable=False,
            server_default=sa.text("CURRENT_TIMESTAMP"),
        ),
        sa.PrimaryKeyConstraint("key"),
    )

    op.create_table(
        "compatibility_shares",
        sa.Column(
            "id",
            postgresql.UUID(as_uuid=True),
            server_default=sa.text("gen_random_uuid()"),
            nullable=False,
        ),
        sa.Column("sender_id", sa.String(255), nullable=False),
        sa.Column("receiver_id", sa.String(255), nullable=False),
        sa.Column("compatibility_result", postgresql.JSONB(), nullable=False),
        sa.Column("interaction", sa.String(50), nullable=True),
        sa.Column("sender_delete", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("receiver_delete", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column(
            "created_at",
            sa.TIMESTAMP(timezone=True),
            nullable=False,
            server_default=sa.text("CURRENT_TIMESTAMP"),
        ),
        sa.Column("updated_at", sa.TIMESTAMP(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("sender_id", "receiver_id", name="uq_compatibility_shares_pair"),
        sa.CheckConstraint(
            "interaction IS NULL OR interaction IN "
            "('interested', 'notInterested', 'chatRequest', 'chatDenied', 'chatAccepted', 'chatCompleted')",
            name="ck_compatibility_shares_interaction",
        ),
    )

    # Received/sent lists: filter by user, newest first
    op.create_index(
        "idx_compatibility_shares_receiver",
        "compatibility_shares",
        ["receiver_id", sa.text("created_at DESC")],
    )
    op.create_index(
        "idx_compatibility_shares_sender",
        "compatibility_shares",
        ["sender_id", sa.text("created_at DESC")],
    )


def downgrade() -> None:
    op.drop_index("idx_compatibility_shares_sender", table_name="compatibility_shares")
    op.drop_index("idx_compatibility_shares_receiver", table_name="compatibility_shares")
    op.drop_table("compatibility_shares")
    op.drop_table("app_settings")
