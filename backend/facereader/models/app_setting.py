"""
FaceReader Backend — Application Setting Model
================================================

What:  Key/value rows in `app_settings`; the value is a JSON document.
Who:   SettingsService (dummy-mode switch, key "use_dummy").
"""

from datetime import datetime, timezone
from typing import Any, Optional

from sqlalchemy import String, Text, text
from sqlalchemy.dialects.postgresql import JSONB, TIMESTAMP
from sqlalchemy.orm import Mapped, mapped_column

from facereader.database import Base


class AppSetting(Base):
    """One named setting. `data` holds e.g. {"use_dummy": true}."""

    __tablename__ = "app_settings"

    key: Mapped[str] = mapped_column(String(100), primary_key=True)

    data: Mapped[dict[str, Any]] = mapped_column(
        JSONB,
        nullable=False,
        default=dict,
        server_default=text("'{}'::jsonb"),
    )

    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    updated_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
        server_default=text("CURRENT_TIMESTAMP"),
    )

    def __repr__(self) -> str:
        return f"<AppSetting(key='{self.key}', data={self.data})>"
