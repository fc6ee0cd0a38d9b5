# Models package init
"""
FaceReader Backend — ORM Models

Importing this package registers every table on Base.metadata (Alembic
autogenerate relies on it).
"""

from facereader.models.app_setting import AppSetting
from facereader.models.compatibility_share import ALLOWED_INTERACTIONS, CompatibilityShare

__all__ = ["ALLOWED_INTERACTIONS", "AppSetting", "CompatibilityShare"]
