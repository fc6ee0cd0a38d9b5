"""
FaceReader Backend — Admin Settings Schemas
=============================================

What:  Request/response models for /api/admin/dummy-settings.
"""

from typing import Optional

from pydantic import BaseModel, StrictBool


class DummySettings(BaseModel):
    use_dummy: StrictBool = False


class DummySettingsUpdate(BaseModel):
    # StrictBool: "true" or 1 are rejected, only JSON booleans pass
    use_dummy: StrictBool


class DummySettingsResponse(BaseModel):
    success: bool = True
    message: Optional[str] = None
    data: DummySettings
