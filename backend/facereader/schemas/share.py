"""
FaceReader Backend — Compatibility Share Schemas
==================================================

What:  Request/response models for /api/compatibility-share.
How:   The apps send camelCase keys; fields are snake_case with camelCase
       aliases, and responses are serialized by alias.
"""

import uuid
from datetime import datetime
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from facereader.models.compatibility_share import ALLOWED_INTERACTIONS

_ALIASED = ConfigDict(populate_by_name=True, from_attributes=True)


# ══════════════════════════════════════════════════════════════════════════
# Requests
# ══════════════════════════════════════════════════════════════════════════

class ShareCreateRequest(BaseModel):
    model_config = _ALIASED

    sender_id: str = Field(alias="senderId", min_length=1)
    receiver_id: str = Field(alias="receiverId", min_length=1)
    compatibility: Dict[str, Any] = Field(description="Compatibility analysis result to share")

    @field_validator("compatibility")
    @classmethod
    def not_empty(cls, v: Dict[str, Any]) -> Dict[str, Any]:
        if not v:
            raise ValueError("필수 정보가 누락되었습니다.")
        return v


class InteractionUpdateRequest(BaseModel):
    model_config = _ALIASED

    share_id: uuid.UUID = Field(alias="shareId")
    interaction: str

    @field_validator("interaction")
    @classmethod
    def validate_interaction(cls, v: str) -> str:
        if v not in ALLOWED_INTERACTIONS:
            raise ValueError(
                f"유효하지 않은 상호작용 상태입니다. 허용 값: {', '.join(ALLOWED_INTERACTIONS)}"
            )
        return v


class ShareDeleteRequest(BaseModel):
    model_config = _ALIASED

    share_id: uuid.UUID = Field(alias="shareId")
    delete_type: Literal["sender", "receiver"] = Field(alias="deleteType")


# ══════════════════════════════════════════════════════════════════════════
# Responses
# ══════════════════════════════════════════════════════════════════════════

class ShareItem(BaseModel):
    """One row of compatibility_shares as returned to the apps (snake_case)."""
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    sender_id: str
    receiver_id: str
    compatibility_result: Dict[str, Any]
    interaction: Optional[str] = None
    sender_delete: bool
    receiver_delete: bool
    created_at: datetime
    updated_at: Optional[datetime] = None


class ShareCreateResponse(BaseModel):
    model_config = _ALIASED

    success: bool = True
    share_id: uuid.UUID = Field(serialization_alias="shareId")
    message: str = "궁합 결과가 성공적으로 공유되었습니다."
    share_url: str = Field(serialization_alias="shareUrl")


class ShareListResponse(BaseModel):
    success: bool = True
    shares: List[ShareItem]


class InteractionUpdateResponse(BaseModel):
    model_config = _ALIASED

    success: bool = True
    receiver_id: str = Field(serialization_alias="receiverId")
    sender_id: str = Field(serialization_alias="senderId")
    message: str = "상호작용 상태가 성공적으로 저장되었습니다."


class ShareDeleteResponse(BaseModel):
    success: bool = True
    message: str
    action: Literal["updated", "deleted"]
