"""
FaceReader Backend — Analysis Response Envelopes
==================================================

What:  The JSON envelopes wrapped around normalized analysis objects.
Why:   The mobile apps already parse these shapes; each endpoint keeps its
       own key name ("analysis", "compatibility", "fortune", "data").

The inner objects are plain dicts: their fields are defined by the
SchemaDescriptor registry, not by Pydantic models.
"""

from datetime import datetime, timezone
from typing import Any, Dict

from pydantic import BaseModel, Field


def utc_timestamp() -> str:
    """ISO 8601 UTC timestamp with milliseconds, e.g. 2024-01-15T12:00:00.000Z"""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class AnalysisEnvelope(BaseModel):
    """Codi feedback, condition and personality responses."""
    success: bool = True
    analysis: Dict[str, Any]
    timestamp: str = Field(default_factory=utc_timestamp)


class CompatibilityImages(BaseModel):
    person1: str
    person2: str


class CompatibilityEnvelope(BaseModel):
    success: bool = True
    compatibility: Dict[str, Any]
    images: CompatibilityImages
    timestamp: str = Field(default_factory=utc_timestamp)


class FortuneEnvelope(BaseModel):
    success: bool = True
    fortune: Dict[str, Any]
    image: str = Field(description="Public URL of the analyzed portrait")
    timestamp: str = Field(default_factory=utc_timestamp)


class EmotionEnvelope(BaseModel):
    success: bool = True
    data: Dict[str, Any]
