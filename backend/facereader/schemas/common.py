"""
FaceReader Backend — Shared Response Schemas
==============================================

What:  Error, health, and endpoint-description models used across routes.
"""

from typing import Dict, List, Optional

from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    """
    Standardized error body for every non-2xx response.

    Example:
        {
            "error": "analysis_parse_error",
            "message": "AI 응답을 JSON으로 해석할 수 없습니다.",
            "details": {"raw_text": "I cannot help with that."},
            "request_id": "a1b2c3d4"
        }
    """
    error: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error description")
    details: Optional[dict] = Field(default=None, description="Additional error context")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(BaseModel):
    """Service and dependency status returned by GET /health."""
    status: str = Field(description="Overall service status: healthy, degraded, unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Database connectivity: connected, disconnected")
    gemini: str = Field(description="Gemini API status: available, unavailable, circuit_open")
    storage: str = Field(description="Image storage volume: writable, unavailable")
    uptime_seconds: float = Field(description="Seconds since service started")


class EndpointInfo(BaseModel):
    """Self-description served on GET for each analysis route."""
    message: str
    usage: Dict[str, str]
    features: List[str]
