"""
FaceReader Backend — Custom Exception Hierarchy
=================================================

What:  Application-specific exceptions for each failure the API can report.
Why:   Services raise typed errors; global handlers in main.py translate them
       into HTTP status codes and a consistent JSON body.
How:   Each exception carries a user-facing message and a context dict that
       is logged server-side (and returned only where noted).

Exception Hierarchy:
    FaceReaderError (base)
    ├── ValidationError          → 400 Bad Request
    ├── NotFoundError            → 404 Not Found
    ├── ConflictError            → 409 Conflict
    ├── ImageConversionError     → 422 Unprocessable Entity
    ├── AnalysisParseError       → 500 (raw completion returned for diagnosis)
    ├── FileStorageError         → 500 Internal Server Error
    ├── DatabaseError            → 500 Internal Server Error
    ├── LLMServiceError          → 503 Service Unavailable
    └── CircuitBreakerOpenError  → 503 Service Unavailable

Note on AnalysisParseError:
    Model output that is not valid JSON is the ONE normalization failure that
    reaches the client. Output that parses but misses fields is repaired with
    a fallback object and never raises.
"""

from typing import Any, Dict, Optional


class FaceReaderError(Exception):
    """
    Base exception for all FaceReader application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged, not returned unless a handler opts in)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(FaceReaderError):
    """
    Raised when client input fails validation.

    When:    Missing image field, unsupported content type, oversized upload,
             invalid deleteType / interaction value.
    HTTP:    400 Bad Request
    """

    def __init__(
        self,
        message: str = "Validation failed",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field


class NotFoundError(FaceReaderError):
    """
    Raised when a requested resource does not exist.

    When:    Unknown share ID, missing stored file.
    HTTP:    404 Not Found
    """

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"The requested {resource} was not found"
        if resource_id:
            message = f"{resource} with ID '{resource_id}' was not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


class ConflictError(FaceReaderError):
    """
    Raised when a write would duplicate an existing record.

    When:    The same sender shares a compatibility result with the same
             receiver twice.
    HTTP:    409 Conflict, with a machine-readable `code` the app switches on.
    """

    def __init__(
        self,
        message: str = "The resource already exists",
        code: str = "conflict",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
        self.code = code


class ImageConversionError(FaceReaderError):
    """
    Raised when an uploaded HEIC image cannot be re-encoded as JPEG.

    HTTP:    422 Unprocessable Entity (the bytes claimed HEIC but did not decode)
    """

    def __init__(
        self,
        message: str = "HEIC 파일 변환에 실패했습니다.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class AnalysisParseError(FaceReaderError):
    """
    Raised when model output cannot be parsed as JSON.

    What:    The candidate text extracted from a completion is not valid JSON,
             or (brace extraction) contains no JSON object at all.
    HTTP:    500, with `raw_text` returned under `details` so the failure can be
             diagnosed from the client.

    Attributes:
        raw_text:  The untouched completion returned by the model
        candidate: The string that was handed to the JSON parser
    """

    def __init__(
        self,
        message: str = "AI 응답을 JSON으로 해석할 수 없습니다.",
        raw_text: str = "",
        candidate: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        super().__init__(message=message, context=ctx)
        self.raw_text = raw_text
        self.candidate = candidate


class FileStorageError(FaceReaderError):
    """
    Raised when storage volume operations fail.

    When:    Disk full, permission denied, unreadable dummy-data document.
    HTTP:    500 Internal Server Error
    """

    def __init__(
        self,
        message: str = "File storage operation failed",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class LLMServiceError(FaceReaderError):
    """
    Raised when the vision model fails after all retries or returns nothing.

    HTTP:    503 Service Unavailable (with Retry-After when known)
    """

    def __init__(
        self,
        message: str = "AI analysis service is temporarily unavailable",
        retry_after: Optional[int] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if retry_after:
            ctx["retry_after"] = retry_after
        super().__init__(message=message, context=ctx)
        self.retry_after = retry_after


class CircuitBreakerOpenError(FaceReaderError):
    """
    Raised when the circuit breaker in front of Gemini is OPEN.

    How circuit breaker works:
        CLOSED → failures increment counter
        → threshold reached → OPEN (reject calls for recovery_timeout seconds)
        → timeout elapsed → HALF-OPEN (allow one test call)
        → success → CLOSED; failure → OPEN again
    HTTP:    503 Service Unavailable
    """

    def __init__(
        self,
        recovery_time: int = 60,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = (
            f"AI service is temporarily unavailable due to repeated failures. "
            f"The service will automatically retry in approximately {recovery_time} seconds."
        )
        ctx = context or {}
        ctx["recovery_time"] = recovery_time
        super().__init__(message=message, context=ctx)
        self.recovery_time = recovery_time


class DatabaseError(FaceReaderError):
    """
    Raised when database operations fail unexpectedly.

    The client always receives a generic message; query details are logged.
    HTTP:    500 Internal Server Error
    """

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
