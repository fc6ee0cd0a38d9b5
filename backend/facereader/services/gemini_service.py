"""
FaceReader Backend — Google Gemini Vision Service
===================================================

What:  Concrete LLMService that sends analysis prompts and portrait images to
       Google Gemini and returns the completion text.
Why:   Every analysis endpoint (outfit, compatibility, condition, fortune,
       personality, emotion) is one prompt + image(s) → JSON-ish text call.
How:   Images are sent inline as bytes parts. JSON mode is requested through
       `response_mime_type`, but the completion is still normalized
       afterwards because the model does not always honour it.
Who:   Instantiated once at import; called by AnalysisService.

Resilience Strategy:
    1. Tenacity retry with exponential backoff + jitter for transient failures
    2. Circuit breaker so a Gemini outage fails requests instantly
    3. Per-call timeout via request_options
"""

import logging
import time
import uuid
from typing import Any, Dict, List, Optional, Sequence

import google.generativeai as genai
from tenacity import (
    retry,
    stop_after_attempt,
    wait_exponential_jitter,
    retry_if_exception_type,
    before_sleep_log,
)

from facereader.config import settings
from facereader.exceptions import LLMServiceError, CircuitBreakerOpenError
from facereader.services.llm_base import LLMService, VisionImage

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Circuit Breaker
# ══════════════════════════════════════════════════════════════════════════

class CircuitBreaker:
    """
    Circuit breaker in front of the Gemini API.

    State Machine:
        CLOSED    → failures counted; threshold reached → OPEN
        OPEN      → every call raises CircuitBreakerOpenError until
                    recovery_timeout has elapsed → HALF_OPEN
        HALF_OPEN → one call allowed; success → CLOSED, failure → OPEN

    Not thread-safe: the service runs in a single uvicorn event loop.
    """

    CLOSED = "closed"
    OPEN = "open"
    HALF_OPEN = "half_open"

    def __init__(self, failure_threshold: int = 5, recovery_timeout: int = 60):
        self.failure_threshold = failure_threshold
        self.recovery_timeout = recovery_timeout
        self.failure_count = 0
        self.state = self.CLOSED
        self.last_failure_time: Optional[float] = None

    def can_execute(self) -> bool:
        """
        Returns True if a call may proceed.

        Raises:
            CircuitBreakerOpenError while OPEN and still inside the recovery window.
        """
        if self.state == self.CLOSED:
            return True

        if self.state == self.OPEN:
            elapsed = time.time() - (self.last_failure_time or 0)
            if elapsed >= self.recovery_timeout:
                logger.info(
                    "Circuit breaker transitioning to HALF_OPEN after %.1fs",
                    elapsed,
                )
                self.state = self.HALF_OPEN
                return True
            remaining = int(self.recovery_timeout - elapsed)
            raise CircuitBreakerOpenError(recovery_time=remaining)

        return True

    def record_success(self) -> None:
        if self.state == self.HALF_OPEN:
            logger.info("Circuit breaker transitioning to CLOSED (service recovered)")
        self.failure_count = 0
        self.state = self.CLOSED
        self.last_failure_time = None

    def record_failure(self) -> None:
        self.failure_count += 1
        self.last_failure_time = time.time()

        if self.state == self.HALF_OPEN:
            logger.warning("Circuit breaker returning to OPEN (test request failed)")
            self.state = self.OPEN
        elif self.failure_count >= self.failure_threshold:
            logger.warning(
                "Circuit breaker OPENING after %d consecutive failures",
                self.failure_count,
            )
            self.state = self.OPEN


# ══════════════════════════════════════════════════════════════════════════
# Gemini Service
# ══════════════════════════════════════════════════════════════════════════

def _completion_text(response: Any) -> str:
    """
    Extract text from a Gemini response.

    `response.text` raises ValueError when the candidate was blocked or has
    no text parts; that is treated the same as an empty completion.
    """
    try:
        text = response.text
    except ValueError:
        return ""
    return text.strip() if text else ""


class GeminiService(LLMService):
    """
    Google Gemini implementation of the vision model contract.

    Error Handling Chain:
        API call fails → tenacity retries (retry_max_attempts, backoff)
        → still failing → circuit breaker failure + LLMServiceError
        → breaker threshold reached → later calls rejected instantly
        Model answers with no text → LLMServiceError (not retried)
    """

    def __init__(self):
        if settings.gemini_api_key and settings.gemini_api_key != "your_gemini_api_key_here":
            genai.configure(api_key=settings.gemini_api_key)

        self.model = genai.GenerativeModel(settings.gemini_model)

        self.circuit_breaker = CircuitBreaker(
            failure_threshold=settings.cb_failure_threshold,
            recovery_timeout=settings.cb_recovery_timeout,
        )

        logger.info(
            "GeminiService initialized with model=%s, "
            "circuit_breaker(threshold=%d, recovery=%ds)",
            settings.gemini_model,
            settings.cb_failure_threshold,
            settings.cb_recovery_timeout,
        )

    async def analyze(
        self,
        prompt: str,
        images: Sequence[VisionImage],
        json_response: bool = True,
    ) -> str:
        """
        Send the prompt and images to Gemini and return the completion text.

        Flow:
            1. Check circuit breaker → may raise CircuitBreakerOpenError
            2. Call Gemini with retry logic
            3. Record success/failure in circuit breaker
            4. Reject empty completions

        Raises:
            CircuitBreakerOpenError: Circuit is open
            LLMServiceError: Gemini failed after all attempts, or answered with no text
        """
        request_id = str(uuid.uuid4())[:8]

        self.circuit_breaker.can_execute()

        logger.info(
            "[%s] Starting Gemini analysis with %d image(s), json=%s",
            request_id,
            len(images),
            json_response,
        )

        try:
            result = await self._call_gemini_with_retry(
                prompt, list(images), json_response, request_id
            )
        except CircuitBreakerOpenError:
            raise
        except Exception as e:
            self.circuit_breaker.record_failure()
            logger.error(
                "[%s] Gemini analysis failed after retries: %s",
                request_id,
                str(e),
                exc_info=True,
            )
            raise LLMServiceError(
                message="AI analysis failed after multiple attempts. Please try again later.",
                retry_after=self.circuit_breaker.recovery_timeout,
                context={
                    "request_id": request_id,
                    "attempts": settings.retry_max_attempts,
                    "error_type": type(e).__name__,
                },
            ) from e

        self.circuit_breaker.record_success()

        if not result:
            logger.error("[%s] Gemini returned an empty completion", request_id)
            raise LLMServiceError(
                message="AI 분석 결과를 생성할 수 없습니다.",
                context={"request_id": request_id, "reason": "empty_completion"},
            )
        return result

    @staticmethod
    def _build_parts(prompt: str, images: List[VisionImage]) -> List[Any]:
        # Text first, then images in the order the prompt refers to them
        parts: List[Any] = [prompt]
        parts.extend({"mime_type": image.mime_type, "data": image.data} for image in images)
        return parts

    @retry(
        retry=retry_if_exception_type(Exception),
        stop=stop_after_attempt(settings.retry_max_attempts),
        wait=wait_exponential_jitter(
            initial=settings.retry_min_wait,
            max=settings.retry_max_wait,
            jitter=1,
        ),
        before_sleep=before_sleep_log(logger, logging.WARNING),
        reraise=True,
    )
    async def _call_gemini_with_retry(
        self,
        prompt: str,
        images: List[VisionImage],
        json_response: bool,
        request_id: str,
    ) -> str:
        """
        The actual API call, decorated with retry.

        Kept separate from analyze() so circuit breaker checks and the
        empty-completion check are not retried.
        """
        start_time = time.time()

        generation_config: Optional[Dict[str, Any]] = None
        if json_response:
            generation_config = {"response_mime_type": "application/json"}

        try:
            response = await self.model.generate_content_async(
                self._build_parts(prompt, images),
                generation_config=generation_config,
                request_options={"timeout": settings.gemini_timeout},
            )
        except Exception as e:
            duration_ms = (time.time() - start_time) * 1000
            logger.warning(
                "[%s] Gemini API call failed after %.0fms: %s",
                request_id,
                duration_ms,
                str(e),
            )
            raise

        duration_ms = (time.time() - start_time) * 1000
        completion = _completion_text(response)

        logger.info(
            "[%s] Gemini analysis completed in %.0fms, %d chars",
            request_id,
            duration_ms,
            len(completion),
        )
        return completion

    async def health_check(self) -> bool:
        """
        Check if the Gemini API is reachable by listing models (no token cost).
        """
        try:
            model_names = [m.name for m in genai.list_models()]
            target = f"models/{settings.gemini_model}"
            if target not in model_names:
                logger.warning("Configured model %s not found in available models", target)
            return True
        except Exception as e:
            logger.warning("Gemini health check failed: %s", str(e))
            return False


# ── Singleton Instance ────────────────────────────────────────────────────
# Shared so the circuit breaker state spans all requests
gemini_service = GeminiService()
