"""
FaceReader Backend — Abstract Vision Model Interface
=====================================================

What:  Abstract base class for the vision-capable model behind every analysis.
Why:   The analysis workflow only needs "prompt + images in, completion text
       out". Hiding the provider behind this contract keeps AnalysisService
       testable with a mock and lets the provider change without touching it.
Who:   Implemented by GeminiService; called by AnalysisService.
"""

from abc import ABC, abstractmethod
from typing import Sequence

from pydantic import BaseModel


class VisionImage(BaseModel):
    """
    One image handed to the model.

    Attributes:
        data:      Raw image bytes (already HEIC-normalized)
        mime_type: Content type of `data`, e.g. "image/jpeg"
    """

    data: bytes
    mime_type: str


class LLMService(ABC):
    """
    Abstract interface for prompt + image completion.

    Contract:
        - analyze() returns the completion text, never None
        - An empty completion is an error (LLMServiceError), not ""
        - Implementations own their retry logic and error translation
    """

    @abstractmethod
    async def analyze(
        self,
        prompt: str,
        images: Sequence[VisionImage],
        json_response: bool = True,
    ) -> str:
        """
        Send a prompt and one or more images to the model.

        Args:
            prompt:        Full instruction text, language suffix included
            images:        Images in the order the prompt refers to them
            json_response: Ask the provider for JSON-only output

        Returns:
            The raw completion text (not yet normalized).

        Raises:
            LLMServiceError: The model failed after retries or returned nothing.
            CircuitBreakerOpenError: Recent failures tripped the breaker.
        """
        ...

    @abstractmethod
    async def health_check(self) -> bool:
        """Lightweight reachability check that does not consume quota."""
        ...
