"""
FaceReader Backend — Prompt Templates
=======================================

What:  Loads the analysis prompt for an endpoint and appends the
       response-language instruction.
How:   Templates live in settings.prompts_dir as <name>.txt. A missing or
       unreadable template falls back to a one-sentence built-in prompt so
       the endpoint keeps working.
"""

import logging
from pathlib import Path
from typing import Dict, Optional

import aiofiles

from facereader.analysis.registry import ALTERNATE, resolve_variant
from facereader.config import settings

logger = logging.getLogger(__name__)

SUPPORTED_LANGUAGES = ("ko", "en", "ja", "zh")
DEFAULT_LANGUAGE = "ko"

_LANGUAGE_INSTRUCTIONS: Dict[str, str] = {
    "ko": "모든 응답 내용은 한국어로 작성해주세요.",
    "en": "Write every value in the response in English.",
    "ja": "回答の内容はすべて日本語で書いてください。",
    "zh": "请用中文撰写回答中的所有内容。",
}

# endpoint -> (template file stem, built-in prompt)
_TEMPLATES: Dict[str, tuple] = {
    "codi_feedback": (
        "codi-feedback",
        "당신은 전문 패션 스타일리스트입니다. 사진 속 코디를 분석하여 피드백을 JSON으로만 답하세요.",
    ),
    "compatibility": (
        "compatibility-analysis_normal",
        "당신은 전문적인 분석가입니다. 두 사람의 얼굴 사진을 분석하여 관계를 분석해주세요.",
    ),
    "condition": (
        "condition-analysis",
        "당신은 컨디션 분석 전문가입니다. 얼굴 사진을 보고 오늘의 에너지와 컨디션을 JSON으로만 답하세요.",
    ),
    "fortune": (
        "fortune-prediction",
        "당신은 전문적인 운세 예측가이자 관상학자입니다. 사용자의 얼굴 사진을 분석하여 운세를 예측해주세요.",
    ),
    "personality": (
        "personality-analysis",
        "당신은 이미지 기반 캐릭터 성격 분석가입니다. 외형적 분위기를 바탕으로 가상의 캐릭터 성격을 "
        "창작적으로 분석하고 JSON으로만 답하세요.",
    ),
    "emotion": (
        "emotion-analysis",
        "당신은 전문적인 감정 분석가입니다. 사진에서 감정 상태를 분석해주세요.",
    ),
}

# iOS receives behaviour-oriented readings matching the alternate schemas
_ALTERNATE_TEMPLATES: Dict[str, tuple] = {
    "compatibility": (
        "compatibility-analysis_behavior",
        "당신은 전문적인 행동 분석가입니다. 두 사람의 얼굴 사진을 분석하여 상호작용 방식을 분석해주세요.",
    ),
    "fortune": (
        "behavior-analysis",
        "당신은 전문적인 행동 분석가입니다. 사용자의 얼굴 사진을 분석하여 행동 경향을 분석해주세요.",
    ),
}


def detect_language(accept_language: Optional[str]) -> str:
    """
    Pick the response language from an Accept-Language header.

    The first listed language whose primary subtag is supported wins;
    "ko-KR,en;q=0.8" → "ko". Defaults to Korean.
    """
    if not accept_language:
        return DEFAULT_LANGUAGE
    for entry in accept_language.split(","):
        tag = entry.split(";", 1)[0].strip().lower()
        primary = tag.split("-", 1)[0]
        if primary in SUPPORTED_LANGUAGES:
            return primary
    return DEFAULT_LANGUAGE


def with_language(prompt: str, language: str) -> str:
    instruction = _LANGUAGE_INSTRUCTIONS.get(language, _LANGUAGE_INSTRUCTIONS[DEFAULT_LANGUAGE])
    return f"{prompt.rstrip()}\n\n{instruction}"


class PromptService:
    """Resolves endpoint + platform to a prompt template on disk."""

    def __init__(self, prompts_dir: Optional[str] = None):
        self.prompts_dir = Path(prompts_dir or settings.prompts_dir)

    def _template_for(self, endpoint: str, platform: Optional[str]) -> tuple:
        if resolve_variant(platform) == ALTERNATE and endpoint in _ALTERNATE_TEMPLATES:
            return _ALTERNATE_TEMPLATES[endpoint]
        try:
            return _TEMPLATES[endpoint]
        except KeyError:
            raise KeyError(f"No prompt template registered for endpoint '{endpoint}'") from None

    async def load(self, endpoint: str, language: str, platform: Optional[str] = None) -> str:
        """Return the full prompt text for one analysis call."""
        name, builtin = self._template_for(endpoint, platform)
        path = self.prompts_dir / f"{name}.txt"

        try:
            async with aiofiles.open(path, "r", encoding="utf-8") as f:
                template = await f.read()
        except OSError as e:
            logger.warning("Prompt template %s unavailable (%s), using built-in prompt", path, str(e))
            template = builtin

        if not template.strip():
            logger.warning("Prompt template %s is empty, using built-in prompt", path)
            template = builtin

        return with_language(template, language)


# ── Singleton Instance ────────────────────────────────────────────────────
prompt_service = PromptService()
