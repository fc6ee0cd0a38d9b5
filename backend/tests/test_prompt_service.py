"""
FaceReader Backend — Prompt Service Tests
===========================================

What we test:
    ✅ Accept-Language → response language
    ✅ Template files are loaded and the language line appended
    ✅ iOS selects the behaviour templates
    ✅ Missing/empty templates fall back to the built-in prompt
"""

import pytest

from facereader.services.prompt_service import (
    PromptService,
    detect_language,
    with_language,
)


class TestDetectLanguage:

    @pytest.mark.parametrize(
        "header, expected",
        [
            (None, "ko"),
            ("", "ko"),
            ("en-US,en;q=0.9", "en"),
            ("ja", "ja"),
            ("zh-CN", "zh"),
            ("fr-FR,en;q=0.5", "en"),
            ("fr-FR,de", "ko"),
            ("  KO-kr ", "ko"),
        ],
    )
    def test_detection(self, header, expected):
        assert detect_language(header) == expected


class TestWithLanguage:

    def test_instruction_appended_after_blank_line(self):
        prompt = with_language("Analyze the face.\n", "en")
        assert prompt == "Analyze the face.\n\nWrite every value in the response in English."

    def test_unknown_language_uses_korean(self):
        assert with_language("p", "xx").endswith("한국어로 작성해주세요.")


class TestPromptLoading:

    @pytest.mark.asyncio
    async def test_loads_template_file(self, tmp_path):
        (tmp_path / "fortune-prediction.txt").write_text("FORTUNE TEMPLATE", encoding="utf-8")
        service = PromptService(prompts_dir=str(tmp_path))

        prompt = await service.load("fortune", "ko")
        assert prompt.startswith("FORTUNE TEMPLATE\n\n")

    @pytest.mark.asyncio
    async def test_ios_uses_behavior_template(self, tmp_path):
        (tmp_path / "fortune-prediction.txt").write_text("FORTUNE", encoding="utf-8")
        (tmp_path / "behavior-analysis.txt").write_text("BEHAVIOR", encoding="utf-8")
        (tmp_path / "compatibility-analysis_behavior.txt").write_text("PAIR BEHAVIOR", encoding="utf-8")
        service = PromptService(prompts_dir=str(tmp_path))

        assert (await service.load("fortune", "en", platform="ios")).startswith("BEHAVIOR")
        assert (await service.load("fortune", "en", platform="android")).startswith("FORTUNE")
        assert (await service.load("compatibility", "en", platform="ios")).startswith("PAIR BEHAVIOR")

    @pytest.mark.asyncio
    async def test_missing_template_uses_builtin(self, tmp_path):
        service = PromptService(prompts_dir=str(tmp_path))
        prompt = await service.load("emotion", "ko")
        assert "감정 분석가" in prompt

    @pytest.mark.asyncio
    async def test_empty_template_uses_builtin(self, tmp_path):
        (tmp_path / "condition-analysis.txt").write_text("   \n", encoding="utf-8")
        service = PromptService(prompts_dir=str(tmp_path))
        prompt = await service.load("condition", "ko")
        assert "컨디션 분석 전문가" in prompt

    @pytest.mark.asyncio
    async def test_unknown_endpoint_raises(self, tmp_path):
        service = PromptService(prompts_dir=str(tmp_path))
        with pytest.raises(KeyError):
            await service.load("horoscope", "ko")

    @pytest.mark.asyncio
    async def test_shipped_templates_exist(self):
        # Uses PROMPTS_DIR from conftest (backend/prompts)
        service = PromptService()
        for endpoint in ("codi_feedback", "compatibility", "condition", "fortune", "personality", "emotion"):
            path = service.prompts_dir / f"{service._template_for(endpoint, None)[0]}.txt"
            assert path.is_file(), path
