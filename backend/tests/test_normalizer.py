"""
FaceReader Backend — Response Normalizer Tests
================================================

What:  The parse → validate → fallback pipeline against real registry schemas.

What we test:
    ✅ Complete responses come back unchanged (extra keys included)
    ✅ Incomplete responses are replaced by the whole fallback object
    ✅ Fenced and unfenced JSON normalize identically
    ✅ Unparseable text raises AnalysisParseError, never a fallback
    ✅ Inclusive numeric bounds
    ✅ Free-form (brace) schema behaviour
"""

import json
import logging

import pytest

from facereader.analysis import normalize
from facereader.analysis.registry import (
    CODI_FEEDBACK,
    COMPATIBILITY,
    CONDITION,
    EMOTION,
    FORTUNE,
    FORTUNE_ALTERNATE,
)
from facereader.exceptions import AnalysisParseError


def _fortune(**overrides):
    data = {
        "overall_score": 85,
        "wealth_fortune": "재물운이 좋습니다",
        "health_fortune": "건강에 유의하세요",
        "love_fortune": "새로운 인연이 있습니다",
        "career_fortune": "승진운이 보입니다",
        "luck_improvement": "아침 산책을 하세요",
        "precautions": "과음을 피하세요",
    }
    data.update(overrides)
    return data


def _codi(**overrides):
    data = {
        "mood_type": "casual",
        "overall_comment": "잘 어울려요",
        "mood_description": "편안한 분위기",
        "color_description": "톤온톤 조합",
        "color_palette": ["navy", "white"],
        "accessory_items": ["watch"],
        "improvement_tips": ["벨트를 추가해보세요"],
    }
    data.update(overrides)
    return data


def _compatibility(score):
    data = {name: "분석 내용" for name in COMPATIBILITY.field_names}
    data["overall_score"] = score
    return data


class TestIdentity:

    def test_complete_fortune_returned_unchanged(self):
        data = _fortune()
        outcome = normalize(json.dumps(data, ensure_ascii=False), FORTUNE)

        assert outcome.data == data
        assert outcome.used_fallback is False
        assert outcome.missing_fields == []

    def test_extra_keys_are_kept(self):
        data = _fortune(lucky_color="blue")
        outcome = normalize(json.dumps(data), FORTUNE)
        assert outcome.data["lucky_color"] == "blue"

    def test_string_list_elements_are_not_inspected(self):
        data = _codi(color_palette=[1, None, "red"], accessory_items=[])
        outcome = normalize(json.dumps(data), CODI_FEEDBACK)
        assert outcome.used_fallback is False
        assert outcome.data["color_palette"] == [1, None, "red"]


class TestAllOrNothing:

    def test_single_valid_score_still_gets_full_fallback(self):
        outcome = normalize('{"overall_score": 85}', FORTUNE)

        assert outcome.used_fallback is True
        assert outcome.data == FORTUNE.fallback()
        assert outcome.data["overall_score"] == 0
        assert outcome.data["wealth_fortune"] == "운세 예측 결과를 확인할 수 없습니다."
        assert len(outcome.missing_fields) == 6
        assert "overall_score" not in outcome.missing_fields

    def test_one_missing_field_discards_all_valid_fields(self):
        data = _fortune()
        del data["precautions"]
        outcome = normalize(json.dumps(data), FORTUNE)

        assert outcome.data == FORTUNE.fallback()
        assert outcome.missing_fields == ["precautions"]

    def test_empty_string_fails_text_field(self):
        outcome = normalize(json.dumps(_fortune(love_fortune="")), FORTUNE)
        assert outcome.used_fallback is True
        assert outcome.missing_fields == ["love_fortune"]

    def test_wrong_type_fails(self):
        outcome = normalize(json.dumps(_codi(color_palette="navy, white")), CODI_FEEDBACK)
        assert outcome.missing_fields == ["color_palette"]

    def test_boolean_is_not_a_number(self):
        outcome = normalize(json.dumps(_fortune(overall_score=True)), FORTUNE)
        assert outcome.missing_fields == ["overall_score"]

    def test_numeric_string_is_not_a_number(self):
        outcome = normalize(json.dumps(_fortune(overall_score="85")), FORTUNE)
        assert outcome.used_fallback is True

    def test_non_object_json_uses_fallback(self):
        outcome = normalize('["a", "b"]', FORTUNE)
        assert outcome.data == FORTUNE.fallback()
        assert outcome.missing_fields == list(FORTUNE.field_names)

    def test_fallback_lists_are_fresh_copies(self):
        first = normalize("{}", CODI_FEEDBACK)
        first.data["color_palette"].append("mutated")
        second = normalize("{}", CODI_FEEDBACK)
        assert "mutated" not in second.data["color_palette"]

    def test_fallback_is_logged_as_warning(self, caplog):
        with caplog.at_level(logging.WARNING, logger="facereader.analysis.normalizer"):
            normalize("{}", CONDITION)
        assert "missing required fields" in caplog.text

    def test_alternate_schema_fields_differ(self):
        outcome = normalize(json.dumps(_fortune()), FORTUNE_ALTERNATE)
        assert outcome.used_fallback is True
        assert outcome.data["communication_style"] == "행동 분석 결과를 확인할 수 없습니다."


class TestFences:

    def test_fenced_equals_unfenced(self):
        payload = json.dumps(_fortune(), ensure_ascii=False)
        fenced = normalize(f"```json\n{payload}\n```", FORTUNE)
        plain = normalize(payload, FORTUNE)
        assert fenced.data == plain.data
        assert fenced.used_fallback is False

    def test_newlines_inside_strings_are_folded(self):
        raw = (
            '```json\n{"mood_type":"casual\nstreet","overall_comment":"good",'
            '"mood_description":"relaxed","color_description":"warm",'
            '"color_palette":["navy"],"accessory_items":["cap"],'
            '"improvement_tips":["belt"]}\n```'
        )
        compact = (
            '{"mood_type":"casual street","overall_comment":"good",'
            '"mood_description":"relaxed","color_description":"warm",'
            '"color_palette":["navy"],"accessory_items":["cap"],'
            '"improvement_tips":["belt"]}'
        )
        assert normalize(raw, CODI_FEEDBACK).data == normalize(compact, CODI_FEEDBACK).data
        assert normalize(raw, CODI_FEEDBACK).data["mood_type"] == "casual street"


class TestParseErrors:

    @pytest.mark.parametrize(
        "raw",
        [
            "not json at all",
            '{"overall_score": 85, "wealth_fortune": "trunc',
            "",
            '```json\n{"a": }\n```',
        ],
    )
    def test_invalid_text_raises(self, raw):
        with pytest.raises(AnalysisParseError) as exc_info:
            normalize(raw, FORTUNE)
        assert exc_info.value.raw_text == raw

    def test_nan_constant_is_rejected(self):
        with pytest.raises(AnalysisParseError):
            normalize('{"overall_score": NaN}', FORTUNE)

    def test_parse_error_keeps_candidate(self):
        with pytest.raises(AnalysisParseError) as exc_info:
            normalize("```json\n{broken\n```", FORTUNE)
        assert exc_info.value.candidate == "{broken"


class TestBounds:

    @pytest.mark.parametrize("score", [0, 100, 50, 99.5])
    def test_inclusive_bounds_pass(self, score):
        outcome = normalize(json.dumps(_compatibility(score)), COMPATIBILITY)
        assert outcome.used_fallback is False
        assert outcome.data["overall_score"] == score

    @pytest.mark.parametrize("score", [-1, 101, 100.01])
    def test_out_of_bounds_falls_back(self, score):
        outcome = normalize(json.dumps(_compatibility(score)), COMPATIBILITY)
        assert outcome.used_fallback is True
        assert outcome.missing_fields == ["overall_score"]

    def test_condition_energy_fallback_is_75(self):
        outcome = normalize('{"energy_score": 150}', CONDITION)
        assert outcome.data["energy_score"] == 75

    def test_unbounded_fortune_score_accepts_large_values(self):
        outcome = normalize(json.dumps(_fortune(overall_score=250)), FORTUNE)
        assert outcome.used_fallback is False

    def test_huge_integer_passes_unbounded_field(self):
        data = _fortune(overall_score=10**400)
        outcome = normalize(json.dumps(data), FORTUNE)
        assert outcome.used_fallback is False
        assert outcome.data == data

    def test_huge_integer_fails_bounded_field(self):
        outcome = normalize(json.dumps(_compatibility(10**400)), COMPATIBILITY)
        assert outcome.used_fallback is True
        assert outcome.missing_fields == ["overall_score"]
        assert outcome.data == COMPATIBILITY.fallback()


class TestFreeForm:

    def test_emotion_passes_any_object(self):
        raw = 'Sure! {"primary_emotion": "joy", "score": 0.9} Let me know.'
        outcome = normalize(raw, EMOTION)
        assert outcome.data == {"primary_emotion": "joy", "score": 0.9}
        assert outcome.used_fallback is False

    def test_emotion_without_braces_raises(self):
        with pytest.raises(AnalysisParseError, match="JSON 형식을 찾을 수 없습니다"):
            normalize("I cannot determine the emotion.", EMOTION)

    def test_emotion_greedy_span_that_is_not_json_raises(self):
        with pytest.raises(AnalysisParseError):
            normalize('{"a": 1} and {"b": 2}', EMOTION)
