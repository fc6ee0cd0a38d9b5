"""
FaceReader Backend — Analysis Schema Registry
===============================================

What:  The static SchemaDescriptor for every analysis endpoint shape.
Why:   One table instead of one validation block per route.
How:   Descriptors are built once at import time and never mutated.
       `get_schema()` resolves an endpoint plus an optional platform tag.

Platform variants:
    Fortune and compatibility analysis have an alternate field set served to
    the iOS app (a behaviour-oriented reading instead of a fortune reading).
    The platform tag comes from the client; "ios" selects the alternate
    variant, anything else the primary one.

Numeric bounds:
    Only compatibility.overall_score and condition.energy_score are range
    checked (0-100). The other scores are checked as "present and numeric".
"""

from typing import Dict, Optional, Tuple

from facereader.analysis.schema import (
    ExtractionMode,
    SchemaDescriptor,
    number,
    string_list,
    text,
)

PRIMARY = "primary"
ALTERNATE = "alternate"

# Platform tags that receive the alternate field set
ALTERNATE_PLATFORMS = {"ios"}

SCORE_RANGE = (0, 100)

_ANALYSIS_UNAVAILABLE = "분석 결과를 확인할 수 없습니다."
_FORTUNE_UNAVAILABLE = "운세 예측 결과를 확인할 수 없습니다."
_BEHAVIOR_UNAVAILABLE = "행동 분석 결과를 확인할 수 없습니다."


# ── Codi (outfit) feedback ────────────────────────────────────────────────
CODI_FEEDBACK = SchemaDescriptor(
    name="codi_feedback",
    fields=(
        text("mood_type", "캐주얼"),
        text("overall_comment", "오늘의 스타일이 잘 어울려요"),
        text("mood_description", "전체적으로 캐주얼하고 편안한 분위기입니다"),
        text("color_description", "색상 조합이 잘 어울립니다"),
        string_list("color_palette", ("네이비", "화이트", "그레이")),
        string_list("accessory_items", ("심플한 시계", "미니멀한 목걸이", "깔끔한 가방")),
        string_list(
            "improvement_tips",
            (
                "액세서리로 포인트를 주세요",
                "색상 조화를 고려해보세요",
                "전체적인 밸런스를 맞춰보세요",
            ),
        ),
    ),
)

# ── Compatibility ─────────────────────────────────────────────────────────
COMPATIBILITY = SchemaDescriptor(
    name="compatibility",
    fields=(
        number("overall_score", 0, bounds=SCORE_RANGE),
        text("personality_compatibility", _ANALYSIS_UNAVAILABLE),
        text("emotional_compatibility", _ANALYSIS_UNAVAILABLE),
        text("social_compatibility", _ANALYSIS_UNAVAILABLE),
        text("communication_compatibility", _ANALYSIS_UNAVAILABLE),
        text("long_term_prospects", _ANALYSIS_UNAVAILABLE),
        text("improvement_suggestions", _ANALYSIS_UNAVAILABLE),
        text("precautions", _ANALYSIS_UNAVAILABLE),
    ),
)

COMPATIBILITY_ALTERNATE = SchemaDescriptor(
    name="compatibility.alternate",
    fields=(
        number("overall_score", 0),
        text("personality_alignment", _ANALYSIS_UNAVAILABLE),
        text("emotional_dynamics", _ANALYSIS_UNAVAILABLE),
        text("social_interaction", _ANALYSIS_UNAVAILABLE),
        text("communication_style", _ANALYSIS_UNAVAILABLE),
        text("collaboration_potential", _ANALYSIS_UNAVAILABLE),
        text("growth_suggestions", _ANALYSIS_UNAVAILABLE),
        text("cautions", _ANALYSIS_UNAVAILABLE),
    ),
)

# ── Condition / energy ────────────────────────────────────────────────────
CONDITION = SchemaDescriptor(
    name="condition",
    fields=(
        number("energy_score", 75, bounds=SCORE_RANGE),
        text("energy_comment", "오늘은 컨디션이 좋은 날이에요"),
        text("mood", "기분이 밝고 긍정적이에요"),
        text("focus_level", "집중력이 좋아 효율적으로 일할 수 있어요"),
        text("efficiency", "업무나 공부에 몰입하기 좋은 상태입니다"),
        string_list(
            "care_tips",
            (
                "물을 충분히 마셔주세요",
                "잠깐 스트레칭이 도움이 됩니다",
                "충분한 휴식을 취해주세요",
            ),
        ),
        string_list(
            "recommended_activities",
            (
                "산책하기 좋아요",
                "가벼운 운동이 컨디션 회복에 도움 됩니다",
                "독서나 명상이 좋겠어요",
            ),
        ),
    ),
)

# ── Fortune ───────────────────────────────────────────────────────────────
FORTUNE = SchemaDescriptor(
    name="fortune",
    fields=(
        number("overall_score", 0),
        text("wealth_fortune", _FORTUNE_UNAVAILABLE),
        text("health_fortune", _FORTUNE_UNAVAILABLE),
        text("love_fortune", _FORTUNE_UNAVAILABLE),
        text("career_fortune", _FORTUNE_UNAVAILABLE),
        text("luck_improvement", _FORTUNE_UNAVAILABLE),
        text("precautions", _FORTUNE_UNAVAILABLE),
    ),
)

FORTUNE_ALTERNATE = SchemaDescriptor(
    name="fortune.alternate",
    fields=(
        number("overall_score", 0),
        text("communication_style", _BEHAVIOR_UNAVAILABLE),
        text("decision_making", _BEHAVIOR_UNAVAILABLE),
        text("relationship_behavior", _BEHAVIOR_UNAVAILABLE),
        text("stress_response", _BEHAVIOR_UNAVAILABLE),
        text("growth_suggestions", _BEHAVIOR_UNAVAILABLE),
        text("cautions", _BEHAVIOR_UNAVAILABLE),
    ),
)

# ── Personality ───────────────────────────────────────────────────────────
PERSONALITY = SchemaDescriptor(
    name="personality",
    fields=(
        text("personality_traits", _ANALYSIS_UNAVAILABLE),
        text("strengths_weaknesses", _ANALYSIS_UNAVAILABLE),
        text("communication_style", _ANALYSIS_UNAVAILABLE),
        text("growth_direction", _ANALYSIS_UNAVAILABLE),
        text("charm_points", _ANALYSIS_UNAVAILABLE),
        text("overall_advice", _ANALYSIS_UNAVAILABLE),
    ),
)

# ── Emotion (free-form) ───────────────────────────────────────────────────
# No required fields: whatever object the model returns is passed through.
EMOTION = SchemaDescriptor(
    name="emotion",
    extraction=ExtractionMode.BRACES,
)


SCHEMAS: Dict[Tuple[str, str], SchemaDescriptor] = {
    ("codi_feedback", PRIMARY): CODI_FEEDBACK,
    ("compatibility", PRIMARY): COMPATIBILITY,
    ("compatibility", ALTERNATE): COMPATIBILITY_ALTERNATE,
    ("condition", PRIMARY): CONDITION,
    ("fortune", PRIMARY): FORTUNE,
    ("fortune", ALTERNATE): FORTUNE_ALTERNATE,
    ("personality", PRIMARY): PERSONALITY,
    ("emotion", PRIMARY): EMOTION,
}


def resolve_variant(platform: Optional[str]) -> str:
    """Map a client platform tag to a schema variant."""
    if platform and platform.strip().lower() in ALTERNATE_PLATFORMS:
        return ALTERNATE
    return PRIMARY


def has_variants(endpoint: str) -> bool:
    return (endpoint, ALTERNATE) in SCHEMAS


def get_schema(endpoint: str, platform: Optional[str] = None) -> SchemaDescriptor:
    """
    Look up the descriptor for an endpoint and platform.

    Endpoints without an alternate variant ignore the platform tag.

    Raises:
        KeyError: `endpoint` is not registered.
    """
    variant = resolve_variant(platform) if has_variants(endpoint) else PRIMARY
    try:
        return SCHEMAS[(endpoint, variant)]
    except KeyError:
        raise KeyError(f"No analysis schema registered for endpoint '{endpoint}'") from None
