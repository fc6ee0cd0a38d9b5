"""
FaceReader Backend — AI Response Normalizer
=============================================

What:  Turns a raw model completion into a response object that is
       guaranteed to satisfy an endpoint's SchemaDescriptor.
Who:   Called by AnalysisService after every vision-model call.
When:  Once per analysis request, between the model call and the reply.

Pipeline:
    raw completion
      → extract candidate (fence stripping or brace extraction)
      → json.loads                      ✗ → AnalysisParseError (fatal)
      → check every FieldSpec           ✗ → fallback object (recovered)
      → parsed object, unchanged

Failure contract:
    The two failure kinds are deliberately handled differently.
    - Unparseable text means the model ignored the instructions entirely.
      It is raised so the caller can return the raw text for diagnosis.
    - Parseable but incomplete output is common. It is replaced, as a whole,
      by the schema's fallback object. Fields that did validate are NOT
      merged into the fallback: the result is all parsed or all fallback.

Concurrency:
    Pure function of (text, schema). No shared state, no I/O.
"""

import json
import logging
from typing import Any, Dict, List

from pydantic import BaseModel, Field

from facereader.analysis.extraction import extract_braces, strip_fences
from facereader.analysis.schema import ExtractionMode, SchemaDescriptor
from facereader.exceptions import AnalysisParseError

logger = logging.getLogger(__name__)


class NormalizationOutcome(BaseModel):
    """
    Result of normalizing one completion.

    Attributes:
        data:           The parsed object (unchanged) or the fallback object
        used_fallback:  True when `data` is the schema's fallback
        missing_fields: Names of the fields that failed validation
    """

    data: Dict[str, Any]
    used_fallback: bool = False
    missing_fields: List[str] = Field(default_factory=list)


def _reject_constant(token: str) -> Any:
    # json.loads accepts NaN/Infinity by default; strict JSON does not
    raise ValueError(f"Non-standard JSON constant: {token}")


def extract_candidate(raw_text: str, schema: SchemaDescriptor) -> str:
    """
    Cut the JSON candidate out of `raw_text` using the schema's extraction mode.

    Raises:
        AnalysisParseError: brace extraction found no '{...}' span.
    """
    if schema.extraction is ExtractionMode.BRACES:
        candidate = extract_braces(raw_text)
        if candidate is None:
            raise AnalysisParseError(
                message="AI 응답에서 JSON 형식을 찾을 수 없습니다.",
                raw_text=raw_text,
                context={"schema": schema.name},
            )
        return candidate
    return strip_fences(raw_text)


def parse_candidate(candidate: str, raw_text: str, schema_name: str = "") -> Any:
    """
    Parse a JSON candidate string.

    Returns:
        Whatever JSON value the candidate holds (usually a dict).

    Raises:
        AnalysisParseError: the candidate is not valid, strict JSON.
    """
    try:
        return json.loads(candidate, parse_constant=_reject_constant)
    except ValueError as e:
        # json.JSONDecodeError is a ValueError subclass
        logger.error("JSON parse failed for schema %s: %s", schema_name or "?", str(e))
        raise AnalysisParseError(
            raw_text=raw_text,
            candidate=candidate,
            context={"schema": schema_name, "parse_error": str(e)},
        ) from e


def find_missing_fields(data: Any, schema: SchemaDescriptor) -> List[str]:
    """
    List the fields of `schema` that `data` does not satisfy, in schema order.

    A value that is not a JSON object satisfies none of them.
    """
    if not isinstance(data, dict):
        return list(schema.field_names)
    return [
        spec.name
        for spec in schema.fields
        if spec.name not in data or not spec.accepts(data[spec.name])
    ]


def build_fallback(schema: SchemaDescriptor, missing_fields: List[str]) -> NormalizationOutcome:
    """Fallback outcome for `schema`, logging which fields triggered it."""
    logger.warning(
        "AI response for %s is missing required fields %s; using fallback",
        schema.name,
        missing_fields,
    )
    return NormalizationOutcome(
        data=schema.fallback(),
        used_fallback=True,
        missing_fields=missing_fields,
    )


def normalize(raw_text: str, schema: SchemaDescriptor) -> NormalizationOutcome:
    """
    Normalize a model completion against `schema`.

    Args:
        raw_text: Completion text exactly as returned by the model
        schema:   Descriptor already chosen by the caller (endpoint + platform)

    Returns:
        NormalizationOutcome whose `data` is either the parsed object,
        untouched, or the schema's complete fallback object.

    Raises:
        AnalysisParseError: the completion holds no parseable JSON.
    """
    logger.debug("Raw AI response for %s: %s", schema.name, raw_text)

    candidate = extract_candidate(raw_text, schema)
    parsed = parse_candidate(candidate, raw_text, schema.name)

    missing = find_missing_fields(parsed, schema)
    if missing:
        return build_fallback(schema, missing)

    # Free-form schemas have no fields, so a non-object still needs guarding
    if not isinstance(parsed, dict):
        raise AnalysisParseError(
            message="AI 응답이 JSON 객체가 아닙니다.",
            raw_text=raw_text,
            candidate=candidate,
            context={"schema": schema.name},
        )
    return NormalizationOutcome(data=parsed)
