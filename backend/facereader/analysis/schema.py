"""
FaceReader Backend — Analysis Schema Descriptors
==================================================

What:  Declarative description of the JSON object each analysis endpoint
       expects back from the vision model.
Why:   Every endpoint used to carry its own hand-written required-field
       check and default object. Describing the shape as data lets one
       generic validator serve all of them.
How:   A `SchemaDescriptor` is an ordered tuple of `FieldSpec`s. Each field
       owns its validation rule (its kind and optional numeric bounds) and
       its fallback value, so a descriptor can never have a field without a
       default or a default without a field.

Field kinds:
    text         → present, a string, not empty
    number       → present, numeric (bool excluded), finite,
                   and inside the inclusive bounds when bounds are set
    string_list  → present and a JSON array (elements are not inspected)
"""

import math
from enum import Enum
from typing import Any, Dict, Optional, Tuple

from pydantic import BaseModel, model_validator


class FieldKind(str, Enum):
    """Validation rule applied to a single field of a model response."""

    TEXT = "text"
    NUMBER = "number"
    STRING_LIST = "string_list"


class ExtractionMode(str, Enum):
    """
    How the JSON candidate is cut out of the raw completion.

    FENCED: take the body of a ```json fence if there is one, else the whole
            text, then fold line breaks into spaces.
    BRACES: take the greedy span from the first '{' to the last '}'.
    """

    FENCED = "fenced"
    BRACES = "braces"


def _is_number(value: Any) -> bool:
    # bool is a subclass of int; JSON true/false are not scores
    return isinstance(value, (int, float)) and not isinstance(value, bool)


class FieldSpec(BaseModel):
    """
    One required field of a model response, with its fallback value.

    Attributes:
        name:     JSON key in the model's response object
        kind:     Validation rule (see FieldKind)
        fallback: Value substituted when the response is incomplete
        bounds:   Inclusive (min, max) for NUMBER fields; None means unbounded
    """

    name: str
    kind: FieldKind
    fallback: Any
    bounds: Optional[Tuple[float, float]] = None

    model_config = {"frozen": True}

    @model_validator(mode="after")
    def check_fallback_matches_kind(self) -> "FieldSpec":
        if self.bounds is not None:
            if self.kind is not FieldKind.NUMBER:
                raise ValueError(f"Field '{self.name}': bounds only apply to number fields")
            low, high = self.bounds
            if low > high:
                raise ValueError(f"Field '{self.name}': bounds {self.bounds} are inverted")

        # The fallback must itself pass the field's rule, otherwise a fallback
        # response would be one the validator rejects.
        if not self.accepts(self.fallback):
            raise ValueError(
                f"Field '{self.name}': fallback {self.fallback!r} is not a valid {self.kind.value}"
            )
        return self

    def accepts(self, value: Any) -> bool:
        """Return True if `value` satisfies this field's rule."""
        if self.kind is FieldKind.TEXT:
            return isinstance(value, str) and value != ""

        if self.kind is FieldKind.NUMBER:
            if not _is_number(value):
                return False
            if isinstance(value, float) and not math.isfinite(value):
                return False
            if self.bounds is None:
                return True
            low, high = self.bounds
            return low <= value <= high

        # STRING_LIST: order matters, element types are not checked
        return isinstance(value, (list, tuple))

    def fallback_value(self) -> Any:
        """Fresh copy of the fallback so callers can mutate their result."""
        if self.kind is FieldKind.STRING_LIST:
            return list(self.fallback)
        return self.fallback


class SchemaDescriptor(BaseModel):
    """
    Ordered required fields for one endpoint shape.

    Attributes:
        name:       Registry name, used in logs (e.g. "fortune.alternate")
        fields:     Required fields, in the order the fallback object lists them
        extraction: How to cut the JSON candidate out of the completion
    """

    name: str
    fields: Tuple[FieldSpec, ...] = ()
    extraction: ExtractionMode = ExtractionMode.FENCED

    model_config = {"frozen": True}

    @model_validator(mode="after")
    def check_unique_names(self) -> "SchemaDescriptor":
        names = [spec.name for spec in self.fields]
        duplicates = {n for n in names if names.count(n) > 1}
        if duplicates:
            raise ValueError(f"Schema '{self.name}' declares duplicate fields: {sorted(duplicates)}")
        return self

    @property
    def field_names(self) -> Tuple[str, ...]:
        return tuple(spec.name for spec in self.fields)

    def fallback(self) -> Dict[str, Any]:
        """Build the complete fallback object, one entry per field, in order."""
        return {spec.name: spec.fallback_value() for spec in self.fields}


# ── Field constructors ────────────────────────────────────────────────────
# Keep the registry table readable: one call per row.

def text(name: str, fallback: str) -> FieldSpec:
    return FieldSpec(name=name, kind=FieldKind.TEXT, fallback=fallback)


def number(
    name: str,
    fallback: float,
    bounds: Optional[Tuple[float, float]] = None,
) -> FieldSpec:
    return FieldSpec(name=name, kind=FieldKind.NUMBER, fallback=fallback, bounds=bounds)


def string_list(name: str, fallback: Tuple[str, ...]) -> FieldSpec:
    return FieldSpec(name=name, kind=FieldKind.STRING_LIST, fallback=tuple(fallback))
