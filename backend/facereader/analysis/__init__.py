# Analysis package init
"""
FaceReader Backend — Analysis Normalization Core
==================================================

What:  Turns free-text vision-model completions into validated response
       objects, one schema per endpoint shape.
Why:   The only reusable logic in the backend. Everything else is a pass-through
       to storage, the database, or the model.

Module Inventory:
    - schema.py:     FieldSpec / SchemaDescriptor (declarative shapes + fallbacks)
    - extraction.py: Fence stripping and brace extraction
    - normalizer.py: Parse → validate → fallback pipeline
    - registry.py:   The static descriptor table and platform variant lookup
"""

from facereader.analysis.normalizer import NormalizationOutcome, normalize
from facereader.analysis.registry import get_schema
from facereader.analysis.schema import FieldKind, FieldSpec, SchemaDescriptor

__all__ = [
    "FieldKind",
    "FieldSpec",
    "NormalizationOutcome",
    "SchemaDescriptor",
    "get_schema",
    "normalize",
]
