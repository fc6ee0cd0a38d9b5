"""
FaceReader Backend — JSON Candidate Extraction
================================================

What:  Cuts the part of a model completion that should be JSON out of the
       surrounding noise (markdown fences, commentary, line breaks).
Why:   Vision models wrap JSON in ```json fences or prose even when told
       not to. Removing the wrapper must never alter the JSON itself.
How:   Pure string functions; neither of them raises. Text with no JSON in
       it passes through and fails later, in the parser.
"""

import re
from typing import Optional

# Non-greedy so the first fenced block wins when a completion has several
_JSON_FENCE_RE = re.compile(r"```json\s*([\s\S]*?)\s*```")

# Greedy: from the first '{' to the last '}' in the text
_JSON_OBJECT_RE = re.compile(r"\{[\s\S]*\}")

_LINE_BREAK_RE = re.compile(r"\r\n|\r|\n")


def strip_fences(raw_text: str) -> str:
    """
    Return the best JSON candidate from a completion.

    Steps:
        1. If a ```json fenced block exists, keep only its body;
           otherwise keep the whole text.
        2. Replace every line break (\\r\\n, \\r, \\n) with one space.
           Raw line breaks inside JSON strings are illegal, and models
           emit them often; as spaces they parse.
        3. Trim leading/trailing whitespace.

    Example:
        >>> strip_fences('Here you go:\\n```json\\n{"a": 1}\\n```')
        '{"a": 1}'
    """
    match = _JSON_FENCE_RE.search(raw_text)
    candidate = match.group(1) if match else raw_text
    return _LINE_BREAK_RE.sub(" ", candidate).strip()


def extract_braces(raw_text: str) -> Optional[str]:
    """
    Return the greedy '{...}' span of a completion, or None if there is none.

    Used by free-form endpoints (emotion analysis) whose prompt does not ask
    for fenced output.
    """
    match = _JSON_OBJECT_RE.search(raw_text)
    return match.group(0) if match else None
