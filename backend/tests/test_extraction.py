"""
FaceReader Backend — JSON Candidate Extraction Tests
======================================================

What we test:
    ✅ Fenced blocks are reduced to their body
    ✅ Line breaks are folded into spaces
    ✅ Text without a fence passes through (trimmed)
    ✅ Brace extraction is greedy and returns None without braces
"""

from facereader.analysis.extraction import extract_braces, strip_fences


class TestStripFences:

    def test_fenced_block_body_is_kept(self):
        raw = 'Here is the result:\n```json\n{"a": 1}\n```\nHope this helps!'
        assert strip_fences(raw) == '{"a": 1}'

    def test_unfenced_text_is_trimmed(self):
        assert strip_fences('   {"a": 1}  \n') == '{"a": 1}'

    def test_line_breaks_become_spaces(self):
        raw = '{"a":\r\n"x",\r"b":\n"y"}'
        assert strip_fences(raw) == '{"a": "x", "b": "y"}'

    def test_first_fenced_block_wins(self):
        raw = '```json\n{"first": true}\n```\n```json\n{"second": true}\n```'
        assert strip_fences(raw) == '{"first": true}'

    def test_plain_fence_without_json_tag_is_not_stripped(self):
        raw = '```\n{"a": 1}\n```'
        assert strip_fences(raw) == '``` {"a": 1} ```'

    def test_prose_passes_through(self):
        assert strip_fences("not json at all") == "not json at all"


class TestExtractBraces:

    def test_object_inside_prose(self):
        raw = 'The emotion is: {"primary": "joy"} as shown.'
        assert extract_braces(raw) == '{"primary": "joy"}'

    def test_greedy_spans_first_to_last_brace(self):
        raw = 'a {"x": {"y": 1}} b {"z": 2} c'
        assert extract_braces(raw) == '{"x": {"y": 1}} b {"z": 2}'

    def test_no_braces_returns_none(self):
        assert extract_braces("I can't analyze this image.") is None
