"""Unit tests for core/marker.py"""

import pytest

from smartblocks.core.errors import MalformedMarkerError
from smartblocks.core.marker import generate_marker, is_marker, parse_marker
from smartblocks.core.models import BlockMetadata


def test_parse_marker_required_attributes():
    """parse_marker returns id and type from a minimal marker."""
    m = parse_marker("<!-- @block id=a1 type=note -->")
    assert m.id == "a1"
    assert m.type == "note"
    assert m.tags is None
    assert m.ai_generated is False
    assert m.confidence is None
    assert m.custom_attributes == {}


@pytest.mark.parametrize("line", [
    "plain text",
    "<!-- a regular comment -->",
    "<!-- @block -->",
    "",
])
def test_parse_marker_non_marker_returns_none(line):
    """Lines that are not block markers yield None."""
    assert parse_marker(line) is None
    assert not is_marker(line)


@pytest.mark.parametrize("line", [
    "<!-- @block type=note -->",
    "<!-- @block id=a1 -->",
    "<!-- @block tags=x -->",
])
def test_parse_marker_missing_required_raises(line):
    """A marker without id or type is a hard parse failure."""
    with pytest.raises(MalformedMarkerError, match="missing required attributes"):
        parse_marker(line)


def test_parse_marker_tags_split_and_trimmed():
    """tags are split on commas and trimmed; duplicates are preserved."""
    m = parse_marker('<!-- @block id=a type=note tags="x, y,x" -->')
    assert m.tags == ["x", "y", "x"]


def test_parse_marker_strips_single_quotes():
    """Single-quoted values are unquoted like double-quoted ones."""
    m = parse_marker("<!-- @block id='a' type='summary' -->")
    assert (m.id, m.type) == ("a", "summary")


@pytest.mark.parametrize("raw,expected", [
    ("true", True),
    ("false", False),
    ("True", False),
    ("1", False),
])
def test_parse_marker_ai_generated_literal(raw, expected):
    """aiGenerated is true only for the literal string 'true'."""
    m = parse_marker(f"<!-- @block id=a type=note aiGenerated={raw} -->")
    assert m.ai_generated is expected


def test_parse_marker_confidence_float():
    """confidence is parsed as a float."""
    m = parse_marker("<!-- @block id=a type=note confidence=0.75 -->")
    assert m.confidence == pytest.approx(0.75)


def test_parse_marker_non_numeric_confidence_ignored():
    """A malformed confidence value is skipped rather than failing the marker."""
    m = parse_marker("<!-- @block id=a type=note confidence=high -->")
    assert m.confidence is None


def test_parse_marker_custom_attributes():
    """Unrecognized attributes are kept as custom attributes, quoted values may contain spaces."""
    m = parse_marker('<!-- @block id=a type=note title="Key points" category=books -->')
    assert m.custom_attributes == {"title": "Key points", "category": "books"}


def test_parse_marker_skips_malformed_tokens():
    """Tokens that are not key=value are silently skipped."""
    m = parse_marker("<!-- @block stray id=a = type=note empty= -->")
    assert (m.id, m.type) == ("a", "note")
    assert m.custom_attributes == {}


def test_parse_marker_inline_in_line():
    """A marker embedded in surrounding text is still recognized."""
    m = parse_marker("prefix <!--@block id=a type=custom--> suffix")
    assert m.id == "a"


def test_generate_marker_minimal(make_block):
    """Only id and type are emitted for a bare block."""
    block = make_block(id="a", type="note", meta={"custom_fields": {}})
    assert generate_marker(block) == "<!-- @block id=a type=note -->"


def test_generate_marker_full(make_block):
    """Tags, aiGenerated, confidence, and custom fields are emitted in order."""
    block = make_block(
        id="a", type="summary", tags=["x", "y"], ai_generated=True, confidence=0.5,
        meta={"custom_fields": {"title": "Key points"}},
    )
    assert generate_marker(block) == (
        '<!-- @block id=a type=summary tags="x,y" aiGenerated=true confidence=0.5 title="Key points" -->'
    )


def test_generate_marker_omits_false_ai_generated(make_block):
    """aiGenerated=false is never written."""
    block = make_block(ai_generated=False)
    assert "aiGenerated" not in generate_marker(block)


def test_generate_marker_skips_blank_custom_fields(make_block):
    """Blank custom field values are dropped."""
    block = make_block(meta={"custom_fields": {"title": "  ", "category": "books"}})
    marker = generate_marker(block)
    assert "title" not in marker
    assert 'category="books"' in marker


def test_custom_fields_must_be_strings():
    """Non-string custom fields are rejected when metadata is built."""
    with pytest.raises(ValueError):
        BlockMetadata(custom_fields={"count": 3})


@pytest.mark.parametrize("tags,ai_generated,confidence", [
    (["a"], False, 0.0),
    (["a", "b", "a"], True, 1.0),
    (["research", "todo"], True, 0.42),
])
def test_marker_round_trip(make_block, tags, ai_generated, confidence):
    """parse_marker(generate_marker(b)) reproduces id, type, tags, aiGenerated, confidence."""
    block = make_block(id="rt", type="extract", tags=tags, ai_generated=ai_generated, confidence=confidence)
    m = parse_marker(generate_marker(block))
    assert m.id == block.id
    assert m.type == block.type.value
    assert m.tags == block.tags
    assert m.ai_generated == block.ai_generated
    assert m.confidence == pytest.approx(block.confidence)


def test_parse_marker_keeps_blank_tag_elements():
    """Empty elements between commas are kept as blank tags."""
    m = parse_marker('<!-- @block id=a type=note tags="x,,y" -->')
    assert m.tags == ["x", "", "y"]


def test_generate_marker_single_quotes_embedded_double_quotes(make_block):
    """A custom value containing double quotes is written in single quotes and reads back intact."""
    block = make_block(meta={"custom_fields": {"title": 'say "hi" now'}})
    marker = generate_marker(block)
    assert "title='say \"hi\" now'" in marker
    assert parse_marker(marker).custom_attributes == {"title": 'say "hi" now'}


def test_custom_fields_reject_both_quote_kinds():
    """A value holding both quote characters cannot be written into a marker."""
    with pytest.raises(ValueError, match="both quote characters"):
        BlockMetadata(custom_fields={"title": "it's \"quoted\""})
