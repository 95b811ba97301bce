"""Marker codec: parse and emit single `<!-- @block ... -->` lines"""

import re
from typing import Optional

from smartblocks.core.errors import MalformedMarkerError
from smartblocks.core.models import Block, MarkerAttributes


MARKER_RE = re.compile(r'<!--\s*@block\s+([^>]+?)\s*-->')
# key=value tokens; a quoted value may contain whitespace
ATTR_RE = re.compile(r'''(?:^|\s)([^\s=]+)=("[^"]*"|'[^']*'|\S+)''')
QUOTES_RE = re.compile(r'''^["']|["']$''')

RESERVED_ATTRIBUTES = {'id', 'type', 'tags', 'aiGenerated', 'confidence'}


def _enum_value(value) -> str:
    return getattr(value, 'value', value)


def _parse_attributes(attrs: str) -> dict[str, str]:
    """Return key -> unquoted value for each well-formed key=value token; others are skipped."""
    return {key: QUOTES_RE.sub('', value) for key, value in ATTR_RE.findall(attrs)}


def _parse_confidence(raw: Optional[str]) -> Optional[float]:
    if not raw:
        return None
    try:
        return float(raw)
    except ValueError:
        return None


def is_marker(line: str) -> bool:
    return MARKER_RE.search(line) is not None


def parse_marker(line: str) -> Optional[MarkerAttributes]:
    """Parse a marker line into its attributes, or None when the line is not a marker.

    Raises MalformedMarkerError when a marker is present but lacks id or type.
    """
    m = MARKER_RE.search(line)
    if not m:
        return None

    parsed = _parse_attributes(m.group(1))
    if not parsed.get('id') or not parsed.get('type'):
        raise MalformedMarkerError(
            f'Invalid block marker: missing required attributes (id, type) in "{line}"'
        )

    tags = None
    if parsed.get('tags'):
        tags = [t.strip() for t in parsed['tags'].split(',')]

    return MarkerAttributes(
        id=parsed['id'],
        type=parsed['type'],
        tags=tags,
        ai_generated=parsed.get('aiGenerated') == 'true',
        confidence=_parse_confidence(parsed.get('confidence')),
        custom_attributes={k: v for k, v in parsed.items() if k not in RESERVED_ATTRIBUTES},
    )


def generate_marker(block: Block) -> str:
    """Serialize a block's attributes into a marker line.

    aiGenerated is only written when true; custom fields are only written when
    they are non-blank strings.
    """
    attributes = [f'id={block.id}', f'type={_enum_value(block.type)}']

    if block.tags:
        attributes.append(f'tags="{",".join(block.tags)}"')
    if block.ai_generated:
        attributes.append('aiGenerated=true')
    if block.confidence is not None:
        attributes.append(f'confidence={block.confidence}')

    custom_fields = block.metadata.custom_fields if block.metadata else {}
    for key, value in custom_fields.items():
        if isinstance(value, str) and value.strip() and key not in RESERVED_ATTRIBUTES:
            quote = "'" if '"' in value else '"'
            attributes.append(f'{key}={quote}{value}{quote}')

    return f"<!-- @block {' '.join(attributes)} -->"
