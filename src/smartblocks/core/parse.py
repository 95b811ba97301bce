"""Document scanning: split markdown text into marker spans and Block records"""

from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path

from pydantic import ValidationError

from smartblocks.core.errors import MalformedMarkerError
from smartblocks.core.marker import parse_marker
from smartblocks.core.models import Block, BlockMetadata, MarkerAttributes


MD_EXTENSIONS = {'.md', '.mdx'}


@dataclass
class BlockSpan:
    """Raw lines of one block: the marker line followed by its body lines."""
    marker: MarkerAttributes
    start: int                      # line index of the marker
    lines: list[str] = field(default_factory=list)

    @property
    def body(self) -> list[str]:
        return self.lines[1:]

    @property
    def content(self) -> str:
        return '\n'.join(self.body).strip()

    @property
    def text(self) -> str:
        return '\n'.join(self.lines)


def split_lines(text: str) -> list[str]:
    """Split on newlines, keeping a trailing empty line when text ends with one."""
    return text.split('\n')


def scan_spans(text: str) -> tuple[list[str], list[BlockSpan]]:
    """Return (preamble, spans): lines before the first marker, then one span per marker."""
    preamble: list[str] = []
    spans: list[BlockSpan] = []

    for i, line in enumerate(split_lines(text)):
        marker = parse_marker(line)
        if marker is not None:
            spans.append(BlockSpan(marker=marker, start=i, lines=[line]))
        elif spans:
            spans[-1].lines.append(line)
        else:
            preamble.append(line)

    return preamble, spans


def default_metadata(marker: MarkerAttributes) -> BlockMetadata:
    """Build metadata for a freshly parsed block from its marker attributes."""
    custom = marker.custom_attributes
    return BlockMetadata(
        title=custom.get('title'),
        description=custom.get('description'),
        keywords=list(marker.tags or []),
        category=custom.get('category'),
        custom_fields=dict(custom),
    )


def new_block(marker: MarkerAttributes, content: str, position: int) -> Block:
    """Construct a Block from marker attributes. Raises ValidationError on an unknown type."""
    now = datetime.now()
    return Block(
        id=marker.id,
        type=marker.type,
        content=content,
        position=position,
        tags=list(marker.tags or []),
        ai_generated=marker.ai_generated,
        confidence=marker.confidence,
        created_at=now,
        updated_at=now,
        metadata=default_metadata(marker),
    )


def block_from_span(span: BlockSpan, position: int) -> Block:
    """Like new_block, but reports an unsupported type as a malformed marker."""
    try:
        return new_block(span.marker, span.content, position)
    except ValidationError as e:
        raise MalformedMarkerError(
            f'Invalid block marker: unsupported attributes for block "{span.marker.id}" '
            f'at line {span.start + 1}: {e.errors()[0]["msg"]}'
        ) from e


def parse_document(text: str) -> list[Block]:
    """Parse every marker-delimited block in text, in document order.

    Lines before the first marker are not attached to any block. The final
    block is dropped when the marker is the very last line of the text.
    """
    _, spans = scan_spans(text)
    blocks: list[Block] = []
    for i, span in enumerate(spans):
        if i == len(spans) - 1 and not span.body:
            break
        blocks.append(block_from_span(span, len(blocks)))
    return blocks


def discover_files(path: Path) -> list[Path]:
    """Return sorted .md/.mdx files under path, or [path] if a single file."""
    if path.is_file():
        return [path] if path.suffix in MD_EXTENSIONS else []
    return sorted(p for p in path.rglob('*') if p.suffix in MD_EXTENSIONS)


def read_document(path: Path) -> tuple[str, list[Block]]:
    """Read a markdown file and return (text, blocks)."""
    text = path.read_text(encoding='utf-8')
    return text, parse_document(text)
