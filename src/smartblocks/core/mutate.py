"""Single-block mutations that rewrite document text"""

from typing import Optional

from smartblocks.core.errors import BlockNotFoundError
from smartblocks.core.marker import generate_marker
from smartblocks.core.models import AIMetadata, Block, ExtractedBlock
from smartblocks.core.parse import block_from_span, scan_spans, split_lines


def _block_lines(block: Block) -> list[str]:
    return [generate_marker(block), *block.content.split('\n')]


def insert_block(text: str, block: Block, position: Optional[int] = None) -> str:
    """Insert block (marker, content, blank line) at a line index, or append it.

    Appends when position is None or past the last line.
    """
    lines = split_lines(text)
    block_lines = [*_block_lines(block), '']

    if position is None or position >= len(lines):
        return text + '\n' + '\n'.join(block_lines)

    lines[position:position] = block_lines
    return '\n'.join(lines)


def extract_block(text: str, block_id: str) -> ExtractedBlock:
    """Cut the first block with block_id out of text.

    Every other line, including later blocks, is kept in remaining_content.
    block is None when no marker carries block_id.
    """
    preamble, spans = scan_spans(text)
    remaining = list(preamble)
    block = None

    for position, span in enumerate(spans):
        if block is None and span.marker.id == block_id:
            block = block_from_span(span, position)
        else:
            remaining.extend(span.lines)

    return ExtractedBlock(block=block, remaining_content='\n'.join(remaining))


def update_block(text: str, block: Block) -> str:
    """Replace the stored block with the same id; the new version is appended at the end."""
    extracted = extract_block(text, block.id)
    if extracted.block is None:
        raise BlockNotFoundError(block.id)
    return extracted.remaining_content + '\n' + '\n'.join(_block_lines(block))


def remove_block(text: str, block_id: str) -> str:
    """Return text without the block's marker and content."""
    return extract_block(text, block_id).remaining_content


def reorder_document(text: str, ordered_ids: list[str]) -> str:
    """Rewrite text so block spans follow ordered_ids; raw span text is preserved.

    Blocks not named in ordered_ids keep their relative order after the named ones.
    """
    preamble, spans = scan_spans(text)
    rank = {block_id: i for i, block_id in enumerate(ordered_ids)}
    ordered = sorted(spans, key=lambda s: rank.get(s.marker.id, len(rank)))

    parts = ['\n'.join(preamble)] if preamble else []
    for span in ordered:
        lines = list(span.lines)
        # keep a separating blank line between spans
        if lines[-1].strip():
            lines.append('')
        parts.append('\n'.join(lines))
    return '\n'.join(parts).rstrip('\n') + ('\n' if text.endswith('\n') else '')


def apply_ai_metadata(block: Block, ai_metadata: AIMetadata) -> Block:
    """Store processed AI metadata on a block and record the edit."""
    block.metadata.ai_metadata = ai_metadata
    block.metadata.usage.edit_count += 1
    block.metadata.usage.last_edited = ai_metadata.last_processed
    block.updated_at = ai_metadata.last_processed
    block.version += 1
    return block
