"""Pipeline step functions: read documents, run engine operations, write results"""

from datetime import datetime
from pathlib import Path
from typing import Optional

from smartblocks.core.export import write_sidecar
from smartblocks.core.models import (
    AIResponse,
    BatchResult,
    Block,
    DocumentStats,
    ExtractionResult,
    ReorderResult,
)
from smartblocks.core.mutate import apply_ai_metadata, remove_block, reorder_document
from smartblocks.core.parse import discover_files, parse_document, read_document, scan_spans
from smartblocks.engine.summary import SummaryEngine


def run_parse(path: Path) -> list[tuple[Path, list[Block]]]:
    """Parse every markdown file under path. Returns (file, blocks) pairs."""
    results = []
    for p in discover_files(path):
        try:
            _, blocks = read_document(p)
        except ValueError as e:
            raise ValueError(f"Failed to parse {p}: {e}") from e
        results.append((p, blocks))
    return results


async def run_extract(
    engine: SummaryEngine,
    path: Path,
    block_type: Optional[str] = None,
    min_length: Optional[int] = None,
    max_length: Optional[int] = None,
    tags: Optional[list[str]] = None,
    ) -> ExtractionResult:
    """Extract the blocks of one file that match every filter."""
    text = path.read_text(encoding='utf-8')
    return await engine.extract_blocks(text, block_type, min_length, max_length, tags)


async def run_summarize(
    engine: SummaryEngine,
    path: Path,
    block_id: Optional[str] = None,
    ) -> list[tuple[Block, AIResponse]]:
    """Summarize one block (block_id) or every block of a file.

    Raises LookupError when block_id is given but absent.
    """
    _, blocks = read_document(path)
    if block_id is not None:
        blocks = [b for b in blocks if b.id == block_id]
        if not blocks:
            raise LookupError(f"Block with ID {block_id} not found")
    return [(b, await engine.generate_summary(b)) for b in blocks]


async def run_reorder(engine: SummaryEngine, path: Path) -> tuple[str, str, ReorderResult]:
    """Compute the suggested order for a file. Returns (original_text, reordered_text, result)."""
    text, blocks = read_document(path)
    result = await engine.reorder_blocks(blocks)
    reordered = reorder_document(text, [b.id for b in result.reordered_blocks])
    return text, reordered, result


def run_remove(path: Path, block_id: str) -> tuple[str, str]:
    """Return (original_text, text without block_id). Raises LookupError when absent.

    Any marker counts, including a trailing one that parse_document skips.
    """
    text = path.read_text(encoding='utf-8')
    _, spans = scan_spans(text)
    if not any(s.marker.id == block_id for s in spans):
        raise LookupError(f"Block with ID {block_id} not found")
    return text, remove_block(text, block_id)


def run_stats(path: Path) -> DocumentStats:
    """Count a file's blocks by type, AI-generated blocks, and content size."""
    text, blocks = read_document(path)
    by_type: dict[str, int] = {}
    for b in blocks:
        by_type[b.type.value] = by_type.get(b.type.value, 0) + 1
    content_length = sum(len(b.content) for b in blocks)
    return DocumentStats(
        path=str(path),
        size=path.stat().st_size,
        lines=len(text.split('\n')),
        words=len(text.split()),
        total_blocks=len(blocks),
        blocks_by_type=by_type,
        ai_generated=sum(1 for b in blocks if b.ai_generated),
        total_content_length=content_length,
        average_block_length=round(content_length / len(blocks)) if blocks else 0,
    )


def _fold_results(blocks: list[Block], operations: list[str], batch: BatchResult) -> None:
    """Copy successful batch outputs onto the blocks' AI metadata.

    Results are block-major, so they are matched to blocks by position;
    block ids may repeat.
    """
    for i, item in enumerate(batch.results):
        block = blocks[i // len(operations)]
        if not item.success or block.metadata is None:
            continue
        if item.operation == 'metadata':
            apply_ai_metadata(block, item.data)
            continue
        ai_metadata = block.metadata.ai_metadata.model_copy(update={"last_processed": datetime.now()})
        if item.operation == 'summarize':
            ai_metadata.summary = item.data.data['summary']
        elif item.operation == 'embed':
            ai_metadata.embedding = item.data
        apply_ai_metadata(block, ai_metadata)


async def run_process(
    engine: SummaryEngine,
    paths: list[Path],
    operations: list[str],
    output_dir: Optional[Path] = None,
    ) -> list[tuple[Path, Path, BatchResult]]:
    """Batch-process every block of every file and write one sidecar per file.

    Returns (source_path, sidecar_path, batch) triples.
    """
    results = []
    for path in paths:
        for p in discover_files(path):
            text = p.read_text(encoding='utf-8')
            blocks = parse_document(text)
            batch = await engine.batch_process(blocks, operations)
            _fold_results(blocks, operations, batch)
            sidecar = write_sidecar(p, blocks, batch, output_dir)
            results.append((p, sidecar, batch))
    return results
