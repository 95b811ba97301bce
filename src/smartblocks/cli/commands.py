"""CLI command implementations"""

import asyncio
import json
import logging
from pathlib import Path
from typing import Annotated, Optional

import typer

from smartblocks.config import Settings, load_config
from smartblocks.core.errors import SmartBlockError
from smartblocks.core.export import build_json, build_markdown
from smartblocks.core.pipeline import (
    run_extract,
    run_parse,
    run_process,
    run_remove,
    run_reorder,
    run_stats,
    run_summarize,
)
from smartblocks.core.utils.diff import document_diff
from smartblocks.core.validate import validate_block
from smartblocks.engine.batch import make_executor
from smartblocks.engine.service import make_service
from smartblocks.engine.summary import SummaryEngine


PREVIEW_CHARS = 50


def _fail(msg: str, cause: Exception = None) -> None:
    """Print a user-friendly error to stderr and exit 1."""
    typer.echo(f"Error: {msg}", err=True)
    if cause:
        typer.echo(f"  {cause}", err=True)
    raise typer.Exit(1)


def _settings(overrides: dict = None, verbose: bool = False) -> Settings:
    """Load config and configure logging, with standard CLI error handling."""
    try:
        settings = load_config(overrides=overrides)
    except ValueError as e:
        _fail(str(e))
    logging.basicConfig(
        level=logging.DEBUG if verbose else settings.log_level,
        format="%(levelname)s %(name)s: %(message)s",
    )
    return settings


def _engine(settings: Settings) -> SummaryEngine:
    return SummaryEngine(
        service=make_service(settings),
        settings=settings,
        executor=make_executor(settings.batch_concurrency),
    )


def _preview(text: str) -> str:
    text = " ".join(text.split())
    return text if len(text) <= PREVIEW_CHARS else f"{text[:PREVIEW_CHARS]}..."


def _write_or_echo(text: str, out: Optional[Path], label: str) -> None:
    if out is None:
        typer.echo(text)
        return
    out.parent.mkdir(parents=True, exist_ok=True)
    out.write_text(text, encoding='utf-8')
    typer.echo(f"{label} to {out}")


def _split_csv(value: Optional[str]) -> Optional[list[str]]:
    if not value:
        return None
    return [v.strip() for v in value.split(',') if v.strip()]


Verbose = Annotated[bool, typer.Option("--verbose", "-v", help="Debug logging")]


def parse_cmd(
    path: Annotated[Path, typer.Argument(exists=True, help="File or directory to parse")],
    out: Annotated[Optional[Path], typer.Option("--out", "-o", help="Write parsed blocks to this file")] = None,
    fmt: Annotated[str, typer.Option("--format", "-f", help="json or markdown")] = "json",
    verbose: Verbose = False,
    ):
    """Parse smart blocks from markdown files."""
    _settings(verbose=verbose)
    if fmt not in ("json", "markdown"):
        _fail(f"Unsupported format: {fmt}")
    try:
        parsed = run_parse(path)
    except ValueError as e:
        _fail(str(e))

    if out is not None:
        blocks = [b for _, file_blocks in parsed for b in file_blocks]
        text = build_json(blocks) if fmt == "json" else build_markdown(blocks)
        _write_or_echo(text, out, f"Parsed {len(blocks)} block(s)")
        return

    for src, blocks in parsed:
        typer.echo(f"Found {len(blocks)} smart block(s) in {src}:")
        for i, b in enumerate(blocks, start=1):
            typer.echo(f"  {i}. {b.id} ({b.type.value}) - {_preview(b.content)}")


def validate_cmd(
    path: Annotated[Path, typer.Argument(exists=True, help="File or directory to validate")],
    verbose: Verbose = False,
    ):
    """Validate every block; exits 1 when any block is invalid."""
    _settings(verbose=verbose)
    try:
        parsed = run_parse(path)
    except ValueError as e:
        _fail(str(e))

    invalid = 0
    for src, blocks in parsed:
        for b in blocks:
            result = validate_block(b)
            if not result.is_valid:
                invalid += 1
                typer.echo(f"  {src}: {b.id}: {'; '.join(result.errors)}")
    total = sum(len(blocks) for _, blocks in parsed)
    typer.echo(f"Validated {total} block(s): {invalid} invalid")
    if invalid:
        raise typer.Exit(1)


def extract_cmd(
    path: Annotated[Path, typer.Argument(exists=True, dir_okay=False, help="Markdown file")],
    block_type: Annotated[Optional[str], typer.Option("--type", "-t", help="Filter by block type")] = None,
    min_length: Annotated[Optional[int], typer.Option("--min-length", "-m", help="Minimum content length")] = None,
    max_length: Annotated[Optional[int], typer.Option("--max-length", "-M", help="Maximum content length")] = None,
    tags: Annotated[Optional[str], typer.Option("--tags", "-g", help="Comma-separated tags to filter by")] = None,
    out: Annotated[Optional[Path], typer.Option("--out", "-o", help="Write extracted blocks to this file")] = None,
    verbose: Verbose = False,
    ):
    """Extract blocks matching every filter from a markdown file."""
    settings = _settings(overrides={"min_length": min_length}, verbose=verbose)
    try:
        result = asyncio.run(run_extract(
            _engine(settings), path, block_type, settings.min_length, max_length, _split_csv(tags),
        ))
    except SmartBlockError as e:
        _fail(f"Failed to extract from {path}", e)

    stats = result.extraction_stats
    if out is not None:
        _write_or_echo(build_markdown(result.extracted_blocks), out, f"Extracted {stats.successful_extractions} block(s)")
    else:
        typer.echo(f"Extracted {stats.successful_extractions} block(s):")
        for i, b in enumerate(result.extracted_blocks, start=1):
            typer.echo(f"  {i}. {b.id} ({b.type.value}) - {_preview(b.content)}")
    if stats.failed_extractions:
        typer.echo(f"{stats.failed_extractions} block(s) could not be extracted", err=True)


def summarize_cmd(
    path: Annotated[Path, typer.Argument(exists=True, dir_okay=False, help="Markdown file")],
    block_id: Annotated[Optional[str], typer.Option("--block", "-b", help="Summarize only this block id")] = None,
    out: Annotated[Optional[Path], typer.Option("--out", "-o", help="Write summaries (JSON) to this file")] = None,
    verbose: Verbose = False,
    ):
    """Generate summaries for the smart blocks of a file."""
    settings = _settings(verbose=verbose)
    try:
        results = asyncio.run(run_summarize(_engine(settings), path, block_id))
    except (SmartBlockError, LookupError) as e:
        _fail(str(e))

    summaries = [
        {"block_id": b.id, "summary": r.data["summary"], "confidence": r.confidence}
        for b, r in results if r.success
    ]
    for b, r in results:
        if not r.success:
            typer.echo(f"  {b.id}: {r.error}", err=True)

    if out is not None:
        _write_or_echo(json.dumps(summaries, indent=2, ensure_ascii=False), out, f"Generated {len(summaries)} summaries")
        return
    typer.echo(f"Generated {len(summaries)} summaries:")
    for s in summaries:
        typer.echo(f"  {s['block_id']}: {s['summary']}")


def reorder_cmd(
    path: Annotated[Path, typer.Argument(exists=True, dir_okay=False, help="Markdown file")],
    preview: Annotated[bool, typer.Option("--preview", "-p", help="Only list suggestions")] = False,
    diff: Annotated[bool, typer.Option("--diff", help="Print a unified diff instead of the document")] = False,
    out: Annotated[Optional[Path], typer.Option("--out", "-o", help="Write reordered document to this file")] = None,
    verbose: Verbose = False,
    ):
    """Reorder blocks by priority and creation date."""
    settings = _settings(verbose=verbose)
    try:
        original, reordered, result = asyncio.run(run_reorder(_engine(settings), path))
    except SmartBlockError as e:
        _fail(f"Failed to reorder {path}", e)

    if preview:
        typer.echo("Reorder suggestions:")
        for s in result.reorder_suggestions:
            typer.echo(f"  Move block {s.block_id} to position {s.suggested_position}: {s.reason}")
        return
    if diff:
        typer.echo(document_diff(original, reordered, path.name) or "No changes.")
        return
    _write_or_echo(reordered, out, "Reordered content saved")


def remove_cmd(
    path: Annotated[Path, typer.Argument(exists=True, dir_okay=False, help="Markdown file")],
    block_id: Annotated[str, typer.Argument(help="Id of the block to remove")],
    out: Annotated[Optional[Path], typer.Option("--out", "-o", help="Write the result to this file")] = None,
    in_place: Annotated[bool, typer.Option("--in-place", "-i", help="Overwrite the source file")] = False,
    verbose: Verbose = False,
    ):
    """Remove a block's marker and content from a file."""
    _settings(verbose=verbose)
    try:
        _, remaining = run_remove(path, block_id)
    except (SmartBlockError, LookupError) as e:
        _fail(str(e))
    _write_or_echo(remaining, path if in_place else out, f"Removed block {block_id}, saved")


def process_cmd(
    paths: Annotated[list[Path], typer.Argument(exists=True, help="Files or directories to process")],
    operations: Annotated[str, typer.Option("--operations", "-O", help="Comma-separated: summarize,embed,metadata")] = "summarize",
    out_dir: Annotated[Optional[Path], typer.Option("--out-dir", "-d", help="Directory for sidecar metadata files")] = None,
    concurrency: Annotated[Optional[int], typer.Option("--concurrency", help="Concurrent jobs; 1 = sequential")] = None,
    verbose: Verbose = False,
    ):
    """Batch-process blocks and write a <name>.metadata.json sidecar per file."""
    settings = _settings(overrides={"batch_concurrency": concurrency}, verbose=verbose)
    ops = _split_csv(operations) or []
    try:
        results = asyncio.run(run_process(_engine(settings), paths, ops, out_dir))
    except SmartBlockError as e:
        _fail("Processing failed", e)

    for src, sidecar, batch in results:
        s = batch.stats
        typer.echo(f"  {src} -> {sidecar} ({s.successful} ok, {s.failed} failed, {s.processing_time}ms)")
    typer.echo(f"Processed {len(results)} file(s)")


def stats_cmd(
    path: Annotated[Path, typer.Argument(exists=True, dir_okay=False, help="Markdown file")],
    as_json: Annotated[bool, typer.Option("--json", "-j", help="Print statistics as JSON")] = False,
    verbose: Verbose = False,
    ):
    """Show block counts, type distribution and AI-generated blocks for a file."""
    _settings(verbose=verbose)
    try:
        stats = run_stats(path)
    except ValueError as e:
        _fail(f"Failed to get stats for {path}", e)

    if as_json:
        typer.echo(stats.model_dump_json(indent=2))
        return
    typer.echo(f"File: {path.name}")
    typer.echo(f"Size: {stats.size} bytes")
    typer.echo(f"Lines: {stats.lines}")
    typer.echo(f"Words: {stats.words}")
    typer.echo(f"Blocks: {stats.total_blocks}")
    typer.echo(f"Average length: {stats.average_block_length} characters")
    typer.echo("Block types:")
    for block_type, count in stats.blocks_by_type.items():
        typer.echo(f"  {block_type}: {count}")
    typer.echo(f"AI-generated blocks: {stats.ai_generated}")
