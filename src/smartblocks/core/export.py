"""Export helpers: block JSON, marker markdown, and sidecar metadata files"""

import json
from datetime import datetime
from pathlib import Path
from typing import Optional

from smartblocks.core.marker import generate_marker
from smartblocks.core.models import BatchResult, Block


def build_markdown(blocks: list[Block]) -> str:
    """Serialize blocks back to marker-delimited markdown, one blank line between blocks."""
    return "\n".join(f"{generate_marker(b)}\n{b.content}\n" for b in blocks)


def build_json(blocks: list[Block], indent: int = 2) -> str:
    return json.dumps([b.model_dump(mode='json') for b in blocks], indent=indent, ensure_ascii=False)


def metadata_path(path: Path) -> Path:
    """Sidecar location for a document: <dir>/<stem>.metadata.json."""
    return path.with_name(f"{path.stem}.metadata.json")


def build_sidecar(path: Path, blocks: list[Block], batch: Optional[BatchResult] = None) -> dict:
    """Build the sidecar JSON dict: source path, block count, blocks, and batch stats.

    Batch item data is omitted; it is already folded into each block's metadata.
    """
    sidecar = {
        "path": str(path),
        "processed_at": datetime.now().isoformat(),
        "block_count": len(blocks),
        "blocks": [b.model_dump(mode='json') for b in blocks],
    }
    if batch is not None:
        sidecar["stats"] = batch.stats.model_dump()
        sidecar["failures"] = [
            {"block_id": r.block_id, "operation": r.operation, "error": r.error}
            for r in batch.results if not r.success
        ]
    return sidecar


def write_sidecar(
    path: Path,
    blocks: list[Block],
    batch: Optional[BatchResult] = None,
    output_dir: Optional[Path] = None,
    ) -> Path:
    """Write the sidecar next to the document, or under output_dir. Returns the sidecar path."""
    dest = metadata_path(path)
    if output_dir is not None:
        output_dir.mkdir(parents=True, exist_ok=True)
        dest = output_dir / dest.name
    dest.write_text(json.dumps(build_sidecar(path, blocks, batch), indent=2, ensure_ascii=False), encoding='utf-8')
    return dest
