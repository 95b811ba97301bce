"""Shared fixtures for core unit tests"""

from datetime import datetime

import pytest

from smartblocks.core.models import Block, BlockMetadata


SAMPLE_DOC = """\
# Reading notes

Loose text before any block is ignored.

<!-- @block id=intro type=note tags="reading,ideas" -->
Books shape how we think.

<!-- @block id=sum-1 type=summary aiGenerated=true confidence=0.9 title="Key points" -->
Short summary of the chapter.

<!-- @block id=x-1 type=extract -->
A quoted passage from the book.
"""


@pytest.fixture(name="sample_doc")
def sample_doc_fixture():
    return SAMPLE_DOC


@pytest.fixture(name="make_block")
def make_block_fixture():
    """Factory for blocks with sensible defaults; keyword overrides pass through."""
    def _make(id="b1", type="note", content="Some content.", **kwargs):
        metadata = kwargs.pop("metadata", None) or BlockMetadata(**kwargs.pop("meta", {}))
        return Block(id=id, type=type, content=content, metadata=metadata, **kwargs)
    return _make


@pytest.fixture(name="t0")
def t0_fixture():
    return datetime(2024, 1, 1, 12, 0, 0)
