"""Unified diffs between two versions of a document"""

import difflib


def document_diff(old: str, new: str, name: str = "document", context: int = 3) -> str:
    """Return a unified diff of old -> new labelled a/<name> and b/<name>; empty when identical."""
    return "".join(difflib.unified_diff(
        old.splitlines(keepends=True),
        new.splitlines(keepends=True),
        fromfile=f"a/{name}",
        tofile=f"b/{name}",
        n=context,
    ))
