"""SHA-256 helpers for content fingerprints and feature hashing"""

import hashlib


def sha256(content: str) -> str:
    """Return hex-encoded SHA-256 hash of content (64 chars)."""
    return hashlib.sha256(content.encode("utf-8")).hexdigest()


def hash_bucket(token: str, buckets: int) -> tuple[int, float]:
    """Map a token to (bucket index, +1.0 or -1.0 sign), stable across processes."""
    digest = int(sha256(token), 16)
    return digest % buckets, 1.0 if (digest >> 255) & 1 else -1.0
