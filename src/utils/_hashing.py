from __future__ import annotations

import hashlib
import re

_WHITESPACE_RE = re.compile(r"\s+")


def content_hash(data: str | bytes) -> str:
    """Return the SHA-256 hex digest of the given content."""
    if isinstance(data, str):
        data = data.encode("utf-8")
    return hashlib.sha256(data).hexdigest()


def normalize_query(query: str) -> str:
    """Trim, case-fold and collapse internal whitespace.

    Idempotent: ``normalize_query(normalize_query(q)) == normalize_query(q)``.
    """
    return _WHITESPACE_RE.sub(" ", query.strip()).casefold()


def cache_key(query: str) -> str:
    """64-char hex key identifying a query after normalization."""
    return content_hash(normalize_query(query))
