"""Truncates fused chunks and joins them into one context string."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable

    from src.retrieval._models import FusedChunk


class ContextCompressor:
    """Keep the first ``max_chars`` of each chunk, marking anything cut off."""

    def __init__(
        self,
        max_chars: int = 200,
        marker: str = "... [Compressed]",
        separator: str = "\n\n---\n\n",
    ) -> None:
        if max_chars <= 0:
            msg = "max_chars must be positive"
            raise ValueError(msg)
        self._max_chars = max_chars
        self._marker = marker
        self._separator = separator

    def compress_text(self, text: str) -> str:
        if len(text) <= self._max_chars:
            return text
        return text[: self._max_chars] + self._marker

    def assemble(self, chunks: Iterable[FusedChunk]) -> str:
        """Compress every chunk's text and join them in rank order."""
        return self._separator.join(self.compress_text(fc.text) for fc in chunks)
