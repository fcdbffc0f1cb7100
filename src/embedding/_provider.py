"""Embedding provider collaborators.

EmbeddingClient depends only on the ``EmbeddingProvider`` protocol: an async
``embed(text) -> vector`` call that either succeeds, raises, or hangs.
``HttpEmbeddingProvider`` is a concrete provider for OpenAI-compatible
``/embeddings`` endpoints.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

import aiohttp

from src.embedding._exceptions import (
    EmbeddingProviderError,
    MalformedEmbeddingResponseError,
    TransientEmbeddingError,
)
from src.utils._logging import get_logger

if TYPE_CHECKING:
    from collections.abc import Sequence

    from src.embedding._models import EmbeddingSettings

_log = get_logger(__name__)

_TRANSIENT_STATUSES = frozenset({408, 429, 500, 502, 503, 504})


@runtime_checkable
class EmbeddingProvider(Protocol):
    """Async text -> vector call."""

    async def embed(self, text: str) -> Sequence[float]: ...


class HttpEmbeddingProvider:
    """aiohttp client for an OpenAI-compatible embeddings endpoint.

    Must be used as an async context manager so the session is closed::

        async with HttpEmbeddingProvider(settings) as provider:
            vector = await provider.embed("hello")
    """

    def __init__(self, settings: EmbeddingSettings) -> None:
        self._settings = settings
        self._url = f"{settings.base_url.rstrip('/')}/embeddings"
        self._session: aiohttp.ClientSession | None = None

    async def __aenter__(self) -> HttpEmbeddingProvider:
        headers = {"Content-Type": "application/json"}
        if self._settings.api_key:
            headers["Authorization"] = f"Bearer {self._settings.api_key}"
        self._session = aiohttp.ClientSession(headers=headers)
        return self

    async def __aexit__(self, *exc: object) -> None:
        if self._session:
            await self._session.close()
            self._session = None

    async def embed(self, text: str) -> list[float]:
        """POST one text and return its embedding.

        Raises:
            TransientEmbeddingError: On 408/429/5xx responses.
            EmbeddingProviderError: On other 4xx responses or misuse.
            MalformedEmbeddingResponseError: If the body has no embedding.
        """
        if not self._session:
            msg = "HttpEmbeddingProvider must be used as async context manager"
            raise EmbeddingProviderError(msg)

        payload = {"model": self._settings.model, "input": text}
        _log.debug("embedding_request", url=self._url, chars=len(text))

        async with self._session.post(self._url, json=payload) as resp:
            if resp.status in _TRANSIENT_STATUSES:
                msg = f"HTTP {resp.status} from embedding provider"
                raise TransientEmbeddingError(msg)
            if resp.status >= 400:
                msg = f"HTTP {resp.status} from embedding provider"
                raise EmbeddingProviderError(msg)
            try:
                body = await resp.json(content_type=None)
            except ValueError as exc:
                msg = f"Embedding response is not JSON: {exc}"
                raise MalformedEmbeddingResponseError(msg) from exc

        return _extract_vector(body)


def _extract_vector(body: Any) -> list[float]:
    """Pull ``data[0].embedding`` out of an embeddings response."""
    try:
        vector = body["data"][0]["embedding"]
    except (KeyError, IndexError, TypeError) as exc:
        msg = f"Unexpected embedding response shape: {type(body).__name__}"
        raise MalformedEmbeddingResponseError(msg) from exc
    if not isinstance(vector, list):
        msg = f"Embedding must be a list, got {type(vector).__name__}"
        raise MalformedEmbeddingResponseError(msg)
    return vector
