"""Tests for HttpEmbeddingProvider using aioresponses."""

from __future__ import annotations

import pytest
from aioresponses import aioresponses
from yarl import URL

from src.embedding._client import EmbeddingClient
from src.embedding._exceptions import (
    EmbeddingProviderError,
    MalformedEmbeddingResponseError,
    TransientEmbeddingError,
)
from src.embedding._models import EmbeddingSettings
from src.embedding._provider import EmbeddingProvider, HttpEmbeddingProvider

BASE_URL = "http://embeddings.test/v1"
URL_EMBED = f"{BASE_URL}/embeddings"


@pytest.fixture()
def settings() -> EmbeddingSettings:
    return EmbeddingSettings(base_url=BASE_URL + "/", model="test-model", api_key="k")


class TestHttpEmbeddingProvider:
    def test_satisfies_protocol(self, settings) -> None:
        assert isinstance(HttpEmbeddingProvider(settings), EmbeddingProvider)

    async def test_success(self, settings) -> None:
        """A 200 response with an embedding returns the vector."""
        with aioresponses() as m:
            m.post(URL_EMBED, payload={"data": [{"embedding": [0.5, 0.25]}]})
            async with HttpEmbeddingProvider(settings) as provider:
                vector = await provider.embed("hello")

        assert vector == [0.5, 0.25]

    async def test_sends_model_and_input(self, settings) -> None:
        """The request body carries the model name and input text."""
        with aioresponses() as m:
            m.post(URL_EMBED, payload={"data": [{"embedding": [0.5]}]})
            async with HttpEmbeddingProvider(settings) as provider:
                await provider.embed("hello")

            call = m.requests[("POST", URL(URL_EMBED))][0]
        assert call.kwargs["json"] == {"model": "test-model", "input": "hello"}

    @pytest.mark.parametrize("status", [408, 429, 500, 502, 503, 504])
    async def test_transient_statuses(self, settings, status: int) -> None:
        """408, 429 and 5xx responses raise TransientEmbeddingError."""
        with aioresponses() as m:
            m.post(URL_EMBED, status=status)
            async with HttpEmbeddingProvider(settings) as provider:
                with pytest.raises(TransientEmbeddingError, match=str(status)):
                    await provider.embed("hello")

    @pytest.mark.parametrize("status", [400, 401, 404])
    async def test_client_errors_not_transient(self, settings, status: int) -> None:
        """Other 4xx responses raise a non-retryable provider error."""
        with aioresponses() as m:
            m.post(URL_EMBED, status=status)
            async with HttpEmbeddingProvider(settings) as provider:
                with pytest.raises(EmbeddingProviderError):
                    await provider.embed("hello")

    async def test_non_json_body(self, settings) -> None:
        """A body that is not JSON is a malformed response."""
        with aioresponses() as m:
            m.post(URL_EMBED, body="<html>oops</html>")
            async with HttpEmbeddingProvider(settings) as provider:
                with pytest.raises(MalformedEmbeddingResponseError):
                    await provider.embed("hello")

    @pytest.mark.parametrize(
        "payload",
        [{"data": []}, {"result": 1}, {"data": [{"embedding": "nope"}]}],
    )
    async def test_unexpected_shape(self, settings, payload) -> None:
        """JSON without a usable embedding is a malformed response."""
        with aioresponses() as m:
            m.post(URL_EMBED, payload=payload)
            async with HttpEmbeddingProvider(settings) as provider:
                with pytest.raises(MalformedEmbeddingResponseError):
                    await provider.embed("hello")

    async def test_requires_context_manager(self, settings) -> None:
        """Calling embed outside async with raises."""
        provider = HttpEmbeddingProvider(settings)
        with pytest.raises(EmbeddingProviderError, match="context manager"):
            await provider.embed("hello")


class TestClientOverHttp:
    async def test_retries_transient_http_status(self, settings) -> None:
        """The client retries a 503 from the HTTP provider."""
        delays: list[float] = []

        async def fake_sleep(seconds: float) -> None:
            delays.append(seconds)

        with aioresponses() as m:
            m.post(URL_EMBED, status=503)
            m.post(URL_EMBED, payload={"data": [{"embedding": [0.5, 0.5]}]})
            async with HttpEmbeddingProvider(settings) as provider:
                client = EmbeddingClient(provider, settings, sleep=fake_sleep)
                vector = await client.embed("hello")

        assert vector == [0.5, 0.5]
        assert delays == [2.0]
