"""Unit tests for the OpenAI embeddings client: batching, ordering and error mapping."""

import asyncio
from types import SimpleNamespace

import httpx
import openai
import pytest

from conftest import hash_vector
from persona_rag.embeddings.client import EmbeddingsClient
from persona_rag.errors import BackendUnavailable, EmptyInput, PersonaRagError, RateLimited

EMBEDDINGS_URL = "https://api.openai.com/v1/embeddings"


# ── Fakes ──


class FakeEmbeddingsAPI:
    """Mimics `client.embeddings.create`, returning items in reverse index order."""

    def __init__(self, error: Exception | None = None, drop_last: bool = False):
        self.error = error
        self.drop_last = drop_last
        self.calls = []
        self.in_flight = 0
        self.max_in_flight = 0

    async def create(self, model, input, **kwargs):
        self.calls.append({"model": model, "input": list(input), **kwargs})
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            # later batches finish first
            await asyncio.sleep(0.01 * (10 - len(self.calls)))
            if self.error:
                raise self.error
            data = [SimpleNamespace(index=i, embedding=hash_vector(t)) for i, t in enumerate(input)]
            if self.drop_last:
                data = data[:-1]
            return SimpleNamespace(data=list(reversed(data)))
        finally:
            self.in_flight -= 1


def make_client(api: FakeEmbeddingsAPI, **kwargs) -> EmbeddingsClient:
    return EmbeddingsClient(model="test-embed", client=SimpleNamespace(embeddings=api), **kwargs)


def _response(status: int) -> httpx.Response:
    return httpx.Response(status, request=httpx.Request("POST", EMBEDDINGS_URL))


# ── Tests ──


@pytest.mark.asyncio
async def test_embed_texts_preserves_order_across_concurrent_batches():
    api = FakeEmbeddingsAPI()
    client = make_client(api, batch_size=2, concurrency=2)
    texts = [f"chunk {i}" for i in range(7)]

    vectors = await client.embed_texts(texts)

    assert vectors == [hash_vector(t) for t in texts]
    assert len(api.calls) == 4
    assert api.max_in_flight <= 2


@pytest.mark.asyncio
async def test_embed_text_returns_single_vector():
    api = FakeEmbeddingsAPI()
    client = make_client(api)

    vector = await client.embed_text("What does Alice love?")

    assert vector == hash_vector("What does Alice love?")
    assert api.calls[0]["input"] == ["What does Alice love?"]


@pytest.mark.asyncio
async def test_dimensions_forwarded_when_configured():
    api = FakeEmbeddingsAPI()
    client = make_client(api, dimensions=256)

    await client.embed_texts(["a"])

    assert api.calls[0]["dimensions"] == 256
    assert api.calls[0]["model"] == "test-embed"


@pytest.mark.asyncio
async def test_empty_batch_rejected():
    client = make_client(FakeEmbeddingsAPI())

    with pytest.raises(EmptyInput):
        await client.embed_texts([])


@pytest.mark.asyncio
async def test_rate_limit_maps_to_rate_limited():
    error = openai.RateLimitError("slow down", response=_response(429), body=None)
    client = make_client(FakeEmbeddingsAPI(error=error))

    with pytest.raises(RateLimited):
        await client.embed_texts(["a"])


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "error",
    [
        openai.APIConnectionError(request=httpx.Request("POST", EMBEDDINGS_URL)),
        openai.APITimeoutError(request=httpx.Request("POST", EMBEDDINGS_URL)),
        openai.AuthenticationError("bad key", response=_response(401), body=None),
        openai.InternalServerError("boom", response=_response(500), body=None),
    ],
)
async def test_transport_and_auth_errors_map_to_backend_unavailable(error):
    client = make_client(FakeEmbeddingsAPI(error=error))

    with pytest.raises(BackendUnavailable) as exc_info:
        await client.embed_texts(["a"])

    assert not isinstance(exc_info.value, RateLimited)
    assert exc_info.value.backend == "openai-embeddings"


@pytest.mark.asyncio
async def test_bad_request_is_not_treated_as_transient():
    error = openai.BadRequestError("input too long", response=_response(400), body=None)
    client = make_client(FakeEmbeddingsAPI(error=error))

    with pytest.raises(PersonaRagError) as exc_info:
        await client.embed_texts(["a"])

    assert not isinstance(exc_info.value, BackendUnavailable)


@pytest.mark.asyncio
async def test_short_response_is_rejected():
    client = make_client(FakeEmbeddingsAPI(drop_last=True))

    with pytest.raises(BackendUnavailable, match="expected 2 embeddings"):
        await client.embed_texts(["a", "b"])


class OneBadBatchAPI:
    """Fails the batch containing "boom" at once; other batches stall until cancelled."""

    def __init__(self):
        self.in_flight = 0
        self.cancelled = 0

    async def create(self, model, input, **kwargs):
        self.in_flight += 1
        try:
            if "boom" in input:
                raise openai.APIConnectionError(request=httpx.Request("POST", EMBEDDINGS_URL))
            await asyncio.sleep(10)
        except asyncio.CancelledError:
            self.cancelled += 1
            raise
        finally:
            self.in_flight -= 1


@pytest.mark.asyncio
async def test_failed_batch_cancels_its_siblings():
    api = OneBadBatchAPI()
    client = make_client(api, batch_size=1, concurrency=4)

    with pytest.raises(BackendUnavailable):
        await client.embed_texts(["a", "boom", "c", "d"])

    assert api.in_flight == 0
    assert api.cancelled == 3
