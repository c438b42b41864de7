"""OpenAI 임베딩 생성기 테스트 (클라이언트 주입)"""
from types import SimpleNamespace

import httpx
import openai
import pytest

from foodmatch.core.exceptions import ConfigurationException, EmbeddingException
from foodmatch.engine import OpenAIEmbeddingProvider

_REQUEST = httpx.Request("POST", "https://api.openai.com/v1/embeddings")


class FakeEmbeddings:
    def __init__(self, vector=None, error=None):
        self.vector = vector
        self.error = error
        self.calls = []

    async def create(self, **kwargs):
        self.calls.append(kwargs)
        if self.error:
            raise self.error
        data = [] if self.vector is None else [SimpleNamespace(embedding=self.vector)]
        return SimpleNamespace(data=data)


class FakeOpenAI:
    def __init__(self, **kwargs):
        self.embeddings = FakeEmbeddings(**kwargs)
        self.closed = False

    async def close(self):
        self.closed = True


def _provider(**kwargs) -> OpenAIEmbeddingProvider:
    return OpenAIEmbeddingProvider(client=FakeOpenAI(**kwargs))


def test_missing_api_key(monkeypatch):
    from foodmatch.core.config import settings

    monkeypatch.setattr(settings, "openai_api_key", "")
    with pytest.raises(ConfigurationException):
        OpenAIEmbeddingProvider()


def test_sdk_client_does_not_retry():
    """레이트리밋/타임아웃은 바로 실패로 올라와야 함"""
    provider = OpenAIEmbeddingProvider(api_key="sk-test")

    assert provider.client.max_retries == 0


@pytest.mark.asyncio
async def test_embed_success():
    provider = _provider(vector=[0.5] * 384)

    embedding = await provider.embed("양파")

    assert len(embedding) == 384
    assert provider.client.embeddings.calls == [
        {"model": "text-embedding-3-small", "input": "양파", "dimensions": 384}
    ]


@pytest.mark.asyncio
async def test_empty_text():
    provider = _provider(vector=[0.5] * 384)

    with pytest.raises(EmbeddingException):
        await provider.embed("  ")
    assert provider.client.embeddings.calls == []


@pytest.mark.asyncio
async def test_dimension_mismatch():
    provider = _provider(vector=[0.5] * 1536)

    with pytest.raises(EmbeddingException, match="unexpected dimension"):
        await provider.embed("양파")


@pytest.mark.asyncio
async def test_empty_response():
    provider = _provider(vector=None)

    with pytest.raises(EmbeddingException, match="no embedding"):
        await provider.embed("양파")


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "error,reason",
    [
        (openai.APITimeoutError(request=_REQUEST), "request timed out"),
        (
            openai.RateLimitError("slow down", response=httpx.Response(429, request=_REQUEST), body=None),
            "rate limit exceeded",
        ),
        (
            openai.AuthenticationError("bad key", response=httpx.Response(401, request=_REQUEST), body=None),
            "authentication failed",
        ),
        (openai.APIConnectionError(request=_REQUEST), "API error: APIConnectionError"),
    ],
)
async def test_api_errors_become_embedding_exception(error, reason):
    provider = _provider(error=error)

    with pytest.raises(EmbeddingException) as exc_info:
        await provider.embed("양파")

    assert exc_info.value.error_code == "EMBEDDING_FAILED"
    assert exc_info.value.details["reason"] == reason


@pytest.mark.asyncio
async def test_close():
    provider = _provider(vector=[0.1] * 384)
    await provider.close()
    assert provider.client.closed
