"""OpenAI Embedding Provider (semantic 모드 전용)

text-embedding-3-small 을 384 차원으로 잘라 사용합니다 (DB 벡터 컬럼과 동일).
"""

from __future__ import annotations

from typing import Optional

from openai import APIError, APITimeoutError, AsyncOpenAI, AuthenticationError, RateLimitError

from foodmatch.core.config import settings
from foodmatch.core.exceptions import ConfigurationException, EmbeddingException
from foodmatch.core.logging import logger


class OpenAIEmbeddingProvider:
    """OpenAI 임베딩 생성기

    실패는 모두 EmbeddingException 으로 변환되어 '검색 결과 없음'과 구분됩니다.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        dimensions: Optional[int] = None,
        timeout_s: Optional[float] = None,
        client: Optional[AsyncOpenAI] = None,
    ) -> None:
        self.model = model or settings.embedding_model
        self.dimensions = dimensions or settings.embedding_dimensions

        if client is not None:
            self.client = client
            return

        key = api_key or settings.openai_api_key
        if not key:
            raise ConfigurationException("openai_api_key", "required for semantic search mode")
        # 재시도는 호출자 책임
        self.client = AsyncOpenAI(
            api_key=key,
            timeout=timeout_s or settings.backend_timeout_s,
            max_retries=0,
        )

    async def embed(self, text: str) -> list[float]:
        """텍스트 임베딩 생성

        Raises:
            EmbeddingException: 빈 입력, API 오류, 잘못된 응답
        """
        if not text or not text.strip():
            raise EmbeddingException("empty text")

        try:
            response = await self.client.embeddings.create(
                model=self.model,
                input=text,
                dimensions=self.dimensions,
            )
        except AuthenticationError as e:
            raise EmbeddingException("authentication failed") from e
        except RateLimitError as e:
            raise EmbeddingException("rate limit exceeded") from e
        except APITimeoutError as e:
            raise EmbeddingException("request timed out") from e
        except APIError as e:
            logger.error(f"[EMBEDDING] OpenAI API error: {type(e).__name__}")
            raise EmbeddingException(f"API error: {type(e).__name__}") from e

        if not response.data:
            raise EmbeddingException("no embedding returned")

        embedding = list(response.data[0].embedding)
        if len(embedding) != self.dimensions:
            raise EmbeddingException(
                f"unexpected dimension {len(embedding)} (expected {self.dimensions})"
            )
        return embedding

    async def close(self) -> None:
        await self.client.close()
