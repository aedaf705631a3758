"""
Embeddings Module - Single Responsibility: Generate text embeddings.

It has ONE job: convert text to fixed-width vectors.
- No database logic, no document handling
- Easy to swap for different embedding providers

Inputs longer than the provider budget are cut silently. Provider
failures of any kind (timeout, quota, transport, malformed payload)
surface as ExternalServiceError. There is no retry at this layer.
"""

from __future__ import annotations

import hashlib
import logging

import numpy as np
from openai import AsyncOpenAI, OpenAIError

from semantic_search.config import EmbeddingConfig
from semantic_search.core.errors import ExternalServiceError
from semantic_search.core.protocols import EmbeddingProvider, EmbeddingResult
from semantic_search.observability import embedding_attributes, start_span
from semantic_search.observability.attributes import GEN_AI_USAGE_INPUT_TOKENS

logger = logging.getLogger(__name__)

MAX_INPUT_CHARS = 8191


def truncate_text(text: str, max_chars: int = MAX_INPUT_CHARS) -> str:
    """Cut ``text`` to at most ``max_chars`` characters."""
    return text[:max_chars]


def document_embedding_input(title: str, content: str) -> str:
    """Labeled title + content block embedded for a document."""
    return f"Title: {title}\n\nContent: {content}"


class OpenAIEmbeddings:
    """
    OpenAI-based embedding provider.

    Uses text-embedding-3-small by default (1536 dimensions). The client is
    built with an explicit timeout and ``max_retries=0`` so that the caller
    owns the retry policy.
    """

    def __init__(
        self,
        model: str = "text-embedding-3-small",
        api_key: str | None = None,
        dimensions: int = 1536,
        max_input_chars: int = MAX_INPUT_CHARS,
        timeout_seconds: float = 30.0,
        client: AsyncOpenAI | None = None,
    ):
        self.model = model
        self._dimensions = dimensions
        self._max_input_chars = max_input_chars
        if client is not None:
            self._client = client
        else:
            try:
                self._client = AsyncOpenAI(
                    api_key=api_key,
                    timeout=timeout_seconds,
                    max_retries=0,
                )
            except OpenAIError as e:
                # Raised when no API key is configured.
                raise ExternalServiceError("openai", str(e)) from e

    @classmethod
    def from_config(cls, config: EmbeddingConfig) -> "OpenAIEmbeddings":
        return cls(
            model=config.model,
            api_key=config.api_key,
            dimensions=config.dimensions,
            max_input_chars=config.max_input_chars,
            timeout_seconds=config.timeout_seconds,
        )

    @property
    def dimensions(self) -> int:
        """Return embedding dimensions for the model."""
        return self._dimensions

    async def close(self) -> None:
        await self._client.close()

    async def _create(self, inputs: list[str]) -> list[np.ndarray]:
        truncated = [truncate_text(t, self._max_input_chars) for t in inputs]
        cut = sum(1 for before, after in zip(inputs, truncated) if len(before) != len(after))
        if cut:
            logger.debug(f"Truncated {cut} embedding input(s) to {self._max_input_chars} chars")

        kwargs = {"model": self.model, "input": truncated, "encoding_format": "float"}
        if self.model.startswith("text-embedding-3"):
            kwargs["dimensions"] = self._dimensions

        with start_span(
            "embeddings.create",
            embedding_attributes("openai", self.model, len(truncated), cut),
        ) as span:
            try:
                response = await self._client.embeddings.create(**kwargs)
            except OpenAIError as e:
                logger.error(f"Embedding request failed: {e}")
                raise ExternalServiceError("openai", str(e)) from e
            usage = getattr(response, "usage", None)
            if usage is not None:
                span.set_attribute(GEN_AI_USAGE_INPUT_TOKENS, usage.prompt_tokens)

        data = sorted(response.data, key=lambda item: item.index)
        if len(data) != len(truncated):
            raise ExternalServiceError(
                "openai",
                f"expected {len(truncated)} embeddings, received {len(data)}",
            )

        vectors = []
        for item in data:
            vector = np.asarray(item.embedding, dtype=np.float32)
            if vector.shape != (self._dimensions,):
                raise ExternalServiceError(
                    "openai",
                    f"expected {self._dimensions}-dimensional embedding, received {vector.size}",
                )
            vectors.append(vector)
        return vectors

    async def generate_embedding(self, text: str) -> EmbeddingResult:
        """Generate embedding for a single text."""
        (vector,) = await self._create([text])
        return EmbeddingResult(vector=vector, model=self.model)

    async def generate_embeddings_batch(self, texts: list[str]) -> list[EmbeddingResult]:
        """Generate embeddings for multiple texts in one request."""
        if not texts:
            return []
        vectors = await self._create(list(texts))
        return [EmbeddingResult(vector=v, model=self.model) for v in vectors]

    async def generate_document_embedding(self, title: str, content: str) -> EmbeddingResult:
        """Embed title and content together so both shape the vector."""
        return await self.generate_embedding(document_embedding_input(title, content))


class MockEmbeddings:
    """
    Mock embedding provider for testing without API calls.

    Generates deterministic unit vectors seeded from the text hash, so the
    same text always maps to the same vector. ``call_count`` counts
    provider round trips. NOT for production use.
    """

    def __init__(
        self,
        dimensions: int = 1536,
        model: str = "mock-embedding",
        max_input_chars: int = MAX_INPUT_CHARS,
    ):
        self.model = model
        self._dimensions = dimensions
        self._max_input_chars = max_input_chars
        self.call_count = 0
        self.inputs: list[str] = []

    @property
    def dimensions(self) -> int:
        return self._dimensions

    async def close(self) -> None:
        pass

    def _vector(self, text: str) -> np.ndarray:
        seed = int.from_bytes(hashlib.sha256(text.encode()).digest()[:8], "big")
        vector = np.random.default_rng(seed).standard_normal(self._dimensions)
        return (vector / np.linalg.norm(vector)).astype(np.float32)

    async def generate_embedding(self, text: str) -> EmbeddingResult:
        """Generate deterministic pseudo-embedding from text hash."""
        self.call_count += 1
        text = truncate_text(text, self._max_input_chars)
        self.inputs.append(text)
        return EmbeddingResult(vector=self._vector(text), model=self.model)

    async def generate_embeddings_batch(self, texts: list[str]) -> list[EmbeddingResult]:
        if not texts:
            return []
        self.call_count += 1
        truncated = [truncate_text(t, self._max_input_chars) for t in texts]
        self.inputs.extend(truncated)
        return [EmbeddingResult(vector=self._vector(t), model=self.model) for t in truncated]

    async def generate_document_embedding(self, title: str, content: str) -> EmbeddingResult:
        return await self.generate_embedding(document_embedding_input(title, content))


def get_embedding_provider(
    config: EmbeddingConfig | None = None,
    use_mock: bool | None = None,
) -> EmbeddingProvider:
    """
    Factory function to get the appropriate embedding provider.

    Args:
        config: Provider settings (defaults to EmbeddingConfig())
        use_mock: Overrides ``config.use_mock`` when given
    """
    config = config or EmbeddingConfig()
    if use_mock is None:
        use_mock = config.use_mock
    if use_mock:
        return MockEmbeddings(
            dimensions=config.dimensions,
            max_input_chars=config.max_input_chars,
        )
    return OpenAIEmbeddings.from_config(config)
