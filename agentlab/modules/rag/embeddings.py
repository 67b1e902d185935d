"""Embedding adapters used by the vector and hybrid retrievers."""

from abc import ABC, abstractmethod

from openai import AsyncOpenAI

from agentlab.config.settings import get_settings
from agentlab.utils.logger import get_logger

logger = get_logger(__name__)


class EmbeddingAdapter(ABC):
    """Turns texts into dense vectors, one vector per input text."""

    @abstractmethod
    async def embed(self, texts: list[str]) -> list[list[float]]:
        """Embed ``texts`` in order."""


class HashEmbedding(EmbeddingAdapter):
    """
    Deterministic character-code embedding for offline, reproducible runs.

    Each text maps to ``[s % 7, s % 11, s % 13]`` where ``s`` is the sum of its
    character codes. Carries no semantic signal; it only makes vector and
    hybrid retrieval runnable without a network call.
    """

    MODULI = (7, 11, 13)

    async def embed(self, texts: list[str]) -> list[list[float]]:
        vectors = []
        for text in texts:
            total = sum(ord(ch) for ch in text)
            vectors.append([float(total % m) for m in self.MODULI])
        return vectors


class OpenAIEmbedding(EmbeddingAdapter):
    """Embeddings from the OpenAI API."""

    def __init__(
        self,
        model: str | None = None,
        dimensions: int | None = None,
        client: AsyncOpenAI | None = None,
    ):
        settings = get_settings()
        if client is None:
            if not settings.openai_api_key:
                raise ValueError("OPENAI_API_KEY not set in environment")
            client = AsyncOpenAI(api_key=settings.openai_api_key)

        self.client = client
        self.model = model or settings.embedding_model
        self.dimensions = dimensions or settings.embedding_dimension

        logger.info(
            f"Initialized embedding adapter: model={self.model}, "
            f"dimensions={self.dimensions}"
        )

    async def embed(self, texts: list[str]) -> list[list[float]]:
        """
        Generate embeddings for ``texts`` in one batch request.

        Example:
            vectors = await embedder.embed(["Alpha is the first letter", "Beta follows"])
        """
        if not texts:
            return []

        response = await self.client.embeddings.create(
            model=self.model,
            input=texts,
            dimensions=self.dimensions,
        )
        embeddings = [item.embedding for item in response.data]

        logger.debug(f"Generated {len(embeddings)} embeddings in batch")
        return embeddings
