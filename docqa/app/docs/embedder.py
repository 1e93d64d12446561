"""Embedder - text to fixed-length vectors through the model provider."""

from docqa.app.errors import ProviderError
from docqa.app.llm.client import ModelProvider


class Embedder:
    """Single and batch embedding with shape checks.

    A batch either succeeds completely or raises; partial results are never
    returned.

    Args:
        provider: External embedding capability
        dimensions: Required vector length D
    """

    def __init__(self, provider: ModelProvider, *, dimensions: int) -> None:
        self._provider = provider
        self.dimensions = dimensions

    async def embed(self, text: str) -> list[float]:
        """Embed one text."""
        vectors = await self.embed_batch([text])
        return vectors[0]

    async def embed_batch(self, texts: list[str]) -> list[list[float]]:
        """Embed texts in one provider call, index-aligned with the input."""
        if not texts:
            return []

        vectors = await self._provider.create_embeddings(texts)

        if len(vectors) != len(texts):
            raise ProviderError(
                f"Embedding provider returned {len(vectors)} vectors for {len(texts)} inputs"
            )
        for vector in vectors:
            if len(vector) != self.dimensions:
                raise ProviderError(
                    f"Embedding has {len(vector)} dimensions, expected {self.dimensions}"
                )

        return [list(vector) for vector in vectors]
