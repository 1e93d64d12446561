"""Model provider clients for embeddings and chat completion.

Security: Reads API key from settings/environment only, never hardcoded.
Provides a deterministic offline provider when no key is present so the
service and its tests run without network access.
"""

import hashlib
import logging
import math
import re
import time
from typing import Protocol

import openai
from openai import AsyncOpenAI

from docqa.app.config import Settings
from docqa.app.docs.chunker import split_sentences
from docqa.app.errors import ProviderError
from docqa.app.utils.logging import operation_logger
from docqa.app.utils.metrics import PrometheusProviderMetrics

logger = logging.getLogger(__name__)

NOT_FOUND_ANSWER = "Not found in documents."

_WORD_RE = re.compile(r"\w+")
_SOURCE_RE = re.compile(r"\[Source (\d+): [^\]\n]*\]\n(.*?)(?=\n\n---\n\n|\Z)", re.S)
_QUESTION_RE = re.compile(r"^Question: (.*)$", re.M)


class ModelProvider(Protocol):
    """Protocol for the external embedding/completion service."""

    async def create_embeddings(self, texts: list[str]) -> list[list[float]]:
        """Embed texts, returning one vector per input in input order."""
        ...

    async def complete(
        self,
        *,
        system_prompt: str,
        user_prompt: str,
        temperature: float,
        max_tokens: int,
    ) -> str:
        """Run a chat completion and return the generated text."""
        ...


class OpenAIProvider:
    """OpenAI-backed provider.

    Calls are bounded by ``timeout`` and never retried automatically; callers
    decide whether to re-issue the whole request.
    """

    def __init__(
        self,
        api_key: str,
        *,
        embedding_model: str = "text-embedding-3-small",
        completion_model: str = "gpt-4o-mini",
        timeout: float = 30.0,
    ) -> None:
        self.client = AsyncOpenAI(api_key=api_key, timeout=timeout, max_retries=0)
        self.embedding_model = embedding_model
        self.completion_model = completion_model
        self._metrics = PrometheusProviderMetrics()

    async def create_embeddings(self, texts: list[str]) -> list[list[float]]:
        """Embed texts with the configured embedding model."""
        start = time.perf_counter()
        try:
            response = await self.client.embeddings.create(
                model=self.embedding_model,
                input=texts,
                encoding_format="float",
            )
        except openai.OpenAIError as e:
            self._record_failure("embeddings", start, e, inputs=len(texts))
            raise ProviderError("Failed to generate embeddings") from e

        if not response.data:
            error = ProviderError("Embedding provider returned no data")
            self._record_failure("embeddings", start, error, inputs=len(texts))
            raise error

        self._record_success("embeddings", start, inputs=len(texts))
        ordered = sorted(response.data, key=lambda item: item.index)
        return [item.embedding for item in ordered]

    async def complete(
        self,
        *,
        system_prompt: str,
        user_prompt: str,
        temperature: float,
        max_tokens: int,
    ) -> str:
        """Generate a chat completion for the given prompts."""
        start = time.perf_counter()
        try:
            response = await self.client.chat.completions.create(
                model=self.completion_model,
                messages=[
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": user_prompt},
                ],
                temperature=temperature,
                max_tokens=max_tokens,
            )
        except openai.OpenAIError as e:
            self._record_failure("completion", start, e)
            raise ProviderError("Failed to generate an answer") from e

        content = response.choices[0].message.content if response.choices else None
        if not content or not content.strip():
            error = ProviderError("Completion provider returned an empty answer")
            self._record_failure("completion", start, error)
            raise error

        self._record_success("completion", start)
        return content

    def _record_success(self, operation: str, start: float, **ids: object) -> None:
        latency_ms = (time.perf_counter() - start) * 1000
        self._metrics.record_latency(operation, "success", latency_ms)
        operation_logger.log_success(operation, latency_ms, **ids)

    def _record_failure(
        self, operation: str, start: float, error: BaseException, **ids: object
    ) -> None:
        latency_ms = (time.perf_counter() - start) * 1000
        self._metrics.record_latency(operation, "error", latency_ms)
        self._metrics.inc_error(operation)
        operation_logger.log_failure(operation, error, **ids)


class DeterministicStubProvider:
    """Deterministic offline provider (no API key required).

    Embeddings are hashed bag-of-words vectors, L2-normalised, so texts that
    share words have small cosine distance and unrelated texts sit near 1.0.
    Completions are extractive: the context sentence sharing the most words
    with the question, tagged with its source label.
    """

    def __init__(self, dimensions: int = 1536) -> None:
        self.dimensions = dimensions
        self._metrics = PrometheusProviderMetrics()

    async def create_embeddings(self, texts: list[str]) -> list[list[float]]:
        """Embed each text as a hashed word-count vector."""
        start = time.perf_counter()
        vectors = [self._embed(text) for text in texts]
        self._record("embeddings", start)
        return vectors

    async def complete(
        self,
        *,
        system_prompt: str,
        user_prompt: str,
        temperature: float,
        max_tokens: int,
    ) -> str:
        """Answer with the best-overlapping context sentence."""
        start = time.perf_counter()
        # The real question is the last "Question:" line; chunk text may contain others
        questions = _QUESTION_RE.findall(user_prompt)
        question_words = _words(questions[-1]) if questions else set()

        best: tuple[int, str, str] | None = None
        for match in _SOURCE_RE.finditer(user_prompt):
            label, body = match.group(1), match.group(2)
            for sentence in split_sentences(body):
                overlap = len(question_words & _words(sentence))
                if overlap and (best is None or overlap > best[0]):
                    best = (overlap, sentence.strip(), label)

        self._record("completion", start)
        if best is None:
            return NOT_FOUND_ANSWER

        _, sentence, label = best
        return f"{sentence} [Source {label}]"

    def _record(self, operation: str, start: float) -> None:
        self._metrics.record_latency(operation, "success", (time.perf_counter() - start) * 1000)

    def _embed(self, text: str) -> list[float]:
        vector = [0.0] * self.dimensions
        for word in _WORD_RE.findall(text.lower()):
            digest = hashlib.md5(word.encode("utf-8")).digest()
            vector[int.from_bytes(digest[:4], "big") % self.dimensions] += 1.0

        norm = math.sqrt(sum(v * v for v in vector))
        if norm == 0:
            return vector
        return [v / norm for v in vector]


def _words(text: str) -> set[str]:
    return set(_WORD_RE.findall(text.lower()))


def get_model_provider(settings: Settings) -> ModelProvider:
    """Factory function to get appropriate provider based on config.

    Returns:
        OpenAIProvider if API key is configured, DeterministicStubProvider otherwise
    """
    api_key = settings.openai_api_key

    if api_key and api_key.get_secret_value():
        logger.info("Using OpenAI provider for embeddings and completion")
        return OpenAIProvider(
            api_key=api_key.get_secret_value(),
            embedding_model=settings.embedding_model,
            completion_model=settings.completion_model,
            timeout=settings.provider_timeout_seconds,
        )

    logger.warning("No OpenAI API key configured, using deterministic stub provider")
    return DeterministicStubProvider(dimensions=settings.embedding_dimensions)
