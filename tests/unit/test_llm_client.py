"""Tests for model provider clients.

All tests are deterministic and do not make real network calls.
"""

import math
import uuid
from unittest.mock import AsyncMock, MagicMock

import openai
import pytest
from prometheus_client import REGISTRY
from pydantic import SecretStr

from docqa.app.config import Settings
from docqa.app.errors import ProviderError
from docqa.app.llm.client import (
    NOT_FOUND_ANSWER,
    DeterministicStubProvider,
    OpenAIProvider,
    get_model_provider,
)
from docqa.app.models.docs import RetrievedChunk
from docqa.app.qa.composer import build_context_block, build_user_prompt


def _cosine(a: list[float], b: list[float]) -> float:
    return sum(x * y for x, y in zip(a, b))


def _chunk(name: str, content: str) -> RetrievedChunk:
    return RetrievedChunk(
        chunk_id=uuid.uuid4(),
        document_id=uuid.uuid4(),
        document_name=name,
        content=content,
        distance=0.2,
    )


@pytest.mark.asyncio
async def test_stub_embeddings_have_requested_dimensions() -> None:
    """Test that stub vectors have the configured length and unit norm."""
    provider = DeterministicStubProvider(dimensions=64)

    vectors = await provider.create_embeddings(["hello world", "another text"])

    assert len(vectors) == 2
    for vector in vectors:
        assert len(vector) == 64
        assert math.isclose(math.sqrt(sum(v * v for v in vector)), 1.0)


@pytest.mark.asyncio
async def test_stub_embeddings_are_deterministic() -> None:
    """Test that the same text always embeds to the same vector."""
    first = await DeterministicStubProvider().create_embeddings(["The capital of France"])
    second = await DeterministicStubProvider().create_embeddings(["The capital of France"])

    assert first == second


@pytest.mark.asyncio
async def test_stub_embeddings_rank_shared_words_closer() -> None:
    """Test that texts sharing words are more similar than unrelated texts."""
    provider = DeterministicStubProvider()
    question, related, unrelated = await provider.create_embeddings(
        [
            "What is the capital of France?",
            "The capital of France is Paris.",
            "Bananas grow in tropical climates.",
        ]
    )

    assert _cosine(question, related) > 0.5
    assert _cosine(question, related) > _cosine(question, unrelated)


@pytest.mark.asyncio
async def test_stub_embedding_of_blank_text_is_zero_vector() -> None:
    """Test that text without words embeds to all zeros."""
    (vector,) = await DeterministicStubProvider(dimensions=8).create_embeddings(["  "])

    assert vector == [0.0] * 8


@pytest.mark.asyncio
async def test_stub_complete_answers_from_best_source() -> None:
    """Test that the stub picks the most overlapping sentence and cites its label."""
    context = build_context_block(
        [
            _chunk("weather.txt", "It rains a lot in autumn."),
            _chunk("geo.txt", "Berlin is in Germany. The capital of France is Paris."),
        ]
    )
    prompt = build_user_prompt("What is the capital of France?", context)

    answer = await DeterministicStubProvider().complete(
        system_prompt="system", user_prompt=prompt, temperature=0.3, max_tokens=500
    )

    assert answer == "The capital of France is Paris. [Source 2]"


@pytest.mark.asyncio
async def test_stub_complete_without_overlap_returns_not_found() -> None:
    """Test that the stub says not found when no sentence shares a word."""
    context = build_context_block([_chunk("fruit.txt", "Bananas grow in tropical climates.")])
    prompt = build_user_prompt("Who wrote Hamlet?", context)

    answer = await DeterministicStubProvider().complete(
        system_prompt="system", user_prompt=prompt, temperature=0.3, max_tokens=500
    )

    assert answer == NOT_FOUND_ANSWER


def _latency_count(operation: str) -> float:
    labels = {"operation": operation, "outcome": "success"}
    return REGISTRY.get_sample_value("provider_latency_ms_count", labels) or 0.0


@pytest.mark.asyncio
async def test_stub_calls_record_latency_metrics() -> None:
    """Test that offline embedding and completion calls are observed like real ones."""
    provider = DeterministicStubProvider(dimensions=16)
    embeddings_before = _latency_count("embeddings")
    completion_before = _latency_count("completion")

    await provider.create_embeddings(["hello world"])
    await provider.complete(
        system_prompt="system", user_prompt="Question: hello?", temperature=0.0, max_tokens=10
    )

    assert _latency_count("embeddings") == embeddings_before + 1
    assert _latency_count("completion") == completion_before + 1


@pytest.mark.asyncio
async def test_openai_provider_orders_embeddings_by_index() -> None:
    """Test that embeddings are returned in input order regardless of response order."""
    mock_response = MagicMock()
    mock_response.data = [
        MagicMock(index=1, embedding=[0.0, 1.0]),
        MagicMock(index=0, embedding=[1.0, 0.0]),
    ]
    mock_openai_client = AsyncMock()
    mock_openai_client.embeddings.create = AsyncMock(return_value=mock_response)

    provider = OpenAIProvider(api_key="test_key")
    provider.client = mock_openai_client

    vectors = await provider.create_embeddings(["first", "second"])

    assert vectors == [[1.0, 0.0], [0.0, 1.0]]
    call_kwargs = mock_openai_client.embeddings.create.call_args.kwargs
    assert call_kwargs["model"] == "text-embedding-3-small"
    assert call_kwargs["input"] == ["first", "second"]


@pytest.mark.asyncio
async def test_openai_provider_maps_api_error_to_provider_error() -> None:
    """Test that SDK failures surface as ProviderError."""
    mock_openai_client = AsyncMock()
    mock_openai_client.embeddings.create = AsyncMock(side_effect=openai.OpenAIError("boom"))

    provider = OpenAIProvider(api_key="test_key")
    provider.client = mock_openai_client

    with pytest.raises(ProviderError):
        await provider.create_embeddings(["text"])


@pytest.mark.asyncio
async def test_openai_provider_empty_embedding_data_is_error() -> None:
    """Test that an empty data list is treated as a provider failure."""
    mock_response = MagicMock()
    mock_response.data = []
    mock_openai_client = AsyncMock()
    mock_openai_client.embeddings.create = AsyncMock(return_value=mock_response)

    provider = OpenAIProvider(api_key="test_key")
    provider.client = mock_openai_client

    with pytest.raises(ProviderError):
        await provider.create_embeddings(["text"])


@pytest.mark.asyncio
async def test_openai_provider_complete_returns_content() -> None:
    """Test that completion passes prompts and sampling parameters through."""
    mock_response = MagicMock()
    mock_response.choices = [MagicMock(message=MagicMock(content="Paris. [Source 1]"))]
    mock_openai_client = AsyncMock()
    mock_openai_client.chat.completions.create = AsyncMock(return_value=mock_response)

    provider = OpenAIProvider(api_key="test_key", completion_model="gpt-4o-mini")
    provider.client = mock_openai_client

    answer = await provider.complete(
        system_prompt="sys", user_prompt="user", temperature=0.3, max_tokens=500
    )

    assert answer == "Paris. [Source 1]"
    call_kwargs = mock_openai_client.chat.completions.create.call_args.kwargs
    assert call_kwargs["model"] == "gpt-4o-mini"
    assert call_kwargs["temperature"] == 0.3
    assert call_kwargs["max_tokens"] == 500
    assert call_kwargs["messages"] == [
        {"role": "system", "content": "sys"},
        {"role": "user", "content": "user"},
    ]


@pytest.mark.asyncio
@pytest.mark.parametrize("content", [None, "", "   "])
async def test_openai_provider_empty_completion_is_error(content: str | None) -> None:
    """Test that a missing or blank completion raises ProviderError."""
    mock_response = MagicMock()
    mock_response.choices = [MagicMock(message=MagicMock(content=content))]
    mock_openai_client = AsyncMock()
    mock_openai_client.chat.completions.create = AsyncMock(return_value=mock_response)

    provider = OpenAIProvider(api_key="test_key")
    provider.client = mock_openai_client

    with pytest.raises(ProviderError):
        await provider.complete(
            system_prompt="sys", user_prompt="user", temperature=0.3, max_tokens=500
        )


def test_get_model_provider_without_key_returns_stub() -> None:
    """Test that no API key selects the deterministic stub."""
    provider = get_model_provider(Settings(openai_api_key=None, embedding_dimensions=32))

    assert isinstance(provider, DeterministicStubProvider)
    assert provider.dimensions == 32


def test_get_model_provider_with_key_returns_openai() -> None:
    """Test that a configured API key selects the OpenAI provider."""
    provider = get_model_provider(Settings(openai_api_key=SecretStr("sk-test")))

    assert isinstance(provider, OpenAIProvider)
