"""Shared FastAPI dependencies for settings and model access."""

from functools import lru_cache

from docqa.app.config import Settings, get_settings
from docqa.app.docs.embedder import Embedder
from docqa.app.llm.client import ModelProvider
from docqa.app.llm.client import get_model_provider as build_model_provider


def get_app_settings() -> Settings:
    """Settings dependency (overridable in tests)."""
    return get_settings()


@lru_cache
def get_model_provider() -> ModelProvider:
    """Process-wide model provider chosen from settings."""
    return build_model_provider(get_settings())


@lru_cache
def get_embedder() -> Embedder:
    """Process-wide embedder bound to the configured provider."""
    return Embedder(get_model_provider(), dimensions=get_settings().embedding_dimensions)
