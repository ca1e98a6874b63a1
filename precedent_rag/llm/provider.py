"""Capability interface over embedding and completion backends.

One concrete provider is chosen from configuration at startup by
:func:`build_provider` and injected into the pipeline, retriever and
narrative summarizer. Call sites never branch on which backend is live.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import List, Optional, Sequence

from precedent_rag.config import Settings, settings as default_settings
from precedent_rag.errors import CompletionUnavailable, EmbeddingUnavailable

logger = logging.getLogger(__name__)


class ModelProvider(ABC):
    """Batch text embedding plus single-turn completion."""

    name: str = "base"
    dimensions: int = 0

    @abstractmethod
    def embed(self, texts: Sequence[str]) -> List[List[float]]:
        """Return one vector per text, in input order.

        Raises :class:`EmbeddingUnavailable` if the whole batch fails.
        """

    @abstractmethod
    def complete(self, system_prompt: str, user_prompt: str, max_output_tokens: int = 800) -> str:
        """Raises :class:`CompletionUnavailable` when no answer can be produced."""


class UnconfiguredProvider(ModelProvider):
    """Bound when no backend credentials are present; every call fails typed."""

    name = "none"

    def embed(self, texts: Sequence[str]) -> List[List[float]]:
        raise EmbeddingUnavailable("No embedding backend configured. Set OPENAI_API_KEY or EMBEDDING_BACKEND=bge-m3.")

    def complete(self, system_prompt: str, user_prompt: str, max_output_tokens: int = 800) -> str:
        raise CompletionUnavailable("No completion backend configured. Set OPENAI_API_KEY.")


def build_provider(config: Optional[Settings] = None) -> ModelProvider:
    config = config or default_settings
    backend = config.embedding_backend
    if backend == "bge-m3":
        from precedent_rag.retrieval.embedder import BGEM3Provider

        logger.info("Using local BGE-M3 embeddings; completion is unavailable")
        return BGEM3Provider(max_tokens=config.embedding_max_tokens)
    if config.openai_api_key:
        from precedent_rag.llm.openai_client import OpenAIProvider

        logger.info("Using OpenAI provider (%s)", config.openai_model_embedding)
        return OpenAIProvider(config=config)
    if backend == "openai":
        logger.warning("EMBEDDING_BACKEND=openai but OPENAI_API_KEY is not set")
    return UnconfiguredProvider()
