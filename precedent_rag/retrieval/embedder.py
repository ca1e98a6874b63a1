"""Local BGE-M3 embeddings for deployments without a hosted provider."""

from __future__ import annotations

from functools import lru_cache
from typing import List, Sequence

from FlagEmbedding import BGEM3FlagModel

from precedent_rag.errors import CompletionUnavailable, EmbeddingUnavailable
from precedent_rag.llm.provider import ModelProvider

MODEL_NAME = "BAAI/bge-m3"
EMBEDDING_DIM = 1024


@lru_cache(maxsize=1)
def get_bge_m3_embedder() -> BGEM3FlagModel:
    """Load the embedding model once per process."""
    return BGEM3FlagModel(MODEL_NAME, use_fp16=False, devices="cpu")


class BGEM3Provider(ModelProvider):
    name = "bge-m3"
    dimensions = EMBEDDING_DIM

    def __init__(self, max_tokens: int = 8000) -> None:
        self.max_tokens = max_tokens

    def embed(self, texts: Sequence[str]) -> List[List[float]]:
        if not texts:
            return []
        try:
            model = get_bge_m3_embedder()
            result = model.encode_corpus(list(texts), max_length=self.max_tokens)["dense_vecs"]
        except Exception as exc:
            raise EmbeddingUnavailable(f"BGE-M3 embedding failed: {exc}") from exc
        return [vec.tolist() for vec in result]

    def complete(self, system_prompt: str, user_prompt: str, max_output_tokens: int = 800) -> str:
        raise CompletionUnavailable("The local BGE-M3 backend has no completion model.")
