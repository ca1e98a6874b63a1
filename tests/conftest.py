"""
Shared fixtures and fakes for the precedent RAG tests.

Every collaborator (embedding backend, vector store, text extraction) has an
in-process fake here so the suite runs without API keys or a Qdrant server.
"""

import threading
from typing import Callable, Dict, List, Optional, Sequence

import pytest
import tiktoken

from precedent_rag.config import Settings
from precedent_rag.errors import EmbeddingUnavailable, ExtractionError, StoreError
from precedent_rag.llm.provider import ModelProvider
from precedent_rag.models.chunk import PrecedentChunk, ReviewerSentiment, ReviewType
from precedent_rag.models.document import SourceDocument
from precedent_rag.models.retrieval import SearchFilters, StoreMatch
from precedent_rag.retrieval.vector_store import PrecedentStore


# ---------------------------------------------------------------------------
# Sample review text
# ---------------------------------------------------------------------------

def make_paragraph(length: int, word: str = "reviewer") -> str:
    """A single paragraph (no blank lines) of roughly ``length`` characters."""
    repeated = " ".join([word] * (length // (len(word) + 1) + 2))
    return repeated[:length].strip()


RTF_PARAGRAPH = (
    "The application was refused to file because of scientific incompleteness. "
    "Table 4.2 lists the missing pharmacology studies and the sponsor provided "
    "no adequate justification for the omission of required data."
)

PLAIN_PARAGRAPH = (
    "The clinical reviewer found the pivotal efficacy trial adequately designed "
    "and the primary endpoint was met with a clinically meaningful effect size."
)


# ---------------------------------------------------------------------------
# Fakes
# ---------------------------------------------------------------------------

class FakeProvider(ModelProvider):
    """Deterministic embeddings; optionally fails every embed or complete call."""

    name = "fake"
    dimensions = 4

    def __init__(self, fail_embed: bool = False, completion: Optional[str] = "Summary.", fail_complete: bool = False):
        self.fail_embed = fail_embed
        self.completion = completion
        self.fail_complete = fail_complete
        self.embed_calls: List[List[str]] = []
        self.complete_calls: List[tuple] = []
        self._lock = threading.Lock()

    def embed(self, texts: Sequence[str]) -> List[List[float]]:
        with self._lock:
            self.embed_calls.append(list(texts))
        if self.fail_embed:
            raise EmbeddingUnavailable("embedding backend down")
        return [[float(len(text) % 7), 1.0, 0.5, float(i)] for i, text in enumerate(texts)]

    def complete(self, system_prompt: str, user_prompt: str, max_output_tokens: int = 800) -> str:
        self.complete_calls.append((system_prompt, user_prompt))
        if self.fail_complete:
            from precedent_rag.errors import CompletionUnavailable

            raise CompletionUnavailable("completion backend down")
        return self.completion


class RecordingStore(PrecedentStore):
    """Collects inserted chunks; can be told to fail for given chunk indexes."""

    def __init__(self, fail_indexes: Sequence[int] = ()):
        self.inserted: List[PrecedentChunk] = []
        self.fail_indexes = set(fail_indexes)

    def insert(self, chunk: PrecedentChunk) -> str:
        if chunk.chunk_index in self.fail_indexes:
            raise StoreError(f"insert rejected for chunk {chunk.chunk_index}")
        self.inserted.append(chunk)
        return f"{chunk.source_document}#{chunk.chunk_index}"

    def nearest_neighbors(self, query_vector, threshold, limit, filters=None) -> List[StoreMatch]:
        return []

    def delete(self, chunk_id: str) -> None:
        self.inserted = [c for c in self.inserted if f"{c.source_document}#{c.chunk_index}" != chunk_id]

    def documents(self) -> List[str]:
        return sorted({chunk.source_document for chunk in self.inserted})


class ScriptedStore(PrecedentStore):
    """Answers nearest-neighbour queries through a callable keyed on the filters."""

    def __init__(self, respond: Callable[[SearchFilters], List[StoreMatch]]):
        self.respond = respond
        self.calls: List[SearchFilters] = []
        self._lock = threading.Lock()

    def insert(self, chunk: PrecedentChunk) -> str:
        raise StoreError("read-only store")

    def nearest_neighbors(self, query_vector, threshold, limit, filters=None) -> List[StoreMatch]:
        with self._lock:
            self.calls.append(filters)
        return self.respond(filters)[:limit]

    def delete(self, chunk_id: str) -> None:
        raise StoreError("read-only store")


class FakeExtractor:
    """Maps file names to canned documents; names in ``failing`` raise ExtractionError."""

    def __init__(self, documents: Dict[str, SourceDocument], failing: Sequence[str] = ()):
        self.documents = documents
        self.failing = set(failing)

    def extract(self, path) -> SourceDocument:
        name = str(path)
        if name in self.failing:
            raise ExtractionError(name, "corrupt PDF stream")
        return self.documents[name]


# ---------------------------------------------------------------------------
# Builders
# ---------------------------------------------------------------------------

def make_precedent(
    chunk_id: str,
    content: str = PLAIN_PARAGRAPH,
    sentiment: ReviewerSentiment = ReviewerSentiment.UNSPECIFIED,
    review_type: Optional[ReviewType] = None,
) -> PrecedentChunk:
    return PrecedentChunk(
        id=chunk_id,
        content=content,
        source_document="sba.pdf",
        source_page=1,
        chunk_index=0,
        reviewer_sentiment=sentiment,
        review_type=review_type,
    )


def make_match(chunk_id: str, similarity: float, **kwargs) -> StoreMatch:
    return StoreMatch(chunk=make_precedent(chunk_id, **kwargs), similarity=similarity)


@pytest.fixture
def test_settings(tmp_path) -> Settings:
    return Settings(
        _env_file=None,
        openai_api_key=None,
        guidance_root=str(tmp_path / "docs"),
        source_root=str(tmp_path / "pdfs"),
    )


@pytest.fixture
def fake_provider() -> FakeProvider:
    return FakeProvider()


@pytest.fixture
def byte_encoding() -> tiktoken.Encoding:
    """Offline byte-level encoding that still reserves ``<|endoftext|>``."""
    return tiktoken.Encoding(
        name="bytes_with_eot",
        pat_str=r"\S+|\s+",
        mergeable_ranks={bytes([i]): i for i in range(256)},
        special_tokens={"<|endoftext|>": 256},
    )
