"""Precedent store contract and its Qdrant implementation."""

from __future__ import annotations

import logging
import uuid
from abc import ABC, abstractmethod
from typing import List, Optional, Sequence

from qdrant_client import QdrantClient
from qdrant_client.http import models as qmodels

from precedent_rag.config import Settings, settings as default_settings
from precedent_rag.errors import StoreError
from precedent_rag.models.chunk import PrecedentChunk
from precedent_rag.models.retrieval import SearchFilters, StoreMatch

logger = logging.getLogger(__name__)

KEYWORD_INDEXES = (
    "source_document",
    "drug_class",
    "therapeutic_area",
    "review_type",
    "reviewer_sentiment",
    "jurisdiction",
    "application_type",
    "rtf_keywords",
)


class PrecedentStore(ABC):
    """Persists precedent chunks and answers filtered nearest-neighbour queries."""

    @abstractmethod
    def insert(self, chunk: PrecedentChunk) -> str:
        """Persist ``chunk`` with its vector and return its identity."""

    @abstractmethod
    def nearest_neighbors(
        self,
        query_vector: Sequence[float],
        threshold: float,
        limit: int,
        filters: Optional[SearchFilters] = None,
    ) -> List[StoreMatch]:
        """Matches with similarity strictly above ``threshold``, best first, at most ``limit``."""

    @abstractmethod
    def delete(self, chunk_id: str) -> None:
        ...


def point_id_for(chunk: PrecedentChunk) -> str:
    """Deterministic identity so re-ingesting a document overwrites its chunks."""
    return str(uuid.uuid5(uuid.NAMESPACE_URL, f"{chunk.source_document}#{chunk.chunk_index}"))


def build_filter(filters: Optional[SearchFilters]) -> Optional[qmodels.Filter]:
    if filters is None:
        return None
    must: List[qmodels.FieldCondition] = []
    for key, value in filters.model_dump(mode="json", exclude_none=True).items():
        must.append(qmodels.FieldCondition(key=key, match=qmodels.MatchValue(value=value)))
    return qmodels.Filter(must=must) if must else None


class QdrantPrecedentStore(PrecedentStore):
    """Wrapper around a Qdrant collection using cosine similarity."""

    def __init__(
        self,
        client: Optional[QdrantClient] = None,
        collection: Optional[str] = None,
        config: Optional[Settings] = None,
    ) -> None:
        config = config or default_settings
        self.client = client or QdrantClient(
            url=config.qdrant_url,
            api_key=config.qdrant_api_key or None,
            timeout=int(config.request_timeout_seconds),
        )
        self.collection = collection or config.qdrant_collection

    def ensure_collection(self, dimensions: int, recreate: bool = False) -> None:
        vector_params = qmodels.VectorParams(size=dimensions, distance=qmodels.Distance.COSINE)
        try:
            exists = self.client.collection_exists(self.collection)
            if exists and recreate:
                logger.info("Re-creating existing Qdrant collection %s", self.collection)
                self.client.delete_collection(self.collection)
                exists = False
            if exists:
                return
            self.client.create_collection(collection_name=self.collection, vectors_config=vector_params)
            for field_name in KEYWORD_INDEXES:
                self.client.create_payload_index(
                    collection_name=self.collection,
                    field_name=field_name,
                    field_schema=qmodels.PayloadSchemaType.KEYWORD,
                )
            self.client.create_payload_index(
                collection_name=self.collection,
                field_name="contains_table",
                field_schema=qmodels.PayloadSchemaType.BOOL,
            )
            self.client.create_payload_index(
                collection_name=self.collection,
                field_name="approval_year",
                field_schema=qmodels.PayloadSchemaType.INTEGER,
            )
        except Exception as exc:
            raise StoreError(f"Could not prepare collection {self.collection}: {exc}") from exc
        logger.info("Created Qdrant collection %s (%s dims)", self.collection, dimensions)

    def insert(self, chunk: PrecedentChunk) -> str:
        if not chunk.embedding:
            raise StoreError(f"Chunk {chunk.chunk_index} of {chunk.source_document} has no embedding")
        point_id = chunk.id or point_id_for(chunk)
        payload = chunk.model_dump(mode="json", exclude={"id", "embedding"})
        try:
            self.client.upsert(
                collection_name=self.collection,
                wait=True,
                points=[qmodels.PointStruct(id=point_id, vector=list(chunk.embedding), payload=payload)],
            )
        except Exception as exc:
            raise StoreError(f"Insert failed for {chunk.source_document}#{chunk.chunk_index}: {exc}") from exc
        return point_id

    def nearest_neighbors(
        self,
        query_vector: Sequence[float],
        threshold: float,
        limit: int,
        filters: Optional[SearchFilters] = None,
    ) -> List[StoreMatch]:
        if limit <= 0:
            return []
        try:
            response = self.client.query_points(
                collection_name=self.collection,
                query=list(query_vector),
                query_filter=build_filter(filters),
                limit=limit,
                score_threshold=threshold,
                with_payload=True,
            )
        except Exception as exc:
            raise StoreError(f"Similarity query on {self.collection} failed: {exc}") from exc

        matches: List[StoreMatch] = []
        for point in response.points:
            if point.score is None or point.score <= threshold:
                continue
            payload = point.payload or {}
            chunk = PrecedentChunk(id=str(point.id), **payload)
            matches.append(StoreMatch(chunk=chunk, similarity=float(point.score)))
        matches.sort(key=lambda match: match.similarity, reverse=True)
        return matches[:limit]

    def delete(self, chunk_id: str) -> None:
        try:
            self.client.delete(
                collection_name=self.collection,
                points_selector=qmodels.PointIdsList(points=[chunk_id]),
                wait=True,
            )
        except Exception as exc:
            raise StoreError(f"Delete failed for {chunk_id}: {exc}") from exc
