"""
Tests for precedent_rag/retrieval/vector_store.py against an in-memory Qdrant.
"""

from unittest.mock import MagicMock

import pytest
from qdrant_client import QdrantClient
from qdrant_client.http import models as qmodels

from precedent_rag.errors import StoreError
from precedent_rag.models.chunk import Jurisdiction, PrecedentChunk, ReviewerSentiment, ReviewType
from precedent_rag.models.retrieval import SearchFilters
from precedent_rag.retrieval.vector_store import QdrantPrecedentStore, build_filter, point_id_for

QUERY = [1.0, 0.0, 0.0, 0.0]


def precedent(index: int, embedding, **meta) -> PrecedentChunk:
    return PrecedentChunk(
        content=f"Reviewer comment number {index} on hepatic safety signals.",
        source_document="sba.pdf",
        source_page=index + 1,
        chunk_index=index,
        embedding=embedding,
        **meta,
    )


@pytest.fixture
def store(test_settings) -> QdrantPrecedentStore:
    store = QdrantPrecedentStore(client=QdrantClient(":memory:"), collection="precedents_test", config=test_settings)
    store.ensure_collection(4)
    return store


@pytest.fixture
def populated(store) -> QdrantPrecedentStore:
    store.insert(
        precedent(
            0,
            [1.0, 0.0, 0.0, 0.0],
            review_type=ReviewType.MEDICAL,
            reviewer_sentiment=ReviewerSentiment.CRITICAL,
            jurisdiction=Jurisdiction.FDA,
            drug_class="PD-1 inhibitor",
            table_references=["Table 4.2"],
            contains_table=True,
        )
    )
    store.insert(precedent(1, [0.8, 0.6, 0.0, 0.0], review_type=ReviewType.PHARMACOLOGY, jurisdiction=Jurisdiction.EMA))
    store.insert(precedent(2, [0.0, 1.0, 0.0, 0.0], review_type=ReviewType.MEDICAL))
    return store


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

class TestHelpers:

    def test_point_id_is_stable_per_document_position(self):
        first = point_id_for(precedent(3, [1.0, 0, 0, 0]))
        again = point_id_for(precedent(3, [0, 1.0, 0, 0]))
        other = point_id_for(precedent(4, [1.0, 0, 0, 0]))
        assert first == again
        assert first != other

    def test_build_filter_skips_unset_fields(self):
        assert build_filter(None) is None
        assert build_filter(SearchFilters()) is None
        built = build_filter(SearchFilters(review_type=ReviewType.MEDICAL, jurisdiction=Jurisdiction.EMA))
        assert {(c.key, c.match.value) for c in built.must} == {("review_type", "Medical"), ("jurisdiction", "EMA")}


# ---------------------------------------------------------------------------
# QdrantPrecedentStore
# ---------------------------------------------------------------------------

class TestQdrantPrecedentStore:

    def test_ensure_collection_is_idempotent(self, store):
        store.ensure_collection(4)
        assert store.client.collection_exists("precedents_test")

    def test_payload_indexes_cover_metadata_columns(self, test_settings):
        client = MagicMock()
        client.collection_exists.return_value = False
        QdrantPrecedentStore(client=client, collection="indexed", config=test_settings).ensure_collection(4)

        schemas = {
            call.kwargs["field_name"]: call.kwargs["field_schema"]
            for call in client.create_payload_index.call_args_list
        }
        assert schemas["approval_year"] == qmodels.PayloadSchemaType.INTEGER
        assert schemas["contains_table"] == qmodels.PayloadSchemaType.BOOL
        assert schemas["jurisdiction"] == qmodels.PayloadSchemaType.KEYWORD
        assert schemas["review_type"] == qmodels.PayloadSchemaType.KEYWORD

    def test_recreate_drops_existing_points(self, populated):
        populated.ensure_collection(4, recreate=True)
        assert populated.nearest_neighbors(QUERY, 0.0, 10) == []

    def test_results_sorted_by_similarity(self, populated):
        matches = populated.nearest_neighbors(QUERY, 0.1, 10)
        assert [m.chunk.chunk_index for m in matches] == [0, 1]
        assert matches[0].similarity >= matches[1].similarity

    def test_threshold_is_strict(self, populated):
        scores = {m.chunk.chunk_index: m.similarity for m in populated.nearest_neighbors(QUERY, 0.1, 10)}
        at_threshold = populated.nearest_neighbors(QUERY, scores[1], 10)
        assert [m.chunk.chunk_index for m in at_threshold] == [0]

    def test_limit_respected(self, populated):
        assert len(populated.nearest_neighbors(QUERY, 0.1, 1)) == 1
        assert populated.nearest_neighbors(QUERY, 0.1, 0) == []

    def test_filters_are_conjunctive(self, populated):
        medical = populated.nearest_neighbors(QUERY, 0.1, 10, SearchFilters(review_type=ReviewType.MEDICAL))
        assert [m.chunk.chunk_index for m in medical] == [0]

        ema = populated.nearest_neighbors(QUERY, 0.1, 10, SearchFilters(jurisdiction=Jurisdiction.EMA))
        assert [m.chunk.chunk_index for m in ema] == [1]

        none = populated.nearest_neighbors(
            QUERY,
            0.1,
            10,
            SearchFilters(review_type=ReviewType.MEDICAL, jurisdiction=Jurisdiction.EMA),
        )
        assert none == []

    def test_metadata_round_trip(self, populated):
        match = populated.nearest_neighbors(QUERY, 0.5, 1)[0]
        chunk = match.chunk
        assert chunk.id == point_id_for(chunk)
        assert chunk.review_type is ReviewType.MEDICAL
        assert chunk.reviewer_sentiment is ReviewerSentiment.CRITICAL
        assert chunk.drug_class == "PD-1 inhibitor"
        assert chunk.table_references == ["Table 4.2"]
        assert chunk.contains_table is True
        assert chunk.source_page == 1

    def test_reinsert_overwrites_same_position(self, store):
        store.insert(precedent(0, [1.0, 0.0, 0.0, 0.0]))
        store.insert(precedent(0, [1.0, 0.0, 0.0, 0.0], drug_class="kinase inhibitor"))
        matches = store.nearest_neighbors(QUERY, 0.1, 10)
        assert len(matches) == 1
        assert matches[0].chunk.drug_class == "kinase inhibitor"

    def test_delete(self, populated):
        target = populated.nearest_neighbors(QUERY, 0.5, 1)[0].chunk.id
        populated.delete(target)
        remaining = [m.chunk.id for m in populated.nearest_neighbors(QUERY, 0.1, 10)]
        assert target not in remaining

    def test_insert_without_embedding_raises(self, store):
        with pytest.raises(StoreError, match="no embedding"):
            store.insert(precedent(5, []))

    def test_query_against_missing_collection_raises_store_error(self, test_settings):
        store = QdrantPrecedentStore(client=QdrantClient(":memory:"), collection="absent", config=test_settings)
        with pytest.raises(StoreError):
            store.nearest_neighbors(QUERY, 0.5, 5)
