"""
Tests for precedent_rag/api/main.py using FastAPI's TestClient.

Collaborators are swapped through ``app.dependency_overrides`` so no backend
or Qdrant server is needed.
"""

import pytest
from fastapi.testclient import TestClient

from precedent_rag.api.main import app, get_auditor, get_segmenter
from precedent_rag.audit import PredictiveAuditor
from precedent_rag.ingestion.segmenter import DocumentSegmenter, SegmenterOptions
from precedent_rag.models.chunk import ReviewerSentiment, ReviewType
from tests.conftest import PLAIN_PARAGRAPH, RTF_PARAGRAPH, FakeProvider, ScriptedStore, make_match


class ExplodingAuditor:
    def audit(self, draft_text, document_type):
        raise RuntimeError("store unreachable")


def critical_medical(filters):
    if filters.review_type is ReviewType.MEDICAL:
        return [make_match("crit", 0.88, sentiment=ReviewerSentiment.CRITICAL)]
    return []


@pytest.fixture
def client(test_settings):
    auditor = PredictiveAuditor(FakeProvider(completion="One RED finding."), ScriptedStore(critical_medical), config=test_settings)
    app.dependency_overrides[get_auditor] = lambda: auditor
    app.dependency_overrides[get_segmenter] = lambda: DocumentSegmenter(
        SegmenterOptions(chunk_size=1500, chunk_overlap=0, min_chunk_length=100)
    )
    yield TestClient(app)
    app.dependency_overrides.clear()


# ---------------------------------------------------------------------------
# Routes
# ---------------------------------------------------------------------------

class TestRoutes:

    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json() == {"status": "ok"}

    def test_audit(self, client):
        response = client.post("/audit", json={"draft_text": PLAIN_PARAGRAPH, "document_type": "IND Submission"})
        assert response.status_code == 200
        body = response.json()
        assert body["risk_summary"] == {"red": 1, "yellow": 0, "green": 0}
        assert body["findings"][0]["risk_level"] == "RED"
        assert body["findings"][0]["angle"] == "A"
        assert body["narrative"] == "One RED finding."
        assert body["guidance_context_used"] is False

    def test_audit_rejects_unknown_document_type(self, client):
        response = client.post("/audit", json={"draft_text": PLAIN_PARAGRAPH, "document_type": "Label"})
        assert response.status_code == 422

    def test_audit_rejects_tiny_draft(self, client):
        assert client.post("/audit", json={"draft_text": "hi"}).status_code == 422

    def test_audit_failure_maps_to_500(self, client):
        app.dependency_overrides[get_auditor] = lambda: ExplodingAuditor()
        response = client.post("/audit", json={"draft_text": PLAIN_PARAGRAPH})
        assert response.status_code == 500
        assert response.json()["detail"] == "Predictive audit failed."

    def test_triage(self, client):
        text = f"{RTF_PARAGRAPH}\f{PLAIN_PARAGRAPH}"
        response = client.post("/triage", json={"file_name": "sba.pdf", "text": text})
        assert response.status_code == 200
        body = response.json()
        assert body["file_name"] == "sba.pdf"
        assert body["total_chunks"] == 2
        assert body["chunks_with_tables"] == 1
        assert body["all_table_references"] == ["Table 4.2"]
        assert "scientific incompleteness" in body["all_rtf_keywords"]
