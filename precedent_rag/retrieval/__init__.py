"""Retrieval stack utilities."""

from .multi_angle import MultiAngleRetriever, merge_findings
from .risk import classify
from .vector_store import PrecedentStore, QdrantPrecedentStore

__all__ = ["MultiAngleRetriever", "PrecedentStore", "QdrantPrecedentStore", "classify", "merge_findings"]
