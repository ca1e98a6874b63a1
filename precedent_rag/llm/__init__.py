"""LLM integration helpers."""

from .narrative import NarrativeSummarizer
from .provider import ModelProvider, UnconfiguredProvider, build_provider

__all__ = ["ModelProvider", "NarrativeSummarizer", "UnconfiguredProvider", "build_provider"]
