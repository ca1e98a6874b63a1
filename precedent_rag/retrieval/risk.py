"""Red/Yellow/Green risk rating for a retrieved precedent."""

from __future__ import annotations

import math
from typing import Callable, NamedTuple, Optional, Tuple, Union

from precedent_rag.models.chunk import ReviewerSentiment
from precedent_rag.models.retrieval import RiskLevel

SentimentInput = Union[ReviewerSentiment, str, None]


class RiskRule(NamedTuple):
    applies: Callable[[float, ReviewerSentiment], bool]
    level: RiskLevel


# Evaluated top to bottom, first match wins. The sentiment-specific rules
# must stay ahead of the similarity-only rule.
RISK_RULES: Tuple[RiskRule, ...] = (
    RiskRule(lambda sim, s: s is ReviewerSentiment.CRITICAL and sim >= 0.75, RiskLevel.RED),
    RiskRule(lambda sim, s: s is ReviewerSentiment.CRITICAL, RiskLevel.RED),
    RiskRule(lambda sim, s: s is ReviewerSentiment.CONCERNED and sim >= 0.80, RiskLevel.RED),
    RiskRule(lambda sim, s: s is ReviewerSentiment.CONCERNED, RiskLevel.YELLOW),
    RiskRule(lambda sim, s: sim >= 0.85, RiskLevel.YELLOW),
)


def normalize_sentiment(sentiment: SentimentInput) -> ReviewerSentiment:
    """Map free-form labels onto the enum; anything unrecognized is Unspecified."""
    if isinstance(sentiment, ReviewerSentiment):
        return sentiment
    if not sentiment:
        return ReviewerSentiment.UNSPECIFIED
    label = str(sentiment).strip().lower()
    for member in ReviewerSentiment:
        if member.value.lower() == label:
            return member
    return ReviewerSentiment.UNSPECIFIED


def clamp_similarity(similarity: Optional[float]) -> float:
    try:
        value = float(similarity)
    except (TypeError, ValueError):
        return 0.0
    if math.isnan(value):
        return 0.0
    return min(max(value, 0.0), 1.0)


def classify(similarity: Optional[float], sentiment: SentimentInput = None) -> RiskLevel:
    sim = clamp_similarity(similarity)
    label = normalize_sentiment(sentiment)
    for rule in RISK_RULES:
        if rule.applies(sim, label):
            return rule.level
    return RiskLevel.GREEN
