"""Relevance, credibility and recency scoring (all 0-100)."""
from __future__ import annotations

import math
from typing import Iterable, Optional

from core.config import ScoreWeights
from core.keywords import token_set, vocabulary_hits
from core.models import CandidateReference


KIND_CREDIBILITY_ADJUSTMENT = {
    'crossref': 15,
    'pubmed': 20,
    'semanticscholar': 12,
    'arxiv': 5,
    'openalex': 10,
    'wiki': -10,
}

# (max year distance, score); anything older falls through to OLD_WORK_SCORE.
RECENCY_STEPS = [(1, 100.0), (3, 85.0), (5, 70.0), (10, 55.0)]
OLD_WORK_SCORE = 40.0
UNKNOWN_YEAR_SCORE = 50.0


def _clamp(value: float, low: float = 0.0, high: float = 100.0) -> float:
    return max(low, min(high, value))


def relevance_keyword(
    context: str,
    item: CandidateReference,
    vocabulary: Optional[Iterable[str]] = None,
    bonus_per_hit: float = 10.0,
    bonus_cap: float = 30.0,
) -> float:
    """Token overlap between context and candidate, normalized by sqrt(|ctx| * |text|).

    With a topic vocabulary, domain hits in the candidate add a capped bonus.
    """
    text = f"{item.title} {item.source or ''} {item.summary or ''}"
    ctx_tokens = token_set(context)
    txt_tokens = token_set(text)
    score = 0.0
    if ctx_tokens and txt_tokens:
        inter = len(ctx_tokens & txt_tokens)
        score = inter / math.sqrt(len(ctx_tokens) * len(txt_tokens)) * 100
    if vocabulary:
        hits = vocabulary_hits(text, vocabulary)
        score += min(bonus_cap, bonus_per_hit * hits)
    return _clamp(score)


def credibility_base(item: CandidateReference) -> float:
    score = 50
    if item.doi:
        score += 20
    if item.source:
        score += 10
    score += KIND_CREDIBILITY_ADJUSTMENT.get(item.source_kind, 0)
    return _clamp(score)


def recency_score(item: CandidateReference, now_year: int) -> float:
    year = item.year()
    if not year:
        return UNKNOWN_YEAR_SCORE
    diff = abs(now_year - year)
    for max_diff, score in RECENCY_STEPS:
        if diff <= max_diff:
            return score
    return OLD_WORK_SCORE


def composite_score(relevance: float, credibility: float, recency: float, weights: ScoreWeights) -> float:
    score = (
        weights.relevance * relevance
        + weights.credibility * credibility
        + weights.recency * recency
    )
    return _clamp(score)
