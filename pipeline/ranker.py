"""Composite scoring and ranking of de-duplicated candidates."""
from __future__ import annotations

import json
import logging
import math
from datetime import datetime
from typing import Any, Dict, List, Optional

from core.config import HarvestSettings
from core.models import CandidateReference
from core.schema import SCORE_MAP_SCHEMA
from core.scoring import composite_score, credibility_base, recency_score, relevance_keyword
from core.validation import SchemaValidator
from llm.prompt_builder import PromptBuilder
from llm.prompts import RERANK_PROMPT

logger = logging.getLogger(__name__)


class Ranker:
    """Score = w_rel * relevance + w_cred * credibility + w_rec * recency, sorted stably."""

    def __init__(self, settings: Optional[HarvestSettings] = None, llm: Any = None, now_year: Optional[int] = None):
        self.settings = settings or HarvestSettings()
        self.llm = llm
        self.now_year = now_year
        self.prompt_builder = PromptBuilder()
        self.validator = SchemaValidator(SCORE_MAP_SCHEMA, name="Rerank")

    def scoring_context(self, context: str, topic_lock: bool) -> str:
        if not topic_lock:
            return context
        return f"{context}\n{' '.join(self.settings.topic_vocabulary)}"

    def keyword_relevance(self, item: CandidateReference, context: str, topic_lock: bool) -> float:
        return relevance_keyword(
            context,
            item,
            vocabulary=self.settings.topic_vocabulary if topic_lock else None,
            bonus_per_hit=self.settings.topic_bonus_per_hit,
            bonus_cap=self.settings.topic_bonus_cap,
        )

    async def rank(
        self,
        items: List[CandidateReference],
        context: str,
        topic_lock: bool = False,
        use_llm: bool = False,
    ) -> List[CandidateReference]:
        if not items:
            return []
        now_year = self.now_year or datetime.now().year
        weights = self.settings.topic_lock_weights if topic_lock else self.settings.weights
        kw_context = self.scoring_context(context, topic_lock)

        keyword_scores = [self.keyword_relevance(it, kw_context, topic_lock) for it in items]

        llm_scores: Dict[str, float] = {}
        if use_llm and self.llm is not None:
            order = sorted(range(len(items)), key=lambda i: keyword_scores[i], reverse=True)
            top = [items[i] for i in order[:self.settings.rerank_top_n]]
            llm_scores = await self.llm_relevance(context, top)

        for item, kw_score in zip(items, keyword_scores):
            relevance = llm_scores.get(item.identity_key(), kw_score)
            cred = credibility_base(item)
            rec = recency_score(item, now_year)
            item.credibility = int(round(cred))
            item.score = composite_score(relevance, cred, rec, weights)

        return sorted(items, key=lambda it: it.score, reverse=True)

    async def llm_relevance(self, context: str, items: List[CandidateReference]) -> Dict[str, float]:
        """Batch-rate candidates 0-100; returns {} on any failure."""
        if not items:
            return {}
        payload = [
            {"id": idx + 1, "title": it.title, "abstract": (it.summary or "")[:600], "venue": it.source or ""}
            for idx, it in enumerate(items)
        ]
        prompt = self.prompt_builder.build(
            'reranker',
            RERANK_PROMPT,
            context=context,
            candidates=json.dumps(payload, ensure_ascii=False, indent=2),
        )
        try:
            raw = await self.llm.ask('reranker', prompt)
            parsed = self.validator.load(raw)
        except Exception as exc:
            logger.warning(f"LLM rerank failed, keeping keyword relevance: {exc}")
            return {}
        if parsed is None:
            return {}
        scores: Dict[str, float] = {}
        for idx, item in enumerate(items):
            value = parsed.get(str(idx + 1))
            if value is None:
                continue
            try:
                score = float(value)
            except (TypeError, ValueError, OverflowError):
                logger.debug(f"Unusable rerank score for candidate {idx + 1} ({type(value).__name__})")
                continue
            if not math.isfinite(score):
                continue
            scores[item.identity_key()] = max(0.0, min(100.0, score))
        return scores
