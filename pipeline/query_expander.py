"""Seed construction and search query expansion."""
from __future__ import annotations

import logging
from typing import Any, List, Optional, Tuple

from core.config import HarvestSettings
from core.keywords import AI_QUERY_SUFFIXES, QUERY_SYNONYMS, limit_words, uniq_strings
from core.outline import section_hint
from core.schema import QUERY_LIST_SCHEMA
from core.validation import SchemaValidator
from llm.prompt_builder import PromptBuilder
from llm.prompts import QUERY_EXPAND_PROMPT

logger = logging.getLogger(__name__)

MAX_QUERY_WORDS = 10


def build_seed(paper_title: str, outline_text: str, section_key: str, hint_chars: int = 160) -> Tuple[str, str]:
    """Return (seed query, section hint) for one outline section."""
    hint = section_hint(outline_text, section_key, max_chars=hint_chars)
    seed = " ".join(p for p in [(paper_title or "").strip(), (section_key or "").strip(), hint] if p)
    return seed.strip(), hint


class QueryExpander:
    """Deterministic expansion: seed, topic-lock variants, then synonym variants."""

    def __init__(self, settings: Optional[HarvestSettings] = None):
        self.settings = settings or HarvestSettings()

    def deterministic(self, seed: str, ai_topic_lock: bool = False) -> List[str]:
        seed = (seed or "").strip()
        candidates = [seed]
        if ai_topic_lock:
            candidates.extend(f"{seed} {suffix}" for suffix in AI_QUERY_SUFFIXES)
        for pattern, replacement in QUERY_SYNONYMS:
            candidates.append(pattern.sub(replacement, seed))
        cap = self.settings.max_queries_topic_lock if ai_topic_lock else self.settings.max_queries
        return uniq_strings(candidates)[:cap]

    async def expand(self, seed: str, ai_topic_lock: bool = False) -> List[str]:
        return self.deterministic(seed, ai_topic_lock)


class LlmQueryExpander(QueryExpander):
    """Adds up to N model-written queries; any failure yields the deterministic list."""

    def __init__(self, llm: Any, settings: Optional[HarvestSettings] = None):
        super().__init__(settings)
        self.llm = llm
        self.prompt_builder = PromptBuilder()
        self.validator = SchemaValidator(QUERY_LIST_SCHEMA, name="Query expansion")

    async def expand(self, seed: str, ai_topic_lock: bool = False) -> List[str]:
        basic = self.deterministic(seed, ai_topic_lock)
        try:
            extra = await self._ask(seed)
        except Exception as exc:
            logger.warning(f"LLM query expansion failed, using deterministic queries: {exc}")
            return basic
        if not extra:
            return basic
        return uniq_strings(basic + extra)[:self.settings.max_queries_llm]

    async def _ask(self, seed: str) -> List[str]:
        count = self.settings.llm_query_count
        prompt = self.prompt_builder.build('query_expander', QUERY_EXPAND_PROMPT, seed=seed, count=count)
        raw = await self.llm.ask('query_expander', prompt)
        parsed = self.validator.load(raw)
        if parsed is None:
            return []
        queries = [limit_words(q, MAX_QUERY_WORDS) for q in parsed]
        return uniq_strings(queries)[:count]


def make_expander(use_llm: bool, llm: Any = None, settings: Optional[HarvestSettings] = None) -> QueryExpander:
    if use_llm and llm is not None:
        return LlmQueryExpander(llm, settings)
    return QueryExpander(settings)
