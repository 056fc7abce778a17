"""Reference harvesting pipeline: expand -> fan out -> dedup -> filter -> rank -> truncate."""
from __future__ import annotations

import asyncio
import dataclasses
import logging
import time
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

from core.config import Config, HarvestSettings
from core.models import SOURCE_KINDS, GatherOptions, PlanOptions, Reference
from core.outline import extract_section_text
from core.sources.base import SourceAdapter
from core.sources.registry import build_adapters
from llm.agents import LlmAgents
from llm.prompt_builder import PromptBuilder
from llm.prompts import EXPLAIN_REFERENCE_PROMPT
from pipeline.aggregator import Aggregator
from pipeline.planner import SectionPlanner
from pipeline.query_expander import build_seed, make_expander
from pipeline.ranker import Ranker
from pipeline.topic_filter import TopicFilter

logger = logging.getLogger(__name__)


class ReferenceHarvester:
    def __init__(
        self,
        settings: Optional[HarvestSettings] = None,
        llm: Any = None,
        adapters: Optional[Dict[str, SourceAdapter]] = None,
        now_year: Optional[int] = None,
    ):
        self.settings = settings or HarvestSettings()
        self.llm = llm
        self.adapters = adapters if adapters is not None else build_adapters(self.settings)
        self.aggregator = Aggregator(self.adapters, self.settings)
        self.topic_filter = TopicFilter(self.settings.topic_vocabulary)
        self.ranker = Ranker(self.settings, llm=llm, now_year=now_year)
        self.planner = SectionPlanner(llm)
        self.prompt_builder = PromptBuilder()

    @classmethod
    def from_config(cls, config_path: str | Path = "config/default.yaml") -> "ReferenceHarvester":
        config = Config(config_path)
        return cls(HarvestSettings.from_config(config), llm=LlmAgents(config))

    def resolve_sources(self, requested: Optional[List[str]]) -> List[str]:
        if requested:
            candidates = [str(k).strip().lower() for k in requested]
        else:
            candidates = [k for k in self.settings.default_sources if k != 'wiki']
            if self.settings.openalex_enabled:
                candidates.append('openalex')
        kinds: List[str] = []
        for kind in candidates:
            if kind in kinds:
                continue
            if kind not in SOURCE_KINDS:
                logger.warning(f"Unknown source kind ignored: {kind}")
                continue
            if kind == 'openalex' and not self.settings.openalex_enabled:
                logger.debug("OpenAlex requested but disabled (OPENALEX_ENABLE)")
                continue
            kinds.append(kind)
        return kinds

    async def gather_for_section(
        self,
        paper_title: str,
        outline_text: str,
        section_key: str,
        opts: Optional[GatherOptions] = None,
    ) -> List[Reference]:
        """Ranked, de-duplicated references for one outline section (at most ``opts.need``).

        Upstream and LLM failures only shrink the result; this never raises for them.
        """
        opts = opts or GatherOptions()
        try:
            return await self._gather(paper_title, outline_text, section_key, opts)
        except Exception as exc:
            logger.error(f"Reference gathering failed for section '{section_key}': {exc}", exc_info=True)
            return []

    async def _gather(self, paper_title: str, outline_text: str, section_key: str, opts: GatherOptions) -> List[Reference]:
        start = time.time()
        need = opts.normalized_need()
        kinds = self.resolve_sources(opts.sources)
        if not kinds:
            logger.warning("No usable sources selected")
            return []

        seed, hint = build_seed(paper_title, outline_text, section_key, self.settings.seed_hint_chars)
        use_llm_expand = bool(opts.enable_llm_query_expand or self.settings.llm_expand)
        expander = make_expander(use_llm_expand, self.llm, self.settings)
        queries = await expander.expand(seed, opts.ai_topic_lock)
        if not queries:
            logger.warning(f"No queries for section '{section_key}'")
            return []
        logger.info(f"Section '{section_key}': {len(queries)} queries over {', '.join(kinds)}")

        candidates = await self.aggregator.collect(queries, kinds, need)
        if opts.ai_topic_lock:
            candidates = self.topic_filter.apply(candidates)

        context = f"{paper_title or ''}\n{hint}".strip()
        use_llm_rerank = bool(opts.enable_llm_rerank or self.settings.llm_rerank)
        ranked = await self.ranker.rank(candidates, context, topic_lock=opts.ai_topic_lock, use_llm=use_llm_rerank)

        selected = ranked[:need]
        for item in selected:
            item.section_key = section_key
        logger.info(f"Section '{section_key}': {len(selected)}/{need} references in {time.time() - start:.1f}s")
        return [item.to_public() for item in selected]

    async def explain_reference(self, ref: Reference, paper_title: str, outline_text: str) -> Reference:
        """Replace the summary with a model-written value statement; keeps the record on failure."""
        if self.llm is None:
            return ref
        section_text = extract_section_text(outline_text, ref.section_key) or ref.section_key
        prompt = self.prompt_builder.build(
            'reference_explainer',
            EXPLAIN_REFERENCE_PROMPT,
            paper_title=paper_title,
            section_key=ref.section_key,
            section_text=section_text,
            title=ref.title,
        )
        try:
            text = (await self.llm.ask('reference_explainer', prompt) or "").strip()
        except Exception as exc:
            logger.warning(f"Reference explanation failed for '{ref.title[:60]}': {exc}")
            return ref
        return dataclasses.replace(ref, summary=text) if text else ref

    async def gather_for_outline(
        self,
        paper_title: str,
        outline_text: str,
        plan_opts: Optional[PlanOptions] = None,
        opts: Optional[GatherOptions] = None,
        explain: bool = False,
        progress: Optional[Callable[[str, List[Reference]], None]] = None,
    ) -> Dict[str, List[Reference]]:
        """Plan per-section counts, then gather each section in turn."""
        opts = opts or GatherOptions()
        plan = await self.planner.plan(outline_text, plan_opts)
        logger.info(f"Section plan: {plan}")
        results: Dict[str, List[Reference]] = {}
        for section_key, need in plan.items():
            section_opts = dataclasses.replace(opts, need=need)
            refs = await self.gather_for_section(paper_title, outline_text, section_key, section_opts)
            if explain and refs:
                refs = list(await asyncio.gather(
                    *(self.explain_reference(ref, paper_title, outline_text) for ref in refs)
                ))
            results[section_key] = refs
            if progress:
                progress(section_key, refs)
        return results

    def gather_for_section_sync(
        self,
        paper_title: str,
        outline_text: str,
        section_key: str,
        opts: Optional[GatherOptions] = None,
    ) -> List[Reference]:
        return asyncio.run(self.gather_for_section(paper_title, outline_text, section_key, opts))
