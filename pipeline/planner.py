"""Decide how many references each outline section receives."""
from __future__ import annotations

import logging
from typing import Any, Dict, Mapping, Optional

from core.models import PlanOptions
from core.outline import list_section_keys
from core.schema import SECTION_PLAN_SCHEMA
from core.validation import SchemaValidator
from llm.prompt_builder import PromptBuilder
from llm.prompts import SECTION_PLAN_PROMPT

logger = logging.getLogger(__name__)

FALLBACK_PLAN = {"I": 2}


def _as_count(value: Any) -> Optional[int]:
    try:
        return int(float(value))
    except (TypeError, ValueError, OverflowError):
        return None


def clamp_plan(raw: Mapping[str, Any], cap: int) -> Dict[str, int]:
    """Clamp each section count into [1, cap]; never returns an empty plan."""
    cap = max(1, int(cap))
    out: Dict[str, int] = {}
    for key, value in (raw or {}).items():
        key = str(key).strip()
        if not key:
            continue
        out[key] = max(1, min(cap, _as_count(value) or 0))
    return out or {"I": 1}


class SectionPlanner:
    """custom plan > fixed per-section count > LLM plan > detected section markers > {"I": 2}."""

    def __init__(self, llm: Any = None):
        self.llm = llm
        self.prompt_builder = PromptBuilder()
        self.validator = SchemaValidator(SECTION_PLAN_SCHEMA, name="Section plan")

    async def plan(self, outline_text: str, opts: Optional[PlanOptions] = None) -> Dict[str, int]:
        opts = opts or PlanOptions()
        cap = max(1, int(opts.max_per_section))
        if opts.custom_plan:
            return clamp_plan(opts.custom_plan, cap)
        if opts.fixed_per_section and opts.fixed_per_section > 0:
            return {"I": min(int(opts.fixed_per_section), cap)}
        if self.llm is not None:
            planned = await self._plan_by_llm(outline_text, cap)
            if planned:
                return planned
        return self.fallback_plan(outline_text, cap)

    def fallback_plan(self, outline_text: str, cap: int) -> Dict[str, int]:
        keys = list_section_keys(outline_text)
        if not keys:
            return dict(FALLBACK_PLAN)
        per_section = min(FALLBACK_PLAN["I"], cap)
        return {key: per_section for key in keys}

    async def _plan_by_llm(self, outline_text: str, cap: int) -> Dict[str, int]:
        prompt = self.prompt_builder.build('section_planner', SECTION_PLAN_PROMPT, outline=outline_text, cap=cap)
        try:
            raw = await self.llm.ask('section_planner', prompt)
            parsed = self.validator.load(raw)
        except Exception as exc:
            logger.warning(f"LLM section plan failed: {exc}")
            return {}
        if parsed is None:
            return {}
        bad = [key for key, value in parsed.items() if _as_count(value) is None]
        if bad:
            logger.warning(f"LLM section plan has unusable counts for {bad[:5]}")
            return {}
        return clamp_plan(parsed, cap)
