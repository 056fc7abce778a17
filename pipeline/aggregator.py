"""Fan-out over queries x sources, then de-duplicate the raw pool."""
from __future__ import annotations

import asyncio
import logging
import math
import re
from typing import Dict, Iterable, List, Optional

from core.config import HarvestSettings
from core.models import CandidateReference
from core.sources.base import SourceAdapter

logger = logging.getLogger(__name__)

_TITLE_NORM_RE = re.compile(r"\s+")


def per_query_limit(need: int, query_count: int) -> int:
    return max(2, math.ceil(max(1, need) / max(1, query_count)))


def _merge_rank(item: CandidateReference) -> float:
    return (3 if item.doi else 0) + (1 if item.summary else 0) + (item.credibility or 0) / 100


def choose_better(a: CandidateReference, b: CandidateReference) -> CandidateReference:
    """Prefer DOI, then summary, then credibility; ties keep ``a``."""
    return a if _merge_rank(a) >= _merge_rank(b) else b


def _title_key(item: CandidateReference) -> str:
    return _TITLE_NORM_RE.sub(" ", (item.title or "").strip().lower())


def _same_work(a: CandidateReference, b: CandidateReference) -> bool:
    if a.doi and b.doi:
        return a.doi.strip().lower() == b.doi.strip().lower()
    return True


def dedup_refs(items: Iterable[CandidateReference]) -> List[CandidateReference]:
    """Collapse duplicates, keeping first-seen order.

    Pass 1 merges on the identity key (DOI > URL > title). Pass 2 merges
    candidates with the same normalized title unless both carry different DOIs,
    which catches the same work reported by a registry and a preprint server.
    """
    by_key: Dict[str, CandidateReference] = {}
    for item in items:
        key = item.identity_key()
        if not key:
            continue
        prev = by_key.get(key)
        by_key[key] = item if prev is None else choose_better(prev, item)

    out: List[CandidateReference] = []
    by_title: Dict[str, List[int]] = {}
    for item in by_key.values():
        slots = by_title.setdefault(_title_key(item), [])
        for idx in slots:
            if _same_work(out[idx], item):
                out[idx] = choose_better(out[idx], item)
                break
        else:
            slots.append(len(out))
            out.append(item)
    return out


class Aggregator:
    def __init__(self, adapters: Dict[str, SourceAdapter], settings: Optional[HarvestSettings] = None):
        self.adapters = adapters
        self.settings = settings or HarvestSettings()

    async def _guarded(self, adapter: SourceAdapter, query: str, limit: int) -> List[CandidateReference]:
        return await asyncio.wait_for(adapter.fetch(query, limit), timeout=self.settings.source_timeout)

    async def fan_out(self, query: str, kinds: List[str], limit: int) -> List[CandidateReference]:
        """One concurrent fetch per source for ``query``; waits for all to settle."""
        selected = [(kind, self.adapters[kind]) for kind in kinds if kind in self.adapters]
        if not selected:
            return []
        results = await asyncio.gather(
            *(self._guarded(adapter, query, limit) for _, adapter in selected),
            return_exceptions=True,
        )
        pool: List[CandidateReference] = []
        for (kind, _), result in zip(selected, results):
            if isinstance(result, BaseException):
                logger.warning(f"{kind} task failed for '{query[:80]}': {result!r}")
                continue
            pool.extend(result)
        return pool

    async def collect(self, queries: List[str], kinds: List[str], need: int) -> List[CandidateReference]:
        limit = per_query_limit(need, len(queries))
        raw: List[CandidateReference] = []
        for query in queries:
            raw.extend(await self.fan_out(query, kinds, limit))
        deduped = dedup_refs(raw)
        logger.info(f"Aggregated {len(raw)} raw candidates into {len(deduped)} unique ({len(queries)} queries x {len(kinds)} sources)")
        return deduped
