"""Shared plumbing for bibliographic source adapters."""
from __future__ import annotations

import html
import logging
import re
import time
from typing import Any, Dict, List, Optional

import aiohttp

from core.config import HarvestSettings
from core.models import CandidateReference

logger = logging.getLogger(__name__)

_TAG_RE = re.compile(r"<[^>]+>")
_WS_RE = re.compile(r"\s+")


def clean_text(value: Any) -> str:
    """Decode entities, drop markup tags and collapse whitespace."""
    if value is None:
        return ""
    text = html.unescape(str(value))
    text = _TAG_RE.sub(" ", text)
    return _WS_RE.sub(" ", text).strip()


def year_to_date(year: Any) -> Optional[str]:
    try:
        value = int(str(year).strip()[:4])
    except (TypeError, ValueError):
        return None
    if value <= 0:
        return None
    return f"{value:04d}-01-01"


def join_names(names: List[Any]) -> Optional[str]:
    cleaned = [clean_text(n) for n in names if n]
    cleaned = [n for n in cleaned if n]
    return "; ".join(cleaned) or None


class SourceAdapter:
    """One bibliographic API. ``fetch`` never raises; failures yield []."""

    kind: str = ""
    credibility_prior: int = 60

    def __init__(self, settings: Optional[HarvestSettings] = None):
        self.settings = settings or HarvestSettings()
        self.timeout = self.settings.source_timeout
        self.headers = {
            "User-Agent": self.settings.user_agent,
            "Accept": "application/json",
        }

    async def fetch(self, query: str, limit: int) -> List[CandidateReference]:
        query = (query or "").strip()
        if not query:
            return []
        rows = max(3, int(limit or 0))
        start = time.time()
        try:
            items = await self.search(query, rows)
        except Exception as exc:
            logger.warning(f"{self.kind} fetch failed for '{query[:80]}': {exc}")
            return []
        kept = [it for it in items if it.title and it.url]
        logger.debug(f"{self.kind}: {len(kept)} candidates for '{query[:80]}' in {time.time() - start:.2f}s")
        return kept

    async def search(self, query: str, rows: int) -> List[CandidateReference]:
        raise NotImplementedError

    def make_candidate(self, **fields: Any) -> CandidateReference:
        fields.setdefault('credibility', self.credibility_prior)
        return CandidateReference(source_kind=self.kind, **fields)

    async def _get(self, url: str, params: Optional[Dict[str, Any]] = None, headers: Optional[Dict[str, str]] = None, as_text: bool = False) -> Any:
        timeout = aiohttp.ClientTimeout(total=self.timeout)
        merged = {**self.headers, **(headers or {})}
        async with aiohttp.ClientSession(timeout=timeout) as session:
            async with session.get(url, headers=merged, params=params) as response:
                response.raise_for_status()
                if as_text:
                    return await response.text()
                return await response.json(content_type=None)

    async def get_json(self, url: str, params: Optional[Dict[str, Any]] = None, headers: Optional[Dict[str, str]] = None) -> Any:
        return await self._get(url, params=params, headers=headers)

    async def get_text(self, url: str, params: Optional[Dict[str, Any]] = None, headers: Optional[Dict[str, str]] = None) -> str:
        return await self._get(url, params=params, headers=headers, as_text=True)
