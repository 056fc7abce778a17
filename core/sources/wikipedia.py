"""Wikipedia search adapter (opt-in, never part of the default academic set)."""
from __future__ import annotations

from typing import Any, List

from core.models import CandidateReference
from core.sources.base import SourceAdapter, clean_text

WIKI_API_URL = "https://en.wikipedia.org/w/api.php"


class WikipediaAdapter(SourceAdapter):
    kind = "wiki"
    credibility_prior = 55

    async def search(self, query: str, rows: int) -> List[CandidateReference]:
        params = {
            "action": "query",
            "prop": "info|extracts",
            "inprop": "url",
            "exintro": "1",
            "explaintext": "1",
            "format": "json",
            "generator": "search",
            "gsrsearch": query,
            "gsrlimit": str(rows),
        }
        data = await self.get_json(WIKI_API_URL, params=params)
        return self.parse(data)

    def parse(self, data: Any) -> List[CandidateReference]:
        pages = ((data or {}).get("query") or {}).get("pages") or {}
        ordered = sorted(
            (p for p in pages.values() if isinstance(p, dict)),
            key=lambda p: p.get("index", 0),
        )
        out: List[CandidateReference] = []
        for page in ordered:
            out.append(self.make_candidate(
                title=clean_text(page.get("title")),
                url=(page.get("fullurl") or "").strip(),
                source="Wikipedia",
                type="WIKI",
                summary=clean_text(page.get("extract"))[:1000] or None,
            ))
        return out
