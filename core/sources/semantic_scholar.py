"""Semantic Scholar Graph API adapter."""
from __future__ import annotations

from typing import Any, List

from core.models import CandidateReference
from core.sources.base import SourceAdapter, clean_text, join_names, year_to_date

S2_SEARCH_URL = "https://api.semanticscholar.org/graph/v1/paper/search"
S2_FIELDS = "title,authors,year,venue,externalIds,url,abstract,publicationTypes"


class SemanticScholarAdapter(SourceAdapter):
    kind = "semanticscholar"
    credibility_prior = 82

    async def search(self, query: str, rows: int) -> List[CandidateReference]:
        params = {"query": query, "limit": str(rows), "fields": S2_FIELDS}
        headers = {}
        if self.settings.semantic_scholar_api_key:
            headers["x-api-key"] = self.settings.semantic_scholar_api_key
        data = await self.get_json(S2_SEARCH_URL, params=params, headers=headers)
        return self.parse(data)

    def parse(self, data: Any) -> List[CandidateReference]:
        out: List[CandidateReference] = []
        for item in (data or {}).get("data") or []:
            if not isinstance(item, dict):
                continue
            external = item.get("externalIds") or {}
            pub_types = [t.lower() for t in item.get("publicationTypes") or [] if isinstance(t, str)]
            out.append(self.make_candidate(
                title=clean_text(item.get("title")),
                url=(item.get("url") or "").strip(),
                doi=external.get("DOI") or None,
                source=clean_text(item.get("venue")) or "Semantic Scholar",
                authors=join_names([a.get("name") for a in item.get("authors") or [] if isinstance(a, dict)]),
                published_at=year_to_date(item.get("year")),
                type="CONFERENCE" if "conference" in pub_types else "JOURNAL",
                summary=clean_text(item.get("abstract")) or None,
            ))
        return out
