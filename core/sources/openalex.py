"""OpenAlex works adapter."""
from __future__ import annotations

from typing import Any, Dict, List, Optional

from core.models import CandidateReference
from core.sources.base import SourceAdapter, clean_text, join_names, year_to_date

OPENALEX_WORKS_URL = "https://api.openalex.org/works"


def rebuild_abstract(inverted: Optional[Dict[str, List[int]]]) -> Optional[str]:
    """OpenAlex ships abstracts as {word: [positions]}; put the words back in order."""
    if not inverted:
        return None
    positions = []
    for word, idxs in inverted.items():
        for idx in idxs or []:
            positions.append((idx, word))
    positions.sort(key=lambda p: p[0])
    text = " ".join(word for _, word in positions).strip()
    return clean_text(text) or None


class OpenAlexAdapter(SourceAdapter):
    kind = "openalex"
    credibility_prior = 80

    async def search(self, query: str, rows: int) -> List[CandidateReference]:
        params = {"search": query, "per_page": str(rows), "sort": "relevance_score:desc"}
        if self.settings.contact_email:
            params["mailto"] = self.settings.contact_email
        data = await self.get_json(OPENALEX_WORKS_URL, params=params)
        return self.parse(data)

    def parse(self, data: Any) -> List[CandidateReference]:
        out: List[CandidateReference] = []
        for item in (data or {}).get("results") or []:
            if not isinstance(item, dict):
                continue
            location = item.get("primary_location") or {}
            venue = (location.get("source") or {}).get("display_name")
            doi = ((item.get("ids") or {}).get("doi") or item.get("doi") or "").replace("https://doi.org/", "").strip()
            out.append(self.make_candidate(
                title=clean_text(item.get("title") or item.get("display_name")),
                url=(location.get("landing_page_url") or item.get("id") or "").strip(),
                doi=doi or None,
                source=clean_text(venue) or "OpenAlex",
                authors=join_names([
                    (a.get("author") or {}).get("display_name")
                    for a in item.get("authorships") or [] if isinstance(a, dict)
                ]),
                published_at=item.get("publication_date") or year_to_date(item.get("publication_year")),
                type=(item.get("type") or "journal").upper(),
                summary=rebuild_abstract(item.get("abstract_inverted_index")),
            ))
        return out
