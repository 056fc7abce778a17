"""
Crossref adapter - async works search
"""
from __future__ import annotations

from typing import Any, Dict, List, Optional

from core.models import CandidateReference
from core.sources.base import SourceAdapter, clean_text, join_names, year_to_date

CROSSREF_WORKS_URL = "https://api.crossref.org/works"


class CrossrefDataExtractor:
    """Pull display fields out of a Crossref work record."""

    @staticmethod
    def extract_title(crossref_data: Dict) -> str:
        titles = crossref_data.get("title", [])
        if titles and isinstance(titles[0], str):
            return clean_text(titles[0])
        return ""

    @staticmethod
    def extract_authors(crossref_data: Dict) -> Optional[str]:
        names = []
        for author in crossref_data.get("author", []) or []:
            if not isinstance(author, dict):
                continue
            full = " ".join(p for p in [author.get("given"), author.get("family")] if p)
            names.append(full or author.get("name"))
        return join_names(names)

    @staticmethod
    def extract_year(crossref_data: Dict) -> Optional[int]:
        # issued is always present when any date is; fall back through the others
        for field in ["issued", "published", "published-print", "published-online", "created"]:
            date_data = crossref_data.get(field) or {}
            parts = date_data.get("date-parts") or []
            if parts and parts[0] and parts[0][0]:
                try:
                    return int(parts[0][0])
                except (TypeError, ValueError):
                    continue
        return None

    @staticmethod
    def extract_venue(crossref_data: Dict) -> Optional[str]:
        containers = crossref_data.get("container-title") or []
        venue = clean_text(containers[0]) if containers else ""
        return venue or None

    @staticmethod
    def extract_abstract(crossref_data: Dict) -> Optional[str]:
        # Crossref abstracts are JATS XML fragments
        abstract = clean_text(crossref_data.get("abstract"))
        return abstract or None

    @staticmethod
    def extract_url(crossref_data: Dict) -> str:
        url = (crossref_data.get("URL") or "").strip()
        doi = (crossref_data.get("DOI") or "").strip()
        if not url and doi:
            url = f"https://doi.org/{doi}"
        return url


class CrossrefAdapter(SourceAdapter):
    kind = "crossref"
    credibility_prior = 88

    async def search(self, query: str, rows: int) -> List[CandidateReference]:
        params = {
            "query": query,
            "rows": str(rows),
            "select": "title,author,issued,container-title,DOI,URL,type,abstract",
        }
        data = await self.get_json(CROSSREF_WORKS_URL, params=params)
        return self.parse(data)

    def parse(self, data: Any) -> List[CandidateReference]:
        items = ((data or {}).get("message") or {}).get("items") or []
        out: List[CandidateReference] = []
        for item in items:
            if not isinstance(item, dict):
                continue
            out.append(self.make_candidate(
                title=CrossrefDataExtractor.extract_title(item),
                url=CrossrefDataExtractor.extract_url(item),
                doi=(item.get("DOI") or "").strip() or None,
                source=CrossrefDataExtractor.extract_venue(item),
                authors=CrossrefDataExtractor.extract_authors(item),
                published_at=year_to_date(CrossrefDataExtractor.extract_year(item)),
                type=(item.get("type") or "journal").upper(),
                summary=CrossrefDataExtractor.extract_abstract(item),
            ))
        return out
