"""arXiv Atom API adapter."""
from __future__ import annotations

from typing import List

import defusedxml.ElementTree as ET

from core.models import CandidateReference
from core.sources.base import SourceAdapter, clean_text, join_names


ARXIV_API_URL = "http://export.arxiv.org/api/query"
ATOM_NS = {
    "atom": "http://www.w3.org/2005/Atom",
    "arxiv": "http://arxiv.org/schemas/atom",
}


def _child_text(entry, tag: str) -> str:
    elem = entry.find(tag, ATOM_NS)
    if elem is None or elem.text is None:
        return ""
    return clean_text(elem.text)


class ArxivAdapter(SourceAdapter):
    kind = "arxiv"
    credibility_prior = 70

    def __init__(self, settings=None):
        super().__init__(settings)
        self.headers["Accept"] = "application/atom+xml"

    async def search(self, query: str, rows: int) -> List[CandidateReference]:
        # Field syntax characters would be read as arXiv operators
        escaped = query.replace(":", " ").replace("(", " ").replace(")", " ")
        params = {
            "search_query": f"all:{escaped}",
            "start": "0",
            "max_results": str(rows),
        }
        xml_text = await self.get_text(ARXIV_API_URL, params=params)
        return self.parse(xml_text)

    def parse(self, xml_text: str) -> List[CandidateReference]:
        root = ET.fromstring(xml_text)
        out: List[CandidateReference] = []
        for entry in root.findall("atom:entry", ATOM_NS):
            title = _child_text(entry, "atom:title")
            url = _child_text(entry, "atom:id")
            if not title or not url:
                continue
            published = _child_text(entry, "atom:published")
            authors = [
                _child_text(author, "atom:name")
                for author in entry.findall("atom:author", ATOM_NS)
            ]
            out.append(self.make_candidate(
                title=title,
                url=url,
                doi=_child_text(entry, "arxiv:doi") or None,
                source="arXiv",
                authors=join_names(authors),
                published_at=published[:10] if published[:4].isdigit() else None,
                type="PREPRINT",
                summary=_child_text(entry, "atom:summary") or None,
            ))
        return out
