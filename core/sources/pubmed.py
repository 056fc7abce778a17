"""PubMed adapter (NCBI E-utilities: esearch for ids, then esummary)."""
from __future__ import annotations

import re
from typing import Any, Dict, List, Optional

from core.models import CandidateReference
from core.sources.base import SourceAdapter, clean_text, join_names, year_to_date

EUTILS_BASE = "https://eutils.ncbi.nlm.nih.gov/entrez/eutils"
ESEARCH_URL = f"{EUTILS_BASE}/esearch.fcgi"
ESUMMARY_URL = f"{EUTILS_BASE}/esummary.fcgi"

_YEAR_RE = re.compile(r"\d{4}")


def _doi_from_summary(summary: Dict[str, Any]) -> Optional[str]:
    for aid in summary.get("articleids") or []:
        if isinstance(aid, dict) and aid.get("idtype") == "doi" and aid.get("value"):
            return str(aid["value"]).strip()
    elocation = str(summary.get("elocationid") or "")
    if elocation.lower().startswith("doi:"):
        return elocation[4:].strip() or None
    return None


class PubMedAdapter(SourceAdapter):
    kind = "pubmed"
    credibility_prior = 86

    def _base_params(self) -> Dict[str, str]:
        params = {"db": "pubmed", "retmode": "json", "tool": "refharvest"}
        if self.settings.ncbi_api_key:
            params["api_key"] = self.settings.ncbi_api_key
        if self.settings.contact_email:
            params["email"] = self.settings.contact_email
        return params

    async def search(self, query: str, rows: int) -> List[CandidateReference]:
        search_params = {**self._base_params(), "retmax": str(rows), "term": query}
        found = await self.get_json(ESEARCH_URL, params=search_params)
        ids = [str(i) for i in ((found or {}).get("esearchresult") or {}).get("idlist") or []]
        if not ids:
            return []
        summary_params = {**self._base_params(), "id": ",".join(ids)}
        summaries = await self.get_json(ESUMMARY_URL, params=summary_params)
        return self.parse(ids, summaries)

    def parse(self, ids: List[str], data: Any) -> List[CandidateReference]:
        result = (data or {}).get("result") or {}
        out: List[CandidateReference] = []
        for pmid in ids:
            summary = result.get(pmid)
            if not isinstance(summary, dict):
                continue
            title = clean_text(summary.get("title"))
            if not title:
                continue
            year_match = _YEAR_RE.search(str(summary.get("pubdate") or summary.get("epubdate") or ""))
            out.append(self.make_candidate(
                title=title,
                url=f"https://pubmed.ncbi.nlm.nih.gov/{pmid}/",
                doi=_doi_from_summary(summary),
                source=clean_text(summary.get("fulljournalname") or summary.get("source")) or "PubMed",
                authors=join_names([a.get("name") for a in summary.get("authors") or [] if isinstance(a, dict)]),
                published_at=year_to_date(year_match.group(0)) if year_match else None,
                type="JOURNAL",
                # esummary carries no abstract
                summary=None,
            ))
        return out
