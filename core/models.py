"""Candidate reference records and gather options."""
from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional


SOURCE_KINDS = ("crossref", "semanticscholar", "arxiv", "pubmed", "openalex", "wiki")
DEFAULT_SOURCES = ("crossref", "semanticscholar", "arxiv", "pubmed")
DEFAULT_NEED = 5


@dataclass(frozen=True)
class Reference:
    """Public reference record handed to callers (no internal bookkeeping)."""

    section_key: str
    title: str
    url: str
    doi: Optional[str] = None
    source: Optional[str] = None
    authors: Optional[str] = None
    published_at: Optional[str] = None
    type: Optional[str] = None
    summary: Optional[str] = None
    credibility: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class CandidateReference:
    """Working record used inside the harvesting pipeline."""

    title: str
    url: str
    section_key: str = ""
    doi: Optional[str] = None
    source: Optional[str] = None
    authors: Optional[str] = None
    published_at: Optional[str] = None
    type: Optional[str] = None
    summary: Optional[str] = None
    credibility: int = 0
    source_kind: str = ""
    score: float = 0.0

    def identity_key(self) -> str:
        return (self.doi or self.url or self.title or "").strip().lower()

    def year(self) -> Optional[int]:
        head = (self.published_at or "")[:4]
        if len(head) == 4 and head.isdigit():
            return int(head) or None
        return None

    def text_blob(self) -> str:
        return f"{self.title} {self.summary or ''} {self.source or ''}".lower()

    def to_public(self) -> Reference:
        return Reference(
            section_key=self.section_key,
            title=self.title,
            url=self.url,
            doi=self.doi,
            source=self.source,
            authors=self.authors,
            published_at=self.published_at,
            type=self.type,
            summary=self.summary,
            credibility=int(self.credibility),
        )


@dataclass
class GatherOptions:
    need: int = DEFAULT_NEED
    sources: Optional[List[str]] = None
    enable_llm_query_expand: bool = False
    enable_llm_rerank: bool = False
    ai_topic_lock: bool = False

    def normalized_need(self) -> int:
        try:
            need = int(self.need)
        except (TypeError, ValueError):
            return DEFAULT_NEED
        return need if need > 0 else DEFAULT_NEED


@dataclass
class PlanOptions:
    """How many references each outline section should receive."""

    max_per_section: int = 3
    fixed_per_section: Optional[int] = None
    custom_plan: Dict[str, int] = field(default_factory=dict)
