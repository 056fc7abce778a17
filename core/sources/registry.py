"""Adapter registry keyed by source kind."""
from __future__ import annotations

from typing import Dict, Optional

from core.config import HarvestSettings
from core.sources.arxiv import ArxivAdapter
from core.sources.base import SourceAdapter
from core.sources.crossref import CrossrefAdapter
from core.sources.openalex import OpenAlexAdapter
from core.sources.pubmed import PubMedAdapter
from core.sources.semantic_scholar import SemanticScholarAdapter
from core.sources.wikipedia import WikipediaAdapter


ADAPTER_CLASSES = {
    CrossrefAdapter.kind: CrossrefAdapter,
    SemanticScholarAdapter.kind: SemanticScholarAdapter,
    ArxivAdapter.kind: ArxivAdapter,
    PubMedAdapter.kind: PubMedAdapter,
    OpenAlexAdapter.kind: OpenAlexAdapter,
    WikipediaAdapter.kind: WikipediaAdapter,
}


def build_adapters(settings: Optional[HarvestSettings] = None) -> Dict[str, SourceAdapter]:
    settings = settings or HarvestSettings()
    return {kind: cls(settings) for kind, cls in ADAPTER_CLASSES.items()}
