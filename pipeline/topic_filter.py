"""Hard topic gate applied before scoring."""
from __future__ import annotations

import logging
from typing import Iterable, List, Optional

from core.keywords import AI_TOPIC_VOCABULARY, matches_vocabulary
from core.models import CandidateReference

logger = logging.getLogger(__name__)


class TopicFilter:
    def __init__(self, vocabulary: Optional[Iterable[str]] = None):
        self.vocabulary = [v.lower() for v in (vocabulary or AI_TOPIC_VOCABULARY) if v]

    def accepts(self, item: CandidateReference) -> bool:
        return matches_vocabulary(item.text_blob(), self.vocabulary)

    def apply(self, items: List[CandidateReference]) -> List[CandidateReference]:
        kept = [it for it in items if self.accepts(it)]
        if len(kept) < len(items):
            logger.info(f"Topic lock dropped {len(items) - len(kept)} of {len(items)} candidates")
        return kept
