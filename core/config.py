"""
Config loader for RefHarvest.
"""
from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import yaml
from dotenv import load_dotenv

from core.keywords import AI_TOPIC_VOCABULARY
from core.models import DEFAULT_SOURCES


class Config:
    """Load YAML config with env overlay."""

    def __init__(self, path: str | Path):
        self.path = Path(path)
        load_dotenv()
        self.data = self._load()

    def _load(self) -> Dict[str, Any]:
        if not self.path.exists():
            raise FileNotFoundError(f"Config not found: {self.path}")
        with self.path.open('r', encoding='utf-8') as f:
            data = yaml.safe_load(f) or {}
        return data

    def get(self, key: str, default: Any = None) -> Any:
        return self.data.get(key, default)

    @property
    def llm(self) -> Dict[str, Any]:
        return self.data.get('llm', {})

    @property
    def providers(self) -> Dict[str, Any]:
        return self.llm.get('providers', {})

    @property
    def agent_configs(self) -> Dict[str, Any]:
        return self.llm.get('agents', {})

    @property
    def default_provider(self) -> str:
        return self.llm.get('default_provider', 'openrouter')

    def resolve_api_key(self, provider_name: str) -> str | None:
        provider = self.providers.get(provider_name, {})
        env_key = provider.get('api_key_env')
        if env_key:
            return os.getenv(env_key)
        return None


def _env_flag(name: str) -> bool:
    return os.getenv(name, '').strip() == '1'


@dataclass
class ScoreWeights:
    relevance: float
    credibility: float
    recency: float


@dataclass
class HarvestSettings:
    """Process-wide harvesting settings, resolved once and passed to every component."""

    user_agent_site: str = "https://assignment-terminator.example"
    source_timeout: float = 20.0
    semantic_scholar_api_key: str = ""
    ncbi_api_key: str = ""
    contact_email: str = ""
    openalex_enabled: bool = False
    llm_expand: bool = False
    llm_rerank: bool = False
    default_sources: Tuple[str, ...] = DEFAULT_SOURCES
    max_queries: int = 4
    max_queries_topic_lock: int = 5
    max_queries_llm: int = 6
    llm_query_count: int = 3
    seed_hint_chars: int = 160
    rerank_top_n: int = 20
    topic_bonus_cap: float = 30.0
    topic_bonus_per_hit: float = 10.0
    topic_vocabulary: List[str] = field(default_factory=lambda: list(AI_TOPIC_VOCABULARY))
    weights: ScoreWeights = field(default_factory=lambda: ScoreWeights(0.50, 0.30, 0.20))
    topic_lock_weights: ScoreWeights = field(default_factory=lambda: ScoreWeights(0.65, 0.25, 0.10))

    @property
    def user_agent(self) -> str:
        return f"AssignmentTerminator (+{self.user_agent_site})"

    @classmethod
    def from_config(cls, config: Optional[Config] = None) -> "HarvestSettings":
        data = config.data if config is not None else {}
        sources_cfg = data.get('sources', {}) or {}
        query_cfg = data.get('query_expansion', {}) or {}
        scoring_cfg = data.get('scoring', {}) or {}
        topic_cfg = data.get('topic_lock', {}) or {}
        weights_cfg = scoring_cfg.get('weights', {}) or {}

        defaults = cls()
        settings = cls(
            user_agent_site=os.getenv('NEXT_PUBLIC_APP_URL') or os.getenv('APP_URL')
            or sources_cfg.get('user_agent_site', defaults.user_agent_site),
            source_timeout=float(sources_cfg.get('timeout', defaults.source_timeout)),
            semantic_scholar_api_key=os.getenv('SEMANTIC_SCHOLAR_API_KEY', ''),
            ncbi_api_key=os.getenv('NCBI_API_KEY', ''),
            contact_email=os.getenv('CONTACT_EMAIL') or sources_cfg.get('contact_email', ''),
            openalex_enabled=_env_flag('OPENALEX_ENABLE') or bool(sources_cfg.get('openalex_enable', False)),
            llm_expand=_env_flag('REF_LLM_EXPAND') or bool(query_cfg.get('use_llm', False)),
            llm_rerank=_env_flag('REF_LLM_RERANK') or bool(scoring_cfg.get('use_llm', False)),
            default_sources=tuple(sources_cfg.get('default', defaults.default_sources)),
            max_queries=int(query_cfg.get('max_queries', defaults.max_queries)),
            max_queries_topic_lock=int(query_cfg.get('max_queries_topic_lock', defaults.max_queries_topic_lock)),
            max_queries_llm=int(query_cfg.get('max_queries_llm', defaults.max_queries_llm)),
            llm_query_count=int(query_cfg.get('llm_query_count', defaults.llm_query_count)),
            seed_hint_chars=int(query_cfg.get('seed_hint_chars', defaults.seed_hint_chars)),
            rerank_top_n=int(scoring_cfg.get('rerank_top_n', defaults.rerank_top_n)),
            topic_bonus_cap=float(topic_cfg.get('bonus_cap', defaults.topic_bonus_cap)),
            topic_bonus_per_hit=float(topic_cfg.get('bonus_per_hit', defaults.topic_bonus_per_hit)),
            topic_vocabulary=list(topic_cfg.get('vocabulary') or defaults.topic_vocabulary),
            weights=_weights(weights_cfg.get('default'), defaults.weights),
            topic_lock_weights=_weights(weights_cfg.get('topic_lock'), defaults.topic_lock_weights),
        )
        return settings


def _weights(raw: Optional[Dict[str, Any]], fallback: ScoreWeights) -> ScoreWeights:
    if not raw:
        return fallback
    weights = ScoreWeights(
        relevance=float(raw.get('relevance', fallback.relevance)),
        credibility=float(raw.get('credibility', fallback.credibility)),
        recency=float(raw.get('recency', fallback.recency)),
    )
    total = weights.relevance + weights.credibility + weights.recency
    if abs(total - 1.0) > 1e-6:
        raise ValueError(f"Score weights must sum to 1.0, got {total:.3f}")
    return weights
