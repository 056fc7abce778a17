"""Per-agent LLM call settings on top of the provider clients."""
from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from core.config import Config
from llm.client import LlmClient
from llm.providers.factory import build_client

logger = logging.getLogger(__name__)


AGENT_DEFAULTS: Dict[str, Dict[str, Any]] = {
    'query_expander': {'temperature': 0.2, 'max_tokens': 300, 'timeout': 15},
    'reranker': {'temperature': 0.0, 'max_tokens': 800, 'timeout': 20},
    'section_planner': {'temperature': 0.2, 'max_tokens': 300, 'timeout': 30},
    'reference_explainer': {'temperature': 0.4, 'max_tokens': 600, 'timeout': 15},
}

DEFAULT_MODEL = 'openai/gpt-3.5-turbo'


class LlmAgents:
    """Resolve model/temperature/token/timeout per agent and run single-turn calls."""

    def __init__(self, config: Optional[Config] = None):
        self.config = config
        self._clients: Dict[str, LlmClient] = {}

    def agent_config(self, agent_name: str) -> Dict[str, Any]:
        merged = dict(AGENT_DEFAULTS.get(agent_name, {}))
        if self.config is not None:
            merged.update(self.config.agent_configs.get(agent_name, {}) or {})
        return merged

    def _client(self, provider: str) -> LlmClient:
        if self.config is None:
            raise RuntimeError("LLM is not configured")
        if provider not in self._clients:
            self._clients[provider] = build_client(self.config, provider)
        return self._clients[provider]

    async def ask(self, agent_name: str, prompt: str) -> str:
        agent_cfg = self.agent_config(agent_name)
        provider = agent_cfg.get('provider') or (self.config.default_provider if self.config else '')
        client = self._client(provider)
        workflow = self.config.get('workflow', {}) if self.config else {}
        logger.debug(f"LLM agent '{agent_name}' via {provider}")
        return await client.call(
            model=agent_cfg.get('model') or DEFAULT_MODEL,
            messages=[{"role": "user", "content": prompt}],
            max_tokens=int(agent_cfg.get('max_tokens', 500)),
            temperature=float(agent_cfg.get('temperature', 0.2)),
            timeout=float(agent_cfg.get('timeout', 30)),
            retries=int(workflow.get('retry_attempts', 1)),
            retry_delay=int(workflow.get('retry_delay', 2)),
        )
