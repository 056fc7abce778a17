"""Provider factory: one chat-completion client per `llm.providers` entry."""
from __future__ import annotations

from typing import Any, Dict

from core.config import Config
from llm.client import LlmClient

# Optional app attribution understood by OpenRouter.
ATTRIBUTION_HEADERS = {'referer': 'HTTP-Referer', 'title': 'X-Title'}


def provider_headers(provider: Dict[str, Any]) -> Dict[str, str]:
    headers = {str(k): str(v) for k, v in (provider.get('headers') or {}).items()}
    for key, header in ATTRIBUTION_HEADERS.items():
        value = provider.get(key)
        if value and header not in headers:
            headers[header] = str(value)
    return headers


def build_client(cfg: Config, provider_name: str) -> LlmClient:
    provider = cfg.providers.get(provider_name)
    if not provider:
        raise ValueError(f"Unknown LLM provider: {provider_name}")
    api_key = cfg.resolve_api_key(provider_name)
    if not api_key:
        raise ValueError(f"Missing API key for provider {provider_name} (set {provider.get('api_key_env')})")
    base_url = provider.get('base_url')
    if not base_url:
        raise ValueError(f"Missing base_url for provider: {provider_name}")
    timeout = provider.get('timeout') or (cfg.get('workflow', {}) or {}).get('api_timeout', 30)
    return LlmClient(base_url=base_url, api_key=api_key, headers=provider_headers(provider), timeout=float(timeout))
