"""Async chat-completion client."""
from __future__ import annotations

import asyncio
import logging
from typing import Dict, List, Optional

import aiohttp

logger = logging.getLogger(__name__)


class LlmClient:
    def __init__(self, base_url: str, api_key: str, headers: Optional[Dict[str, str]] = None, timeout: float = 30):
        self.base_url = base_url
        self.api_key = api_key
        self.headers = headers or {}
        self.timeout = timeout

    async def call(
        self,
        model: str,
        messages: List[Dict[str, str]],
        max_tokens: int,
        temperature: float,
        timeout: Optional[float] = None,
        retries: int = 1,
        retry_delay: int = 2,
    ) -> str:
        last_exc: Optional[Exception] = None
        for attempt in range(max(1, retries)):
            try:
                headers = {
                    "Authorization": f"Bearer {self.api_key}",
                    "Content-Type": "application/json",
                    **self.headers,
                }
                data = {
                    "model": model,
                    "messages": messages,
                    "max_tokens": max_tokens,
                    "temperature": temperature,
                }
                client_timeout = aiohttp.ClientTimeout(total=timeout or self.timeout)
                async with aiohttp.ClientSession(timeout=client_timeout) as session:
                    async with session.post(self.base_url, headers=headers, json=data) as resp:
                        resp.raise_for_status()
                        payload = await resp.json(content_type=None)
                        content = payload["choices"][0]["message"]["content"]
                        return (content or "").strip()
            except Exception as exc:
                last_exc = exc
                if attempt < retries - 1:
                    logger.debug(f"LLM call failed (attempt {attempt + 1}/{retries}): {exc}")
                    await asyncio.sleep(retry_delay)
                    continue
                raise
        if last_exc:
            raise last_exc
        raise RuntimeError("LLM call failed")
