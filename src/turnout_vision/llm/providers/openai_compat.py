"""OpenAI-compatible provider (OpenAI, vLLM, llama-cpp-python, etc.)."""

from __future__ import annotations

import asyncio
import logging
from typing import Any

import httpx

from turnout_vision.core.config import LLMConfig
from turnout_vision.llm.client import LLMClient

logger = logging.getLogger(__name__)


class OpenAICompatClient(LLMClient):
    """Talks to any server that exposes /v1/chat/completions."""

    def __init__(self, config: LLMConfig) -> None:
        super().__init__(config)
        headers: dict[str, str] = {}
        if config.api_key:
            headers["Authorization"] = f"Bearer {config.api_key}"
        self._http = httpx.AsyncClient(
            base_url=config.base_url,
            timeout=httpx.Timeout(config.timeout_seconds),
            headers=headers,
        )

    async def generate(
        self,
        prompt: str,
        *,
        system_prompt: str | None = None,
        temperature: float | None = None,
    ) -> str:
        messages: list[dict[str, str]] = []
        if system_prompt is not None:
            messages.append({"role": "system", "content": system_prompt})
        messages.append({"role": "user", "content": prompt})

        payload: dict[str, Any] = {
            "model": self.config.model,
            "messages": messages,
            "temperature": self._temperature(temperature),
            "stream": False,
            "max_tokens": self.config.max_tokens,
        }
        if self.config.top_p is not None:
            payload["top_p"] = self.config.top_p

        resp = await self._request_with_retry("POST", "/v1/chat/completions", json=payload)
        resp.raise_for_status()
        data = resp.json()
        return data["choices"][0]["message"]["content"]

    async def is_available(self) -> bool:
        try:
            r = await self._http.get("/v1/models")
            return r.status_code == 200
        except httpx.HTTPError:
            return False

    async def close(self) -> None:
        await self._http.aclose()

    async def _request_with_retry(
        self,
        method: str,
        url: str,
        **kwargs: Any,
    ) -> httpx.Response:
        """Execute a request, retrying on 5xx responses and transport errors."""
        max_attempts = max(1, self.config.max_retries + 1)
        last_resp: httpx.Response | None = None

        for attempt in range(max_attempts):
            try:
                resp = await self._http.request(method, url, **kwargs)
            except httpx.TransportError as exc:
                if attempt < max_attempts - 1:
                    delay = 0.5 * (2 ** attempt)
                    logger.warning(
                        "Transport error on %s: %s, retrying in %.1fs (%d/%d)",
                        url, exc, delay, attempt + 1, max_attempts,
                    )
                    await asyncio.sleep(delay)
                    continue
                raise
            if resp.status_code < 500:
                return resp
            last_resp = resp
            if attempt < max_attempts - 1:
                delay = 0.5 * (2 ** attempt)
                logger.warning(
                    "Request to %s returned %d, retrying in %.1fs (%d/%d)",
                    url, resp.status_code, delay, attempt + 1, max_attempts,
                )
                await asyncio.sleep(delay)

        return last_resp  # type: ignore[return-value]
