"""Ollama provider using the /api/generate REST endpoint."""

from __future__ import annotations

import asyncio
import logging
from typing import Any

import httpx

from turnout_vision.core.config import LLMConfig
from turnout_vision.llm.client import LLMClient

logger = logging.getLogger(__name__)

# Whole CSV files go into the prompt, so ask for a generous context window.
_NUM_CTX = 16384


class OllamaClient(LLMClient):
    """Talks to a local Ollama instance."""

    def __init__(self, config: LLMConfig) -> None:
        super().__init__(config)
        self._http = httpx.AsyncClient(
            base_url=config.base_url,
            timeout=httpx.Timeout(config.timeout_seconds),
        )

    async def generate(
        self,
        prompt: str,
        *,
        system_prompt: str | None = None,
        temperature: float | None = None,
    ) -> str:
        payload: dict[str, Any] = {
            "model": self.config.model,
            "prompt": prompt,
            "stream": False,
            "options": {
                "temperature": self._temperature(temperature),
                "num_ctx": _NUM_CTX,
                "num_predict": self.config.max_tokens,
            },
        }
        if self.config.top_p is not None:
            payload["options"]["top_p"] = self.config.top_p
        if system_prompt is not None:
            payload["system"] = system_prompt

        data = await self._post("/api/generate", payload)
        return data["response"]

    async def is_available(self) -> bool:
        try:
            r = await self._http.get("/api/tags")
            return r.status_code == 200
        except httpx.HTTPError:
            return False

    async def close(self) -> None:
        await self._http.aclose()

    async def _post(self, path: str, payload: dict[str, Any]) -> dict[str, Any]:
        attempts = max(1, self.config.max_retries + 1)
        for attempt in range(attempts):
            last_try = attempt == attempts - 1
            try:
                resp = await self._http.post(path, json=payload)
            except httpx.TransportError as exc:
                if last_try:
                    raise
                logger.warning(
                    "Transport error on %s: %s, retrying (%d/%d)",
                    path, exc, attempt + 1, attempts,
                )
                await asyncio.sleep(2**attempt * 0.5)
                continue
            if resp.status_code >= 500 and not last_try:
                logger.warning(
                    "Request to %s returned %d, retrying (%d/%d)",
                    path, resp.status_code, attempt + 1, attempts,
                )
                await asyncio.sleep(2**attempt * 0.5)
                continue
            resp.raise_for_status()
            return resp.json()
        raise RuntimeError("unreachable")  # pragma: no cover
