"""Abstract LLM client interface and factory function."""

from __future__ import annotations

import abc

from turnout_vision.core.config import LLMConfig


class LLMClient(abc.ABC):
    """Abstract base class for text-generation providers."""

    def __init__(self, config: LLMConfig) -> None:
        self.config = config

    @abc.abstractmethod
    async def generate(
        self,
        prompt: str,
        *,
        system_prompt: str | None = None,
        temperature: float | None = None,
    ) -> str:
        """Generate a completion from a single prompt."""

    @abc.abstractmethod
    async def is_available(self) -> bool:
        """Return True if the provider is reachable."""

    async def close(self) -> None:
        """Release pooled connections. Override if the provider holds any."""

    def _temperature(self, temperature: float | None) -> float:
        return self.config.temperature if temperature is None else temperature


def create_llm_client(config: LLMConfig) -> LLMClient:
    """Select and instantiate a provider based on ``config.provider``."""

    from turnout_vision.llm.providers import PROVIDER_REGISTRY

    provider = config.provider.lower()
    if provider not in PROVIDER_REGISTRY:
        available = ", ".join(sorted(PROVIDER_REGISTRY))
        raise ValueError(
            f"Unknown LLM provider {config.provider!r}. "
            f"Available: {available}"
        )

    return PROVIDER_REGISTRY[provider](config)
