"""Natural-language turnout analysis via the configured LLM provider."""

from __future__ import annotations

import logging

import httpx

from turnout_vision.core.errors import InsightRequestError
from turnout_vision.llm.client import LLMClient

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = "You are an expert political analyst."

PROMPT_TEMPLATE = """\
You will analyze voter turnout data to identify precincts with unexpectedly high or low turnout.
Provide insights and potential reasons for these anomalies.
Data: {csv_data}"""


def build_prompt(csv_text: str) -> str:
    return PROMPT_TEMPLATE.format(csv_data=csv_text)


class InsightRequester:
    """Sends the raw uploaded CSV to an LLM and returns its prose summary.

    The model sees the file exactly as uploaded, extra columns included,
    rather than the normalized records.
    """

    def __init__(self, client: LLMClient) -> None:
        self._client = client

    async def request(self, csv_text: str) -> str:
        """Return the generated insights for *csv_text*.

        Raises:
            InsightRequestError: If there is no data, the provider call
                fails, or the provider returns an empty answer.
        """
        if not csv_text or not csv_text.strip():
            raise InsightRequestError("No data: upload a CSV file first")

        try:
            text = await self._client.generate(
                build_prompt(csv_text), system_prompt=SYSTEM_PROMPT
            )
        except (httpx.HTTPError, KeyError, IndexError, TypeError, ValueError) as exc:
            logger.error("Error generating turnout insights: %s", exc)
            raise InsightRequestError(f"Insight generation failed: {exc}") from exc

        if not isinstance(text, str) or not text.strip():
            raise InsightRequestError("Insight generation returned an empty response")
        return text.strip()
