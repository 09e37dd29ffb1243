"""LLM-generated turnout insights."""

from turnout_vision.insights.models import InsightState, InsightStatus
from turnout_vision.insights.requester import InsightRequester

__all__ = ["InsightRequester", "InsightState", "InsightStatus"]
