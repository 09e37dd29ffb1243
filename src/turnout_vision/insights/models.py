"""Insight request status models."""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, ConfigDict


class InsightStatus(StrEnum):
    """Lifecycle of an insight request within a session."""

    IDLE = "idle"
    LOADING = "loading"
    SUCCESS = "success"
    ERROR = "error"


class InsightState(BaseModel):
    """What the insights panel should show."""

    model_config = ConfigDict(frozen=True)

    status: InsightStatus = InsightStatus.IDLE
    request_id: int = 0
    insights: str | None = None
    error: str | None = None
