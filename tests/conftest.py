"""Shared test fixtures and helpers."""

from __future__ import annotations

import json
from typing import Any

import pandas as pd
import pytest

from turnout_vision.core.config import LLMConfig
from turnout_vision.core.types import PrecinctRecord
from turnout_vision.llm.client import LLMClient


def square_feature(lng: float, lat: float, size: float = 0.01) -> dict[str, Any]:
    """A GeoJSON Feature holding a single square Polygon ring."""
    ring = [
        [lng, lat],
        [lng + size, lat],
        [lng + size, lat + size],
        [lng, lat + size],
        [lng, lat],
    ]
    return {
        "type": "Feature",
        "properties": {"source": "test"},
        "geometry": {"type": "Polygon", "coordinates": [ring]},
    }


def csv_row(
    precinct_id: str,
    registered: int | str,
    votes: int | str,
    boundary: Any = None,
    **extra: str,
) -> dict[str, str]:
    if boundary is None:
        boundary = json.dumps(square_feature(-74.0, 40.7))
    elif not isinstance(boundary, str):
        boundary = json.dumps(boundary)
    return {
        "precinct_id": precinct_id,
        "total_registered_voters": str(registered),
        "votes_cast": str(votes),
        "geojson_boundary": boundary,
        **extra,
    }


def to_csv(rows: list[dict[str, str]], columns: list[str] | None = None) -> str:
    frame = pd.DataFrame(rows, columns=columns)
    return frame.to_csv(index=False)


def make_record(
    precinct_id: str,
    registered: int = 100,
    votes: int = 50,
    **attributes: str,
) -> PrecinctRecord:
    return PrecinctRecord(
        precinct_id=precinct_id,
        total_registered_voters=registered,
        votes_cast=votes,
        turnout=votes / registered if registered > 0 else 0.0,
        boundary=square_feature(-74.0, 40.7),
        attributes=attributes,
    )


class FakeLLMClient(LLMClient):
    """In-process LLM stand-in that records prompts."""

    def __init__(self, reply: str = "Precinct P1 shows unusually high turnout.") -> None:
        super().__init__(LLMConfig(provider="ollama"))
        self.reply = reply
        self.error: Exception | None = None
        self.prompts: list[str] = []
        self.closed = False

    async def generate(self, prompt, *, system_prompt=None, temperature=None) -> str:
        self.prompts.append(prompt)
        if self.error is not None:
            raise self.error
        return self.reply

    async def is_available(self) -> bool:
        return self.error is None

    async def close(self) -> None:
        self.closed = True


@pytest.fixture
def fake_llm() -> FakeLLMClient:
    return FakeLLMClient()


@pytest.fixture
def sample_rows() -> list[dict[str, str]]:
    return [
        csv_row("P1", 100, 80, region="North"),
        csv_row("P2", 50, 10, region="South"),
    ]


@pytest.fixture
def sample_csv(sample_rows) -> str:
    return to_csv(sample_rows)


@pytest.fixture
def regional_csv() -> str:
    """Ten precincts across three regions, so ``region`` is filterable."""
    regions = ["North", "North", "North", "South", "South", "South", "East", "East", "East", "East"]
    rows = [
        csv_row(
            f"P{i + 1}",
            100,
            (i + 1) * 10 - 5,
            boundary=square_feature(-74.0 + i * 0.01, 40.7),
            region=region,
            county=f"County {i}",
            state="NY",
        )
        for i, region in enumerate(regions)
    ]
    return to_csv(rows)
