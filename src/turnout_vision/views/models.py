"""Derived view models returned to chart and map widgets."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class HistogramBin(BaseModel):
    """One turnout bracket and the number of precincts in it."""

    name: str
    count: int = 0


class ExtremeEntry(BaseModel):
    """A precinct in the top or bottom turnout group."""

    precinct_id: str
    turnout_percent: float
    group: str


class LegendEntry(BaseModel):
    label: str
    color: str


class LatLng(BaseModel):
    lat: float
    lng: float


class PrecinctDetails(BaseModel):
    """Hover card contents for a single precinct."""

    precinct_id: str
    turnout_percent: float
    turnout_label: str
    total_registered_voters: int
    votes_cast: int
    position: LatLng | None = None
    attributes: dict[str, str] = Field(default_factory=dict)


class MapLayer(BaseModel):
    """GeoJSON FeatureCollection plus styling metadata for the choropleth."""

    type: str = "FeatureCollection"
    features: list[dict[str, Any]] = Field(default_factory=list)
    bounds: list[float] | None = None
    legend: list[LegendEntry] = Field(default_factory=list)
    skipped: list[str] = Field(default_factory=list)
