"""Core type definitions shared across all Turnout Vision modules."""

from __future__ import annotations

from types import MappingProxyType
from typing import Any, Mapping

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator

PRECINCT_ID = "precinct_id"
TOTAL_REGISTERED_VOTERS = "total_registered_voters"
VOTES_CAST = "votes_cast"
GEOJSON_BOUNDARY = "geojson_boundary"

REQUIRED_COLUMNS: tuple[str, ...] = (
    PRECINCT_ID,
    TOTAL_REGISTERED_VOTERS,
    VOTES_CAST,
    GEOJSON_BOUNDARY,
)

# Sentinel filter option meaning "no constraint on this column".
ALL_OPTION = "All"

FilterCatalog = dict[str, list[str]]


class PrecinctRecord(BaseModel):
    """One normalized row of precinct results."""

    model_config = ConfigDict(frozen=True)

    precinct_id: str
    total_registered_voters: int = Field(ge=0)
    votes_cast: int = Field(ge=0)
    turnout: float
    boundary: Any = None
    attributes: dict[str, str] = Field(default_factory=dict)

    @property
    def turnout_percent(self) -> float:
        return self.turnout * 100

    def value_of(self, column: str) -> str:
        """Return the text form of *column*, or ``""`` when absent."""
        if column == PRECINCT_ID:
            return self.precinct_id
        if column == TOTAL_REGISTERED_VOTERS:
            return str(self.total_registered_voters)
        if column == VOTES_CAST:
            return str(self.votes_cast)
        if column == "turnout":
            return str(self.turnout)
        return self.attributes.get(column, "")


class ActiveFilterSet(BaseModel):
    """The user's current filter selections (column -> selected option).

    ``selections`` is a read-only copy of whatever mapping was passed in.
    """

    model_config = ConfigDict(frozen=True)

    selections: Mapping[str, str] = Field(default_factory=dict, validate_default=True)

    @field_validator("selections", mode="after")
    @classmethod
    def freeze_selections(cls, value: Mapping[str, str]) -> Mapping[str, str]:
        return MappingProxyType(dict(value))

    @field_serializer("selections")
    def serialize_selections(self, value: Mapping[str, str]) -> dict[str, str]:
        return dict(value)

    def with_selection(self, column: str, value: str) -> ActiveFilterSet:
        return ActiveFilterSet(selections={**self.selections, column: value})

    def cleared(self) -> ActiveFilterSet:
        return ActiveFilterSet()

    def is_empty(self) -> bool:
        return not self.selections


class HealthStatus(BaseModel):
    """Health check response for any service."""

    service: str
    healthy: bool
    latency_ms: float | None = None
    details: dict[str, Any] = Field(default_factory=dict)
