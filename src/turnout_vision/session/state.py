"""Immutable dashboard state and single-assignment result slots."""

from __future__ import annotations

from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field

from turnout_vision.core.types import ActiveFilterSet, FilterCatalog, PrecinctRecord
from turnout_vision.filters.evaluator import apply_filters
from turnout_vision.insights.models import InsightState

T = TypeVar("T")


class IngestionError(BaseModel):
    """Why the last upload produced no data."""

    model_config = ConfigDict(frozen=True)

    kind: str
    message: str
    missing_columns: list[str] = Field(default_factory=list)
    precinct_id: str | None = None
    row_number: int | None = None


class DashboardState(BaseModel):
    """Snapshot of one dashboard session.

    Never modified in place; every change produces a new instance via
    ``model_copy(update=...)``.
    """

    model_config = ConfigDict(frozen=True)

    generation: int = 0
    filename: str | None = None
    csv_text: str = ""
    headers: tuple[str, ...] = ()
    records: tuple[PrecinctRecord, ...] = ()
    catalog: FilterCatalog = Field(default_factory=dict)
    active_filters: ActiveFilterSet = Field(default_factory=ActiveFilterSet)
    loading: bool = False
    error: IngestionError | None = None
    insight: InsightState = Field(default_factory=InsightState)

    @property
    def has_data(self) -> bool:
        return bool(self.records)

    def filtered_records(self) -> list[PrecinctRecord]:
        return apply_filters(self.records, self.active_filters)


class ResultSlot(Generic[T]):
    """Holds the result of one asynchronous task, assignable exactly once.

    ``generation`` identifies the request the slot belongs to; the owner
    compares it with its current generation to drop superseded results.
    """

    def __init__(self, generation: int, source: str = "") -> None:
        self.generation = generation
        self.source = source
        self._value: T | None = None
        self._filled = False

    @property
    def filled(self) -> bool:
        return self._filled

    def set(self, value: T) -> None:
        if self._filled:
            raise RuntimeError(f"Result slot for generation {self.generation} already set")
        self._value = value
        self._filled = True

    def get(self) -> T:
        if not self._filled:
            raise RuntimeError(f"Result slot for generation {self.generation} is empty")
        return self._value  # type: ignore[return-value]
