"""Apply the active filter set to normalized records."""

from __future__ import annotations

from typing import Sequence

from turnout_vision.core.errors import FilterSelectionError
from turnout_vision.core.types import (
    ALL_OPTION,
    ActiveFilterSet,
    FilterCatalog,
    PrecinctRecord,
)


def _is_unconstrained(value: str) -> bool:
    return not value or value == ALL_OPTION


def matches(record: PrecinctRecord, active: ActiveFilterSet) -> bool:
    """True when *record* satisfies every selection in *active*."""
    return all(
        _is_unconstrained(value) or record.value_of(column) == value
        for column, value in active.selections.items()
    )


def apply_filters(
    records: Sequence[PrecinctRecord], active: ActiveFilterSet
) -> list[PrecinctRecord]:
    """Return the ordered subsequence of *records* that pass *active*.

    Selections combine with AND; an ``"All"`` or empty selection leaves its
    column unconstrained. Inputs are never modified.
    """
    if active.is_empty():
        return list(records)
    return [r for r in records if matches(r, active)]


def validate_selection(catalog: FilterCatalog, column: str, value: str) -> None:
    """Reject selections the catalog does not offer."""
    options = catalog.get(column)
    if options is None:
        raise FilterSelectionError(f"Column {column!r} is not a filterable column")
    if value not in options:
        raise FilterSelectionError(
            f"Value {value!r} is not an option for column {column!r}"
        )
