"""Infer which extra columns are usable as categorical filters."""

from __future__ import annotations

from typing import Sequence

from turnout_vision.core.types import (
    ALL_OPTION,
    REQUIRED_COLUMNS,
    FilterCatalog,
    PrecinctRecord,
)

# A column qualifies only while its distinct-value count stays below this
# fraction of the record count.
MAX_DISTINCT_RATIO = 0.5


def candidate_columns(headers: Sequence[str]) -> list[str]:
    """Non-required, non-blank header names, in header order."""
    return [h for h in headers if h not in REQUIRED_COLUMNS and h.strip() != ""]


def distinct_values(records: Sequence[PrecinctRecord], column: str) -> list[str]:
    """Sorted distinct non-empty values of *column* across *records*."""
    return sorted({r.value_of(column) for r in records} - {""})


def infer_filter_catalog(
    records: Sequence[PrecinctRecord], headers: Sequence[str]
) -> FilterCatalog:
    """Build the filter catalog for a freshly ingested dataset.

    A column is kept when its number of distinct non-empty values ``k``
    satisfies ``1 < k < 0.5 * len(records)``. Options are the sorted values
    prefixed with ``"All"``. Datasets with fewer than two records produce an
    empty catalog.
    """
    record_count = len(records)
    if record_count <= 1:
        return {}

    catalog: FilterCatalog = {}
    for column in candidate_columns(headers):
        values = distinct_values(records, column)
        if 1 < len(values) < record_count * MAX_DISTINCT_RATIO:
            catalog[column] = [ALL_OPTION, *values]
    return catalog
