"""Turn parsed CSV rows into validated PrecinctRecords.

Normalization is all-or-nothing: the header is checked first, then every
row is converted in order, and the first bad row aborts the whole dataset.
"""

from __future__ import annotations

import json
import logging
import re
from collections import Counter
from typing import Any, Iterable, Mapping

from turnout_vision.core.errors import RecordValueError, SchemaError
from turnout_vision.core.types import (
    GEOJSON_BOUNDARY,
    PRECINCT_ID,
    REQUIRED_COLUMNS,
    TOTAL_REGISTERED_VOTERS,
    VOTES_CAST,
    PrecinctRecord,
)

logger = logging.getLogger(__name__)

_INTEGER_RE = re.compile(r"^[+-]?[0-9]+$")


def check_required_columns(headers: Iterable[str]) -> None:
    """Raise SchemaError listing every required column absent from *headers*."""
    present = set(headers)
    missing = [col for col in REQUIRED_COLUMNS if col not in present]
    if missing:
        raise SchemaError(missing)


def compute_turnout(votes_cast: int, total_registered_voters: int) -> float:
    """Votes cast over registered voters, or 0.0 when nobody is registered."""
    if total_registered_voters > 0:
        return votes_cast / total_registered_voters
    return 0.0


def _parse_count(raw: Any, column: str, precinct_id: str, row_number: int) -> int:
    text = raw.strip() if isinstance(raw, str) else ""
    if not _INTEGER_RE.match(text):
        raise RecordValueError(
            f"Invalid number format in column {column!r} "
            f"for row {row_number} with precinct_id: {precinct_id}",
            precinct_id=precinct_id,
            row_number=row_number,
            column=column,
        )
    value = int(text, 10)
    if value < 0:
        raise RecordValueError(
            f"Negative count in column {column!r} "
            f"for row {row_number} with precinct_id: {precinct_id}",
            precinct_id=precinct_id,
            row_number=row_number,
            column=column,
        )
    return value


def _parse_boundary(raw: Any, precinct_id: str, row_number: int) -> Any:
    try:
        return json.loads(raw if isinstance(raw, str) else "")
    except json.JSONDecodeError as exc:
        raise RecordValueError(
            f"Invalid JSON in {GEOJSON_BOUNDARY!r} for row {row_number} "
            f"with precinct_id: {precinct_id} ({exc.msg})",
            precinct_id=precinct_id,
            row_number=row_number,
            column=GEOJSON_BOUNDARY,
        ) from exc


def normalize_row(
    row: Mapping[str, Any], headers: list[str], row_number: int
) -> PrecinctRecord:
    """Convert one raw row. *row_number* is 1-based over data rows."""
    precinct_id = str(row.get(PRECINCT_ID, "") or "")
    registered = _parse_count(
        row.get(TOTAL_REGISTERED_VOTERS), TOTAL_REGISTERED_VOTERS, precinct_id, row_number
    )
    votes = _parse_count(row.get(VOTES_CAST), VOTES_CAST, precinct_id, row_number)
    boundary = _parse_boundary(row.get(GEOJSON_BOUNDARY), precinct_id, row_number)

    attributes = {
        col: "" if row.get(col) is None else str(row.get(col))
        for col in headers
        if col not in REQUIRED_COLUMNS
    }

    return PrecinctRecord(
        precinct_id=precinct_id,
        total_registered_voters=registered,
        votes_cast=votes,
        turnout=compute_turnout(votes, registered),
        boundary=boundary,
        attributes=attributes,
    )


def normalize_records(
    headers: list[str], rows: Iterable[Mapping[str, Any]]
) -> list[PrecinctRecord]:
    """Validate the header and normalize every row, preserving order.

    Raises:
        SchemaError: If any required column is missing. No row is read.
        RecordValueError: On the first row with a bad count or bad geometry.
    """
    check_required_columns(headers)

    records = [
        normalize_row(row, headers, row_number)
        for row_number, row in enumerate(rows, start=1)
    ]

    duplicates = sorted(
        pid for pid, count in Counter(r.precinct_id for r in records).items() if count > 1
    )
    if duplicates:
        logger.warning(
            "Dataset contains %d duplicated precinct_id value(s): %s",
            len(duplicates), ", ".join(duplicates),
        )

    logger.info("Normalized %d precinct records", len(records))
    return records
