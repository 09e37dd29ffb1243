"""Highest- and lowest-turnout precincts."""

from __future__ import annotations

from typing import Sequence

from turnout_vision.core.types import PrecinctRecord
from turnout_vision.views.models import ExtremeEntry


def turnout_extremes(
    records: Sequence[PrecinctRecord], limit: int = 5
) -> list[ExtremeEntry]:
    """Top *limit* precincts (descending) followed by bottom *limit* (ascending).

    With fewer than *limit* records each group holds every record, so a
    precinct can appear in both groups.
    """
    if not records or limit < 1:
        return []

    ordered = sorted(records, key=lambda r: r.turnout)
    bottom = ordered[:limit]
    top = list(reversed(ordered[-limit:]))

    return [
        ExtremeEntry(
            precinct_id=r.precinct_id,
            turnout_percent=r.turnout_percent,
            group=f"Top {limit}",
        )
        for r in top
    ] + [
        ExtremeEntry(
            precinct_id=r.precinct_id,
            turnout_percent=r.turnout_percent,
            group=f"Bottom {limit}",
        )
        for r in bottom
    ]
