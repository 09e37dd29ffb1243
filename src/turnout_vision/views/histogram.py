"""Turnout distribution binned into equal-width percentage brackets."""

from __future__ import annotations

import math
from typing import Sequence

from turnout_vision.core.types import PrecinctRecord
from turnout_vision.views.models import HistogramBin


def _bin_label(lower: float, upper: float) -> str:
    return f"{lower:g}-{upper:g}%"


def turnout_histogram(
    records: Sequence[PrecinctRecord], bin_count: int = 10
) -> list[HistogramBin]:
    """Count precincts per turnout bracket over 0-100%.

    Exactly 100% lands in the last bracket. Turnout above 100% is not
    counted anywhere. Returns an empty list when there are no records.
    """
    if not records:
        return []
    if bin_count < 1:
        raise ValueError("bin_count must be at least 1")

    width = 100 / bin_count
    bins = [
        HistogramBin(name=_bin_label(i * width, (i + 1) * width))
        for i in range(bin_count)
    ]

    for record in records:
        percent = record.turnout * 100
        index = math.floor(percent / width)
        if 0 <= index < bin_count:
            bins[index].count += 1
        elif percent == 100:
            bins[-1].count += 1

    return bins
