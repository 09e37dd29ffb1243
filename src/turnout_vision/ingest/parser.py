"""Read raw CSV text into a header list and untyped string-keyed rows."""

from __future__ import annotations

import csv
import io
import logging

import pandas as pd

from turnout_vision.core.errors import CSVParseError

logger = logging.getLogger(__name__)


class ParsedCSV:
    """Header row plus rows as ``{column: text}`` dicts, in file order."""

    def __init__(self, headers: list[str], rows: list[dict[str, str]]) -> None:
        self.headers = headers
        self.rows = rows

    def __len__(self) -> int:
        return len(self.rows)


def _is_blank(fields: list[str]) -> bool:
    return not fields or (len(fields) == 1 and not fields[0].strip())


def check_field_counts(text: str) -> None:
    """Require every data row to have as many fields as the header.

    pandas pads short rows and drops the extra cells of long ones, so the
    field counts are checked on the raw records first. Blank lines are
    ignored; row numbers are 1-based over data rows.
    """
    width: int | None = None
    row_number = 0
    try:
        for fields in csv.reader(io.StringIO(text)):
            if _is_blank(fields):
                continue
            if width is None:
                width = len(fields)
                continue
            row_number += 1
            if len(fields) != width:
                raise CSVParseError(
                    f"Row {row_number} has {len(fields)} field(s), expected {width}"
                )
    except csv.Error as exc:
        raise CSVParseError(f"Failed to parse CSV: {exc}") from exc


def parse_csv(text: str) -> ParsedCSV:
    """Parse CSV *text* with a header row.

    Every cell is kept as text; blank lines are skipped and nothing is
    coerced to NaN, so empty cells come back as ``""``.

    Raises:
        CSVParseError: If the text is empty, structurally malformed, or a
            row has too many or too few fields.
    """
    if not text or not text.strip():
        raise CSVParseError("CSV file is empty")

    check_field_counts(text)

    try:
        frame = pd.read_csv(
            io.StringIO(text),
            dtype=str,
            keep_default_na=False,
            skip_blank_lines=True,
            index_col=False,
        )
    except (pd.errors.ParserError, pd.errors.EmptyDataError, UnicodeDecodeError) as exc:
        raise CSVParseError(f"Failed to parse CSV: {exc}") from exc

    headers = [str(col) for col in frame.columns]
    rows = [
        {str(k): v for k, v in row.items()}
        for row in frame.to_dict(orient="records")
    ]
    logger.debug("Parsed CSV with %d columns and %d rows", len(headers), len(rows))
    return ParsedCSV(headers=headers, rows=rows)
