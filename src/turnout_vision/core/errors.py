"""Exception hierarchy for ingestion, filtering and insight generation."""

from __future__ import annotations


class TurnoutVisionError(Exception):
    """Base class for all errors raised by turnout_vision."""


class CSVParseError(TurnoutVisionError):
    """The uploaded text could not be read as CSV."""


class SchemaError(TurnoutVisionError):
    """One or more required columns are absent from the CSV header."""

    def __init__(self, missing: list[str]) -> None:
        self.missing = list(missing)
        super().__init__(
            "CSV must contain the following columns: " + ", ".join(self.missing)
        )


class RecordValueError(TurnoutVisionError, ValueError):
    """A single row failed numeric or geometry parsing.

    Raised for the first offending row; ingestion of the whole dataset is
    abandoned.
    """

    def __init__(
        self,
        message: str,
        *,
        precinct_id: str | None = None,
        row_number: int | None = None,
        column: str | None = None,
    ) -> None:
        self.precinct_id = precinct_id
        self.row_number = row_number
        self.column = column
        super().__init__(message)


class FilterSelectionError(TurnoutVisionError, ValueError):
    """A filter selection names an unknown column or option."""


class InsightRequestError(TurnoutVisionError):
    """The insight generation call failed or returned nothing usable."""
