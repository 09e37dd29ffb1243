"""End-to-end ingestion: CSV text to records plus filter catalog."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from turnout_vision.core.types import FilterCatalog, PrecinctRecord
from turnout_vision.filters.catalog import infer_filter_catalog
from turnout_vision.ingest.normalizer import normalize_records
from turnout_vision.ingest.parser import parse_csv


class Dataset(BaseModel):
    """Everything derived from one uploaded file."""

    model_config = ConfigDict(frozen=True)

    headers: tuple[str, ...] = ()
    records: tuple[PrecinctRecord, ...] = ()
    catalog: FilterCatalog = Field(default_factory=dict)


def load_dataset(csv_text: str) -> Dataset:
    """Parse, normalize and infer filters in one step.

    Raises:
        CSVParseError: The text is not readable CSV.
        SchemaError: A required column is missing.
        RecordValueError: A row has a bad count or bad geometry JSON.
    """
    parsed = parse_csv(csv_text)
    records = normalize_records(parsed.headers, parsed.rows)
    return Dataset(
        headers=tuple(parsed.headers),
        records=tuple(records),
        catalog=infer_filter_catalog(records, parsed.headers),
    )
