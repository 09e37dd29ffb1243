"""CSV ingestion: parsing and record normalization."""

from turnout_vision.ingest.normalizer import (
    check_required_columns,
    compute_turnout,
    normalize_records,
)
from turnout_vision.ingest.parser import ParsedCSV, parse_csv
from turnout_vision.ingest.pipeline import Dataset, load_dataset

__all__ = [
    "Dataset",
    "ParsedCSV",
    "load_dataset",
    "check_required_columns",
    "compute_turnout",
    "normalize_records",
    "parse_csv",
]
