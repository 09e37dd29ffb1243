"""Categorical filter inference and evaluation."""

from turnout_vision.filters.catalog import infer_filter_catalog
from turnout_vision.filters.evaluator import apply_filters, validate_selection

__all__ = ["apply_filters", "infer_filter_catalog", "validate_selection"]
