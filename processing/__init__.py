"""
Processing package for the Block Dominance Map

This package turns raw census rows into per-block dominant-category summaries.
"""

__version__ = "0.1.0"

# Import key utilities for easy access
from .demographics import (
    MalformedRowError,
    build_index,
    expected_field_width,
    load_demographic_index,
    lookup_record,
    read_demographic_rows,
)
from .geoid import build_geo_id
from .summary import (
    RACE_LABELS,
    DemographicSummary,
    MalformedRecordError,
    parse_record,
    summarize,
)

__all__ = [
    "build_geo_id",
    "build_index",
    "expected_field_width",
    "lookup_record",
    "read_demographic_rows",
    "load_demographic_index",
    "MalformedRowError",
    "RACE_LABELS",
    "DemographicSummary",
    "MalformedRecordError",
    "parse_record",
    "summarize",
]
