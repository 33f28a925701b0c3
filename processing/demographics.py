#!/usr/bin/env python3
"""
demographics.py - Demographic Index Construction

Builds the lookup from block GEOID to its demographic record. Each raw row of
the census extract is laid out as

    total population, reserved, category 1 .. category K, state, county, tract, block group

The trailing four identifier fields are folded into the GEOID key and the
leading fields are stored untouched (still text). Numeric parsing happens
later in the summary calculator, so a bad value fails there, loudly.
"""

from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple, Union

import pandas as pd
from loguru import logger

from .geoid import GEOID_PART_NAMES, build_geo_id

# Fields ahead of the category counts: total population and the reserved column
LEADING_FIELD_COUNT = 2

DemographicRecord = Tuple[str, ...]
DemographicIndex = Dict[str, DemographicRecord]


class MalformedRowError(ValueError):
    """A raw demographic row does not have the expected shape."""


def expected_field_width(category_count: int) -> int:
    """Width of a raw row carrying ``category_count`` category columns."""
    return LEADING_FIELD_COUNT + category_count + len(GEOID_PART_NAMES)


def build_index(
    rows: Sequence[Sequence[str]],
    header_rows_to_skip: int = 1,
    field_width: Optional[int] = None,
) -> DemographicIndex:
    """
    Index raw demographic rows by GEOID.

    Args:
        rows: Raw tabular rows, header rows included
        header_rows_to_skip: Number of leading rows to discard unparsed
        field_width: If given, every data row must have exactly this many fields

    Returns:
        Mapping of GEOID to the row's non-identifier fields. A later row with
        the same GEOID replaces an earlier one.
    """
    id_width = len(GEOID_PART_NAMES)
    index: DemographicIndex = {}
    duplicates = 0

    for row_number, row in enumerate(rows[header_rows_to_skip:], start=header_rows_to_skip + 1):
        if field_width is not None and len(row) != field_width:
            raise MalformedRowError(
                f"Row {row_number} has {len(row)} fields, expected {field_width}"
            )
        if len(row) < id_width:
            raise MalformedRowError(
                f"Row {row_number} has {len(row)} fields, too few to hold "
                f"{'/'.join(GEOID_PART_NAMES)} identifiers"
            )

        geo_id = build_geo_id(row[-id_width:])
        if geo_id in index:
            duplicates += 1
        index[geo_id] = tuple(row[:-id_width])

    logger.debug(f"  🗂️ Indexed {len(index):,} GEOIDs")
    if duplicates:
        logger.debug(f"  🔁 {duplicates:,} rows replaced an earlier row with the same GEOID")

    return index


def lookup_record(index: DemographicIndex, geo_id: str) -> Optional[DemographicRecord]:
    """Return the record for a GEOID, or None when the join misses."""
    return index.get(geo_id)


def read_demographic_rows(path: Union[str, Path]) -> List[List[str]]:
    """
    Read a raw demographic CSV as rows of text.

    Nothing is skipped and nothing is converted: header rows are returned like
    any other row and empty cells stay empty strings.

    Args:
        path: Path to the CSV extract

    Returns:
        List of rows, each a list of field strings
    """
    csv_path = Path(path)
    logger.info(f"📊 Loading demographic data from {csv_path}")

    try:
        df = pd.read_csv(csv_path, header=None, dtype=str, keep_default_na=False)
    except pd.errors.ParserError as e:
        # pandas sizes columns from the first line and rejects wider rows itself
        raise MalformedRowError(f"Row wider than the first line in {csv_path}: {e}") from e
    # pandas pads short rows with NaN; drop the padding so width checks see them
    rows = [
        [cell for cell in row if not pd.isna(cell)]
        for row in df.itertuples(index=False, name=None)
    ]

    logger.success(f"  ✅ Loaded {len(rows):,} rows x {df.shape[1]} fields")
    return rows


def load_demographic_index(
    path: Union[str, Path],
    category_count: int,
    header_rows_to_skip: int = 1,
) -> DemographicIndex:
    """
    Read a demographic CSV and index it, checking each row's width.

    Args:
        path: Path to the CSV extract
        category_count: Number of category columns the rows carry
        header_rows_to_skip: Number of header rows at the top of the file

    Returns:
        GEOID -> demographic record mapping
    """
    rows = read_demographic_rows(path)
    return build_index(
        rows,
        header_rows_to_skip=header_rows_to_skip,
        field_width=expected_field_width(category_count),
    )
