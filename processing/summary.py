#!/usr/bin/env python3
"""
summary.py - Dominant Category Summary

Turns one demographic record into the statistics the map needs: the total
population and which category is largest. Blocks with almost nobody in them
are excluded, since a 2-of-2 majority says nothing about segregation.
"""

import re
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

# 2020 Census P10 race categories, in the column order of the extract
RACE_LABELS: Tuple[str, ...] = (
    "White",
    "Black or African American",
    "American Indian and Alaska Native",
    "Asian",
    "Native Hawaiian and Other Pacific Islander",
    "Some Other Race",
    "Two or More Races",
)

# Blocks with this many people or fewer get no summary
SPARSE_POPULATION_MAX = 2


class MalformedRecordError(ValueError):
    """A demographic record holds a non-numeric field or the wrong number of categories."""


@dataclass(frozen=True)
class DemographicCounts:
    """Numeric view of a demographic record."""

    total_population: int
    reserved: int  # carried through, never used for classification
    category_counts: Tuple[int, ...]


@dataclass(frozen=True)
class DemographicSummary:
    """Dominant-category statistics for one block."""

    total_population: int
    dominant_count: int
    dominant_index: int
    dominant_label: str

    @property
    def dominant_share(self) -> float:
        """Fraction of the population in the dominant category."""
        return self.dominant_count / self.total_population


COUNT_PATTERN = re.compile(r"[+-]?[0-9]+")


def parse_count(text: str) -> int:
    # ASCII digits only: int() alone would also take "1_0" and full-width digits
    stripped = str(text).strip()
    if not COUNT_PATTERN.fullmatch(stripped):
        raise MalformedRecordError(f"Expected a base-10 integer, got {text!r}")
    return int(stripped, 10)


def parse_record(
    record: Sequence[str], catalog: Optional[Sequence[str]] = None
) -> DemographicCounts:
    """
    Convert every field of a record to an integer.

    Args:
        record: Raw fields [total, reserved, category_1 .. category_K]
        catalog: Category labels; when given, K must equal its length

    Returns:
        DemographicCounts for the record

    Raises:
        MalformedRecordError: on non-numeric text or a category count mismatch
    """
    values = [parse_count(field) for field in record]
    if len(values) < 2:
        raise MalformedRecordError(f"Record has {len(values)} fields, need at least 2")

    total_population, reserved, *category_counts = values
    if catalog is not None and len(category_counts) != len(catalog):
        raise MalformedRecordError(
            f"Record has {len(category_counts)} category fields, catalog has {len(catalog)}"
        )

    return DemographicCounts(total_population, reserved, tuple(category_counts))


def find_dominant(counts: Sequence[int]) -> Tuple[int, int]:
    """
    Locate the largest count.

    Ties go to the first occurrence, so the lowest category index wins.

    Returns:
        (index, value) of the maximal count
    """
    if not counts:
        raise MalformedRecordError("Record has no category fields")

    best_index, best_value = 0, counts[0]
    for index, value in enumerate(counts):
        if value > best_value:
            best_index, best_value = index, value
    return best_index, best_value


def summarize(
    record: Sequence[str],
    catalog: Sequence[str] = RACE_LABELS,
    sparse_population_max: int = SPARSE_POPULATION_MAX,
) -> Optional[DemographicSummary]:
    """
    Compute the dominant-category summary for one demographic record.

    Args:
        record: Raw fields [total, reserved, category_1 .. category_K]
        catalog: Category labels in column order
        sparse_population_max: Blocks at or below this population get no summary

    Returns:
        DemographicSummary, or None for sparse blocks
    """
    counts = parse_record(record, catalog)

    if counts.total_population <= sparse_population_max:
        return None

    dominant_index, dominant_count = find_dominant(counts.category_counts)
    return DemographicSummary(
        total_population=counts.total_population,
        dominant_count=dominant_count,
        dominant_index=dominant_index,
        dominant_label=catalog[dominant_index],
    )
