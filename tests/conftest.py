"""Shared fixtures for block dominance tests."""

import pytest

from analysis.styling import StylePolicy, category_colors
from processing.summary import RACE_LABELS

HEADER = [
    "P10_001N", "P10_002N", "P10_003N", "P10_004N", "P10_005N", "P10_006N",
    "P10_007N", "P10_008N", "P10_009N", "state", "county", "tract", "block",
]


def make_row(counts, state="42", county="101", tract="000100", block="1000"):
    return [str(c) for c in counts] + [state, county, tract, block]


def make_feature(geo_id, x0=-75.2, y0=39.9, size=0.01):
    ring = [[x0, y0], [x0 + size, y0], [x0 + size, y0 + size], [x0, y0 + size], [x0, y0]]
    return {
        "type": "Feature",
        "properties": {"GEOID20": geo_id},
        "geometry": {"type": "Polygon", "coordinates": [ring]},
    }


@pytest.fixture
def demographic_rows():
    return [
        HEADER,
        make_row([10, 0, 9, 1, 0, 0, 0, 0, 0], block="1000"),  # 90% White
        make_row([2, 0, 2, 0, 0, 0, 0, 0, 0], block="1001"),  # sparse
        make_row([20, 0, 2, 13, 0, 5, 0, 0, 0], block="1002"),  # 65% Black
        make_row([8, 0, 0, 0, 0, 8, 0, 0, 0], block="1003"),  # 100% Asian
    ]


@pytest.fixture
def feature_collection():
    features = [
        make_feature("421010001001000", x0=-75.20),
        make_feature("421010001001001", x0=-75.18),
        make_feature("421010001001002", x0=-75.16),
        make_feature("421010001001003", x0=-75.14),
        make_feature("421010001009999", x0=-75.12),  # no demographic record
    ]
    return {"type": "FeatureCollection", "features": features}


@pytest.fixture
def policy():
    return StylePolicy(category_colors(len(RACE_LABELS)))
