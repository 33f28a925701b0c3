"""Tests for dominance styling."""

import pytest

from analysis.styling import (
    INVISIBLE_STYLE,
    CatalogMismatchError,
    StyleParameters,
    StylePolicy,
    category_colors,
    check_catalog_colors,
    dominance_opacity,
    style_for,
)
from processing.summary import RACE_LABELS, DemographicSummary

COLORS = category_colors(7)


def make_summary(count, total, index=0):
    return DemographicSummary(total, count, index, RACE_LABELS[index])


def test_category_colors_match_category10():
    assert COLORS == (
        "#1f77b4",
        "#ff7f0e",
        "#2ca02c",
        "#d62728",
        "#9467bd",
        "#8c564b",
        "#e377c2",
    )


def test_category_colors_rejects_too_many_or_continuous():
    with pytest.raises(ValueError):
        category_colors(11, "tab10")
    with pytest.raises(ValueError):
        category_colors(3, "coolwarm")


@pytest.mark.parametrize("threshold", [0.0, 0.3, 0.65, 0.99])
def test_style_for_absent_summary_is_invisible(threshold):
    style = style_for(None, COLORS, dominance_threshold=threshold)
    assert style is INVISIBLE_STYLE
    assert style.to_leaflet() == {"fill": False, "stroke": False}


@pytest.mark.parametrize(
    "count, total, expected",
    [
        (13, 20, 0.0),  # share == threshold
        (20, 20, 1.0),
        (33, 40, 0.5),  # share == 0.825
        (5, 20, 0.0),  # below threshold clamps to 0
    ],
)
def test_style_for_opacity_ramp(count, total, expected):
    style = style_for(make_summary(count, total), COLORS, dominance_threshold=0.65)
    assert style.fill_opacity == pytest.approx(expected)


def test_opacity_is_exactly_zero_at_threshold():
    assert dominance_opacity(0.65, 0.65) == 0.0


@pytest.mark.parametrize("threshold", [0.0, 0.25, 0.5, 0.65, 0.9])
@pytest.mark.parametrize("count", range(0, 21))
def test_opacity_stays_in_unit_interval(threshold, count):
    style = style_for(make_summary(count, 20), COLORS, dominance_threshold=threshold)
    assert 0.0 <= style.fill_opacity <= 1.0
    assert 0.0 <= style.stroke_opacity <= 1.0


def test_opacity_clamped_when_count_exceeds_total():
    assert dominance_opacity(1.5, 0.65) == 1.0


def test_style_for_uses_dominant_color_and_half_stroke():
    style = style_for(make_summary(9, 10, index=3), COLORS)

    assert style.fill_color == style.stroke_color == COLORS[3]
    assert style.stroke_opacity == pytest.approx(style.fill_opacity / 2)
    assert style.stroke_weight == 1
    assert style.to_leaflet() == {
        "fillColor": COLORS[3],
        "fillOpacity": style.fill_opacity,
        "stroke": True,
        "opacity": style.stroke_opacity,
        "color": COLORS[3],
        "weight": 1,
    }


def test_style_for_stroke_parameters_are_adjustable():
    style = style_for(
        make_summary(10, 10), COLORS, stroke_opacity_ratio=0.25, stroke_weight=3
    )
    assert style.stroke_opacity == pytest.approx(0.25)
    assert style.stroke_weight == 3


def test_style_policy_validates_threshold():
    with pytest.raises(ValueError):
        StylePolicy(COLORS, dominance_threshold=1.0)
    with pytest.raises(ValueError):
        StylePolicy(COLORS, dominance_threshold=-0.1)


def test_style_for_validates_threshold():
    summary = make_summary(15, 20, index=2)
    with pytest.raises(ValueError, match="dominance_threshold"):
        style_for(summary, COLORS, dominance_threshold=1.0)
    with pytest.raises(ValueError):
        dominance_opacity(0.9, -0.1)



def test_style_policy_matches_style_for():
    policy = StylePolicy(list(COLORS), dominance_threshold=0.5)
    summary = make_summary(15, 20, index=2)

    assert isinstance(policy.category_colors, tuple)
    assert policy.style(summary) == style_for(summary, COLORS, dominance_threshold=0.5)
    assert policy.style(None) == StyleParameters(visible=False)


def test_check_catalog_colors():
    check_catalog_colors(RACE_LABELS, COLORS)
    with pytest.raises(CatalogMismatchError):
        check_catalog_colors(RACE_LABELS, COLORS[:6])
