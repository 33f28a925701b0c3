"""
Style encoding for the dominance map.

A block's fill color names its dominant category; its opacity shows how
dominant that category is. Shares at or below the dominance threshold are
fully transparent and a share of 1.0 is fully opaque, with a linear ramp in
between. The outline uses the same color at a fraction of the fill opacity.
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional, Sequence, Tuple

import matplotlib as mpl
from matplotlib.colors import to_hex

from processing.summary import DemographicSummary

DEFAULT_DOMINANCE_THRESHOLD = 0.65
DEFAULT_STROKE_OPACITY_RATIO = 0.5
DEFAULT_STROKE_WEIGHT = 1
DEFAULT_PALETTE = "tab10"


class CatalogMismatchError(ValueError):
    """Category catalog and color list are different lengths."""


@dataclass(frozen=True)
class StyleParameters:
    """Path options for one block; ``visible=False`` means no fill and no stroke."""

    visible: bool
    fill_color: Optional[str] = None
    fill_opacity: float = 0.0
    stroke_color: Optional[str] = None
    stroke_opacity: float = 0.0
    stroke_weight: float = 0

    def to_leaflet(self) -> Dict[str, Any]:
        """Convert to Leaflet path options as consumed by folium style functions."""
        if not self.visible:
            return {"fill": False, "stroke": False}
        return {
            "fillColor": self.fill_color,
            "fillOpacity": self.fill_opacity,
            "stroke": True,
            "opacity": self.stroke_opacity,
            "color": self.stroke_color,
            "weight": self.stroke_weight,
        }


INVISIBLE_STYLE = StyleParameters(visible=False)


def category_colors(count: int, palette: str = DEFAULT_PALETTE) -> Tuple[str, ...]:
    """
    Take the first ``count`` colors of a qualitative matplotlib colormap.

    tab10 is the same ordered palette as d3's schemeCategory10.

    Args:
        count: Number of categories to color
        palette: Name of a listed (qualitative) matplotlib colormap

    Returns:
        Tuple of hex color strings
    """
    cmap = mpl.colormaps[palette]
    colors = getattr(cmap, "colors", None)
    if colors is None:
        raise ValueError(f"Colormap '{palette}' is not a qualitative (listed) colormap")
    if count > len(colors):
        raise ValueError(f"Colormap '{palette}' has {len(colors)} colors, {count} requested")
    return tuple(to_hex(color) for color in colors[:count])


def check_catalog_colors(catalog: Sequence[str], colors: Sequence[str]) -> None:
    """Raise CatalogMismatchError unless there is exactly one color per category."""
    if len(catalog) != len(colors):
        raise CatalogMismatchError(
            f"Category catalog has {len(catalog)} labels but {len(colors)} colors were supplied"
        )


def dominance_opacity(share: float, dominance_threshold: float) -> float:
    """Rescale a dominant share so the threshold maps to 0 and 1.0 maps to 1."""
    if not 0 <= dominance_threshold < 1:
        raise ValueError(f"dominance_threshold must be in [0, 1), got {dominance_threshold}")
    opacity = (share - dominance_threshold) / (1 - dominance_threshold)
    return min(1.0, max(0.0, opacity))


def style_for(
    summary: Optional[DemographicSummary],
    category_colors: Sequence[str],
    dominance_threshold: float = DEFAULT_DOMINANCE_THRESHOLD,
    stroke_opacity_ratio: float = DEFAULT_STROKE_OPACITY_RATIO,
    stroke_weight: float = DEFAULT_STROKE_WEIGHT,
) -> StyleParameters:
    """
    Compute the style for a block from its summary.

    Args:
        summary: Dominant-category summary, or None for sparse/unmatched blocks
        category_colors: One color per category, in catalog order
        dominance_threshold: Share at which opacity starts to rise from 0
        stroke_opacity_ratio: Stroke opacity as a fraction of fill opacity
        stroke_weight: Outline width in pixels

    Returns:
        StyleParameters; INVISIBLE_STYLE when there is no summary
    """
    if summary is None:
        return INVISIBLE_STYLE

    opacity = dominance_opacity(summary.dominant_share, dominance_threshold)
    color = category_colors[summary.dominant_index]

    return StyleParameters(
        visible=True,
        fill_color=color,
        fill_opacity=opacity,
        stroke_color=color,
        stroke_opacity=opacity * stroke_opacity_ratio,
        stroke_weight=stroke_weight,
    )


@dataclass(frozen=True)
class StylePolicy:
    """Classification policy shared by every block on one map."""

    category_colors: Tuple[str, ...]
    dominance_threshold: float = DEFAULT_DOMINANCE_THRESHOLD
    stroke_opacity_ratio: float = DEFAULT_STROKE_OPACITY_RATIO
    stroke_weight: float = DEFAULT_STROKE_WEIGHT

    def __post_init__(self):
        if not 0 <= self.dominance_threshold < 1:
            raise ValueError(
                f"dominance_threshold must be in [0, 1), got {self.dominance_threshold}"
            )
        object.__setattr__(self, "category_colors", tuple(self.category_colors))

    def style(self, summary: Optional[DemographicSummary]) -> StyleParameters:
        return style_for(
            summary,
            self.category_colors,
            dominance_threshold=self.dominance_threshold,
            stroke_opacity_ratio=self.stroke_opacity_ratio,
            stroke_weight=self.stroke_weight,
        )
