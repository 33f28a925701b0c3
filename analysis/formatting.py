"""
Tooltip and legend text for the dominance map.
"""

from decimal import ROUND_HALF_UP, Decimal
from html import escape
from typing import List, Optional, Sequence, Tuple

from processing.summary import DemographicSummary

from .styling import check_catalog_colors

LegendEntry = Tuple[str, str]


def format_percent(part: int, whole: int) -> str:
    """``part / whole`` as a percentage with one decimal, rounded half-up."""
    pct = Decimal(part) * 100 / Decimal(whole)
    return str(pct.quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))


def format_tooltip(summary: Optional[DemographicSummary], population_noun: str = "adults") -> str:
    """
    Hover text for a block, e.g. ``"90.0% White<br>(out of 10 adults)"``.

    Only call this for blocks that have a summary; invisible blocks get no tooltip.
    """
    if summary is None:
        raise ValueError("Cannot format a tooltip for a block without a demographic summary")

    pct = format_percent(summary.dominant_count, summary.total_population)
    return (
        f"{pct}% {summary.dominant_label}<br>"
        f"(out of {summary.total_population} {population_noun})"
    )


def format_legend(catalog: Sequence[str], category_colors: Sequence[str]) -> List[LegendEntry]:
    """Pair each category label with its color, in catalog order."""
    check_catalog_colors(catalog, category_colors)
    return list(zip(catalog, category_colors))


def legend_html(entries: Sequence[LegendEntry], title: Optional[str] = None) -> str:
    """Render legend entries as a list of colored swatches."""
    items = "".join(
        f'<li class="legend-entry">'
        f'<span class="legend-icon" style="display:inline-block;width:12px;height:12px;'
        f'background-color:{color};margin-right:6px;"></span>'
        f'<span class="legend-label">{escape(label)}</span>'
        f"</li>"
        for label, color in entries
    )
    heading = f'<div style="font-weight:600;margin-bottom:6px;">{escape(title)}</div>' if title else ""
    return f'{heading}<ul class="legend-entries" style="list-style:none;margin:0;padding:0;">{items}</ul>'
