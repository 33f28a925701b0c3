#!/usr/bin/env python3
"""
Block Dominance Map

Creates an interactive choropleth of census blocks colored by their largest
racial group. Color shows which group is largest; opacity shows how
segregated the block is, fading to transparent as the dominant share drops
to the dominance threshold. Blocks with 2 or fewer people, and blocks with
no matching demographic record, are drawn invisibly and get no tooltip.

Inputs:
- Block geometries with a GEOID20 property (GeoJSON or any format geopandas reads)
- Demographic CSV indexed by processing.demographics

Output:
- Interactive HTML map with per-block tooltips and a category legend
- Optional per-block classification table
"""

import copy
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Sequence, Union

import folium
import geopandas as gpd
import pandas as pd
from branca.element import MacroElement, Template
from loguru import logger

from processing.demographics import DemographicIndex, lookup_record
from processing.summary import RACE_LABELS, DemographicSummary, summarize

from .formatting import LegendEntry, format_legend, format_tooltip, legend_html
from .styling import StyleParameters, StylePolicy, check_catalog_colors

Feature = Dict[str, Any]

DEFAULT_GEOID_PROPERTY = "GEOID20"
TOOLTIP_PROPERTY = "dominance_tooltip"

# Philadelphia, the extent of the original block extract
DEFAULT_CENTER = (39.99, -75.15)
DEFAULT_ZOOM = 11
DEFAULT_TILES = "CartoDB Positron"


def get_geo_id(feature: Feature, property_name: str = DEFAULT_GEOID_PROPERTY) -> str:
    """Read a feature's GEOID as a string."""
    return str(feature["properties"][property_name])


class DominanceLayer:
    """
    Binds a demographic index to a classification policy.

    Every per-feature answer (summary, style, tooltip) is derived from the
    feature's GEOID; a GEOID missing from the index is handled the same way
    as a sparse block.
    """

    def __init__(
        self,
        index: DemographicIndex,
        policy: StylePolicy,
        catalog: Sequence[str] = RACE_LABELS,
        geoid_property: str = DEFAULT_GEOID_PROPERTY,
        population_noun: str = "adults",
    ):
        check_catalog_colors(catalog, policy.category_colors)
        self.index = index
        self.policy = policy
        self.catalog = tuple(catalog)
        self.geoid_property = geoid_property
        self.population_noun = population_noun

    def summary_for(self, feature: Feature) -> Optional[DemographicSummary]:
        record = lookup_record(self.index, get_geo_id(feature, self.geoid_property))
        if record is None:
            return None
        return summarize(record, self.catalog)

    def style_parameters_for(self, feature: Feature) -> StyleParameters:
        return self.policy.style(self.summary_for(feature))

    def style_for_feature(self, feature: Feature) -> Dict[str, Any]:
        """Leaflet path options for a feature; usable as a folium style_function."""
        return self.style_parameters_for(feature).to_leaflet()

    def tooltip_for_feature(self, feature: Feature) -> str:
        """Tooltip text for a visible feature. Raises ValueError for invisible ones."""
        summary = self.summary_for(feature)
        if summary is None:
            raise ValueError(
                f"Block {get_geo_id(feature, self.geoid_property)} is not visible and has no tooltip"
            )
        return format_tooltip(summary, self.population_noun)

    def legend_entries(self) -> List[LegendEntry]:
        """Legend (label, color) pairs in catalog order."""
        return format_legend(self.catalog, self.policy.category_colors)


def classify_features(features: Iterable[Feature], layer: DominanceLayer) -> pd.DataFrame:
    """
    Tabulate the classification of each feature.

    Returns:
        DataFrame with one row per feature. Blocks without a summary keep
        their GEOID and ``has_record`` flag with the remaining fields empty.
    """
    rows = []
    for feature in features:
        geo_id = get_geo_id(feature, layer.geoid_property)
        summary = layer.summary_for(feature)
        style = layer.policy.style(summary)
        rows.append(
            {
                "geoid": geo_id,
                "has_record": geo_id in layer.index,
                "total_population": summary.total_population if summary else None,
                "dominant_category": summary.dominant_label if summary else None,
                "dominant_count": summary.dominant_count if summary else None,
                "dominant_share": summary.dominant_share if summary else None,
                "fill_color": style.fill_color,
                "fill_opacity": style.fill_opacity,
            }
        )

    columns = [
        "geoid",
        "has_record",
        "total_population",
        "dominant_category",
        "dominant_count",
        "dominant_share",
        "fill_color",
        "fill_opacity",
    ]
    return pd.DataFrame(rows, columns=columns)


def load_block_features(path: Union[str, Path]) -> Dict[str, Any]:
    """
    Load block geometries as a WGS84 GeoJSON FeatureCollection.

    Args:
        path: Any vector file geopandas can read

    Returns:
        FeatureCollection dict
    """
    geo_path = Path(path)
    logger.info(f"🗺️ Loading block geometries from {geo_path}")

    gdf = gpd.read_file(geo_path)
    if gdf.crs is None:
        logger.warning("  ⚠️ No CRS specified in data, assuming EPSG:4326")
        gdf = gdf.set_crs("EPSG:4326")
    elif gdf.crs.to_epsg() != 4326:
        logger.info(f"  🔄 Reprojecting from {gdf.crs} to EPSG:4326")
        gdf = gdf.to_crs("EPSG:4326")

    logger.success(f"  ✅ Loaded {len(gdf):,} block features")
    return gdf.__geo_interface__


def _split_by_visibility(features: Iterable[Feature], layer: DominanceLayer):
    visible: List[Feature] = []
    hidden: List[Feature] = []
    for feature in features:
        summary = layer.summary_for(feature)
        if summary is None:
            hidden.append(feature)
            continue
        # Tooltip text rides along as a property for folium.GeoJsonTooltip
        styled = copy.deepcopy(feature)
        styled["properties"][TOOLTIP_PROPERTY] = format_tooltip(summary, layer.population_noun)
        visible.append(styled)
    return visible, hidden


def _legend_element(entries, title: Optional[str]) -> MacroElement:
    legend_template = (
        "{% macro html(this, kwargs) %}\n"
        '<div class="info legend" style="position: fixed; bottom: 20px; right: 20px; z-index: 9999;\n'
        "     background: rgba(255,255,255,0.95); padding: 8px 10px; border: 1px solid #888;\n"
        '     font-size: 12px; line-height: 1.4;">\n'
        "{{ this.legend_html }}\n"
        "</div>\n"
        "{% endmacro %}"
    )
    legend = MacroElement()
    # Labels come from configuration; keep them out of the template source
    legend.legend_html = legend_html(entries, title)
    legend._template = Template(legend_template)
    return legend


def _merge_bounds(bounds_list):
    south = min(b[0][0] for b in bounds_list)
    west = min(b[0][1] for b in bounds_list)
    north = max(b[1][0] for b in bounds_list)
    east = max(b[1][1] for b in bounds_list)
    return [[south, west], [north, east]]


def build_dominance_map(
    feature_collection: Dict[str, Any],
    layer: DominanceLayer,
    center: Sequence[float] = DEFAULT_CENTER,
    zoom_start: float = DEFAULT_ZOOM,
    tiles: str = DEFAULT_TILES,
    legend_title: Optional[str] = "Largest group",
) -> folium.Map:
    """
    Build the interactive dominance map.

    Args:
        feature_collection: GeoJSON FeatureCollection of blocks
        layer: DominanceLayer holding the index and policy
        center: Initial (lat, lon) before fitting to the data
        zoom_start: Initial zoom level
        tiles: folium tile layer name
        legend_title: Heading above the legend entries, or None

    Returns:
        folium.Map ready to save
    """
    features = feature_collection.get("features", [])
    visible, hidden = _split_by_visibility(features, layer)
    logger.info(f"  🎨 {len(visible):,} visible blocks, {len(hidden):,} sparse or unmatched")

    missing = sum(1 for f in features if get_geo_id(f, layer.geoid_property) not in layer.index)
    if missing:
        logger.warning(f"  ⚠️ {missing:,} blocks have no demographic record")

    m = folium.Map(
        location=list(center),
        zoom_start=zoom_start,
        tiles=tiles,
        prefer_canvas=True,
        zoom_snap=0,
        zoom_delta=0.5,
    )

    bounds = []
    if visible:
        dominance = folium.GeoJson(
            {"type": "FeatureCollection", "features": visible},
            name="Largest group",
            style_function=layer.style_for_feature,
            tooltip=folium.GeoJsonTooltip(fields=[TOOLTIP_PROPERTY], labels=False, sticky=True),
        )
        dominance.add_to(m)
        bounds.append(dominance.get_bounds())
    if hidden:
        sparse = folium.GeoJson(
            {"type": "FeatureCollection", "features": hidden},
            name="Sparse or unmatched blocks",
            style_function=layer.style_for_feature,
        )
        sparse.add_to(m)
        bounds.append(sparse.get_bounds())

    if bounds:
        m.fit_bounds(_merge_bounds(bounds))

    m.get_root().add_child(_legend_element(layer.legend_entries(), legend_title))
    folium.LayerControl(collapsed=True).add_to(m)

    return m


def save_dominance_map(m: folium.Map, output_path: Union[str, Path]) -> Path:
    path = Path(output_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    m.save(str(path))
    logger.success(f"  ✅ Interactive map saved: {path}")
    return path
