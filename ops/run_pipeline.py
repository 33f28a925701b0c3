#!/usr/bin/env python3
"""
Block Dominance Map Pipeline with Click CLI

This script runs the complete block dominance workflow: index the demographic
extract by GEOID, classify every block by its largest group, and write an
interactive map (plus an optional per-block classification table).

Usage:
    python ops/run_pipeline.py [OPTIONS]

    # Use a different threshold without editing config.yaml:
    python ops/run_pipeline.py --threshold 0.5

    # Override input files:
    python ops/run_pipeline.py --demographics-csv data/census/other.csv --blocks-geojson data/census/other.geojson

    # Verbose logging:
    python ops/run_pipeline.py --verbose
"""

import os
import sys
import time
from pathlib import Path
from typing import Optional

import click
from loguru import logger

# Add project root to Python path when run as a script
sys.path.insert(0, str(Path(__file__).parent.parent))

from analysis.map_demographics import (
    DominanceLayer,
    build_dominance_map,
    classify_features,
    load_block_features,
    save_dominance_map,
)
from ops.config_loader import Config
from processing.demographics import load_demographic_index


@click.command()
@click.option(
    "--config",
    "config_file",
    type=click.Path(exists=True, dir_okay=False),
    help="Path to config.yaml (default: PIPELINE_CONFIG_PATH, ./config.yaml, ops/config.yaml)",
)
@click.option("--demographics-csv", type=click.Path(), help="Override input demographic CSV path")
@click.option("--blocks-geojson", type=click.Path(), help="Override input block geometry path")
@click.option(
    "--threshold",
    type=click.FloatRange(0.0, 1.0, max_open=True),
    help="Override analysis.dominance_threshold",
)
@click.option("--output", type=click.Path(dir_okay=False), help="Override output HTML map path")
@click.option(
    "--export-csv/--no-export-csv",
    default=False,
    help="Also write the per-block classification table",
)
@click.option("--dry-run", is_flag=True, help="Show what would be run without executing")
@click.option("-v", "--verbose", is_flag=True, help="Enable DEBUG level logging")
@click.option(
    "--trace", is_flag=True, help="Enable TRACE level logging for deep debugging (maximum detail)"
)
@click.option("--log-file", type=str, help="Also log to specified file")
def cli(
    config_file: Optional[str],
    demographics_csv: Optional[str],
    blocks_geojson: Optional[str],
    threshold: Optional[float],
    output: Optional[str],
    export_csv: bool,
    dry_run: bool,
    verbose: bool,
    trace: bool,
    log_file: Optional[str],
):
    """
    Block Dominance Map Pipeline

    Classify census blocks by their largest demographic group and render an
    interactive choropleth where opacity shows how dominant that group is.

    \b
    Examples:
      python ops/run_pipeline.py                          # Use config.yaml as-is
      python ops/run_pipeline.py --threshold 0.5          # Lower the dominance threshold
      python ops/run_pipeline.py --export-csv             # Also write block_dominance.csv
      python ops/run_pipeline.py --dry-run -v             # Show resolved paths only
    """
    setup_logging(verbose=verbose, enable_trace=trace)

    if log_file:
        log_level = "TRACE" if trace else ("DEBUG" if verbose else "INFO")
        logger.add(
            log_file,
            level=log_level,
            format="{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | {name}:{function}:{line} | {message}",
            rotation="10 MB",
            retention="7 days",
        )
        logger.info(f"📄 Also logging to file: {log_file}")

    logger.info("🗺️ Block Dominance Map Pipeline")

    try:
        config = Config(config_file)
        logger.info(f"📋 Project: {config.get('project_name', 'Unknown')}")
        config.print_config_summary()

        dmg_path = Path(demographics_csv) if demographics_csv else config.get_input_path("demographics_csv")
        geo_path = Path(blocks_geojson) if blocks_geojson else config.get_input_path("blocks_geojson")
        map_path = Path(output) if output else config.get_dominance_map_path()
        csv_path = config.get_classification_csv_path()

        logger.info("File paths:")
        logger.info(f"  📄 Demographics: {dmg_path}")
        logger.info(f"  🗺️ Blocks: {geo_path}")
        logger.info(f"  💾 Map: {map_path}")
        if export_csv:
            logger.info(f"  💾 Classification CSV: {csv_path}")

        if dry_run:
            logger.info("🔍 Dry run - nothing written")
            return

        start = time.time()
        run_pipeline(config, dmg_path, geo_path, map_path, csv_path if export_csv else None, threshold)
        logger.success(f"✅ Pipeline completed in {time.time() - start:.1f}s")

    except Exception as e:
        handle_critical_error(e, "block dominance pipeline")
        sys.exit(1)


def run_pipeline(
    config: Config,
    dmg_path: Path,
    geo_path: Path,
    map_path: Path,
    csv_path: Optional[Path] = None,
    threshold: Optional[float] = None,
) -> Path:
    """
    Build the dominance map from configuration and input files.

    Args:
        config: Loaded configuration
        dmg_path: Demographic CSV extract
        geo_path: Block geometries
        map_path: Where to write the HTML map
        csv_path: Where to write the classification table, or None to skip it
        threshold: Dominance threshold override

    Returns:
        Path of the saved map
    """
    catalog = config.get_category_labels()
    policy = config.build_policy(threshold)
    logger.info(f"🎚️ Dominance threshold: {policy.dominance_threshold}")

    index = load_demographic_index(
        dmg_path,
        category_count=len(catalog),
        header_rows_to_skip=int(config.get_demographics_setting("header_rows")),
    )
    features = load_block_features(geo_path)

    layer = DominanceLayer(
        index,
        policy,
        catalog=catalog,
        geoid_property=config.get_column_name("geoid_property"),
        population_noun=config.get_demographics_setting("population_noun"),
    )

    logger.info("🎨 Building dominance map...")
    m = build_dominance_map(
        features,
        layer,
        center=config.get_visualization_setting("center"),
        zoom_start=config.get_visualization_setting("zoom_start"),
        tiles=config.get_visualization_setting("tiles"),
        legend_title=config.get_visualization_setting("legend_title"),
    )
    saved = save_dominance_map(m, map_path)

    if csv_path is not None:
        table = classify_features(features["features"], layer)
        csv_path.parent.mkdir(parents=True, exist_ok=True)
        table.to_csv(csv_path, index=False)
        logger.success(f"  ✅ Classification table saved: {csv_path} ({len(table):,} blocks)")

    return saved


def setup_logging(verbose: bool = False, enable_trace: bool = False) -> None:
    """
    Configure loguru logging with appropriate levels.

    Args:
        verbose: If True, set log level to DEBUG
        enable_trace: If True, enable TRACE level logging for deep debugging
    """
    logger.remove()

    if enable_trace:
        log_level = "TRACE"
    elif verbose:
        log_level = "DEBUG"
    else:
        log_level = "INFO"

    if enable_trace or verbose:
        log_format = "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | <level>{message}</level>"
    else:
        log_format = (
            "<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | <level>{message}</level>"
        )

    logger.add(
        sys.stderr,
        format=log_format,
        level=log_level,
        colorize=True,
        backtrace=enable_trace,
        diagnose=enable_trace,
    )

    os.environ["LOGURU_LEVEL"] = log_level

    if verbose:
        logger.debug("🔧 Verbose logging enabled (DEBUG level)")
    if enable_trace:
        logger.trace("🔍 Trace logging enabled - maximum detail mode")


def handle_critical_error(error: Exception, context: str = "") -> None:
    """
    Report a fatal error, with the full traceback in TRACE mode.

    Args:
        error: The exception that occurred
        context: Additional context about where the error occurred
    """
    enable_trace = os.environ.get("LOGURU_LEVEL", "INFO") == "TRACE"

    if enable_trace:
        logger.opt(exception=error).trace(f"💥 TRACE MODE: {type(error).__name__} in {context}")

    logger.critical(f"💥 CRITICAL ERROR: {context}")
    logger.critical(f"Exception: {type(error).__name__}: {error}")

    if not enable_trace:
        logger.info("💡 For detailed debugging, run with --trace flag")


if __name__ == "__main__":
    cli()
