"""
Configuration Loader for the Block Dominance Map

This module provides a centralized way to load and access configuration
settings from the config.yaml file.

Usage:
    from ops import Config

    config = Config()
    dmg_csv = config.get_input_path('demographics_csv')
    threshold = config.get_analysis_setting('dominance_threshold')
"""

import os
import pathlib
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml  # type: ignore[import-untyped]
from loguru import logger

from analysis.styling import StylePolicy, category_colors


class Config:
    """Configuration manager for the block dominance map."""

    # Default values that can be overridden in config
    DEFAULTS: Dict[str, Any] = {
        "columns": {
            "geoid_property": "GEOID20",
        },
        "demographics": {
            "header_rows": 1,
            "population_noun": "adults",
            "categories": [
                "White",
                "Black or African American",
                "American Indian and Alaska Native",
                "Asian",
                "Native Hawaiian and Other Pacific Islander",
                "Some Other Race",
                "Two or More Races",
            ],
        },
        "analysis": {
            "dominance_threshold": 0.65,
        },
        "visualization": {
            "palette": "tab10",
            "stroke_weight": 1,
            "stroke_opacity_ratio": 0.5,
            "tiles": "CartoDB Positron",
            "center": [39.99, -75.15],
            "zoom_start": 11,
            "legend_title": "Largest group",
        },
    }

    def __init__(
        self,
        config_file: Optional[Union[str, Path]] = None,
        project_root_override: Optional[Union[str, Path]] = None,
    ):
        """
        Initialize configuration manager.

        Args:
            config_file: Path to config file. If None, looks for:
                        1. Environment variable PIPELINE_CONFIG_PATH
                        2. config.yaml in current directory
                        3. ops/config.yaml under the current directory
            project_root_override: Override project root detection
        """
        if config_file is None:
            env_config = os.environ.get("PIPELINE_CONFIG_PATH")
            if env_config and Path(env_config).exists():
                config_file = env_config
                logger.debug(f"Using config from environment: {config_file}")
            elif Path("config.yaml").exists():
                config_file = "config.yaml"
            elif Path("ops/config.yaml").exists():
                config_file = "ops/config.yaml"
            else:
                raise FileNotFoundError(
                    "No config.yaml found. Check current directory or set PIPELINE_CONFIG_PATH"
                )

        self.config_path = Path(config_file).resolve()
        if not self.config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {self.config_path}")

        if project_root_override:
            self.project_root = Path(project_root_override).resolve()
            logger.debug(f"Using project root override: {self.project_root}")
        else:
            self.project_root = self._find_project_root()

        logger.debug(f"Loading config from: {self.config_path}")
        logger.debug(f"Project root: {self.project_root}")

        try:
            with open(self.config_path, "r") as f:
                self.data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ValueError(f"Error parsing configuration file: {e}")

        self._setup_paths()

    def _setup_paths(self) -> None:
        """Setup base directory paths relative to project root."""
        dirs = self.data.get("directories", {})

        self.data_dir = self.project_root / dirs.get("data", "data")
        self.census_dir = self.project_root / dirs.get("census", "data/census")
        self.html_dir = self.project_root / dirs.get("html", "html")

    def get_input_path(self, filename_key: str) -> pathlib.Path:
        """
        Get full path to an input file, joined with the project root.

        Args:
            filename_key: Key for the filename in input_files

        Returns:
            Full absolute path to the input file
        """
        relative_path_str = self.data.get("input_files", {}).get(filename_key)
        if not relative_path_str:
            raise ValueError(
                f"Input filename key '{filename_key}' not found in config: input_files"
            )
        return self.project_root / relative_path_str

    def get(self, key_path: str, default: Any = None) -> Any:
        """
        Get configuration value using dot notation with intelligent defaults.

        Args:
            key_path: Dot-separated path to the configuration value
            default: Default value if key not found

        Returns:
            Configuration value
        """
        keys = key_path.split(".")

        value: Any = self.data
        for key in keys:
            if isinstance(value, dict) and key in value:
                value = value[key]
            else:
                value = None
                break

        if value is None:
            value = self.DEFAULTS
            for key in keys:
                if isinstance(value, dict) and key in value:
                    value = value[key]
                else:
                    return default

        return value

    def get_dominance_map_path(self) -> pathlib.Path:
        """Get path to the interactive dominance map HTML file."""
        return pathlib.Path(self.html_dir) / "dominance_map.html"

    def get_classification_csv_path(self) -> pathlib.Path:
        """Get path to the per-block classification CSV."""
        return pathlib.Path(self.census_dir) / "block_dominance.csv"

    def get_output_dir(self, dir_key: str) -> pathlib.Path:
        """
        Get full path to an output directory.

        Args:
            dir_key: Directory key ('data', 'census' or 'html')

        Returns:
            Full path to the directory
        """
        if dir_key == "data":
            return pathlib.Path(self.data_dir)
        elif dir_key == "census":
            return pathlib.Path(self.census_dir)
        elif dir_key == "html":
            return pathlib.Path(self.html_dir)
        else:
            raise ValueError(f"Unknown directory key: {dir_key}")

    def get_column_name(self, column_key: str) -> str:
        """Get column name with intelligent defaults."""
        result = self.get(f"columns.{column_key}")
        if isinstance(result, str):
            return result
        raise ValueError(f"Column name not found or not a string: {column_key}")

    def get_analysis_setting(self, setting_key: str) -> Any:
        """Get analysis setting with intelligent defaults."""
        return self.get(f"analysis.{setting_key}")

    def get_visualization_setting(self, setting_key: str) -> Any:
        """Get visualization setting with intelligent defaults."""
        return self.get(f"visualization.{setting_key}")

    def get_demographics_setting(self, setting_key: str) -> Any:
        return self.get(f"demographics.{setting_key}")

    def get_category_labels(self) -> List[str]:
        """Category labels in the column order of the demographic extract."""
        labels = self.get_demographics_setting("categories")
        if not isinstance(labels, list) or not labels:
            raise ValueError("demographics.categories must be a non-empty list of labels")
        return [str(label) for label in labels]

    def get_category_colors(self) -> List[str]:
        """Colors for the categories: an explicit list, or the palette's first K colors."""
        explicit = self.get_visualization_setting("category_colors")
        if explicit:
            return [str(color) for color in explicit]
        palette = self.get_visualization_setting("palette")
        return list(category_colors(len(self.get_category_labels()), palette))

    def build_policy(self, dominance_threshold: Optional[float] = None) -> StylePolicy:
        """Assemble the style policy from configuration."""
        if dominance_threshold is None:
            dominance_threshold = self.get_analysis_setting("dominance_threshold")
        return StylePolicy(
            category_colors=tuple(self.get_category_colors()),
            dominance_threshold=float(dominance_threshold),
            stroke_opacity_ratio=float(self.get_visualization_setting("stroke_opacity_ratio")),
            stroke_weight=self.get_visualization_setting("stroke_weight"),
        )

    def validate_input_files(self) -> Dict[str, bool]:
        """Validate that input files exist."""
        results: Dict[str, bool] = {}
        input_files = self.data.get("input_files", {})

        for filename_key in input_files:
            results[filename_key] = self.get_input_path(filename_key).exists()

        return results

    def print_config_summary(self) -> None:
        """Log a summary of the current configuration."""
        logger.debug("📋 Configuration Summary")
        logger.debug("=" * 50)
        logger.debug(f"Project: {self.get('project_name', 'Unknown')}")
        logger.debug(f"Description: {self.get('description', 'No description')}")
        logger.debug(f"Config file: {self.config_path}")
        logger.debug(f"Dominance threshold: {self.get_analysis_setting('dominance_threshold')}")
        logger.debug(f"Categories: {len(self.get_category_labels())}")

        logger.debug("📁 Directories:")
        for key in ["data", "census", "html"]:
            dir_path = self.get_output_dir(key)
            exists = "✅" if dir_path.exists() else "❌"
            logger.debug(f"  {exists} {key}: {dir_path}")

        logger.debug("📊 Input Files:")
        for file_key, exists in self.validate_input_files().items():
            status = "✅" if exists else "❌"
            logger.debug(f"  {status} {file_key}")

    def _find_project_root(self) -> Path:
        """Find the project root directory by looking for characteristic files/directories."""
        current = self.config_path.parent

        project_markers = ["analysis", "data", "ops", "pyproject.toml", ".git"]

        for _ in range(5):
            markers_found = sum(1 for marker in project_markers if (current / marker).exists())
            if markers_found >= 2:
                return current

            parent = current.parent
            if parent == current:
                break
            current = parent

        # Fallback: if config is in ops/, project root is parent
        if self.config_path.parent.name == "ops":
            return self.config_path.parent.parent

        logger.warning(
            f"Could not reliably detect project root, using config directory: {self.config_path.parent}"
        )
        return self.config_path.parent

