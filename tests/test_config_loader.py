"""Tests for the YAML configuration loader."""

import pytest
import yaml

from ops.config_loader import Config


def write_config(tmp_path, data):
    path = tmp_path / "config.yaml"
    path.write_text(yaml.safe_dump(data))
    return path


def test_defaults_fill_missing_settings(tmp_path):
    config = Config(write_config(tmp_path, {"project_name": "Test"}), project_root_override=tmp_path)

    assert config.get("project_name") == "Test"
    assert config.get_analysis_setting("dominance_threshold") == 0.65
    assert config.get_column_name("geoid_property") == "GEOID20"
    assert len(config.get_category_labels()) == 7
    assert config.get("missing.key", "fallback") == "fallback"


def test_paths_resolve_against_project_root(tmp_path):
    data = {
        "input_files": {"demographics_csv": "data/census/dmg.csv"},
        "directories": {"html": "out"},
    }
    config = Config(write_config(tmp_path, data), project_root_override=tmp_path)

    assert config.get_input_path("demographics_csv") == tmp_path / "data/census/dmg.csv"
    assert config.get_dominance_map_path() == tmp_path / "out" / "dominance_map.html"
    assert config.get_classification_csv_path() == tmp_path / "data/census/block_dominance.csv"
    assert config.validate_input_files() == {"demographics_csv": False}

    with pytest.raises(ValueError):
        config.get_input_path("blocks_geojson")
    with pytest.raises(ValueError):
        config.get_output_dir("tiles")


def test_build_policy_from_config(tmp_path):
    data = {
        "analysis": {"dominance_threshold": 0.5},
        "visualization": {"stroke_weight": 2},
    }
    config = Config(write_config(tmp_path, data), project_root_override=tmp_path)

    policy = config.build_policy()

    assert policy.dominance_threshold == 0.5
    assert policy.stroke_weight == 2
    assert policy.stroke_opacity_ratio == 0.5
    assert policy.category_colors[0] == "#1f77b4"
    assert len(policy.category_colors) == 7
    assert config.build_policy(0.8).dominance_threshold == 0.8


def test_explicit_category_colors(tmp_path):
    data = {
        "demographics": {"categories": ["Owner", "Renter"]},
        "visualization": {"category_colors": ["#111111", "#222222"]},
    }
    config = Config(write_config(tmp_path, data), project_root_override=tmp_path)

    assert config.build_policy().category_colors == ("#111111", "#222222")


def test_config_from_environment(tmp_path, monkeypatch):
    path = write_config(tmp_path, {"project_name": "From env"})
    monkeypatch.setenv("PIPELINE_CONFIG_PATH", str(path))

    assert Config(project_root_override=tmp_path).get("project_name") == "From env"


def test_missing_config_file(tmp_path, monkeypatch):
    monkeypatch.delenv("PIPELINE_CONFIG_PATH", raising=False)
    monkeypatch.chdir(tmp_path)

    with pytest.raises(FileNotFoundError):
        Config()
    with pytest.raises(FileNotFoundError):
        Config(tmp_path / "nope.yaml")


def test_invalid_yaml(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("analysis: [unclosed\n")

    with pytest.raises(ValueError):
        Config(path, project_root_override=tmp_path)
