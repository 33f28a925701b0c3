"""Tests for the command-line pipeline."""

import json
import sys

import pandas as pd
import pytest
import yaml
from click.testing import CliRunner
from loguru import logger

from ops.run_pipeline import cli


@pytest.fixture(autouse=True)
def restore_logger():
    yield
    logger.remove()
    logger.add(sys.stderr)


@pytest.fixture
def project(tmp_path, demographic_rows, feature_collection):
    """A throwaway project: ops/config.yaml plus data/census inputs."""
    census_dir = tmp_path / "data" / "census"
    census_dir.mkdir(parents=True)
    (tmp_path / "ops").mkdir()

    (census_dir / "dmg.csv").write_text("\n".join(",".join(row) for row in demographic_rows) + "\n")
    (census_dir / "blocks.geojson").write_text(json.dumps(feature_collection))

    config_path = tmp_path / "ops" / "config.yaml"
    config_path.write_text(
        yaml.safe_dump(
            {
                "project_name": "Test blocks",
                "input_files": {
                    "demographics_csv": "data/census/dmg.csv",
                    "blocks_geojson": "data/census/blocks.geojson",
                },
            }
        )
    )
    return tmp_path, config_path


def test_cli_dry_run_writes_nothing(project):
    root, config_path = project

    result = CliRunner().invoke(cli, ["--config", str(config_path), "--dry-run"])

    assert result.exit_code == 0, result.output
    assert not (root / "html" / "dominance_map.html").exists()


def test_cli_builds_map_and_table(project):
    root, config_path = project

    result = CliRunner().invoke(cli, ["--config", str(config_path), "--export-csv"])

    assert result.exit_code == 0, result.output
    assert (root / "html" / "dominance_map.html").exists()

    table = pd.read_csv(root / "data" / "census" / "block_dominance.csv", dtype={"geoid": str})
    assert len(table) == 5
    white = table.set_index("geoid").loc["421010001001000"]
    assert white["dominant_category"] == "White"


def test_cli_threshold_and_output_overrides(project, tmp_path):
    _, config_path = project
    output = tmp_path / "custom" / "map.html"

    result = CliRunner().invoke(
        cli, ["--config", str(config_path), "--threshold", "0.5", "--output", str(output)]
    )

    assert result.exit_code == 0, result.output
    assert output.exists()


def test_cli_rejects_threshold_of_one(project):
    _, config_path = project

    result = CliRunner().invoke(cli, ["--config", str(config_path), "--threshold", "1.0"])

    assert result.exit_code == 2


def test_cli_exits_nonzero_on_malformed_data(project):
    root, config_path = project
    with open(root / "data" / "census" / "dmg.csv", "a") as f:
        f.write("ten,0,9,1,0,0,0,0,0,42,101,000100,1000\n")

    result = CliRunner().invoke(cli, ["--config", str(config_path)])

    assert result.exit_code == 1
    assert not (root / "html" / "dominance_map.html").exists()
