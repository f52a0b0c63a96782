"""End-to-end tests for CLI commands."""

import json
import sys

import pytest
from loguru import logger
from typer.testing import CliRunner

from chartlayout import __version__
from chartlayout.cli.main import app
from chartlayout.config.defaults import PALETTES


class TestCLICommands:
    """End-to-end tests for CLI commands."""

    @pytest.fixture
    def cli_runner(self):
        """Create CLI runner for testing."""
        return CliRunner()

    @pytest.fixture(autouse=True)
    def restore_logging(self):
        """The CLI callback replaces the loguru sink with the runner's stderr."""
        yield
        logger.remove()
        logger.add(sys.stderr)

    def test_version_command(self, cli_runner):
        result = cli_runner.invoke(app, ["version"])

        assert result.exit_code == 0
        assert __version__ in result.output

    def test_verbose_flag(self, cli_runner):
        result = cli_runner.invoke(app, ["--verbose", "version"])

        assert result.exit_code == 0

    def test_bars_table(self, cli_runner, movies_csv):
        result = cli_runner.invoke(
            app,
            [
                "bars",
                str(movies_csv),
                "--name-field", "name",
                "--value-field", "production_budget:production budget",
                "--value-field", "worldwide_box_office:box office",
                "--scale", "1e6",
            ],
        )

        assert result.exit_code == 0
        assert "6 bars" in result.output
        assert "#4e79a7" in result.output

    def test_bars_json(self, cli_runner, movies_csv):
        result = cli_runner.invoke(
            app,
            [
                "bars",
                str(movies_csv),
                "-f", "production_budget",
                "-f", "worldwide_box_office",
                "--scale", "1e6",
                "--json",
            ],
        )

        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert [band["key"] for band in data["x_bands"]] == ["Avatar", "Titanic", "Jaws"]
        assert [entry["key"] for entry in data["legend"]] == [
            "production_budget",
            "worldwide_box_office",
        ]
        assert len(data["rects"]) == 6
        tallest = min(data["rects"], key=lambda rect: rect["top"])
        assert tallest["top"] == pytest.approx(30.0)
        assert tallest["source_index"] == 1

    def test_bars_with_config(self, cli_runner, movies_csv, tmp_path):
        config = tmp_path / "chart.yaml"
        config.write_text(
            "bar:\n  width: 1000\n  height: 1000\n  margins: {left: 0, right: 0}\n",
            encoding="utf-8",
        )
        result = cli_runner.invoke(
            app,
            ["bars", str(movies_csv), "-f", "production_budget", "--config", str(config), "--json"],
        )

        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["width"] == 1000
        assert data["x_bands"][0]["start"] == pytest.approx(0.0)

    def test_bars_missing_column(self, cli_runner, movies_csv):
        result = cli_runner.invoke(app, ["bars", str(movies_csv), "-f", "gross"])

        assert result.exit_code == 1
        assert "gross" in result.output

    def test_bars_invalid_config(self, cli_runner, movies_csv, tmp_path):
        config = tmp_path / "chart.yaml"
        config.write_text("bar:\n  palette: rainbow\n", encoding="utf-8")

        result = cli_runner.invoke(
            app, ["bars", str(movies_csv), "-f", "production_budget", "-c", str(config)]
        )
        assert result.exit_code == 1
        assert "rainbow" in result.output

    def test_graph_json(self, cli_runner, edges_tsv):
        result = cli_runner.invoke(
            app, ["graph", str(edges_tsv), "--threshold", "2", "--seed", "1", "--json"]
        )

        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert [node["id"] for node in data["nodes"]] == ["askreddit", "funny", "pics"]
        assert len(data["links"]) == 7
        assert data["state"] == "converged"
        assert data["view_box"] == [-320.0, -200.0, 640.0, 400.0]

    def test_graph_colors_nodes_by_id(self, cli_runner, edges_tsv):
        result = cli_runner.invoke(app, ["graph", str(edges_tsv), "-t", "2", "--json"])

        assert result.exit_code == 0
        colors = [node["color"] for node in json.loads(result.stdout)["nodes"]]
        assert colors == list(PALETTES["tableau10"][:3])

    def test_graph_max_ticks(self, cli_runner, edges_tsv):
        result = cli_runner.invoke(
            app, ["graph", str(edges_tsv), "-t", "0", "--max-ticks", "5", "--json"]
        )

        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["tick"] == 5
        assert data["state"] == "running"
        assert len(data["nodes"]) == 4

    def test_graph_running_filter(self, cli_runner, edges_tsv):
        result = cli_runner.invoke(
            app, ["graph", str(edges_tsv), "-t", "2", "--running", "--max-ticks", "1", "--json"]
        )

        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert len(data["links"]) == 3

    def test_graph_table(self, cli_runner, edges_tsv):
        result = cli_runner.invoke(app, ["graph", str(edges_tsv), "-t", "2"])

        assert result.exit_code == 0
        assert "3 nodes" in result.output
        assert "converged" in result.output

    def test_graph_default_threshold_keeps_nothing(self, cli_runner, edges_tsv):
        result = cli_runner.invoke(app, ["graph", str(edges_tsv)])

        assert result.exit_code == 0
        assert "more than 150 times" in result.output
        assert "0 nodes" in result.output

    def test_graph_missing_fields(self, cli_runner, movies_csv):
        result = cli_runner.invoke(app, ["graph", str(movies_csv), "-t", "0"])

        assert result.exit_code == 1
        assert "SOURCE_SUBREDDIT" in result.output

    def test_missing_file(self, cli_runner, tmp_path):
        result = cli_runner.invoke(app, ["graph", str(tmp_path / "nope.tsv")])

        assert result.exit_code != 0
