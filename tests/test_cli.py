"""Tests for the command-line driver."""

import json
import os

import pytest
from py_erosion.cli import apply_overrides, build_parser, main, run_simulation
from py_erosion.config import Settings
from py_erosion.core.terrain_initializer import TerrainPreset
from py_erosion.db import MetricsStore
from py_erosion.io.ascii_grid import read_ascii_grid


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    for key in list(os.environ):
        if key.startswith("EROSION_"):
            monkeypatch.delenv(key)
    monkeypatch.chdir(tmp_path)


class TestOverrides:
    def test_arguments_override_settings(self):
        args = build_parser().parse_args(
            ["--steps", "4", "--size", "11", "--seed", "3", "--preset", "banded", "--diffusion"]
        )
        settings = apply_overrides(Settings(), args)

        assert settings.max_steps == 4
        assert settings.grid_size == 11
        assert settings.seed == 3
        assert settings.preset is TerrainPreset.BANDED
        assert settings.hillslope_diffusion is True

    def test_no_arguments_keep_settings(self):
        settings = apply_overrides(Settings(max_steps=9), build_parser().parse_args([]))
        assert settings.max_steps == 9
        assert settings.hillslope_diffusion is False


class TestRunSimulation:
    """Test the step loop with its external collaborators."""

    def test_logs_every_interval(self, tmp_path):
        settings = Settings(
            grid_size=9, max_steps=6, log_interval=2, seed=1,
            export_path=str(tmp_path / "out.asc"),
        )
        store = MetricsStore.connect("sqlite://")

        model = run_simulation(settings, store)

        assert model.steps == 6
        assert [entry.step for entry in store.history()] == [2, 4, 6]
        header, values = read_ascii_grid(tmp_path / "out.asc")
        assert values.shape == (9, 9)

    def test_export_failure_does_not_stop_run(self, tmp_path):
        settings = Settings(grid_size=9, max_steps=2, seed=1, export_path=str(tmp_path))
        model = run_simulation(settings)
        assert model.steps == 2

    def test_disabled_store_does_not_stop_run(self, tmp_path):
        settings = Settings(
            grid_size=9, max_steps=3, log_interval=1, seed=1,
            export_path=str(tmp_path / "out.asc"),
        )
        store = MetricsStore.connect("notadialect://nowhere")
        model = run_simulation(settings, store)
        assert model.steps == 3


class TestMain:
    def test_main_runs(self, tmp_path):
        out = tmp_path / "terrain.asc"
        code = main([
            "--config", str(tmp_path / "missing.toml"),
            "--steps", "3",
            "--size", "9",
            "--seed", "7",
            "--no-db",
            "--export", str(out),
        ])

        assert code == 0
        assert out.exists()

    def test_config_warning_uses_configured_renderer(self, tmp_path, monkeypatch, capsys):
        """Configuration problems are reported in the environment's log format."""
        monkeypatch.setenv("EROSION_LOG_FORMAT", "json")
        bad = tmp_path / "bad.toml"
        bad.write_text("grid_size = [unclosed\n")

        code = main([
            "--config", str(bad),
            "--steps", "1",
            "--size", "5",
            "--seed", "1",
            "--no-db",
            "--export", str(tmp_path / "out.asc"),
        ])

        assert code == 0
        lines = [line for line in capsys.readouterr().err.splitlines() if line.startswith("{")]
        events = [json.loads(line) for line in lines]
        warning = next(e for e in events if e["event"] == "Could not read configuration, using defaults")
        assert warning["level"] == "warning"
        assert warning["path"] == str(bad)
