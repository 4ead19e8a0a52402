"""Tests for settings loading."""

import os

import pytest
from py_erosion.config import Settings, load_settings, read_config_file
from py_erosion.core.exceptions import ConfigurationError
from py_erosion.core.terrain_initializer import TerrainPreset


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    """Isolate from any EROSION_* variables and .env in the working directory."""
    for key in list(os.environ):
        if key.startswith("EROSION_"):
            monkeypatch.delenv(key)
    monkeypatch.chdir(tmp_path)


class TestLoadSettings:
    """Test TOML loading and fallbacks."""

    def test_missing_file_uses_defaults(self, tmp_path):
        settings = load_settings(tmp_path / "nope.toml")

        assert settings.grid_size == 65
        assert settings.max_steps == 100
        assert settings.preset is TerrainPreset.FRACTAL
        assert settings.simulation.rain == 100.0

    def test_file_values(self, tmp_path):
        path = tmp_path / "config.toml"
        path.write_text(
            "grid_size = 33\n"
            "max_steps = 12\n"
            'preset = "banded"\n'
            "seed = 5\n"
            "hillslope_diffusion = true\n"
            "\n"
            "[simulation]\n"
            "rain = 50.0\n"
            "uplift_u = 2.5\n"
        )
        settings = load_settings(path)

        assert settings.grid_size == 33
        assert settings.max_steps == 12
        assert settings.preset is TerrainPreset.BANDED
        assert settings.seed == 5
        assert settings.simulation.rain == 50.0
        assert settings.simulation.uplift_u == 2.5
        assert settings.simulation.erosion_k == 0.005

        assert settings.engine_options().hillslope_diffusion is True

    def test_default_path(self, tmp_path):
        (tmp_path / "config.toml").write_text("max_steps = 3\n")
        assert load_settings().max_steps == 3

    def test_malformed_toml_uses_defaults(self, tmp_path):
        path = tmp_path / "config.toml"
        path.write_text("grid_size = = 3\n[simulation\n")
        assert load_settings(path).grid_size == 65

    def test_invalid_values_use_defaults(self, tmp_path):
        path = tmp_path / "config.toml"
        path.write_text('grid_size = "large"\n')
        assert load_settings(path).grid_size == 65

    def test_environment_override(self, tmp_path, monkeypatch):
        monkeypatch.setenv("EROSION_MAX_STEPS", "7")
        monkeypatch.setenv("EROSION_SIMULATION__EROSION_K", "0.02")
        settings = load_settings(tmp_path / "nope.toml")

        assert settings.max_steps == 7
        assert settings.simulation.erosion_k == 0.02

    def test_invalid_environment_falls_back(self, tmp_path, monkeypatch):
        monkeypatch.setenv("EROSION_GRID_SIZE", "many")
        settings = load_settings(tmp_path / "nope.toml")
        assert settings.grid_size == 65

    def test_read_config_file_errors(self, tmp_path):
        with pytest.raises(ConfigurationError):
            read_config_file(tmp_path / "nope.toml")


class TestSettingsConversion:
    def test_to_parameters(self):
        settings = Settings(simulation={"rain": 1.0, "threshold_t": 3.0})
        params = settings.to_parameters()

        assert params.rain == 1.0
        assert params.threshold_t == 3.0
        assert params.deposition_d == 0.003
