"""Configuration management."""

import tomllib
from pathlib import Path
from typing import Any, Dict, Optional, Union

import structlog
from pydantic import BaseModel, Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from ..core.erosion_engine import EngineOptions
from ..core.erosion_model import SimulationParameters
from ..core.exceptions import ConfigurationError
from ..core.terrain_initializer import TerrainPreset

logger = structlog.get_logger()

DEFAULT_CONFIG_PATH = Path("config.toml")


class SimulationDefaults(BaseModel):
    """Initial process rates."""

    rain: float = Field(default=100.0, description="Rain per step (P)")
    erosion_k: float = Field(default=0.005, description="Erosion coefficient (K)")
    deposition_d: float = Field(default=0.003, description="Deposition coefficient (D)")
    threshold_t: float = Field(default=20.0, description="Erosion/deposition threshold (T)")
    uplift_u: float = Field(default=10.0, description="Uplift per step (U)")


class LoggingSettings(BaseSettings):
    """Logging options, readable before the rest of the configuration."""

    log_level: str = Field(default="INFO", description="Logging level")
    log_format: str = Field(default="console", description="Logging format (console or json)")

    model_config = SettingsConfigDict(
        env_prefix="EROSION_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


class Settings(LoggingSettings):
    """Application settings, overridable from the environment and a TOML file."""

    # Grid and run length
    grid_size: int = Field(default=65, ge=1, description="Grid side length in cells")
    max_steps: int = Field(default=100, ge=0, description="Number of steps to run")
    log_interval: int = Field(default=10, ge=1, description="Steps between stats snapshots")

    # Terrain and engine
    preset: TerrainPreset = Field(default=TerrainPreset.FRACTAL, description="Initial terrain preset")
    seed: Optional[int] = Field(default=None, description="Terrain seed, random when unset")
    hillslope_diffusion: bool = Field(default=False, description="Enable hillslope diffusion")
    diffusivity: float = Field(default=0.05, description="Hillslope diffusion coefficient (Kt)")

    simulation: SimulationDefaults = Field(default_factory=SimulationDefaults)

    # Database
    database_url: str = Field(default="sqlite:///erosion_log.db", description="Metrics database URL")

    # Export
    export_path: str = Field(default="terrain_output.asc", description="ASCII grid output path")

    model_config = SettingsConfigDict(
        env_prefix="EROSION_",
        env_nested_delimiter="__",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    def to_parameters(self) -> SimulationParameters:
        """Simulation parameters seeded from the configured defaults."""
        return SimulationParameters(**self.simulation.model_dump())

    def engine_options(self) -> EngineOptions:
        return EngineOptions(
            hillslope_diffusion=self.hillslope_diffusion,
            diffusivity=self.diffusivity,
        )


def read_config_file(path: Union[str, Path]) -> Dict[str, Any]:
    """
    Parse a TOML configuration file.

    Raises:
        ConfigurationError: if the file cannot be read or is not valid TOML
    """
    try:
        with open(path, "rb") as f:
            return tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as e:
        raise ConfigurationError(f"Cannot read configuration {path}: {e}") from e


def default_settings() -> Settings:
    """Settings from the environment only, or built-in defaults if that fails."""
    try:
        return Settings()
    except ValidationError as e:
        logger.warning("Invalid environment settings, using built-in defaults", error=str(e))
        return Settings.model_construct()


def load_settings(config_path: Union[str, Path, None] = None) -> Settings:
    """
    Load settings from a TOML file on top of environment overrides.

    A missing, unreadable or invalid file is never fatal: the problem is
    logged and built-in defaults are returned.
    """
    path = Path(config_path) if config_path is not None else DEFAULT_CONFIG_PATH

    if not path.exists():
        logger.info("Configuration file not found, using defaults", path=str(path))
        return default_settings()

    try:
        data = read_config_file(path)
        settings = Settings(**data)
    except ConfigurationError as e:
        logger.warning("Could not read configuration, using defaults", path=str(path), error=str(e))
        return default_settings()
    except ValidationError as e:
        logger.warning("Invalid configuration values, using defaults", path=str(path), error=str(e))
        return default_settings()

    logger.info("Configuration loaded", path=str(path))
    return settings
