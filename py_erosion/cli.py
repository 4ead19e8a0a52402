#!/usr/bin/env python3
"""Command-line driver for the erosion simulation."""

import argparse
import sys
from typing import List, Optional

import structlog

from .config import LoggingSettings, Settings, load_settings
from .core.erosion_model import ErosionModel
from .core.exceptions import GridExportError
from .core.terrain_initializer import TerrainPreset
from .db.metrics_store import MetricsStore
from .io.ascii_grid import export_ascii_grid
from .utils.log_config import configure_logging

logger = structlog.get_logger()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="py-erosion",
        description="Fluvial landscape evolution simulation",
    )
    parser.add_argument("--config", default=None, help="TOML configuration file (default: config.toml)")
    parser.add_argument("--steps", type=int, default=None, help="Number of steps to run")
    parser.add_argument("--size", type=int, default=None, help="Grid side length in cells")
    parser.add_argument("--seed", type=int, default=None, help="Terrain seed")
    parser.add_argument(
        "--preset",
        choices=[p.value for p in TerrainPreset],
        default=None,
        help="Initial terrain preset",
    )
    parser.add_argument("--diffusion", action="store_true", help="Enable hillslope diffusion")
    parser.add_argument("--export", default=None, help="ASCII grid output path")
    parser.add_argument("--no-db", action="store_true", help="Do not write metrics to the database")
    return parser


def apply_overrides(settings: Settings, args: argparse.Namespace) -> Settings:
    """Command-line options take precedence over file and environment settings."""
    updates = {}
    if args.steps is not None:
        updates["max_steps"] = args.steps
    if args.size is not None:
        updates["grid_size"] = args.size
    if args.seed is not None:
        updates["seed"] = args.seed
    if args.preset is not None:
        updates["preset"] = TerrainPreset(args.preset)
    if args.diffusion:
        updates["hillslope_diffusion"] = True
    if args.export is not None:
        updates["export_path"] = args.export
    return settings.model_copy(update=updates)


def run_simulation(settings: Settings, store: Optional[MetricsStore] = None) -> ErosionModel:
    """
    Run ``settings.max_steps`` steps, snapshotting stats every ``log_interval`` steps.

    Metrics store and export failures are logged; they do not stop the run.
    """
    model = ErosionModel(
        settings.grid_size,
        settings.to_parameters(),
        preset=settings.preset,
        seed=settings.seed,
        engine_options=settings.engine_options(),
    )

    stats = model.calculate_stats()
    logger.info(
        "Initial terrain",
        max_relief=round(stats.max_relief, 2),
        mean_elevation=round(stats.mean_elevation, 2),
    )

    logger.info("Starting simulation", steps=settings.max_steps, grid_size=settings.grid_size)
    for i in range(1, settings.max_steps + 1):
        model.step()

        if i % settings.log_interval == 0:
            stats = model.calculate_stats()
            logger.info(
                "Step stats",
                step=i,
                max_relief=round(stats.max_relief, 1),
                mean_elevation=round(stats.mean_elevation, 1),
                drainage_density=round(stats.drainage_density, 3),
                hack_slope=stats.hack_slope_exponent,
                concavity=stats.concavity_index,
            )
            if store is not None:
                store.log_step(i, model.params, stats)

    logger.info("Simulation complete", steps=model.steps)

    try:
        export_ascii_grid(model.grid, settings.export_path)
    except GridExportError as e:
        logger.error("Export failed", path=settings.export_path, error=str(e))

    return model


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    # Environment logging options apply to configuration loading itself
    bootstrap = LoggingSettings()
    configure_logging(bootstrap.log_level, bootstrap.log_format)

    settings = apply_overrides(load_settings(args.config), args)
    if (settings.log_level, settings.log_format) != (bootstrap.log_level, bootstrap.log_format):
        configure_logging(settings.log_level, settings.log_format)

    store = None if args.no_db else MetricsStore.connect(settings.database_url)
    try:
        run_simulation(settings, store)
    finally:
        if store is not None:
            store.database.dispose()
    return 0


if __name__ == "__main__":
    sys.exit(main())
