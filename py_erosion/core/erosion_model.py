"""
Landscape evolution model driving the per-step pipeline.

One step runs a fixed sequence of stages, each consuming the grid state
produced by the previous one:

    RAINFALL -> FLOW_DIRECTION -> FLOW_ACCUMULATION -> SLOPE
             -> ERODE_DEPOSIT -> UPLIFT

The model is not safe for concurrent ``step()`` calls; callers must
serialise access.
"""

from dataclasses import dataclass, replace
from enum import Enum
from typing import Optional

import structlog

from .erosion_engine import EngineOptions, ErosionDepositionEngine, apply_rainfall
from .flow_router import FlowRouter
from .relief_statistics import ReliefStatistics, ReliefStats, RiverStats
from .terrain_grid import TerrainGrid
from .terrain_initializer import InitializerOptions, TerrainInitializer, TerrainPreset

logger = structlog.get_logger()


@dataclass
class SimulationParameters:
    """Process rates, read at the start of each stage.

    Values are not validated; negative rates are passed through as-is.
    """

    rain: float = 100.0  # P, rain per step
    erosion_k: float = 0.005  # K, erosion coefficient
    deposition_d: float = 0.003  # D, deposition coefficient
    threshold_t: float = 20.0  # T, erosion/deposition stream-power threshold
    uplift_u: float = 10.0  # U, uplift per step

    def replace(self, **changes) -> "SimulationParameters":
        return replace(self, **changes)


class Stage(Enum):
    """Pipeline stages in execution order."""

    RAINFALL = 1
    FLOW_DIRECTION = 2
    FLOW_ACCUMULATION = 3
    SLOPE = 4
    ERODE_DEPOSIT = 5
    UPLIFT = 6


PIPELINE = (
    Stage.RAINFALL,
    Stage.FLOW_DIRECTION,
    Stage.FLOW_ACCUMULATION,
    Stage.SLOPE,
    Stage.ERODE_DEPOSIT,
    Stage.UPLIFT,
)


class ErosionModel:
    """Owns a terrain grid, its process parameters and the step counter."""

    def __init__(
        self,
        size: int = 65,
        params: Optional[SimulationParameters] = None,
        *,
        width: Optional[int] = None,
        height: Optional[int] = None,
        preset: TerrainPreset = TerrainPreset.FRACTAL,
        seed: Optional[int] = None,
        engine_options: Optional[EngineOptions] = None,
        initializer_options: Optional[InitializerOptions] = None,
    ):
        """
        Build the grid and seed the initial terrain.

        Args:
            size: Grid side length, used when width/height are not given
            params: Process rates, defaults to :class:`SimulationParameters`
            width: Number of columns, overrides ``size``
            height: Number of rows, overrides ``size``
            preset: Initial terrain strategy
            seed: Seed for terrain generation
            engine_options: Erosion engine variant (diffusion on/off)
            initializer_options: Shape constants for the terrain presets
        """
        self.grid = TerrainGrid(
            width if width is not None else size,
            height if height is not None else size,
        )
        self.params = params or SimulationParameters()
        self.steps = 0

        self.initializer = TerrainInitializer(preset, seed=seed, options=initializer_options)
        self.router = FlowRouter(self.grid)
        self.engine = ErosionDepositionEngine(engine_options)
        self.statistics = ReliefStatistics(self.grid)

        self._stage_handlers = {
            Stage.RAINFALL: self._rainfall,
            Stage.FLOW_DIRECTION: self.router.compute_flow_directions,
            Stage.FLOW_ACCUMULATION: self.router.accumulate_flow,
            Stage.SLOPE: self.router.compute_slopes,
            Stage.ERODE_DEPOSIT: self._erode_deposit,
            Stage.UPLIFT: self._uplift,
        }

        self.initialize_terrain()

    def initialize_terrain(self) -> None:
        """Regenerate the initial terrain from the initializer's seed and reset the counter."""
        self.initializer.reseed()
        self.initializer.initialize(self.grid)
        self.steps = 0

    def run_stage(self, stage: Stage) -> None:
        """Run a single pipeline stage against the current grid state."""
        self._stage_handlers[stage]()

    def step(self) -> None:
        """Advance the landscape by one iteration."""
        for stage in PIPELINE:
            self.run_stage(stage)
        self.steps += 1
        logger.debug("Step completed", step=self.steps)

    def run(self, n_steps: int) -> None:
        """Call :meth:`step` ``n_steps`` times."""
        for _ in range(n_steps):
            self.step()

    def calculate_stats(self) -> ReliefStats:
        return self.statistics.calculate_stats()

    def get_river_stats(self) -> RiverStats:
        return self.statistics.get_river_stats()

    def _rainfall(self) -> None:
        apply_rainfall(self.grid, self.params.rain)

    def _erode_deposit(self) -> None:
        p = self.params
        self.engine.erode(self.grid, p.erosion_k, p.deposition_d, p.threshold_t)

    def _uplift(self) -> None:
        self.engine.uplift(self.grid, self.params.uplift_u)
