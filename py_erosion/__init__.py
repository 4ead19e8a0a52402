"""
py-erosion: fluvial landscape evolution on a regular elevation grid.

Rainfall, D8 flow routing, drainage accumulation, stream-power erosion and
deposition with lithologic hardness, optional hillslope diffusion and
tectonic uplift, plus relief, drainage density, Hack's law and concavity
diagnostics.
"""

from .core import (
    ErosionModel,
    SimulationParameters,
    Stage,
    TerrainGrid,
    TerrainPreset,
    EngineOptions,
    ReliefStats,
    RiverStats,
)

__version__ = "0.1.0"

__all__ = [
    'ErosionModel', 'SimulationParameters', 'Stage', 'TerrainGrid',
    'TerrainPreset', 'EngineOptions', 'ReliefStats', 'RiverStats',
]
