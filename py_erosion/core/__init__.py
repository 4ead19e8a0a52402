"""
Core landscape evolution functionality.
"""

from .terrain_grid import TerrainGrid, CELL_SIZE, NO_FLOW
from .terrain_initializer import TerrainInitializer, TerrainPreset, InitializerOptions
from .flow_router import FlowRouter
from .erosion_engine import ErosionDepositionEngine, EngineOptions
from .relief_statistics import ReliefStatistics, ReliefStats, RiverStats, calculate_slope
from .erosion_model import ErosionModel, SimulationParameters, Stage, PIPELINE
from .exceptions import ErosionError, UndefinedSlopeError, GridExportError, ConfigurationError

__all__ = ['TerrainGrid', 'CELL_SIZE', 'NO_FLOW',
           'TerrainInitializer', 'TerrainPreset', 'InitializerOptions',
           'FlowRouter', 'ErosionDepositionEngine', 'EngineOptions',
           'ReliefStatistics', 'ReliefStats', 'RiverStats', 'calculate_slope',
           'ErosionModel', 'SimulationParameters', 'Stage', 'PIPELINE',
           'ErosionError', 'UndefinedSlopeError', 'GridExportError', 'ConfigurationError']
