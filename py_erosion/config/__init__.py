"""
Configuration for the erosion simulator.
"""

from .config import (
    DEFAULT_CONFIG_PATH,
    LoggingSettings,
    Settings,
    SimulationDefaults,
    default_settings,
    load_settings,
    read_config_file,
)

__all__ = ['DEFAULT_CONFIG_PATH', 'LoggingSettings', 'Settings', 'SimulationDefaults',
           'default_settings', 'load_settings', 'read_config_file']
