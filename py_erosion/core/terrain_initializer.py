"""
Initial terrain generation.

Two presets seed elevation and lithology before the first step:

- FRACTAL: multi-octave sine/cosine pseudo-noise on top of a Gaussian
  central mountain, uniform hardness.
- BANDED: smooth sinusoidal relief with bounded random jitter and
  alternating hard/soft rock bands, which produces lithologic control
  on channel steepness.

Each initializer owns its own numpy Generator so terrain generation is
reproducible from a seed and independent of any global random state.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

import numpy as np
import structlog

from .terrain_grid import NO_FLOW, TerrainGrid

logger = structlog.get_logger()


class TerrainPreset(str, Enum):
    """Available initial terrain strategies."""

    FRACTAL = "fractal"
    BANDED = "banded"


@dataclass
class InitializerOptions:
    """Shape constants for both presets."""

    # Fractal noise
    octaves: int = 6
    persistence: float = 0.45
    lacunarity: float = 2.0
    scale: float = 0.015  # Base frequency, lower means larger features
    amplitude: float = 1000.0  # First octave amplitude
    phase_range: float = 1000.0  # Random phase offsets drawn from [0, phase_range)

    # Central mountain
    base_elevation: float = 500.0
    mountain_height: float = 2000.0
    mountain_spread: float = 0.4  # Gaussian sigma as a fraction of width

    # Banded lithology
    band_width: int = 20  # Rows per hardness band
    hard_multiplier: float = 2.0
    soft_multiplier: float = 0.5
    sine_amplitude: float = 300.0
    jitter: float = 10.0  # Random jitter bound, +/-


class TerrainInitializer:
    """Seeds elevation and hardness fields on a :class:`TerrainGrid`."""

    def __init__(
        self,
        preset: TerrainPreset = TerrainPreset.FRACTAL,
        seed: Optional[int] = None,
        options: Optional[InitializerOptions] = None,
    ):
        """
        Args:
            preset: Terrain strategy to use
            seed: Seed for the initializer's private random generator.
                None draws fresh entropy.
            options: Shape constants, defaults to :class:`InitializerOptions`
        """
        self.preset = TerrainPreset(preset)
        self.seed = seed
        self.options = options or InitializerOptions()
        self._rng = np.random.default_rng(seed)

    def reseed(self, seed: Optional[int] = None) -> None:
        """Restart the private generator, reusing the original seed by default."""
        self.seed = self.seed if seed is None else seed
        self._rng = np.random.default_rng(self.seed)

    def initialize(self, grid: TerrainGrid) -> None:
        """Populate ``h`` and ``hardness`` and reset the derived layers."""
        logger.info(
            "Initializing terrain",
            preset=self.preset.value,
            width=grid.width,
            height=grid.height,
            seed=self.seed,
        )

        if self.preset is TerrainPreset.FRACTAL:
            heights, hardness = self._fractal(grid.width, grid.height)
        else:
            heights, hardness = self._banded(grid.width, grid.height)

        grid.h[:] = heights.ravel()
        grid.hardness[:] = hardness.ravel()
        grid.w.fill(0.0)
        grid.dir.fill(NO_FLOW)
        grid.q.fill(1.0)
        grid.s.fill(0.0)

        logger.info(
            "Terrain initialized",
            min_height=float(grid.h.min()),
            max_height=float(grid.h.max()),
        )

    def _fractal(self, width: int, height: int):
        opts = self.options
        # Column i and row j, broadcast to (height, width)
        i = np.arange(width, dtype=np.float64)[np.newaxis, :]
        j = np.arange(height, dtype=np.float64)[:, np.newaxis]

        offsets = self._rng.random((opts.octaves, 2)) * opts.phase_range

        noise = np.zeros((height, width), dtype=np.float64)
        amplitude = opts.amplitude
        frequency = opts.scale
        for ox, oy in offsets:
            noise += np.sin((i + ox) * frequency) * np.cos((j + oy) * frequency) * amplitude
            amplitude *= opts.persistence
            frequency *= opts.lacunarity

        dx = i - width / 2.0
        dy = j - height / 2.0
        sigma = width * opts.mountain_spread
        mountain = opts.mountain_height * np.exp(-(dx * dx + dy * dy) / (2 * sigma * sigma))

        heights = np.maximum(0.0, opts.base_elevation + mountain + noise)
        hardness = np.ones((height, width), dtype=np.float64)
        return heights, hardness

    def _banded(self, width: int, height: int):
        opts = self.options
        i = np.arange(width, dtype=np.float64)[np.newaxis, :]
        j = np.arange(height, dtype=np.float64)[:, np.newaxis]

        base = opts.base_elevation + opts.sine_amplitude * (
            np.sin(2.0 * np.pi * i / width) * np.cos(2.0 * np.pi * j / height)
        )
        jitter = self._rng.uniform(-opts.jitter, opts.jitter, size=(height, width))
        heights = np.maximum(0.0, base + jitter)

        band = (np.arange(height) // max(1, opts.band_width)) % 2
        row_hardness = np.where(band == 0, opts.hard_multiplier, opts.soft_multiplier)
        hardness = np.repeat(row_hardness[:, np.newaxis], width, axis=1).astype(np.float64)
        return heights, hardness
