"""
Stream-power erosion, deposition, hillslope diffusion and uplift.

Erosion and deposition follow a threshold stream-power rule modulated by
rock hardness:

    qs    = Q * S
    K_eff = K / hardness
    T_eff = T * hardness

    qs >  T_eff  ->  erosion     dh = K_eff * (qs - T_eff) * dt
    qs <= T_eff  ->  deposition  dh = -D * (T_eff - qs) * dt

``dh`` is subtracted from elevation and clamped to +/- ``max_change`` per
step. Hillslope diffusion is an optional Laplacian smoothing pass over
interior cells.
"""

from dataclasses import dataclass

import numpy as np
import structlog

from .terrain_grid import TerrainGrid

logger = structlog.get_logger()


@dataclass
class EngineOptions:
    """Erosion engine variant and numerical constants."""

    hillslope_diffusion: bool = False  # Run the diffusion pass after erosion
    diffusivity: float = 0.05  # Kt, diffusion coefficient
    max_change: float = 5.0  # Per-step elevation change clamp
    dt: float = 1.0  # Time step unit


def erode_and_deposit(
    grid: TerrainGrid,
    erosion_k: float,
    deposition_d: float,
    threshold_t: float,
    dt: float = 1.0,
    max_change: float = 5.0,
) -> np.ndarray:
    """
    Apply the stream-power mass balance to ``grid.h`` in place.

    Returns:
        Per-cell change that was subtracted from elevation (positive means
        erosion, negative means deposition)
    """
    hardness = grid.effective_hardness()
    stream_power = grid.q * grid.s
    effective_k = erosion_k / hardness
    effective_t = threshold_t * hardness

    with np.errstate(invalid="ignore", over="ignore"):
        eroding = stream_power > effective_t
        change = np.where(
            eroding,
            effective_k * (stream_power - effective_t) * dt,
            -deposition_d * (effective_t - stream_power) * dt,
        )
        change = np.clip(change, -max_change, max_change)
        grid.h -= change

    unstable = ~np.isfinite(grid.h)
    if unstable.any():
        grid.h[unstable] = 0.0
        logger.debug("Reset non-finite elevations", cells=int(unstable.sum()))

    return change


def diffuse(grid: TerrainGrid, diffusivity: float) -> None:
    """
    Hillslope diffusion on interior cells.

    The 4-neighbour Laplacian is evaluated from the current elevations into
    a separate buffer before any cell is updated. The border ring is left
    unchanged.
    """
    if grid.width < 3 or grid.height < 3:
        return

    z = grid.h.reshape(grid.shape)
    centre = z[1:-1, 1:-1]
    laplacian = (
        z[1:-1, 2:] + z[1:-1, :-2] + z[2:, 1:-1] + z[:-2, 1:-1] - 4.0 * centre
    )
    delta = diffusivity * laplacian
    z[1:-1, 1:-1] += delta


def apply_uplift(grid: TerrainGrid, uplift_u: float) -> None:
    """Raise every cell, border included, by ``uplift_u``."""
    grid.h += uplift_u


def apply_rainfall(grid: TerrainGrid, rain: float) -> None:
    """Add ``rain`` to the cumulative rainfall column of every cell."""
    grid.w += rain


class ErosionDepositionEngine:
    """Erosion/deposition with optional diffusion, selected by :class:`EngineOptions`."""

    def __init__(self, options: EngineOptions = None):
        self.options = options or EngineOptions()

    def erode(self, grid: TerrainGrid, erosion_k: float, deposition_d: float, threshold_t: float) -> np.ndarray:
        """Stream-power pass followed by diffusion when enabled."""
        opts = self.options
        change = erode_and_deposit(
            grid,
            erosion_k,
            deposition_d,
            threshold_t,
            dt=opts.dt,
            max_change=opts.max_change,
        )
        if opts.hillslope_diffusion:
            diffuse(grid, opts.diffusivity)
        return change

    def uplift(self, grid: TerrainGrid, uplift_u: float) -> None:
        apply_uplift(grid, uplift_u)
