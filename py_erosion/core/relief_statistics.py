"""
Geomorphic diagnostics for a routed TerrainGrid.

This module implements:
- Global relief, mean elevation and drainage density
- Outlet detection and greedy longest-path tracing upstream
- Hack's law (length vs area) and slope-area samples along that path
- Ordinary least-squares slope in log-log space
"""

import math
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

import numpy as np
import structlog

from .exceptions import UndefinedSlopeError
from .terrain_grid import D8_OFFSETS, NO_FLOW, TerrainGrid

logger = structlog.get_logger()

CHANNEL_THRESHOLD = 100  # Drainage area (cells) above which a cell is channelised
MIN_SAMPLE_SLOPE = 1e-4  # Slopes at or below this are excluded from slope-area samples
MIN_REGRESSION_SAMPLES = 3

Sample = Tuple[float, float]


@dataclass
class ReliefStats:
    """Scalar landscape diagnostics. Regression fields are None when undefined."""

    max_relief: float
    mean_elevation: float
    drainage_density: float
    hack_slope_exponent: Optional[float]
    concavity_index: Optional[float]


@dataclass
class RiverStats:
    """Samples along the main drainage path, for plotting and regression."""

    hack_samples: List[Sample] = field(default_factory=list)  # (log10 A, log10 L)
    slope_area_samples: List[Sample] = field(default_factory=list)  # (log10 A, log10 S)
    path: List[int] = field(default_factory=list)  # Flat indices, outlet first


def calculate_slope(samples: Sequence[Sample]) -> float:
    """
    Least-squares slope of y on x.

    Raises:
        UndefinedSlopeError: if all x values are identical or there are no
            samples, which would make the denominator zero
    """
    n = len(samples)
    if n == 0:
        raise UndefinedSlopeError(n)

    xs = [float(x) for x, _ in samples]
    ys = [float(y) for _, y in samples]
    if max(xs) == min(xs):
        raise UndefinedSlopeError(n)

    # Centred sums avoid cancellation when the x values are nearly equal
    mean_x = sum(xs) / n
    mean_y = sum(ys) / n
    sxx = sum((x - mean_x) ** 2 for x in xs)
    sxy = sum((x - mean_x) * (y - mean_y) for x, y in zip(xs, ys))
    if sxx == 0:
        raise UndefinedSlopeError(n)
    return sxy / sxx


def find_outlet(grid: TerrainGrid) -> int:
    """Flat index of the cell with the largest drainage area (first in row-major order)."""
    return int(np.argmax(grid.q))


def trace_longest_path(grid: TerrainGrid, outlet: int) -> List[int]:
    """
    Walk upstream from ``outlet`` along the largest tributary.

    At each cell the donors are the neighbours whose flow direction points
    back at it; the walk moves to the donor with the largest drainage area
    and stops at a cell with no donors. The walk visits at most
    ``width * height`` cells, which bounds it on cyclic direction fields.

    Returns:
        Flat indices ordered outlet -> source
    """
    path = [outlet]
    max_cells = grid.n_cells

    while True:
        best = _largest_donor(grid, path[-1])
        if best == NO_FLOW:
            break
        if len(path) >= max_cells:
            logger.warning("Longest path trace hit the cell cap", cells=len(path))
            break
        path.append(best)

    return path


def _largest_donor(grid: TerrainGrid, cell: int) -> int:
    """Neighbour draining into ``cell`` with the largest area, or NO_FLOW."""
    ci, cj = grid.coords(cell)
    best = NO_FLOW
    best_q = -1.0

    for dx, dy in D8_OFFSETS:
        ni, nj = ci + dx, cj + dy
        if not grid.in_bounds(ni, nj):
            continue
        neighbour = grid.index(ni, nj)
        if grid.receiver(neighbour) == cell and grid.q[neighbour] > best_q:
            best_q = grid.q[neighbour]
            best = neighbour

    return best


def get_river_stats(grid: TerrainGrid) -> RiverStats:
    """
    Hack's law and slope-area samples along the main drainage path.

    Length is measured from the source, starting at 1.0 and growing by 1
    for orthogonal and sqrt(2) for diagonal moves towards the outlet.
    """
    stats = RiverStats()
    if grid.n_cells == 0:
        return stats

    path = trace_longest_path(grid, find_outlet(grid))
    stats.path = path

    length = 0.0
    previous = None
    for cell in reversed(path):
        i, j = grid.coords(cell)
        if previous is None:
            length = 1.0
        else:
            pi, pj = grid.coords(previous)
            length += math.sqrt(2.0) if abs(i - pi) + abs(j - pj) == 2 else 1.0
        previous = cell

        area = float(grid.q[cell])
        slope = float(grid.s[cell])
        if area > 0:
            log_area = math.log10(area)
            if length > 0:
                stats.hack_samples.append((log_area, math.log10(length)))
            if slope > MIN_SAMPLE_SLOPE:
                stats.slope_area_samples.append((log_area, math.log10(slope)))

    return stats


def _regression(samples: Sequence[Sample], label: str, sign: float = 1.0) -> Optional[float]:
    """Signed slope, 0.0 with too few samples, None when undefined."""
    if len(samples) < MIN_REGRESSION_SAMPLES:
        return 0.0
    try:
        return sign * calculate_slope(samples)
    except UndefinedSlopeError as e:
        logger.warning("Regression undefined", metric=label, samples=e.n_samples)
        return None


def calculate_stats(grid: TerrainGrid) -> ReliefStats:
    """Relief, mean elevation, drainage density, Hack exponent and concavity."""
    heights = grid.h
    n = grid.n_cells

    max_relief = float(heights.max() - heights.min())
    mean_elevation = float(heights.sum() / n)
    drainage_density = float(np.count_nonzero(grid.q > CHANNEL_THRESHOLD)) / n

    river = get_river_stats(grid)
    hack = _regression(river.hack_samples, "hack_slope")
    # Slope-area regression gives -theta
    concavity = _regression(river.slope_area_samples, "concavity", sign=-1.0)

    return ReliefStats(
        max_relief=max_relief,
        mean_elevation=mean_elevation,
        drainage_density=drainage_density,
        hack_slope_exponent=hack,
        concavity_index=concavity,
    )


class ReliefStatistics:
    """Statistics bound to one grid."""

    def __init__(self, grid: TerrainGrid):
        self.grid = grid

    def calculate_stats(self) -> ReliefStats:
        return calculate_stats(self.grid)

    def get_river_stats(self) -> RiverStats:
        return get_river_stats(self.grid)

    def find_outlet(self) -> int:
        return find_outlet(self.grid)

    def trace_longest_path(self, outlet: int) -> List[int]:
        return trace_longest_path(self.grid, outlet)

    @staticmethod
    def calculate_slope(samples: Sequence[Sample]) -> float:
        return calculate_slope(samples)
