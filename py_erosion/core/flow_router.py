"""
D8 flow routing on a TerrainGrid.

This module implements:
- Steepest-descent flow directions (single receiver per cell)
- Drainage-area accumulation by a descending-elevation scan
- Local slope along the flow direction

Direction and slope are independent per cell and are vectorised with
NumPy. Accumulation is order dependent and stays a single sequential pass.
"""

import numpy as np
import structlog

from .terrain_grid import CELL_SIZE, D8_DISTANCE, D8_DX, D8_DY, NO_FLOW, TerrainGrid

logger = structlog.get_logger()


def _shifted_neighbours(grid: TerrainGrid, values: np.ndarray) -> np.ndarray:
    """
    Stack neighbour values for every D8 direction.

    Returns an array of shape (8, rows, columns) where entry ``[k, j, i]``
    is the value at ``(i + dx[k], j + dy[k])`` or NaN off the grid.
    """
    rows, cols = grid.shape
    padded = np.pad(values.reshape(grid.shape), 1, mode="constant", constant_values=np.nan)
    stacked = np.empty((8, rows, cols), dtype=np.float64)
    for k in range(8):
        dx, dy = int(D8_DX[k]), int(D8_DY[k])
        stacked[k] = padded[1 + dy : 1 + dy + rows, 1 + dx : 1 + dx + cols]
    return stacked


def compute_flow_directions(grid: TerrainGrid) -> None:
    """
    Assign each cell the D8 neighbour with the steepest positive descent.

    Descent is the elevation drop divided by the unit distance (1 or sqrt 2).
    Ties go to the first direction in the E, NE, N, NW, W, SW, S, SE order.
    Cells without a lower in-bounds neighbour become sinks (-1).
    """
    heights = grid.h.reshape(grid.shape)
    neighbours = _shifted_neighbours(grid, grid.h)

    with np.errstate(invalid="ignore"):
        drop = heights[np.newaxis, :, :] - neighbours
        descending = drop > 0
    gradient = np.where(descending, drop / D8_DISTANCE[:, np.newaxis, np.newaxis], 0.0)

    # argmax keeps the first maximum, matching the enumeration tie-break
    best = np.argmax(gradient, axis=0)
    has_outlet = descending.any(axis=0)
    directions = np.where(has_outlet, best, NO_FLOW)

    grid.dir[:] = directions.ravel().astype(np.int8)
    logger.debug("Flow directions calculated", sinks=int(np.sum(grid.dir == NO_FLOW)))


def receivers(grid: TerrainGrid) -> np.ndarray:
    """Flat receiver index per cell, -1 for sinks."""
    index = np.arange(grid.n_cells, dtype=np.int64)
    d = grid.dir.astype(np.int64)
    flowing = d != NO_FLOW
    safe = np.where(flowing, d, 0)
    target = index + D8_DX[safe] + D8_DY[safe] * grid.width
    return np.where(flowing, target, NO_FLOW)


def accumulate_flow(grid: TerrainGrid) -> None:
    """
    Accumulate upstream drainage area into ``q``.

    Every cell starts with an area of 1. Cells are visited once in order of
    decreasing elevation (stable, so equal heights keep row-major order) and
    pass their total on to their receiver. Flow only goes strictly downhill,
    so a cell's total is final before it is passed on.
    """
    order = np.argsort(-grid.h, kind="stable").tolist()
    downstream = receivers(grid).tolist()
    area = [1.0] * grid.n_cells

    for cell in order:
        target = downstream[cell]
        if target != NO_FLOW:
            area[target] += area[cell]

    grid.q[:] = area
    logger.debug("Flow accumulated", max_q=float(grid.q.max()))


def compute_slopes(grid: TerrainGrid, cell_size: float = CELL_SIZE) -> None:
    """
    Slope along each cell's flow direction, 0 at sinks.

    Distances are the unit D8 distances scaled by ``cell_size`` so slope
    and area stay comparable on a log-log basis.
    """
    d = grid.dir.astype(np.int64)
    flowing = d != NO_FLOW
    safe = np.where(flowing, d, 0)
    target = receivers(grid)

    drop = grid.h - grid.h[np.where(flowing, target, 0)]
    distance = D8_DISTANCE[safe] * cell_size
    slope = np.maximum(0.0, drop / distance)
    grid.s[:] = np.where(flowing, slope, 0.0)


class FlowRouter:
    """Runs the routing passes against one grid."""

    def __init__(self, grid: TerrainGrid, cell_size: float = CELL_SIZE):
        self.grid = grid
        self.cell_size = cell_size

    def compute_flow_directions(self) -> None:
        compute_flow_directions(self.grid)

    def accumulate_flow(self) -> None:
        accumulate_flow(self.grid)

    def compute_slopes(self) -> None:
        compute_slopes(self.grid, self.cell_size)

    def route(self) -> None:
        """Directions, accumulation and slopes in pipeline order."""
        self.compute_flow_directions()
        self.accumulate_flow()
        self.compute_slopes()
