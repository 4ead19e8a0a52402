"""
Regular elevation grid holding all per-cell simulation state.

All six layers are flat, row-major numpy buffers sharing one index
``i + j * width`` where ``i`` is the column and ``j`` the row. Engine
components mutate the buffers in place; renderers and exporters should
go through :meth:`TerrainGrid.layer` which returns read-only 2D views.
"""

import math
from typing import Tuple

import numpy as np

# D8 neighbourhood in enumeration order: E, NE, N, NW, W, SW, S, SE.
# The order decides ties between equally steep receivers.
D8_OFFSETS: Tuple[Tuple[int, int], ...] = (
    (1, 0),
    (1, 1),
    (0, 1),
    (-1, 1),
    (-1, 0),
    (-1, -1),
    (0, -1),
    (1, -1),
)
D8_DX = np.array([o[0] for o in D8_OFFSETS], dtype=np.int64)
D8_DY = np.array([o[1] for o in D8_OFFSETS], dtype=np.int64)
D8_DISTANCE = np.array(
    [math.sqrt(2.0) if dx != 0 and dy != 0 else 1.0 for dx, dy in D8_OFFSETS],
    dtype=np.float64,
)

NO_FLOW = -1  # Direction code for sinks / local minima
CELL_SIZE = 30.0  # Horizontal resolution, units per cell

LAYERS = ("h", "w", "dir", "q", "s", "hardness")


class TerrainGrid:
    """
    Fixed-size grid of co-indexed terrain layers.

    Attributes:
        width: Number of columns
        height: Number of rows
        h: Elevation
        w: Cumulative rainfall (diagnostic only, never consumed)
        dir: D8 flow direction code, -1 for sinks
        q: Drainage accumulation in contributing cells
        s: Local slope along ``dir``
        hardness: Lithology multiplier, 1.0 is baseline
    """

    def __init__(self, width: int, height: int):
        if width < 1 or height < 1:
            raise ValueError(f"Grid dimensions must be positive, got {width}x{height}")

        self.width = int(width)
        self.height = int(height)
        n = self.width * self.height

        self.h = np.zeros(n, dtype=np.float64)
        self.w = np.zeros(n, dtype=np.float64)
        self.dir = np.full(n, NO_FLOW, dtype=np.int8)
        self.q = np.ones(n, dtype=np.float64)
        self.s = np.zeros(n, dtype=np.float64)
        self.hardness = np.ones(n, dtype=np.float64)

    @property
    def n_cells(self) -> int:
        return self.width * self.height

    @property
    def shape(self) -> Tuple[int, int]:
        """2D shape as (rows, columns)."""
        return (self.height, self.width)

    def index(self, i: int, j: int) -> int:
        """Flat index of column ``i``, row ``j``."""
        return i + j * self.width

    def coords(self, index: int) -> Tuple[int, int]:
        """Inverse of :meth:`index`, returns (i, j)."""
        return index % self.width, index // self.width

    def in_bounds(self, i: int, j: int) -> bool:
        return 0 <= i < self.width and 0 <= j < self.height

    def receiver(self, index: int) -> int:
        """Flat index of the cell ``index`` drains into, or -1 for a sink."""
        d = int(self.dir[index])
        if d == NO_FLOW:
            return NO_FLOW
        i, j = self.coords(index)
        return self.index(i + D8_OFFSETS[d][0], j + D8_OFFSETS[d][1])

    def effective_hardness(self) -> np.ndarray:
        """Hardness with non-positive entries replaced by the 1.0 baseline."""
        return np.where(self.hardness > 0, self.hardness, 1.0)

    def layer(self, name: str) -> np.ndarray:
        """
        Read-only (rows, columns) view of one layer.

        Args:
            name: One of ``h``, ``w``, ``dir``, ``q``, ``s``, ``hardness``

        Returns:
            2D view indexed ``[j, i]`` sharing memory with the grid
        """
        if name not in LAYERS:
            raise KeyError(f"Unknown grid layer: {name!r}")
        view = getattr(self, name).reshape(self.shape).view()
        view.flags.writeable = False
        return view

    def __repr__(self) -> str:
        return f"TerrainGrid(width={self.width}, height={self.height})"
