"""
ESRI ASCII grid (.asc) export of terrain elevation.

The file carries a six line header followed by one line per grid row,
row 0 first (treated as the top / north edge), values at two decimals:

    ncols         65
    nrows         65
    xllcorner     0
    yllcorner     0
    cellsize      30
    NODATA_value  -9999
    512.34 510.02 ...
"""

from pathlib import Path
from typing import Any, Dict, Tuple, Union

import numpy as np
import structlog

from ..core.exceptions import GridExportError
from ..core.terrain_grid import CELL_SIZE, TerrainGrid

logger = structlog.get_logger()

NODATA_VALUE = -9999
HEADER_KEYS = ("ncols", "nrows", "xllcorner", "yllcorner", "cellsize", "NODATA_value")


def format_ascii_grid(grid: TerrainGrid, cell_size: float = CELL_SIZE, nodata: int = NODATA_VALUE) -> str:
    """Render the elevation layer as ESRI ASCII grid text."""
    header = {
        "ncols": grid.width,
        "nrows": grid.height,
        "xllcorner": 0,
        "yllcorner": 0,
        "cellsize": f"{cell_size:g}",
        "NODATA_value": nodata,
    }
    lines = [f"{key:<13} {value}" for key, value in header.items()]

    for row in grid.layer("h"):
        lines.append(" ".join(f"{value:.2f}" for value in row))

    return "\n".join(lines) + "\n"


def export_ascii_grid(
    grid: TerrainGrid,
    path: Union[str, Path],
    cell_size: float = CELL_SIZE,
    nodata: int = NODATA_VALUE,
) -> Path:
    """
    Write the elevation layer to ``path``.

    Raises:
        GridExportError: if the file cannot be written
    """
    path = Path(path)
    text = format_ascii_grid(grid, cell_size, nodata)
    try:
        path.write_text(text, encoding="ascii")
    except OSError as e:
        raise GridExportError(f"Cannot write ASCII grid to {path}: {e}") from e

    logger.info("Terrain exported", path=str(path), ncols=grid.width, nrows=grid.height)
    return path


def read_ascii_grid(path: Union[str, Path]) -> Tuple[Dict[str, Any], np.ndarray]:
    """
    Parse an ESRI ASCII grid.

    Returns:
        Tuple of (header mapping, elevations with shape (nrows, ncols))

    Raises:
        GridExportError: if the file is missing or malformed
    """
    path = Path(path)
    try:
        with path.open("r", encoding="ascii") as f:
            header: Dict[str, Any] = {}
            for expected in HEADER_KEYS:
                parts = f.readline().split()
                if len(parts) != 2 or parts[0].lower() != expected.lower():
                    raise GridExportError(f"Expected '{expected}' header line in {path}")
                header[expected] = float(parts[1])
            values = np.loadtxt(f, dtype=np.float64, ndmin=2)
    except OSError as e:
        raise GridExportError(f"Cannot read ASCII grid {path}: {e}") from e
    except ValueError as e:
        raise GridExportError(f"Malformed ASCII grid {path}: {e}") from e

    header["ncols"] = int(header["ncols"])
    header["nrows"] = int(header["nrows"])
    if values.shape != (header["nrows"], header["ncols"]):
        raise GridExportError(
            f"Grid body shape {values.shape} does not match header "
            f"({header['nrows']}, {header['ncols']})"
        )
    return header, values
