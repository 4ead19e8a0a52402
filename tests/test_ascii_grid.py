"""Tests for ESRI ASCII grid export."""

import pytest
import numpy as np
from py_erosion.core.exceptions import GridExportError
from py_erosion.core.terrain_grid import TerrainGrid
from py_erosion.core.terrain_initializer import TerrainInitializer
from py_erosion.io.ascii_grid import export_ascii_grid, format_ascii_grid, read_ascii_grid


@pytest.fixture
def terrain():
    grid = TerrainGrid(12, 7)
    TerrainInitializer(seed=31).initialize(grid)
    grid.h[3] = -12.3456  # Negative values must survive too
    return grid


class TestAsciiGridExport:
    """Test writing the elevation grid."""

    def test_header(self, terrain):
        lines = format_ascii_grid(terrain).splitlines()

        assert [line.split() for line in lines[:6]] == [
            ["ncols", "12"],
            ["nrows", "7"],
            ["xllcorner", "0"],
            ["yllcorner", "0"],
            ["cellsize", "30"],
            ["NODATA_value", "-9999"],
        ]
        assert len(lines) == 6 + 7

    def test_rows_are_top_first_two_decimals(self, terrain):
        lines = format_ascii_grid(terrain).splitlines()
        first_row = lines[6].split()

        assert len(first_row) == 12
        assert first_row[3] == "-12.35"
        assert first_row[0] == f"{terrain.h[0]:.2f}"
        assert lines[7].split()[0] == f"{terrain.h[terrain.index(0, 1)]:.2f}"

    def test_round_trip(self, terrain, tmp_path):
        path = export_ascii_grid(terrain, tmp_path / "terrain.asc")
        header, values = read_ascii_grid(path)

        assert header["ncols"] == 12
        assert header["nrows"] == 7
        assert header["cellsize"] == 30
        assert header["NODATA_value"] == -9999
        assert np.all(np.abs(values - terrain.layer("h")) <= 0.01)

    def test_unwritable_path(self, terrain, tmp_path):
        with pytest.raises(GridExportError):
            export_ascii_grid(terrain, tmp_path)

    def test_missing_file(self, tmp_path):
        with pytest.raises(GridExportError):
            read_ascii_grid(tmp_path / "missing.asc")

    def test_bad_header(self, tmp_path):
        path = tmp_path / "bad.asc"
        path.write_text("ncols 2\nrows 2\n")
        with pytest.raises(GridExportError):
            read_ascii_grid(path)

    def test_shape_mismatch(self, tmp_path):
        path = tmp_path / "short.asc"
        path.write_text(
            "ncols 3\nnrows 2\nxllcorner 0\nyllcorner 0\ncellsize 30\nNODATA_value -9999\n"
            "1.00 2.00 3.00\n"
        )
        with pytest.raises(GridExportError):
            read_ascii_grid(path)
