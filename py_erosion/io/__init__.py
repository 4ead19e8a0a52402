"""
Grid import/export.
"""

from .ascii_grid import export_ascii_grid, format_ascii_grid, read_ascii_grid, NODATA_VALUE

__all__ = ['export_ascii_grid', 'format_ascii_grid', 'read_ascii_grid', 'NODATA_VALUE']
