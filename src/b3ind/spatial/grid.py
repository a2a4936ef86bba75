"""Equal-size square grids over a region polygon.

The grid covers the region's bounding box with square cells of
``cell_size_km`` kilometers (CRS units are assumed to be meters), each cell
clipped to the region boundary. Cells are numbered 1..N row-major, starting
at the lower-left corner with x varying fastest. Area is measured on the
clipped geometry, so edge cells are smaller than the nominal size.
"""

import logging
from typing import Optional, TYPE_CHECKING

import numpy as np
import pandas as pd
import shapely

from b3ind.contracts import assert_grid
from b3ind.contracts.failure import ConfigurationError
from b3ind.spatial.boundary import RegionPolygon, SPATIAL_LEVELS

if TYPE_CHECKING:
    from b3ind.schemas import InternalConfig

__all__ = ['Grid', 'create_grid', 'default_cell_size', 'resolve_cell_size', 'drop_small_cells']

logger = logging.getLogger(__name__)

M2_PER_KM2 = 1e6


class Grid:
    """Ordered collection of grid cells.

    Attributes
    ----------
    cells : pd.DataFrame
        ``cell_id`` (int, 1..N), ``area_km2`` (float) and ``geometry``
        (shapely geometry) in cell id order.
    crs : str
        Reference system of the cell geometries.
    cell_size_km : int
        Nominal side length of a cell.
    """

    def __init__(self, cells: pd.DataFrame, crs: str, cell_size_km: int):
        assert_grid(cells)
        self._cells = cells.reset_index(drop=True)
        self.crs = crs
        self.cell_size_km = int(cell_size_km)

    @property
    def cells(self) -> pd.DataFrame:
        """Copy of the cell table."""
        return self._cells.copy()

    @property
    def cell_ids(self) -> np.ndarray:
        return self._cells["cell_id"].to_numpy()

    @property
    def geometries(self) -> np.ndarray:
        return self._cells["geometry"].to_numpy()

    @property
    def areas_km2(self) -> np.ndarray:
        return self._cells["area_km2"].to_numpy()

    @property
    def total_area_km2(self) -> float:
        return float(self._cells["area_km2"].sum())

    def __len__(self):
        return len(self._cells)

    def __repr__(self):
        return f"Grid(cells={len(self)}, cell_size_km={self.cell_size_km}, crs={self.crs!r})"


def default_cell_size(level: str, config: "InternalConfig") -> int:
    """Default cell side length (km) for a spatial level.

    Raises
    ------
    ConfigurationError
        If ``level`` is not country, continent or world.
    """
    sizes = {
        "country": config.grid.country_cell_size_km,
        "continent": config.grid.continent_cell_size_km,
        "world": config.grid.world_cell_size_km,
    }
    if level not in sizes:
        raise ConfigurationError(
            f"Unknown spatial level '{level}', expected one of {SPATIAL_LEVELS}"
        )
    return sizes[level]


def resolve_cell_size(level: str, config: "InternalConfig",
                      cell_size_km: Optional[float] = None) -> int:
    """Cell side length in whole kilometers: the explicit value rounded, or
    the level default."""
    if cell_size_km is None:
        return default_cell_size(level, config)
    size_km = int(round(cell_size_km))
    if size_km < 1:
        raise ConfigurationError(f"Cell size must be at least 1 km, got {cell_size_km}")
    return size_km


def create_grid(region: RegionPolygon, level: str, config: "InternalConfig",
                cell_size_km: Optional[float] = None) -> Grid:
    """Build a clipped square grid over ``region``.

    Parameters
    ----------
    region : RegionPolygon
        Area of interest in a projected, meter-based CRS.
    level : str
        Spatial level, used for the default cell size.
    config : InternalConfig
        Runtime configuration (default cell sizes).
    cell_size_km : float, optional
        Explicit cell side length; rounded to the nearest whole kilometer.

    Returns
    -------
    Grid
        Cells intersecting the region, ids 1..N in row-major order.
        Zero-area clipped cells (touching the boundary only) are kept.

    Raises
    ------
    ConfigurationError
        For an unknown level or a cell size below 1 km.
    """
    size_km = resolve_cell_size(level, config, cell_size_km)
    size = size_km * 1000.0
    xmin, ymin, xmax, ymax = region.bounds
    nx = max(int(np.ceil((xmax - xmin) / size)), 1)
    ny = max(int(np.ceil((ymax - ymin) / size)), 1)

    # Row-major: y outer (bottom row first), x inner
    x0 = np.tile(xmin + np.arange(nx) * size, ny)
    y0 = np.repeat(ymin + np.arange(ny) * size, nx)
    boxes = shapely.box(x0, y0, x0 + size, y0 + size)

    geometry = region.geometry
    shapely.prepare(geometry)
    hits = shapely.intersects(boxes, geometry)
    clipped = shapely.intersection(boxes[hits], geometry)

    cells = pd.DataFrame({
        "cell_id": np.arange(1, len(clipped) + 1, dtype=np.int64),
        "area_km2": shapely.area(clipped) / M2_PER_KM2,
        "geometry": clipped,
    })

    logger.info("Grid created: %d cells of %d km over %s (%d x %d candidates)",
                len(cells), size_km, region.name or level, nx, ny)
    return Grid(cells, region.crs, size_km)


def drop_small_cells(grid: Grid, fraction: float) -> Grid:
    """Remove cells no larger than ``fraction`` of the largest cell.

    Remaining cells keep their relative order and are renumbered 1..N.
    """
    if not 0 < fraction < 1:
        raise ConfigurationError(f"min_cell_area_fraction must be in (0, 1), got {fraction}")

    cells = grid.cells
    if cells.empty:
        return grid
    threshold = fraction * cells["area_km2"].max()
    kept = cells[cells["area_km2"] > threshold].reset_index(drop=True)
    kept["cell_id"] = np.arange(1, len(kept) + 1, dtype=np.int64)

    logger.info("Dropped %d cells below %.0f%% of the largest cell area",
                len(cells) - len(kept), fraction * 100)
    return Grid(kept, grid.crs, grid.cell_size_km)
