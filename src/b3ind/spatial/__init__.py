"""Spatial building blocks.

- crs: reference system parsing and comparison
- boundary: region polygons and boundary sources
- grid: grid generation and the small-cell filter
- join: occurrence-to-cell spatial join
"""

from b3ind.spatial.boundary import (
    BoundarySource,
    InMemoryBoundarySource,
    RegionPolygon,
    SPATIAL_LEVELS,
)
from b3ind.spatial.grid import (
    Grid,
    create_grid,
    default_cell_size,
    drop_small_cells,
    resolve_cell_size,
)
from b3ind.spatial.join import join_occurrences

__all__ = [
    "BoundarySource",
    "InMemoryBoundarySource",
    "RegionPolygon",
    "SPATIAL_LEVELS",
    "Grid",
    "create_grid",
    "default_cell_size",
    "drop_small_cells",
    "resolve_cell_size",
    "join_occurrences",
]
