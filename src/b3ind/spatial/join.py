"""Occurrence-to-cell spatial join.

Each occurrence point is matched against the grid cell polygons with a
shapely STRtree. The predicate is ``intersects``, so points lying exactly on
a shared edge match several cells; such points are assigned to one cell
only, preferring cells with a positive area and then the lowest ``cell_id``.
Points outside every cell are dropped.
"""

import logging
from typing import TYPE_CHECKING

import numpy as np
import pandas as pd
import shapely

from b3ind.spatial.crs import require_same_crs

if TYPE_CHECKING:
    from b3ind.spatial.grid import Grid

__all__ = ['join_occurrences']

logger = logging.getLogger(__name__)


def join_occurrences(occurrences: pd.DataFrame, grid: "Grid", crs: str,
                     x: str = "xcoord", y: str = "ycoord") -> pd.DataFrame:
    """Attach a ``cell_id`` to every occurrence that falls inside the grid.

    Coordinates must already be expressed in the grid's units; no rescaling
    or nearest-cell snapping happens here.

    Parameters
    ----------
    occurrences : pd.DataFrame
        Occurrence rows with ``x``/``y`` coordinate columns.
    grid : Grid
        Target grid.
    crs : str
        Reference system of the occurrence coordinates.
    x, y : str
        Coordinate column names.

    Returns
    -------
    pd.DataFrame
        Matched rows plus ``cell_id``, stably sorted by ``cell_id`` and
        re-indexed from 0.

    Raises
    ------
    ProjectionMismatchError
        If ``crs`` and ``grid.crs`` describe different reference systems.
    """
    require_same_crs(crs, grid.crs, "occurrences and grid")

    points = shapely.points(
        occurrences[x].to_numpy(dtype=float),
        occurrences[y].to_numpy(dtype=float),
    )
    tree = shapely.STRtree(grid.geometries)
    row_idx, cell_pos = tree.query(points, predicate="intersects")

    # One cell per row: positive-area cells first, then lowest cell position
    degenerate = grid.areas_km2[cell_pos] <= 0
    order = np.lexsort((cell_pos, degenerate, row_idx))
    row_idx, cell_pos = row_idx[order], cell_pos[order]
    first = np.concatenate(([True], row_idx[1:] != row_idx[:-1])) if len(row_idx) else np.array([], dtype=bool)
    row_idx, cell_pos = row_idx[first], cell_pos[first]

    joined = occurrences.iloc[row_idx].copy()
    joined["cell_id"] = grid.cell_ids[cell_pos]
    joined = joined.sort_values("cell_id", kind="mergesort").reset_index(drop=True)

    dropped = len(occurrences) - len(joined)
    logger.info("Spatial join: %d of %d occurrences matched %d cells",
                len(joined), len(occurrences), joined["cell_id"].nunique())
    if dropped:
        logger.debug("Spatial join: %d occurrences outside all cells dropped", dropped)
    return joined
