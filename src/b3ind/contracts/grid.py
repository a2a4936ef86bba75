"""Grid stage contract.

Enforces the guarantee that a generated grid has dense 1-based cell ids
and a usable area column.
"""

import numpy as np
import pandas as pd
from b3ind.contracts.base import require


def assert_grid(cells: pd.DataFrame) -> None:
    """Enforce grid stage contract.

    Called immediately after grid generation (and after the optional
    small-cell filter).

    Parameters
    ----------
    cells : pd.DataFrame
        Grid cell table with ``cell_id``, ``area_km2`` and ``geometry``.

    Raises
    ------
    ContractViolation
        If any invariant is violated
    """
    for col in ("cell_id", "area_km2", "geometry"):
        require(
            col in cells.columns,
            f"Grid contract violated: missing required column '{col}'"
        )

    ids = cells["cell_id"].to_numpy()
    require(
        np.array_equal(ids, np.arange(1, len(ids) + 1)),
        "Grid contract violated: cell_id must be dense, unique and run 1..N in order"
    )

    areas = cells["area_km2"].to_numpy(dtype=float)
    require(
        bool(np.all(np.isfinite(areas))) and bool(np.all(areas >= 0)),
        "Grid contract violated: area_km2 must be finite and non-negative"
    )
