"""Spatial join contract.

Enforces the guarantee that every joined occurrence carries exactly one
known cell identifier and that rows are ordered by cell.
"""

import pandas as pd
from b3ind.contracts.base import require


def assert_joined(joined: pd.DataFrame, cells: pd.DataFrame, n_input_rows: int) -> None:
    """Enforce spatial join contract.

    Parameters
    ----------
    joined : pd.DataFrame
        Output of ``join_occurrences``.
    cells : pd.DataFrame
        Grid cell table the occurrences were joined against.
    n_input_rows : int
        Number of occurrence rows before the join.

    Raises
    ------
    ContractViolation
        If any invariant is violated
    """
    require(
        "cell_id" in joined.columns,
        "Join contract violated: missing 'cell_id' column"
    )
    require(
        len(joined) <= n_input_rows,
        f"Join contract violated: {len(joined)} rows out of {n_input_rows} inputs (duplicated occurrences)"
    )
    require(
        joined["cell_id"].isin(cells["cell_id"]).all(),
        "Join contract violated: cell_id not present in grid"
    )
    require(
        joined["cell_id"].is_monotonic_increasing,
        "Join contract violated: rows not sorted by cell_id"
    )
