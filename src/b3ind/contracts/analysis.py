"""Indicator output contract.

Enforces the guarantee that a calculator returned one row per group with
the group key and at least one value column.
"""

import pandas as pd
from b3ind.contracts.base import require


def assert_indicator_output(df: pd.DataFrame, key: str, value_columns) -> None:
    """Enforce indicator output contract.

    We do NOT validate the scientific correctness of values, only the
    structural requirements the assembler relies on.

    Parameters
    ----------
    df : pd.DataFrame
        Calculator output
    key : str
        Grouping column, ``cell_id`` or ``year``
    value_columns : iterable of str
        Value columns the calculator promised

    Raises
    ------
    ContractViolation
        If structural requirements are violated
    """
    require(
        isinstance(df, pd.DataFrame),
        f"Indicator contract violated: output is {type(df)}, expected DataFrame"
    )
    require(
        key in df.columns,
        f"Indicator contract violated: missing key column '{key}'"
    )
    for col in value_columns:
        require(
            col in df.columns,
            f"Indicator contract violated: missing value column '{col}'"
        )
    require(
        not df[key].duplicated().any(),
        f"Indicator contract violated: duplicated '{key}' values"
    )
