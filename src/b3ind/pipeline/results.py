"""Typed indicator results and their assembly.

Three variants exist and the workflow picks one explicitly:

- ``SpatialResult``: one row per grid cell of a real cube
- ``VirtualSpatialResult``: the same for a simulated community cube
- ``TimeSeriesResult``: one row per year

Results are frozen. Their tables are copied on construction and handed out
as copies, so edits on either side never reach a stored result.
"""

import logging
from typing import ClassVar, Literal, Optional, Sequence, Tuple

import numpy as np
import pandas as pd
from pydantic import BaseModel, ConfigDict, PrivateAttr

from b3ind.contracts import assert_indicator_output, require
from b3ind.core.metadata import CoordRange, MetadataSnapshot
from b3ind.indicators.registry import IndicatorSpec
from b3ind.spatial.grid import Grid

__all__ = [
    'IndicatorResult',
    'SpatialResult',
    'VirtualSpatialResult',
    'TimeSeriesResult',
    'ResultKind',
    'assemble_result',
    'complete_map_table',
    'complete_time_series',
]

logger = logging.getLogger(__name__)

ResultKind = Literal["indicator_map", "indicator_ts", "virtual_indicator_map"]


class IndicatorResult(BaseModel):
    """Common fields of every result variant."""

    model_config = ConfigDict(extra='forbid', frozen=True, arbitrary_types_allowed=True)

    kind: ClassVar[str] = ""
    key: ClassVar[str] = ""

    metadata: MetadataSnapshot
    value_columns: Tuple[str, ...]

    _data: pd.DataFrame = PrivateAttr()

    def __init__(self, *, data: pd.DataFrame, **fields):
        super().__init__(**fields)
        self._data = data.copy()

    @property
    def data(self) -> pd.DataFrame:
        """Copy of the result table."""
        return self._data.copy()

    @property
    def indicator(self) -> str:
        return self.metadata.indicator

    @property
    def class_tags(self) -> Tuple[str, str]:
        return (self.kind, self.indicator)

    @property
    def value_table(self) -> pd.DataFrame:
        """Value columns indexed by the result key."""
        return self._data.set_index(self.key)[list(self.value_columns)]

    def __repr__(self):
        return f"{type(self).__name__}(indicator={self.indicator!r}, rows={len(self._data)})"


class SpatialResult(IndicatorResult):
    """Indicator values for every cell of the grid."""

    kind: ClassVar[str] = "indicator_map"
    key: ClassVar[str] = "cell_id"

    grid: Grid


class VirtualSpatialResult(IndicatorResult):
    """Indicator map computed from a virtual (simulated) cube."""

    kind: ClassVar[str] = "virtual_indicator_map"
    key: ClassVar[str] = "cell_id"

    grid: Grid


class TimeSeriesResult(IndicatorResult):
    """Indicator values for every year of the window."""

    kind: ClassVar[str] = "indicator_ts"
    key: ClassVar[str] = "year"

    coord_range: CoordRange


_VARIANTS = {cls.kind: cls for cls in (SpatialResult, VirtualSpatialResult, TimeSeriesResult)}


def complete_map_table(table: pd.DataFrame, grid: Grid, spec: IndicatorSpec,
                       value_columns: Sequence[str]) -> Tuple[pd.DataFrame, int]:
    """Left-join calculator output onto every cell of ``grid``.

    Cells without occurrences get the indicator's fill value.

    Returns
    -------
    (pd.DataFrame, int)
        Cell table (``cell_id``, ``area_km2``, ``geometry`` and value
        columns) in cell order, and the number of filled cells.
    """
    cells = grid.cells
    merged = cells.merge(table, on="cell_id", how="left", validate="one_to_one")
    absent = ~cells["cell_id"].isin(table["cell_id"]).to_numpy()
    for col in value_columns:
        merged[col] = merged[col].astype(float)
        merged.loc[absent, col] = spec.fill_value
    missing = int(absent.sum())
    return merged, missing


def complete_time_series(table: pd.DataFrame, first_year: int, last_year: int,
                         spec: IndicatorSpec,
                         value_columns: Sequence[str]) -> Tuple[pd.DataFrame, int]:
    """Reindex calculator output over every year of the window.

    Missing years get the fill value; carry-forward indicators repeat the
    last known value instead (0 before the first observation).
    """
    years = pd.Index(np.arange(first_year, last_year + 1, dtype=np.int64), name="year")
    indexed = table.set_index("year")
    absent = ~years.isin(indexed.index)
    out = indexed.reindex(years)
    for col in value_columns:
        if spec.carry_forward:
            out[col] = out[col].ffill().fillna(0.0)
        else:
            out.loc[absent, col] = spec.fill_value
    missing = int(absent.sum())
    return out.reset_index(), missing


def assemble_result(kind: ResultKind, table: pd.DataFrame, metadata: MetadataSnapshot,
                    value_columns: Sequence[str],
                    grid: Optional[Grid] = None,
                    coord_range: Optional[CoordRange] = None) -> IndicatorResult:
    """Build the requested result variant from a completed table.

    Parameters
    ----------
    kind : {"indicator_map", "indicator_ts", "virtual_indicator_map"}
        Variant to build.
    table : pd.DataFrame
        Completed indicator table (every cell or every year).
    metadata : MetadataSnapshot
        Run description.
    value_columns : sequence of str
        Indicator value columns in ``table``.
    grid : Grid, optional
        Required for the map variants.
    coord_range : CoordRange, optional
        Required for the time series.

    Raises
    ------
    ContractViolation
        If the table breaks the output contract or the variant's
        companion object is missing.
    """
    require(kind in _VARIANTS, f"Unknown result kind '{kind}'")
    cls = _VARIANTS[kind]
    assert_indicator_output(table, cls.key, value_columns)

    if cls is TimeSeriesResult:
        require(coord_range is not None, "Time series result needs a coordinate range")
        result = cls(data=table, metadata=metadata, value_columns=tuple(value_columns),
                     coord_range=coord_range)
    else:
        require(grid is not None, f"{cls.__name__} needs a grid")
        require(len(table) == len(grid), "Map result must hold one row per grid cell")
        result = cls(data=table, metadata=metadata, value_columns=tuple(value_columns), grid=grid)

    logger.debug("Assembled %r", result)
    return result
