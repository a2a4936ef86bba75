"""Shared calculator interface and the tagged working dataset.

Every calculator reduces one group of occurrences (one grid cell or one
year) to a value through ``compute(group)``. Dataset-wide state, such as
rarity weights or cell areas, is built once in ``prepare()`` before the
groups are visited.
"""

import logging
from typing import List, Literal, Optional, TYPE_CHECKING

import numpy as np
import pandas as pd

if TYPE_CHECKING:
    from b3ind.schemas import InternalConfig
    from b3ind.spatial.grid import Grid

__all__ = [
    'TaggedDataset',
    'DiversityCalculator',
    'dispatch_key',
    'GROUP_KEYS',
    'SPECIES_COLUMN',
    'COUNT_COLUMN',
]

logger = logging.getLogger(__name__)

GROUP_KEYS = {"map": "cell_id", "ts": "year"}
SPECIES_COLUMN = "scientificName"
COUNT_COLUMN = "obs"


def dispatch_key(indicator: str, dim_type: str) -> str:
    """Composite dispatch table key, ``"{indicator}_{dim_type}"``."""
    return f"{indicator}_{dim_type}"


class TaggedDataset:
    """Working dataset labelled with the calculator it is meant for.

    ``key`` is ``"{indicator}_{dim_type}"`` and must be present in the
    dispatch table.
    """

    def __init__(self, data: pd.DataFrame, indicator: str, dim_type: Literal["map", "ts"]):
        self.data = data
        self.indicator = indicator
        self.dim_type = dim_type

    @property
    def key(self) -> str:
        return dispatch_key(self.indicator, self.dim_type)

    @property
    def group_key(self) -> str:
        return GROUP_KEYS[self.dim_type]

    def __repr__(self):
        return f"TaggedDataset(key={self.key!r}, rows={len(self.data)})"


class DiversityCalculator:
    """Base class: one value per cell or per year.

    Subclasses implement ``compute``; those needing dataset-wide state also
    override ``prepare``. Calculators producing several columns or values
    that depend on earlier groups override ``calculate``.
    """

    indicator: str = ""

    def __init__(self, config: "InternalConfig", indicator: Optional[str] = None, **options):
        self.config = config
        if indicator is not None:
            self.indicator = indicator
        self.options = options

    @property
    def value_columns(self) -> List[str]:
        return [self.indicator]

    def prepare(self, data: pd.DataFrame, grid: Optional["Grid"]) -> None:
        """Build dataset-wide state. Default: nothing."""

    def compute(self, group: pd.DataFrame) -> float:
        raise NotImplementedError

    def calculate(self, tagged: TaggedDataset, grid: Optional["Grid"] = None) -> pd.DataFrame:
        """Apply ``compute`` to every group of ``tagged``.

        Returns
        -------
        pd.DataFrame
            Columns ``[group_key, indicator]``, one row per non-empty group,
            ordered by the group key.
        """
        key = tagged.group_key
        data = tagged.data
        self.prepare(data, grid)

        keys, values = [], []
        for group_id, group in data.groupby(key, sort=True):
            keys.append(group_id)
            values.append(self.compute(group))

        logger.debug("%s: computed %d groups by %s", tagged.key, len(keys), key)
        return pd.DataFrame({
            key: np.asarray(keys, dtype=np.int64),
            self.indicator: np.asarray(values, dtype=float),
        })

    @staticmethod
    def species_abundances(group: pd.DataFrame) -> pd.Series:
        """Total occurrence count per species within ``group``."""
        return group.groupby(SPECIES_COLUMN, sort=True)[COUNT_COLUMN].sum()

    def __repr__(self):
        return f"{type(self).__name__}(indicator={self.indicator!r})"
