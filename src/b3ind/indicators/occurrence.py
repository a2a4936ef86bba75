"""Occurrence-count indicators: richness, totals, density, newness,
per-species counts and turnover."""

import logging
from typing import List, Optional, TYPE_CHECKING

import numpy as np
import pandas as pd

from b3ind.contracts.base import require
from b3ind.indicators.base import (
    COUNT_COLUMN,
    SPECIES_COLUMN,
    DiversityCalculator,
    TaggedDataset,
)

if TYPE_CHECKING:
    from b3ind.spatial.grid import Grid

__all__ = [
    'ObservedRichness',
    'CumulativeRichness',
    'TotalOccurrences',
    'OccurrenceDensity',
    'Newness',
    'SpeciesOccurrences',
    'OccurrenceTurnover',
]

logger = logging.getLogger(__name__)


class ObservedRichness(DiversityCalculator):
    """Number of distinct species in the group."""

    indicator = "obs_richness"

    def compute(self, group: pd.DataFrame) -> float:
        return float(group[SPECIES_COLUMN].nunique())


class TotalOccurrences(DiversityCalculator):
    """Sum of occurrence counts in the group."""

    indicator = "total_occ"

    def compute(self, group: pd.DataFrame) -> float:
        return float(group[COUNT_COLUMN].sum())


class OccurrenceDensity(DiversityCalculator):
    """Occurrences per square kilometer of (clipped) cell area.

    Zero-area cells give NaN rather than infinity.
    """

    indicator = "density"

    def prepare(self, data: pd.DataFrame, grid: Optional["Grid"]) -> None:
        require(grid is not None, "density needs a grid to look up cell areas")
        cells = grid.cells
        self._areas = pd.Series(cells["area_km2"].to_numpy(), index=cells["cell_id"].to_numpy())

    def compute(self, group: pd.DataFrame) -> float:
        area = self._areas[group["cell_id"].iloc[0]]
        if area <= 0:
            return np.nan
        return float(group[COUNT_COLUMN].sum() / area)


class Newness(DiversityCalculator):
    """Mean occurrence year, a recency signal.

    On a map the mean runs over the cell's records. Over time the mean at
    year Y runs over every record up to and including Y, since a single
    year's records all share that year.
    """

    indicator = "newness"

    def compute(self, group: pd.DataFrame) -> float:
        return float(group["year"].mean())

    def calculate(self, tagged: TaggedDataset, grid: Optional["Grid"] = None) -> pd.DataFrame:
        if tagged.dim_type == "map":
            return super().calculate(tagged, grid)

        years = tagged.data["year"]
        per_year = years.groupby(years, sort=True).agg(["sum", "count"])
        running = per_year["sum"].cumsum() / per_year["count"].cumsum()
        return pd.DataFrame({
            "year": per_year.index.to_numpy(dtype=np.int64),
            self.indicator: running.to_numpy(dtype=float),
        })


class CumulativeRichness(DiversityCalculator):
    """Distinct species seen up to and including each year."""

    indicator = "cum_richness"

    def calculate(self, tagged: TaggedDataset, grid: Optional["Grid"] = None) -> pd.DataFrame:
        # Year of first record per species, then a running count
        first_seen = tagged.data.groupby(SPECIES_COLUMN)["year"].min()
        new_per_year = first_seen.value_counts().sort_index()
        years = np.sort(tagged.data["year"].unique())
        counts = new_per_year.reindex(years, fill_value=0).cumsum()
        return pd.DataFrame({
            "year": years.astype(np.int64),
            self.indicator: counts.to_numpy(dtype=float),
        })


class SpeciesOccurrences(DiversityCalculator):
    """Occurrence count of every species, one column per species."""

    indicator = "spec_occ"

    def __init__(self, config, indicator=None, **options):
        super().__init__(config, indicator, **options)
        self._species: List[str] = []

    @property
    def value_columns(self) -> List[str]:
        return list(self._species)

    def calculate(self, tagged: TaggedDataset, grid: Optional["Grid"] = None) -> pd.DataFrame:
        key = tagged.group_key
        if tagged.data.empty:
            self._species = []
            return pd.DataFrame({key: np.array([], dtype=np.int64)})
        wide = tagged.data.pivot_table(
            index=key,
            columns=SPECIES_COLUMN,
            values=COUNT_COLUMN,
            aggfunc="sum",
            fill_value=0,
        ).sort_index(axis=1).astype(float)
        wide.columns.name = None
        self._species = [str(c) for c in wide.columns]
        wide.columns = self._species
        out = wide.reset_index()
        out[key] = out[key].astype(np.int64)
        return out


class OccurrenceTurnover(DiversityCalculator):
    """Species turnover between consecutive observed years.

    ``(gained + lost) / species present in either year``; the first year
    has no predecessor and is NaN.
    """

    indicator = "occ_turnover"

    def calculate(self, tagged: TaggedDataset, grid: Optional["Grid"] = None) -> pd.DataFrame:
        grouped = tagged.data.groupby("year", sort=True)[SPECIES_COLUMN]
        years, values = [], []
        previous = None
        for year, names in grouped:
            species = frozenset(names)
            years.append(year)
            if previous is None:
                values.append(np.nan)
            else:
                union = previous | species
                changed = len(previous ^ species)
                values.append(changed / len(union) if union else np.nan)
            previous = species
        return pd.DataFrame({
            "year": np.asarray(years, dtype=np.int64),
            self.indicator: np.asarray(values, dtype=float),
        })
