"""Rarity indicators.

Species are weighted by ``1/share - 1`` where the share is computed over the
whole working dataset; a group's rarity is the sum of the weights of the
distinct species it contains.

- ab_rarity: share of the total occurrence count held by the species
- area_rarity: share of occupied cells in which the species occurs
"""

import logging
from typing import Optional, TYPE_CHECKING

import pandas as pd

from b3ind.indicators.base import COUNT_COLUMN, SPECIES_COLUMN, DiversityCalculator
from b3ind.indicators.formulas import rarity_weights

if TYPE_CHECKING:
    from b3ind.spatial.grid import Grid

__all__ = ['AbundanceRarity', 'AreaRarity']

logger = logging.getLogger(__name__)


class _RarityCalculator(DiversityCalculator):

    def __init__(self, config, indicator=None, **options):
        super().__init__(config, indicator, **options)
        self._weights = pd.Series(dtype=float)

    def shares(self, data: pd.DataFrame) -> pd.Series:
        raise NotImplementedError

    def prepare(self, data: pd.DataFrame, grid: Optional["Grid"]) -> None:
        self._weights = rarity_weights(self.shares(data))
        logger.debug("%s: weights for %d species", self.indicator, len(self._weights))

    def compute(self, group: pd.DataFrame) -> float:
        species = group[SPECIES_COLUMN].unique()
        return float(self._weights.reindex(species).sum())


class AbundanceRarity(_RarityCalculator):
    indicator = "ab_rarity"

    def shares(self, data: pd.DataFrame) -> pd.Series:
        totals = data.groupby(SPECIES_COLUMN)[COUNT_COLUMN].sum()
        return totals / totals.sum()


class AreaRarity(_RarityCalculator):
    indicator = "area_rarity"

    def shares(self, data: pd.DataFrame) -> pd.Series:
        occupied = data.groupby(SPECIES_COLUMN)["cell_id"].nunique()
        return occupied / data["cell_id"].nunique()
