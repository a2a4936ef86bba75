"""Average taxonomic distinctness of co-occurring species."""

import logging
from typing import List, Optional, TYPE_CHECKING

import pandas as pd

from b3ind.indicators.base import SPECIES_COLUMN, DiversityCalculator
from b3ind.indicators.formulas import taxonomic_distinctness

if TYPE_CHECKING:
    from b3ind.spatial.grid import Grid

__all__ = ['TaxonomicDistinctness']

logger = logging.getLogger(__name__)


class TaxonomicDistinctness(DiversityCalculator):
    """Mean pairwise taxonomic distance (0-100) between the group's species.

    Ranks come from ``config.indicators.taxonomic_ranks`` restricted to the
    columns present in the data. Each species takes the first non-missing
    value of every rank found in the dataset.
    """

    indicator = "tax_distinct"

    def __init__(self, config, indicator=None, **options):
        super().__init__(config, indicator, **options)
        self.ranks: List[str] = []
        self._taxa = pd.DataFrame()

    def prepare(self, data: pd.DataFrame, grid: Optional["Grid"]) -> None:
        self.ranks = [r for r in self.config.indicators.taxonomic_ranks if r in data.columns]
        if self.ranks:
            self._taxa = data.groupby(SPECIES_COLUMN, sort=True)[self.ranks].first()
        else:
            self._taxa = pd.DataFrame(index=pd.Index(sorted(data[SPECIES_COLUMN].unique())))
        logger.debug("tax_distinct: ranks %s for %d species", self.ranks, len(self._taxa))

    def compute(self, group: pd.DataFrame) -> float:
        species = sorted(group[SPECIES_COLUMN].unique())
        return taxonomic_distinctness(self._taxa.loc[species], self.ranks)
