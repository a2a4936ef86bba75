"""Abundance-based diversity: Hill numbers and evenness."""

import pandas as pd

from b3ind.indicators.base import DiversityCalculator
from b3ind.indicators.formulas import hill_number, pielou_evenness, williams_evenness

__all__ = ['HillNumber', 'PielouEvenness', 'WilliamsEvenness']


class HillNumber(DiversityCalculator):
    """Hill number of a fixed order from per-species relative abundances."""

    def __init__(self, config, indicator=None, order: int = 0, **options):
        super().__init__(config, indicator or f"hill{order}", **options)
        self.order = order

    def compute(self, group: pd.DataFrame) -> float:
        return hill_number(self.species_abundances(group).to_numpy(), self.order)


class PielouEvenness(DiversityCalculator):
    indicator = "pielou_evenness"

    def compute(self, group: pd.DataFrame) -> float:
        return pielou_evenness(self.species_abundances(group).to_numpy())


class WilliamsEvenness(DiversityCalculator):
    indicator = "williams_evenness"

    def compute(self, group: pd.DataFrame) -> float:
        return williams_evenness(self.species_abundances(group).to_numpy())
