"""Indicator registry and dispatch table.

``INDICATOR_REGISTRY`` describes every supported indicator (family, the
aggregation modes it supports, its neutral fill value). ``DISPATCH_TABLE``
maps the composite key ``"{indicator}_{dim_type}"`` to a calculator
factory. Both are built once at import time and are read-only.
"""

import logging
from functools import partial
from types import MappingProxyType
from typing import Callable, Dict, Literal, Mapping, Tuple, TYPE_CHECKING

import numpy as np
from pydantic import BaseModel, ConfigDict

from b3ind.contracts.failure import UnsupportedIndicatorError
from b3ind.indicators.base import DiversityCalculator, dispatch_key
from b3ind.indicators.diversity import HillNumber, PielouEvenness, WilliamsEvenness
from b3ind.indicators.occurrence import (
    CumulativeRichness,
    Newness,
    ObservedRichness,
    OccurrenceDensity,
    OccurrenceTurnover,
    SpeciesOccurrences,
    TotalOccurrences,
)
from b3ind.indicators.rarity import AbundanceRarity, AreaRarity
from b3ind.indicators.taxonomic import TaxonomicDistinctness

if TYPE_CHECKING:
    from b3ind.schemas import InternalConfig

__all__ = [
    'IndicatorSpec',
    'INDICATOR_REGISTRY',
    'DISPATCH_TABLE',
    'get_indicator',
    'dispatch_key',
    'resolve_calculator',
]

logger = logging.getLogger(__name__)


class IndicatorSpec(BaseModel):
    """Static description of one indicator."""

    model_config = ConfigDict(extra='forbid', frozen=True)

    name: str
    family: Literal["richness", "occurrence", "diversity", "evenness",
                    "rarity", "taxonomic", "temporal"]
    supports_map: bool = True
    supports_ts: bool = True
    required_columns: Tuple[str, ...] = ()
    fill_value: float = 0.0
    carry_forward: bool = False

    @property
    def modes(self) -> Tuple[str, ...]:
        return tuple(m for m, ok in (("map", self.supports_map), ("ts", self.supports_ts)) if ok)


_SPECS = [
    IndicatorSpec(name="obs_richness", family="richness"),
    IndicatorSpec(name="cum_richness", family="richness", supports_map=False, carry_forward=True),
    IndicatorSpec(name="total_occ", family="occurrence"),
    IndicatorSpec(name="density", family="occurrence", supports_ts=False),
    IndicatorSpec(name="hill0", family="diversity"),
    IndicatorSpec(name="hill1", family="diversity"),
    IndicatorSpec(name="hill2", family="diversity"),
    IndicatorSpec(name="pielou_evenness", family="evenness", fill_value=np.nan),
    IndicatorSpec(name="williams_evenness", family="evenness", fill_value=np.nan),
    IndicatorSpec(name="ab_rarity", family="rarity"),
    IndicatorSpec(name="area_rarity", family="rarity", supports_ts=False),
    IndicatorSpec(name="tax_distinct", family="taxonomic", fill_value=np.nan),
    IndicatorSpec(name="newness", family="temporal", fill_value=np.nan),
    IndicatorSpec(name="spec_occ", family="occurrence"),
    IndicatorSpec(name="occ_turnover", family="temporal", supports_map=False, fill_value=np.nan),
]

INDICATOR_REGISTRY: Mapping[str, IndicatorSpec] = MappingProxyType({s.name: s for s in _SPECS})

_FACTORIES: Dict[str, Callable[..., DiversityCalculator]] = {
    "obs_richness": ObservedRichness,
    "cum_richness": CumulativeRichness,
    "total_occ": TotalOccurrences,
    "density": OccurrenceDensity,
    "hill0": partial(HillNumber, order=0),
    "hill1": partial(HillNumber, order=1),
    "hill2": partial(HillNumber, order=2),
    "pielou_evenness": PielouEvenness,
    "williams_evenness": WilliamsEvenness,
    "ab_rarity": AbundanceRarity,
    "area_rarity": AreaRarity,
    "tax_distinct": TaxonomicDistinctness,
    "newness": Newness,
    "spec_occ": SpeciesOccurrences,
    "occ_turnover": OccurrenceTurnover,
}

DISPATCH_TABLE: Mapping[str, Callable[..., DiversityCalculator]] = MappingProxyType({
    dispatch_key(spec.name, mode): _FACTORIES[spec.name]
    for spec in _SPECS
    for mode in spec.modes
})


def get_indicator(name: str) -> IndicatorSpec:
    """Registry lookup.

    Raises
    ------
    UnsupportedIndicatorError
        If ``name`` is not a registered indicator.
    """
    try:
        return INDICATOR_REGISTRY[name]
    except KeyError:
        raise UnsupportedIndicatorError(
            f"Unknown indicator '{name}'. Available: {sorted(INDICATOR_REGISTRY)}"
        ) from None


def resolve_calculator(indicator: str, dim_type: str, config: "InternalConfig",
                       **options) -> DiversityCalculator:
    """Instantiate the calculator registered for ``(indicator, dim_type)``.

    Raises
    ------
    UnsupportedIndicatorError
        If the indicator is unknown or does not support ``dim_type``.
    """
    spec = get_indicator(indicator)
    key = dispatch_key(indicator, dim_type)
    if key not in DISPATCH_TABLE:
        raise UnsupportedIndicatorError(
            f"Indicator '{indicator}' has no '{dim_type}' calculator "
            f"(supported: {', '.join(spec.modes)})"
        )
    calculator = DISPATCH_TABLE[key](config, indicator=indicator, **options)
    logger.debug("Dispatch %s -> %r", key, calculator)
    return calculator
