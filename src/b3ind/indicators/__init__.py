"""Diversity calculators and their dispatch.

- base: calculator interface and the tagged working dataset
- formulas: closed-form diversity formulas on abundance vectors
- occurrence, diversity, rarity, taxonomic: calculator families
- registry: indicator registry and ``"{indicator}_{dim_type}"`` dispatch
"""

from b3ind.indicators.base import DiversityCalculator, TaggedDataset
from b3ind.indicators.registry import (
    DISPATCH_TABLE,
    INDICATOR_REGISTRY,
    IndicatorSpec,
    dispatch_key,
    get_indicator,
    resolve_calculator,
)

__all__ = [
    "DiversityCalculator",
    "TaggedDataset",
    "DISPATCH_TABLE",
    "INDICATOR_REGISTRY",
    "IndicatorSpec",
    "dispatch_key",
    "get_indicator",
    "resolve_calculator",
]
