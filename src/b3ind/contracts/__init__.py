"""Pipeline contracts and error taxonomy.

Contracts fail immediately and loudly when pipeline stages don't produce
their promised invariants. User-facing errors are raised by the workflow
before any spatial work starts.

Key principle:
- Pydantic validates config correctness
- Workflow validation rejects bad caller input
- Contracts validate pipeline correctness
- Calculators handle the empty-group edge case
"""

from b3ind.contracts.failure import (
    B3IndError,
    ConfigurationError,
    ContractViolation,
    EmptyResultWarning,
    InvalidInputError,
    ProjectionMismatchError,
    RegionNotFoundError,
    UnsupportedIndicatorError,
)
from b3ind.contracts.base import require
from b3ind.contracts.grid import assert_grid
from b3ind.contracts.join import assert_joined
from b3ind.contracts.analysis import assert_indicator_output
from b3ind.contracts.invariants import PIPELINE_INVARIANTS, STAGE_REQUIREMENTS

__all__ = [
    "B3IndError",
    "ConfigurationError",
    "ContractViolation",
    "EmptyResultWarning",
    "InvalidInputError",
    "ProjectionMismatchError",
    "RegionNotFoundError",
    "UnsupportedIndicatorError",
    "require",
    "assert_grid",
    "assert_joined",
    "assert_indicator_output",
    "PIPELINE_INVARIANTS",
    "STAGE_REQUIREMENTS",
]
