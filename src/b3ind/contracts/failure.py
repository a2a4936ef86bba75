"""Centralized failure taxonomy for the indicator pipeline.

User-facing problems (bad cube, bad parameters, unsupported indicator,
reference system disagreement) raise the errors below immediately at the
workflow's validate and dispatch steps. Contract violations are different:
they mean a pipeline stage broke its own promise and indicate a bug.
"""


class B3IndError(Exception):
    """Base class for all b3ind user-facing errors."""


class InvalidInputError(B3IndError, ValueError):
    """Wrong cube kind, bad ``dim_type``, or an unusable year window."""


class UnsupportedIndicatorError(InvalidInputError):
    """Indicator name or ``(indicator, dim_type)`` combination is not registered."""


class ConfigurationError(B3IndError, ValueError):
    """Unrecognized spatial level, missing region, or unusable cell size."""


class RegionNotFoundError(ConfigurationError):
    """Boundary source has no polygon for the requested region."""


class ProjectionMismatchError(B3IndError):
    """Occurrences and grid/region use different coordinate reference systems."""


class EmptyResultWarning(UserWarning):
    """Non-fatal: at least one cell or year had no matching occurrences.

    The affected groups carry the indicator's neutral value.
    """


class ContractViolation(RuntimeError):
    """Raised when a pipeline contract is violated.

    This indicates a bug in pipeline logic, not bad user input. It means a
    pipeline stage did not produce the invariants it promised.

    Key distinction:
    - InvalidInputError / ConfigurationError: caller error
    - ValidationError: config error (handled by Pydantic)
    - ContractViolation: pipeline bug (programmer error)
    """
    pass
