"""`b3ind` - Biodiversity indicators from occurrence data cubes.

Subpackages:
- schemas: Layered configuration (param < user -> internal)
- contracts: Error taxonomy and stage contracts
- core: Occurrence cubes and run metadata
- spatial: Boundaries, grids and the spatial join
- indicators: Diversity calculators and dispatch
- pipeline: Workflow orchestration and typed results
"""

__version__ = "0.1.0"

from b3ind.contracts import (
    B3IndError,
    ConfigurationError,
    ContractViolation,
    EmptyResultWarning,
    InvalidInputError,
    ProjectionMismatchError,
    RegionNotFoundError,
    UnsupportedIndicatorError,
)
from b3ind.core import CoordRange, MetadataSnapshot, ProcessedCube, VirtualCube
from b3ind.logging_setup import setup_logging
from b3ind.pipeline import (
    IndicatorWorkflow,
    SpatialResult,
    TimeSeriesResult,
    VirtualSpatialResult,
    compute_indicator_workflow,
)
from b3ind.schemas import InternalConfig, ParamConfig, UserConfig, resolve_config
from b3ind.spatial import InMemoryBoundarySource, RegionPolygon

__all__ = [
    "B3IndError",
    "ConfigurationError",
    "ContractViolation",
    "EmptyResultWarning",
    "InvalidInputError",
    "ProjectionMismatchError",
    "RegionNotFoundError",
    "UnsupportedIndicatorError",
    "CoordRange",
    "MetadataSnapshot",
    "ProcessedCube",
    "VirtualCube",
    "setup_logging",
    "IndicatorWorkflow",
    "SpatialResult",
    "TimeSeriesResult",
    "VirtualSpatialResult",
    "compute_indicator_workflow",
    "InternalConfig",
    "ParamConfig",
    "UserConfig",
    "resolve_config",
    "InMemoryBoundarySource",
    "RegionPolygon",
]
