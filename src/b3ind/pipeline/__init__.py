"""Workflow orchestration and result assembly."""

from b3ind.pipeline.orchestrator import IndicatorWorkflow, compute_indicator_workflow
from b3ind.pipeline.results import (
    IndicatorResult,
    SpatialResult,
    TimeSeriesResult,
    VirtualSpatialResult,
    assemble_result,
)

__all__ = [
    "IndicatorWorkflow",
    "compute_indicator_workflow",
    "IndicatorResult",
    "SpatialResult",
    "TimeSeriesResult",
    "VirtualSpatialResult",
    "assemble_result",
]
