"""Core data model: occurrence cubes and run metadata."""

from b3ind.core.metadata import CoordRange, MetadataSnapshot
from b3ind.core.cube import ProcessedCube, VirtualCube, OCCURRENCE_COLUMNS

__all__ = [
    'CoordRange',
    'MetadataSnapshot',
    'ProcessedCube',
    'VirtualCube',
    'OCCURRENCE_COLUMNS',
]
