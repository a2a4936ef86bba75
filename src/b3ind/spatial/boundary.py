"""Region polygons and boundary sources.

Downloading boundaries (Natural Earth or otherwise) is outside this package.
The workflow only talks to a ``BoundarySource``: given a spatial level, a
region name and a target reference system it returns a ``RegionPolygon``.
``InMemoryBoundarySource`` serves polygons registered by the caller and
reprojects them on request.
"""

import logging
from typing import Dict, Optional, Protocol, Tuple, Union

import numpy as np
import shapely
from shapely.geometry import MultiPolygon, Polygon
from shapely.geometry.base import BaseGeometry

from b3ind.contracts.failure import ConfigurationError, RegionNotFoundError
from b3ind.spatial.crs import make_transformer, same_crs, to_crs

__all__ = ['RegionPolygon', 'BoundarySource', 'InMemoryBoundarySource', 'SPATIAL_LEVELS']

logger = logging.getLogger(__name__)

SPATIAL_LEVELS = ("country", "continent", "world")


class RegionPolygon:
    """Area of interest: one or more polygons (holes allowed) in a known CRS."""

    def __init__(self, geometry: Union[Polygon, MultiPolygon], crs: str,
                 level: str, name: Optional[str] = None):
        if not isinstance(geometry, (Polygon, MultiPolygon)):
            raise ConfigurationError(
                f"Region geometry must be a Polygon or MultiPolygon, got {geometry.geom_type}"
            )
        if geometry.is_empty:
            raise ConfigurationError(f"Region '{name}' has an empty geometry")
        self.geometry = geometry
        self.crs = crs
        self.level = level
        self.name = name

    @property
    def bounds(self) -> Tuple[float, float, float, float]:
        return self.geometry.bounds

    @property
    def area(self) -> float:
        return self.geometry.area

    def to_crs(self, crs: str) -> "RegionPolygon":
        """Reproject into ``crs`` (returns self when already there)."""
        if same_crs(self.crs, crs):
            return self
        transformer = make_transformer(self.crs, crs)
        projected = shapely.transform(
            self.geometry,
            lambda coords: _transform_coords(transformer, coords),
        )
        return RegionPolygon(projected, crs, self.level, self.name)

    def __repr__(self):
        return f"RegionPolygon(level={self.level!r}, name={self.name!r}, crs={self.crs!r})"


def _transform_coords(transformer, coords):
    x, y = transformer.transform(coords[:, 0], coords[:, 1])
    return np.column_stack([x, y])


class BoundarySource(Protocol):
    """Anything that can supply region polygons."""

    def get_boundary(self, level: str, region: Optional[str], crs: str) -> RegionPolygon:
        ...


class InMemoryBoundarySource:
    """Boundary source backed by polygons registered up front.

    Keys are ``(level, region)`` with region names compared case-insensitively.
    The world level is registered under region ``None``.

    Examples
    --------
    >>> source = InMemoryBoundarySource()
    >>> source.register("country", "Denmark", denmark_polygon, crs="EPSG:4326")
    >>> region = source.get_boundary("country", "Denmark", "EPSG:3035")
    """

    def __init__(self):
        self._regions: Dict[Tuple[str, Optional[str]], Tuple[BaseGeometry, str]] = {}

    @staticmethod
    def _key(level: str, region: Optional[str]) -> Tuple[str, Optional[str]]:
        if level not in SPATIAL_LEVELS:
            raise ConfigurationError(
                f"Unknown spatial level '{level}', expected one of {SPATIAL_LEVELS}"
            )
        if level == "world":
            return level, None
        return level, region.strip().lower() if region else None

    def register(self, level: str, region: Optional[str],
                 geometry: Union[Polygon, MultiPolygon], crs: str) -> None:
        """Store ``geometry`` (expressed in ``crs``) for ``(level, region)``."""
        to_crs(crs)
        self._regions[self._key(level, region)] = (geometry, crs)

    def get_boundary(self, level: str, region: Optional[str], crs: str) -> RegionPolygon:
        """Return the registered region reprojected into ``crs``.

        Raises
        ------
        RegionNotFoundError
            If nothing is registered for ``(level, region)``.
        """
        key = self._key(level, region)
        if key not in self._regions:
            raise RegionNotFoundError(f"No boundary for level '{level}', region '{region}'")
        geometry, source_crs = self._regions[key]
        name = "world" if level == "world" else region
        polygon = RegionPolygon(geometry, source_crs, level, name)
        logger.debug("Boundary lookup: %s/%s (%s -> %s)", level, name, source_crs, crs)
        return polygon.to_crs(crs)
