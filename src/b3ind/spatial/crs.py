"""Coordinate reference system helpers built on pyproj."""

from typing import Union

from pyproj import CRS, Transformer
from pyproj.exceptions import CRSError

from b3ind.contracts.failure import ConfigurationError, ProjectionMismatchError

__all__ = ['to_crs', 'same_crs', 'require_same_crs', 'make_transformer']

CRSLike = Union[str, int, CRS]


def to_crs(value: CRSLike) -> CRS:
    """Parse any user CRS input (``"EPSG:3035"``, ``3035``, WKT, CRS)."""
    try:
        return CRS.from_user_input(value)
    except CRSError as e:
        raise ConfigurationError(f"Unrecognized coordinate reference system: {value!r}") from e


def same_crs(a: CRSLike, b: CRSLike) -> bool:
    """True when both inputs describe the same reference system."""
    return to_crs(a) == to_crs(b)


def require_same_crs(a: CRSLike, b: CRSLike, what: str = "occurrences and grid") -> None:
    """Raise ProjectionMismatchError unless ``a`` and ``b`` match."""
    if not same_crs(a, b):
        raise ProjectionMismatchError(
            f"Reference systems of {what} disagree: {to_crs(a).to_string()} vs {to_crs(b).to_string()}"
        )


def make_transformer(source: CRSLike, target: CRSLike) -> Transformer:
    """Transformer with (x, y) axis order regardless of CRS definitions."""
    return Transformer.from_crs(to_crs(source), to_crs(target), always_xy=True)
