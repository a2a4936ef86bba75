"""Run metadata carried by every indicator result."""

from typing import Literal, Optional, Tuple

import pandas as pd
from pydantic import BaseModel, ConfigDict


class FrozenRecord(BaseModel):
    """Immutable record base for metadata types."""

    model_config = ConfigDict(extra='forbid', frozen=True)


class CoordRange(FrozenRecord):
    """Coordinate bounding box of occurrence data, in cube units."""
    xmin: float
    xmax: float
    ymin: float
    ymax: float

    @classmethod
    def from_frame(cls, df: pd.DataFrame, x: str = "xcoord", y: str = "ycoord") -> "CoordRange":
        """Bounding box of the ``x``/``y`` columns of ``df``."""
        return cls(
            xmin=float(df[x].min()),
            xmax=float(df[x].max()),
            ymin=float(df[y].min()),
            ymax=float(df[y].max()),
        )


class MetadataSnapshot(FrozenRecord):
    """Description of the input population and the run parameters.

    Counts describe the year-filtered cube *before* any spatial reduction,
    so they refer to the input data rather than the output grid.
    ``species_names`` and ``years_with_obs`` are None for virtual cubes.
    """
    indicator: str
    dim_type: Literal["map", "ts"]
    level: str
    region: str
    cell_size_km: Optional[int] = None
    crs: Optional[str] = None
    first_year: int
    last_year: int
    num_years: int
    num_species: int
    num_families: Optional[int] = None
    num_kingdoms: Optional[int] = None
    kingdoms: Tuple[str, ...] = ()
    species_names: Optional[Tuple[str, ...]] = None
    years_with_obs: Optional[Tuple[int, ...]] = None
