"""In-memory occurrence cubes.

A cube is a materialized occurrence table plus the cube-level summaries the
workflow needs (year range, coordinate extent, species/family/kingdom sets).
Parsing cubes from files is the ingestion layer's job; this module only
wraps an already loaded ``pandas.DataFrame``.
"""

import logging
from typing import Optional, Tuple

import pandas as pd

from b3ind.contracts.failure import InvalidInputError
from b3ind.core.metadata import CoordRange

__all__ = ['ProcessedCube', 'VirtualCube', 'OCCURRENCE_COLUMNS']

logger = logging.getLogger(__name__)

OCCURRENCE_COLUMNS = ("scientificName", "year", "xcoord", "ycoord", "obs")


class _OccurrenceCube:
    """Common behaviour of real and virtual cubes. Not instantiated directly."""

    kind = "cube"

    def __init__(self, data: pd.DataFrame, first_year: int, last_year: int,
                 coord_range: CoordRange, num_species: int,
                 num_families: Optional[int] = None,
                 kingdoms: Tuple[str, ...] = (),
                 crs: Optional[str] = None,
                 resolution: Optional[str] = None):
        missing = [c for c in OCCURRENCE_COLUMNS if c not in data.columns]
        if missing:
            raise InvalidInputError(f"Cube data missing required columns: {missing}")

        if first_year > last_year:
            raise InvalidInputError(
                f"Cube first_year ({first_year}) is after last_year ({last_year})"
            )

        years = data["year"]
        if len(data) and (years.min() < first_year or years.max() > last_year):
            raise InvalidInputError(
                f"Cube records span {years.min()}-{years.max()}, "
                f"outside the declared range {first_year}-{last_year}"
            )

        self._data = data.reset_index(drop=True).copy()
        self.first_year = int(first_year)
        self.last_year = int(last_year)
        self.coord_range = coord_range
        self.num_species = int(num_species)
        self.num_families = num_families
        self.kingdoms = tuple(kingdoms)
        self.crs = crs
        self.resolution = resolution

    @property
    def data(self) -> pd.DataFrame:
        """Occurrence table. Treat as read-only."""
        return self._data

    @classmethod
    def from_dataframe(cls, df: pd.DataFrame, crs: Optional[str] = None,
                       resolution: Optional[str] = None):
        """Build a cube from an occurrence table, deriving all summaries.

        Parameters
        ----------
        df : pd.DataFrame
            Occurrence rows with at least ``scientificName``, ``year``,
            ``xcoord``, ``ycoord`` and ``obs``.
        crs : str, optional
            Reference system of ``xcoord``/``ycoord`` (e.g. "EPSG:3035").
        resolution : str, optional
            Cell resolution of a pre-gridded cube (e.g. "10km").

        Raises
        ------
        InvalidInputError
            If required columns are missing or the table is empty.
        """
        missing = [c for c in OCCURRENCE_COLUMNS if c not in df.columns]
        if missing:
            raise InvalidInputError(f"Cube data missing required columns: {missing}")
        if df.empty:
            raise InvalidInputError("Cube data has no occurrence records")

        data = df.copy()
        data["year"] = data["year"].astype(int)

        num_families = int(data["family"].nunique()) if "family" in data.columns else None
        kingdoms = tuple(sorted(data["kingdom"].dropna().unique())) if "kingdom" in data.columns else ()

        cube = cls(
            data,
            first_year=int(data["year"].min()),
            last_year=int(data["year"].max()),
            coord_range=CoordRange.from_frame(data),
            num_species=int(data["scientificName"].nunique()),
            num_families=num_families,
            kingdoms=kingdoms,
            crs=crs,
            resolution=resolution,
        )
        logger.debug("%s built: %d rows, %d species, years %d-%d",
                     cls.__name__, len(data), cube.num_species,
                     cube.first_year, cube.last_year)
        return cube

    def __repr__(self):
        return (f"{type(self).__name__}(rows={len(self._data)}, species={self.num_species}, "
                f"years={self.first_year}-{self.last_year}, crs={self.crs!r})")


class ProcessedCube(_OccurrenceCube):
    """Real observational occurrence cube."""

    kind = "processed_cube"


class VirtualCube(_OccurrenceCube):
    """Simulated community cube (virtual species, no taxonomy)."""

    kind = "virtual_cube"
