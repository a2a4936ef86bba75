"""Indicator workflow orchestration.

Takes a cube and an indicator request through validation, year filtering,
metadata collection, optional spatial reduction, dispatch, computation and
result assembly. Every call builds its own grid and calculator; nothing is
kept between calls.
"""

import logging
import warnings
from typing import Literal, Optional, Tuple, TYPE_CHECKING

import pandas as pd

from b3ind.contracts import (
    ConfigurationError,
    EmptyResultWarning,
    InvalidInputError,
    UnsupportedIndicatorError,
    assert_joined,
)
from b3ind.core.cube import ProcessedCube, VirtualCube
from b3ind.core.metadata import CoordRange, MetadataSnapshot
from b3ind.indicators.base import SPECIES_COLUMN, TaggedDataset
from b3ind.indicators.registry import (
    DISPATCH_TABLE,
    dispatch_key,
    get_indicator,
    resolve_calculator,
)
from b3ind.pipeline.results import (
    IndicatorResult,
    assemble_result,
    complete_map_table,
    complete_time_series,
)
from b3ind.schemas import ParamConfig, resolve_config
from b3ind.spatial.boundary import SPATIAL_LEVELS
from b3ind.spatial.crs import require_same_crs, to_crs
from b3ind.spatial.grid import Grid, create_grid, drop_small_cells, resolve_cell_size
from b3ind.spatial.join import join_occurrences

if TYPE_CHECKING:
    from b3ind.schemas import InternalConfig
    from b3ind.spatial.boundary import BoundarySource

__all__ = ['IndicatorWorkflow', 'compute_indicator_workflow']

logger = logging.getLogger(__name__)

UNKNOWN = "unknown"


class IndicatorWorkflow:
    """Computes one indicator from one cube per ``run()`` call.

    **Steps:**

    1. **Validate**: cube kind, ``dim_type``, indicator registration and
       mode support, virtual-cube restrictions, spatial level and region.
       Nothing spatial happens before all checks pass.
    2. **Filter**: clamp the year window into the cube's range and drop
       records outside it.
    3. **Metadata**: snapshot of the filtered population.
    4. **Spatialize** (map requests, or ts requests naming a level):
       boundary lookup, grid, optional small-cell filter, coordinate
       rescale and spatial join.
    5. **Dispatch**: tag the working table with ``{indicator}_{dim_type}``
       and resolve the calculator.
    6. **Compute**: one row per cell or year.
    7. **Assemble**: fill empty cells/years with the neutral value and
       build the result variant.

    Example usage::

        source = InMemoryBoundarySource()
        source.register("country", "Denmark", polygon, crs="EPSG:3035")
        workflow = IndicatorWorkflow(boundary_source=source)
        result = workflow.run(cube, "obs_richness", "map",
                              level="country", region="Denmark")
    """

    def __init__(self, config: Optional["InternalConfig"] = None,
                 boundary_source: Optional["BoundarySource"] = None):
        self.config = config if config is not None else resolve_config(ParamConfig())
        self.boundary_source = boundary_source

    def run(self, cube, indicator: str, dim_type: Literal["map", "ts"],
            cell_size: Optional[float] = None,
            level: Optional[str] = None,
            region: Optional[str] = None,
            cube_crs: Optional[str] = None,
            first_year: Optional[int] = None,
            last_year: Optional[int] = None,
            **options) -> IndicatorResult:
        """Run the workflow and return the typed result.

        Parameters
        ----------
        cube : ProcessedCube or VirtualCube
            Occurrence cube.
        indicator : str
            Registered indicator name (e.g. ``"obs_richness"``).
        dim_type : {"map", "ts"}
            Aggregate per grid cell or per year.
        cell_size : float, optional
            Cell side length in km; defaults to the level's size.
        level : {"country", "continent", "world"}, optional
            Spatial level. Map requests fall back to the configured default
            level and region; ts requests only spatialize when given one.
        region : str, optional
            Region name, required for country and continent.
        cube_crs : str, optional
            Reference system of the cube coordinates. Falls back to
            ``cube.crs``, then to ``spatial.default_crs``. Must agree with
            ``cube.crs`` when both are set.
        first_year, last_year : int, optional
            Year window, clamped into the cube's range.
        **options
            Passed to the calculator.

        Raises
        ------
        InvalidInputError
            Bad cube, ``dim_type`` or year window.
        UnsupportedIndicatorError
            Unknown indicator or unsupported mode.
        ConfigurationError
            Bad level, missing region or boundary source, bad cell size, or
            a geographic reference system on a spatial request.
        ProjectionMismatchError
            ``cube_crs`` disagrees with ``cube.crs``, or occurrence and
            grid reference systems disagree.
        """
        spatialize, level, region, crs = self._validate(cube, indicator, dim_type, level, region,
                                                        cube_crs)
        is_virtual = isinstance(cube, VirtualCube)
        cell_size_km = resolve_cell_size(level, self.config, cell_size) if spatialize else None

        first, last = self._clamp_years(cube, first_year, last_year)
        filtered = cube.data[(cube.data["year"] >= first) & (cube.data["year"] <= last)]
        data = filtered
        logger.info("Workflow %s_%s: %d of %d records in %d-%d",
                    indicator, dim_type, len(data), len(cube.data), first, last)

        metadata = self._collect_metadata(
            data, indicator, dim_type, level, region, cell_size_km, crs,
            first, last, is_virtual,
        )

        grid = None
        if spatialize:
            grid, data = self._spatialize(data, level, region, crs, cell_size_km)

        tagged = TaggedDataset(data, indicator, dim_type)
        if tagged.key not in DISPATCH_TABLE:
            raise UnsupportedIndicatorError(f"No calculator registered for '{tagged.key}'")
        calculator = resolve_calculator(indicator, dim_type, self.config, **options)
        table = calculator.calculate(tagged, grid)

        spec = get_indicator(indicator)
        if dim_type == "map":
            table, missing = complete_map_table(table, grid, spec, calculator.value_columns)
            kind = "virtual_indicator_map" if is_virtual else "indicator_map"
            result = assemble_result(kind, table, metadata, calculator.value_columns, grid=grid)
        else:
            table, missing = complete_time_series(table, first, last, spec, calculator.value_columns)
            coord_range = CoordRange.from_frame(filtered if len(filtered) else cube.data)
            result = assemble_result("indicator_ts", table, metadata, calculator.value_columns,
                                     coord_range=coord_range)

        if missing and self.config.indicators.warn_on_empty:
            unit = "cells" if dim_type == "map" else "years"
            warnings.warn(
                f"{indicator}: {missing} of {len(table)} {unit} have no occurrences "
                f"and hold the neutral value",
                EmptyResultWarning,
                stacklevel=2,
            )

        logger.info("Workflow %s_%s done: %d rows", indicator, dim_type, len(result.data))
        return result

    def _validate(self, cube, indicator: str, dim_type: str,
                  level: Optional[str], region: Optional[str],
                  cube_crs: Optional[str]) -> Tuple[bool, str, str, str]:
        """Reject bad requests before any spatial work.

        Returns whether to spatialize, and the effective level, region and
        reference system.
        """
        if not isinstance(cube, (ProcessedCube, VirtualCube)):
            raise InvalidInputError(
                f"Expected a ProcessedCube or VirtualCube, got {type(cube).__name__}"
            )
        if dim_type not in ("map", "ts"):
            raise InvalidInputError(f"dim_type must be 'map' or 'ts', got {dim_type!r}")

        spec = get_indicator(indicator)
        if dispatch_key(indicator, dim_type) not in DISPATCH_TABLE:
            raise UnsupportedIndicatorError(
                f"Indicator '{indicator}' does not support '{dim_type}' "
                f"(supported: {', '.join(spec.modes)})"
            )

        if isinstance(cube, VirtualCube) and dim_type != "map":
            raise InvalidInputError("Virtual cubes only support map indicators")

        if cube_crs and cube.crs:
            require_same_crs(cube_crs, cube.crs, "cube_crs and the cube")
        crs = cube_crs or cube.crs or self.config.spatial.default_crs

        if dim_type == "ts" and level is None:
            return False, UNKNOWN, UNKNOWN, crs

        if level is None:
            level = self.config.spatial.default_level
            region = region or self.config.spatial.default_region
        level = level.strip().lower()
        if level not in SPATIAL_LEVELS:
            raise ConfigurationError(
                f"Unknown spatial level '{level}', expected one of {SPATIAL_LEVELS}"
            )
        if level == "world":
            region = "world"
        elif not region:
            raise ConfigurationError(f"A region is required for level '{level}'")

        # Cell sizes are in meters
        if to_crs(crs).is_geographic:
            raise ConfigurationError(
                f"Gridding needs a projected reference system in meters, got {crs}"
            )

        if self.boundary_source is None:
            raise ConfigurationError("Spatial indicators need a boundary source")
        return True, level, region, crs

    @staticmethod
    def _clamp_years(cube, first_year: Optional[int], last_year: Optional[int]) -> Tuple[int, int]:
        first = cube.first_year if first_year is None else int(first_year)
        last = cube.last_year if last_year is None else int(last_year)
        first = min(max(first, cube.first_year), cube.last_year)
        last = max(min(last, cube.last_year), cube.first_year)
        if first > last:
            raise InvalidInputError(f"first_year ({first}) is after last_year ({last})")
        if (first, last) != (first_year, last_year):
            logger.debug("Year window clamped to %d-%d (requested %s-%s)",
                         first, last, first_year, last_year)
        return first, last

    @staticmethod
    def _collect_metadata(data: pd.DataFrame, indicator: str, dim_type: str,
                          level: str, region: str, cell_size_km: Optional[int],
                          crs: str, first: int, last: int,
                          is_virtual: bool) -> MetadataSnapshot:
        kingdoms = ()
        num_kingdoms = None
        if "kingdom" in data.columns:
            kingdoms = tuple(sorted(data["kingdom"].dropna().unique()))
            num_kingdoms = len(kingdoms)

        return MetadataSnapshot(
            indicator=indicator,
            dim_type=dim_type,
            level=level,
            region=region,
            cell_size_km=cell_size_km,
            crs=crs,
            first_year=first,
            last_year=last,
            num_years=int(data["year"].nunique()),
            num_species=int(data[SPECIES_COLUMN].nunique()),
            num_families=int(data["family"].nunique()) if "family" in data.columns else None,
            num_kingdoms=num_kingdoms,
            kingdoms=kingdoms,
            species_names=None if is_virtual else tuple(sorted(data[SPECIES_COLUMN].unique())),
            years_with_obs=None if is_virtual else tuple(int(y) for y in sorted(data["year"].unique())),
        )

    def _spatialize(self, data: pd.DataFrame, level: str, region: str, crs: str,
                    cell_size_km: int) -> Tuple[Grid, pd.DataFrame]:
        boundary = self.boundary_source.get_boundary(
            level, None if level == "world" else region, crs
        )
        grid = create_grid(boundary, level, self.config, cell_size_km)
        if self.config.grid.min_cell_area_fraction is not None:
            grid = drop_small_cells(grid, self.config.grid.min_cell_area_fraction)

        scaled = data.copy()
        scale = self.config.spatial.coordinate_scale
        scaled["xcoord"] = scaled["xcoord"].astype(float) * scale
        scaled["ycoord"] = scaled["ycoord"].astype(float) * scale

        joined = join_occurrences(scaled, grid, crs)
        assert_joined(joined, grid.cells, len(scaled))
        return grid, joined


def compute_indicator_workflow(cube, indicator: str, dim_type: Literal["map", "ts"],
                               cell_size: Optional[float] = None,
                               level: Optional[str] = None,
                               region: Optional[str] = None,
                               cube_crs: Optional[str] = None,
                               first_year: Optional[int] = None,
                               last_year: Optional[int] = None,
                               config: Optional["InternalConfig"] = None,
                               boundary_source: Optional["BoundarySource"] = None,
                               **options) -> IndicatorResult:
    """Functional entry point: ``IndicatorWorkflow(config, boundary_source).run(...)``."""
    workflow = IndicatorWorkflow(config=config, boundary_source=boundary_source)
    return workflow.run(
        cube, indicator, dim_type,
        cell_size=cell_size,
        level=level,
        region=region,
        cube_crs=cube_crs,
        first_year=first_year,
        last_year=last_year,
        **options,
    )
