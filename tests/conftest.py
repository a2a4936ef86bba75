"""Root-level pytest fixtures for the b3ind test suite.

Provides shared configuration fixtures following the Pydantic-based
architecture, plus small synthetic cubes and regions. All tests must use
these fixtures instead of creating raw dict configs.
"""

import pandas as pd
import pytest
from shapely.geometry import box

from b3ind.core import ProcessedCube, VirtualCube
from b3ind.schemas import ParamConfig, UserConfig, resolve_config
from b3ind.spatial import InMemoryBoundarySource, RegionPolygon

CRS = "EPSG:3035"


# =============================================================================
# Configuration Fixtures (Pydantic-based)
# =============================================================================

@pytest.fixture
def param_config():
    """Expert configuration with all defaults.

    Use this as the base for all test configs. Override specific values
    using make_config or by creating custom UserConfig instances.
    """
    return ParamConfig()


@pytest.fixture
def internal_config(param_config):
    """Fully validated runtime configuration (no overrides).

    Use this when tests don't care about specific config values and just
    need a valid InternalConfig to pass to constructors.
    """
    return resolve_config(param_config, None)


@pytest.fixture
def make_config(param_config):
    """Factory fixture for creating custom test configs.

    Examples
    --------
    >>> def test_small_cells(make_config):
    ...     config = make_config(CELL_SIZE_COUNTRY=5)
    ...     assert config.grid.country_cell_size_km == 5
    """
    def _make(**user_overrides):
        """Create InternalConfig with user overrides."""
        if user_overrides:
            return resolve_config(param_config, UserConfig(**user_overrides))
        return resolve_config(param_config, None)

    return _make


# =============================================================================
# Spatial Fixtures
# =============================================================================

@pytest.fixture
def square_region():
    """200 x 200 km square in EPSG:3035; four 100 km cells.

    Cell layout (ids row-major from the lower-left corner)::

        3 | 4
        --+--
        1 | 2
    """
    return RegionPolygon(box(0, 0, 200_000, 200_000), CRS, "country", "Testland")


@pytest.fixture
def boundary_source(square_region):
    """Boundary source serving the square for every level."""
    source = InMemoryBoundarySource()
    source.register("country", "Testland", square_region.geometry, CRS)
    source.register("continent", "Europe", square_region.geometry, CRS)
    source.register("world", None, square_region.geometry, CRS)
    return source


# =============================================================================
# Cube Fixtures
# =============================================================================

@pytest.fixture
def cell2_occurrences():
    """Occurrences (km coordinates) that all fall inside cell 2; total obs 10."""
    return pd.DataFrame({
        "scientificName": ["Apus apus", "Bufo bufo", "Apus apus", "Canis lupus"],
        "year": [2000, 2000, 2001, 2003],
        "xcoord": [150.0, 150.0, 160.0, 140.0],
        "ycoord": [50.0, 50.0, 40.0, 60.0],
        "obs": [3, 1, 2, 4],
        "kingdom": ["Animalia"] * 4,
        "phylum": ["Chordata"] * 4,
        "class": ["Aves", "Amphibia", "Aves", "Mammalia"],
        "order": ["Apodiformes", "Anura", "Apodiformes", "Carnivora"],
        "family": ["Apodidae", "Bufonidae", "Apodidae", "Canidae"],
        "genus": ["Apus", "Bufo", "Apus", "Canis"],
    })


@pytest.fixture
def cell2_cube(cell2_occurrences):
    return ProcessedCube.from_dataframe(cell2_occurrences, crs=CRS)


@pytest.fixture
def two_cell_cube():
    """Three species: two co-occur in cell 1, the third is alone in cell 4."""
    df = pd.DataFrame({
        "scientificName": ["Apus apus", "Bufo bufo", "Canis lupus"],
        "year": [2010, 2010, 2011],
        "xcoord": [20.0, 80.0, 150.0],
        "ycoord": [20.0, 80.0, 150.0],
        "obs": [1, 1, 1],
    })
    return ProcessedCube.from_dataframe(df, crs=CRS)


@pytest.fixture
def virtual_cube(cell2_occurrences):
    cols = ["scientificName", "year", "xcoord", "ycoord", "obs"]
    return VirtualCube.from_dataframe(cell2_occurrences[cols], crs=CRS)
