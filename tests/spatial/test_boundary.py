"""Tests for region polygons, boundary sources and CRS helpers."""

import pytest
from shapely.geometry import LineString, Polygon, box

from b3ind.contracts import ConfigurationError, ProjectionMismatchError, RegionNotFoundError
from b3ind.spatial import InMemoryBoundarySource, RegionPolygon
from b3ind.spatial.crs import require_same_crs, same_crs, to_crs

pytestmark = [pytest.mark.unit, pytest.mark.spatial]


class TestRegionPolygon:

    def test_rejects_non_polygon(self):
        with pytest.raises(ConfigurationError, match="Polygon or MultiPolygon"):
            RegionPolygon(LineString([(0, 0), (1, 1)]), "EPSG:3035", "country", "Line")

    def test_rejects_empty_geometry(self):
        with pytest.raises(ConfigurationError, match="empty geometry"):
            RegionPolygon(Polygon(), "EPSG:3035", "country", "Nowhere")

    def test_to_same_crs_returns_self(self, square_region):
        assert square_region.to_crs("epsg:3035") is square_region

    def test_reprojection(self):
        lonlat = RegionPolygon(box(10.0, 50.0, 11.0, 51.0), "EPSG:4326", "country", "Patch")

        projected = lonlat.to_crs("EPSG:3035")

        assert projected.crs == "EPSG:3035"
        assert projected.name == "Patch"
        xmin, ymin, xmax, ymax = projected.bounds
        # Roughly 70 x 111 km around 50N, in meters
        assert 60_000 < xmax - xmin < 80_000
        assert 100_000 < ymax - ymin < 120_000


class TestInMemoryBoundarySource:

    def test_lookup_is_case_insensitive(self, boundary_source):
        region = boundary_source.get_boundary("country", "  TESTLAND ", "EPSG:3035")

        assert region.level == "country"
        assert region.area == pytest.approx(200_000.0 ** 2)

    def test_world_ignores_region_name(self, boundary_source):
        region = boundary_source.get_boundary("world", "anything", "EPSG:3035")

        assert region.name == "world"

    def test_unknown_region(self, boundary_source):
        with pytest.raises(RegionNotFoundError, match="Atlantis"):
            boundary_source.get_boundary("country", "Atlantis", "EPSG:3035")

    def test_unknown_level(self, boundary_source):
        with pytest.raises(ConfigurationError, match="Unknown spatial level"):
            boundary_source.get_boundary("province", "Testland", "EPSG:3035")

    def test_register_rejects_bad_crs(self):
        source = InMemoryBoundarySource()
        with pytest.raises(ConfigurationError, match="Unrecognized coordinate reference system"):
            source.register("country", "X", box(0, 0, 1, 1), "EPSG:not-a-code")

    def test_reprojects_on_request(self):
        source = InMemoryBoundarySource()
        source.register("country", "Patch", box(10.0, 50.0, 11.0, 51.0), "EPSG:4326")

        region = source.get_boundary("country", "Patch", "EPSG:3035")

        assert region.crs == "EPSG:3035"
        assert region.bounds[0] > 1_000_000


class TestCrsHelpers:

    def test_equivalent_spellings(self):
        assert same_crs("EPSG:3035", 3035)
        assert same_crs("epsg:4326", to_crs("EPSG:4326"))

    def test_mismatch_raises(self):
        with pytest.raises(ProjectionMismatchError, match="disagree"):
            require_same_crs("EPSG:3035", "EPSG:4326")
