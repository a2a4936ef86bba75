"""End-to-end tests for the indicator workflow."""

import warnings

import numpy as np
import pandas as pd
import pytest
from shapely.geometry import box

from b3ind.contracts import (
    ConfigurationError,
    EmptyResultWarning,
    InvalidInputError,
    ProjectionMismatchError,
    RegionNotFoundError,
    UnsupportedIndicatorError,
)
from b3ind.core import ProcessedCube
from b3ind.pipeline import (
    IndicatorWorkflow,
    SpatialResult,
    TimeSeriesResult,
    VirtualSpatialResult,
    compute_indicator_workflow,
)
from b3ind.spatial import InMemoryBoundarySource

pytestmark = [pytest.mark.unit, pytest.mark.pipeline]


def _values(result):
    return dict(zip(result.data[result.key].tolist(), result.data[result.indicator].tolist()))


class TestMapWorkflow:

    def test_every_cell_present_with_neutral_value(self, workflow, cell2_cube):
        with pytest.warns(EmptyResultWarning, match="3 of 4 cells"):
            result = workflow.run(cell2_cube, "total_occ", "map", cell_size=100,
                                  level="country", region="Testland")

        assert isinstance(result, SpatialResult)
        assert _values(result) == {1: 0.0, 2: 10.0, 3: 0.0, 4: 0.0}
        assert result.data.columns.tolist() == ["cell_id", "area_km2", "geometry", "total_occ"]

    def test_richness_two_and_one(self, workflow, two_cell_cube):
        result = workflow.run(two_cell_cube, "obs_richness", "map", cell_size=100,
                              level="country", region="Testland")

        assert _values(result) == {1: 2.0, 2: 0.0, 3: 0.0, 4: 1.0}

    def test_hill0_equals_richness(self, workflow, two_cell_cube):
        kwargs = dict(cell_size=100, level="country", region="Testland")
        richness = workflow.run(two_cell_cube, "obs_richness", "map", **kwargs)
        hill0 = workflow.run(two_cell_cube, "hill0", "map", **kwargs)

        np.testing.assert_array_equal(richness.data["obs_richness"], hill0.data["hill0"])

    def test_default_level_and_region(self, workflow, cell2_cube):
        result = workflow.run(cell2_cube, "total_occ", "map")

        assert result.metadata.level == "continent"
        assert result.metadata.region == "Europe"
        assert result.metadata.cell_size_km == 100
        assert len(result.grid) == 4

    def test_world_level(self, workflow, cell2_cube):
        result = workflow.run(cell2_cube, "total_occ", "map", level="World", cell_size=100)

        assert result.metadata.level == "world"
        assert result.metadata.region == "world"

    def test_default_country_cell_size(self, workflow, cell2_cube):
        result = workflow.run(cell2_cube, "obs_richness", "map", level="country", region="Testland")

        assert len(result.data) == 400
        assert result.metadata.cell_size_km == 10
        assert result.data["obs_richness"].sum() > 0

    def test_evenness_fills_empty_cells_with_nan(self, workflow, two_cell_cube):
        result = workflow.run(two_cell_cube, "pielou_evenness", "map", cell_size=100,
                              level="country", region="Testland")
        values = _values(result)

        assert values[1] == pytest.approx(1.0)
        assert values[4] == 1.0
        assert np.isnan(values[2]) and np.isnan(values[3])

    def test_density(self, workflow, cell2_cube):
        result = workflow.run(cell2_cube, "density", "map", cell_size=100,
                              level="country", region="Testland")

        assert _values(result)[2] == pytest.approx(10.0 / 10_000.0)

    def test_species_occurrences_columns(self, workflow, cell2_cube):
        result = workflow.run(cell2_cube, "spec_occ", "map", cell_size=100,
                              level="country", region="Testland")

        assert result.value_columns == ("Apus apus", "Bufo bufo", "Canis lupus")
        row = result.value_table.loc[2]
        assert row.tolist() == [5.0, 1.0, 4.0]
        assert (result.value_table.loc[[1, 3, 4]] == 0.0).all().all()

    def test_virtual_cube(self, workflow, virtual_cube):
        result = workflow.run(virtual_cube, "obs_richness", "map", cell_size=100,
                              level="country", region="Testland")

        assert isinstance(result, VirtualSpatialResult)
        assert result.class_tags == ("virtual_indicator_map", "obs_richness")
        assert result.metadata.species_names is None
        assert result.metadata.years_with_obs is None

    def test_small_cell_filter(self, make_config, cell2_cube):
        source = InMemoryBoundarySource()
        source.register("country", "Strip", box(0, 0, 250_000, 100_000), "EPSG:3035")
        workflow = IndicatorWorkflow(make_config(MIN_CELL_AREA_FRACTION=0.6), source)

        result = workflow.run(cell2_cube, "total_occ", "map", cell_size=100,
                              level="country", region="Strip")

        assert _values(result) == {1: 0.0, 2: 10.0}

    def test_coordinate_scale(self, make_config, boundary_source, cell2_occurrences):
        meters = cell2_occurrences.assign(
            xcoord=cell2_occurrences["xcoord"] * 1000,
            ycoord=cell2_occurrences["ycoord"] * 1000,
        )
        cube = ProcessedCube.from_dataframe(meters, crs="EPSG:3035")
        workflow = IndicatorWorkflow(make_config(COORDINATE_SCALE=1), boundary_source)

        result = workflow.run(cube, "total_occ", "map", cell_size=100,
                              level="country", region="Testland")

        assert _values(result)[2] == 10.0

    def test_outside_points_are_ignored(self, workflow, cell2_occurrences):
        far = cell2_occurrences.assign(xcoord=cell2_occurrences["xcoord"] + 1000)
        cube = ProcessedCube.from_dataframe(far, crs="EPSG:3035")

        result = workflow.run(cube, "total_occ", "map", cell_size=100,
                              level="country", region="Testland")

        assert result.data["total_occ"].sum() == 0.0

    def test_warning_can_be_disabled(self, make_config, boundary_source, cell2_cube):
        config = make_config(indicators={"warn_on_empty": False})
        workflow = IndicatorWorkflow(config, boundary_source)

        with warnings.catch_warnings():
            warnings.simplefilter("error", EmptyResultWarning)
            workflow.run(cell2_cube, "total_occ", "map", cell_size=100,
                         level="country", region="Testland")


class TestTimeSeriesWorkflow:

    def test_every_year_present(self, internal_config, cell2_cube):
        workflow = IndicatorWorkflow(internal_config)

        with pytest.warns(EmptyResultWarning, match="1 of 4 years"):
            result = workflow.run(cell2_cube, "obs_richness", "ts")

        assert isinstance(result, TimeSeriesResult)
        assert result.class_tags == ("indicator_ts", "obs_richness")
        assert _values(result) == {2000: 2.0, 2001: 1.0, 2002: 0.0, 2003: 1.0}
        assert result.metadata.level == "unknown"
        assert result.metadata.region == "unknown"
        assert result.coord_range.xmin == 140.0

    def test_cumulative_richness_carries_forward(self, internal_config, cell2_cube):
        result = IndicatorWorkflow(internal_config).run(cell2_cube, "cum_richness", "ts")

        assert _values(result) == {2000: 2.0, 2001: 2.0, 2002: 2.0, 2003: 3.0}

    def test_turnover(self, internal_config, cell2_cube):
        result = IndicatorWorkflow(internal_config).run(cell2_cube, "occ_turnover", "ts")
        values = _values(result)

        assert np.isnan(values[2000])
        assert values[2001] == pytest.approx(0.5)
        assert np.isnan(values[2002])

    def test_spatialized_when_level_given(self, workflow, cell2_occurrences):
        extra = pd.DataFrame({
            "scientificName": ["Vulpes vulpes"],
            "year": [2001],
            "xcoord": [900.0],
            "ycoord": [900.0],
            "obs": [7],
        })
        cube = ProcessedCube.from_dataframe(pd.concat([cell2_occurrences, extra], ignore_index=True),
                                            crs="EPSG:3035")

        result = workflow.run(cube, "total_occ", "ts", cell_size=100,
                              level="country", region="Testland")

        # The out-of-region record is dropped by the join
        assert _values(result)[2001] == 2.0
        assert result.metadata.level == "country"
        # Metadata describes the year-filtered cube before the join
        assert result.metadata.num_species == 4


class TestYearWindow:

    def test_window_clamped_into_cube_range(self, workflow, cell2_cube):
        result = workflow.run(cell2_cube, "total_occ", "ts", first_year=1990, last_year=2050)

        assert (result.metadata.first_year, result.metadata.last_year) == (2000, 2003)
        assert result.data["year"].tolist() == [2000, 2001, 2002, 2003]

    def test_caller_upper_bound_is_honoured(self, workflow, cell2_cube):
        result = workflow.run(cell2_cube, "total_occ", "ts", first_year=2001, last_year=2001)

        assert _values(result) == {2001: 2.0}
        assert result.metadata.num_years == 1
        assert result.metadata.years_with_obs == (2001,)

    def test_num_years_counts_observed_years(self, workflow, cell2_occurrences):
        gappy = cell2_occurrences.assign(year=[2000, 2000, 2010, 2010])
        cube = ProcessedCube.from_dataframe(gappy, crs="EPSG:3035")

        result = workflow.run(cube, "total_occ", "ts")

        assert len(result.data) == 11
        assert result.metadata.num_years == 2
        assert result.metadata.years_with_obs == (2000, 2010)

    def test_reversed_window_raises(self, workflow, cell2_cube):
        with pytest.raises(InvalidInputError, match="after last_year"):
            workflow.run(cell2_cube, "total_occ", "ts", first_year=2003, last_year=2001)

    def test_metadata_snapshot(self, workflow, cell2_cube):
        result = workflow.run(cell2_cube, "total_occ", "map", cell_size=100,
                              level="country", region="Testland", first_year=2000, last_year=2001)
        meta = result.metadata

        assert meta.indicator == "total_occ"
        assert meta.dim_type == "map"
        assert meta.crs == "EPSG:3035"
        assert meta.num_species == 2
        assert meta.species_names == ("Apus apus", "Bufo bufo")
        assert meta.num_kingdoms == 1
        assert meta.kingdoms == ("Animalia",)
        assert meta.num_families == 2


class TestValidation:
    """Bad requests fail before any spatial work."""

    def test_unregistered_indicator(self, guarded_workflow, cell2_cube):
        with pytest.raises(UnsupportedIndicatorError):
            guarded_workflow.run(cell2_cube, "shannon_index", "map", level="country", region="Testland")

    def test_unsupported_mode(self, guarded_workflow, cell2_cube):
        with pytest.raises(UnsupportedIndicatorError, match="does not support 'ts'"):
            guarded_workflow.run(cell2_cube, "density", "ts", level="country", region="Testland")

    def test_bad_dim_type(self, guarded_workflow, cell2_cube):
        with pytest.raises(InvalidInputError, match="dim_type"):
            guarded_workflow.run(cell2_cube, "total_occ", "cube")

    def test_not_a_cube(self, guarded_workflow, cell2_occurrences):
        with pytest.raises(InvalidInputError, match="ProcessedCube or VirtualCube"):
            guarded_workflow.run(cell2_occurrences, "total_occ", "map")

    def test_virtual_cube_rejects_time_series(self, guarded_workflow, virtual_cube):
        with pytest.raises(InvalidInputError, match="Virtual cubes"):
            guarded_workflow.run(virtual_cube, "obs_richness", "ts")

    def test_country_needs_region(self, guarded_workflow, cell2_cube):
        with pytest.raises(ConfigurationError, match="region is required"):
            guarded_workflow.run(cell2_cube, "total_occ", "map", level="country")

    def test_unknown_level(self, guarded_workflow, cell2_cube):
        with pytest.raises(ConfigurationError, match="Unknown spatial level"):
            guarded_workflow.run(cell2_cube, "total_occ", "map", level="province", region="X")

    def test_bad_cell_size(self, guarded_workflow, cell2_cube):
        with pytest.raises(ConfigurationError, match="at least 1 km"):
            guarded_workflow.run(cell2_cube, "total_occ", "map", cell_size=0.2,
                                 level="country", region="Testland")

    def test_map_needs_boundary_source(self, internal_config, cell2_cube):
        with pytest.raises(ConfigurationError, match="boundary source"):
            IndicatorWorkflow(internal_config).run(cell2_cube, "total_occ", "map")

    def test_unknown_region(self, workflow, cell2_cube):
        with pytest.raises(RegionNotFoundError):
            workflow.run(cell2_cube, "total_occ", "map", level="country", region="Atlantis")

    def test_cube_crs_must_match_cube(self, guarded_workflow, cell2_cube):
        with pytest.raises(ProjectionMismatchError, match="cube_crs and the cube"):
            guarded_workflow.run(cell2_cube, "total_occ", "map", level="country",
                                 region="Testland", cube_crs="EPSG:4326")

    def test_geographic_crs_cannot_be_gridded(self, guarded_workflow, cell2_occurrences):
        cube = ProcessedCube.from_dataframe(cell2_occurrences)

        with pytest.raises(ConfigurationError, match="projected reference system"):
            guarded_workflow.run(cube, "total_occ", "map", level="country",
                                 region="Testland", cube_crs="EPSG:4326")

    def test_equivalent_cube_crs_accepted(self, workflow, cell2_cube):
        result = workflow.run(cell2_cube, "total_occ", "map", cell_size=100, level="country",
                              region="Testland", cube_crs="epsg:3035")

        assert _values(result)[2] == 10.0


class TestDeterminism:

    def test_repeated_runs_are_identical(self, workflow, cell2_cube):
        kwargs = dict(cell_size=100, level="country", region="Testland")
        first = workflow.run(cell2_cube, "hill1", "map", **kwargs)
        second = workflow.run(cell2_cube, "hill1", "map", **kwargs)

        pd.testing.assert_frame_equal(first.data.drop(columns="geometry"),
                                      second.data.drop(columns="geometry"))
        assert first.metadata == second.metadata

    def test_functional_entry_point(self, internal_config, boundary_source, cell2_cube):
        kwargs = dict(cell_size=100, level="country", region="Testland")
        via_class = IndicatorWorkflow(internal_config, boundary_source).run(cell2_cube, "ab_rarity", "map", **kwargs)
        via_function = compute_indicator_workflow(cell2_cube, "ab_rarity", "map",
                                                  config=internal_config,
                                                  boundary_source=boundary_source, **kwargs)

        pd.testing.assert_frame_equal(via_class.data.drop(columns="geometry"),
                                      via_function.data.drop(columns="geometry"))

    def test_default_config(self, boundary_source, cell2_cube):
        result = IndicatorWorkflow(boundary_source=boundary_source).run(cell2_cube, "total_occ", "map")

        assert result.metadata.level == "continent"
