"""Pipeline-level fixtures."""

import pytest

from b3ind.pipeline import IndicatorWorkflow


class ExplodingBoundarySource:
    """Boundary source that fails the test if the workflow reaches spatial work."""

    def get_boundary(self, level, region, crs):
        raise AssertionError("spatial work started before validation finished")


@pytest.fixture
def workflow(internal_config, boundary_source):
    return IndicatorWorkflow(config=internal_config, boundary_source=boundary_source)


@pytest.fixture
def guarded_workflow(internal_config):
    return IndicatorWorkflow(config=internal_config, boundary_source=ExplodingBoundarySource())
