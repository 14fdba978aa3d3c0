import pytest

from querymaker import PipelineBuilder


@pytest.fixture
def builder() -> PipelineBuilder:
    return PipelineBuilder()
