import pytest

from xtpl.engine import TemplateProcessor
from xtpl.filters.registry import FilterRegistry, create_default_registry
from xtpl.types import ExpandOptions


@pytest.fixture(scope="session")
def registry() -> FilterRegistry:
    return create_default_registry()


@pytest.fixture
def processor(registry) -> TemplateProcessor:
    """Processor with case-sensitive environment lookups on every platform."""
    return TemplateProcessor(registry, ExpandOptions(env_case_sensitive=True))
