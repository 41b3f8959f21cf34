"""Root conftest — shared registry fixtures.

Invariants:
    - Tests never read a developer's .env or persist to a real database file
    - Every test gets a fresh registry with ADMIN as deployer
"""

import os

import pytest

from path_registry.config import get_settings
from path_registry.core.path_registry import PathRegistry
from tests.registry_helpers import ADMIN, ctx

os.environ.setdefault("PATH_REGISTRY_PERSIST", "false")
os.environ.setdefault("PATH_REGISTRY_DATABASE_URL", "sqlite://")


@pytest.fixture(autouse=True)
def _clear_settings_cache():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def registry() -> PathRegistry:
    """Fresh registry, no oracle set."""
    return PathRegistry(admin=ADMIN)


@pytest.fixture
def oracle_registry(registry: PathRegistry) -> PathRegistry:
    """Registry with ADMIN also acting as oracle."""
    assert registry.set_oracle(ctx(), ADMIN).ok
    return registry
