"""Service test fixtures — in-memory SQLite + repositories.

Invariants:
    - Every test gets a fresh in-memory SQLite database with the registry schema
    - Services are built through from_settings, like the host process does
"""

import pytest

from path_registry.config import Settings
from path_registry.infrastructure.database import DatabaseSessionManager
from path_registry.infrastructure.registry_repository import (
    InMemoryRegistryRepository, SqlRegistryRepository,
)
from path_registry.services.registry_service import RegistryService


@pytest.fixture
def settings() -> Settings:
    return Settings(_env_file=None, persist=False, admin_principal="ST1TEST")


@pytest.fixture
def db_manager():
    manager = DatabaseSessionManager("sqlite://")
    manager.create_schema()
    yield manager
    manager.close()


@pytest.fixture
def sql_repository(db_manager) -> SqlRegistryRepository:
    return SqlRegistryRepository(db_manager)


@pytest.fixture
def memory_repository() -> InMemoryRegistryRepository:
    return InMemoryRegistryRepository()


@pytest.fixture
def service(settings, memory_repository) -> RegistryService:
    return RegistryService.from_settings(settings, repository=memory_repository)
