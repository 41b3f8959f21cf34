"""Registry Configuration — environment-driven settings via pydantic-settings.

Invariants:
    - Every setting can be overridden with a PATH_REGISTRY_* environment variable
    - get_settings() is cached (lru_cache) — single instance per process
    - Bounds must be consistent: min_difficulty <= max_difficulty, max_paths > 0

Design Decisions:
    - pydantic-settings over raw os.environ: validation, type coercion, .env file support
    - Defaults match the deployed registry constants: works out-of-the-box
"""

from functools import lru_cache

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from path_registry.core.domain_types import BURN_PRINCIPAL, Principal
from path_registry.core.enforce_paths import PathLimits


class Settings(BaseSettings):
    """Registry settings from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env", env_prefix="PATH_REGISTRY_", case_sensitive=False,
    )

    # Capacity and field bounds
    max_paths: int = Field(10_000, gt=0)
    max_modules: int = Field(50, gt=0)
    max_metadata_length: int = Field(256, ge=0)
    min_difficulty: int = 1
    max_difficulty: int = 10

    # Identities
    burn_principal: str = BURN_PRINCIPAL
    admin_principal: str = "ST1TEST"

    # Persistence
    persist: bool = False
    database_url: str = "sqlite:///path_registry.db"

    # Observability
    log_level: str = "INFO"
    log_format: str = "json"

    @model_validator(mode="after")
    def check_difficulty_bounds(self) -> "Settings":
        if self.min_difficulty > self.max_difficulty:
            raise ValueError("min_difficulty must not exceed max_difficulty")
        return self

    def path_limits(self) -> PathLimits:
        return PathLimits(
            max_modules=self.max_modules,
            max_metadata_length=self.max_metadata_length,
            min_difficulty=self.min_difficulty,
            max_difficulty=self.max_difficulty,
            burn_principal=Principal(self.burn_principal),
        )


@lru_cache
def get_settings() -> Settings:
    return Settings()
