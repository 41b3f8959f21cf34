"""Snapshot Schemas — Pydantic models that validate registry snapshots at the boundary.

Invariants:
    - Shape and types only for fields; configured bounds are checked by the service
    - path_id < next_path_id for every record; next_path_id <= max_paths
    - No duplicate (owner, path_id) keys

Design Decisions:
    - Validation lives in the shell, not the core: registry_snapshot stays dependency-free
    - StrictInt / StrictBool: "5" or 1.0 in a snapshot is corruption, not a value to coerce
"""

from pydantic import (
    BaseModel, Field, StrictBool, StrictInt, model_validator,
)


class PathRecordSchema(BaseModel):
    """One stored learning path, keyed by owner and path_id."""
    owner: str = Field(min_length=1)
    path_id: StrictInt = Field(ge=0)
    modules: list[StrictInt]
    metadata: str
    difficulty: StrictInt
    estimated_duration: StrictInt
    timestamp: StrictInt = Field(ge=0)
    status: StrictBool


class PathUpdateSchema(BaseModel):
    updated_modules: list[StrictInt]
    updated_metadata: str
    updated_difficulty: StrictInt
    updated_duration: StrictInt
    update_timestamp: StrictInt = Field(ge=0)
    updater: str = Field(min_length=1)


class UpdateHistorySchema(BaseModel):
    owner: str = Field(min_length=1)
    path_id: StrictInt = Field(ge=0)
    updates: list[PathUpdateSchema] = Field(min_length=1)


class RegistrySnapshotSchema(BaseModel):
    """Whole-registry snapshot — cross-validates ids, keys, and history."""
    version: StrictInt = 1
    max_paths: StrictInt = Field(10_000, gt=0)
    next_path_id: StrictInt = Field(0, ge=0)
    oracle_principal: str | None = Field(None, min_length=1)
    paths: list[PathRecordSchema] = Field(default_factory=list)
    update_history: list[UpdateHistorySchema] = Field(default_factory=list)

    @model_validator(mode="after")
    def check_consistency(self) -> "RegistrySnapshotSchema":
        if self.next_path_id > self.max_paths:
            raise ValueError("next_path_id exceeds max_paths")
        keys = [(p.owner, p.path_id) for p in self.paths]
        if len(keys) != len(set(keys)):
            raise ValueError("duplicate (owner, path_id) key")
        if any(path_id >= self.next_path_id for _, path_id in keys):
            raise ValueError("path_id not below next_path_id")
        known = set(keys)
        for entry in self.update_history:
            if (entry.owner, entry.path_id) not in known:
                raise ValueError(
                    f"update history for unknown path ({entry.owner}, {entry.path_id})"
                )
        return self
