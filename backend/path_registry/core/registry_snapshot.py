"""Registry Snapshot — serialization / deserialization for RegistryState.

Invariants:
    - to_snapshot produces a JSON-safe dict (no tuples as keys, no dataclasses)
    - from_snapshot reconstructs an equivalent RegistryState from that dict
    - path_updates is NOT serialized: it is rebuilt as the last entry of each history
    - Missing optional keys fall back to RegistryState defaults

Design Decisions:
    - Composite keys flattened to {"owner", "path_id"} entries: JSON objects cannot
      carry tuple keys
    - Entries sorted by (path_id, owner): identical states give identical snapshots
    - No schema validation here; the shell validates with pydantic before calling
      from_snapshot (core stays dependency-free)
"""

from path_registry.core.domain_types import BlockHeight, PathId, Principal
from path_registry.core.registry_state import (
    DEFAULT_MAX_PATHS, LearningPath, PathUpdate, RegistryState,
)

SNAPSHOT_VERSION: int = 1


def _path_to_dict(path: LearningPath) -> dict:
    return {
        "modules": list(path.modules),
        "metadata": path.metadata,
        "difficulty": path.difficulty,
        "estimated_duration": path.estimated_duration,
        "timestamp": path.timestamp,
        "status": path.status,
    }


def _update_to_dict(update: PathUpdate) -> dict:
    return {
        "updated_modules": list(update.updated_modules),
        "updated_metadata": update.updated_metadata,
        "updated_difficulty": update.updated_difficulty,
        "updated_duration": update.updated_duration,
        "update_timestamp": update.update_timestamp,
        "updater": update.updater,
    }


def path_from_dict(data: dict) -> LearningPath:
    return LearningPath(
        modules=tuple(data["modules"]),
        metadata=data["metadata"],
        difficulty=data["difficulty"],
        estimated_duration=data["estimated_duration"],
        timestamp=BlockHeight(data["timestamp"]),
        status=data["status"],
    )


def update_from_dict(data: dict) -> PathUpdate:
    return PathUpdate(
        updated_modules=tuple(data["updated_modules"]),
        updated_metadata=data["updated_metadata"],
        updated_difficulty=data["updated_difficulty"],
        updated_duration=data["updated_duration"],
        update_timestamp=BlockHeight(data["update_timestamp"]),
        updater=Principal(data["updater"]),
    )


def _sort_key(key: tuple[Principal, PathId]) -> tuple[int, str]:
    owner, path_id = key
    return path_id, owner


def registry_state_to_snapshot(state: RegistryState) -> dict:
    """Serialize RegistryState to a JSON-safe dict. Pure, no IO."""
    return {
        "version": SNAPSHOT_VERSION,
        "max_paths": state.max_paths,
        "next_path_id": state.next_path_id,
        "oracle_principal": state.oracle_principal,
        "paths": [
            {"owner": owner, "path_id": path_id, **_path_to_dict(state.paths[(owner, path_id)])}
            for owner, path_id in sorted(state.paths, key=_sort_key)
        ],
        "update_history": [
            {
                "owner": owner,
                "path_id": path_id,
                "updates": [_update_to_dict(u) for u in state.update_history[(owner, path_id)]],
            }
            for owner, path_id in sorted(state.update_history, key=_sort_key)
        ],
    }


def registry_state_from_snapshot(data: dict) -> RegistryState:
    """Reconstruct RegistryState from a snapshot dict. Pure, no IO."""
    state = RegistryState()
    if not data:
        return state

    state.max_paths = data.get("max_paths", DEFAULT_MAX_PATHS)
    state.next_path_id = data.get("next_path_id", 0)
    oracle = data.get("oracle_principal")
    state.oracle_principal = Principal(oracle) if oracle is not None else None

    for entry in data.get("paths", []):
        key = (Principal(entry["owner"]), PathId(entry["path_id"]))
        state.paths[key] = path_from_dict(entry)

    for entry in data.get("update_history", []):
        key = (Principal(entry["owner"]), PathId(entry["path_id"]))
        for raw in entry["updates"]:
            state.record_update(key, update_from_dict(raw))

    return state
