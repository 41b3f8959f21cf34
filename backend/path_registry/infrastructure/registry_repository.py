"""Registry Repositories — RegistryRepository implementations for the shell.

Invariants:
    - load() returns None when nothing was ever saved
    - save() replaces the whole persisted state in one transaction
    - save_changes() writes registry_meta plus the given keys in one transaction;
      update rows already stored for a key are never rewritten, only appended to
    - Both implementations round-trip through registry_snapshot, so they agree on format

Design Decisions:
    - InMemory stores a snapshot dict, not the live RegistryState: later mutations of
      the registry cannot leak into what was "persisted"
    - Sql upserts with session.merge() on the primary key: portable across SQLite
      and PostgreSQL without dialect-specific INSERT ... ON CONFLICT
"""

import copy
from typing import Iterable

from sqlalchemy import delete, func, select

from path_registry.core.domain_types import PathKey
from path_registry.core.registry_snapshot import (
    registry_state_from_snapshot, registry_state_to_snapshot,
)
from path_registry.core.registry_state import LearningPath, PathUpdate, RegistryState
from path_registry.infrastructure.database import DatabaseSessionManager
from path_registry.models.registry import (
    META_ROW_ID, LearningPathRow, PathUpdateRow, RegistryMetaRow,
)


class InMemoryRegistryRepository:
    """Process-local repository, used in tests and when persistence is off."""

    def __init__(self) -> None:
        self._snapshot: dict | None = None

    def load(self) -> RegistryState | None:
        if self._snapshot is None:
            return None
        return registry_state_from_snapshot(copy.deepcopy(self._snapshot))

    def save(self, state: RegistryState) -> None:
        self._snapshot = registry_state_to_snapshot(state)

    def save_changes(self, state: RegistryState, keys: Iterable[PathKey] = ()) -> None:
        self.save(state)


class SqlRegistryRepository:
    """SQLAlchemy-backed repository over registry_meta / learning_paths / path_updates."""

    def __init__(self, db: DatabaseSessionManager):
        self._db = db

    def load(self) -> RegistryState | None:
        with self._db.session() as session:
            meta = session.get(RegistryMetaRow, META_ROW_ID)
            if meta is None:
                return None
            path_rows = session.scalars(select(LearningPathRow)).all()
            update_rows = session.scalars(
                select(PathUpdateRow).order_by(
                    PathUpdateRow.owner, PathUpdateRow.path_id, PathUpdateRow.sequence,
                )
            ).all()
            snapshot = {
                "max_paths": meta.max_paths,
                "next_path_id": meta.next_path_id,
                "oracle_principal": meta.oracle_principal,
                "paths": [_path_row_to_dict(row) for row in path_rows],
                "update_history": _group_updates(update_rows),
            }
        return registry_state_from_snapshot(snapshot)

    def save(self, state: RegistryState) -> None:
        with self._db.session() as session:
            session.execute(delete(PathUpdateRow))
            session.execute(delete(LearningPathRow))
            session.execute(delete(RegistryMetaRow))
            session.add(_meta_row(state))
            session.add_all(
                _path_row(key, path) for key, path in state.paths.items()
            )
            session.add_all(
                _update_row(key, sequence, update)
                for key, history in state.update_history.items()
                for sequence, update in enumerate(history)
            )
            session.commit()

    def save_changes(self, state: RegistryState, keys: Iterable[PathKey] = ()) -> None:
        with self._db.session() as session:
            session.merge(_meta_row(state))
            for key in keys:
                session.merge(_path_row(key, state.paths[key]))
                owner, path_id = key
                stored = session.scalar(
                    select(func.count()).select_from(PathUpdateRow).where(
                        PathUpdateRow.owner == owner, PathUpdateRow.path_id == path_id,
                    )
                )
                history = state.update_history.get(key, [])
                session.add_all(
                    _update_row(key, sequence, history[sequence])
                    for sequence in range(stored, len(history))
                )
            session.commit()


def _meta_row(state: RegistryState) -> RegistryMetaRow:
    return RegistryMetaRow(
        id=META_ROW_ID,
        max_paths=state.max_paths,
        next_path_id=state.next_path_id,
        oracle_principal=state.oracle_principal,
    )


def _path_row(key: PathKey, path: LearningPath) -> LearningPathRow:
    owner, path_id = key
    return LearningPathRow(
        owner=owner,
        path_id=path_id,
        modules=list(path.modules),
        path_metadata=path.metadata,
        difficulty=path.difficulty,
        estimated_duration=path.estimated_duration,
        timestamp=path.timestamp,
        status=path.status,
    )


def _update_row(key: PathKey, sequence: int, update: PathUpdate) -> PathUpdateRow:
    owner, path_id = key
    return PathUpdateRow(
        owner=owner,
        path_id=path_id,
        sequence=sequence,
        updated_modules=list(update.updated_modules),
        updated_metadata=update.updated_metadata,
        updated_difficulty=update.updated_difficulty,
        updated_duration=update.updated_duration,
        update_timestamp=update.update_timestamp,
        updater=update.updater,
    )


def _path_row_to_dict(row: LearningPathRow) -> dict:
    return {
        "owner": row.owner,
        "path_id": row.path_id,
        "modules": list(row.modules),
        "metadata": row.path_metadata,
        "difficulty": row.difficulty,
        "estimated_duration": row.estimated_duration,
        "timestamp": row.timestamp,
        "status": row.status,
    }


def _group_updates(rows) -> list[dict]:
    """Group ordered update rows into per-key history entries."""
    grouped: dict[tuple[str, int], list[dict]] = {}
    for row in rows:
        grouped.setdefault((row.owner, row.path_id), []).append({
            "updated_modules": list(row.updated_modules),
            "updated_metadata": row.updated_metadata,
            "updated_difficulty": row.updated_difficulty,
            "updated_duration": row.updated_duration,
            "update_timestamp": row.update_timestamp,
            "updater": row.updater,
        })
    return [
        {"owner": owner, "path_id": path_id, "updates": updates}
        for (owner, path_id), updates in grouped.items()
    ]
