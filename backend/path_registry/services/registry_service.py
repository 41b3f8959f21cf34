"""Registry Service — imperative shell around the pure PathRegistry.

Invariants:
    - One RLock guards the ENTIRE registry state: next_path_id is shared across keys,
      so per-key locking would break id assignment
    - Every mutating call: lock -> core call -> persist on success -> log -> unlock
    - A successful call persists only the registry fields and the key it touched
    - A storage failure after an in-memory write restores the last persisted state
      and re-raises DatabaseError (memory never runs ahead of storage)
    - Snapshots are validated (pydantic shape + configured field bounds) and saved
      before they replace live state
    - Settings.max_paths wins over a persisted capacity, but never drops below the
      number of paths already created

Design Decisions:
    - Lock lives here, not in core: the core stays single-threaded and pure
    - Failures logged at WARNING with error_code; the core itself never logs
    - from_settings() wires repository/limits/admin from Settings (ADR: one composition root)
"""

import logging
import threading
from typing import Sequence

from pydantic import ValidationError

from path_registry.config import Settings, get_settings
from path_registry.core.domain_types import (
    CallContext, Operation, PathId, Principal,
)
from path_registry.core.enforce_paths import check_owner, validate_path_fields
from path_registry.core.errors import DatabaseError, SnapshotError
from path_registry.core.op_result import OpResult
from path_registry.core.path_registry import PathRegistry
from path_registry.core.registry_snapshot import (
    registry_state_from_snapshot, registry_state_to_snapshot,
)
from path_registry.core.registry_state import (
    LearningPath, PathUpdate, RegistryState,
)
from path_registry.core.repository_protocols import RegistryRepository
from path_registry.infrastructure.database import DatabaseSessionManager
from path_registry.infrastructure.registry_repository import SqlRegistryRepository
from path_registry.schemas.snapshot import RegistrySnapshotSchema

logger = logging.getLogger(__name__)


class RegistryService:
    """Thread-safe, optionally persistent facade over PathRegistry."""

    def __init__(
        self,
        registry: PathRegistry,
        repository: RegistryRepository | None = None,
    ):
        self._registry = registry
        self._repository = repository
        self._lock = threading.RLock()

    @classmethod
    def from_settings(
        cls,
        settings: Settings | None = None,
        repository: RegistryRepository | None = None,
    ) -> "RegistryService":
        """Build a service from settings, restoring persisted state when present."""
        settings = settings or get_settings()
        if repository is None and settings.persist:
            db = DatabaseSessionManager(settings.database_url)
            db.create_schema()
            repository = SqlRegistryRepository(db)

        state = repository.load() if repository is not None else None
        if state is None:
            state = RegistryState(max_paths=settings.max_paths)
        else:
            logger.info(
                f"Restored registry with {state.next_path_id} path(s)",
                extra={"operation": "restore"},
            )
            _apply_capacity(state, settings.max_paths)
        registry = PathRegistry(
            admin=Principal(settings.admin_principal),
            state=state,
            limits=settings.path_limits(),
        )
        return cls(registry, repository)

    @property
    def registry(self) -> PathRegistry:
        return self._registry

    # ─── Mutations ───────────────────────────────────────────────

    def set_oracle(self, ctx: CallContext, candidate: Principal) -> OpResult:
        with self._lock:
            result = self._registry.set_oracle(ctx, candidate)
            self._commit(Operation.SET_ORACLE, ctx, result)
            return result

    def store_path(
        self,
        ctx: CallContext,
        owner: Principal,
        modules: Sequence[int],
        metadata: str,
        difficulty: int,
        estimated_duration: int,
    ) -> OpResult:
        with self._lock:
            result = self._registry.store_path(
                ctx, owner, modules, metadata, difficulty, estimated_duration,
            )
            path_id = result.value if result.ok else None
            self._commit(Operation.STORE_PATH, ctx, result, owner, path_id)
            return result

    def update_path(
        self,
        ctx: CallContext,
        owner: Principal,
        path_id: PathId,
        modules: Sequence[int],
        metadata: str,
        difficulty: int,
        estimated_duration: int,
    ) -> OpResult:
        with self._lock:
            result = self._registry.update_path(
                ctx, owner, path_id, modules, metadata, difficulty, estimated_duration,
            )
            self._commit(Operation.UPDATE_PATH, ctx, result, owner, path_id)
            return result

    def deactivate_path(
        self, ctx: CallContext, owner: Principal, path_id: PathId,
    ) -> OpResult:
        with self._lock:
            result = self._registry.deactivate_path(ctx, owner, path_id)
            self._commit(Operation.DEACTIVATE_PATH, ctx, result, owner, path_id)
            return result

    # ─── Queries ─────────────────────────────────────────────────

    def get_path(self, owner: Principal, path_id: PathId) -> LearningPath | None:
        with self._lock:
            return self._registry.get_path(owner, path_id)

    def get_path_update(self, owner: Principal, path_id: PathId) -> PathUpdate | None:
        with self._lock:
            return self._registry.get_path_update(owner, path_id)

    def get_path_update_history(
        self, owner: Principal, path_id: PathId,
    ) -> list[PathUpdate]:
        with self._lock:
            return self._registry.get_path_update_history(owner, path_id)

    def get_path_count(self) -> int:
        with self._lock:
            return self._registry.get_path_count()

    def get_active_path_count(self) -> int:
        with self._lock:
            return self._registry.get_active_path_count()

    def get_paths_by_owner(self, owner: Principal) -> list[tuple[PathId, LearningPath]]:
        with self._lock:
            return self._registry.get_paths_by_owner(owner)

    # ─── Snapshots ───────────────────────────────────────────────

    def export_snapshot(self) -> dict:
        with self._lock:
            return registry_state_to_snapshot(self._registry.state)

    def load_snapshot(self, data: dict) -> None:
        """Validate a snapshot and replace the live state with it."""
        try:
            validated = RegistrySnapshotSchema.model_validate(data)
        except ValidationError as e:
            raise SnapshotError(f"{e.error_count()} validation error(s): {e}") from e

        snapshot = validated.model_dump()
        self._check_field_bounds(snapshot)
        state = registry_state_from_snapshot(snapshot)
        with self._lock:
            if self._repository is not None:
                try:
                    self._repository.save(state)
                except DatabaseError:
                    logger.error(
                        "Snapshot not persisted, keeping current state",
                        extra={"operation": "load_snapshot"},
                    )
                    raise
            self._registry.state = state
        logger.info(
            f"Loaded snapshot with {state.next_path_id} path(s)",
            extra={"operation": "load_snapshot"},
        )

    # ─── Internal ────────────────────────────────────────────────

    def _check_field_bounds(self, snapshot: dict) -> None:
        limits = self._registry.limits
        for entry in snapshot["paths"]:
            error = check_owner(entry["owner"], limits) or validate_path_fields(
                entry["modules"], entry["metadata"], entry["difficulty"],
                entry["estimated_duration"], limits,
            )
            if error:
                raise SnapshotError(
                    f"path ({entry['owner']}, {entry['path_id']}) violates {error.name}"
                )
        for entry in snapshot["update_history"]:
            for update in entry["updates"]:
                error = validate_path_fields(
                    update["updated_modules"], update["updated_metadata"],
                    update["updated_difficulty"], update["updated_duration"], limits,
                )
                if error:
                    raise SnapshotError(
                        f"update of ({entry['owner']}, {entry['path_id']}) "
                        f"violates {error.name}"
                    )

    def _commit(
        self,
        operation: Operation,
        ctx: CallContext,
        result: OpResult,
        owner: Principal | None = None,
        path_id: int | None = None,
    ) -> None:
        """Persist a successful mutation and log the outcome. Caller holds the lock."""
        extra = {
            "operation": operation.value,
            "caller": ctx.caller,
            "owner": owner,
            "path_id": path_id,
            "block_height": ctx.block_height,
        }
        if not result.ok:
            logger.warning(
                f"{operation.value} rejected: {result.error.name}",
                extra={**extra, "error_code": int(result.error)},
            )
            return

        if self._repository is not None:
            keys = [(owner, PathId(path_id))] if owner is not None else []
            try:
                self._repository.save_changes(self._registry.state, keys)
            except DatabaseError:
                logger.error(
                    f"{operation.value} not persisted, restoring last saved state",
                    extra=extra,
                )
                self._registry.state = self._repository.load() or RegistryState(
                    max_paths=self._registry.state.max_paths,
                )
                raise
        logger.info(f"{operation.value} succeeded", extra=extra)


def _apply_capacity(state: RegistryState, max_paths: int) -> None:
    """Apply the configured capacity to restored state, clamped to next_path_id."""
    if state.max_paths == max_paths:
        return
    applied = max(max_paths, state.next_path_id)
    logger.warning(
        f"Persisted max_paths={state.max_paths} differs from configured "
        f"{max_paths}; using {applied}",
        extra={"operation": "restore"},
    )
    state.max_paths = applied
