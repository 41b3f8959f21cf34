"""Path Registry — oracle-gated creation, update, and deactivation of learning paths.

Invariants:
    - Each mutating call runs its full validate_* chain BEFORE touching state;
      a failed call returns OpResult(ok=False) and leaves state byte-for-byte unchanged
    - Caller identity and block height come from the CallContext, never generated here
    - update_path preserves status; deactivate_path preserves timestamp
    - Queries are read-only and unauthenticated

Design Decisions:
    - Thin class over RegistryState + enforce_paths: validation is pure, this class only
      sequences validate -> write (ADR: ExMA functional core)
    - Unified error kinds: update/deactivate report the same ErrorKind taxonomy as
      store_path while keeping their boolean value contract
    - set_oracle gated on an admin identity fixed at construction (the deployer)
"""

from typing import Sequence

from path_registry.core.domain_types import (
    CallContext, PathId, Principal,
)
from path_registry.core.enforce_paths import (
    DEFAULT_LIMITS,
    PathLimits,
    validate_deactivate_path,
    validate_set_oracle,
    validate_store_path,
    validate_update_path,
)
from path_registry.core.op_result import OpResult
from path_registry.core.registry_state import (
    LearningPath, PathUpdate, RegistryState,
)


class PathRegistry:
    """Single-writer learning path registry."""

    def __init__(
        self,
        admin: Principal,
        state: RegistryState | None = None,
        limits: PathLimits = DEFAULT_LIMITS,
    ):
        self.admin = admin
        self.state = state if state is not None else RegistryState()
        self.limits = limits

    # ─── Oracle ──────────────────────────────────────────────────

    def set_oracle(self, ctx: CallContext, candidate: Principal) -> OpResult:
        error = validate_set_oracle(self.state, ctx.caller, self.admin)
        if error:
            return OpResult.failure(error)
        self.state.oracle_principal = candidate
        return OpResult.success(True)

    @property
    def oracle(self) -> Principal | None:
        return self.state.oracle_principal

    # ─── Mutations ───────────────────────────────────────────────

    def store_path(
        self,
        ctx: CallContext,
        owner: Principal,
        modules: Sequence[int],
        metadata: str,
        difficulty: int,
        estimated_duration: int,
    ) -> OpResult:
        """Create a path at (owner, next_path_id). Value is the new PathId."""
        error = validate_store_path(
            self.state, ctx.caller, owner, modules, metadata,
            difficulty, estimated_duration, self.limits,
        )
        if error:
            return OpResult.coded_failure(error)

        path_id = PathId(self.state.next_path_id)
        self.state.paths[(owner, path_id)] = LearningPath(
            modules=tuple(modules),
            metadata=metadata,
            difficulty=difficulty,
            estimated_duration=estimated_duration,
            timestamp=ctx.block_height,
            status=True,
        )
        self.state.next_path_id += 1
        return OpResult.success(path_id)

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
        """Overwrite a path's fields, keep its status, and record the update."""
        error = validate_update_path(
            self.state, ctx.caller, owner, path_id, modules, metadata,
            difficulty, estimated_duration, self.limits,
        )
        if error:
            return OpResult.failure(error)

        key = (owner, path_id)
        new_modules = tuple(modules)
        self.state.paths[key] = LearningPath(
            modules=new_modules,
            metadata=metadata,
            difficulty=difficulty,
            estimated_duration=estimated_duration,
            timestamp=ctx.block_height,
            status=self.state.paths[key].status,
        )
        self.state.record_update(key, PathUpdate(
            updated_modules=new_modules,
            updated_metadata=metadata,
            updated_difficulty=difficulty,
            updated_duration=estimated_duration,
            update_timestamp=ctx.block_height,
            updater=ctx.caller,
        ))
        return OpResult.success(True)

    def deactivate_path(
        self, ctx: CallContext, owner: Principal, path_id: PathId,
    ) -> OpResult:
        """Set status=False. Idempotent; timestamp is not refreshed."""
        error = validate_deactivate_path(self.state, ctx.caller, owner, path_id)
        if error:
            return OpResult.failure(error)

        key = (owner, path_id)
        path = self.state.paths[key]
        if path.status:
            self.state.paths[key] = LearningPath(
                modules=path.modules,
                metadata=path.metadata,
                difficulty=path.difficulty,
                estimated_duration=path.estimated_duration,
                timestamp=path.timestamp,
                status=False,
            )
        return OpResult.success(True)

    # ─── Queries ─────────────────────────────────────────────────

    def get_path(self, owner: Principal, path_id: PathId) -> LearningPath | None:
        return self.state.paths.get((owner, path_id))

    def get_path_update(self, owner: Principal, path_id: PathId) -> PathUpdate | None:
        return self.state.path_updates.get((owner, path_id))

    def get_path_update_history(
        self, owner: Principal, path_id: PathId,
    ) -> list[PathUpdate]:
        """All updates applied to the path, oldest first."""
        return list(self.state.update_history.get((owner, path_id), []))

    def get_path_count(self) -> int:
        """Total paths ever created, deactivated ones included."""
        return self.state.next_path_id

    def get_active_path_count(self) -> int:
        return self.state.active_path_count

    def get_paths_by_owner(self, owner: Principal) -> list[tuple[PathId, LearningPath]]:
        return sorted(
            (
                (path_id, path)
                for (path_owner, path_id), path in self.state.paths.items()
                if path_owner == owner
            ),
            key=lambda item: item[0],
        )
