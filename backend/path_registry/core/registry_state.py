"""Registry State — in-memory store for path records, updates, and the oracle.

Invariants:
    - next_path_id == number of successful creations; never decremented
    - oracle_principal is write-once: None until set, then fixed
    - One record per (owner, path_id) key; records are never deleted
    - path_updates[key] is always the last element of update_history[key]

Design Decisions:
    - Single dict keyed by (owner, path_id) tuple, not nested maps: existence and
      uniqueness checks are one O(1) lookup
    - Frozen record dataclasses with tuple modules: a query result cannot be used
      to mutate stored state
    - Dataclass with computed properties: pure, deterministic, testable without mocks
"""

from dataclasses import dataclass, field

from path_registry.core.domain_types import (
    BlockHeight, PathId, PathKey, Principal,
)

DEFAULT_MAX_PATHS: int = 10_000


@dataclass(frozen=True)
class LearningPath:
    """A stored learning path. status=True means active."""
    modules: tuple[int, ...]
    metadata: str
    difficulty: int
    estimated_duration: int
    timestamp: BlockHeight
    status: bool = True


@dataclass(frozen=True)
class PathUpdate:
    """A single applied update to a learning path."""
    updated_modules: tuple[int, ...]
    updated_metadata: str
    updated_difficulty: int
    updated_duration: int
    update_timestamp: BlockHeight
    updater: Principal


@dataclass
class RegistryState:
    """Process-wide registry state — pure dataclass, no IO."""

    max_paths: int = DEFAULT_MAX_PATHS

    # Sequential id counter; equals the count of created paths
    next_path_id: int = 0

    # Write-once oracle identity
    oracle_principal: Principal | None = None

    paths: dict[PathKey, LearningPath] = field(default_factory=dict)

    # Latest update per key
    path_updates: dict[PathKey, PathUpdate] = field(default_factory=dict)

    # Append-only update log per key
    update_history: dict[PathKey, list[PathUpdate]] = field(default_factory=dict)

    @property
    def oracle_set(self) -> bool:
        return self.oracle_principal is not None

    @property
    def at_capacity(self) -> bool:
        return self.next_path_id >= self.max_paths

    @property
    def active_path_count(self) -> int:
        return sum(1 for path in self.paths.values() if path.status)

    def is_oracle(self, caller: Principal) -> bool:
        return self.oracle_set and caller == self.oracle_principal

    def has_path(self, owner: Principal, path_id: PathId) -> bool:
        return (owner, path_id) in self.paths

    def record_update(self, key: PathKey, update: PathUpdate) -> None:
        """Store update as latest and append it to the history. Pure state mutation."""
        self.path_updates[key] = update
        self.update_history.setdefault(key, []).append(update)
