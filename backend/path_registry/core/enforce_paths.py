"""Path Rule Enforcement — validates every precondition before a registry write.

Invariants:
    - All functions are PURE: no IO, no side effects, state is only read
    - Return an ErrorKind on violation, None on success
    - validate_* functions chain checks with `or`: first error wins, so the order
      of the chain IS the reported-error order

Design Decisions:
    - Pure functions over method dispatch: testable without a registry instance
    - ErrorKind members are non-zero IntEnums, so `check_a() or check_b()` short-circuits
      on the first violation
    - PathLimits groups the tunable bounds; defaults match the deployed constants
"""

from dataclasses import dataclass
from typing import Sequence

from path_registry.core.domain_types import (
    BURN_PRINCIPAL, ErrorKind, PathId, Principal,
)
from path_registry.core.registry_state import RegistryState


MAX_MODULES: int = 50
MAX_METADATA_LENGTH: int = 256
MIN_DIFFICULTY: int = 1
MAX_DIFFICULTY: int = 10


@dataclass(frozen=True)
class PathLimits:
    """Field bounds applied on create and update."""
    max_modules: int = MAX_MODULES
    max_metadata_length: int = MAX_METADATA_LENGTH
    min_difficulty: int = MIN_DIFFICULTY
    max_difficulty: int = MAX_DIFFICULTY
    burn_principal: Principal = BURN_PRINCIPAL


DEFAULT_LIMITS = PathLimits()


# ─── State checks ────────────────────────────────────────────────

def check_capacity(state: RegistryState) -> ErrorKind | None:
    """Rule 1: no creation once next_path_id reaches max_paths."""
    if state.at_capacity:
        return ErrorKind.MAX_PATHS_EXCEEDED
    return None


def check_oracle(state: RegistryState, caller: Principal) -> ErrorKind | None:
    """Rule 2: an oracle must be set and the caller must be it."""
    if not state.is_oracle(caller):
        return ErrorKind.NOT_AUTHORIZED
    return None


def check_path_exists(
    state: RegistryState, owner: Principal, path_id: PathId,
) -> ErrorKind | None:
    if not state.has_path(owner, path_id):
        return ErrorKind.PATH_NOT_FOUND
    return None


def check_next_slot_free(state: RegistryState, owner: Principal) -> ErrorKind | None:
    """Rule 9: the key about to be assigned must be unoccupied."""
    if state.has_path(owner, PathId(state.next_path_id)):
        return ErrorKind.PATH_ALREADY_EXISTS
    return None


# ─── Field checks ────────────────────────────────────────────────

def check_owner(owner: Principal, limits: PathLimits = DEFAULT_LIMITS) -> ErrorKind | None:
    """Rule 3: the reserved burn identity never owns a path."""
    if owner == limits.burn_principal:
        return ErrorKind.INVALID_USER
    return None


def check_module_count(
    modules: Sequence[int], limits: PathLimits = DEFAULT_LIMITS,
) -> ErrorKind | None:
    """Rule 4: 1..max_modules modules."""
    if not 1 <= len(modules) <= limits.max_modules:
        return ErrorKind.INVALID_MODULE_COUNT
    return None


def check_module_ids(modules: Sequence[int]) -> ErrorKind | None:
    """Rule 5: every module id is positive."""
    if any(module_id <= 0 for module_id in modules):
        return ErrorKind.INVALID_MODULE_ID
    return None


def check_metadata(metadata: str, limits: PathLimits = DEFAULT_LIMITS) -> ErrorKind | None:
    """Rule 6: metadata length (characters) within bound."""
    if len(metadata) > limits.max_metadata_length:
        return ErrorKind.INVALID_METADATA
    return None


def check_difficulty(difficulty: int, limits: PathLimits = DEFAULT_LIMITS) -> ErrorKind | None:
    """Rule 7: difficulty inside [min_difficulty, max_difficulty]."""
    if not limits.min_difficulty <= difficulty <= limits.max_difficulty:
        return ErrorKind.INVALID_DIFFICULTY
    return None


def check_duration(estimated_duration: int) -> ErrorKind | None:
    """Rule 8: duration strictly positive."""
    if estimated_duration <= 0:
        return ErrorKind.INVALID_DURATION
    return None


def validate_path_fields(
    modules: Sequence[int],
    metadata: str,
    difficulty: int,
    estimated_duration: int,
    limits: PathLimits = DEFAULT_LIMITS,
) -> ErrorKind | None:
    """Rules 4-8, shared verbatim by create and update."""
    return (
        check_module_count(modules, limits)
        or check_module_ids(modules)
        or check_metadata(metadata, limits)
        or check_difficulty(difficulty, limits)
        or check_duration(estimated_duration)
    )


# ─── Operation chains ────────────────────────────────────────────

def validate_set_oracle(
    state: RegistryState, caller: Principal, admin: Principal,
) -> ErrorKind | None:
    """Only the admin may set the oracle, and only once."""
    if caller != admin or state.oracle_set:
        return ErrorKind.NOT_AUTHORIZED
    return None


def validate_store_path(
    state: RegistryState,
    caller: Principal,
    owner: Principal,
    modules: Sequence[int],
    metadata: str,
    difficulty: int,
    estimated_duration: int,
    limits: PathLimits = DEFAULT_LIMITS,
) -> ErrorKind | None:
    """Chain all creation checks (rules 1-9). Returns first error or None."""
    return (
        check_capacity(state)
        or check_oracle(state, caller)
        or check_owner(owner, limits)
        or validate_path_fields(
            modules, metadata, difficulty, estimated_duration, limits,
        )
        or check_next_slot_free(state, owner)
    )


def validate_update_path(
    state: RegistryState,
    caller: Principal,
    owner: Principal,
    path_id: PathId,
    modules: Sequence[int],
    metadata: str,
    difficulty: int,
    estimated_duration: int,
    limits: PathLimits = DEFAULT_LIMITS,
) -> ErrorKind | None:
    """Existence, then authorization, then owner, then fields."""
    return (
        check_path_exists(state, owner, path_id)
        or check_oracle(state, caller)
        or check_owner(owner, limits)
        or validate_path_fields(
            modules, metadata, difficulty, estimated_duration, limits,
        )
    )


def validate_deactivate_path(
    state: RegistryState, caller: Principal, owner: Principal, path_id: PathId,
) -> ErrorKind | None:
    return (
        check_path_exists(state, owner, path_id)
        or check_oracle(state, caller)
    )
