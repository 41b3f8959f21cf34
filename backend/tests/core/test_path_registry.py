"""Path Registry — tests for oracle-gated path lifecycle.

Tests cover:
    - Oracle registration is admin-only and write-once
    - store_path assigns 0,1,2,... across owners and returns coded failures
    - Capacity boundary: the max_paths-th creation succeeds, the next fails
    - Rejected calls leave state unchanged (count, records, updates)
    - update_path overwrites fields, preserves status, records updater + history
    - deactivate_path is idempotent and does not refresh the timestamp
    - Existing records cannot be updated or deactivated while no oracle is set
    - Queries: count, active count, per-owner listing
"""

import pytest

from path_registry.core.domain_types import ErrorKind, PathId, Principal
from path_registry.core.errors import RegistryOperationError
from path_registry.core.path_registry import PathRegistry
from path_registry.core.registry_snapshot import registry_state_from_snapshot
from path_registry.core.registry_state import RegistryState
from tests.registry_helpers import (
    ADMIN, BURN, OTHER_OWNER, OWNER, STRANGER, VALID_PATH, ctx,
)


def _store(registry: PathRegistry, owner=OWNER, caller=ADMIN, block_height=0, **overrides):
    fields = {**VALID_PATH, **overrides}
    return registry.store_path(ctx(caller, block_height), owner, **fields)


# ─── set_oracle ──────────────────────────────────────────────────

def test_set_oracle_succeeds_once(registry):
    result = registry.set_oracle(ctx(), ADMIN)
    assert result.ok is True
    assert result.value is True
    assert registry.oracle == ADMIN


def test_second_set_oracle_fails_and_first_remains(registry):
    registry.set_oracle(ctx(), OWNER)
    result = registry.set_oracle(ctx(), STRANGER)
    assert result.ok is False
    assert result.value is False
    assert result.error == ErrorKind.NOT_AUTHORIZED
    assert registry.oracle == OWNER


def test_set_oracle_rejected_for_non_admin(registry):
    result = registry.set_oracle(ctx(STRANGER), STRANGER)
    assert result.ok is False
    assert result.error == ErrorKind.NOT_AUTHORIZED
    assert registry.oracle is None


def test_oracle_need_not_be_admin(registry):
    registry.set_oracle(ctx(), OTHER_OWNER)
    assert _store(registry, caller=ADMIN).error == ErrorKind.NOT_AUTHORIZED
    assert _store(registry, caller=OTHER_OWNER).ok


# ─── store_path ──────────────────────────────────────────────────

def test_store_path_success(oracle_registry):
    result = _store(oracle_registry, block_height=42)
    assert result.ok is True
    assert result.value == 0
    path = oracle_registry.get_path(OWNER, PathId(0))
    assert path.modules == (1, 2, 3)
    assert path.metadata == "Learn Web3 Basics"
    assert path.difficulty == 5
    assert path.estimated_duration == 3600
    assert path.timestamp == 42
    assert path.status is True


def test_ids_are_sequential_across_owners(oracle_registry):
    owners = [OWNER, OTHER_OWNER, OWNER, STRANGER]
    ids = [_store(oracle_registry, owner=o).value for o in owners]
    assert ids == [0, 1, 2, 3]
    assert oracle_registry.get_path(OTHER_OWNER, PathId(1)) is not None
    assert oracle_registry.get_path(OWNER, PathId(1)) is None


def test_store_rejected_without_oracle(registry):
    result = _store(registry)
    assert result.ok is False
    assert result.error == ErrorKind.NOT_AUTHORIZED
    assert result.value == 100
    assert registry.get_path_count() == 0


def test_store_rejected_for_non_oracle_caller(registry):
    registry.set_oracle(ctx(), Principal("ST3ORACLE"))
    result = _store(registry, caller=STRANGER)
    assert result.value == ErrorKind.NOT_AUTHORIZED
    assert registry.get_path(OWNER, PathId(0)) is None


@pytest.mark.parametrize(
    "owner, overrides, expected",
    [
        (BURN, {}, ErrorKind.INVALID_USER),
        (OWNER, {"modules": []}, ErrorKind.INVALID_MODULE_COUNT),
        (OWNER, {"modules": list(range(1, 52))}, ErrorKind.INVALID_MODULE_COUNT),
        (OWNER, {"modules": [1, 0, 3]}, ErrorKind.INVALID_MODULE_ID),
        (OWNER, {"metadata": "x" * 257}, ErrorKind.INVALID_METADATA),
        (OWNER, {"difficulty": 11}, ErrorKind.INVALID_DIFFICULTY),
        (OWNER, {"difficulty": 0}, ErrorKind.INVALID_DIFFICULTY),
        (OWNER, {"estimated_duration": 0}, ErrorKind.INVALID_DURATION),
    ],
)
def test_store_rejects_invalid_input(oracle_registry, owner, overrides, expected):
    result = _store(oracle_registry, owner=owner, **overrides)
    assert result.ok is False
    assert result.error == expected
    assert result.value == int(expected)
    assert oracle_registry.get_path_count() == 0
    assert oracle_registry.state.paths == {}


def test_multiple_violations_report_first_rule(oracle_registry):
    result = _store(
        oracle_registry, owner=BURN, modules=[], metadata="x" * 300,
        difficulty=0, estimated_duration=0,
    )
    assert result.error == ErrorKind.INVALID_USER
    result = _store(oracle_registry, modules=[0], difficulty=0)
    assert result.error == ErrorKind.INVALID_MODULE_ID


def test_boundary_values_accepted(oracle_registry):
    result = _store(
        oracle_registry, modules=list(range(1, 51)), metadata="x" * 256,
        difficulty=10, estimated_duration=1,
    )
    assert result.ok


def test_capacity_boundary():
    registry = PathRegistry(admin=ADMIN, state=RegistryState(max_paths=3))
    registry.set_oracle(ctx(), ADMIN)
    assert [_store(registry).value for _ in range(3)] == [0, 1, 2]
    result = _store(registry)
    assert result.ok is False
    assert result.error == ErrorKind.MAX_PATHS_EXCEEDED
    assert registry.get_path_count() == 3


def test_capacity_reported_before_authorization():
    registry = PathRegistry(admin=ADMIN, state=RegistryState(max_paths=0))
    assert _store(registry, caller=STRANGER).error == ErrorKind.MAX_PATHS_EXCEEDED


def test_store_fails_when_next_key_occupied(oracle_registry):
    _store(oracle_registry)
    # simulate a record already sitting at the next slot
    oracle_registry.state.paths[(OWNER, PathId(1))] = oracle_registry.get_path(OWNER, PathId(0))
    result = _store(oracle_registry)
    assert result.error == ErrorKind.PATH_ALREADY_EXISTS
    assert oracle_registry.get_path_count() == 1


def test_stored_modules_are_copied(oracle_registry):
    modules = [1, 2, 3]
    _store(oracle_registry, modules=modules)
    modules.append(4)
    assert oracle_registry.get_path(OWNER, PathId(0)).modules == (1, 2, 3)


# ─── update_path ─────────────────────────────────────────────────

def test_update_path_success(oracle_registry):
    _store(oracle_registry, block_height=1)
    result = oracle_registry.update_path(
        ctx(block_height=9), OWNER, PathId(0), [4, 5, 6], "Advanced Web3", 7, 7200,
    )
    assert result.ok is True
    assert result.value is True

    path = oracle_registry.get_path(OWNER, PathId(0))
    assert path.modules == (4, 5, 6)
    assert path.metadata == "Advanced Web3"
    assert path.difficulty == 7
    assert path.estimated_duration == 7200
    assert path.timestamp == 9
    assert path.status is True

    update = oracle_registry.get_path_update(OWNER, PathId(0))
    assert update.updated_modules == (4, 5, 6)
    assert update.updated_metadata == "Advanced Web3"
    assert update.updated_difficulty == 7
    assert update.updated_duration == 7200
    assert update.update_timestamp == 9
    assert update.updater == ADMIN


def test_update_missing_path(oracle_registry):
    result = oracle_registry.update_path(ctx(), OWNER, PathId(99), [1], "x", 5, 1)
    assert result.ok is False
    assert result.value is False
    assert result.error == ErrorKind.PATH_NOT_FOUND


def test_update_rejected_for_non_oracle(oracle_registry):
    _store(oracle_registry)
    result = oracle_registry.update_path(ctx(STRANGER), OWNER, PathId(0), [9], "y", 2, 2)
    assert result.error == ErrorKind.NOT_AUTHORIZED
    assert oracle_registry.get_path(OWNER, PathId(0)).modules == (1, 2, 3)
    assert oracle_registry.get_path_update(OWNER, PathId(0)) is None


def test_update_invalid_fields_leave_record_untouched(oracle_registry):
    _store(oracle_registry)
    before = oracle_registry.get_path(OWNER, PathId(0))
    result = oracle_registry.update_path(ctx(), OWNER, PathId(0), [1], "x" * 257, 5, 1)
    assert result.error == ErrorKind.INVALID_METADATA
    assert oracle_registry.get_path(OWNER, PathId(0)) == before
    assert oracle_registry.get_path_update(OWNER, PathId(0)) is None


def test_update_preserves_deactivated_status(oracle_registry):
    _store(oracle_registry)
    oracle_registry.deactivate_path(ctx(), OWNER, PathId(0))
    result = oracle_registry.update_path(ctx(), OWNER, PathId(0), [7], "z", 3, 60)
    assert result.ok
    assert oracle_registry.get_path(OWNER, PathId(0)).status is False


def test_update_history_keeps_every_update(oracle_registry):
    _store(oracle_registry)
    oracle_registry.update_path(ctx(block_height=1), OWNER, PathId(0), [2], "a", 2, 20)
    oracle_registry.update_path(ctx(block_height=2), OWNER, PathId(0), [3], "b", 3, 30)
    history = oracle_registry.get_path_update_history(OWNER, PathId(0))
    assert [u.updated_metadata for u in history] == ["a", "b"]
    assert oracle_registry.get_path_update(OWNER, PathId(0)) == history[-1]
    assert oracle_registry.get_path_update_history(OWNER, PathId(5)) == []


# ─── deactivate_path ─────────────────────────────────────────────

def test_deactivate_path_success(oracle_registry):
    _store(oracle_registry, block_height=3)
    result = oracle_registry.deactivate_path(ctx(block_height=10), OWNER, PathId(0))
    assert result.ok is True
    assert result.value is True
    path = oracle_registry.get_path(OWNER, PathId(0))
    assert path.status is False
    assert path.timestamp == 3


def test_deactivate_is_idempotent(oracle_registry):
    _store(oracle_registry)
    oracle_registry.deactivate_path(ctx(), OWNER, PathId(0))
    before = oracle_registry.get_path(OWNER, PathId(0))
    assert oracle_registry.deactivate_path(ctx(), OWNER, PathId(0)).ok
    assert oracle_registry.get_path(OWNER, PathId(0)) == before


def test_deactivate_missing_path(oracle_registry):
    result = oracle_registry.deactivate_path(ctx(), OWNER, PathId(99))
    assert result.ok is False
    assert result.value is False
    assert result.error == ErrorKind.PATH_NOT_FOUND


def test_deactivate_rejected_for_non_oracle(oracle_registry):
    _store(oracle_registry)
    result = oracle_registry.deactivate_path(ctx(STRANGER), OWNER, PathId(0))
    assert result.error == ErrorKind.NOT_AUTHORIZED
    assert oracle_registry.get_path(OWNER, PathId(0)).status is True


def _registry_without_oracle() -> PathRegistry:
    state = registry_state_from_snapshot({
        "next_path_id": 1,
        "oracle_principal": None,
        "paths": [{"owner": OWNER, "path_id": 0, **VALID_PATH, "timestamp": 1, "status": True}],
    })
    return PathRegistry(admin=ADMIN, state=state)


def test_update_and_deactivate_rejected_without_oracle():
    registry = _registry_without_oracle()
    before = registry.get_path(OWNER, PathId(0))

    updated = registry.update_path(ctx(), OWNER, PathId(0), [9], "y", 2, 2)
    deactivated = registry.deactivate_path(ctx(), OWNER, PathId(0))

    assert updated.error == ErrorKind.NOT_AUTHORIZED
    assert deactivated.error == ErrorKind.NOT_AUTHORIZED
    assert registry.get_path(OWNER, PathId(0)) == before
    assert registry.get_path_update(OWNER, PathId(0)) is None


# ─── queries ─────────────────────────────────────────────────────

def test_path_count_includes_deactivated(oracle_registry):
    _store(oracle_registry, owner=OWNER)
    _store(oracle_registry, owner=OTHER_OWNER, modules=[4, 5, 6], difficulty=6)
    oracle_registry.deactivate_path(ctx(), OWNER, PathId(0))
    assert oracle_registry.get_path_count() == 2
    assert oracle_registry.get_active_path_count() == 1


def test_paths_by_owner_sorted_by_id(oracle_registry):
    _store(oracle_registry, owner=OWNER)
    _store(oracle_registry, owner=OTHER_OWNER)
    _store(oracle_registry, owner=OWNER)
    listing = oracle_registry.get_paths_by_owner(OWNER)
    assert [path_id for path_id, _ in listing] == [0, 2]
    assert oracle_registry.get_paths_by_owner(STRANGER) == []


def test_unwrap_raises_typed_error(oracle_registry):
    with pytest.raises(RegistryOperationError) as exc_info:
        _store(oracle_registry, difficulty=42).unwrap()
    assert exc_info.value.kind == ErrorKind.INVALID_DIFFICULTY
    assert _store(oracle_registry).unwrap() == 0


# ─── end-to-end scenario ─────────────────────────────────────────

def test_create_update_deactivate_scenario(registry):
    oracle = ADMIN
    assert registry.set_oracle(ctx(), oracle).ok
    stored = registry.store_path(ctx(oracle), OWNER, [1, 2, 3], "x", 5, 3600)
    assert stored.ok and stored.value == 0
    assert registry.get_path_count() == 1

    assert registry.update_path(ctx(oracle), OWNER, PathId(0), [4, 5], "y", 7, 7200).ok
    path = registry.get_path(OWNER, PathId(0))
    assert (path.modules, path.metadata, path.difficulty) == ((4, 5), "y", 7)
    assert path.estimated_duration == 7200
    assert path.status is True

    assert registry.deactivate_path(ctx(oracle), OWNER, PathId(0)).ok
    assert registry.get_path(OWNER, PathId(0)).status is False
