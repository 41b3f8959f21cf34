"""Error Hierarchy — tests for error categorization and OpResult conversion."""

import pytest

from path_registry.core.domain_types import ErrorKind
from path_registry.core.errors import (
    DatabaseError, ErrorCategory, ErrorContext, ErrorSeverity,
    PathRegistryError, RegistryOperationError, SnapshotError, category_for,
)
from path_registry.core.op_result import OpResult


def test_kind_categories():
    assert category_for(ErrorKind.NOT_AUTHORIZED) == ErrorCategory.AUTHORIZATION
    assert category_for(ErrorKind.PATH_NOT_FOUND) == ErrorCategory.RESOURCE_NOT_FOUND
    assert category_for(ErrorKind.PATH_ALREADY_EXISTS) == ErrorCategory.CONFLICT
    assert category_for(ErrorKind.MAX_PATHS_EXCEEDED) == ErrorCategory.CAPACITY
    assert category_for(ErrorKind.INVALID_METADATA) == ErrorCategory.VALIDATION


def test_registry_operation_error_response():
    error = RegistryOperationError(
        ErrorKind.INVALID_DURATION,
        ErrorContext(operation="store_path", owner="ST2USER", path_id=None),
    )
    body = error.to_response()["error"]
    assert body["code"] == "INVALID_DURATION"
    assert body["category"] == "validation"
    assert body["severity"] == "warning"
    assert body["context"]["operation"] == "store_path"
    assert body["context"]["owner"] == "ST2USER"


def test_all_errors_share_base():
    for error in (
        RegistryOperationError(ErrorKind.NOT_AUTHORIZED),
        SnapshotError("bad"),
        DatabaseError("gone", "commit"),
    ):
        assert isinstance(error, PathRegistryError)
    assert DatabaseError("gone", "commit").severity == ErrorSeverity.CRITICAL


def test_op_result_shapes():
    assert OpResult.success(3) == OpResult(ok=True, value=3, error=None)
    assert OpResult.failure(ErrorKind.PATH_NOT_FOUND).value is False
    coded = OpResult.coded_failure(ErrorKind.INVALID_USER)
    assert coded.value == 111
    assert coded.error == ErrorKind.INVALID_USER


def test_unwrap_attaches_context():
    context = ErrorContext(operation="deactivate_path")
    with pytest.raises(RegistryOperationError) as exc_info:
        OpResult.failure(ErrorKind.PATH_NOT_FOUND).unwrap(context)
    assert exc_info.value.context is context
    assert exc_info.value.kind == ErrorKind.PATH_NOT_FOUND
