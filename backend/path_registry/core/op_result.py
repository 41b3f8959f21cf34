"""Operation Result — uniform return value for every mutating registry operation.

Invariants:
    - ok=True  -> error is None, value is the operation's payload (PathId or True)
    - ok=False -> error is the first violated ErrorKind; no state was mutated
    - store_path failures carry the numeric code in value; boolean operations carry False

Design Decisions:
    - Return values (not exceptions) for expected failures: the error path has the
      same shape as the success path (ADR: uniform response shape)
    - unwrap() is the single seam where a rejected result becomes an exception
"""

from dataclasses import dataclass
from typing import Any

from path_registry.core.domain_types import ErrorKind
from path_registry.core.errors import ErrorContext, RegistryOperationError


@dataclass(frozen=True)
class OpResult:
    """Outcome of a registry operation."""
    ok: bool
    value: Any
    error: ErrorKind | None = None

    @classmethod
    def success(cls, value: Any = True) -> "OpResult":
        return cls(ok=True, value=value)

    @classmethod
    def failure(cls, kind: ErrorKind) -> "OpResult":
        """Boolean-contract failure (update, deactivate, set_oracle)."""
        return cls(ok=False, value=False, error=kind)

    @classmethod
    def coded_failure(cls, kind: ErrorKind) -> "OpResult":
        """Numeric-contract failure (store_path): value is the error code."""
        return cls(ok=False, value=int(kind), error=kind)

    def unwrap(self, context: ErrorContext | None = None) -> Any:
        """Return value on success, raise RegistryOperationError otherwise."""
        if not self.ok:
            raise RegistryOperationError(self.error, context)
        return self.value
