"""Domain Types — rich types that replace bare primitives across the registry.

Invariants:
    - Principal is opaque: compared by equality only, never parsed
    - PathId values are assigned sequentially from 0 and never reused
    - ErrorKind codes are stable (100-112): callers may persist them

Design Decisions:
    - NewType over dataclass wrappers: zero runtime cost, full type-checker support
    - IntEnum for ErrorKind: numeric codes compare equal to the raw ints callers see
    - Reserved kinds (INVALID_PATH_ID, INVALID_UPDATE_TIMESTAMP, INVALID_ORACLE) kept
      for forward compatibility even though no operation returns them yet
"""

from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import NewType


# ─── Identity Types ──────────────────────────────────────────────

Principal = NewType("Principal", str)
PathId = NewType("PathId", int)
BlockHeight = NewType("BlockHeight", int)

PathKey = tuple[Principal, PathId]

BURN_PRINCIPAL = Principal("SP000000000000000000002Q6VF78")


# ─── Enums ───────────────────────────────────────────────────────

class ErrorKind(IntEnum):
    """Registry error taxonomy — numeric codes are part of the contract."""
    NOT_AUTHORIZED = 100
    INVALID_PATH_ID = 101
    INVALID_MODULE_COUNT = 102
    INVALID_METADATA = 103
    PATH_ALREADY_EXISTS = 104
    PATH_NOT_FOUND = 105
    INVALID_DIFFICULTY = 106
    INVALID_DURATION = 107
    INVALID_UPDATE_TIMESTAMP = 108
    INVALID_ORACLE = 109
    MAX_PATHS_EXCEEDED = 110
    INVALID_USER = 111
    INVALID_MODULE_ID = 112


class Operation(str, Enum):
    """Mutating registry operations — used for logging and audit."""
    SET_ORACLE = "set_oracle"
    STORE_PATH = "store_path"
    UPDATE_PATH = "update_path"
    DEACTIVATE_PATH = "deactivate_path"


# ─── Boundary Values ─────────────────────────────────────────────

@dataclass(frozen=True)
class CallContext:
    """Caller identity and logical time, supplied by the environment per call."""
    caller: Principal
    block_height: BlockHeight = BlockHeight(0)
