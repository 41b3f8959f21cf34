"""Boundary Protocols — contracts between core and the persistence shell.

Invariants:
    - Core NEVER imports from shell — dependency arrows point inward only
    - Storage is accessed only through RegistryRepository
    - Implementations provided by shell via dependency injection

Design Decisions:
    - Protocol over ABC: structural subtyping, no inheritance hierarchy (ADR: ExMA anti-pattern)
    - save() replaces everything (snapshot loads); save_changes() writes the registry
      fields plus the named keys, so a single call costs O(touched keys), not O(registry)
    - Synchronous methods: registry calls never suspend
"""

from typing import Iterable, Protocol

from path_registry.core.domain_types import PathKey
from path_registry.core.registry_state import RegistryState


class RegistryRepository(Protocol):
    """Contract for registry persistence — implemented by shell."""
    def load(self) -> RegistryState | None: ...
    def save(self, state: RegistryState) -> None: ...
    def save_changes(self, state: RegistryState, keys: Iterable[PathKey] = ()) -> None: ...
