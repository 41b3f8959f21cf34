"""Services Layer — imperative shell: locking, persistence, and logging around core.

Invariants:
    - Services call core, never the reverse
"""
