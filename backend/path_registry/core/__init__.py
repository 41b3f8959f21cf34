"""Core Layer — pure registry logic, no IO, no logging, no DB.

Invariants:
    - No module in core/ imports from services/, infrastructure/, db/, or models/
    - Every check runs before any write; a failed call leaves state untouched

Design Decisions:
    - Functional core separated from imperative shell (ADR: ExMA impureim sandwich)
"""
