"""Pydantic Schemas — boundary validation for registry snapshots."""
