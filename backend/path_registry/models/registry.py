"""Registry ORM — persisted form of RegistryState.

Invariants:
    - registry_meta holds exactly one row (id=1): counter, capacity, oracle
    - learning_paths primary key is the composite (owner, path_id)
    - path_updates rows are append-only; sequence orders them per key

Design Decisions:
    - JSON for module lists: variable length, never queried element-wise
    - Attribute path_metadata mapped to column "metadata": DeclarativeBase reserves
      the `metadata` attribute name
"""

from sqlalchemy import JSON, Boolean, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from path_registry.db.base import Base

META_ROW_ID = 1


class RegistryMetaRow(Base):
    """Singleton row with registry-wide fields."""
    __tablename__ = "registry_meta"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, default=META_ROW_ID)
    max_paths: Mapped[int] = mapped_column(Integer, nullable=False)
    next_path_id: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    oracle_principal: Mapped[str | None] = mapped_column(String(128), nullable=True)


class LearningPathRow(Base):
    """Learning path entity — keyed by owner and sequential path id."""
    __tablename__ = "learning_paths"

    owner: Mapped[str] = mapped_column(String(128), primary_key=True)
    path_id: Mapped[int] = mapped_column(Integer, primary_key=True)
    modules: Mapped[list] = mapped_column(JSON, nullable=False)
    path_metadata: Mapped[str] = mapped_column("metadata", Text, nullable=False)
    difficulty: Mapped[int] = mapped_column(Integer, nullable=False)
    estimated_duration: Mapped[int] = mapped_column(Integer, nullable=False)
    timestamp: Mapped[int] = mapped_column(Integer, nullable=False)
    status: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)


class PathUpdateRow(Base):
    """One applied update. Latest per key = highest sequence."""
    __tablename__ = "path_updates"
    __table_args__ = (UniqueConstraint("owner", "path_id", "sequence"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    owner: Mapped[str] = mapped_column(String(128), nullable=False)
    path_id: Mapped[int] = mapped_column(Integer, nullable=False)
    sequence: Mapped[int] = mapped_column(Integer, nullable=False)
    updated_modules: Mapped[list] = mapped_column(JSON, nullable=False)
    updated_metadata: Mapped[str] = mapped_column(Text, nullable=False)
    updated_difficulty: Mapped[int] = mapped_column(Integer, nullable=False)
    updated_duration: Mapped[int] = mapped_column(Integer, nullable=False)
    update_timestamp: Mapped[int] = mapped_column(Integer, nullable=False)
    updater: Mapped[str] = mapped_column(String(128), nullable=False)
