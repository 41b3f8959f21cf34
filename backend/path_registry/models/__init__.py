"""ORM Models — SQLAlchemy declarative models for persisted registry state.

Invariants:
    - All models inherit from Base (db/base.py)
    - All models imported here so create_all() sees every table
"""

from path_registry.models.registry import RegistryMetaRow  # noqa: F401
from path_registry.models.registry import LearningPathRow  # noqa: F401
from path_registry.models.registry import PathUpdateRow  # noqa: F401
