"""Database Infrastructure — SQLAlchemy Base shared by all registry tables."""
