"""ORM Models — SQLAlchemy declarative models.

Invariants:
    - All models inherit from Base (db/base.py)

Design Decisions:
    - All models imported here so Base.metadata is complete for alembic and
      test fixtures (ADR: standard SQLAlchemy pattern)
"""

from app.models.project import Project  # noqa: F401
