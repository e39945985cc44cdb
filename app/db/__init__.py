"""Database Declarations — SQLAlchemy Base shared by models and migrations.

Invariants:
    - Every mapped table registers on the single Base metadata
    - alembic/env.py and the test fixtures read the same metadata

Design Decisions:
    - Engine and sessions live in infrastructure/database.py; this package only
      declares the mapping layer
"""
