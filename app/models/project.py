"""Project ORM — the single CRUD table exposed by the API.

Invariants:
    - Table and column names are quoted PascalCase ("TestProjects", "Id", "Name"):
      the schema is shared with other services and predates this one
    - Id is a database-generated serial primary key

Design Decisions:
    - Python attributes snake_case, column names mapped explicitly
"""

from sqlalchemy import Integer, Text
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base


class Project(Base):
    """One row of "TestProjects"."""
    __tablename__ = "TestProjects"

    id: Mapped[int] = mapped_column(
        "Id", Integer, primary_key=True, autoincrement=True,
    )
    name: Mapped[str] = mapped_column("Name", Text, nullable=False)
