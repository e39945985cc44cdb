"""Create the TestProjects table.

Revision ID: 001_test_projects
Revises: None
Create Date: 2026-10-16

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "001_test_projects"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "TestProjects",
        sa.Column("Id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("Name", sa.Text, nullable=False),
    )


def downgrade() -> None:
    op.drop_table("TestProjects")
