"""Add images column to inspection_checklists.

Revision ID: 0002
Revises: 0001
Create Date: 2026-10-18

Holds the URLs of the photos an inspector attaches to a checklist,
in the order they were added.
"""

revision = "0002"
down_revision = "0001"
branch_labels = None
depends_on = None

from alembic import op
import sqlalchemy as sa


def upgrade() -> None:
    op.add_column("inspection_checklists", sa.Column("images", sa.JSON(), nullable=True))


def downgrade() -> None:
    op.drop_column("inspection_checklists", "images")
