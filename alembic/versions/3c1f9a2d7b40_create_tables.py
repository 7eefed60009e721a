"""create tables

Revision ID: 3c1f9a2d7b40
Revises: 
Create Date: 2026-10-19 09:12:31.504118

"""
from typing import Sequence, Union

from alembic import op
from atelier.database import Base
from atelier import models  # noqa: F401


# revision identifiers, used by Alembic.
revision: str = '3c1f9a2d7b40'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create users, members, courses, course_teachers and gallery_items."""
    bind = op.get_bind()
    Base.metadata.create_all(bind)


def downgrade() -> None:
    """Drop every table created by upgrade."""
    bind = op.get_bind()
    Base.metadata.drop_all(bind)
