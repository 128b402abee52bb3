"""create_users_table

Revision ID: 4b7e2c1d9a30
Revises:
Create Date: 2026-10-19 09:12:04.511873

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '4b7e2c1d9a30'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create the users table."""
    op.create_table('users',
        sa.Column('id', sa.UUID(), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('password', sa.String(length=255), nullable=False),
        sa.Column('avatar', sa.String(length=500), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('email'),
    )
    # Case-insensitive uniqueness backing the email_taken lookup
    op.execute("CREATE UNIQUE INDEX ix_users_email_lower ON users (lower(email));")


def downgrade() -> None:
    """Drop the users table."""
    op.execute("DROP INDEX IF EXISTS ix_users_email_lower;")
    op.drop_table('users')
