"""Create users and study_blocks tables

Revision ID: 4a9e1c7b2d10
Revises:
Create Date: 2026-10-19
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "4a9e1c7b2d10"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        "users",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("email", sa.String(), nullable=False),
        sa.Column("name", sa.String(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("email"),
    )
    op.create_table(
        "study_blocks",
        sa.Column("block_id", sa.String(), nullable=False),
        sa.Column("user_id", sa.String(), nullable=False),
        sa.Column("start_time", sa.DateTime(), nullable=False),
        sa.Column("end_time", sa.DateTime(), nullable=False),
        sa.Column("reminder_sent", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("block_id"),
    )
    op.create_index(op.f("ix_study_blocks_user_id"), "study_blocks", ["user_id"], unique=False)
    op.create_index(op.f("ix_study_blocks_start_time"), "study_blocks", ["start_time"], unique=False)
    op.create_index(op.f("ix_study_blocks_reminder_sent"), "study_blocks", ["reminder_sent"], unique=False)


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_index(op.f("ix_study_blocks_reminder_sent"), table_name="study_blocks")
    op.drop_index(op.f("ix_study_blocks_start_time"), table_name="study_blocks")
    op.drop_index(op.f("ix_study_blocks_user_id"), table_name="study_blocks")
    op.drop_table("study_blocks")
    op.drop_table("users")
