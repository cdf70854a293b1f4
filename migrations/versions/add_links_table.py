"""add_links_table

Add the links table: one row per linked GitHub account.

Revision ID: add_links_table
Revises:
Create Date: 2026-10-17

"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "add_links_table"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Add links table."""
    op.create_table(
        "links",
        sa.Column("github_id", sa.String(64), nullable=False),
        sa.Column("github_login", sa.String(100), nullable=False),
        sa.Column("github_avatar", sa.String(), nullable=True),
        sa.Column("github_token", sa.String(), nullable=True),
        sa.Column("aad_id", sa.String(64), nullable=False),
        sa.Column("aad_upn", sa.String(255), nullable=True),
        sa.Column("aad_name", sa.String(255), nullable=True),
        sa.Column(
            "is_service_account", sa.Boolean(), nullable=False, server_default=sa.text("false")
        ),
        sa.Column("service_account_mail", sa.String(255), nullable=True),
        sa.Column("hub_import", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("github_id"),
    )
    op.create_index("ix_links_aad_id", "links", ["aad_id"])


def downgrade() -> None:
    """Remove links table."""
    op.drop_index("ix_links_aad_id", table_name="links")
    op.drop_table("links")
