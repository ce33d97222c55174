"""create organizations table

Revision ID: 2b3c4d5e6f7a
Revises: 1a2b3c4d5e6f
Create Date: 2026-10-17 09:05:00.000000

"""

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision = "2b3c4d5e6f7a"
down_revision = "1a2b3c4d5e6f"
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "organizations",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("external_id", sa.String(length=255), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("slug", sa.String(length=255), nullable=True),
        sa.Column("image_url", sa.String(length=2048), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("max_allowed_memberships", sa.Integer(), nullable=True),
        sa.Column("public_metadata", sa.JSON(), nullable=True),
        sa.Column("private_metadata", sa.JSON(), nullable=True),
        sa.Column("created_by_id", sa.String(length=36), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("(CURRENT_TIMESTAMP)"),
            nullable=True,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("(CURRENT_TIMESTAMP)"),
            nullable=True,
        ),
        sa.ForeignKeyConstraint(["created_by_id"], ["users.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("slug"),
    )
    op.create_index(
        op.f("ix_organizations_external_id"), "organizations", ["external_id"], unique=True
    )
    op.create_index(
        op.f("ix_organizations_created_by_id"), "organizations", ["created_by_id"], unique=False
    )


def downgrade() -> None:
    op.drop_index(op.f("ix_organizations_created_by_id"), table_name="organizations")
    op.drop_index(op.f("ix_organizations_external_id"), table_name="organizations")
    op.drop_table("organizations")
