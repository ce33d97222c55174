"""create subscriptions, subscription_items and payment_attempts tables

Revision ID: 4d5e6f7a8b9c
Revises: 3c4d5e6f7a8b
Create Date: 2026-10-17 09:15:00.000000

"""

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision = "4d5e6f7a8b9c"
down_revision = "3c4d5e6f7a8b"
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "subscriptions",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("external_id", sa.String(length=255), nullable=False),
        sa.Column("subscriber_type", sa.String(length=20), nullable=False),
        sa.Column("subscriber_user_id", sa.String(length=36), nullable=True),
        sa.Column("subscriber_organization_id", sa.String(length=36), nullable=True),
        sa.Column("status", sa.String(length=30), nullable=False, server_default="active"),
        sa.Column("current_period_start", sa.DateTime(timezone=True), nullable=True),
        sa.Column("current_period_end", sa.DateTime(timezone=True), nullable=True),
        sa.Column("trial_start", sa.DateTime(timezone=True), nullable=True),
        sa.Column("trial_end", sa.DateTime(timezone=True), nullable=True),
        sa.Column(
            "cancel_at_period_end", sa.Boolean(), nullable=False, server_default=sa.false()
        ),
        sa.Column("canceled_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("subscription_metadata", sa.JSON(), nullable=True),
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
        sa.CheckConstraint(
            "(subscriber_type = 'user' AND subscriber_user_id IS NOT NULL "
            "AND subscriber_organization_id IS NULL) OR "
            "(subscriber_type = 'organization' AND subscriber_organization_id IS NOT NULL "
            "AND subscriber_user_id IS NULL)",
            name="ck_subscriptions_subscriber_matches_type",
        ),
        sa.ForeignKeyConstraint(["subscriber_user_id"], ["users.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(
            ["subscriber_organization_id"], ["organizations.id"], ondelete="CASCADE"
        ),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        op.f("ix_subscriptions_external_id"), "subscriptions", ["external_id"], unique=True
    )
    op.create_index(
        op.f("ix_subscriptions_subscriber_user_id"),
        "subscriptions",
        ["subscriber_user_id"],
        unique=False,
    )
    op.create_index(
        op.f("ix_subscriptions_subscriber_organization_id"),
        "subscriptions",
        ["subscriber_organization_id"],
        unique=False,
    )
    op.create_index(op.f("ix_subscriptions_status"), "subscriptions", ["status"], unique=False)

    op.create_table(
        "subscription_items",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("external_id", sa.String(length=255), nullable=False),
        sa.Column("subscription_id", sa.String(length=36), nullable=False),
        sa.Column("plan_id", sa.String(length=255), nullable=False),
        sa.Column("plan_name", sa.String(length=255), nullable=True),
        sa.Column("quantity", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("unit_amount", sa.Integer(), nullable=True),
        sa.Column("currency", sa.String(length=10), nullable=True),
        sa.Column("interval", sa.String(length=10), nullable=True),
        sa.Column("status", sa.String(length=20), nullable=False, server_default="active"),
        sa.Column("item_metadata", sa.JSON(), nullable=True),
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
        sa.ForeignKeyConstraint(["subscription_id"], ["subscriptions.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        op.f("ix_subscription_items_external_id"),
        "subscription_items",
        ["external_id"],
        unique=True,
    )
    op.create_index(
        op.f("ix_subscription_items_subscription_id"),
        "subscription_items",
        ["subscription_id"],
        unique=False,
    )

    op.create_table(
        "payment_attempts",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("external_id", sa.String(length=255), nullable=False),
        sa.Column("subscription_id", sa.String(length=36), nullable=True),
        sa.Column("amount", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("currency", sa.String(length=10), nullable=False, server_default="usd"),
        sa.Column("status", sa.String(length=30), nullable=False),
        sa.Column("failure_reason", sa.String(length=1000), nullable=True),
        sa.Column("failure_code", sa.String(length=255), nullable=True),
        sa.Column("invoice_id", sa.String(length=255), nullable=True),
        sa.Column("charge_id", sa.String(length=255), nullable=True),
        sa.Column("payment_method_type", sa.String(length=50), nullable=True),
        sa.Column("attempted_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("payment_metadata", sa.JSON(), nullable=True),
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
        sa.ForeignKeyConstraint(["subscription_id"], ["subscriptions.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        op.f("ix_payment_attempts_external_id"), "payment_attempts", ["external_id"], unique=True
    )
    op.create_index(
        op.f("ix_payment_attempts_subscription_id"),
        "payment_attempts",
        ["subscription_id"],
        unique=False,
    )
    op.create_index(
        op.f("ix_payment_attempts_status"), "payment_attempts", ["status"], unique=False
    )


def downgrade() -> None:
    op.drop_index(op.f("ix_payment_attempts_status"), table_name="payment_attempts")
    op.drop_index(op.f("ix_payment_attempts_subscription_id"), table_name="payment_attempts")
    op.drop_index(op.f("ix_payment_attempts_external_id"), table_name="payment_attempts")
    op.drop_table("payment_attempts")
    op.drop_index(
        op.f("ix_subscription_items_subscription_id"), table_name="subscription_items"
    )
    op.drop_index(op.f("ix_subscription_items_external_id"), table_name="subscription_items")
    op.drop_table("subscription_items")
    op.drop_index(op.f("ix_subscriptions_status"), table_name="subscriptions")
    op.drop_index(
        op.f("ix_subscriptions_subscriber_organization_id"), table_name="subscriptions"
    )
    op.drop_index(op.f("ix_subscriptions_subscriber_user_id"), table_name="subscriptions")
    op.drop_index(op.f("ix_subscriptions_external_id"), table_name="subscriptions")
    op.drop_table("subscriptions")
