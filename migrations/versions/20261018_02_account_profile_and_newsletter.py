"""account profile fields, soft delete and newsletter subscribers

Revision ID: 20261018_02
Revises: 20261018_01
Create Date: 2026-10-18 15:30:00.000000
"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "20261018_02"
down_revision = "20261018_01"
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.add_column("accounts", sa.Column("company_name", sa.String(length=100), nullable=True))
    op.add_column("accounts", sa.Column("phone_number", sa.String(length=30), nullable=True))
    op.add_column("accounts", sa.Column("city", sa.String(length=100), nullable=True))
    op.add_column(
        "accounts",
        sa.Column("is_deleted", sa.Boolean(), nullable=False, server_default=sa.false()),
    )

    op.create_table(
        "newsletter_subscribers",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("name", sa.String(length=50), nullable=True),
        sa.Column("company_name", sa.String(length=100), nullable=True),
        sa.Column("phone_number", sa.String(length=30), nullable=True),
        sa.Column("city", sa.String(length=100), nullable=True),
        sa.Column("source", sa.String(length=20), nullable=False, server_default="app"),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("subscribed_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("unsubscribed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("unsubscribe_token", sa.String(length=64), nullable=True),
        sa.Column("last_email_sent", sa.DateTime(timezone=True), nullable=True),
        sa.Column("email_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_newsletter_subscribers_email", "newsletter_subscribers", ["email"], unique=True)
    op.create_index("ix_newsletter_subscribers_is_active", "newsletter_subscribers", ["is_active"])
    op.create_index("ix_newsletter_subscribers_subscribed_at", "newsletter_subscribers", ["subscribed_at"])
    op.create_index(
        "ix_newsletter_subscribers_unsubscribe_token",
        "newsletter_subscribers",
        ["unsubscribe_token"],
        unique=True,
    )


def downgrade() -> None:
    op.drop_index("ix_newsletter_subscribers_unsubscribe_token", table_name="newsletter_subscribers")
    op.drop_index("ix_newsletter_subscribers_subscribed_at", table_name="newsletter_subscribers")
    op.drop_index("ix_newsletter_subscribers_is_active", table_name="newsletter_subscribers")
    op.drop_index("ix_newsletter_subscribers_email", table_name="newsletter_subscribers")
    op.drop_table("newsletter_subscribers")

    with op.batch_alter_table("accounts") as batch_op:
        batch_op.drop_column("is_deleted")
        batch_op.drop_column("city")
        batch_op.drop_column("phone_number")
        batch_op.drop_column("company_name")
