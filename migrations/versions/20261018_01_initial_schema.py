"""initial catalogue schema

Revision ID: 20261018_01
Revises:
Create Date: 2026-10-18 09:00:00.000000
"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "20261018_01"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "accounts",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("username", sa.String(length=50), nullable=False),
        sa.Column("name", sa.String(length=100), nullable=True),
        sa.Column("password_hash", sa.String(length=255), nullable=False),
        sa.Column("role", sa.String(length=20), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=True),
        sa.Column("email", sa.String(length=100), nullable=True, unique=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("last_login_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_accounts_username", "accounts", ["username"], unique=True)

    op.create_table(
        "catalogues",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("file_name", sa.String(length=255), nullable=False),
        sa.Column("original_name", sa.String(length=255), nullable=False),
        sa.Column("file_path", sa.String(length=500), nullable=False),
        sa.Column("file_size", sa.Integer(), nullable=False),
        sa.Column("mime_type", sa.String(length=100), nullable=False),
        sa.Column("uploaded_by", sa.String(length=36), sa.ForeignKey("accounts.id"), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("download_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("category", sa.String(length=100), nullable=True),
        sa.Column("uploaded_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_catalogues_file_name", "catalogues", ["file_name"])
    op.create_index("ix_catalogues_original_name", "catalogues", ["original_name"])
    op.create_index("ix_catalogues_is_active", "catalogues", ["is_active"])
    op.create_index("ix_catalogues_uploaded_at", "catalogues", ["uploaded_at"])

    op.create_table(
        "downloads",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("user_id", sa.String(length=36), sa.ForeignKey("accounts.id"), nullable=True),
        sa.Column("catalogue_id", sa.String(length=36), sa.ForeignKey("catalogues.id"), nullable=True),
        sa.Column("file_name", sa.String(length=255), nullable=False),
        sa.Column("file_size", sa.Integer(), nullable=True),
        sa.Column("ip_address", sa.String(length=45), nullable=True),
        sa.Column("user_agent", sa.String(length=500), nullable=True),
        sa.Column("timestamp", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_downloads_timestamp", "downloads", ["timestamp"])
    op.create_index("ix_downloads_user_timestamp", "downloads", ["user_id", "timestamp"])
    op.create_index("ix_downloads_catalogue_timestamp", "downloads", ["catalogue_id", "timestamp"])

    op.create_table(
        "activities",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("type", sa.String(length=50), nullable=False),
        sa.Column("user_id", sa.String(length=36), nullable=True),
        sa.Column("admin_id", sa.String(length=36), nullable=True),
        sa.Column("details", sa.Text(), nullable=True),
        sa.Column("ip_address", sa.String(length=45), nullable=True),
        sa.Column("user_agent", sa.String(length=500), nullable=True),
        sa.Column("timestamp", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_activities_type_timestamp", "activities", ["type", "timestamp"])
    op.create_index("ix_activities_user_timestamp", "activities", ["user_id", "timestamp"])


def downgrade() -> None:
    op.drop_index("ix_activities_user_timestamp", table_name="activities")
    op.drop_index("ix_activities_type_timestamp", table_name="activities")
    op.drop_table("activities")
    op.drop_index("ix_downloads_catalogue_timestamp", table_name="downloads")
    op.drop_index("ix_downloads_user_timestamp", table_name="downloads")
    op.drop_index("ix_downloads_timestamp", table_name="downloads")
    op.drop_table("downloads")
    op.drop_index("ix_catalogues_uploaded_at", table_name="catalogues")
    op.drop_index("ix_catalogues_is_active", table_name="catalogues")
    op.drop_index("ix_catalogues_original_name", table_name="catalogues")
    op.drop_index("ix_catalogues_file_name", table_name="catalogues")
    op.drop_table("catalogues")
    op.drop_index("ix_accounts_username", table_name="accounts")
    op.drop_table("accounts")
