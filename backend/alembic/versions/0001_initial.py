"""initial schema

Revision ID: 0001
Revises:
Create Date: 2024-06-01
"""

import sqlalchemy as sa
from alembic import op

revision = "0001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        "tenants",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("slug", sa.Text(), nullable=False, unique=True),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("timezone", sa.Text(), nullable=False, server_default=sa.text("'UTC'")),
        sa.Column("is_active", sa.Integer(), nullable=False, server_default=sa.text("1")),
        sa.Column("email", sa.Text()),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.current_timestamp()),
    )

    op.create_table(
        "event_types",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("tenant_id", sa.Integer(), sa.ForeignKey("tenants.id", ondelete="CASCADE"), nullable=False),
        sa.Column("slug", sa.Text(), nullable=False),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("duration_min", sa.Integer(), nullable=False),
        sa.Column("buffer_min", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("is_active", sa.Integer(), nullable=False, server_default=sa.text("1")),
        sa.Column("description", sa.Text()),
        sa.Column("color_hex", sa.Text(), server_default=sa.text("'#4f46e5'")),
        sa.UniqueConstraint("tenant_id", "slug"),
        sa.CheckConstraint("duration_min >= 5"),
        sa.CheckConstraint("buffer_min >= 0"),
    )

    op.create_table(
        "availability",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("tenant_id", sa.Integer(), sa.ForeignKey("tenants.id", ondelete="CASCADE"), nullable=False),
        sa.Column("weekday", sa.Integer(), nullable=False),
        sa.Column("start_min", sa.Integer(), nullable=False),
        sa.Column("end_min", sa.Integer(), nullable=False),
        sa.CheckConstraint("weekday BETWEEN 0 AND 6"),
        sa.CheckConstraint("start_min BETWEEN 0 AND 1440"),
        sa.CheckConstraint("end_min BETWEEN 0 AND 1440"),
    )
    op.create_index("ix_availability_tenant_weekday", "availability", ["tenant_id", "weekday"])

    op.create_table(
        "bookings",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("tenant_id", sa.Integer(), sa.ForeignKey("tenants.id", ondelete="CASCADE"), nullable=False),
        sa.Column("event_type_id", sa.Integer(), sa.ForeignKey("event_types.id"), nullable=False),
        sa.Column("guest_name", sa.Text(), nullable=False),
        sa.Column("guest_email", sa.Text(), nullable=False),
        sa.Column("starts_at", sa.DateTime(), nullable=False),
        sa.Column("ends_at", sa.DateTime(), nullable=False),
        sa.Column("blocked_until", sa.DateTime(), nullable=False),
        sa.Column("duration_minutes", sa.Integer(), nullable=False),
        sa.Column("buffer_minutes", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column(
            "status",
            sa.Enum("confirmed", "cancelled", name="booking_status"),
            nullable=False,
            server_default=sa.text("'confirmed'"),
        ),
        sa.Column("google_event_id", sa.Text()),
        sa.Column("google_calendar_id", sa.Text()),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.current_timestamp()),
        sa.Column("updated_at", sa.DateTime(), server_default=sa.func.current_timestamp()),
    )
    op.create_index("ix_bookings_tenant_window", "bookings", ["tenant_id", "starts_at", "blocked_until"])

    dialect = op.get_bind().dialect.name
    if dialect in ("sqlite", "postgresql"):
        op.create_index(
            "uq_bookings_tenant_start_confirmed",
            "bookings",
            ["tenant_id", "starts_at"],
            unique=True,
            sqlite_where=sa.text("status = 'confirmed'"),
            postgresql_where=sa.text("status = 'confirmed'"),
        )

    op.create_table(
        "google_tokens",
        sa.Column("tenant_id", sa.Integer(), sa.ForeignKey("tenants.id", ondelete="CASCADE"), primary_key=True),
        sa.Column("access_token", sa.Text()),
        sa.Column("refresh_token", sa.Text()),
        sa.Column("expiry", sa.DateTime()),
        sa.Column("scope", sa.Text()),
    )

    op.create_table(
        "calendar_settings",
        sa.Column("tenant_id", sa.Integer(), sa.ForeignKey("tenants.id", ondelete="CASCADE"), primary_key=True),
        sa.Column("provider", sa.Text(), nullable=False, server_default=sa.text("'google'")),
        sa.Column("calendar_id", sa.Text(), nullable=False, server_default=sa.text("'primary'")),
        sa.Column("sync_enabled", sa.Integer(), nullable=False, server_default=sa.text("1")),
    )


def downgrade():
    op.drop_table("calendar_settings")
    op.drop_table("google_tokens")
    op.drop_table("bookings")
    op.drop_table("availability")
    op.drop_table("event_types")
    op.drop_table("tenants")
