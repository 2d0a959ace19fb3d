"""Cars, availability overrides, discount tiers and bookings.

Revision ID: 0001
Revises:
Create Date: 2026-10-19
"""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

revision = "0001"
down_revision = None
branch_labels = None
depends_on = None

_TIMESTAMPS = (
    ("created_at", sa.func.now()),
    ("updated_at", sa.func.now()),
)


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column(
            name,
            sa.DateTime(timezone=True),
            server_default=default,
            nullable=False,
        )
        for name, default in _TIMESTAMPS
    ]


def upgrade() -> None:
    cancellation_policy = sa.Enum(
        "flexible", "moderate", "strict", name="cancellation_policy"
    )
    booking_status = sa.Enum("pending", "confirmed", "cancelled", name="booking_status")

    op.create_table(
        "cars",
        sa.Column("id", sa.Uuid(as_uuid=True), primary_key=True),
        sa.Column("host_id", sa.Uuid(as_uuid=True), nullable=False),
        sa.Column("brand", sa.String(length=120), nullable=False),
        sa.Column("model", sa.String(length=120), nullable=False),
        sa.Column("year", sa.Integer()),
        sa.Column("location", sa.String(length=255)),
        sa.Column("price_per_day", sa.Numeric(10, 2), nullable=False),
        sa.Column(
            "available_days",
            sa.JSON().with_variant(postgresql.JSONB(), "postgresql"),
            nullable=False,
        ),
        sa.Column("available_from", sa.Time(), nullable=False),
        sa.Column("available_until", sa.Time(), nullable=False),
        sa.Column("cancellation_policy", cancellation_policy, nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_cars_host_id", "cars", ["host_id"])

    op.create_table(
        "car_discount_tiers",
        sa.Column("id", sa.Uuid(as_uuid=True), primary_key=True),
        sa.Column(
            "car_id",
            sa.Uuid(as_uuid=True),
            sa.ForeignKey("cars.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("min_nights", sa.Integer(), nullable=False),
        sa.Column("percent", sa.Numeric(5, 2), nullable=False),
        sa.UniqueConstraint(
            "car_id", "min_nights", name="uq_discount_tier_car_nights"
        ),
    )

    op.create_table(
        "car_availability_overrides",
        sa.Column("id", sa.Uuid(as_uuid=True), primary_key=True),
        sa.Column(
            "car_id",
            sa.Uuid(as_uuid=True),
            sa.ForeignKey("cars.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("is_available", sa.Boolean(), nullable=False),
        *_timestamps(),
        sa.UniqueConstraint(
            "car_id", "date", name="uq_availability_override_car_date"
        ),
    )

    op.create_table(
        "bookings",
        sa.Column("id", sa.Uuid(as_uuid=True), primary_key=True),
        sa.Column(
            "car_id",
            sa.Uuid(as_uuid=True),
            sa.ForeignKey("cars.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("user_id", sa.Uuid(as_uuid=True), nullable=False),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("end_date", sa.Date(), nullable=False),
        sa.Column("status", booking_status, nullable=False),
        sa.Column("pickup_time", sa.Time()),
        sa.Column("return_time", sa.Time()),
        sa.Column("message", sa.String(length=1024)),
        sa.Column("total_price", sa.Numeric(10, 2)),
        *_timestamps(),
        sa.CheckConstraint("start_date <= end_date", name="ck_bookings_range_order"),
    )
    op.create_index("ix_bookings_car_status", "bookings", ["car_id", "status"])
    op.create_index("ix_bookings_user_id", "bookings", ["user_id"])

    if op.get_bind().dialect.name == "postgresql":
        # Database-level guard: no two active bookings of a car may share a day.
        op.execute("CREATE EXTENSION IF NOT EXISTS btree_gist")
        op.execute(
            """
            ALTER TABLE bookings
            ADD CONSTRAINT ex_bookings_active_no_overlap
            EXCLUDE USING gist (
                car_id WITH =,
                daterange(start_date, end_date, '[]') WITH &&
            )
            WHERE (status IN ('pending', 'confirmed'))
            """
        )


def downgrade() -> None:
    if op.get_bind().dialect.name == "postgresql":
        op.execute(
            "ALTER TABLE bookings DROP CONSTRAINT IF EXISTS ex_bookings_active_no_overlap"
        )
    op.drop_index("ix_bookings_user_id", table_name="bookings")
    op.drop_index("ix_bookings_car_status", table_name="bookings")
    op.drop_table("bookings")
    op.drop_table("car_availability_overrides")
    op.drop_table("car_discount_tiers")
    op.drop_index("ix_cars_host_id", table_name="cars")
    op.drop_table("cars")
    sa.Enum(name="booking_status").drop(op.get_bind(), checkfirst=True)
    sa.Enum(name="cancellation_policy").drop(op.get_bind(), checkfirst=True)
