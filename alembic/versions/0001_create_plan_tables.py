"""create plan, grid cell and monthly weather tables"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa

revision = "0001_create_plan_tables"
down_revision = None
branch_labels: tuple[str, ...] | None = None
depends_on: tuple[str, ...] | None = None


def upgrade() -> None:
    op.create_table(
        "plan",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("user_id", sa.Uuid(), nullable=False),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("latitude", sa.Float(), nullable=True),
        sa.Column("longitude", sa.Float(), nullable=True),
        sa.Column("orientation", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("hemisphere", sa.String(length=8), nullable=True),
        sa.Column("width_cm", sa.Integer(), nullable=False),
        sa.Column("height_cm", sa.Integer(), nullable=False),
        sa.Column("cell_size_cm", sa.Integer(), nullable=False),
        sa.Column("grid_width", sa.Integer(), nullable=False),
        sa.Column("grid_height", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint("orientation >= 0 AND orientation <= 359", name="ck_plan_orientation"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_plan_user_id"), "plan", ["user_id"], unique=False)

    op.create_table(
        "gridcell",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("plan_id", sa.Uuid(), nullable=False),
        sa.Column("x", sa.Integer(), nullable=False),
        sa.Column("y", sa.Integer(), nullable=False),
        sa.Column(
            "type",
            sa.Enum("soil", "water", "path", "building", "blocked", name="gridcelltype"),
            nullable=False,
        ),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["plan_id"], ["plan.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("plan_id", "x", "y", name="uq_gridcell_plan_xy"),
    )
    op.create_index(op.f("ix_gridcell_plan_id"), "gridcell", ["plan_id"], unique=False)

    op.create_table(
        "weathermonthly",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("plan_id", sa.Uuid(), nullable=False),
        sa.Column("year", sa.Integer(), nullable=False),
        sa.Column("month", sa.Integer(), nullable=False),
        sa.Column("sunlight", sa.Integer(), nullable=False),
        sa.Column("humidity", sa.Integer(), nullable=False),
        sa.Column("precip", sa.Integer(), nullable=False),
        sa.Column("temperature", sa.Integer(), nullable=False),
        sa.Column("last_refreshed_at", sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint("month >= 1 AND month <= 12", name="ck_weathermonthly_month"),
        sa.CheckConstraint(
            "sunlight BETWEEN 0 AND 100 AND humidity BETWEEN 0 AND 100 "
            "AND precip BETWEEN 0 AND 100 AND temperature BETWEEN 0 AND 100",
            name="ck_weathermonthly_range",
        ),
        sa.ForeignKeyConstraint(["plan_id"], ["plan.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("plan_id", "year", "month", name="uq_weathermonthly_plan_month"),
    )
    op.create_index(op.f("ix_weathermonthly_plan_id"), "weathermonthly", ["plan_id"], unique=False)
    op.create_index(
        op.f("ix_weathermonthly_last_refreshed_at"),
        "weathermonthly",
        ["last_refreshed_at"],
        unique=False,
    )


def downgrade() -> None:
    op.drop_index(op.f("ix_weathermonthly_last_refreshed_at"), table_name="weathermonthly")
    op.drop_index(op.f("ix_weathermonthly_plan_id"), table_name="weathermonthly")
    op.drop_table("weathermonthly")
    op.drop_index(op.f("ix_gridcell_plan_id"), table_name="gridcell")
    op.drop_table("gridcell")
    sa.Enum(name="gridcelltype").drop(op.get_bind(), checkfirst=True)
    op.drop_index(op.f("ix_plan_user_id"), table_name="plan")
    op.drop_table("plan")
