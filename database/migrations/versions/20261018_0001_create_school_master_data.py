"""create school master data

Revision ID: 20261018_0001
Revises: None
Create Date: 2026-10-18 00:00:00.000000

"""
from alembic import op
import sqlalchemy as sa

revision = "20261018_0001"
down_revision = None
branch_labels = None
depends_on = None


user_role_enum = sa.Enum("super", "admin", "viewer", name="user_role")


def upgrade() -> None:
    op.create_table(
        "schools",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("academic_year", sa.String(length=20), nullable=True),
        sa.Column("current_semester", sa.Integer(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_table(
        "users",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("role", user_role_enum, nullable=False),
        sa.Column("school_id", sa.String(length=36), sa.ForeignKey("schools.id"), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_table(
        "teachers",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("school_id", sa.String(length=36), sa.ForeignKey("schools.id"), nullable=False),
        sa.Column("prefix", sa.String(length=50), nullable=True),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("subject_group", sa.String(length=100), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
    )
    op.create_index("ix_teachers_school_id", "teachers", ["school_id"])
    op.create_table(
        "class_groups",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("school_id", sa.String(length=36), sa.ForeignKey("schools.id"), nullable=False),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("grade_level", sa.String(length=50), nullable=True),
        sa.Column("parent_id", sa.String(length=36), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
    )
    op.create_index("ix_class_groups_school_id", "class_groups", ["school_id"])
    op.create_table(
        "subjects",
        sa.Column("code", sa.String(length=50), nullable=False),
        sa.Column("school_id", sa.String(length=36), sa.ForeignKey("schools.id"), nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("subject_group", sa.String(length=100), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.PrimaryKeyConstraint("code", "school_id"),
    )
    op.create_table(
        "locations",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("school_id", sa.String(length=36), sa.ForeignKey("schools.id"), nullable=False),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("responsible_teacher_id", sa.String(length=36), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
    )
    op.create_index("ix_locations_school_id", "locations", ["school_id"])
    op.create_table(
        "time_slots",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("school_id", sa.String(length=36), sa.ForeignKey("schools.id"), nullable=False),
        sa.Column("period", sa.Integer(), nullable=False),
        sa.Column("start_time", sa.String(length=8), nullable=False),
        sa.Column("end_time", sa.String(length=8), nullable=False),
    )
    op.create_index("ix_time_slots_school_id", "time_slots", ["school_id"])


def downgrade() -> None:
    op.drop_index("ix_time_slots_school_id", table_name="time_slots")
    op.drop_table("time_slots")
    op.drop_index("ix_locations_school_id", table_name="locations")
    op.drop_table("locations")
    op.drop_table("subjects")
    op.drop_index("ix_class_groups_school_id", table_name="class_groups")
    op.drop_table("class_groups")
    op.drop_index("ix_teachers_school_id", table_name="teachers")
    op.drop_table("teachers")
    op.drop_table("users")
    op.drop_table("schools")
    user_role_enum.drop(op.get_bind(), checkfirst=True)
