"""create schedule entries, substitutions and attendance logs

Revision ID: 20261018_0002
Revises: 20261018_0001
Create Date: 2026-10-18 00:00:00.000000

"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

revision = "20261018_0002"
down_revision = "20261018_0001"
branch_labels = None
depends_on = None


day_of_week_enum = postgresql.ENUM(
    "monday",
    "tuesday",
    "wednesday",
    "thursday",
    "friday",
    "saturday",
    "sunday",
    name="day_of_week",
    create_type=False,
)


def upgrade() -> None:
    day_of_week_enum.create(op.get_bind(), checkfirst=True)

    op.create_table(
        "schedule_entries",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("school_id", sa.String(length=36), sa.ForeignKey("schools.id"), nullable=False),
        sa.Column("day", day_of_week_enum, nullable=False),
        sa.Column("time_slot_id", sa.String(length=36), sa.ForeignKey("time_slots.id"), nullable=False),
        sa.Column("academic_year", sa.String(length=20), nullable=False),
        sa.Column("semester", sa.Integer(), nullable=False),
        sa.Column("class_group_id", sa.String(length=36), nullable=True),
        sa.Column("subject_code", sa.String(length=50), nullable=True),
        sa.Column("custom_activity", sa.String(length=200), nullable=True),
        sa.Column("teacher_ids", sa.Text(), nullable=False, server_default="[]"),
        sa.Column("location_id", sa.String(length=36), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_schedule_entries_school_id", "schedule_entries", ["school_id"])
    op.create_index(
        "ix_schedule_entries_slot_term",
        "schedule_entries",
        ["school_id", "day", "time_slot_id", "academic_year", "semester"],
    )

    op.create_table(
        "substitutions",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("school_id", sa.String(length=36), sa.ForeignKey("schools.id"), nullable=False),
        sa.Column("substitution_date", sa.Date(), nullable=False),
        sa.Column("absent_teacher_id", sa.String(length=36), sa.ForeignKey("teachers.id"), nullable=False),
        sa.Column("substitute_teacher_id", sa.String(length=36), sa.ForeignKey("teachers.id"), nullable=False),
        sa.Column(
            "original_schedule_entry_id",
            sa.String(length=36),
            sa.ForeignKey("schedule_entries.id", ondelete="RESTRICT"),
            nullable=False,
        ),
        sa.Column("reason", sa.String(length=255), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index("ix_substitutions_school_id", "substitutions", ["school_id"])
    op.create_index("ix_substitutions_substitution_date", "substitutions", ["substitution_date"])
    op.create_index("ix_substitutions_substitute_teacher_id", "substitutions", ["substitute_teacher_id"])

    op.create_table(
        "attendance_logs",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("school_id", sa.String(length=36), sa.ForeignKey("schools.id"), nullable=False),
        sa.Column("attendance_date", sa.Date(), nullable=False),
        sa.Column("original_schedule_entry_id", sa.String(length=36), nullable=False),
        sa.Column("day", day_of_week_enum, nullable=False),
        sa.Column("time_slot_id", sa.String(length=36), nullable=True),
        sa.Column("time_slot_period", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("start_time", sa.String(length=8), nullable=False),
        sa.Column("end_time", sa.String(length=8), nullable=False),
        sa.Column("class_group_id", sa.String(length=36), nullable=True),
        sa.Column("subject_code", sa.String(length=50), nullable=True),
        sa.Column("custom_activity", sa.String(length=200), nullable=True),
        sa.Column("location_id", sa.String(length=36), nullable=True),
        sa.Column("original_teacher_ids", sa.Text(), nullable=False, server_default="[]"),
        sa.Column("is_present", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("substitute_teacher_id", sa.String(length=36), nullable=True),
        sa.Column("actual_teacher_ids", sa.Text(), nullable=False, server_default="[]"),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.UniqueConstraint(
            "school_id",
            "attendance_date",
            "original_schedule_entry_id",
            name="uq_attendance_log_entry_date",
        ),
    )
    op.create_index("ix_attendance_logs_school_id", "attendance_logs", ["school_id"])
    op.create_index("ix_attendance_logs_attendance_date", "attendance_logs", ["attendance_date"])
    op.create_index("ix_attendance_logs_class_group_id", "attendance_logs", ["class_group_id"])

    op.create_table(
        "activity_logs",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("school_id", sa.String(length=36), nullable=False),
        sa.Column("user_id", sa.String(length=36), nullable=True),
        sa.Column("action", sa.String(length=100), nullable=False),
        sa.Column("entity_type", sa.String(length=100), nullable=True),
        sa.Column("entity_id", sa.String(length=100), nullable=True),
        sa.Column("details", sa.JSON(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index("ix_activity_logs_school_id", "activity_logs", ["school_id"])


def downgrade() -> None:
    op.drop_index("ix_activity_logs_school_id", table_name="activity_logs")
    op.drop_table("activity_logs")
    op.drop_index("ix_attendance_logs_class_group_id", table_name="attendance_logs")
    op.drop_index("ix_attendance_logs_attendance_date", table_name="attendance_logs")
    op.drop_index("ix_attendance_logs_school_id", table_name="attendance_logs")
    op.drop_table("attendance_logs")
    op.drop_index("ix_substitutions_substitute_teacher_id", table_name="substitutions")
    op.drop_index("ix_substitutions_substitution_date", table_name="substitutions")
    op.drop_index("ix_substitutions_school_id", table_name="substitutions")
    op.drop_table("substitutions")
    op.drop_index("ix_schedule_entries_slot_term", table_name="schedule_entries")
    op.drop_index("ix_schedule_entries_school_id", table_name="schedule_entries")
    op.drop_table("schedule_entries")
    day_of_week_enum.drop(op.get_bind(), checkfirst=True)
