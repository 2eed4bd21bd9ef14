import uuid
from datetime import date, datetime

from sqlalchemy import Boolean, Date, DateTime, Enum as SAEnum, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from app.db.base import Base
from app.db.types import JSONIdList
from app.models.schedule_entry import DayOfWeek


class AttendanceLog(Base):
    __tablename__ = "attendance_logs"
    __table_args__ = (
        UniqueConstraint(
            "school_id",
            "attendance_date",
            "original_schedule_entry_id",
            name="uq_attendance_log_entry_date",
        ),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    school_id: Mapped[str] = mapped_column(String(36), ForeignKey("schools.id"), index=True, nullable=False)
    attendance_date: Mapped[date] = mapped_column(Date, index=True, nullable=False)
    # Snapshot reference only; the live entry may be edited or deleted after stamping.
    original_schedule_entry_id: Mapped[str] = mapped_column(String(36), nullable=False)
    day: Mapped[DayOfWeek] = mapped_column(SAEnum(DayOfWeek, name="day_of_week"), nullable=False)
    time_slot_id: Mapped[str | None] = mapped_column(String(36), nullable=True)
    time_slot_period: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    start_time: Mapped[str] = mapped_column(String(8), nullable=False, default="00:00")
    end_time: Mapped[str] = mapped_column(String(8), nullable=False, default="00:00")
    class_group_id: Mapped[str | None] = mapped_column(String(36), index=True, nullable=True)
    subject_code: Mapped[str | None] = mapped_column(String(50), nullable=True)
    custom_activity: Mapped[str | None] = mapped_column(String(200), nullable=True)
    location_id: Mapped[str | None] = mapped_column(String(36), nullable=True)
    original_teacher_ids: Mapped[list[str]] = mapped_column(JSONIdList, nullable=False, default=list)
    is_present: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    substitute_teacher_id: Mapped[str | None] = mapped_column(String(36), nullable=True)
    actual_teacher_ids: Mapped[list[str]] = mapped_column(JSONIdList, nullable=False, default=list)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
