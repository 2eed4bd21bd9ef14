from __future__ import annotations

from datetime import date
from typing import Literal

from pydantic import Field, field_validator

from app.models.schedule_entry import DayOfWeek
from app.schemas.common import CamelModel, normalize_optional_id


class AttendanceRecordIn(CamelModel):
    attendance_date: date
    original_schedule_entry_id: str = Field(min_length=1, max_length=36)
    is_present: bool = False
    substitute_teacher_id: str | None = Field(default=None, max_length=36)
    actual_teacher_ids: list[str] = Field(default_factory=list, max_length=50)
    notes: str | None = Field(default=None, max_length=2000)

    @field_validator("substitute_teacher_id", "notes", mode="before")
    @classmethod
    def blank_to_none(cls, value: str | None) -> str | None:
        return normalize_optional_id(value)

    @field_validator("actual_teacher_ids", mode="before")
    @classmethod
    def clean_teacher_ids(cls, value):
        if value is None:
            return []
        return [str(item).strip() for item in value if str(item).strip()]


class AttendanceRecordOut(CamelModel):
    id: str | None = None
    attendance_date: date
    original_schedule_entry_id: str
    day: DayOfWeek
    time_slot_id: str | None = None
    time_slot_period: int = 0
    start_time: str
    end_time: str
    class_group_id: str | None = None
    subject_code: str | None = None
    custom_activity: str | None = None
    location_id: str | None = None
    original_teacher_ids: list[str] = Field(default_factory=list)
    is_present: bool = False
    substitute_teacher_id: str | None = None
    actual_teacher_ids: list[str] = Field(default_factory=list)
    notes: str | None = None


class ClassGroupDayOut(CamelModel):
    class_group_id: str
    source: Literal["live", "overridden"]
    records: list[AttendanceRecordOut]


class AttendanceSaveResponse(CamelModel):
    success: bool = True
    message: str
    saved: int = 0
    skipped: int = 0


class AttendanceResetRequest(CamelModel):
    reset_date: date | None = Field(default=None, alias="date")
    class_group_ids: list[str] = Field(default_factory=list, max_length=500)

    @field_validator("class_group_ids", mode="before")
    @classmethod
    def drop_blank_ids(cls, value):
        if value is None:
            return []
        return [str(item).strip() for item in value if str(item).strip()]


class AttendanceResetResponse(CamelModel):
    success: bool = True
    message: str
    deleted: int = 0
