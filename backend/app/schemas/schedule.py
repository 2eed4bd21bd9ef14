from __future__ import annotations

from typing import Literal

from pydantic import Field, field_validator

from app.models.schedule_entry import DayOfWeek
from app.schemas.common import CamelModel, normalize_optional_id

ConflictKind = Literal["teacher", "location", "classGroup"]


class ScheduleEntryIn(CamelModel):
    day: DayOfWeek
    time_slot_id: str = Field(min_length=1, max_length=36)
    class_group_id: str | None = Field(default=None, max_length=36)
    subject_code: str | None = Field(default=None, max_length=50)
    custom_activity: str | None = Field(default=None, max_length=200)
    teacher_ids: list[str] = Field(default_factory=list, max_length=50)
    location_id: str | None = Field(default=None, max_length=36)

    @field_validator("class_group_id", "subject_code", "custom_activity", "location_id", mode="before")
    @classmethod
    def blank_to_none(cls, value: str | None) -> str | None:
        return normalize_optional_id(value)

    @field_validator("teacher_ids", mode="before")
    @classmethod
    def clean_teacher_ids(cls, value):
        if value is None:
            return []
        if not isinstance(value, list):
            raise ValueError("teacherIds must be an array")
        return [str(item).strip() for item in value if str(item).strip()]


class ScheduleEntryUpsert(ScheduleEntryIn):
    id: str | None = Field(default=None, max_length=36)


class ScheduleEntryOut(CamelModel):
    id: str
    school_id: str
    day: DayOfWeek
    time_slot_id: str
    academic_year: str
    semester: int
    class_group_id: str | None = None
    subject_code: str | None = None
    custom_activity: str | None = None
    teacher_ids: list[str] = Field(default_factory=list)
    location_id: str | None = None


class ConflictOut(CamelModel):
    kind: ConflictKind
    conflicting_entry: ScheduleEntryOut
    message: str


class ScheduleMutationResponse(CamelModel):
    success: bool = True
    item: ScheduleEntryOut


class ResolveConflictRequest(CamelModel):
    entry_to_save: ScheduleEntryUpsert | None = None
    conflicting_entry_id: str | None = None


class BulkActivityRequest(CamelModel):
    custom_activity: str | None = Field(default=None, max_length=200)
    days: list[DayOfWeek] = Field(default_factory=list, max_length=7)
    time_slot_ids: list[str] = Field(default_factory=list, max_length=50)
    class_group_ids: list[str] = Field(default_factory=list, max_length=500)
    teacher_ids: list[str] = Field(default_factory=list, max_length=50)
    location_id: str | None = Field(default=None, max_length=36)

    @field_validator("custom_activity", "location_id", mode="before")
    @classmethod
    def blank_to_none(cls, value: str | None) -> str | None:
        return normalize_optional_id(value)

    @field_validator("time_slot_ids", "class_group_ids", "teacher_ids", mode="before")
    @classmethod
    def drop_blank_ids(cls, value):
        if value is None:
            return []
        return [str(item).strip() for item in value if str(item).strip()]


class BulkConflictOut(CamelModel):
    day: DayOfWeek
    time_slot_id: str
    class_group_id: str | None = None
    kind: ConflictKind
    conflicting_entry_id: str
    reason: str


class BulkActivityResponse(CamelModel):
    success: bool = True
    message: str
    success_count: int
    skipped_count: int
    conflicts: list[BulkConflictOut] = Field(default_factory=list)
