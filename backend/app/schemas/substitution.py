from __future__ import annotations

from datetime import date

from pydantic import Field, field_validator

from app.schemas.common import CamelModel, normalize_optional_id


class SubstitutionCreate(CamelModel):
    substitution_date: date | None = None
    absent_teacher_id: str | None = Field(default=None, max_length=36)
    substitute_teacher_id: str | None = Field(default=None, max_length=36)
    original_schedule_entry_id: str | None = Field(default=None, max_length=36)
    reason: str | None = Field(default=None, max_length=255)
    notes: str | None = Field(default=None, max_length=2000)
    replace_id: str | None = Field(default=None, max_length=36)

    @field_validator(
        "absent_teacher_id",
        "substitute_teacher_id",
        "original_schedule_entry_id",
        "reason",
        "notes",
        "replace_id",
        mode="before",
    )
    @classmethod
    def blank_to_none(cls, value: str | None) -> str | None:
        return normalize_optional_id(value)


class SubstitutionOut(CamelModel):
    id: str
    original_schedule_entry_id: str
    substitution_date: date = Field(alias="date")
    absent_teacher_id: str
    absent_teacher_name: str | None = None
    substitute_teacher_id: str
    substitute_teacher_name: str | None = None
    reason: str
    notes: str | None = None
    subject_code: str | None = None
    subject_name: str | None = None
    class_group_id: str | None = None
    class_group_name: str | None = None
    location_name: str | None = None
    time_slot_id: str
    time_slot_period: int | None = None
    start_time: str | None = None
    end_time: str | None = None
