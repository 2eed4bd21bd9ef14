from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field
from datetime import date

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from app.core.config import get_settings
from app.core.exceptions import ResourceNotFoundError, ValidationError
from app.db.transaction import atomic
from app.models.attendance_log import AttendanceLog
from app.models.schedule_entry import DayOfWeek, ScheduleEntry
from app.models.substitution import Substitution
from app.models.time_slot import TimeSlot
from app.models.user import User
from app.schemas.attendance import (
    AttendanceRecordIn,
    AttendanceResetRequest,
    AttendanceResetResponse,
    AttendanceSaveResponse,
)
from app.services.audit import log_activity
from app.services.schedule_service import current_term

logger = logging.getLogger(__name__)

SNAPSHOT_FIELDS = (
    "day",
    "time_slot_id",
    "time_slot_period",
    "start_time",
    "end_time",
    "class_group_id",
    "subject_code",
    "custom_activity",
    "location_id",
    "original_teacher_ids",
)


@dataclass
class AttendanceDraft:
    """An unsaved attendance record synthesized from a live schedule entry."""

    attendance_date: date
    original_schedule_entry_id: str
    day: DayOfWeek
    time_slot_id: str | None
    time_slot_period: int
    start_time: str
    end_time: str
    class_group_id: str | None
    subject_code: str | None
    custom_activity: str | None
    location_id: str | None
    original_teacher_ids: list[str] = field(default_factory=list)
    is_present: bool = False
    substitute_teacher_id: str | None = None
    actual_teacher_ids: list[str] = field(default_factory=list)
    notes: str | None = None
    id: str | None = None


@dataclass(frozen=True)
class LiveDay:
    class_group_id: str
    records: list[AttendanceDraft]
    source: str = "live"


@dataclass(frozen=True)
class OverriddenDay:
    class_group_id: str
    records: list[AttendanceLog]
    source: str = "overridden"


# A class group's day is read either from the live schedule or from its saved logs, never both.
DaySchedule = LiveDay | OverriddenDay


def is_lunch_break(custom_activity: str | None) -> bool:
    return bool(custom_activity) and custom_activity.strip() == get_settings().lunch_break_activity


def _time_slots(db: Session, school_id: str) -> dict[str, TimeSlot]:
    return {slot.id: slot for slot in db.execute(select(TimeSlot).where(TimeSlot.school_id == school_id)).scalars()}


def list_logs(db: Session, school_id: str, on_date: date | None) -> list[AttendanceLog]:
    if on_date is None:
        raise ValidationError("Date query parameter is required.")
    return list(
        db.execute(
            select(AttendanceLog)
            .where(AttendanceLog.school_id == school_id, AttendanceLog.attendance_date == on_date)
            .order_by(AttendanceLog.class_group_id, AttendanceLog.time_slot_period, AttendanceLog.id)
        ).scalars()
    )


def _draft_from_entry(
    entry: ScheduleEntry,
    on_date: date,
    slot: TimeSlot | None,
    substitute_teacher_id: str | None,
) -> AttendanceDraft:
    return AttendanceDraft(
        attendance_date=on_date,
        original_schedule_entry_id=entry.id,
        day=entry.day,
        time_slot_id=entry.time_slot_id,
        time_slot_period=slot.period if slot else 0,
        start_time=slot.start_time if slot else "00:00",
        end_time=slot.end_time if slot else "00:00",
        class_group_id=entry.class_group_id,
        subject_code=entry.subject_code,
        custom_activity=entry.custom_activity,
        location_id=entry.location_id,
        original_teacher_ids=list(entry.teacher_ids or []),
        substitute_teacher_id=substitute_teacher_id,
    )


def reconcile_day(db: Session, school_id: str, on_date: date | None) -> list[DaySchedule]:
    """Effective occupancy per class group for one date.

    A class group with any saved log on the date is driven entirely by its
    logs. Otherwise a default, unsaved record is drafted for each live entry
    of the current term, pre-filled with the substitute assigned for that date.
    """
    logs = list_logs(db, school_id, on_date)
    academic_year, semester = current_term(db, school_id)
    day = DayOfWeek.for_date(on_date)

    live_entries = list(
        db.execute(
            select(ScheduleEntry).where(
                ScheduleEntry.school_id == school_id,
                ScheduleEntry.day == day,
                ScheduleEntry.academic_year == academic_year,
                ScheduleEntry.semester == semester,
                ScheduleEntry.class_group_id.is_not(None),
            )
        ).scalars()
    )
    substitutes = {
        item.original_schedule_entry_id: item.substitute_teacher_id
        for item in db.execute(
            select(Substitution)
            .where(Substitution.school_id == school_id, Substitution.substitution_date == on_date)
            .order_by(Substitution.created_at, Substitution.id)
        ).scalars()
    }
    slots = _time_slots(db, school_id)

    logs_by_group: dict[str, list[AttendanceLog]] = {}
    for log in logs:
        if log.class_group_id:
            logs_by_group.setdefault(log.class_group_id, []).append(log)
    live_by_group: dict[str, list[ScheduleEntry]] = {}
    for entry in live_entries:
        live_by_group.setdefault(entry.class_group_id, []).append(entry)

    result: list[DaySchedule] = []
    for class_group_id in sorted(set(logs_by_group) | set(live_by_group)):
        saved = logs_by_group.get(class_group_id)
        if saved:
            result.append(OverriddenDay(class_group_id=class_group_id, records=saved))
            continue
        drafts = [
            _draft_from_entry(entry, on_date, slots.get(entry.time_slot_id), substitutes.get(entry.id))
            for entry in live_by_group[class_group_id]
        ]
        drafts.sort(key=lambda item: (item.time_slot_period, item.original_schedule_entry_id))
        result.append(LiveDay(class_group_id=class_group_id, records=drafts))
    return result


def _snapshot_source(
    db: Session,
    school_id: str,
    record: AttendanceRecordIn,
    existing: AttendanceLog | None,
    slots: dict[str, TimeSlot],
) -> dict:
    # Re-saving a stamped day keeps the snapshot frozen at first save.
    if existing is not None:
        return {name: getattr(existing, name) for name in SNAPSHOT_FIELDS}

    entry = db.execute(
        select(ScheduleEntry).where(
            ScheduleEntry.id == record.original_schedule_entry_id,
            ScheduleEntry.school_id == school_id,
        )
    ).scalar_one_or_none()
    if entry is None:
        raise ResourceNotFoundError("Schedule entry", record.original_schedule_entry_id)
    draft = _draft_from_entry(entry, record.attendance_date, slots.get(entry.time_slot_id), None)
    return {name: getattr(draft, name) for name in SNAPSHOT_FIELDS}


def save_logs(
    db: Session,
    school_id: str,
    records: list[AttendanceRecordIn],
    *,
    user: User | None = None,
) -> AttendanceSaveResponse:
    if not records:
        return AttendanceSaveResponse(message="No records to save.")

    # Last record wins when the same entry/date pair is sent twice.
    by_key: dict[tuple[date, str], AttendanceRecordIn] = {}
    for record in records:
        by_key[(record.attendance_date, record.original_schedule_entry_id)] = record

    slots = _time_slots(db, school_id)
    skipped = 0
    with atomic(db, "attendance.save", school_id=school_id):
        dates = {key[0] for key in by_key}
        entry_ids = {key[1] for key in by_key}
        existing_logs = {
            (log.attendance_date, log.original_schedule_entry_id): log
            for log in db.execute(
                select(AttendanceLog).where(
                    AttendanceLog.school_id == school_id,
                    AttendanceLog.attendance_date.in_(dates),
                    AttendanceLog.original_schedule_entry_id.in_(entry_ids),
                )
            ).scalars()
        }

        replacements: list[AttendanceLog] = []
        replaced: list[AttendanceLog] = []
        for key, record in by_key.items():
            existing = existing_logs.get(key)
            snapshot = _snapshot_source(db, school_id, record, existing, slots)
            activity = snapshot["custom_activity"]
            if is_lunch_break(activity):
                skipped += 1
                continue
            if activity and not record.actual_teacher_ids:
                skipped += 1
                continue
            if existing is not None:
                replaced.append(existing)
            replacements.append(
                AttendanceLog(
                    id=existing.id if existing is not None else str(uuid.uuid4()),
                    school_id=school_id,
                    attendance_date=record.attendance_date,
                    original_schedule_entry_id=record.original_schedule_entry_id,
                    is_present=record.is_present,
                    substitute_teacher_id=record.substitute_teacher_id,
                    actual_teacher_ids=list(record.actual_teacher_ids),
                    notes=record.notes,
                    **snapshot,
                )
            )

        # Deletes must reach the store before inserts reuse the same identities.
        for log in replaced:
            db.delete(log)
        db.flush()
        db.add_all(replacements)
        db.flush()
        log_activity(
            db,
            school_id=school_id,
            user=user,
            action="attendance.save",
            entity_type="attendance_log",
            details={
                "dates": sorted(item.isoformat() for item in dates),
                "saved": len(replacements),
                "skipped": skipped,
            },
        )

    return AttendanceSaveResponse(
        message="Attendance records saved successfully.",
        saved=len(replacements),
        skipped=skipped,
    )


def reset_logs(
    db: Session,
    school_id: str,
    payload: AttendanceResetRequest,
    *,
    user: User | None = None,
) -> AttendanceResetResponse:
    if payload.reset_date is None or not payload.class_group_ids:
        raise ValidationError("date and a non-empty array of classGroupIds are required.")

    with atomic(db, "attendance.reset", school_id=school_id):
        result = db.execute(
            delete(AttendanceLog).where(
                AttendanceLog.school_id == school_id,
                AttendanceLog.attendance_date == payload.reset_date,
                AttendanceLog.class_group_id.in_(payload.class_group_ids),
            )
        )
        deleted = result.rowcount or 0
        log_activity(
            db,
            school_id=school_id,
            user=user,
            action="attendance.reset",
            entity_type="attendance_log",
            details={
                "date": payload.reset_date.isoformat(),
                "class_group_ids": list(payload.class_group_ids),
                "deleted": deleted,
            },
        )
    return AttendanceResetResponse(message=f"Reset {deleted} attendance records successfully.", deleted=deleted)
