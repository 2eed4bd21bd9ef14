from __future__ import annotations

import logging
import uuid

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.exceptions import (
    ConfigurationError,
    IntegrityConflictError,
    ResourceNotFoundError,
    ScheduleConflictError,
    ValidationError,
)
from app.db.transaction import atomic
from app.models.schedule_entry import ScheduleEntry
from app.models.school import School
from app.models.user import User
from app.schemas.schedule import ConflictOut, ResolveConflictRequest, ScheduleEntryIn, ScheduleEntryOut
from app.services.audit import log_activity
from app.services.conflict_service import ConflictDetector, Occupancy, ScheduleConflict

logger = logging.getLogger(__name__)

ENTRY_IN_USE_MESSAGE = "Schedule entry is referenced by substitutions; cancel them before removing the entry."


def current_term(db: Session, school_id: str) -> tuple[str, int]:
    school = db.get(School, school_id)
    if school is None or not school.academic_year or school.current_semester is None:
        raise ConfigurationError("School info not configured: academic year and current semester are required.")
    return school.academic_year, school.current_semester


def get_entry(db: Session, school_id: str, entry_id: str) -> ScheduleEntry:
    entry = db.execute(
        select(ScheduleEntry).where(ScheduleEntry.id == entry_id, ScheduleEntry.school_id == school_id)
    ).scalar_one_or_none()
    if entry is None:
        raise ResourceNotFoundError("Schedule entry", entry_id)
    return entry


def list_entries(
    db: Session,
    school_id: str,
    *,
    academic_year: str | None = None,
    semester: int | None = None,
) -> list[ScheduleEntry]:
    query = select(ScheduleEntry).where(ScheduleEntry.school_id == school_id)
    if academic_year is not None:
        query = query.where(ScheduleEntry.academic_year == academic_year)
    if semester is not None:
        query = query.where(ScheduleEntry.semester == semester)
    return list(db.execute(query.order_by(ScheduleEntry.day, ScheduleEntry.time_slot_id, ScheduleEntry.id)).scalars())


def occupancy_for(
    school_id: str,
    payload: ScheduleEntryIn,
    term: tuple[str, int],
    *,
    exclude_entry_id: str | None = None,
) -> Occupancy:
    academic_year, semester = term
    return Occupancy(
        school_id=school_id,
        day=payload.day,
        time_slot_id=payload.time_slot_id,
        academic_year=academic_year,
        semester=semester,
        teacher_ids=list(payload.teacher_ids),
        location_id=payload.location_id,
        class_group_id=payload.class_group_id,
        exclude_entry_id=exclude_entry_id,
    )


def conflict_error(conflict: ScheduleConflict) -> ScheduleConflictError:
    body = ConflictOut(
        kind=conflict.kind,
        conflicting_entry=ScheduleEntryOut.model_validate(conflict.conflicting_entry),
        message=conflict.message,
    ).model_dump(mode="json", by_alias=True)
    return ScheduleConflictError(conflict.message, body)


def _raise_on_conflict(db: Session, occupancy: Occupancy, operation: str) -> None:
    conflict = ConflictDetector(db).find_conflict(occupancy)
    if conflict is None:
        return
    logger.info(
        "SCHEDULE CONFLICT | operation=%s | school_id=%s | kind=%s | conflicting_entry=%s",
        operation,
        occupancy.school_id,
        conflict.kind,
        conflict.conflicting_entry.id,
    )
    raise conflict_error(conflict)


def _apply_fields(entry: ScheduleEntry, payload: ScheduleEntryIn, term: tuple[str, int]) -> None:
    entry.day = payload.day
    entry.time_slot_id = payload.time_slot_id
    entry.class_group_id = payload.class_group_id
    entry.subject_code = payload.subject_code
    entry.custom_activity = payload.custom_activity
    entry.teacher_ids = list(payload.teacher_ids)
    entry.location_id = payload.location_id
    entry.academic_year, entry.semester = term


def create_entry(db: Session, school_id: str, payload: ScheduleEntryIn, *, user: User | None = None) -> ScheduleEntry:
    term = current_term(db, school_id)
    with atomic(db, "schedule.create", school_id=school_id):
        _raise_on_conflict(db, occupancy_for(school_id, payload, term), "schedule.create")
        entry = ScheduleEntry(id=str(uuid.uuid4()), school_id=school_id)
        _apply_fields(entry, payload, term)
        db.add(entry)
        db.flush()
        log_activity(
            db,
            school_id=school_id,
            user=user,
            action="schedule.create",
            entity_type="schedule_entry",
            entity_id=entry.id,
        )
    db.refresh(entry)
    return entry


def update_entry(
    db: Session,
    school_id: str,
    entry_id: str,
    payload: ScheduleEntryIn,
    *,
    user: User | None = None,
) -> ScheduleEntry:
    entry = get_entry(db, school_id, entry_id)
    term = current_term(db, school_id)
    with atomic(db, "schedule.update", school_id=school_id):
        _raise_on_conflict(
            db,
            occupancy_for(school_id, payload, term, exclude_entry_id=entry_id),
            "schedule.update",
        )
        _apply_fields(entry, payload, term)
        log_activity(
            db,
            school_id=school_id,
            user=user,
            action="schedule.update",
            entity_type="schedule_entry",
            entity_id=entry.id,
        )
    db.refresh(entry)
    return entry


def delete_entry(db: Session, school_id: str, entry_id: str, *, user: User | None = None) -> None:
    entry = get_entry(db, school_id, entry_id)
    with atomic(db, "schedule.delete", school_id=school_id, integrity_message=ENTRY_IN_USE_MESSAGE):
        db.delete(entry)
        db.flush()
        log_activity(
            db,
            school_id=school_id,
            user=user,
            action="schedule.delete",
            entity_type="schedule_entry",
            entity_id=entry_id,
        )


def _delete_for_replacement(db: Session, entry: ScheduleEntry) -> None:
    try:
        db.delete(entry)
        db.flush()
    except IntegrityError as exc:
        logger.warning(
            "INTEGRITY VIOLATION | operation=schedule.resolve_conflict | school_id=%s | entry_id=%s | error=%s",
            entry.school_id,
            entry.id,
            exc.orig,
        )
        raise IntegrityConflictError(ENTRY_IN_USE_MESSAGE, details={"entry_id": entry.id}) from exc


def resolve_conflict(
    db: Session,
    school_id: str,
    payload: ResolveConflictRequest,
    *,
    user: User | None = None,
) -> tuple[ScheduleEntry, bool]:
    """Replace the conflicting entry with ``entry_to_save`` in one transaction.

    The detector is re-run after the delete so that a collision with a third
    entry aborts the whole replacement and the deleted entry is restored by
    the rollback. An ``entry_to_save.id`` outside this school is ignored and the
    entry is inserted under a fresh id. Returns the saved entry and whether it
    was an update.
    """
    if payload.entry_to_save is None or not payload.conflicting_entry_id:
        raise ValidationError("Missing entry data or conflicting entry ID.")

    to_save = payload.entry_to_save
    with atomic(db, "schedule.resolve_conflict", school_id=school_id):
        existing = None
        if to_save.id:
            existing = db.execute(
                select(ScheduleEntry).where(ScheduleEntry.id == to_save.id, ScheduleEntry.school_id == school_id)
            ).scalar_one_or_none()
        is_update = existing is not None

        conflicting = db.execute(
            select(ScheduleEntry).where(
                ScheduleEntry.id == payload.conflicting_entry_id,
                ScheduleEntry.school_id == school_id,
            )
        ).scalar_one_or_none()
        if conflicting is not None and conflicting is not existing:
            _delete_for_replacement(db, conflicting)

        term = current_term(db, school_id)

        _raise_on_conflict(
            db,
            occupancy_for(school_id, to_save, term, exclude_entry_id=existing.id if existing else None),
            "schedule.resolve_conflict",
        )

        entry = existing or ScheduleEntry(id=str(uuid.uuid4()), school_id=school_id)
        _apply_fields(entry, to_save, term)
        if not is_update:
            db.add(entry)
        db.flush()
        log_activity(
            db,
            school_id=school_id,
            user=user,
            action="schedule.resolve_conflict",
            entity_type="schedule_entry",
            entity_id=entry.id,
            details={"replaced_entry_id": payload.conflicting_entry_id, "updated": is_update},
        )
    db.refresh(entry)
    return entry, is_update
