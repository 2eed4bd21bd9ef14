from __future__ import annotations

import logging
import uuid
from datetime import date

from sqlalchemy import and_, select
from sqlalchemy.orm import Session, aliased

from app.core.exceptions import ConflictError, ResourceNotFoundError, ValidationError
from app.core.messages import message
from app.db.transaction import atomic
from app.models.class_group import ClassGroup
from app.models.location import Location
from app.models.schedule_entry import ScheduleEntry
from app.models.subject import Subject
from app.models.substitution import Substitution
from app.models.teacher import Teacher
from app.models.time_slot import TimeSlot
from app.models.user import User
from app.schemas.substitution import SubstitutionCreate, SubstitutionOut
from app.services.audit import log_activity

logger = logging.getLogger(__name__)


def _hydrated_query(school_id: str):
    absent = aliased(Teacher)
    substitute = aliased(Teacher)
    return (
        select(
            Substitution.id,
            Substitution.original_schedule_entry_id,
            Substitution.substitution_date,
            Substitution.absent_teacher_id,
            absent.name.label("absent_teacher_name"),
            Substitution.substitute_teacher_id,
            substitute.name.label("substitute_teacher_name"),
            Substitution.reason,
            Substitution.notes,
            ScheduleEntry.subject_code,
            Subject.name.label("subject_name"),
            ScheduleEntry.custom_activity,
            ScheduleEntry.class_group_id,
            ClassGroup.name.label("class_group_name"),
            Location.name.label("location_name"),
            ScheduleEntry.time_slot_id,
            TimeSlot.period.label("time_slot_period"),
            TimeSlot.start_time,
            TimeSlot.end_time,
        )
        .join(ScheduleEntry, ScheduleEntry.id == Substitution.original_schedule_entry_id)
        .outerjoin(absent, absent.id == Substitution.absent_teacher_id)
        .outerjoin(substitute, substitute.id == Substitution.substitute_teacher_id)
        .outerjoin(
            Subject,
            and_(Subject.code == ScheduleEntry.subject_code, Subject.school_id == ScheduleEntry.school_id),
        )
        .outerjoin(ClassGroup, ClassGroup.id == ScheduleEntry.class_group_id)
        .outerjoin(Location, Location.id == ScheduleEntry.location_id)
        .outerjoin(TimeSlot, TimeSlot.id == ScheduleEntry.time_slot_id)
        .where(Substitution.school_id == school_id)
    )


def _to_out(row) -> SubstitutionOut:
    data = dict(row._mapping)
    # Custom activities have no subject row; show the activity label instead.
    data["subject_name"] = data.get("subject_name") or data.pop("custom_activity", None)
    data.pop("custom_activity", None)
    return SubstitutionOut.model_validate(data)


def list_for_date(db: Session, school_id: str, on_date: date | None) -> list[SubstitutionOut]:
    if on_date is None:
        raise ValidationError("Date query parameter is required.")
    rows = db.execute(
        _hydrated_query(school_id)
        .where(Substitution.substitution_date == on_date)
        .order_by(TimeSlot.period, Substitution.id)
    ).all()
    return [_to_out(row) for row in rows]


def get_substitution(db: Session, school_id: str, substitution_id: str) -> SubstitutionOut:
    row = db.execute(_hydrated_query(school_id).where(Substitution.id == substitution_id)).first()
    if row is None:
        raise ResourceNotFoundError("Substitution", substitution_id)
    return _to_out(row)


def _require_teacher(db: Session, school_id: str, teacher_id: str) -> Teacher:
    teacher = db.execute(
        select(Teacher).where(Teacher.id == teacher_id, Teacher.school_id == school_id)
    ).scalar_one_or_none()
    if teacher is None:
        raise ResourceNotFoundError("Teacher", teacher_id)
    return teacher


def find_double_booking(
    db: Session,
    school_id: str,
    *,
    on_date: date,
    substitute_teacher_id: str,
    time_slot_id: str,
    exclude_id: str | None = None,
):
    query = (
        select(Substitution.id, Teacher.name.label("teacher_name"), ClassGroup.name.label("class_group_name"))
        .join(ScheduleEntry, ScheduleEntry.id == Substitution.original_schedule_entry_id)
        .outerjoin(Teacher, Teacher.id == Substitution.substitute_teacher_id)
        .outerjoin(ClassGroup, ClassGroup.id == ScheduleEntry.class_group_id)
        .where(
            Substitution.school_id == school_id,
            Substitution.substitution_date == on_date,
            Substitution.substitute_teacher_id == substitute_teacher_id,
            ScheduleEntry.time_slot_id == time_slot_id,
        )
    )
    if exclude_id:
        query = query.where(Substitution.id != exclude_id)
    return db.execute(query.order_by(Substitution.id)).first()


def assign_substitute(
    db: Session,
    school_id: str,
    payload: SubstitutionCreate,
    *,
    user: User | None = None,
) -> SubstitutionOut:
    if (
        payload.substitution_date is None
        or not payload.absent_teacher_id
        or not payload.substitute_teacher_id
        or not payload.original_schedule_entry_id
        or not payload.reason
    ):
        raise ValidationError("Missing required fields for substitution.")
    if payload.absent_teacher_id == payload.substitute_teacher_id:
        raise ValidationError("Substitute teacher must be different from the absent teacher.")

    new_id = str(uuid.uuid4())
    with atomic(db, "substitution.assign", school_id=school_id):
        original = db.execute(
            select(ScheduleEntry).where(
                ScheduleEntry.id == payload.original_schedule_entry_id,
                ScheduleEntry.school_id == school_id,
            )
        ).scalar_one_or_none()
        if original is None:
            raise ResourceNotFoundError("Schedule entry", payload.original_schedule_entry_id)
        _require_teacher(db, school_id, payload.absent_teacher_id)
        _require_teacher(db, school_id, payload.substitute_teacher_id)

        clash = find_double_booking(
            db,
            school_id,
            on_date=payload.substitution_date,
            substitute_teacher_id=payload.substitute_teacher_id,
            time_slot_id=original.time_slot_id,
            exclude_id=payload.replace_id,
        )
        if clash is not None:
            logger.info(
                "SUBSTITUTE DOUBLE BOOKED | school_id=%s | date=%s | substitute=%s | existing=%s",
                school_id,
                payload.substitution_date.isoformat(),
                payload.substitute_teacher_id,
                clash.id,
            )
            raise ConflictError(
                message(
                    "substitution.double_booked",
                    teacher=clash.teacher_name or payload.substitute_teacher_id,
                    class_group=clash.class_group_name or message("substitution.other_group"),
                ),
                details={"conflicting_substitution_id": clash.id},
            )

        if payload.replace_id:
            previous = db.execute(
                select(Substitution).where(
                    Substitution.id == payload.replace_id,
                    Substitution.school_id == school_id,
                )
            ).scalar_one_or_none()
            if previous is not None:
                db.delete(previous)
                db.flush()

        db.add(
            Substitution(
                id=new_id,
                school_id=school_id,
                substitution_date=payload.substitution_date,
                absent_teacher_id=payload.absent_teacher_id,
                substitute_teacher_id=payload.substitute_teacher_id,
                original_schedule_entry_id=original.id,
                reason=payload.reason,
                notes=payload.notes,
            )
        )
        db.flush()
        log_activity(
            db,
            school_id=school_id,
            user=user,
            action="substitution.assign",
            entity_type="substitution",
            entity_id=new_id,
            details={
                "substitute_teacher_id": payload.substitute_teacher_id,
                "absent_teacher_id": payload.absent_teacher_id,
                "replaced_id": payload.replace_id,
            },
        )
    return get_substitution(db, school_id, new_id)


def unassign_substitute(db: Session, school_id: str, substitution_id: str, *, user: User | None = None) -> None:
    record = db.execute(
        select(Substitution).where(Substitution.id == substitution_id, Substitution.school_id == school_id)
    ).scalar_one_or_none()
    if record is None:
        raise ResourceNotFoundError("Substitution", substitution_id)
    with atomic(db, "substitution.unassign", school_id=school_id):
        db.delete(record)
        log_activity(
            db,
            school_id=school_id,
            user=user,
            action="substitution.unassign",
            entity_type="substitution",
            entity_id=substitution_id,
        )
