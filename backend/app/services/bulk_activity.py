from __future__ import annotations

import logging
import uuid
from collections.abc import Iterator
from dataclasses import dataclass

from sqlalchemy.orm import Session

from app.core.exceptions import ValidationError
from app.db.transaction import atomic
from app.models.schedule_entry import DayOfWeek, ScheduleEntry
from app.models.user import User
from app.schemas.schedule import BulkActivityRequest, BulkActivityResponse, BulkConflictOut
from app.services.audit import log_activity
from app.services.conflict_service import ConflictDetector, Occupancy
from app.services.schedule_service import current_term

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PlacementCandidate:
    day: DayOfWeek
    time_slot_id: str
    class_group_id: str | None


def expand_candidates(payload: BulkActivityRequest) -> Iterator[PlacementCandidate]:
    # Days outer, then slots, then class groups: later candidates must see earlier inserts.
    class_groups: list[str | None] = list(payload.class_group_ids) or [None]
    for day in payload.days:
        for time_slot_id in payload.time_slot_ids:
            for class_group_id in class_groups:
                yield PlacementCandidate(day=day, time_slot_id=time_slot_id, class_group_id=class_group_id)


def validate_request(payload: BulkActivityRequest) -> None:
    if not payload.custom_activity or not payload.days or not payload.time_slot_ids:
        raise ValidationError("customActivity, days and timeSlotIds are required.")
    if not payload.class_group_ids and not payload.teacher_ids:
        raise ValidationError("At least one class group or teacher must be selected.")


def place_bulk_activity(
    db: Session,
    school_id: str,
    payload: BulkActivityRequest,
    *,
    user: User | None = None,
) -> BulkActivityResponse:
    """Insert every candidate that does not collide; report the ones that do.

    Candidates are folded one at a time inside a single transaction. Each
    successful insert is flushed before the next check so the batch cannot
    double-book itself.
    """
    validate_request(payload)
    academic_year, semester = current_term(db, school_id)
    detector = ConflictDetector(db)

    placed = 0
    skipped: list[BulkConflictOut] = []
    with atomic(db, "schedule.bulk_activity", school_id=school_id):
        for candidate in expand_candidates(payload):
            conflict = detector.find_conflict(
                Occupancy(
                    school_id=school_id,
                    day=candidate.day,
                    time_slot_id=candidate.time_slot_id,
                    academic_year=academic_year,
                    semester=semester,
                    teacher_ids=list(payload.teacher_ids),
                    location_id=payload.location_id,
                    class_group_id=candidate.class_group_id,
                )
            )
            if conflict is not None:
                skipped.append(
                    BulkConflictOut(
                        day=candidate.day,
                        time_slot_id=candidate.time_slot_id,
                        class_group_id=candidate.class_group_id,
                        kind=conflict.kind,
                        conflicting_entry_id=conflict.conflicting_entry.id,
                        reason=conflict.message,
                    )
                )
                continue

            db.add(
                ScheduleEntry(
                    id=str(uuid.uuid4()),
                    school_id=school_id,
                    day=candidate.day,
                    time_slot_id=candidate.time_slot_id,
                    academic_year=academic_year,
                    semester=semester,
                    class_group_id=candidate.class_group_id,
                    subject_code=None,
                    custom_activity=payload.custom_activity,
                    teacher_ids=list(payload.teacher_ids),
                    location_id=payload.location_id,
                )
            )
            db.flush()
            placed += 1

        log_activity(
            db,
            school_id=school_id,
            user=user,
            action="schedule.bulk_activity",
            entity_type="schedule_entry",
            details={"activity": payload.custom_activity, "placed": placed, "skipped": len(skipped)},
        )

    total = placed + len(skipped)
    logger.info(
        "BULK ACTIVITY PLACED | school_id=%s | activity=%s | placed=%d | skipped=%d",
        school_id,
        payload.custom_activity,
        placed,
        len(skipped),
    )
    if skipped:
        message = f"Placed {placed} of {total} slots; {len(skipped)} skipped because of conflicts."
    else:
        message = f"Placed all {placed} slots."
    return BulkActivityResponse(
        message=message,
        success_count=placed,
        skipped_count=len(skipped),
        conflicts=skipped,
    )
