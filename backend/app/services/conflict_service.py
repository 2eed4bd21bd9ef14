from __future__ import annotations

from dataclasses import dataclass, field

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.core.messages import message
from app.models.schedule_entry import DayOfWeek, ScheduleEntry


@dataclass(frozen=True)
class Occupancy:
    """The claim a candidate entry makes on one day/time slot/term."""

    school_id: str
    day: DayOfWeek
    time_slot_id: str
    academic_year: str
    semester: int
    teacher_ids: list[str] = field(default_factory=list)
    location_id: str | None = None
    class_group_id: str | None = None
    exclude_entry_id: str | None = None

    @property
    def claims_anything(self) -> bool:
        return bool(self.teacher_ids) or bool(self.location_id) or bool(self.class_group_id)


@dataclass(frozen=True)
class ScheduleConflict:
    kind: str
    conflicting_entry: ScheduleEntry
    message: str


class ConflictDetector:
    """Finds an existing entry that double-books a teacher, location or class group.

    Only the first colliding entry (by id) is reported. The collision kind is
    classified in priority order: teacher, then location, then class group.
    """

    def __init__(self, db: Session):
        self.db = db

    def candidates(self, occupancy: Occupancy) -> list[ScheduleEntry]:
        query = select(ScheduleEntry).where(
            ScheduleEntry.school_id == occupancy.school_id,
            ScheduleEntry.day == occupancy.day,
            ScheduleEntry.time_slot_id == occupancy.time_slot_id,
            ScheduleEntry.academic_year == occupancy.academic_year,
            ScheduleEntry.semester == occupancy.semester,
        )
        if occupancy.exclude_entry_id:
            query = query.where(ScheduleEntry.id != occupancy.exclude_entry_id)
        return list(self.db.execute(query.order_by(ScheduleEntry.id)).scalars())

    def find_conflict(self, occupancy: Occupancy) -> ScheduleConflict | None:
        # An entry that claims nothing cannot collide with anything.
        if not occupancy.claims_anything:
            return None

        wanted_teachers = set(occupancy.teacher_ids)
        for entry in self.candidates(occupancy):
            kind = self._classify(entry, occupancy, wanted_teachers)
            if kind is not None:
                return ScheduleConflict(kind=kind, conflicting_entry=entry, message=message(f"conflict.{kind}"))
        return None

    @staticmethod
    def _classify(entry: ScheduleEntry, occupancy: Occupancy, wanted_teachers: set[str]) -> str | None:
        if wanted_teachers and wanted_teachers.intersection(entry.teacher_ids or []):
            return "teacher"
        if occupancy.location_id and entry.location_id == occupancy.location_id:
            return "location"
        if occupancy.class_group_id and entry.class_group_id == occupancy.class_group_id:
            return "classGroup"
        return None
