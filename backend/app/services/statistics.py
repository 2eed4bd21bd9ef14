from __future__ import annotations

from datetime import date

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from app.core.exceptions import ValidationError
from app.models.attendance_log import AttendanceLog
from app.models.subject import Subject
from app.models.substitution import Substitution
from app.models.teacher import Teacher
from app.schemas.statistics import SubjectStat, TeacherAttendanceSummary, TeacherSubstitutionSummary
from app.services.attendance import is_lunch_break


def validate_range(start_date: date | None, end_date: date | None) -> tuple[date, date]:
    if start_date is None or end_date is None:
        raise ValidationError("startDate and endDate are required.")
    if start_date > end_date:
        raise ValidationError("startDate must not be after endDate.")
    return start_date, end_date


def _active_teachers(db: Session, school_id: str) -> list[Teacher]:
    return list(
        db.execute(
            select(Teacher)
            .where(Teacher.school_id == school_id, Teacher.is_active.is_(True))
            .order_by(Teacher.name, Teacher.id)
        ).scalars()
    )


def _stat_for(
    stats: dict[str, TeacherAttendanceSummary],
    teacher_id: str,
    key: str,
    subject_name: str,
) -> SubjectStat | None:
    summary = stats.get(teacher_id)
    if summary is None:
        return None
    return summary.subject_stats.setdefault(key, SubjectStat(subject_name=subject_name))


def attendance_summary(
    db: Session,
    school_id: str,
    start_date: date | None,
    end_date: date | None,
) -> list[TeacherAttendanceSummary]:
    start_date, end_date = validate_range(start_date, end_date)
    teachers = _active_teachers(db, school_id)
    stats: dict[str, TeacherAttendanceSummary] = {
        teacher.id: TeacherAttendanceSummary(teacher_id=teacher.id, teacher_name=teacher.name) for teacher in teachers
    }
    subject_names = {
        subject.code: subject.name
        for subject in db.execute(select(Subject).where(Subject.school_id == school_id)).scalars()
    }
    logs = db.execute(
        select(AttendanceLog)
        .where(
            AttendanceLog.school_id == school_id,
            AttendanceLog.attendance_date.between(start_date, end_date),
        )
        .order_by(AttendanceLog.attendance_date, AttendanceLog.time_slot_period, AttendanceLog.id)
    ).scalars()

    for log in logs:
        subject_name = subject_names.get(log.subject_code or "") or log.subject_code or log.custom_activity
        if not subject_name or is_lunch_break(log.custom_activity):
            continue
        key = log.subject_code or f"activity_{log.custom_activity}"
        original = list(log.original_teacher_ids or [])

        for teacher_id in original:
            stat = _stat_for(stats, teacher_id, key, subject_name)
            if stat is not None:
                stat.total_scheduled += 1

        if log.substitute_teacher_id:
            for teacher_id in original:
                stat = _stat_for(stats, teacher_id, key, subject_name)
                if stat is not None:
                    stat.taught_by_substitute += 1
        elif log.is_present:
            taught_by = original
            if log.custom_activity and log.actual_teacher_ids:
                taught_by = list(log.actual_teacher_ids)
            for teacher_id in taught_by:
                stat = _stat_for(stats, teacher_id, key, subject_name)
                if stat is None:
                    continue
                stat.taught_by_self += 1
                # Keeps taught-by-self from exceeding scheduled for stand-ins on custom activities.
                if teacher_id not in original:
                    stat.total_scheduled += 1

    return [summary for summary in stats.values() if summary.subject_stats]


def substitution_summary(
    db: Session,
    school_id: str,
    start_date: date | None,
    end_date: date | None,
) -> list[TeacherSubstitutionSummary]:
    start_date, end_date = validate_range(start_date, end_date)
    in_range = (
        Substitution.school_id == school_id,
        Substitution.substitution_date.between(start_date, end_date),
    )
    as_substitute = dict(
        db.execute(
            select(Substitution.substitute_teacher_id, func.count(Substitution.id))
            .where(*in_range)
            .group_by(Substitution.substitute_teacher_id)
        ).all()
    )
    substituted_for = dict(
        db.execute(
            select(Substitution.absent_teacher_id, func.count(Substitution.id))
            .where(*in_range)
            .group_by(Substitution.absent_teacher_id)
        ).all()
    )
    return [
        TeacherSubstitutionSummary(
            teacher_id=teacher.id,
            teacher_name=teacher.name,
            taught_as_substitute=as_substitute.get(teacher.id, 0),
            was_substituted_for=substituted_for.get(teacher.id, 0),
        )
        for teacher in _active_teachers(db, school_id)
    ]
