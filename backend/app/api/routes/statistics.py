from datetime import date

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.api.deps import get_current_school, get_db, require_editor
from app.models.school import School
from app.models.user import User
from app.schemas.statistics import TeacherAttendanceSummary, TeacherSubstitutionSummary
from app.services import statistics as statistics_service

router = APIRouter()


@router.get("/attendance-summary", response_model=list[TeacherAttendanceSummary])
def get_attendance_summary(
    start_date: date | None = Query(default=None, alias="startDate"),
    end_date: date | None = Query(default=None, alias="endDate"),
    school: School = Depends(get_current_school),
    current_user: User = Depends(require_editor),
    db: Session = Depends(get_db),
) -> list[TeacherAttendanceSummary]:
    return statistics_service.attendance_summary(db, school.id, start_date, end_date)


@router.get("/substitution-summary", response_model=list[TeacherSubstitutionSummary])
def get_substitution_summary(
    start_date: date | None = Query(default=None, alias="startDate"),
    end_date: date | None = Query(default=None, alias="endDate"),
    school: School = Depends(get_current_school),
    current_user: User = Depends(require_editor),
    db: Session = Depends(get_db),
) -> list[TeacherSubstitutionSummary]:
    return statistics_service.substitution_summary(db, school.id, start_date, end_date)
