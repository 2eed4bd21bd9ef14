from datetime import date

from fastapi import APIRouter, Body, Depends, Query
from sqlalchemy.orm import Session

from app.api.deps import get_current_school, get_db, require_editor
from app.models.school import School
from app.models.user import User
from app.schemas.attendance import (
    AttendanceRecordIn,
    AttendanceRecordOut,
    AttendanceResetRequest,
    AttendanceResetResponse,
    AttendanceSaveResponse,
    ClassGroupDayOut,
)
from app.services import attendance as attendance_service

router = APIRouter()


@router.get("", response_model=list[AttendanceRecordOut])
def list_attendance_logs(
    on_date: date | None = Query(default=None, alias="date"),
    school: School = Depends(get_current_school),
    current_user: User = Depends(require_editor),
    db: Session = Depends(get_db),
) -> list[AttendanceRecordOut]:
    return attendance_service.list_logs(db, school.id, on_date)


@router.get("/day", response_model=list[ClassGroupDayOut])
def reconcile_attendance_day(
    on_date: date | None = Query(default=None, alias="date"),
    school: School = Depends(get_current_school),
    current_user: User = Depends(require_editor),
    db: Session = Depends(get_db),
) -> list[ClassGroupDayOut]:
    days = attendance_service.reconcile_day(db, school.id, on_date)
    return [
        ClassGroupDayOut(
            class_group_id=item.class_group_id,
            source=item.source,
            records=[AttendanceRecordOut.model_validate(record) for record in item.records],
        )
        for item in days
    ]


@router.post("", response_model=AttendanceSaveResponse)
def save_attendance_logs(
    records: list[AttendanceRecordIn],
    school: School = Depends(get_current_school),
    current_user: User = Depends(require_editor),
    db: Session = Depends(get_db),
) -> AttendanceSaveResponse:
    return attendance_service.save_logs(db, school.id, records, user=current_user)


@router.delete("", response_model=AttendanceResetResponse)
def reset_attendance_logs(
    payload: AttendanceResetRequest = Body(...),
    school: School = Depends(get_current_school),
    current_user: User = Depends(require_editor),
    db: Session = Depends(get_db),
) -> AttendanceResetResponse:
    return attendance_service.reset_logs(db, school.id, payload, user=current_user)
