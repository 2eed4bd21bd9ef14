from fastapi import APIRouter, Depends, Query, Response, status
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from app.api.deps import get_current_school, get_db, require_editor
from app.models.school import School
from app.models.user import User
from app.schemas.schedule import (
    BulkActivityRequest,
    BulkActivityResponse,
    ResolveConflictRequest,
    ScheduleEntryIn,
    ScheduleEntryOut,
    ScheduleMutationResponse,
)
from app.services import bulk_activity, schedule_service

router = APIRouter()


@router.get("", response_model=list[ScheduleEntryOut])
def list_schedule(
    academic_year: str | None = Query(default=None, alias="academicYear"),
    semester: int | None = Query(default=None),
    school: School = Depends(get_current_school),
    db: Session = Depends(get_db),
) -> list[ScheduleEntryOut]:
    return schedule_service.list_entries(db, school.id, academic_year=academic_year, semester=semester)


@router.post("", response_model=ScheduleMutationResponse, status_code=status.HTTP_201_CREATED)
def create_schedule_entry(
    payload: ScheduleEntryIn,
    school: School = Depends(get_current_school),
    current_user: User = Depends(require_editor),
    db: Session = Depends(get_db),
) -> ScheduleMutationResponse:
    entry = schedule_service.create_entry(db, school.id, payload, user=current_user)
    return ScheduleMutationResponse(item=ScheduleEntryOut.model_validate(entry))


@router.post("/resolve-conflict", response_model=ScheduleMutationResponse)
def resolve_schedule_conflict(
    payload: ResolveConflictRequest,
    school: School = Depends(get_current_school),
    current_user: User = Depends(require_editor),
    db: Session = Depends(get_db),
) -> JSONResponse:
    entry, is_update = schedule_service.resolve_conflict(db, school.id, payload, user=current_user)
    body = ScheduleMutationResponse(item=ScheduleEntryOut.model_validate(entry))
    return JSONResponse(
        status_code=status.HTTP_200_OK if is_update else status.HTTP_201_CREATED,
        content=body.model_dump(mode="json", by_alias=True),
    )


@router.post("/bulk-activity", response_model=BulkActivityResponse)
def place_bulk_activity(
    payload: BulkActivityRequest,
    school: School = Depends(get_current_school),
    current_user: User = Depends(require_editor),
    db: Session = Depends(get_db),
) -> BulkActivityResponse:
    return bulk_activity.place_bulk_activity(db, school.id, payload, user=current_user)


@router.put("/{entry_id}", response_model=ScheduleMutationResponse)
def update_schedule_entry(
    entry_id: str,
    payload: ScheduleEntryIn,
    school: School = Depends(get_current_school),
    current_user: User = Depends(require_editor),
    db: Session = Depends(get_db),
) -> ScheduleMutationResponse:
    entry = schedule_service.update_entry(db, school.id, entry_id, payload, user=current_user)
    return ScheduleMutationResponse(item=ScheduleEntryOut.model_validate(entry))


@router.delete("/{entry_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_schedule_entry(
    entry_id: str,
    school: School = Depends(get_current_school),
    current_user: User = Depends(require_editor),
    db: Session = Depends(get_db),
) -> Response:
    schedule_service.delete_entry(db, school.id, entry_id, user=current_user)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
