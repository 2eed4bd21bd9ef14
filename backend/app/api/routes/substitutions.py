from datetime import date

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

from app.api.deps import get_current_school, get_db, require_editor
from app.models.school import School
from app.models.user import User
from app.schemas.substitution import SubstitutionCreate, SubstitutionOut
from app.services import substitutions as substitution_service

router = APIRouter()


@router.get("", response_model=list[SubstitutionOut])
def list_substitutions(
    on_date: date | None = Query(default=None, alias="date"),
    school: School = Depends(get_current_school),
    db: Session = Depends(get_db),
) -> list[SubstitutionOut]:
    return substitution_service.list_for_date(db, school.id, on_date)


@router.post("", response_model=SubstitutionOut, status_code=status.HTTP_201_CREATED)
def create_substitution(
    payload: SubstitutionCreate,
    school: School = Depends(get_current_school),
    current_user: User = Depends(require_editor),
    db: Session = Depends(get_db),
) -> SubstitutionOut:
    return substitution_service.assign_substitute(db, school.id, payload, user=current_user)


@router.delete("/{substitution_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_substitution(
    substitution_id: str,
    school: School = Depends(get_current_school),
    current_user: User = Depends(require_editor),
    db: Session = Depends(get_db),
) -> Response:
    substitution_service.unassign_substitute(db, school.id, substitution_id, user=current_user)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
