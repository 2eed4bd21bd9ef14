from pydantic import Field

from app.schemas.common import CamelModel


class SubjectStat(CamelModel):
    subject_name: str
    total_scheduled: int = 0
    taught_by_self: int = 0
    taught_by_substitute: int = 0


class TeacherAttendanceSummary(CamelModel):
    teacher_id: str
    teacher_name: str
    subject_stats: dict[str, SubjectStat] = Field(default_factory=dict)


class TeacherSubstitutionSummary(CamelModel):
    teacher_id: str
    teacher_name: str
    taught_as_substitute: int = 0
    was_substituted_for: int = 0
