from app.models.activity_log import ActivityLog  # noqa: F401
from app.models.attendance_log import AttendanceLog  # noqa: F401
from app.models.class_group import ClassGroup  # noqa: F401
from app.models.location import Location  # noqa: F401
from app.models.schedule_entry import DayOfWeek, ScheduleEntry  # noqa: F401
from app.models.school import School  # noqa: F401
from app.models.subject import Subject  # noqa: F401
from app.models.substitution import Substitution  # noqa: F401
from app.models.teacher import Teacher  # noqa: F401
from app.models.time_slot import TimeSlot  # noqa: F401
from app.models.user import User, UserRole  # noqa: F401
