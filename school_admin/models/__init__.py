from dataclasses import asdict, dataclass, field, fields
from datetime import date, datetime
from typing import Any, Dict, List, Literal, Optional, Union

from nanoid import generate

from school_admin.grade_definitions import LetterGrade, compute_grade

UserRole = Literal["admin", "teacher", "student", "parent"]
StudentStatus = Literal["active", "inactive", "graduated"]
AssignmentType = Literal["homework", "quiz", "exam", "project"]
NotificationType = Literal["announcement", "grade", "assignment", "attendance", "general"]
AttendanceStatus = Literal["present", "absent", "late", "excused"]

USER_ROLES: tuple[str, ...] = ("admin", "teacher", "student", "parent")


def new_id(prefix: str) -> str:
    """Generate a record id such as ``student-V1StGXR8_Z5jdHi6B-myT``."""
    return f"{prefix}-{generate()}"


def _id_factory(prefix: str):
    return lambda: new_id(prefix)


@dataclass(kw_only=True)
class BaseUser:
    id: str
    email: str
    password: str
    first_name: str
    last_name: str
    phone: Optional[str] = None
    avatar: Optional[str] = None
    created_at: datetime = field(default_factory=datetime.now)
    updated_at: datetime = field(default_factory=datetime.now)

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"


@dataclass(kw_only=True)
class Student(BaseUser):
    id: str = field(default_factory=_id_factory("student"))
    role: Literal["student"] = field(default="student", init=False)
    student_id: str
    grade_level: str
    grade: int
    section: str
    parent_id: Optional[str] = None
    date_of_birth: Optional[date] = None
    address: str = ""
    enrollment_date: date = field(default_factory=date.today)
    status: StudentStatus = "active"

    def __repr__(self) -> str:
        return f"Student(id={self.id!r}, name={self.full_name!r})"


@dataclass(kw_only=True)
class Teacher(BaseUser):
    id: str = field(default_factory=_id_factory("teacher"))
    role: Literal["teacher"] = field(default="teacher", init=False)
    teacher_id: str
    department: str
    subjects: List[str] = field(default_factory=list)
    qualification: str = ""
    experience: int = 0
    salary: Optional[float] = None
    join_date: date = field(default_factory=date.today)

    def __repr__(self) -> str:
        return f"Teacher(id={self.id!r}, name={self.full_name!r})"


@dataclass(kw_only=True)
class Admin(BaseUser):
    id: str = field(default_factory=_id_factory("admin"))
    role: Literal["admin"] = field(default="admin", init=False)
    admin_id: str
    permissions: List[str] = field(default_factory=list)


@dataclass(kw_only=True)
class Parent(BaseUser):
    id: str = field(default_factory=_id_factory("parent"))
    role: Literal["parent"] = field(default="parent", init=False)
    parent_id: str
    children: List[str] = field(default_factory=list)
    occupation: Optional[str] = None


User = Union[Student, Teacher, Admin, Parent]

_USER_TYPES: Dict[str, type] = {
    "student": Student,
    "teacher": Teacher,
    "admin": Admin,
    "parent": Parent,
}


@dataclass(kw_only=True)
class Subject:
    id: str = field(default_factory=_id_factory("subject"))
    name: str
    code: str
    description: str = ""
    credits: int = 0
    department: str = ""
    grade: int
    is_active: bool = True


@dataclass(kw_only=True)
class ClassSchedule:
    day_of_week: int  # 0 = Sunday
    start_time: str
    end_time: str
    room: str

    def __post_init__(self) -> None:
        if not 0 <= self.day_of_week <= 6:
            raise ValueError(f"day_of_week must be 0-6, got {self.day_of_week}")


@dataclass(kw_only=True)
class SchoolClass:
    id: str = field(default_factory=_id_factory("class"))
    name: str
    grade: int
    section: str
    teacher_id: str
    subject_id: str
    schedule: List[ClassSchedule] = field(default_factory=list)
    max_students: int
    enrolled_students: List[str] = field(default_factory=list)
    academic_year: str
    room: Optional[str] = None


@dataclass(kw_only=True)
class Assignment:
    id: str = field(default_factory=_id_factory("assignment"))
    title: str
    description: str = ""
    subject_id: str
    teacher_id: str
    class_id: str
    due_date: datetime
    max_marks: float
    type: AssignmentType
    created_at: datetime = field(default_factory=datetime.now)


@dataclass(kw_only=True)
class Grade:
    id: str = field(default_factory=_id_factory("grade"))
    student_id: str
    assignment_id: str
    marks_obtained: float
    max_marks: float
    percentage: int = field(init=False)
    letter: LetterGrade = field(init=False)
    feedback: Optional[str] = None
    submitted_at: Optional[datetime] = None
    graded_at: datetime = field(default_factory=datetime.now)
    graded_by: str

    def __post_init__(self) -> None:
        # Derived fields are always recomputed from the marks; dataclasses.replace
        # re-runs this, so an updated grade can never carry a stale letter.
        result = compute_grade(self.marks_obtained, self.max_marks)
        self.percentage = result.percentage
        self.letter = result.letter


@dataclass(kw_only=True)
class Notification:
    id: str = field(default_factory=_id_factory("notification"))
    recipient_id: str
    recipient_type: UserRole
    title: str
    message: str
    type: NotificationType = "general"
    is_read: bool = False
    created_at: datetime = field(default_factory=datetime.now)
    created_by: str


@dataclass(kw_only=True)
class Attendance:
    id: str = field(default_factory=_id_factory("attendance"))
    student_id: str
    class_id: str
    date: date
    status: AttendanceStatus
    marked_by: str
    notes: Optional[str] = None


def _json_safe(value: Any) -> Any:
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, dict):
        return {k: _json_safe(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_json_safe(v) for v in value]
    return value


def to_dict(entity: Any) -> Dict[str, Any]:
    """Convert any model instance to a JSON-serializable dict."""
    return _json_safe(asdict(entity))


def user_to_dict(user: User, include_password: bool = False) -> Dict[str, Any]:
    data = to_dict(user)
    if not include_password:
        data.pop("password", None)
    return data


def _parse_date(value: Any) -> Any:
    if isinstance(value, str):
        return date.fromisoformat(value[:10])
    return value


def _parse_datetime(value: Any) -> Any:
    if isinstance(value, str):
        return datetime.fromisoformat(value)
    return value


_DATE_FIELDS = {"date_of_birth", "enrollment_date", "join_date"}
_DATETIME_FIELDS = {"created_at", "updated_at"}


def user_from_dict(data: Dict[str, Any]) -> User:
    """
    Rebuild a user variant from a serialized record.

    The ``role`` tag picks the variant. Keys the variant does not know are
    ignored and a missing password is restored as an empty string.

    Raises:
        ValueError: If the record is not a mapping or its role is missing or unknown
    """
    if not isinstance(data, dict):
        raise ValueError(f"User record must be an object, got {type(data).__name__}")
    role = data.get("role")
    user_type = _USER_TYPES.get(role) if isinstance(role, str) else None
    if user_type is None:
        raise ValueError(f"Unknown user role: {role!r}")

    kwargs: Dict[str, Any] = {}
    for f in fields(user_type):
        if not f.init or f.name not in data:
            continue
        value = data[f.name]
        if f.name in _DATE_FIELDS:
            value = _parse_date(value)
        elif f.name in _DATETIME_FIELDS:
            value = _parse_datetime(value)
        kwargs[f.name] = value
    kwargs.setdefault("password", "")
    return user_type(**kwargs)
