"""
Grade analytics and dashboard statistics.

Everything here is a read-only aggregation over what the repository already
holds in memory.
"""

from collections import Counter, defaultdict
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Dict, List, Optional, Tuple

from school_admin.grade_definitions import round_half_up
from school_admin.models import Assignment, Grade, SchoolClass, Student
from school_admin.repository import SchoolRepository

TOP_PERFORMERS_LIMIT = 5
IMPROVEMENT_THRESHOLD = 70
TREND_WINDOW_DAYS = 30


@dataclass
class SubjectPerformance:
    subject: str
    average: float
    count: int


@dataclass
class TrendPoint:
    date: str
    average: float


@dataclass
class StudentPerformance:
    student: Student
    average: float


@dataclass
class GradeAnalytics:
    total_grades: int = 0
    average_grade: float = 0.0
    grade_distribution: Dict[str, int] = field(default_factory=dict)
    subject_performance: List[SubjectPerformance] = field(default_factory=list)
    recent_trends: List[TrendPoint] = field(default_factory=list)
    top_performers: List[StudentPerformance] = field(default_factory=list)
    improvement_needed: List[StudentPerformance] = field(default_factory=list)


def _mean(values: List[float]) -> float:
    return sum(values) / len(values) if values else 0.0


def _scoped_grades(
    repo: SchoolRepository,
    student_id: Optional[str],
    teacher_id: Optional[str],
    class_id: Optional[str],
) -> List[Grade]:
    if student_id:
        return repo.get_grades_by_student(student_id)
    if teacher_id:
        assignments = repo.get_assignments_by_teacher(teacher_id)
    elif class_id:
        if repo.get_class_by_id(class_id) is None:
            return []
        assignments = repo.get_assignments_by_class(class_id)
    else:
        return repo.get_grades()
    return [g for a in assignments for g in repo.get_grades_by_assignment(a.id)]


def grade_analytics(
    repo: SchoolRepository,
    student_id: Optional[str] = None,
    teacher_id: Optional[str] = None,
    class_id: Optional[str] = None,
    now: Optional[datetime] = None,
) -> GradeAnalytics:
    """
    Summarize grades for one student, one teacher, one class or the whole school.

    When several scopes are given the first of student, teacher, class wins.
    Top performers and improvement lists are only built for multi-student
    scopes.
    """
    now = now or datetime.now()
    grades = _scoped_grades(repo, student_id, teacher_id, class_id)
    if not grades:
        return GradeAnalytics()

    distribution = Counter(g.letter for g in grades)

    by_subject: Dict[str, List[float]] = defaultdict(list)
    for grade in grades:
        assignment = repo.get_assignment_by_id(grade.assignment_id)
        subject = repo.get_subject_by_id(assignment.subject_id) if assignment else None
        if subject is not None:
            by_subject[subject.name].append(grade.percentage)
    subject_performance = sorted(
        (SubjectPerformance(name, _mean(values), len(values)) for name, values in by_subject.items()),
        key=lambda item: item.average,
        reverse=True,
    )

    cutoff = now - timedelta(days=TREND_WINDOW_DAYS)
    by_day: Dict[str, List[float]] = defaultdict(list)
    for grade in sorted(grades, key=lambda g: g.graded_at):
        if grade.graded_at >= cutoff:
            by_day[grade.graded_at.date().isoformat()].append(grade.percentage)
    recent_trends = [TrendPoint(day, _mean(values)) for day, values in by_day.items()]

    top_performers: List[StudentPerformance] = []
    improvement_needed: List[StudentPerformance] = []
    if not student_id:
        by_student: Dict[str, List[float]] = defaultdict(list)
        for grade in grades:
            by_student[grade.student_id].append(grade.percentage)

        performance = []
        for sid, values in by_student.items():
            student = repo.get_student_by_id(sid)
            if student is not None:
                performance.append(StudentPerformance(student, _mean(values)))

        top_performers = sorted(performance, key=lambda p: p.average, reverse=True)[:TOP_PERFORMERS_LIMIT]
        improvement_needed = sorted(
            (p for p in performance if p.average < IMPROVEMENT_THRESHOLD),
            key=lambda p: p.average,
        )[:TOP_PERFORMERS_LIMIT]

    return GradeAnalytics(
        total_grades=len(grades),
        average_grade=_mean([g.percentage for g in grades]),
        grade_distribution=dict(distribution),
        subject_performance=subject_performance,
        recent_trends=recent_trends,
        top_performers=top_performers,
        improvement_needed=improvement_needed,
    )


@dataclass
class AdminOverview:
    total_students: int
    total_teachers: int
    total_classes: int
    total_subjects: int
    students_by_status: Dict[str, int]


def admin_overview(repo: SchoolRepository) -> AdminOverview:
    students = repo.get_students()
    by_status = Counter(s.status for s in students)
    return AdminOverview(
        total_students=len(students),
        total_teachers=len(repo.get_teachers()),
        total_classes=len(repo.get_classes()),
        total_subjects=len(repo.get_subjects()),
        students_by_status={status: by_status.get(status, 0) for status in ("active", "inactive", "graduated")},
    )


@dataclass
class TeacherOverview:
    classes: List[SchoolClass]
    assignments: List[Assignment]
    total_students: int
    recent_assignments: List[Assignment]


def teacher_overview(repo: SchoolRepository, teacher_id: str) -> Optional[TeacherOverview]:
    if repo.get_teacher_by_id(teacher_id) is None:
        return None
    classes = repo.get_classes_by_teacher(teacher_id)
    assignments = repo.get_assignments_by_teacher(teacher_id)
    unique_students = {sid for c in classes for sid in c.enrolled_students}
    recent = sorted(assignments, key=lambda a: a.created_at, reverse=True)[:5]
    return TeacherOverview(
        classes=classes,
        assignments=assignments,
        total_students=len(unique_students),
        recent_assignments=recent,
    )


@dataclass
class StudentOverview:
    classes: List[SchoolClass]
    grades: List[Grade]
    average_grade: int
    upcoming_assignments: List[Assignment]


def student_overview(
    repo: SchoolRepository, student_id: str, now: Optional[datetime] = None
) -> Optional[StudentOverview]:
    if repo.get_student_by_id(student_id) is None:
        return None
    now = now or datetime.now()
    classes = repo.get_classes_by_student(student_id)
    assignments = [a for c in classes for a in repo.get_assignments_by_class(c.id)]
    grades = repo.get_grades_by_student(student_id)
    average = round_half_up(_mean([g.percentage for g in grades])) if grades else 0
    upcoming = sorted((a for a in assignments if a.due_date > now), key=lambda a: a.due_date)[:5]
    return StudentOverview(
        classes=classes,
        grades=grades,
        average_grade=average,
        upcoming_assignments=upcoming,
    )


def grade_level_distribution(repo: SchoolRepository) -> List[Tuple[str, int, str]]:
    """Rows of (grade level, student count, share of all students)."""
    students = repo.get_students()
    counts = Counter(s.grade_level for s in students)
    return [
        (level, count, f"{count / len(students) * 100:.1f}%")
        for level, count in sorted(counts.items(), key=lambda item: _level_key(item[0]))
    ]


def _level_key(level: str) -> Tuple[int, int, str]:
    # Numeric levels first in numeric order, then anything else alphabetically
    return (0, int(level), "") if level.isdigit() else (1, 0, level)
