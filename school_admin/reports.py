"""
Report builders.

Each builder reads the repository and returns a ReportDocument made only of
strings, ready to be handed to a renderer such as ReportPDFGenerator.
"""

import re
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from school_admin.analytics import admin_overview, grade_level_distribution
from school_admin.grade_definitions import get_grade_by_percentage, round_half_up
from school_admin.models import ClassSchedule, Grade, SchoolClass
from school_admin.repository import SchoolRepository

UNKNOWN = "Unknown"
DAY_NAMES = ["Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat"]


@dataclass
class ReportTable:
    heading: str
    headers: List[str]
    rows: List[List[str]]


@dataclass
class ReportDocument:
    title: str
    filename: str
    info_heading: str
    info: List[Tuple[str, str]] = field(default_factory=list)
    tables: List[ReportTable] = field(default_factory=list)


def safe_filename(name: str) -> str:
    return re.sub(r"[^A-Za-z0-9_-]+", "_", name).strip("_") or "report"


def format_number(value: float) -> str:
    return str(int(value)) if float(value).is_integer() else f"{value:g}"


def format_schedule(schedule: List[ClassSchedule]) -> str:
    if not schedule:
        return "No schedule"
    return "; ".join(
        f"{DAY_NAMES[slot.day_of_week]} {slot.start_time}-{slot.end_time} ({slot.room})" for slot in schedule
    )


def _teacher_name(repo: SchoolRepository, teacher_id: str) -> str:
    teacher = repo.get_teacher_by_id(teacher_id)
    return teacher.full_name if teacher else UNKNOWN


def _subject_name(repo: SchoolRepository, subject_id: str) -> Optional[str]:
    subject = repo.get_subject_by_id(subject_id)
    return subject.name if subject else None


def build_student_transcript(repo: SchoolRepository, student_id: str) -> Optional[ReportDocument]:
    student = repo.get_student_by_id(student_id)
    if student is None:
        return None

    document = ReportDocument(
        title=f"Student Transcript - {student.full_name}",
        filename=safe_filename(f"{student.first_name}_{student.last_name}_Transcript"),
        info_heading="Student Information",
        info=[
            ("Name", student.full_name),
            ("Student ID", student.student_id),
            ("Email", student.email),
            ("Grade Level", student.grade_level),
            ("Enrollment Date", student.enrollment_date.isoformat()),
        ],
    )

    rows = []
    for grade in repo.get_grades_by_student(student_id):
        assignment = repo.get_assignment_by_id(grade.assignment_id)
        subject = _subject_name(repo, assignment.subject_id) if assignment else None
        rows.append(
            [
                subject or UNKNOWN,
                assignment.title if assignment else UNKNOWN,
                f"{format_number(grade.marks_obtained)}/{format_number(grade.max_marks)}",
                grade.letter,
                grade.graded_at.strftime("%Y-%m-%d"),
            ]
        )
    if rows:
        document.tables.append(
            ReportTable("Academic Record", ["Subject", "Assignment", "Score", "Grade", "Date"], rows)
        )
    return document


def _class_info(repo: SchoolRepository, school_class: SchoolClass, subject: str) -> List[Tuple[str, str]]:
    return [
        ("Class", school_class.name),
        ("Subject", subject),
        ("Teacher", _teacher_name(repo, school_class.teacher_id)),
    ]


def build_class_list(repo: SchoolRepository, class_id: str) -> Optional[ReportDocument]:
    school_class = repo.get_class_by_id(class_id)
    if school_class is None:
        return None

    subject = _subject_name(repo, school_class.subject_id)
    document = ReportDocument(
        title=f"Class List - {subject or 'Unknown Subject'}",
        filename=safe_filename(f"{subject or 'Class'}_List"),
        info_heading="Class Information",
        info=[
            *_class_info(repo, school_class, subject or UNKNOWN),
            ("Schedule", format_schedule(school_class.schedule)),
            ("Room", school_class.room or "N/A"),
        ],
    )

    students = repo.get_students_by_class(class_id)
    if students:
        rows = [
            [str(index), student.full_name, student.email, student.grade_level]
            for index, student in enumerate(students, 1)
        ]
        document.tables.append(ReportTable("Enrolled Students", ["#", "Name", "Email", "Grade Level"], rows))
    return document


def _class_grades(repo: SchoolRepository, student_id: str, subject_id: str) -> List[Grade]:
    grades = []
    for grade in repo.get_grades_by_student(student_id):
        assignment = repo.get_assignment_by_id(grade.assignment_id)
        if assignment is not None and assignment.subject_id == subject_id:
            grades.append(grade)
    return grades


def build_grade_report(repo: SchoolRepository, class_id: str) -> Optional[ReportDocument]:
    """
    Per-student averages for the class's subject.

    The average is taken over grade percentages and its letter follows the
    standard grade table. Students with no grades show N/A.
    """
    school_class = repo.get_class_by_id(class_id)
    if school_class is None:
        return None

    subject = _subject_name(repo, school_class.subject_id)
    document = ReportDocument(
        title=f"Grade Report - {subject or 'Unknown Subject'}",
        filename=safe_filename(f"{subject or 'Class'}_Grade_Report"),
        info_heading="Class Information",
        info=_class_info(repo, school_class, subject or UNKNOWN),
    )

    rows = []
    for student in repo.get_students_by_class(class_id):
        grades = _class_grades(repo, student.id, school_class.subject_id)
        if grades:
            average = sum(g.percentage for g in grades) / len(grades)
            rows.append(
                [
                    student.full_name,
                    str(len(grades)),
                    f"{average:.1f}",
                    get_grade_by_percentage(round_half_up(average)),
                ]
            )
        else:
            rows.append([student.full_name, "0", "-", "N/A"])
    if rows:
        document.tables.append(
            ReportTable("Student Grades", ["Student Name", "Assignments", "Average %", "Letter Grade"], rows)
        )
    return document


def build_school_report(repo: SchoolRepository) -> ReportDocument:
    overview = admin_overview(repo)
    document = ReportDocument(
        title="School Overview Report",
        filename="School_Overview_Report",
        info_heading="School Statistics",
        info=[
            ("Total Students", str(overview.total_students)),
            ("Total Teachers", str(overview.total_teachers)),
            ("Total Classes", str(overview.total_classes)),
            ("Total Subjects", str(overview.total_subjects)),
        ],
    )
    rows = [[f"Grade {level}", str(count), share] for level, count, share in grade_level_distribution(repo)]
    if rows:
        document.tables.append(
            ReportTable("Student Distribution by Grade Level", ["Grade Level", "Students", "Percentage"], rows)
        )
    return document
