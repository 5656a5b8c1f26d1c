from typing import Any, Dict, Optional

import click

from school_admin.exceptions import SchoolAdminError
from school_admin.models import Grade
from school_admin.repository import SchoolRepository
from school_admin.reports import format_number


def list_assignments(
    repo: SchoolRepository, class_id: Optional[str] = None, teacher_id: Optional[str] = None
) -> None:
    if class_id:
        assignments = repo.get_assignments_by_class(class_id)
    elif teacher_id:
        assignments = repo.get_assignments_by_teacher(teacher_id)
    else:
        assignments = repo.get_assignments()

    if not assignments:
        click.secho("No assignments found.", fg="yellow")
        return

    click.echo(f"{'ID':<14} {'Title':<24} {'Type':<9} {'Class':<10} {'Due':<11} {'Graded':<6}")
    for assignment in assignments:
        graded = len(repo.get_grades_by_assignment(assignment.id))
        click.echo(
            f"{assignment.id:<14} {assignment.title:<24} {assignment.type:<9} {assignment.class_id:<10} "
            f"{assignment.due_date.strftime('%Y-%m-%d'):<11} {graded:<6}"
        )


def list_grades(
    repo: SchoolRepository, student_id: Optional[str] = None, assignment_id: Optional[str] = None
) -> None:
    if student_id:
        grades = repo.get_grades_by_student(student_id)
    elif assignment_id:
        grades = repo.get_grades_by_assignment(assignment_id)
    else:
        grades = repo.get_grades()

    if not grades:
        click.secho("No grades found.", fg="yellow")
        return

    click.echo(f"{'ID':<10} {'Student':<20} {'Assignment':<24} {'Marks':<9} {'%':<5} {'Grade':<5}")
    for grade in grades:
        student = repo.get_student_by_id(grade.student_id)
        assignment = repo.get_assignment_by_id(grade.assignment_id)
        marks = f"{format_number(grade.marks_obtained)}/{format_number(grade.max_marks)}"
        click.echo(
            f"{grade.id:<10} {student.full_name if student else 'Unknown':<20} "
            f"{assignment.title if assignment else 'Unknown':<24} {marks:<9} {grade.percentage:<5} {grade.letter:<5}"
        )


def record_grade(
    repo: SchoolRepository,
    student_id: str,
    assignment_id: str,
    marks: float,
    graded_by: str,
    feedback: Optional[str] = None,
) -> Optional[Grade]:
    try:
        grade = repo.record_grade(student_id, assignment_id, marks, graded_by, feedback)
    except (SchoolAdminError, ValueError) as e:
        click.secho(f"Could not record grade: {e}", fg="red")
        return None
    click.secho(f"Recorded grade {grade.id}: {grade.percentage}% ({grade.letter})", fg="green")
    return grade


def update_grade(repo: SchoolRepository, grade_id: str, updates: Dict[str, Any]) -> Optional[Grade]:
    if not updates:
        click.secho("Nothing to update.", fg="yellow")
        return None
    try:
        grade = repo.update_grade(grade_id, **updates)
    except (SchoolAdminError, ValueError, TypeError) as e:
        click.secho(f"Could not update grade: {e}", fg="red")
        return None
    if grade is None:
        click.secho(f"Grade {grade_id} not found", fg="red")
        return None
    click.secho(f"Updated grade {grade.id}: {grade.percentage}% ({grade.letter})", fg="green")
    return grade
