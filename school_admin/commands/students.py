from typing import Any, Dict, Optional

import click

from school_admin.exceptions import SchoolAdminError
from school_admin.models import Student
from school_admin.repository import SchoolRepository


def list_students(repo: SchoolRepository, status: Optional[str] = None, search: Optional[str] = None) -> None:
    students = repo.get_students()
    if status:
        students = [s for s in students if s.status == status]
    if search:
        term = search.lower()
        students = [
            s
            for s in students
            if term in s.full_name.lower() or term in s.email.lower() or term in s.student_id.lower()
        ]

    if not students:
        click.secho("No students found.", fg="yellow")
        return

    click.echo(f"{'ID':<14} {'Student No':<10} {'Name':<24} {'Grade':<6} {'Status':<10}")
    for student in students:
        click.echo(
            f"{student.id:<14} {student.student_id:<10} {student.full_name:<24} "
            f"{student.grade_level + student.section:<6} {student.status:<10}"
        )
    click.echo(f"\nTotal: {len(students)}")


def show_student(repo: SchoolRepository, student_id: str) -> None:
    student = repo.get_student_by_id(student_id)
    if student is None:
        click.secho(f"Student {student_id} not found", fg="red")
        return

    click.echo(f"{student.full_name} ({student.student_id})")
    click.echo(f"Email: {student.email}")
    click.echo(f"Grade: {student.grade_level}{student.section}")
    click.echo(f"Status: {student.status}")

    classes = repo.get_classes_by_student(student_id)
    click.echo(f"\nClasses ({len(classes)}):")
    for school_class in classes:
        click.echo(f"- {school_class.name}")

    grades = repo.get_grades_by_student(student_id)
    click.echo(f"\nGrades ({len(grades)}):")
    for grade in grades:
        assignment = repo.get_assignment_by_id(grade.assignment_id)
        title = assignment.title if assignment else "Unknown"
        click.echo(f"- {title}: {grade.percentage}% ({grade.letter})")


def add_student(repo: SchoolRepository, fields: Dict[str, Any]) -> Optional[Student]:
    try:
        student = repo.add_student(Student(**fields))
    except (SchoolAdminError, ValueError, TypeError) as e:
        click.secho(f"Could not add student: {e}", fg="red")
        return None
    click.secho(f"Added student {student.full_name} with id {student.id}", fg="green")
    return student


def update_student(repo: SchoolRepository, student_id: str, updates: Dict[str, Any]) -> Optional[Student]:
    if not updates:
        click.secho("Nothing to update.", fg="yellow")
        return None
    try:
        student = repo.update_student(student_id, **updates)
    except (SchoolAdminError, ValueError, TypeError) as e:
        click.secho(f"Could not update student: {e}", fg="red")
        return None
    if student is None:
        click.secho(f"Student {student_id} not found", fg="red")
        return None
    click.secho(f"Updated student {student.full_name}", fg="green")
    return student


def delete_student(repo: SchoolRepository, student_id: str) -> bool:
    if not repo.delete_student(student_id):
        click.secho(f"Student {student_id} not found", fg="red")
        return False
    click.secho(f"Deleted student {student_id}", fg="green")
    return True
