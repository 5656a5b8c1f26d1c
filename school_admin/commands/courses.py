from typing import Any, Dict, Optional

import click

from school_admin.exceptions import ClassFullError, SchoolAdminError
from school_admin.models import Subject
from school_admin.reports import format_schedule
from school_admin.repository import SchoolRepository


def list_subjects(repo: SchoolRepository, include_inactive: bool = False) -> None:
    subjects = repo.get_subjects()
    if not include_inactive:
        subjects = [s for s in subjects if s.is_active]
    if not subjects:
        click.secho("No subjects found.", fg="yellow")
        return

    click.echo(f"{'ID':<12} {'Code':<10} {'Name':<24} {'Grade':<6} {'Credits':<8} {'Department':<16}")
    for subject in subjects:
        click.echo(
            f"{subject.id:<12} {subject.code:<10} {subject.name:<24} {subject.grade:<6} "
            f"{subject.credits:<8} {subject.department:<16}"
        )


def add_subject(repo: SchoolRepository, fields: Dict[str, Any]) -> Optional[Subject]:
    try:
        subject = repo.add_subject(Subject(**fields))
    except (SchoolAdminError, ValueError, TypeError) as e:
        click.secho(f"Could not add subject: {e}", fg="red")
        return None
    click.secho(f"Added subject {subject.code} - {subject.name} with id {subject.id}", fg="green")
    return subject


def update_subject(repo: SchoolRepository, subject_id: str, updates: Dict[str, Any]) -> Optional[Subject]:
    if not updates:
        click.secho("Nothing to update.", fg="yellow")
        return None
    try:
        subject = repo.update_subject(subject_id, **updates)
    except (SchoolAdminError, ValueError, TypeError) as e:
        click.secho(f"Could not update subject: {e}", fg="red")
        return None
    if subject is None:
        click.secho(f"Subject {subject_id} not found", fg="red")
        return None
    click.secho(f"Updated subject {subject.code}", fg="green")
    return subject


def delete_subject(repo: SchoolRepository, subject_id: str) -> bool:
    try:
        deleted = repo.delete_subject(subject_id)
    except SchoolAdminError as e:
        click.secho(f"Could not delete subject: {e}", fg="red")
        return False
    if not deleted:
        click.secho(f"Subject {subject_id} not found", fg="red")
        return False
    click.secho(f"Deleted subject {subject_id}", fg="green")
    return True


def list_classes(repo: SchoolRepository, teacher_id: Optional[str] = None) -> None:
    classes = repo.get_classes_by_teacher(teacher_id) if teacher_id else repo.get_classes()
    if not classes:
        click.secho("No classes found.", fg="yellow")
        return

    click.echo(f"{'ID':<10} {'Name':<20} {'Subject':<20} {'Teacher':<20} {'Enrolled':<9}")
    for school_class in classes:
        subject = repo.get_subject_by_id(school_class.subject_id)
        teacher = repo.get_teacher_by_id(school_class.teacher_id)
        enrolled = f"{len(school_class.enrolled_students)}/{school_class.max_students}"
        click.echo(
            f"{school_class.id:<10} {school_class.name:<20} {subject.name if subject else 'Unknown':<20} "
            f"{teacher.full_name if teacher else 'Unknown':<20} {enrolled:<9}"
        )


def show_class(repo: SchoolRepository, class_id: str) -> None:
    school_class = repo.get_class_by_id(class_id)
    if school_class is None:
        click.secho(f"Class {class_id} not found", fg="red")
        return

    subject = repo.get_subject_by_id(school_class.subject_id)
    teacher = repo.get_teacher_by_id(school_class.teacher_id)
    click.echo(f"{school_class.name} ({school_class.academic_year})")
    click.echo(f"Subject: {subject.name if subject else 'Unknown'}")
    click.echo(f"Teacher: {teacher.full_name if teacher else 'Unknown'}")
    click.echo(f"Schedule: {format_schedule(school_class.schedule)}")

    students = repo.get_students_by_class(class_id)
    click.echo(f"\nStudents ({len(students)}/{school_class.max_students}):")
    for student in students:
        click.echo(f"- {student.full_name} ({student.student_id})")


def enroll(repo: SchoolRepository, class_id: str, student_id: str) -> bool:
    try:
        enrolled = repo.enroll_student(class_id, student_id)
    except ClassFullError as e:
        click.secho(str(e), fg="red")
        return False
    if not enrolled:
        click.secho(f"Class {class_id} or student {student_id} not found", fg="red")
        return False
    click.secho(f"Student {student_id} enrolled in {class_id}", fg="green")
    return True
