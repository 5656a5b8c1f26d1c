import click

from school_admin.exceptions import ReferenceInUseError
from school_admin.repository import SchoolRepository


def list_teachers(repo: SchoolRepository) -> None:
    teachers = repo.get_teachers()
    if not teachers:
        click.secho("No teachers found.", fg="yellow")
        return

    click.echo(f"{'ID':<12} {'Teacher No':<10} {'Name':<24} {'Department':<16} {'Classes':<7}")
    for teacher in teachers:
        class_count = len(repo.get_classes_by_teacher(teacher.id))
        click.echo(
            f"{teacher.id:<12} {teacher.teacher_id:<10} {teacher.full_name:<24} "
            f"{teacher.department:<16} {class_count:<7}"
        )


def show_teacher(repo: SchoolRepository, teacher_id: str) -> None:
    teacher = repo.get_teacher_by_id(teacher_id)
    if teacher is None:
        click.secho(f"Teacher {teacher_id} not found", fg="red")
        return

    click.echo(f"{teacher.full_name} ({teacher.teacher_id})")
    click.echo(f"Email: {teacher.email}")
    click.echo(f"Department: {teacher.department}")
    click.echo(f"Qualification: {teacher.qualification or '-'}")
    click.echo(f"Experience: {teacher.experience} years")

    subjects = [repo.get_subject_by_id(sid) for sid in teacher.subjects]
    click.echo(f"Subjects: {', '.join(s.name for s in subjects if s) or '-'}")

    classes = repo.get_classes_by_teacher(teacher_id)
    click.echo(f"\nClasses ({len(classes)}):")
    for school_class in classes:
        click.echo(f"- {school_class.name} ({len(school_class.enrolled_students)} students)")


def delete_teacher(repo: SchoolRepository, teacher_id: str) -> bool:
    try:
        deleted = repo.delete_teacher(teacher_id)
    except ReferenceInUseError as e:
        click.secho(f"Could not delete teacher: {e}", fg="red")
        return False
    if not deleted:
        click.secho(f"Teacher {teacher_id} not found", fg="red")
        return False
    click.secho(f"Deleted teacher {teacher_id}", fg="green")
    return True
