from typing import Optional

import click

from school_admin.analytics import admin_overview, grade_analytics, student_overview, teacher_overview
from school_admin.models import Admin, Parent, Student, Teacher, User
from school_admin.repository import SchoolRepository


def show_grade_analytics(
    repo: SchoolRepository,
    student_id: Optional[str] = None,
    teacher_id: Optional[str] = None,
    class_id: Optional[str] = None,
) -> None:
    analytics = grade_analytics(repo, student_id=student_id, teacher_id=teacher_id, class_id=class_id)
    if analytics.total_grades == 0:
        click.secho("No grades recorded for this selection.", fg="yellow")
        return

    click.echo(f"Total grades: {analytics.total_grades}")
    click.echo(f"Average grade: {analytics.average_grade:.1f}%")

    click.echo("\nGrade distribution:")
    for letter, count in sorted(analytics.grade_distribution.items()):
        click.echo(f"- {letter}: {count}")

    click.echo("\nSubject performance:")
    for item in analytics.subject_performance:
        click.echo(f"- {item.subject}: {item.average:.1f}% over {item.count} grades")

    if analytics.top_performers:
        click.echo("\nTop performers:")
        for item in analytics.top_performers:
            click.echo(f"- {item.student.full_name}: {item.average:.1f}%")

    if analytics.improvement_needed:
        click.secho("\nNeeds improvement:", fg="yellow")
        for item in analytics.improvement_needed:
            click.echo(f"- {item.student.full_name}: {item.average:.1f}%")


def show_overview(repo: SchoolRepository, user: User) -> None:
    """Print the dashboard summary for the user's role."""
    if isinstance(user, Admin):
        overview = admin_overview(repo)
        click.echo("Admin dashboard")
        click.echo(f"Students: {overview.total_students}")
        for status, count in overview.students_by_status.items():
            click.echo(f"  {status}: {count}")
        click.echo(f"Teachers: {overview.total_teachers}")
        click.echo(f"Classes: {overview.total_classes}")
        click.echo(f"Subjects: {overview.total_subjects}")
    elif isinstance(user, Teacher):
        teacher = teacher_overview(repo, user.id)
        if teacher is None:
            click.secho("Teacher record not found.", fg="red")
            return
        click.echo("Teacher dashboard")
        click.echo(f"Classes: {len(teacher.classes)}")
        click.echo(f"Students: {teacher.total_students}")
        click.echo(f"Assignments: {len(teacher.assignments)}")
        click.echo("\nRecent assignments:")
        for assignment in teacher.recent_assignments:
            click.echo(f"- {assignment.title} (due {assignment.due_date.strftime('%Y-%m-%d')})")
    elif isinstance(user, Student):
        student = student_overview(repo, user.id)
        if student is None:
            click.secho("Student record not found.", fg="red")
            return
        click.echo("Student dashboard")
        click.echo(f"Classes: {len(student.classes)}")
        click.echo(f"Average grade: {student.average_grade}%")
        click.echo("\nUpcoming assignments:")
        for assignment in student.upcoming_assignments:
            click.echo(f"- {assignment.title} (due {assignment.due_date.strftime('%Y-%m-%d')})")
    elif isinstance(user, Parent):
        click.echo("Parent dashboard")
        for child in repo.get_students_by_parent(user.id):
            child_overview = student_overview(repo, child.id)
            average = child_overview.average_grade if child_overview else 0
            click.echo(f"- {child.full_name}: average {average}%")
    else:
        raise ValueError(f"Unsupported user type: {type(user).__name__}")
