from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

import click

from school_admin.auth.service import AuthService
from school_admin.auth.session_manager import SessionStore
from school_admin.commands.analytics import show_grade_analytics, show_overview
from school_admin.commands.assessments import list_assignments, list_grades, record_grade, update_grade
from school_admin.commands.auth import login_user, logout_user, show_current_user
from school_admin.commands.courses import (
    add_subject,
    delete_subject,
    enroll,
    list_classes,
    list_subjects,
    show_class,
    update_subject,
)
from school_admin.commands.export import export_grades
from school_admin.commands.notifications import list_notifications, read_notification
from school_admin.commands.reports import (
    generate_class_list,
    generate_grade_report,
    generate_school_report,
    generate_transcript,
)
from school_admin.commands.students import add_student, delete_student, list_students, show_student, update_student
from school_admin.commands.teachers import delete_teacher, list_teachers, show_teacher
from school_admin.config import EXPORTS_DIR, REPORTS_DIR, SESSION_FILE
from school_admin.exceptions import PermissionDeniedError
from school_admin.fixtures import build_repository
from school_admin.models import User
from school_admin.repository import SchoolRepository
from school_admin.utils.logging_config import configure_from_env


@dataclass
class AppContext:
    repo: SchoolRepository
    auth: AuthService


def require(ctx: click.Context, *roles: str) -> User:
    """Return the logged-in user or stop the command if their role is not allowed."""
    app: AppContext = ctx.obj
    try:
        return app.auth.require_role(*roles)  # type: ignore[arg-type]
    except PermissionDeniedError as e:
        click.secho(str(e), fg="red")
        ctx.exit(1)


def _changes(**values: Any) -> Dict[str, Any]:
    return {key: value for key, value in values.items() if value is not None}


@click.group()
@click.option(
    "--session-file",
    type=click.Path(dir_okay=False, path_type=Path),
    envvar="SCHOOL_ADMIN_SESSION_FILE",
    default=SESSION_FILE,
    show_default=True,
    help="Where the logged-in user is remembered between commands.",
)
@click.pass_context
def cli(ctx: click.Context, session_file: Path) -> None:
    configure_from_env()
    repo = build_repository()
    ctx.obj = AppContext(repo=repo, auth=AuthService(repo, SessionStore(session_file)))


@cli.command()
@click.argument("email")
@click.option("--password", prompt=True, hide_input=True)
@click.pass_context
def login(ctx: click.Context, email: str, password: str) -> None:
    """Log in and remember the user for later commands."""
    if not login_user(ctx.obj.auth, email, password):
        ctx.exit(1)


@cli.command()
@click.pass_obj
def logout(app: AppContext) -> None:
    logout_user(app.auth)


@cli.command()
@click.pass_obj
def whoami(app: AppContext) -> None:
    show_current_user(app.auth)


# Students


@cli.group()
def students() -> None:
    pass


@students.command(name="list")
@click.option("--status", type=click.Choice(["active", "inactive", "graduated"]))
@click.option("--search", help="Match name, email or student number")
@click.pass_obj
def students_list(app: AppContext, status: Optional[str], search: Optional[str]) -> None:
    list_students(app.repo, status, search)


@students.command(name="show")
@click.argument("student_id")
@click.pass_obj
def students_show(app: AppContext, student_id: str) -> None:
    show_student(app.repo, student_id)


@students.command(name="add")
@click.option("--email", required=True)
@click.option("--password", required=True)
@click.option("--first-name", required=True)
@click.option("--last-name", required=True)
@click.option("--student-no", required=True, help="School-issued student number")
@click.option("--grade", type=int, required=True)
@click.option("--section", required=True)
@click.option("--parent-id")
@click.option("--dob", type=click.DateTime(formats=["%Y-%m-%d"]), help="Date of birth (YYYY-MM-DD)")
@click.option("--address", default="")
@click.pass_context
def students_add(
    ctx: click.Context,
    email: str,
    password: str,
    first_name: str,
    last_name: str,
    student_no: str,
    grade: int,
    section: str,
    parent_id: Optional[str],
    dob,
    address: str,
) -> None:
    """Add a new student (admin only)."""
    require(ctx, "admin")
    fields = dict(
        email=email,
        password=password,
        first_name=first_name,
        last_name=last_name,
        student_id=student_no,
        grade=grade,
        grade_level=str(grade),
        section=section,
        parent_id=parent_id,
        date_of_birth=dob.date() if dob else None,
        address=address,
    )
    if add_student(ctx.obj.repo, fields) is None:
        ctx.exit(1)


@students.command(name="update")
@click.argument("student_id")
@click.option("--email")
@click.option("--first-name")
@click.option("--last-name")
@click.option("--section")
@click.option("--address")
@click.option("--status", type=click.Choice(["active", "inactive", "graduated"]))
@click.pass_context
def students_update(
    ctx: click.Context,
    student_id: str,
    email: Optional[str],
    first_name: Optional[str],
    last_name: Optional[str],
    section: Optional[str],
    address: Optional[str],
    status: Optional[str],
) -> None:
    """Update a student's details (admin only)."""
    require(ctx, "admin")
    updates = _changes(
        email=email, first_name=first_name, last_name=last_name, section=section, address=address, status=status
    )
    if update_student(ctx.obj.repo, student_id, updates) is None:
        ctx.exit(1)


@students.command(name="delete")
@click.argument("student_id")
@click.pass_context
def students_delete(ctx: click.Context, student_id: str) -> None:
    """Delete a student (admin only)."""
    require(ctx, "admin")
    if not delete_student(ctx.obj.repo, student_id):
        ctx.exit(1)


# Teachers


@cli.group()
def teachers() -> None:
    pass


@teachers.command(name="list")
@click.pass_obj
def teachers_list(app: AppContext) -> None:
    list_teachers(app.repo)


@teachers.command(name="show")
@click.argument("teacher_id")
@click.pass_obj
def teachers_show(app: AppContext, teacher_id: str) -> None:
    show_teacher(app.repo, teacher_id)


@teachers.command(name="delete")
@click.argument("teacher_id")
@click.pass_context
def teachers_delete(ctx: click.Context, teacher_id: str) -> None:
    """Delete a teacher with no classes or assignments (admin only)."""
    require(ctx, "admin")
    if not delete_teacher(ctx.obj.repo, teacher_id):
        ctx.exit(1)


# Subjects


@cli.group()
def subjects() -> None:
    pass


@subjects.command(name="list")
@click.option("--all", "include_inactive", is_flag=True, help="Include inactive subjects")
@click.pass_obj
def subjects_list(app: AppContext, include_inactive: bool) -> None:
    list_subjects(app.repo, include_inactive)


@subjects.command(name="add")
@click.option("--name", required=True)
@click.option("--code", required=True)
@click.option("--grade", type=int, required=True)
@click.option("--credits", type=int, default=0)
@click.option("--department", default="")
@click.option("--description", default="")
@click.pass_context
def subjects_add(
    ctx: click.Context, name: str, code: str, grade: int, credits: int, department: str, description: str
) -> None:
    """Add a subject (admin only)."""
    require(ctx, "admin")
    fields = dict(
        name=name, code=code, grade=grade, credits=credits, department=department, description=description
    )
    if add_subject(ctx.obj.repo, fields) is None:
        ctx.exit(1)


@subjects.command(name="update")
@click.argument("subject_id")
@click.option("--name")
@click.option("--code")
@click.option("--credits", type=int)
@click.option("--department")
@click.option("--active/--inactive", "is_active", default=None)
@click.pass_context
def subjects_update(
    ctx: click.Context,
    subject_id: str,
    name: Optional[str],
    code: Optional[str],
    credits: Optional[int],
    department: Optional[str],
    is_active: Optional[bool],
) -> None:
    """Update a subject (admin only)."""
    require(ctx, "admin")
    updates = _changes(name=name, code=code, credits=credits, department=department, is_active=is_active)
    if update_subject(ctx.obj.repo, subject_id, updates) is None:
        ctx.exit(1)


@subjects.command(name="delete")
@click.argument("subject_id")
@click.pass_context
def subjects_delete(ctx: click.Context, subject_id: str) -> None:
    """Delete a subject that no class uses (admin only)."""
    require(ctx, "admin")
    if not delete_subject(ctx.obj.repo, subject_id):
        ctx.exit(1)


# Classes


@cli.group()
def classes() -> None:
    pass


@classes.command(name="list")
@click.option("--teacher", "teacher_id", help="Only classes taught by this teacher id")
@click.pass_obj
def classes_list(app: AppContext, teacher_id: Optional[str]) -> None:
    list_classes(app.repo, teacher_id)


@classes.command(name="show")
@click.argument("class_id")
@click.pass_obj
def classes_show(app: AppContext, class_id: str) -> None:
    show_class(app.repo, class_id)


@classes.command(name="enroll")
@click.argument("class_id")
@click.argument("student_ids", nargs=-1, required=True)
@click.pass_context
def classes_enroll(ctx: click.Context, class_id: str, student_ids: tuple[str, ...]) -> None:
    """Enroll one or more students in a class (admin only)."""
    require(ctx, "admin")
    results = [enroll(ctx.obj.repo, class_id, student_id) for student_id in student_ids]
    if not all(results):
        ctx.exit(1)


# Assignments and grades


@cli.group()
def assignments() -> None:
    pass


@assignments.command(name="list")
@click.option("--class", "class_id")
@click.option("--teacher", "teacher_id")
@click.pass_obj
def assignments_list(app: AppContext, class_id: Optional[str], teacher_id: Optional[str]) -> None:
    list_assignments(app.repo, class_id, teacher_id)


@cli.group()
def grades() -> None:
    pass


@grades.command(name="list")
@click.option("--student", "student_id")
@click.option("--assignment", "assignment_id")
@click.pass_obj
def grades_list(app: AppContext, student_id: Optional[str], assignment_id: Optional[str]) -> None:
    list_grades(app.repo, student_id, assignment_id)


@grades.command(name="record")
@click.argument("student_id")
@click.argument("assignment_id")
@click.argument("marks", type=float)
@click.option("--feedback")
@click.pass_context
def grades_record(
    ctx: click.Context, student_id: str, assignment_id: str, marks: float, feedback: Optional[str]
) -> None:
    """Grade a student's assignment (teachers only)."""
    user = require(ctx, "teacher")
    if record_grade(ctx.obj.repo, student_id, assignment_id, marks, user.id, feedback) is None:
        ctx.exit(1)


@grades.command(name="update")
@click.argument("grade_id")
@click.option("--marks", type=float)
@click.option("--max-marks", type=float)
@click.option("--feedback")
@click.pass_context
def grades_update(
    ctx: click.Context,
    grade_id: str,
    marks: Optional[float],
    max_marks: Optional[float],
    feedback: Optional[str],
) -> None:
    """Change marks or feedback; percentage and letter are recalculated (teachers only)."""
    user = require(ctx, "teacher")
    updates = _changes(marks_obtained=marks, max_marks=max_marks, feedback=feedback)
    if updates:
        updates["graded_by"] = user.id
    if update_grade(ctx.obj.repo, grade_id, updates) is None:
        ctx.exit(1)


# Notifications


@cli.group()
def notifications() -> None:
    pass


@notifications.command(name="list")
@click.option("--unread", is_flag=True)
@click.pass_context
def notifications_list(ctx: click.Context, unread: bool) -> None:
    user = require(ctx, "admin", "teacher", "student", "parent")
    list_notifications(ctx.obj.repo, user, unread)


@notifications.command(name="read")
@click.argument("notification_id")
@click.pass_context
def notifications_read(ctx: click.Context, notification_id: str) -> None:
    user = require(ctx, "admin", "teacher", "student", "parent")
    if not read_notification(ctx.obj.repo, user, notification_id):
        ctx.exit(1)


# Analytics


@cli.group()
def analytics() -> None:
    pass


@analytics.command(name="grades")
@click.option("--student", "student_id")
@click.option("--teacher", "teacher_id")
@click.option("--class", "class_id")
@click.pass_obj
def analytics_grades(
    app: AppContext, student_id: Optional[str], teacher_id: Optional[str], class_id: Optional[str]
) -> None:
    show_grade_analytics(app.repo, student_id, teacher_id, class_id)


@analytics.command(name="overview")
@click.pass_context
def analytics_overview(ctx: click.Context) -> None:
    """Show the dashboard for the logged-in user's role."""
    user = require(ctx, "admin", "teacher", "student", "parent")
    show_overview(ctx.obj.repo, user)


# Reports


@cli.group()
@click.option(
    "--output-dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=REPORTS_DIR,
    show_default=True,
)
@click.pass_context
def report(ctx: click.Context, output_dir: Path) -> None:
    """Generate PDF reports (teacher or admin)."""
    ctx.meta["output_dir"] = output_dir


@report.command(name="transcript")
@click.argument("student_id")
@click.pass_context
def report_transcript(ctx: click.Context, student_id: str) -> None:
    require(ctx, "admin", "teacher")
    if generate_transcript(ctx.obj.repo, student_id, ctx.meta["output_dir"]) is None:
        ctx.exit(1)


@report.command(name="class-list")
@click.argument("class_id")
@click.pass_context
def report_class_list(ctx: click.Context, class_id: str) -> None:
    require(ctx, "admin", "teacher")
    if generate_class_list(ctx.obj.repo, class_id, ctx.meta["output_dir"]) is None:
        ctx.exit(1)


@report.command(name="grade-report")
@click.argument("class_id")
@click.pass_context
def report_grade_report(ctx: click.Context, class_id: str) -> None:
    require(ctx, "admin", "teacher")
    if generate_grade_report(ctx.obj.repo, class_id, ctx.meta["output_dir"]) is None:
        ctx.exit(1)


@report.command(name="school")
@click.pass_context
def report_school(ctx: click.Context) -> None:
    require(ctx, "admin", "teacher")
    if generate_school_report(ctx.obj.repo, ctx.meta["output_dir"]) is None:
        ctx.exit(1)


# Export


@cli.group()
def export() -> None:
    pass


@export.command(name="grades")
@click.option("--class", "class_id")
@click.option(
    "--output-dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=EXPORTS_DIR,
    show_default=True,
)
@click.pass_context
def export_grades_cmd(ctx: click.Context, class_id: Optional[str], output_dir: Path) -> None:
    """Export grades to an Excel workbook (teacher or admin)."""
    require(ctx, "admin", "teacher")
    if export_grades(ctx.obj.repo, output_dir, class_id) is None:
        ctx.exit(1)


if __name__ == "__main__":
    cli()
