"""Static seed data loaded into every new repository."""

from datetime import date, datetime, timedelta
from typing import Optional

from school_admin.models import (
    Admin,
    Assignment,
    ClassSchedule,
    Grade,
    Notification,
    Parent,
    SchoolClass,
    Student,
    Subject,
    Teacher,
)
from school_admin.repository import SchoolRepository

SEED_DATE = datetime(2024, 1, 15, 9, 0)


def seed_repository(repo: SchoolRepository, now: Optional[datetime] = None) -> SchoolRepository:
    """
    Load the demo school into ``repo``.

    Assignment due dates are placed around ``now`` so dashboards always have
    both past and upcoming work to show.
    """
    now = now or datetime.now()

    repo.add_admin(
        Admin(
            id="admin-1",
            email="admin@school.edu",
            password="admin123",
            first_name="Grace",
            last_name="Hopper",
            admin_id="ADM001",
            permissions=["manage_users", "manage_courses", "view_reports"],
            created_at=SEED_DATE,
            updated_at=SEED_DATE,
        )
    )

    repo.add_subject(
        Subject(
            id="subject-1",
            name="Mathematics",
            code="MATH101",
            description="Algebra and geometry fundamentals",
            credits=4,
            department="Mathematics",
            grade=10,
        )
    )
    repo.add_subject(
        Subject(
            id="subject-2",
            name="Physics",
            code="PHY101",
            description="Introductory mechanics",
            credits=3,
            department="Science",
            grade=10,
        )
    )
    repo.add_subject(
        Subject(
            id="subject-3",
            name="English Literature",
            code="ENG101",
            description="Reading and composition",
            credits=3,
            department="Languages",
            grade=11,
        )
    )

    repo.add_teacher(
        Teacher(
            id="teacher-1",
            email="john.smith@school.edu",
            password="teacher123",
            first_name="John",
            last_name="Smith",
            teacher_id="TCH001",
            department="Mathematics",
            subjects=["subject-1"],
            qualification="M.Sc. Mathematics",
            experience=8,
            join_date=date(2016, 8, 1),
            created_at=SEED_DATE,
            updated_at=SEED_DATE,
        )
    )
    repo.add_teacher(
        Teacher(
            id="teacher-2",
            email="sarah.jones@school.edu",
            password="teacher123",
            first_name="Sarah",
            last_name="Jones",
            teacher_id="TCH002",
            department="Science",
            subjects=["subject-2", "subject-3"],
            qualification="Ph.D. Physics",
            experience=12,
            join_date=date(2012, 1, 9),
            created_at=SEED_DATE,
            updated_at=SEED_DATE,
        )
    )

    repo.add_parent(
        Parent(
            id="parent-1",
            email="mary.doe@example.com",
            password="parent123",
            first_name="Mary",
            last_name="Doe",
            parent_id="PAR001",
            children=["student-1"],
            occupation="Engineer",
            created_at=SEED_DATE,
            updated_at=SEED_DATE,
        )
    )

    students = [
        ("student-1", "alice.doe@school.edu", "Alice", "Doe", "STU001", 10, "A", "parent-1"),
        ("student-2", "bob.brown@school.edu", "Bob", "Brown", "STU002", 10, "A", None),
        ("student-3", "carol.white@school.edu", "Carol", "White", "STU003", 10, "B", None),
        ("student-4", "dan.green@school.edu", "Dan", "Green", "STU004", 11, "A", None),
    ]
    for sid, email, first, last, number, level, section, parent_id in students:
        repo.add_student(
            Student(
                id=sid,
                email=email,
                password="student123",
                first_name=first,
                last_name=last,
                student_id=number,
                grade_level=str(level),
                grade=level,
                section=section,
                parent_id=parent_id,
                date_of_birth=date(2024 - level - 6, 5, 1),
                address="12 School Lane",
                enrollment_date=date(2023, 9, 1),
                created_at=SEED_DATE,
                updated_at=SEED_DATE,
            )
        )

    repo.add_class(
        SchoolClass(
            id="class-1",
            name="Mathematics 10A",
            grade=10,
            section="A",
            teacher_id="teacher-1",
            subject_id="subject-1",
            schedule=[
                ClassSchedule(day_of_week=1, start_time="09:00", end_time="10:00", room="R101"),
                ClassSchedule(day_of_week=3, start_time="09:00", end_time="10:00", room="R101"),
            ],
            max_students=30,
            enrolled_students=["student-1", "student-2", "student-3"],
            academic_year="2024-2025",
            room="R101",
        )
    )
    repo.add_class(
        SchoolClass(
            id="class-2",
            name="Physics 10A",
            grade=10,
            section="A",
            teacher_id="teacher-2",
            subject_id="subject-2",
            schedule=[ClassSchedule(day_of_week=2, start_time="11:00", end_time="12:30", room="LAB1")],
            max_students=24,
            enrolled_students=["student-1", "student-2"],
            academic_year="2024-2025",
            room="LAB1",
        )
    )

    repo.add_assignment(
        Assignment(
            id="assignment-1",
            title="Quadratic Equations",
            description="Problems 1-20 from chapter 4",
            subject_id="subject-1",
            teacher_id="teacher-1",
            class_id="class-1",
            due_date=now - timedelta(days=7),
            max_marks=100,
            type="homework",
            created_at=now - timedelta(days=14),
        )
    )
    repo.add_assignment(
        Assignment(
            id="assignment-2",
            title="Algebra Quiz",
            subject_id="subject-1",
            teacher_id="teacher-1",
            class_id="class-1",
            due_date=now + timedelta(days=5),
            max_marks=20,
            type="quiz",
            created_at=now - timedelta(days=2),
        )
    )
    repo.add_assignment(
        Assignment(
            id="assignment-3",
            title="Motion Lab Report",
            subject_id="subject-2",
            teacher_id="teacher-2",
            class_id="class-2",
            due_date=now - timedelta(days=3),
            max_marks=50,
            type="project",
            created_at=now - timedelta(days=10),
        )
    )

    grades = [
        ("grade-1", "student-1", "assignment-1", 92, 100, "teacher-1", "Excellent work"),
        ("grade-2", "student-2", "assignment-1", 68, 100, "teacher-1", "Review factoring"),
        ("grade-3", "student-3", "assignment-1", 81, 100, "teacher-1", None),
        ("grade-4", "student-1", "assignment-3", 44, 50, "teacher-2", "Clear analysis"),
        ("grade-5", "student-2", "assignment-3", 30, 50, "teacher-2", None),
    ]
    for gid, student_id, assignment_id, marks, max_marks, graded_by, feedback in grades:
        repo.add_grade(
            Grade(
                id=gid,
                student_id=student_id,
                assignment_id=assignment_id,
                marks_obtained=marks,
                max_marks=max_marks,
                feedback=feedback,
                graded_at=now - timedelta(days=2),
                graded_by=graded_by,
            )
        )

    repo.add_notification(
        Notification(
            id="notification-1",
            recipient_id="student-1",
            recipient_type="student",
            title="New grade posted",
            message="Your Quadratic Equations homework has been graded.",
            type="grade",
            created_at=now - timedelta(days=2),
            created_by="teacher-1",
        )
    )
    repo.add_notification(
        Notification(
            id="notification-2",
            recipient_id="teacher-1",
            recipient_type="teacher",
            title="Staff meeting",
            message="Staff meeting on Friday at 3pm in the library.",
            type="announcement",
            created_at=now - timedelta(days=1),
            created_by="admin-1",
        )
    )

    return repo


def build_repository(now: Optional[datetime] = None) -> SchoolRepository:
    """Create a fresh repository loaded with the seed data."""
    return seed_repository(SchoolRepository(), now=now)
