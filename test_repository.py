from datetime import date, datetime

import pytest

from school_admin.exceptions import (
    ClassFullError,
    DuplicateEmailError,
    DuplicateIdError,
    InvalidReferenceError,
    ReferenceInUseError,
)
from school_admin.models import (
    Assignment,
    Attendance,
    Grade,
    Notification,
    Parent,
    SchoolClass,
    Student,
    Subject,
    Teacher,
)
from school_admin.repository import SchoolRepository


def new_student(student_id: str = "student-9", **overrides) -> Student:
    fields = dict(
        id=student_id,
        email=f"{student_id}@school.edu",
        password="pw",
        first_name="New",
        last_name="Student",
        student_id="STU999",
        grade_level="10",
        grade=10,
        section="C",
    )
    fields.update(overrides)
    return Student(**fields)


def new_teacher(teacher_id: str) -> Teacher:
    return Teacher(
        id=teacher_id,
        email=f"{teacher_id}@school.edu",
        password="pw",
        first_name="Tess",
        last_name="Teacher",
        teacher_id=teacher_id.upper(),
        department="Maths",
    )


def new_class(class_id: str, teacher_id: str, subject_id: str = "sub-1", **overrides) -> SchoolClass:
    fields = dict(
        id=class_id,
        name=f"Class {class_id}",
        grade=10,
        section="A",
        teacher_id=teacher_id,
        subject_id=subject_id,
        max_students=30,
        academic_year="2024-2025",
    )
    fields.update(overrides)
    return SchoolClass(**fields)


# Students


def test_add_student_then_get(repo):
    before = datetime.now()
    repo.add_student(new_student())

    stored = repo.get_student_by_id("student-9")
    assert stored is not None
    assert stored.status == "active"
    assert stored.role == "student"
    assert stored.created_at >= before
    assert stored.updated_at >= before
    assert len(repo.get_students()) == 5


def test_add_student_rejects_duplicate_id(repo):
    with pytest.raises(DuplicateIdError):
        repo.add_student(new_student("student-1"))


def test_user_ids_are_unique_across_roles(repo):
    with pytest.raises(DuplicateIdError):
        repo.add_student(new_student("teacher-1"))
    assert repo.get_student_by_id("teacher-1") is None


def test_delete_student_cascades(repo):
    assert repo.delete_student("student-1") is True

    assert repo.get_student_by_id("student-1") is None
    assert repo.get_grades_by_student("student-1") == []
    assert "student-1" not in repo.get_class_by_id("class-1").enrolled_students
    assert "student-1" not in repo.get_class_by_id("class-2").enrolled_students
    assert repo.get_parent_by_id("parent-1").children == []
    assert len(repo.get_grades()) == 3


def test_delete_missing_student_changes_nothing(repo):
    assert repo.delete_student("missing") is False
    assert len(repo.get_students()) == 4


def test_update_student_touches_updated_at(repo):
    original = repo.get_student_by_id("student-2")
    updated = repo.update_student("student-2", section="C", status="inactive")

    assert updated.section == "C"
    assert updated.status == "inactive"
    assert updated.updated_at > original.updated_at
    assert updated.created_at == original.created_at
    assert repo.get_student_by_id("student-2") == updated


def test_update_student_edge_cases(repo):
    assert repo.update_student("missing", section="C") is None
    with pytest.raises(TypeError):
        repo.update_student("student-1", favourite_colour="blue")
    with pytest.raises(ValueError):
        repo.update_student("student-1", role="admin")
    with pytest.raises(ValueError):
        repo.update_student("student-1", id="student-99")


def test_getters_return_copies(repo):
    students = repo.get_students()
    students.clear()
    assert len(repo.get_students()) == 4


def test_students_by_class_follow_enrollment_order(repo):
    ids = [s.id for s in repo.get_students_by_class("class-1")]
    assert ids == ["student-1", "student-2", "student-3"]
    assert repo.get_students_by_class("missing") == []


def test_students_by_parent(repo):
    assert [s.id for s in repo.get_students_by_parent("parent-1")] == ["student-1"]


def test_delete_parent_clears_student_link(repo):
    assert repo.delete_parent("parent-1") is True
    assert repo.get_student_by_id("student-1").parent_id is None


def test_add_student_links_parent(repo):
    repo.add_student(new_student("student-10", parent_id="parent-1"))

    assert repo.get_parent_by_id("parent-1").children == ["student-1", "student-10"]
    assert [s.id for s in repo.get_students_by_parent("parent-1")] == ["student-1", "student-10"]


def test_student_parent_must_exist(repo):
    with pytest.raises(InvalidReferenceError) as exc_info:
        repo.add_student(new_student("student-10", parent_id="parent-404"))
    assert exc_info.value.field_name == "parent_id"
    assert repo.get_student_by_id("student-10") is None

    with pytest.raises(InvalidReferenceError):
        repo.update_student("student-2", parent_id="parent-404")
    assert repo.get_student_by_id("student-2").parent_id is None


def test_update_student_moves_between_parents(repo):
    repo.add_parent(
        Parent(
            id="parent-2",
            email="pat.doe@example.com",
            password="pw",
            first_name="Pat",
            last_name="Doe",
            parent_id="PAR002",
        )
    )

    repo.update_student("student-1", parent_id="parent-2")
    assert repo.get_parent_by_id("parent-1").children == []
    assert repo.get_parent_by_id("parent-2").children == ["student-1"]

    repo.update_student("student-1", parent_id=None)
    assert repo.get_parent_by_id("parent-2").children == []
    assert repo.get_students_by_parent("parent-2") == []


def test_emails_are_unique_across_roles(repo):
    with pytest.raises(DuplicateEmailError):
        repo.add_student(new_student("student-10", email="john.smith@school.edu"))
    assert repo.get_student_by_id("student-10") is None

    with pytest.raises(DuplicateEmailError):
        repo.update_parent("parent-1", email="admin@school.edu")
    assert repo.authenticate("admin@school.edu", "admin123").id == "admin-1"

    # keeping one's own email is not a clash
    assert repo.update_student("student-1", email="alice.doe@school.edu") is not None


# Authentication


def test_authenticate_exact_match(repo):
    user = repo.authenticate("admin@school.edu", "admin123")
    assert user is not None
    assert user.role == "admin"


@pytest.mark.parametrize(
    "email,password",
    [
        ("admin@school.edu", "wrong"),
        ("nobody@school.edu", "admin123"),
        ("Admin@School.edu", "admin123"),
        ("admin@school.edu", "ADMIN123"),
    ],
)
def test_authenticate_failures(repo, email, password):
    assert repo.authenticate(email, password) is None


def test_get_user_by_id_spans_roles(repo):
    assert repo.get_user_by_id("parent-1").role == "parent"
    assert repo.get_user_by_id("teacher-2").role == "teacher"
    assert repo.get_user_by_id("missing") is None
    assert len(repo.get_all_users()) == 8


# Teachers, subjects and classes


@pytest.mark.parametrize("enforce", [True, False])
def test_classes_by_teacher(enforce):
    repo = SchoolRepository(enforce_references=enforce)
    repo.add_teacher(new_teacher("t1"))
    repo.add_subject(Subject(id="sub-1", name="Maths", code="M1", grade=10))
    school_class = repo.add_class(new_class("C", "t1"))

    assert repo.get_classes_by_teacher("t1") == [school_class]
    assert repo.get_classes_by_teacher("t2") == []


def test_class_references_are_checked(repo):
    with pytest.raises(InvalidReferenceError) as exc_info:
        repo.add_class(new_class("class-9", "teacher-404", "subject-1"))
    assert exc_info.value.field_name == "teacher_id"

    with pytest.raises(InvalidReferenceError):
        repo.add_class(new_class("class-9", "teacher-1", "subject-404"))
    with pytest.raises(InvalidReferenceError):
        repo.add_class(new_class("class-9", "teacher-1", "subject-1", enrolled_students=["student-404"]))
    assert repo.get_class_by_id("class-9") is None


def test_references_are_not_checked_when_disabled():
    repo = SchoolRepository(enforce_references=False)
    repo.add_class(new_class("class-9", "teacher-404", "subject-404"))
    assert repo.get_class_by_id("class-9") is not None


def test_update_class_validates_references(repo):
    with pytest.raises(InvalidReferenceError):
        repo.update_class("class-1", teacher_id="teacher-404")
    assert repo.get_class_by_id("class-1").teacher_id == "teacher-1"


def test_delete_teacher_in_use(repo):
    with pytest.raises(ReferenceInUseError) as exc_info:
        repo.delete_teacher("teacher-1")
    assert exc_info.value.used_by == "classes"
    assert repo.get_teacher_by_id("teacher-1") is not None


def test_delete_subject(repo):
    with pytest.raises(ReferenceInUseError):
        repo.delete_subject("subject-1")

    # subject-3 has no classes or assignments but teacher-2 still teaches it
    with pytest.raises(ReferenceInUseError) as exc_info:
        repo.delete_subject("subject-3")
    assert exc_info.value.used_by == "teachers"
    assert repo.get_subject_by_id("subject-3") is not None

    repo.update_teacher("teacher-2", subjects=["subject-2"])
    assert repo.delete_subject("subject-3") is True
    assert repo.delete_subject("subject-3") is False
    assert [s.id for s in repo.get_subjects()] == ["subject-1", "subject-2"]


def test_teacher_subjects_must_exist(repo):
    with pytest.raises(InvalidReferenceError):
        repo.update_teacher("teacher-2", subjects=["subject-2", "subject-404"])
    assert repo.get_teacher_by_id("teacher-2").subjects == ["subject-2", "subject-3"]


def test_update_subject(repo):
    updated = repo.update_subject("subject-3", credits=5, is_active=False)
    assert updated.credits == 5
    assert updated.is_active is False
    assert repo.update_subject("missing", credits=1) is None


def test_delete_class_with_assignments(repo):
    with pytest.raises(ReferenceInUseError) as exc_info:
        repo.delete_class("class-2")
    assert exc_info.value.used_by == "assignments"

    repo.add_class(new_class("class-9", "teacher-1", "subject-1"))
    assert repo.delete_class("class-9") is True


def test_class_queries(repo):
    assert [c.id for c in repo.get_classes_by_subject("subject-2")] == ["class-2"]
    assert [c.id for c in repo.get_classes_by_student("student-1")] == ["class-1", "class-2"]
    assert [c.id for c in repo.get_classes_by_student("student-4")] == []


def test_enroll_and_unenroll(repo):
    assert repo.enroll_student("class-2", "student-3") is True
    assert repo.get_class_by_id("class-2").enrolled_students == ["student-1", "student-2", "student-3"]

    # enrolling twice leaves the roster alone
    assert repo.enroll_student("class-2", "student-3") is True
    assert len(repo.get_class_by_id("class-2").enrolled_students) == 3

    assert repo.enroll_student("class-404", "student-3") is False
    assert repo.enroll_student("class-2", "student-404") is False

    assert repo.unenroll_student("class-2", "student-3") is True
    assert repo.unenroll_student("class-2", "student-3") is False
    assert repo.get_class_by_id("class-2").enrolled_students == ["student-1", "student-2"]


def test_enroll_into_full_class(repo):
    repo.update_class("class-2", max_students=2)
    with pytest.raises(ClassFullError):
        repo.enroll_student("class-2", "student-3")
    assert "student-3" not in repo.get_class_by_id("class-2").enrolled_students


# Assignments and grades


def test_assignment_queries(repo):
    assert [a.id for a in repo.get_assignments_by_class("class-1")] == ["assignment-1", "assignment-2"]
    assert [a.id for a in repo.get_assignments_by_teacher("teacher-2")] == ["assignment-3"]
    assert [a.id for a in repo.get_assignments_by_subject("subject-1")] == ["assignment-1", "assignment-2"]


def test_add_assignment_checks_class(repo):
    with pytest.raises(InvalidReferenceError):
        repo.add_assignment(
            Assignment(
                title="Essay",
                subject_id="subject-1",
                teacher_id="teacher-1",
                class_id="class-404",
                due_date=datetime(2024, 7, 1),
                max_marks=10,
                type="homework",
            )
        )


def test_delete_assignment_with_grades(repo):
    with pytest.raises(ReferenceInUseError):
        repo.delete_assignment("assignment-1")
    assert repo.delete_assignment("assignment-2") is True


def test_grade_letter_follows_percentage():
    grade = Grade(student_id="s", assignment_id="a", marks_obtained=44, max_marks=50, graded_by="t")
    assert (grade.percentage, grade.letter) == (88, "A")


def test_update_grade_recomputes(repo):
    updated = repo.update_grade("grade-4", marks_obtained=45)
    assert updated.percentage == 90
    assert updated.letter == "A+"

    rescaled = repo.update_grade("grade-1", max_marks=200)
    assert rescaled.percentage == 46
    assert rescaled.letter == "F"
    assert repo.get_grade_by_id("grade-1").letter == "F"


def test_update_grade_rejects_derived_fields(repo):
    with pytest.raises(ValueError):
        repo.update_grade("grade-1", percentage=100)
    with pytest.raises(ValueError):
        repo.update_grade("grade-1", letter="A+")
    assert repo.get_grade_by_id("grade-1").percentage == 92


def test_update_grade_rejects_invalid_marks(repo):
    with pytest.raises(ValueError):
        repo.update_grade("grade-1", max_marks=0)
    assert repo.get_grade_by_id("grade-1").max_marks == 100


def test_record_grade_uses_assignment_max_marks(repo):
    grade = repo.record_grade("student-3", "assignment-2", 15, graded_by="teacher-1", feedback="Good")

    assert grade.max_marks == 20
    assert grade.percentage == 75
    assert grade.letter == "B+"
    assert grade.id.startswith("grade-")
    assert repo.get_grade_by_id(grade.id) == grade


def test_record_grade_for_unknown_records(repo):
    with pytest.raises(InvalidReferenceError):
        repo.record_grade("student-1", "assignment-404", 10, graded_by="teacher-1")
    with pytest.raises(InvalidReferenceError):
        repo.record_grade("student-404", "assignment-2", 10, graded_by="teacher-1")


def test_grade_queries(repo):
    assert [g.id for g in repo.get_grades_by_student("student-1")] == ["grade-1", "grade-4"]
    assert [g.id for g in repo.get_grades_by_assignment("assignment-3")] == ["grade-4", "grade-5"]
    assert repo.delete_grade("grade-5") is True
    assert repo.delete_grade("grade-5") is False


# Notifications


def test_notifications(repo):
    assert [n.id for n in repo.get_notifications_by_user("student-1")] == ["notification-1"]
    assert [n.id for n in repo.get_unread_notifications("student-1")] == ["notification-1"]

    assert repo.mark_notification_as_read("notification-1") is True
    assert repo.get_notification_by_id("notification-1").is_read is True
    assert repo.get_unread_notifications("student-1") == []
    assert repo.mark_notification_as_read("notification-404") is False


def test_add_and_delete_notification(repo):
    notification = repo.add_notification(
        Notification(
            recipient_id="parent-1",
            recipient_type="parent",
            title="Report cards",
            message="Report cards are out.",
            created_by="admin-1",
        )
    )
    assert notification.type == "general"
    assert repo.get_notifications_by_user("parent-1") == [notification]
    assert repo.delete_notification(notification.id) is True
    assert repo.get_notifications_by_user("parent-1") == []


# Attendance


def test_attendance(repo):
    record = repo.add_attendance(
        Attendance(
            student_id="student-1",
            class_id="class-1",
            date=date(2024, 5, 20),
            status="present",
            marked_by="teacher-1",
        )
    )
    assert repo.get_attendance_by_student("student-1") == [record]
    assert repo.get_attendance_by_class("class-1") == [record]

    updated = repo.update_attendance(record.id, status="late", notes="Bus delay")
    assert updated.status == "late"

    with pytest.raises(ReferenceInUseError):
        repo.delete_class("class-1")

    repo.delete_student("student-1")
    assert repo.get_attendance() == []


def test_attendance_requires_known_class(repo):
    with pytest.raises(InvalidReferenceError):
        repo.add_attendance(
            Attendance(
                student_id="student-1",
                class_id="class-404",
                date=date(2024, 5, 20),
                status="absent",
                marked_by="teacher-1",
            )
        )


def test_grades_are_given_by_teachers(repo):
    with pytest.raises(InvalidReferenceError) as exc_info:
        repo.record_grade("student-3", "assignment-2", 15, graded_by="admin-1")
    assert exc_info.value.field_name == "graded_by"
    with pytest.raises(InvalidReferenceError):
        repo.update_grade("grade-1", graded_by="admin-1")
    assert repo.get_grade_by_id("grade-1").graded_by == "teacher-1"


def test_teacher_who_graded_cannot_be_deleted(repo):
    repo.add_teacher(new_teacher("teacher-3"))
    repo.record_grade("student-3", "assignment-2", 15, graded_by="teacher-3")

    with pytest.raises(ReferenceInUseError) as exc_info:
        repo.delete_teacher("teacher-3")
    assert exc_info.value.used_by == "grades"
