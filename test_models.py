from dataclasses import replace
from datetime import date, datetime

import pytest

from school_admin.models import (
    ClassSchedule,
    Grade,
    Student,
    Teacher,
    user_from_dict,
    user_to_dict,
)


def make_student(**overrides) -> Student:
    fields = dict(
        id="s1",
        email="sam@school.edu",
        password="secret",
        first_name="Sam",
        last_name="Lee",
        student_id="STU100",
        grade_level="9",
        grade=9,
        section="B",
        date_of_birth=date(2010, 2, 3),
        enrollment_date=date(2023, 9, 1),
        created_at=datetime(2024, 1, 1, 8, 30),
        updated_at=datetime(2024, 1, 1, 8, 30),
    )
    fields.update(overrides)
    return Student(**fields)


def test_role_is_fixed_by_variant():
    student = make_student()
    assert student.role == "student"
    assert student.status == "active"
    with pytest.raises(TypeError):
        make_student(role="admin")


def test_ids_are_generated_with_prefix():
    teacher = Teacher(
        email="t@school.edu", password="x", first_name="T", last_name="Q", teacher_id="T9", department="Art"
    )
    assert teacher.id.startswith("teacher-")
    assert len(teacher.id) > len("teacher-")


def test_user_round_trip_drops_password():
    student = make_student()
    data = user_to_dict(student)
    assert "password" not in data
    assert data["role"] == "student"
    assert data["date_of_birth"] == "2010-02-03"

    restored = user_from_dict(data)
    assert isinstance(restored, Student)
    assert restored == replace(student, password="")


def test_user_from_dict_rejects_unknown_role():
    with pytest.raises(ValueError):
        user_from_dict({"role": "janitor", "id": "x"})
    with pytest.raises(ValueError):
        user_from_dict({"id": "x"})
    with pytest.raises(ValueError):
        user_from_dict("student")  # type: ignore[arg-type]
    with pytest.raises(ValueError):
        user_from_dict(None)  # type: ignore[arg-type]


def test_schedule_day_must_be_in_week():
    ClassSchedule(day_of_week=0, start_time="08:00", end_time="09:00", room="R1")
    with pytest.raises(ValueError):
        ClassSchedule(day_of_week=7, start_time="08:00", end_time="09:00", room="R1")


def test_grade_derives_percentage_and_letter():
    grade = Grade(student_id="s1", assignment_id="a1", marks_obtained=17, max_marks=20, graded_by="t1")
    assert grade.percentage == 85
    assert grade.letter == "A"

    regraded = replace(grade, marks_obtained=9)
    assert regraded.percentage == 45
    assert regraded.letter == "F"


def test_grade_derived_fields_cannot_be_supplied():
    with pytest.raises(TypeError):
        Grade(
            student_id="s1",
            assignment_id="a1",
            marks_obtained=17,
            max_marks=20,
            graded_by="t1",
            percentage=10,
        )
