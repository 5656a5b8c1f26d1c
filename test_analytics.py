from datetime import timedelta

import pytest

from school_admin.analytics import (
    admin_overview,
    grade_analytics,
    grade_level_distribution,
    student_overview,
    teacher_overview,
)


def test_school_wide_analytics(repo, now):
    analytics = grade_analytics(repo, now=now)

    assert analytics.total_grades == 5
    assert analytics.average_grade == pytest.approx(77.8)
    assert analytics.grade_distribution == {"A+": 1, "B-": 1, "A-": 1, "A": 1, "C+": 1}

    subjects = [(s.subject, s.count) for s in analytics.subject_performance]
    assert subjects == [("Mathematics", 3), ("Physics", 2)]
    assert analytics.subject_performance[0].average == pytest.approx(80.333, abs=1e-3)
    assert analytics.subject_performance[1].average == pytest.approx(74.0)

    assert [(p.student.id, p.average) for p in analytics.top_performers] == [
        ("student-1", 90.0),
        ("student-3", 81.0),
        ("student-2", 64.0),
    ]
    assert [p.student.id for p in analytics.improvement_needed] == ["student-2"]


def test_recent_trends(repo, now):
    repo.record_grade("student-3", "assignment-2", 10, graded_by="teacher-1")
    repo.update_grade("grade-5", graded_at=now - timedelta(days=40))

    trends = grade_analytics(repo, now=now).recent_trends
    days = [point.date for point in trends]

    assert (now - timedelta(days=40)).date().isoformat() not in days
    assert days[0] == (now - timedelta(days=2)).date().isoformat()
    assert trends[0].average == pytest.approx((92 + 68 + 81 + 88) / 4)
    assert days == sorted(days)


@pytest.mark.parametrize(
    "scope,expected",
    [
        ({"teacher_id": "teacher-1"}, 3),
        ({"teacher_id": "teacher-2"}, 2),
        ({"class_id": "class-2"}, 2),
        ({"class_id": "class-404"}, 0),
        ({"student_id": "student-1"}, 2),
        ({"student_id": "student-4"}, 0),
    ],
)
def test_scoped_totals(repo, now, scope, expected):
    assert grade_analytics(repo, now=now, **scope).total_grades == expected


def test_student_scope_has_no_rankings(repo, now):
    analytics = grade_analytics(repo, student_id="student-2", class_id="class-1", now=now)

    assert analytics.total_grades == 2
    assert analytics.average_grade == pytest.approx(64.0)
    assert analytics.top_performers == []
    assert analytics.improvement_needed == []


def test_empty_scope_defaults(repo, now):
    analytics = grade_analytics(repo, class_id="class-404", now=now)
    assert analytics.average_grade == 0.0
    assert analytics.grade_distribution == {}
    assert analytics.subject_performance == []
    assert analytics.recent_trends == []


def test_admin_overview(repo):
    overview = admin_overview(repo)

    assert (
        overview.total_students,
        overview.total_teachers,
        overview.total_classes,
        overview.total_subjects,
    ) == (4, 2, 2, 3)
    assert overview.students_by_status == {"active": 4, "inactive": 0, "graduated": 0}


def test_admin_overview_counts_status(repo):
    repo.update_student("student-4", status="graduated")
    assert admin_overview(repo).students_by_status["graduated"] == 1


def test_teacher_overview(repo):
    overview = teacher_overview(repo, "teacher-1")

    assert [c.id for c in overview.classes] == ["class-1"]
    assert len(overview.assignments) == 2
    assert overview.total_students == 3
    assert [a.id for a in overview.recent_assignments] == ["assignment-2", "assignment-1"]
    assert teacher_overview(repo, "teacher-404") is None


def test_student_overview(repo, now):
    overview = student_overview(repo, "student-1", now=now)

    assert [c.id for c in overview.classes] == ["class-1", "class-2"]
    assert overview.average_grade == 90
    assert [a.id for a in overview.upcoming_assignments] == ["assignment-2"]
    assert student_overview(repo, "student-404", now=now) is None


def test_student_overview_without_grades(repo, now):
    overview = student_overview(repo, "student-4", now=now)
    assert overview.average_grade == 0
    assert overview.classes == []
    assert overview.upcoming_assignments == []


def test_grade_level_distribution(repo):
    assert grade_level_distribution(repo) == [("10", 3, "75.0%"), ("11", 1, "25.0%")]


def test_grade_level_distribution_sorts_numerically(repo):
    repo.update_student("student-4", grade_level="9", grade=9)
    assert [row[0] for row in grade_level_distribution(repo)] == ["9", "10"]
