import logging
from dataclasses import replace
from datetime import datetime
from typing import Any, Callable, Dict, Iterable, List, Optional, TypeVar

from school_admin.exceptions import (
    ClassFullError,
    DuplicateEmailError,
    DuplicateIdError,
    InvalidReferenceError,
    ReferenceInUseError,
)
from school_admin.models import (
    Admin,
    Assignment,
    Attendance,
    Grade,
    Notification,
    Parent,
    SchoolClass,
    Student,
    Subject,
    Teacher,
    User,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _find(items: Iterable[T], entity_id: str) -> Optional[T]:
    return next((item for item in items if item.id == entity_id), None)  # type: ignore[attr-defined]


def _index_of(items: List[Any], entity_id: str) -> int:
    for index, item in enumerate(items):
        if item.id == entity_id:
            return index
    return -1


class SchoolRepository:
    """
    In-memory store for every school record.

    Collections are plain lists scanned linearly. Queries return copies of
    the lists; updates swap in a new instance rather than mutating the stored
    one. Misses are reported as ``None``/``False`` and never raised.

    With ``enforce_references`` on, foreign keys on students, teachers,
    classes, assignments, grades and attendance must point at existing
    records, and teachers, subjects, classes and assignments cannot be
    deleted while referenced. User emails are unique across all roles.
    """

    def __init__(self, enforce_references: bool = True):
        self.enforce_references = enforce_references
        self._students: List[Student] = []
        self._teachers: List[Teacher] = []
        self._admins: List[Admin] = []
        self._parents: List[Parent] = []
        self._subjects: List[Subject] = []
        self._classes: List[SchoolClass] = []
        self._assignments: List[Assignment] = []
        self._grades: List[Grade] = []
        self._notifications: List[Notification] = []
        self._attendance: List[Attendance] = []

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _append(self, items: List[T], entity: T, label: str, existing: Optional[Iterable[Any]] = None) -> T:
        entity_id = entity.id  # type: ignore[attr-defined]
        if _find(existing if existing is not None else items, entity_id) is not None:
            raise DuplicateIdError(label, entity_id)
        items.append(entity)
        logger.info(f"Added {label} {entity_id}")
        return entity

    def _update(
        self,
        items: List[T],
        entity_id: str,
        updates: Dict[str, Any],
        touch: bool = False,
        validate: Optional[Callable[[T], None]] = None,
    ) -> Optional[T]:
        index = _index_of(items, entity_id)
        if index == -1:
            return None
        if "id" in updates:
            raise ValueError("id cannot be updated")
        if touch:
            updates = {**updates, "updated_at": datetime.now()}
        updated = replace(items[index], **updates)  # type: ignore[type-var]
        if validate is not None:
            validate(updated)
        items[index] = updated
        return updated

    def _remove(self, items: List[Any], entity_id: str, label: str) -> bool:
        index = _index_of(items, entity_id)
        if index == -1:
            return False
        del items[index]
        logger.info(f"Deleted {label} {entity_id}")
        return True

    def _require(self, exists: bool, field_name: str, value: str) -> None:
        if self.enforce_references and not exists:
            raise InvalidReferenceError(field_name, value)

    def _check_unused(self, label: str, entity_id: str, used_by: Dict[str, bool]) -> None:
        if not self.enforce_references:
            return
        for name, in_use in used_by.items():
            if in_use:
                raise ReferenceInUseError(label, entity_id, name)

    def _validate_user(self, user: User) -> None:
        for other in self.get_all_users():
            if other.email == user.email and other.id != user.id:
                raise DuplicateEmailError(user.email, other.id)

    # ------------------------------------------------------------------
    # Users
    # ------------------------------------------------------------------

    def get_all_users(self) -> List[User]:
        return [*self._students, *self._teachers, *self._admins, *self._parents]

    def get_user_by_id(self, user_id: str) -> Optional[User]:
        return _find(self.get_all_users(), user_id)

    def get_user_by_email(self, email: str) -> Optional[User]:
        return next((user for user in self.get_all_users() if user.email == email), None)

    def authenticate(self, email: str, password: str) -> Optional[User]:
        """
        Find the user with this exact email and password.

        Both comparisons are case-sensitive. Unknown emails and wrong
        passwords are indistinguishable to the caller.
        """
        user = self.get_user_by_email(email)
        if user is not None and user.password == password:
            return user
        return None

    # Students

    def get_students(self) -> List[Student]:
        return list(self._students)

    def get_student_by_id(self, student_id: str) -> Optional[Student]:
        return _find(self._students, student_id)

    def get_students_by_class(self, class_id: str) -> List[Student]:
        school_class = self.get_class_by_id(class_id)
        if school_class is None:
            return []
        students = [self.get_student_by_id(sid) for sid in school_class.enrolled_students]
        return [student for student in students if student is not None]

    def get_students_by_parent(self, parent_id: str) -> List[Student]:
        return [student for student in self._students if student.parent_id == parent_id]

    def _validate_student(self, student: Student) -> None:
        self._validate_user(student)
        if student.parent_id is not None:
            self._require(self.get_parent_by_id(student.parent_id) is not None, "parent_id", student.parent_id)

    def _link_child(self, parent_id: Optional[str], student_id: str, linked: bool) -> None:
        """Keep ``Parent.children`` in step with ``Student.parent_id``."""
        index = _index_of(self._parents, parent_id) if parent_id else -1
        if index == -1:
            return
        parent = self._parents[index]
        if linked == (student_id in parent.children):
            return
        children = [*parent.children, student_id] if linked else [c for c in parent.children if c != student_id]
        self._parents[index] = replace(parent, children=children, updated_at=datetime.now())

    def add_student(self, student: Student) -> Student:
        self._validate_student(student)
        added = self._append(self._students, student, "student", self.get_all_users())
        self._link_child(added.parent_id, added.id, linked=True)
        return added

    def update_student(self, student_id: str, **updates: Any) -> Optional[Student]:
        """
        Update a student; a changed ``parent_id`` moves the student between
        the parents' ``children`` lists.
        """
        previous = self.get_student_by_id(student_id)
        updated = self._update(self._students, student_id, updates, touch=True, validate=self._validate_student)
        if previous is not None and updated is not None and previous.parent_id != updated.parent_id:
            self._link_child(previous.parent_id, student_id, linked=False)
            self._link_child(updated.parent_id, student_id, linked=True)
        return updated

    def delete_student(self, student_id: str) -> bool:
        """
        Delete a student together with their grades and attendance.

        The student is also dropped from class enrollments and from their
        parents' ``children`` lists.
        """
        if not self._remove(self._students, student_id, "student"):
            return False

        self._grades = [g for g in self._grades if g.student_id != student_id]
        self._attendance = [a for a in self._attendance if a.student_id != student_id]
        for index, school_class in enumerate(self._classes):
            if student_id in school_class.enrolled_students:
                self._classes[index] = replace(
                    school_class,
                    enrolled_students=[s for s in school_class.enrolled_students if s != student_id],
                )
        for index, parent in enumerate(self._parents):
            if student_id in parent.children:
                self._parents[index] = replace(
                    parent,
                    children=[c for c in parent.children if c != student_id],
                    updated_at=datetime.now(),
                )
        return True

    # Teachers

    def get_teachers(self) -> List[Teacher]:
        return list(self._teachers)

    def get_teacher_by_id(self, teacher_id: str) -> Optional[Teacher]:
        return _find(self._teachers, teacher_id)

    def _validate_teacher(self, teacher: Teacher) -> None:
        self._validate_user(teacher)
        for subject_id in teacher.subjects:
            self._require(self.get_subject_by_id(subject_id) is not None, "subjects", subject_id)

    def add_teacher(self, teacher: Teacher) -> Teacher:
        self._validate_teacher(teacher)
        return self._append(self._teachers, teacher, "teacher", self.get_all_users())

    def update_teacher(self, teacher_id: str, **updates: Any) -> Optional[Teacher]:
        return self._update(self._teachers, teacher_id, updates, touch=True, validate=self._validate_teacher)

    def delete_teacher(self, teacher_id: str) -> bool:
        self._check_unused(
            "teacher",
            teacher_id,
            {
                "classes": any(c.teacher_id == teacher_id for c in self._classes),
                "assignments": any(a.teacher_id == teacher_id for a in self._assignments),
                "grades": any(g.graded_by == teacher_id for g in self._grades),
            },
        )
        return self._remove(self._teachers, teacher_id, "teacher")

    # Admins

    def get_admins(self) -> List[Admin]:
        return list(self._admins)

    def get_admin_by_id(self, admin_id: str) -> Optional[Admin]:
        return _find(self._admins, admin_id)

    def add_admin(self, admin: Admin) -> Admin:
        self._validate_user(admin)
        return self._append(self._admins, admin, "admin", self.get_all_users())

    def update_admin(self, admin_id: str, **updates: Any) -> Optional[Admin]:
        return self._update(self._admins, admin_id, updates, touch=True, validate=self._validate_user)

    def delete_admin(self, admin_id: str) -> bool:
        return self._remove(self._admins, admin_id, "admin")

    # Parents

    def get_parents(self) -> List[Parent]:
        return list(self._parents)

    def get_parent_by_id(self, parent_id: str) -> Optional[Parent]:
        return _find(self._parents, parent_id)

    def add_parent(self, parent: Parent) -> Parent:
        self._validate_user(parent)
        return self._append(self._parents, parent, "parent", self.get_all_users())

    def update_parent(self, parent_id: str, **updates: Any) -> Optional[Parent]:
        return self._update(self._parents, parent_id, updates, touch=True, validate=self._validate_user)

    def delete_parent(self, parent_id: str) -> bool:
        if not self._remove(self._parents, parent_id, "parent"):
            return False
        for index, student in enumerate(self._students):
            if student.parent_id == parent_id:
                self._students[index] = replace(student, parent_id=None, updated_at=datetime.now())
        return True

    # ------------------------------------------------------------------
    # Subjects
    # ------------------------------------------------------------------

    def get_subjects(self) -> List[Subject]:
        return list(self._subjects)

    def get_subject_by_id(self, subject_id: str) -> Optional[Subject]:
        return _find(self._subjects, subject_id)

    def add_subject(self, subject: Subject) -> Subject:
        return self._append(self._subjects, subject, "subject")

    def update_subject(self, subject_id: str, **updates: Any) -> Optional[Subject]:
        return self._update(self._subjects, subject_id, updates)

    def delete_subject(self, subject_id: str) -> bool:
        self._check_unused(
            "subject",
            subject_id,
            {
                "classes": any(c.subject_id == subject_id for c in self._classes),
                "assignments": any(a.subject_id == subject_id for a in self._assignments),
                "teachers": any(subject_id in t.subjects for t in self._teachers),
            },
        )
        return self._remove(self._subjects, subject_id, "subject")

    # ------------------------------------------------------------------
    # Classes
    # ------------------------------------------------------------------

    def _validate_class(self, school_class: SchoolClass) -> None:
        self._require(self.get_teacher_by_id(school_class.teacher_id) is not None, "teacher_id", school_class.teacher_id)
        self._require(self.get_subject_by_id(school_class.subject_id) is not None, "subject_id", school_class.subject_id)
        for student_id in school_class.enrolled_students:
            self._require(self.get_student_by_id(student_id) is not None, "enrolled_students", student_id)

    def get_classes(self) -> List[SchoolClass]:
        return list(self._classes)

    def get_class_by_id(self, class_id: str) -> Optional[SchoolClass]:
        return _find(self._classes, class_id)

    def get_classes_by_teacher(self, teacher_id: str) -> List[SchoolClass]:
        return [c for c in self._classes if c.teacher_id == teacher_id]

    def get_classes_by_subject(self, subject_id: str) -> List[SchoolClass]:
        return [c for c in self._classes if c.subject_id == subject_id]

    def get_classes_by_student(self, student_id: str) -> List[SchoolClass]:
        return [c for c in self._classes if student_id in c.enrolled_students]

    def add_class(self, school_class: SchoolClass) -> SchoolClass:
        self._validate_class(school_class)
        return self._append(self._classes, school_class, "class")

    def update_class(self, class_id: str, **updates: Any) -> Optional[SchoolClass]:
        return self._update(self._classes, class_id, updates, validate=self._validate_class)

    def delete_class(self, class_id: str) -> bool:
        self._check_unused(
            "class",
            class_id,
            {
                "assignments": any(a.class_id == class_id for a in self._assignments),
                "attendance": any(a.class_id == class_id for a in self._attendance),
            },
        )
        return self._remove(self._classes, class_id, "class")

    def enroll_student(self, class_id: str, student_id: str) -> bool:
        """
        Add a student to a class roster.

        Returns:
            True if the student is enrolled afterwards, False if either the
            class or the student does not exist

        Raises:
            ClassFullError: If the class already holds max_students
        """
        index = _index_of(self._classes, class_id)
        if index == -1 or self.get_student_by_id(student_id) is None:
            return False
        school_class = self._classes[index]
        if student_id in school_class.enrolled_students:
            return True
        if len(school_class.enrolled_students) >= school_class.max_students:
            raise ClassFullError(class_id, school_class.max_students)
        self._classes[index] = replace(
            school_class, enrolled_students=[*school_class.enrolled_students, student_id]
        )
        logger.info(f"Enrolled student {student_id} in class {class_id}")
        return True

    def unenroll_student(self, class_id: str, student_id: str) -> bool:
        index = _index_of(self._classes, class_id)
        if index == -1:
            return False
        school_class = self._classes[index]
        if student_id not in school_class.enrolled_students:
            return False
        self._classes[index] = replace(
            school_class,
            enrolled_students=[s for s in school_class.enrolled_students if s != student_id],
        )
        logger.info(f"Removed student {student_id} from class {class_id}")
        return True

    # ------------------------------------------------------------------
    # Assignments
    # ------------------------------------------------------------------

    def _validate_assignment(self, assignment: Assignment) -> None:
        self._require(self.get_class_by_id(assignment.class_id) is not None, "class_id", assignment.class_id)
        self._require(self.get_subject_by_id(assignment.subject_id) is not None, "subject_id", assignment.subject_id)
        self._require(self.get_teacher_by_id(assignment.teacher_id) is not None, "teacher_id", assignment.teacher_id)

    def get_assignments(self) -> List[Assignment]:
        return list(self._assignments)

    def get_assignment_by_id(self, assignment_id: str) -> Optional[Assignment]:
        return _find(self._assignments, assignment_id)

    def get_assignments_by_class(self, class_id: str) -> List[Assignment]:
        return [a for a in self._assignments if a.class_id == class_id]

    def get_assignments_by_teacher(self, teacher_id: str) -> List[Assignment]:
        return [a for a in self._assignments if a.teacher_id == teacher_id]

    def get_assignments_by_subject(self, subject_id: str) -> List[Assignment]:
        return [a for a in self._assignments if a.subject_id == subject_id]

    def add_assignment(self, assignment: Assignment) -> Assignment:
        self._validate_assignment(assignment)
        return self._append(self._assignments, assignment, "assignment")

    def update_assignment(self, assignment_id: str, **updates: Any) -> Optional[Assignment]:
        return self._update(self._assignments, assignment_id, updates, validate=self._validate_assignment)

    def delete_assignment(self, assignment_id: str) -> bool:
        self._check_unused(
            "assignment",
            assignment_id,
            {"grades": any(g.assignment_id == assignment_id for g in self._grades)},
        )
        return self._remove(self._assignments, assignment_id, "assignment")

    # ------------------------------------------------------------------
    # Grades
    # ------------------------------------------------------------------

    def _validate_grade(self, grade: Grade) -> None:
        self._require(self.get_student_by_id(grade.student_id) is not None, "student_id", grade.student_id)
        self._require(
            self.get_assignment_by_id(grade.assignment_id) is not None, "assignment_id", grade.assignment_id
        )
        self._require(self.get_teacher_by_id(grade.graded_by) is not None, "graded_by", grade.graded_by)

    def get_grades(self) -> List[Grade]:
        return list(self._grades)

    def get_grade_by_id(self, grade_id: str) -> Optional[Grade]:
        return _find(self._grades, grade_id)

    def get_grades_by_student(self, student_id: str) -> List[Grade]:
        return [g for g in self._grades if g.student_id == student_id]

    def get_grades_by_assignment(self, assignment_id: str) -> List[Grade]:
        return [g for g in self._grades if g.assignment_id == assignment_id]

    def add_grade(self, grade: Grade) -> Grade:
        self._validate_grade(grade)
        return self._append(self._grades, grade, "grade")

    def record_grade(
        self,
        student_id: str,
        assignment_id: str,
        marks_obtained: float,
        graded_by: str,
        feedback: Optional[str] = None,
    ) -> Grade:
        """
        Grade a student's assignment using the assignment's max marks.

        Raises:
            InvalidReferenceError: If the assignment does not exist
        """
        assignment = self.get_assignment_by_id(assignment_id)
        if assignment is None:
            raise InvalidReferenceError("assignment_id", assignment_id)
        grade = Grade(
            student_id=student_id,
            assignment_id=assignment_id,
            marks_obtained=marks_obtained,
            max_marks=assignment.max_marks,
            feedback=feedback,
            graded_by=graded_by,
        )
        return self.add_grade(grade)

    def update_grade(self, grade_id: str, **updates: Any) -> Optional[Grade]:
        """Update a grade; percentage and letter are always recomputed."""
        return self._update(self._grades, grade_id, updates, validate=self._validate_grade)

    def delete_grade(self, grade_id: str) -> bool:
        return self._remove(self._grades, grade_id, "grade")

    # ------------------------------------------------------------------
    # Notifications
    # ------------------------------------------------------------------

    def get_notifications(self) -> List[Notification]:
        return list(self._notifications)

    def get_notification_by_id(self, notification_id: str) -> Optional[Notification]:
        return _find(self._notifications, notification_id)

    def get_notifications_by_user(self, user_id: str) -> List[Notification]:
        return [n for n in self._notifications if n.recipient_id == user_id]

    def get_unread_notifications(self, user_id: str) -> List[Notification]:
        return [n for n in self._notifications if n.recipient_id == user_id and not n.is_read]

    def add_notification(self, notification: Notification) -> Notification:
        return self._append(self._notifications, notification, "notification")

    def update_notification(self, notification_id: str, **updates: Any) -> Optional[Notification]:
        return self._update(self._notifications, notification_id, updates)

    def mark_notification_as_read(self, notification_id: str) -> bool:
        return self.update_notification(notification_id, is_read=True) is not None

    def delete_notification(self, notification_id: str) -> bool:
        return self._remove(self._notifications, notification_id, "notification")

    # ------------------------------------------------------------------
    # Attendance
    # ------------------------------------------------------------------

    def _validate_attendance(self, attendance: Attendance) -> None:
        self._require(self.get_student_by_id(attendance.student_id) is not None, "student_id", attendance.student_id)
        self._require(self.get_class_by_id(attendance.class_id) is not None, "class_id", attendance.class_id)

    def get_attendance(self) -> List[Attendance]:
        return list(self._attendance)

    def get_attendance_by_id(self, attendance_id: str) -> Optional[Attendance]:
        return _find(self._attendance, attendance_id)

    def get_attendance_by_student(self, student_id: str) -> List[Attendance]:
        return [a for a in self._attendance if a.student_id == student_id]

    def get_attendance_by_class(self, class_id: str) -> List[Attendance]:
        return [a for a in self._attendance if a.class_id == class_id]

    def add_attendance(self, attendance: Attendance) -> Attendance:
        self._validate_attendance(attendance)
        return self._append(self._attendance, attendance, "attendance")

    def update_attendance(self, attendance_id: str, **updates: Any) -> Optional[Attendance]:
        return self._update(self._attendance, attendance_id, updates, validate=self._validate_attendance)

    def delete_attendance(self, attendance_id: str) -> bool:
        return self._remove(self._attendance, attendance_id, "attendance")
