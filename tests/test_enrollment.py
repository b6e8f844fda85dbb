import pytest

from coursemarket.models import db, Enrollment
from coursemarket.classes.enrollment_manager import EnrollmentManager
from coursemarket.classes.errors import AlreadyEnrolled, Conflict, CourseUnavailable, NotFound, Unauthenticated, Unauthorized
from conftest import build_course


def test_enroll_creates_fresh_enrollment(student, course_with_lessons):
    course, _ = course_with_lessons
    enrollment = EnrollmentManager.enroll(student, course.id)

    assert enrollment.student_id == student.id
    assert enrollment.progress_percentage == 0
    assert enrollment.completed_at is None
    assert enrollment.enrolled_at is not None


def test_enrolling_twice_conflicts(student, course_with_lessons):
    course, _ = course_with_lessons
    EnrollmentManager.enroll(student, course.id)

    with pytest.raises(AlreadyEnrolled) as exc:
        EnrollmentManager.enroll(student, course.id)

    assert isinstance(exc.value, Conflict)
    assert db.session.query(Enrollment).filter_by(student_id=student.id, course_id=course.id).count() == 1


def test_losing_the_insert_race_reports_already_enrolled(student, course_with_lessons, monkeypatch):
    course, _ = course_with_lessons
    EnrollmentManager.enroll(student, course.id)

    # The pre-check misses a row a concurrent request has just committed,
    # so the insert itself hits the unique constraint
    monkeypatch.setattr(Enrollment, "query", _EmptyQuery())

    with pytest.raises(AlreadyEnrolled):
        EnrollmentManager.enroll(student, course.id)

    monkeypatch.undo()
    assert db.session.query(Enrollment).count() == 1


class _EmptyQuery:
    def filter_by(self, **kwargs):
        return self

    def first(self):
        return None


def test_unpublished_course_is_unavailable(instructor, student):
    course, _ = build_course(instructor, published=False)
    with pytest.raises(CourseUnavailable):
        EnrollmentManager.enroll(student, course.id)


def test_instructor_may_enroll_in_own_draft(instructor):
    course, _ = build_course(instructor, published=False)
    assert EnrollmentManager.enroll(instructor, course.id).course_id == course.id


def test_enroll_requires_identity_and_course(student):
    with pytest.raises(Unauthenticated):
        EnrollmentManager.enroll(None, "anything")
    with pytest.raises(CourseUnavailable):
        EnrollmentManager.enroll(student, "missing-course")


def test_get_enrollment_visibility(instructor, other_instructor, student, other_student, course_with_lessons, enrollment):
    course, _ = course_with_lessons
    assert EnrollmentManager.get_enrollment(student, student.id, course.id).id == enrollment.id
    assert EnrollmentManager.get_enrollment(instructor, student.id, course.id).id == enrollment.id

    with pytest.raises(Unauthorized):
        EnrollmentManager.get_enrollment(other_student, student.id, course.id)
    with pytest.raises(NotFound):
        EnrollmentManager.get_enrollment(other_student, other_student.id, course.id)


def test_enrollment_lookup_does_not_reveal_other_students(instructor, other_instructor, student, other_student, course_with_lessons):
    course, _ = course_with_lessons

    with pytest.raises(Unauthorized) as before:
        EnrollmentManager.get_enrollment(other_student, student.id, course.id)
    EnrollmentManager.enroll(student, course.id)
    with pytest.raises(Unauthorized) as after:
        EnrollmentManager.get_enrollment(other_student, student.id, course.id)
    assert before.value.to_dict() == after.value.to_dict()

    with pytest.raises(Unauthorized):
        EnrollmentManager.get_enrollment(other_instructor, student.id, course.id)
    with pytest.raises(Unauthorized):
        EnrollmentManager.get_enrollment_by_id(other_student, "missing-enrollment")


def test_draft_and_missing_courses_are_equally_unavailable(instructor, student):
    draft, _ = build_course(instructor, published=False)
    with pytest.raises(CourseUnavailable) as hidden:
        EnrollmentManager.enroll(student, draft.id)
    with pytest.raises(CourseUnavailable) as missing:
        EnrollmentManager.enroll(student, "missing-course")
    assert hidden.value.to_dict() == missing.value.to_dict()


def test_course_enrollments_listed_for_instructor_only(instructor, other_instructor, student, course_with_lessons, enrollment):
    course, _ = course_with_lessons
    assert [e.id for e in EnrollmentManager.list_course_enrollments(instructor, course.id)] == [enrollment.id]

    with pytest.raises(Unauthorized):
        EnrollmentManager.list_course_enrollments(other_instructor, course.id)
    with pytest.raises(Unauthorized):
        EnrollmentManager.list_course_enrollments(student, course.id)
