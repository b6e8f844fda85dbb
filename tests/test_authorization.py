import pytest

from coursemarket.models import db, Certificate, Course, Enrollment, Lesson, LessonProgress, Profile, Review, Section
from coursemarket.classes.actor import Actor
from coursemarket.classes.authorization import authorize, require, READ, CREATE, WRITE, DELETE
from coursemarket.classes.catalog_manager import CatalogManager
from coursemarket.classes.enrollment_manager import EnrollmentManager
from coursemarket.classes.errors import Unauthorized
from conftest import build_course


def test_authorize_is_deterministic_and_read_only(student, course_with_lessons):
    course, lessons = course_with_lessons
    before = db.session.query(Enrollment).count()

    first = [authorize(student, READ, lesson) for lesson in lessons]
    second = [authorize(student, READ, lesson) for lesson in lessons]

    assert first == second
    assert db.session.query(Enrollment).count() == before
    assert not db.session.new and not db.session.dirty


def test_profile_rules(student, other_student):
    profile = db.session.get(Profile, student.id)
    assert authorize(other_student, READ, profile)
    assert not authorize(None, READ, profile)
    assert authorize(student, WRITE, profile)
    assert not authorize(other_student, WRITE, profile)


def test_unpublished_course_visible_only_to_instructor(instructor, student):
    course, _ = build_course(instructor, published=False)
    assert authorize(instructor, READ, course)
    assert not authorize(student, READ, course)
    assert not authorize(None, READ, course)

    CatalogManager.publish_course(instructor, course.id)
    assert authorize(student, READ, course)
    assert authorize(None, READ, course)


def test_course_write_requires_owner(instructor, other_instructor, student, course_with_lessons):
    course, _ = course_with_lessons
    assert authorize(instructor, WRITE, course)
    assert authorize(instructor, DELETE, course)
    assert not authorize(other_instructor, WRITE, course)
    assert not authorize(student, DELETE, course)


def test_only_instructors_create_courses(student, instructor):
    assert authorize(instructor, CREATE, Course(instructor_id=instructor.id))
    assert not authorize(student, CREATE, Course(instructor_id=student.id))
    assert not authorize(instructor, CREATE, Course(instructor_id="someone-else"))


def test_unenrolled_student_denied_non_preview_lesson_of_unpublished_course(instructor, student):
    _, lessons = build_course(instructor, published=False)
    preview, locked = lessons[0], lessons[1]

    with pytest.raises(Unauthorized):
        CatalogManager.get_lesson(student, locked.id)
    assert CatalogManager.get_lesson(student, preview.id).id == preview.id


def test_enrolled_student_reads_every_lesson(student, course_with_lessons, enrollment):
    _, lessons = course_with_lessons
    assert all(authorize(student, READ, lesson) for lesson in lessons)


def test_published_course_exposes_sections_but_not_locked_lessons(student, course_with_lessons):
    course, lessons = course_with_lessons
    section = db.session.get(Section, lessons[1].section_id)
    assert authorize(student, READ, section)
    assert authorize(None, READ, section)
    assert authorize(student, READ, lessons[0])
    assert not authorize(student, READ, lessons[1])


def test_lesson_writes_require_course_instructor(instructor, other_instructor, course_with_lessons):
    _, lessons = course_with_lessons
    assert authorize(instructor, WRITE, lessons[0])
    assert not authorize(other_instructor, WRITE, lessons[0])
    assert not authorize(other_instructor, CREATE, Lesson(section_id=lessons[0].section_id))


def test_broken_ownership_chain_fails_closed(instructor):
    orphan = Lesson(section_id="missing-section", title="x", video_url="v", order_index=0, is_preview=False)
    assert not authorize(instructor, READ, orphan)
    assert not authorize(instructor, WRITE, orphan)
    assert not authorize(instructor, READ, LessonProgress(enrollment_id="missing"))


def test_enrollment_visibility(instructor, other_instructor, student, other_student, enrollment):
    assert authorize(student, READ, enrollment)
    assert authorize(instructor, READ, enrollment)
    assert not authorize(other_student, READ, enrollment)
    assert not authorize(other_instructor, READ, enrollment)
    assert authorize(student, WRITE, enrollment)
    assert not authorize(instructor, WRITE, enrollment)


def test_enrollment_create_only_for_self(student, other_student, course_with_lessons):
    course, _ = course_with_lessons
    assert authorize(student, CREATE, Enrollment(student_id=student.id, course_id=course.id))
    assert not authorize(other_student, CREATE, Enrollment(student_id=student.id, course_id=course.id))


def test_progress_and_certificate_belong_to_enrollment_owner(instructor, student, other_student, enrollment):
    progress = LessonProgress(enrollment_id=enrollment.id)
    assert authorize(student, WRITE, progress)
    assert not authorize(other_student, READ, progress)
    assert not authorize(instructor, READ, progress)

    certificate = Certificate(enrollment_id=enrollment.id)
    assert authorize(student, READ, certificate)
    # Not completed yet
    assert not authorize(student, CREATE, certificate)


def test_review_rules(student, other_student, course_with_lessons, enrollment):
    course, _ = course_with_lessons
    assert authorize(student, CREATE, Review(course_id=course.id, student_id=student.id))
    assert not authorize(other_student, CREATE, Review(course_id=course.id, student_id=other_student.id))
    assert not authorize(other_student, CREATE, Review(course_id=course.id, student_id=student.id))

    review = Review(course_id=course.id, student_id=student.id)
    assert authorize(other_student, READ, review)
    assert not authorize(None, READ, review)
    assert authorize(student, DELETE, review)
    assert not authorize(other_student, WRITE, review)


def test_unknown_operation_is_denied(student):
    profile = db.session.get(Profile, student.id)
    assert not authorize(student, DELETE, profile)
    assert not authorize(student, READ, None)


def test_require_raises_generic_unauthorized(student, instructor):
    course, _ = build_course(instructor, published=False)
    with pytest.raises(Unauthorized) as exc:
        require(student, READ, course, "course")
    assert exc.value.message == "Unauthorized or course not found"


def test_actor_from_token():
    assert Actor.from_token(None) is None
    assert Actor.from_token({"role": "student"}) is None
    actor = Actor.from_token({"user_id": "abc", "role": "instructor"})
    assert actor == Actor(id="abc", role="instructor")
    assert actor.is_instructor
