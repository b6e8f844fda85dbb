import pytest

from coursemarket import create_app
from coursemarket.models import db
from coursemarket.classes.actor import Actor
from coursemarket.classes.catalog_manager import CatalogManager
from coursemarket.classes.enrollment_manager import EnrollmentManager
from coursemarket.classes.profile_manager import ProfileManager


@pytest.fixture
def app():
    app = create_app("testing")
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


def make_actor(email, role, full_name="Test User"):
    profile = ProfileManager.register(email=email, password="password123", full_name=full_name, role=role)
    return Actor.from_profile(profile)


@pytest.fixture
def instructor(app):
    return make_actor("instructor@example.com", "instructor", "Ada Instructor")


@pytest.fixture
def other_instructor(app):
    return make_actor("other.instructor@example.com", "instructor", "Grace Instructor")


@pytest.fixture
def student(app):
    return make_actor("student@example.com", "student", "Sam Student")


@pytest.fixture
def other_student(app):
    return make_actor("other.student@example.com", "student", "Kim Student")


def build_course(actor, lessons_per_section=(2, 2), published=True, title="Python Basics", **fields):
    """Create a course with sections holding the given number of lessons.

    The very first lesson is flagged as a preview.
    """
    data = {
        "title": title,
        "description": "Learn Python from scratch",
        "category": "Programming",
        "price": 20,
        "level": "Beginner",
    }
    data.update(fields)
    course = CatalogManager.create_course(actor, data)

    lessons = []
    for s, count in enumerate(lessons_per_section):
        section = CatalogManager.create_section(actor, course.id, f"Section {s + 1}")
        for n in range(count):
            lessons.append(CatalogManager.create_lesson(actor, section.id, {
                "title": f"Lesson {s + 1}.{n + 1}",
                "video_url": f"https://videos.example.com/{s}-{n}.mp4",
                "duration_seconds": 300,
                "is_preview": not lessons,
            }))

    if published:
        CatalogManager.publish_course(actor, course.id)
    return course, lessons


@pytest.fixture
def course_with_lessons(instructor):
    return build_course(instructor)


@pytest.fixture
def enrollment(student, course_with_lessons):
    course, _ = course_with_lessons
    return EnrollmentManager.enroll(student, course.id)
