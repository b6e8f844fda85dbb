import pytest

from coursemarket.classes.dashboard_manager import DashboardManager
from coursemarket.classes.enrollment_manager import EnrollmentManager
from coursemarket.classes.errors import Unauthenticated, Unauthorized
from coursemarket.classes.progress_manager import ProgressManager
from coursemarket.classes.review_manager import ReviewManager
from conftest import build_course


def test_student_dashboard_splits_progress_and_completion(instructor, student, course_with_lessons, enrollment):
    course, lessons = course_with_lessons
    other_course, _ = build_course(instructor, title="Second course")
    EnrollmentManager.enroll(student, other_course.id)

    for lesson in lessons:
        ProgressManager.record_progress(student, enrollment.id, lesson.id, 300, True)

    dashboard = DashboardManager.student_dashboard(student)

    assert [e["course"]["title"] for e in dashboard["in_progress"]] == ["Second course"]
    [done] = dashboard["completed"]
    assert done["course"]["id"] == course.id
    assert done["progress_percentage"] == 100
    assert done["certificate"] is not None
    assert dashboard["totals"] == {"enrolled": 2, "completed": 1, "certificates": 1}


def test_instructor_dashboard_figures(instructor, student, other_student, course_with_lessons, enrollment):
    course, lessons = course_with_lessons
    EnrollmentManager.enroll(other_student, course.id)
    for lesson in lessons:
        ProgressManager.record_progress(student, enrollment.id, lesson.id, 300, True)
    ReviewManager.submit_review(student, course.id, 5)
    ReviewManager.submit_review(other_student, course.id, 4)
    build_course(instructor, title="Free draft", price=0, published=False)

    dashboard = DashboardManager.instructor_dashboard(instructor)

    stats = {c["title"]: c for c in dashboard["courses"]}
    assert stats["Python Basics"]["enrollments"] == 2
    assert stats["Python Basics"]["revenue"] == 40.0
    assert stats["Python Basics"]["average_rating"] == 4.5
    assert stats["Python Basics"]["completion_rate"] == 50.0
    assert stats["Free draft"]["enrollments"] == 0
    assert stats["Free draft"]["completion_rate"] == 0.0
    assert dashboard["totals"] == {"courses": 2, "enrollments": 2, "revenue": 40.0, "average_rating": 4.5}


def test_dashboards_require_the_right_actor(student):
    with pytest.raises(Unauthenticated):
        DashboardManager.student_dashboard(None)
    with pytest.raises(Unauthorized):
        DashboardManager.instructor_dashboard(student)
