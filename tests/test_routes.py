import pytest


def _login(app, email, role, full_name="Route User"):
    client = app.test_client()
    response = client.post("/api/auth/register", json={
        "email": email, "password": "password123", "full_name": full_name, "role": role,
    })
    assert response.status_code == 201
    response = client.post("/api/auth/login", json={"email": email, "password": "password123"})
    assert response.status_code == 200
    return client, response.get_json()["user"]["id"]


@pytest.fixture
def course_author(app):
    return _login(app, "course_author@example.com", "instructor")


@pytest.fixture
def learner(app):
    return _login(app, "learner@example.com", "student")


@pytest.fixture
def published_course(course_author):
    client, _ = course_author
    course = client.post("/api/instructor/courses", json={
        "title": "Flask in Depth", "description": "Blueprints and more", "category": "Web", "price": 15,
    }).get_json()["course"]
    section = client.post(f"/api/instructor/courses/{course['id']}/sections", json={"title": "Start"}).get_json()["section"]
    lessons = [
        client.post(f"/api/instructor/sections/{section['id']}/lessons", json={
            "title": f"Lesson {n}", "video_url": f"https://videos.example.com/{n}.mp4",
            "duration_seconds": 120, "is_preview": n == 0,
        }).get_json()["lesson"]
        for n in range(2)
    ]
    response = client.post(f"/api/instructor/courses/{course['id']}/publish", json={"is_published": True})
    assert response.get_json()["course"]["is_published"] is True
    return course["id"], [lesson["id"] for lesson in lessons]


def test_login_rejects_bad_credentials(client, learner):
    response = client.post("/api/auth/login", json={"email": "learner@example.com", "password": "wrong-password"})
    assert response.status_code == 403
    assert response.get_json()["code"] == "unauthorized"


def test_register_duplicate_email_conflicts(client, learner):
    response = client.post("/api/auth/register", json={
        "email": "learner@example.com", "password": "password123", "full_name": "Again",
    })
    assert response.status_code == 409
    assert response.get_json()["code"] == "email_taken"


def test_check_auth_requires_cookie(client, learner):
    assert client.get("/api/auth/check-auth").status_code == 401
    learner_client, learner_id = learner
    response = learner_client.get("/api/auth/check-auth")
    assert response.status_code == 200
    assert response.get_json()["user"] == {"id": learner_id, "role": "student"}


def test_profile_update_only_by_owner(learner, course_author):
    learner_client, learner_id = learner
    author_client, _ = course_author

    response = learner_client.put(f"/api/auth/profiles/{learner_id}", json={"bio": "Hi", "role": "instructor"})
    assert response.status_code == 200
    assert response.get_json()["user"]["bio"] == "Hi"
    assert response.get_json()["user"]["role"] == "student"

    assert author_client.put(f"/api/auth/profiles/{learner_id}", json={"bio": "Nope"}).status_code == 403
    assert author_client.get(f"/api/auth/profiles/{learner_id}").status_code == 200


def test_public_catalog(client, published_course):
    course_id, lesson_ids = published_course
    listing = client.get("/api/courses?search=flask").get_json()["courses"]
    assert [c["id"] for c in listing] == [course_id]

    content = client.get(f"/api/courses/{course_id}/content").get_json()
    visible = [lesson["id"] for section in content["sections"] for lesson in section["lessons"]]
    assert visible == lesson_ids[:1]

    assert client.get(f"/api/courses/lessons/{lesson_ids[1]}").status_code == 403
    assert client.get(f"/api/courses/lessons/{lesson_ids[0]}").status_code == 200


def test_student_journey(learner, published_course):
    client, _ = learner
    course_id, lesson_ids = published_course

    response = client.post(f"/api/student/courses/{course_id}/enroll")
    assert response.status_code == 201
    enrollment_id = response.get_json()["enrollment"]["id"]

    duplicate = client.post(f"/api/student/courses/{course_id}/enroll")
    assert duplicate.status_code == 409
    assert duplicate.get_json()["code"] == "already_enrolled"

    early = client.post(f"/api/student/enrollments/{enrollment_id}/certificate")
    assert early.status_code == 422
    assert early.get_json()["code"] == "enrollment_not_completed"

    for lesson_id in lesson_ids:
        response = client.put(
            f"/api/student/enrollments/{enrollment_id}/lessons/{lesson_id}/progress",
            json={"watched_seconds": 120, "is_completed": True},
        )
        assert response.status_code == 200

    assert response.get_json()["enrollment"]["progress_percentage"] == 100

    first = client.post(f"/api/student/enrollments/{enrollment_id}/certificate").get_json()
    second = client.post(f"/api/student/enrollments/{enrollment_id}/certificate").get_json()
    assert first["id"] == second["id"]

    review = client.post(f"/api/courses/{course_id}/reviews", json={"rating": 5, "comment": "Great"})
    assert review.status_code == 200
    stats = client.get(f"/api/courses/{course_id}/reviews").get_json()["statistics"]
    assert stats == {"average_rating": 5.0, "review_count": 1}

    dashboard = client.get("/api/student/dashboard").get_json()
    assert dashboard["totals"]["certificates"] == 1


def test_invalid_rating_is_bad_request(learner, published_course):
    client, _ = learner
    course_id, _ = published_course
    client.post(f"/api/student/courses/{course_id}/enroll")

    response = client.post(f"/api/courses/{course_id}/reviews", json={"rating": 9})
    assert response.status_code == 400
    assert response.get_json()["code"] == "invalid_rating"


def test_students_cannot_manage_courses(learner, published_course):
    client, _ = learner
    course_id, _ = published_course
    assert client.delete(f"/api/instructor/courses/{course_id}").status_code == 403
    assert client.get("/api/instructor/dashboard").status_code == 403


def test_instructor_deletes_course(course_author, published_course):
    client, _ = course_author
    course_id, _ = published_course
    assert client.delete(f"/api/instructor/courses/{course_id}").status_code == 200
    assert client.get(f"/api/courses/{course_id}").status_code == 403


def test_hidden_and_missing_courses_look_the_same(course_author, learner, published_course):
    author_client, _ = course_author
    client, _ = learner
    course_id, _ = published_course
    author_client.post(f"/api/instructor/courses/{course_id}/publish", json={"is_published": False})

    hidden = client.get(f"/api/courses/{course_id}")
    missing = client.get("/api/courses/no-such-course")
    assert hidden.status_code == missing.status_code == 403
    assert hidden.get_json() == missing.get_json()


def test_progress_rejects_string_completion_flag(learner, published_course):
    client, _ = learner
    course_id, lesson_ids = published_course
    enrollment_id = client.post(f"/api/student/courses/{course_id}/enroll").get_json()["enrollment"]["id"]

    response = client.put(
        f"/api/student/enrollments/{enrollment_id}/lessons/{lesson_ids[0]}/progress",
        json={"watched_seconds": 30, "is_completed": "false"},
    )
    assert response.status_code == 400
    assert response.get_json()["code"] == "invalid_input"

    progress = client.get(f"/api/student/enrollments/{enrollment_id}/progress").get_json()
    assert progress["lessons"] == {}
