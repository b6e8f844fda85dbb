"""Single authority deciding who may read or mutate which records.

``authorize(actor, operation, target)`` walks an ordered policy table keyed by
entity type and operation. The first matching rule decides; anything without a
rule is denied. Rules that need a parent record (Lesson -> Section -> Course,
Certificate -> Enrollment, ...) resolve it through the session and deny when
any link is missing.

The check is read-only: lookups run with autoflush disabled and never write.
"""
from coursemarket.models import db, Profile, Course, Section, Lesson, Enrollment, LessonProgress, Certificate, Review
from coursemarket.classes.errors import Unauthorized

READ = "read"
CREATE = "create"
WRITE = "write"
DELETE = "delete"


class _Unresolved(Exception):
    """An ownership-chain link could not be loaded."""


def _get(model, ident):
    if ident is None:
        raise _Unresolved(model.__name__)
    record = db.session.get(model, ident)
    if record is None:
        raise _Unresolved(model.__name__)
    return record


def _course_of_section(section):
    return _get(Course, section.course_id)


def _course_of_lesson(lesson):
    return _course_of_section(_get(Section, lesson.section_id))


def _is_enrolled(actor, course_id):
    if actor is None:
        return False
    return db.session.query(Enrollment.id).filter_by(
        student_id=actor.id, course_id=course_id
    ).first() is not None


def _is_instructor_of(actor, course):
    return actor is not None and actor.id == course.instructor_id


def _owns_enrollment(actor, enrollment):
    return actor is not None and actor.id == enrollment.student_id


# ---------------------------------------------------------------------------
# Rules
# ---------------------------------------------------------------------------

def _authenticated(actor, target):
    return actor is not None


def _profile_self(actor, profile):
    return actor is not None and actor.id == profile.id


def _course_visible(actor, course):
    return bool(course.is_published) or _is_instructor_of(actor, course)


def _course_create(actor, course):
    return actor is not None and actor.is_instructor and actor.id == course.instructor_id


def _course_owner(actor, course):
    return _is_instructor_of(actor, course)


def _section_visible(actor, section):
    course = _course_of_section(section)
    return bool(course.is_published) or _is_instructor_of(actor, course) or _is_enrolled(actor, course.id)


def _section_owner(actor, section):
    return _is_instructor_of(actor, _course_of_section(section))


def _lesson_visible(actor, lesson):
    course = _course_of_lesson(lesson)
    if lesson.is_preview:
        return True
    return _is_instructor_of(actor, course) or _is_enrolled(actor, course.id)


def _lesson_owner(actor, lesson):
    return _is_instructor_of(actor, _course_of_lesson(lesson))


def _enrollment_visible(actor, enrollment):
    if _owns_enrollment(actor, enrollment):
        return True
    return _is_instructor_of(actor, _get(Course, enrollment.course_id))


def _enrollment_owner(actor, enrollment):
    return _owns_enrollment(actor, enrollment)


def _progress_owner(actor, progress):
    return _owns_enrollment(actor, _get(Enrollment, progress.enrollment_id))


def _certificate_owner(actor, certificate):
    return _owns_enrollment(actor, _get(Enrollment, certificate.enrollment_id))


def _certificate_create(actor, certificate):
    enrollment = _get(Enrollment, certificate.enrollment_id)
    return _owns_enrollment(actor, enrollment) and enrollment.completed_at is not None


def _review_create(actor, review):
    if actor is None or actor.id != review.student_id:
        return False
    _get(Course, review.course_id)
    return _is_enrolled(actor, review.course_id)


def _review_author(actor, review):
    return actor is not None and actor.id == review.student_id


POLICIES = [
    (Profile, (READ,), _authenticated),
    (Profile, (WRITE,), _profile_self),

    (Course, (READ,), _course_visible),
    (Course, (CREATE,), _course_create),
    (Course, (WRITE, DELETE), _course_owner),

    (Section, (READ,), _section_visible),
    (Section, (CREATE, WRITE, DELETE), _section_owner),

    (Lesson, (READ,), _lesson_visible),
    (Lesson, (CREATE, WRITE, DELETE), _lesson_owner),

    (Enrollment, (READ,), _enrollment_visible),
    (Enrollment, (CREATE, WRITE), _enrollment_owner),

    (LessonProgress, (READ, CREATE, WRITE), _progress_owner),

    (Certificate, (READ, WRITE), _certificate_owner),
    (Certificate, (CREATE,), _certificate_create),

    (Review, (READ,), _authenticated),
    (Review, (CREATE,), _review_create),
    (Review, (WRITE, DELETE), _review_author),
]


def authorize(actor, operation, target):
    """Return True when ``actor`` may perform ``operation`` on ``target``."""
    if target is None:
        return False

    for model, operations, rule in POLICIES:
        if isinstance(target, model) and operation in operations:
            with db.session.no_autoflush:
                try:
                    return bool(rule(actor, target))
                except _Unresolved:
                    return False
    return False


def require(actor, operation, target, entity=None):
    """Raise ``Unauthorized`` unless ``authorize`` allows the operation."""
    if not authorize(actor, operation, target):
        raise Unauthorized(entity or type(target).__name__.lower())
    return target
