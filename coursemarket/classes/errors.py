"""Typed failures raised by the managers.

Every error carries a machine-readable ``code`` and the HTTP status the
caller layer should answer with. Nothing here renders user-facing text
beyond the short message.
"""


class CourseMarketError(Exception):
    """Base error for the course marketplace core."""

    status_code = 400
    code = "error"
    retryable = False

    def __init__(self, message=None, code=None):
        self.message = message or self.__class__.__doc__.strip()
        if code:
            self.code = code
        super().__init__(self.message)

    def to_dict(self):
        return {"error": self.message, "code": self.code}


class Unauthenticated(CourseMarketError):
    """Authentication required."""

    status_code = 401
    code = "unauthenticated"


class Unauthorized(CourseMarketError):
    """Unauthorized or not found."""

    status_code = 403
    code = "unauthorized"

    def __init__(self, entity=None):
        message = f"Unauthorized or {entity} not found" if entity else None
        super().__init__(message)


class NotFound(CourseMarketError):
    """Not found."""

    status_code = 404
    code = "not_found"

    def __init__(self, entity=None):
        super().__init__(f"{entity.capitalize()} not found" if entity else None)


class Conflict(CourseMarketError):
    """Conflicting record already exists."""

    status_code = 409
    code = "conflict"


class AlreadyEnrolled(Conflict):
    """Student is already enrolled in this course."""

    code = "already_enrolled"


class DuplicateReview(Conflict):
    """Student has already reviewed this course."""

    code = "duplicate_review"


class DuplicateCertificate(Conflict):
    """Certificate already issued for this enrollment."""

    code = "duplicate_certificate"


class EmailTaken(Conflict):
    """A profile with this email already exists."""

    code = "email_taken"


class InvalidInput(CourseMarketError):
    """Invalid input."""

    status_code = 400
    code = "invalid_input"


class InvalidRating(InvalidInput):
    """Rating must be an integer between 1 and 5."""

    code = "invalid_rating"


class LessonNotInCourse(InvalidInput):
    """Lesson does not belong to the enrolled course."""

    code = "lesson_not_in_course"


class PreconditionFailed(CourseMarketError):
    """Precondition failed."""

    status_code = 422
    code = "precondition_failed"


class CourseUnavailable(PreconditionFailed):
    """Course is not open for enrollment."""

    code = "course_unavailable"


class EnrollmentNotCompleted(PreconditionFailed):
    """Enrollment has not been completed yet."""

    code = "enrollment_not_completed"


class NotEnrolled(PreconditionFailed):
    """Student is not enrolled in this course."""

    code = "not_enrolled"


class StorageUnavailable(CourseMarketError):
    """Storage is temporarily unavailable, retry the request."""

    status_code = 503
    code = "storage_unavailable"
    retryable = True
