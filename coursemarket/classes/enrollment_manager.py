from flask import current_app
from sqlalchemy.exc import IntegrityError

from coursemarket.models import db, Course, Enrollment
from coursemarket.classes.authorization import require, READ, CREATE
from coursemarket.classes.errors import AlreadyEnrolled, CourseUnavailable, NotFound, Unauthenticated, Unauthorized
from coursemarket.classes.progress_manager import ProgressManager
from coursemarket.classes.storage import transactional


class EnrollmentManager:
    @staticmethod
    @transactional
    def enroll(actor, course_id):
        """Enroll ``actor`` in a course.

        Raises ``CourseUnavailable`` for missing or unpublished courses (unless
        the actor teaches it) and ``AlreadyEnrolled`` when the pair already
        exists, including when a concurrent request wins the insert.
        """
        if actor is None:
            raise Unauthenticated()

        course = db.session.get(Course, course_id) if course_id else None
        if course is None or (not course.is_published and course.instructor_id != actor.id):
            raise CourseUnavailable()

        enrollment = Enrollment(student_id=actor.id, course_id=course.id, progress_percentage=0, completed_at=None)
        require(actor, CREATE, enrollment, "course")

        if Enrollment.query.filter_by(student_id=actor.id, course_id=course.id).first():
            raise AlreadyEnrolled()

        db.session.add(enrollment)
        try:
            db.session.commit()
        except IntegrityError:
            db.session.rollback()
            raise AlreadyEnrolled()

        current_app.logger.info("Student %s enrolled in course %s", actor.id, course.id)
        return enrollment

    @staticmethod
    @transactional
    def get_enrollment(actor, student_id, course_id):
        """The enrollment of ``student_id`` in a course, for that student or the course's instructor.

        Permission is settled before the lookup so a missing enrollment is
        only reported to someone entitled to see it.
        """
        require(actor, READ, Enrollment(student_id=student_id, course_id=course_id), "enrollment")
        enrollment = Enrollment.query.filter_by(student_id=student_id, course_id=course_id).first()
        if enrollment is None:
            raise NotFound("enrollment")
        return ProgressManager.refresh(enrollment)

    @staticmethod
    @transactional
    def get_enrollment_by_id(actor, enrollment_id):
        enrollment = db.session.get(Enrollment, enrollment_id) if enrollment_id else None
        if enrollment is None:
            raise Unauthorized("enrollment")
        require(actor, READ, enrollment, "enrollment")
        return ProgressManager.refresh(enrollment)

    @staticmethod
    @transactional
    def list_course_enrollments(actor, course_id):
        """Instructor view of everyone enrolled in one of their courses."""
        # Without a student_id only the instructor branch of the read rule can pass
        require(actor, READ, Enrollment(course_id=course_id), "course")

        enrollments = Enrollment.query.filter_by(course_id=course_id).order_by(Enrollment.enrolled_at.desc()).all()
        return [ProgressManager.refresh(e) for e in enrollments]

    @staticmethod
    def counts_for(course_ids):
        """Map of course id to enrollment count."""
        if not course_ids:
            return {}
        rows = (
            db.session.query(Enrollment.course_id, db.func.count(Enrollment.id))
            .filter(Enrollment.course_id.in_(course_ids))
            .group_by(Enrollment.course_id)
            .all()
        )
        return {course_id: count for course_id, count in rows}
