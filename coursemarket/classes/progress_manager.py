from flask import current_app
from sqlalchemy import func, or_, select, update
from sqlalchemy.exc import IntegrityError

from coursemarket.models import db, Enrollment, Lesson, LessonProgress, Section, Certificate
from coursemarket.classes.authorization import require, READ, WRITE
from coursemarket.classes.errors import LessonNotInCourse, Unauthorized
from coursemarket.classes.storage import transactional
from coursemarket.classes.validators import validate_bool, validate_non_negative_int
from coursemarket.signals import course_completed
from coursemarket.utils.helpers import percentage, utcnow


def _course_lessons(course_id):
    return select(Lesson.id).join(Section, Lesson.section_id == Section.id).where(Section.course_id == course_id)


class ProgressManager:
    @staticmethod
    def _upsert(enrollment_id, lesson_id, watched_seconds, completed):
        """Write one progress row without ever clearing ``is_completed``.

        The flag is merged inside the UPDATE statement itself, so two racing
        heartbeats cannot resurrect a stale ``False``.
        """
        values = {
            "watched_seconds": watched_seconds,
            "is_completed": or_(LessonProgress.is_completed, bool(completed)),
            "last_watched_at": utcnow(),
        }
        statement = (
            update(LessonProgress)
            .where(LessonProgress.enrollment_id == enrollment_id, LessonProgress.lesson_id == lesson_id)
            .values(**values)
            .execution_options(synchronize_session=False)
        )

        if db.session.execute(statement).rowcount:
            return

        db.session.add(LessonProgress(
            enrollment_id=enrollment_id,
            lesson_id=lesson_id,
            watched_seconds=watched_seconds,
            is_completed=bool(completed),
            last_watched_at=values["last_watched_at"],
        ))
        try:
            db.session.flush()
        except IntegrityError:
            # Lost the insert race: the row exists now, fold into it instead
            db.session.rollback()
            db.session.execute(statement)

    @staticmethod
    @transactional
    def record_progress(actor, enrollment_id, lesson_id, watched_seconds, completed=False):
        """Upsert the watch record for one lesson and refresh the enrollment."""
        enrollment = db.session.get(Enrollment, enrollment_id) if enrollment_id else None
        if enrollment is None:
            raise Unauthorized("enrollment")
        require(actor, WRITE, LessonProgress(enrollment_id=enrollment.id, lesson_id=lesson_id), "enrollment")

        lesson = db.session.get(Lesson, lesson_id) if lesson_id else None
        if lesson is None or lesson.section is None or lesson.section.course_id != enrollment.course_id:
            raise LessonNotInCourse()

        watched_seconds = validate_non_negative_int("Watched seconds", watched_seconds)
        completed = validate_bool("Completed", completed)

        ProgressManager._upsert(enrollment.id, lesson.id, watched_seconds, completed)
        db.session.commit()

        enrollment = db.session.get(Enrollment, enrollment.id, populate_existing=True)
        ProgressManager.recompute(enrollment)

        return LessonProgress.query.filter_by(enrollment_id=enrollment.id, lesson_id=lesson.id).populate_existing().one()

    @staticmethod
    def recompute(enrollment):
        """Derive the enrollment percentage from lesson progress and apply completion.

        The lesson total is counted at call time so course edits show up
        immediately. Completion is one-way unless ``COMPLETION_REVOCABLE`` is
        set, and even then a certified enrollment stays completed.
        """
        lesson_ids = _course_lessons(enrollment.course_id)
        total = db.session.scalar(select(func.count()).select_from(lesson_ids.subquery()))
        completed = LessonProgress.query.filter(
            LessonProgress.enrollment_id == enrollment.id,
            LessonProgress.is_completed.is_(True),
            LessonProgress.lesson_id.in_(lesson_ids),
        ).count()

        value = percentage(completed, total)
        newly_completed = False

        if enrollment.progress_percentage != value:
            enrollment.progress_percentage = value

        if value == 100 and enrollment.completed_at is None:
            enrollment.completed_at = utcnow()
            newly_completed = True
        elif value < 100 and enrollment.completed_at is not None and current_app.config.get("COMPLETION_REVOCABLE"):
            certified = Certificate.query.filter_by(enrollment_id=enrollment.id).first() is not None
            if not certified:
                enrollment.completed_at = None
                current_app.logger.info("Completion revoked for enrollment %s", enrollment.id)

        if db.session.dirty:
            db.session.commit()

        if newly_completed:
            current_app.logger.info("Enrollment %s completed course %s", enrollment.id, enrollment.course_id)
            course_completed.send(enrollment)

        return enrollment

    @staticmethod
    def refresh(enrollment):
        return ProgressManager.recompute(enrollment)

    @staticmethod
    @transactional
    def get_progress(actor, enrollment_id):
        enrollment = db.session.get(Enrollment, enrollment_id) if enrollment_id else None
        if enrollment is None:
            raise Unauthorized("enrollment")
        require(actor, READ, LessonProgress(enrollment_id=enrollment.id), "enrollment")

        enrollment = ProgressManager.recompute(enrollment)
        rows = LessonProgress.query.filter_by(enrollment_id=enrollment.id).all()

        return {
            "enrollment": enrollment.to_dict(),
            "lessons": {row.lesson_id: row.to_dict() for row in rows},
        }
