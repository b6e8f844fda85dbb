from flask import current_app
from sqlalchemy import delete, or_, select
from sqlalchemy.exc import IntegrityError

from coursemarket.models import db, Course, Section, Lesson, Enrollment, LessonProgress, Certificate, Review, COURSE_LEVELS
from coursemarket.classes.authorization import authorize, require, READ, CREATE, WRITE, DELETE
from coursemarket.classes.errors import InvalidInput, Unauthenticated, Unauthorized
from coursemarket.classes.storage import transactional
from coursemarket.classes.validators import clean_text, require_text, validate_bool, validate_non_negative_int, validate_price
from coursemarket.classes.enrollment_manager import EnrollmentManager
from coursemarket.classes.review_manager import ReviewManager
from coursemarket.utils.helpers import utcnow

COURSE_FIELDS = ("title", "description", "thumbnail_url", "price", "level", "category")
LESSON_FIELDS = ("title", "description", "video_url", "duration_seconds", "is_preview")


def _validate_level(level):
    if level not in COURSE_LEVELS:
        raise InvalidInput(f"Level must be one of: {', '.join(COURSE_LEVELS)}.")
    return level


def _load(model, ident, entity):
    # A missing record answers exactly like a denied one
    record = db.session.get(model, ident) if ident else None
    if record is None:
        raise Unauthorized(entity)
    return record


def _apply_course_fields(course, data):
    if "title" in data:
        course.title = require_text("Title", data["title"])
    if "description" in data:
        course.description = clean_text(require_text("Description", data["description"], 10000))
    if "thumbnail_url" in data:
        course.thumbnail_url = data["thumbnail_url"] or None
    if "price" in data:
        course.price = validate_price(data["price"])
    if "level" in data:
        course.level = _validate_level(data["level"])
    if "category" in data:
        course.category = require_text("Category", data["category"], 100)


def _apply_lesson_fields(lesson, data):
    if "title" in data:
        lesson.title = require_text("Title", data["title"])
    if "description" in data:
        lesson.description = clean_text(data["description"])
    if "video_url" in data:
        lesson.video_url = require_text("Video URL", data["video_url"], 512)
    if "duration_seconds" in data:
        lesson.duration_seconds = validate_non_negative_int("Duration", data["duration_seconds"])
    if "is_preview" in data:
        lesson.is_preview = validate_bool("Preview", data["is_preview"])


def _reorder(records, ordered_ids, label):
    """Rewrite order_index to 0..n-1 following ``ordered_ids``.

    Indexes pass through negative placeholders first so the unique
    (parent, order_index) constraint holds after every flush.
    """
    by_id = {r.id: r for r in records}
    if len(ordered_ids) != len(set(ordered_ids)) or set(ordered_ids) != set(by_id):
        raise InvalidInput(f"{label} ids must list every {label.lower()} exactly once.")

    for position, ident in enumerate(ordered_ids):
        by_id[ident].order_index = -(position + 1)
    db.session.flush()
    for position, ident in enumerate(ordered_ids):
        by_id[ident].order_index = position
    db.session.flush()
    return [by_id[ident] for ident in ordered_ids]


class CatalogManager:
    #__________________________________________________________________________ * Courses *

    @staticmethod
    @transactional
    def create_course(actor, data):
        if actor is None:
            raise Unauthenticated()

        course = Course(
            instructor_id=actor.id,
            title=require_text("Title", data.get("title")),
            description=clean_text(require_text("Description", data.get("description"), 10000)),
            thumbnail_url=data.get("thumbnail_url") or None,
            price=validate_price(data.get("price", 0)),
            level=_validate_level(data.get("level", "Beginner")),
            category=require_text("Category", data.get("category"), 100),
            is_published=False,
        )
        require(actor, CREATE, course, "course")

        db.session.add(course)
        db.session.commit()
        current_app.logger.info("Course %s created by instructor %s", course.id, actor.id)
        return course

    @staticmethod
    @transactional
    def update_course(actor, course_id, data):
        course = require(actor, WRITE, _load(Course, course_id, "course"), "course")
        _apply_course_fields(course, {k: v for k, v in data.items() if k in COURSE_FIELDS})
        course.updated_at = utcnow()
        db.session.commit()
        return course

    @staticmethod
    @transactional
    def publish_course(actor, course_id, published=True):
        course = require(actor, WRITE, _load(Course, course_id, "course"), "course")
        course.is_published = validate_bool("Published", published)
        course.updated_at = utcnow()
        db.session.commit()
        current_app.logger.info("Course %s %s", course.id, "published" if published else "unpublished")
        return course

    @staticmethod
    @transactional
    def delete_course(actor, course_id):
        """Delete a course and every record that hangs off it, in one transaction."""
        course = require(actor, DELETE, _load(Course, course_id, "course"), "course")

        section_ids = select(Section.id).where(Section.course_id == course.id)
        lesson_ids = select(Lesson.id).where(Lesson.section_id.in_(section_ids))
        enrollment_ids = select(Enrollment.id).where(Enrollment.course_id == course.id)

        statements = [
            delete(Review).where(Review.course_id == course.id),
            delete(Certificate).where(Certificate.enrollment_id.in_(enrollment_ids)),
            delete(LessonProgress).where(or_(
                LessonProgress.enrollment_id.in_(enrollment_ids),
                LessonProgress.lesson_id.in_(lesson_ids),
            )),
            delete(Enrollment).where(Enrollment.course_id == course.id),
            delete(Lesson).where(Lesson.section_id.in_(section_ids)),
            delete(Section).where(Section.course_id == course.id),
            delete(Course).where(Course.id == course.id),
        ]
        for statement in statements:
            db.session.execute(statement.execution_options(synchronize_session="fetch"))

        db.session.commit()
        current_app.logger.info("Course %s deleted by instructor %s", course_id, actor.id)

    @staticmethod
    @transactional
    def get_course(actor, course_id):
        return require(actor, READ, _load(Course, course_id, "course"), "course")

    @staticmethod
    @transactional
    def list_instructor_courses(actor):
        if actor is None:
            raise Unauthenticated()
        return Course.query.filter_by(instructor_id=actor.id).order_by(Course.created_at.desc()).all()

    @staticmethod
    @transactional
    def list_published_courses(search=None, category=None, level=None):
        """Published courses with their computed rating and enrollment figures."""
        query = Course.query.filter(Course.is_published.is_(True))

        if search:
            needle = search.strip().lower()
            query = query.filter(or_(
                db.func.lower(Course.title).contains(needle, autoescape=True),
                db.func.lower(Course.description).contains(needle, autoescape=True),
            ))
        if category:
            query = query.filter(Course.category == category)
        if level:
            query = query.filter(Course.level == _validate_level(level))

        courses = query.order_by(Course.created_at.desc()).all()
        return CatalogManager.summarize(courses)

    @staticmethod
    def summarize(courses):
        """Attach computed average rating, review count and enrollment count."""
        ids = [c.id for c in courses]
        ratings = ReviewManager.statistics_for(ids)
        enrollments = EnrollmentManager.counts_for(ids)
        return [
            {
                **course.to_dict(),
                **ratings.get(course.id, {"average_rating": None, "review_count": 0}),
                "enrollment_count": enrollments.get(course.id, 0),
            }
            for course in courses
        ]

    @staticmethod
    @transactional
    def list_categories():
        rows = db.session.query(Course.category).filter(Course.is_published.is_(True)).distinct().all()
        return sorted(row.category for row in rows)

    @staticmethod
    @transactional
    def get_course_content(actor, course_id):
        """Sections and lessons in display order, filtered by what ``actor`` may read.

        Non-preview lessons are left out for actors who are neither the
        instructor nor enrolled. A lesson is listed exactly when ``get_lesson``
        would return it, so a draft course still shows its preview lessons
        and the sections holding them.
        """
        course = _load(Course, course_id, "course")

        content = []
        for section in course.sections:
            lessons = [lesson.to_dict() for lesson in section.lessons if authorize(actor, READ, lesson)]
            if lessons or authorize(actor, READ, section):
                content.append({**section.to_dict(), "lessons": lessons})

        if not content and not authorize(actor, READ, course):
            raise Unauthorized("course")

        return {"course": course.to_dict(), "sections": content}

    @staticmethod
    @transactional
    def get_lesson(actor, lesson_id):
        return require(actor, READ, _load(Lesson, lesson_id, "lesson"), "lesson")

    #__________________________________________________________________________ * Sections *

    @staticmethod
    @transactional
    def create_section(actor, course_id, title, order_index=None):
        course = _load(Course, course_id, "course")
        section = Section(course_id=course.id, title=require_text("Title", title))
        require(actor, CREATE, section, "course")

        if order_index is None:
            order_index = Section.get_next_order(course.id)
        else:
            validate_non_negative_int("Order index", order_index)
            if Section.query.filter_by(course_id=course.id, order_index=order_index).first():
                raise InvalidInput("A section with this order index already exists.")
        section.order_index = order_index

        db.session.add(section)
        try:
            db.session.commit()
        except IntegrityError:
            db.session.rollback()
            raise InvalidInput("A section with this order index already exists.")
        return section

    @staticmethod
    @transactional
    def update_section(actor, section_id, data):
        section = require(actor, WRITE, _load(Section, section_id, "section"), "section")
        if "title" in data:
            section.title = require_text("Title", data["title"])
        db.session.commit()
        return section

    @staticmethod
    @transactional
    def delete_section(actor, section_id):
        section = require(actor, DELETE, _load(Section, section_id, "section"), "section")

        lesson_ids = select(Lesson.id).where(Lesson.section_id == section.id)
        for statement in (
            delete(LessonProgress).where(LessonProgress.lesson_id.in_(lesson_ids)),
            delete(Lesson).where(Lesson.section_id == section.id),
            delete(Section).where(Section.id == section.id),
        ):
            db.session.execute(statement.execution_options(synchronize_session="fetch"))
        db.session.commit()

    @staticmethod
    @transactional
    def reorder_sections(actor, course_id, section_ids):
        course = require(actor, WRITE, _load(Course, course_id, "course"), "course")
        sections = Section.query.filter_by(course_id=course.id).all()
        ordered = _reorder(sections, list(section_ids), "Section")
        db.session.commit()
        return ordered

    #__________________________________________________________________________ * Lessons *

    @staticmethod
    @transactional
    def create_lesson(actor, section_id, data):
        section = _load(Section, section_id, "section")
        lesson = Lesson(
            section_id=section.id,
            title=require_text("Title", data.get("title")),
            description=clean_text(data.get("description")),
            video_url=require_text("Video URL", data.get("video_url"), 512),
            duration_seconds=validate_non_negative_int("Duration", data.get("duration_seconds", 0)),
            is_preview=validate_bool("Preview", data.get("is_preview", False)),
        )
        require(actor, CREATE, lesson, "section")

        order_index = data.get("order_index")
        if order_index is None:
            order_index = Lesson.get_next_order(section.id)
        else:
            validate_non_negative_int("Order index", order_index)
            if Lesson.query.filter_by(section_id=section.id, order_index=order_index).first():
                raise InvalidInput("A lesson with this order index already exists.")
        lesson.order_index = order_index

        db.session.add(lesson)
        try:
            db.session.commit()
        except IntegrityError:
            db.session.rollback()
            raise InvalidInput("A lesson with this order index already exists.")
        return lesson

    @staticmethod
    @transactional
    def update_lesson(actor, lesson_id, data):
        lesson = require(actor, WRITE, _load(Lesson, lesson_id, "lesson"), "lesson")
        _apply_lesson_fields(lesson, {k: v for k, v in data.items() if k in LESSON_FIELDS})
        db.session.commit()
        return lesson

    @staticmethod
    @transactional
    def delete_lesson(actor, lesson_id):
        lesson = require(actor, DELETE, _load(Lesson, lesson_id, "lesson"), "lesson")
        for statement in (
            delete(LessonProgress).where(LessonProgress.lesson_id == lesson.id),
            delete(Lesson).where(Lesson.id == lesson.id),
        ):
            db.session.execute(statement.execution_options(synchronize_session="fetch"))
        db.session.commit()

    @staticmethod
    @transactional
    def reorder_lessons(actor, section_id, lesson_ids):
        section = require(actor, WRITE, _load(Section, section_id, "section"), "section")
        lessons = Lesson.query.filter_by(section_id=section.id).all()
        ordered = _reorder(lessons, list(lesson_ids), "Lesson")
        db.session.commit()
        return ordered
