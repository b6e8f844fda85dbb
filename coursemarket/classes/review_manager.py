from flask import current_app
from sqlalchemy.exc import IntegrityError

from coursemarket.models import db, Course, Enrollment, Review
from coursemarket.classes.authorization import authorize, require, READ, CREATE, WRITE, DELETE
from coursemarket.classes.errors import DuplicateReview, NotEnrolled, Unauthenticated, Unauthorized
from coursemarket.classes.storage import transactional
from coursemarket.classes.validators import clean_text, validate_length, validate_rating
from coursemarket.utils.helpers import utcnow


class ReviewManager:
    @staticmethod
    def _find(course_id, student_id):
        return Review.query.filter_by(course_id=course_id, student_id=student_id).first()

    @staticmethod
    def _create(review):
        db.session.add(review)
        try:
            db.session.commit()
        except IntegrityError as e:
            db.session.rollback()
            raise DuplicateReview() from e

    @staticmethod
    @transactional
    def submit_review(actor, course_id, rating, comment=None):
        """Create or replace ``actor``'s review of a course they are enrolled in."""
        if actor is None:
            raise Unauthenticated()

        course = db.session.get(Course, course_id) if course_id else None
        enrolled = course is not None and Enrollment.query.filter_by(
            student_id=actor.id, course_id=course.id
        ).first() is not None
        # Drafts stay invisible to anyone outside them
        if course is None or not (enrolled or authorize(actor, READ, course)):
            raise Unauthorized("course")
        if not enrolled:
            raise NotEnrolled()

        rating = validate_rating(rating)
        comment = clean_text(comment) or None
        if comment:
            validate_length("Comment", comment, 5000)

        review = ReviewManager._find(course_id, actor.id)
        if review is None:
            review = Review(course_id=course_id, student_id=actor.id, rating=rating, comment=comment)
            require(actor, CREATE, review, "course")
            try:
                ReviewManager._create(review)
                current_app.logger.info("Review %s created for course %s", review.id, course_id)
                return review
            except DuplicateReview:
                # A concurrent first submission won; replace it instead
                review = ReviewManager._find(course_id, actor.id)
                if review is None:
                    raise

        require(actor, WRITE, review, "review")
        review.rating = rating
        review.comment = comment
        review.updated_at = utcnow()
        db.session.commit()
        return review

    @staticmethod
    @transactional
    def delete_review(actor, review_id):
        review = db.session.get(Review, review_id) if review_id else None
        if review is None:
            raise Unauthorized("review")
        require(actor, DELETE, review, "review")
        db.session.delete(review)
        db.session.commit()

    @staticmethod
    @transactional
    def list_reviews(actor, course_id):
        require(actor, READ, Review(course_id=course_id), "review")
        return Review.query.filter_by(course_id=course_id).order_by(Review.created_at.desc()).all()

    @staticmethod
    @transactional
    def course_statistics(course_id):
        return ReviewManager.statistics_for([course_id]).get(
            course_id, {"average_rating": None, "review_count": 0}
        )

    @staticmethod
    def statistics_for(course_ids):
        """Average rating and review count per course, computed from the rows on every call."""
        if not course_ids:
            return {}
        rows = (
            db.session.query(Review.course_id, db.func.avg(Review.rating), db.func.count(Review.id))
            .filter(Review.course_id.in_(course_ids))
            .group_by(Review.course_id)
            .all()
        )
        return {
            course_id: {"average_rating": round(float(average), 2), "review_count": count}
            for course_id, average, count in rows
        }
