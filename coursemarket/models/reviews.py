from sqlalchemy.orm import relationship
from coursemarket.models import db
from coursemarket.utils.helpers import generate_id, utcnow, format_datetime


class Review(db.Model):
    __tablename__ = "reviews"

    id = db.Column(db.String(36), primary_key=True, default=generate_id)
    course_id = db.Column(db.String(36), db.ForeignKey("courses.id", ondelete="CASCADE"), nullable=False, index=True)
    student_id = db.Column(db.String(36), db.ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False)
    rating = db.Column(db.Integer, nullable=False)
    comment = db.Column(db.Text, nullable=True)
    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    course = relationship("Course", back_populates="reviews")
    student = relationship("Profile")

    __table_args__ = (
        db.UniqueConstraint("course_id", "student_id", name="unique_course_student_review"),
        db.CheckConstraint("rating >= 1 AND rating <= 5", name="check_review_rating"),
    )

    def __repr__(self):
        return f"<Review {self.rating} Course {self.course_id}>"

    def to_dict(self):
        return {
            "id": self.id,
            "course_id": self.course_id,
            "student_id": self.student_id,
            "student_name": self.student.full_name if self.student else None,
            "rating": self.rating,
            "comment": self.comment,
            "created_at": format_datetime(self.created_at),
            "updated_at": format_datetime(self.updated_at),
        }
