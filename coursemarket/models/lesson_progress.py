from sqlalchemy.orm import relationship
from coursemarket.models import db
from coursemarket.utils.helpers import generate_id, utcnow, format_datetime


class LessonProgress(db.Model):
    __tablename__ = "lesson_progress"

    id = db.Column(db.String(36), primary_key=True, default=generate_id)
    enrollment_id = db.Column(db.String(36), db.ForeignKey("enrollments.id", ondelete="CASCADE"), nullable=False, index=True)
    lesson_id = db.Column(db.String(36), db.ForeignKey("lessons.id", ondelete="CASCADE"), nullable=False)
    watched_seconds = db.Column(db.Integer, nullable=False, default=0)
    is_completed = db.Column(db.Boolean, nullable=False, default=False)
    last_watched_at = db.Column(db.DateTime, default=utcnow, nullable=False)

    enrollment = relationship("Enrollment", back_populates="lesson_progress")
    lesson = relationship("Lesson", back_populates="progress")

    __table_args__ = (
        db.UniqueConstraint("enrollment_id", "lesson_id", name="unique_enrollment_lesson"),
        db.CheckConstraint("watched_seconds >= 0", name="check_watched_seconds"),
    )

    def to_dict(self):
        return {
            "id": self.id,
            "enrollment_id": self.enrollment_id,
            "lesson_id": self.lesson_id,
            "watched_seconds": self.watched_seconds,
            "is_completed": bool(self.is_completed),
            "last_watched_at": format_datetime(self.last_watched_at),
        }
