from sqlalchemy.orm import relationship
from coursemarket.models import db
from coursemarket.utils.helpers import generate_id, utcnow, format_datetime


class Enrollment(db.Model):
    __tablename__ = 'enrollments'

    id = db.Column(db.String(36), primary_key=True, default=generate_id)
    student_id = db.Column(db.String(36), db.ForeignKey('profiles.id', ondelete="CASCADE"), nullable=False, index=True)
    course_id = db.Column(db.String(36), db.ForeignKey('courses.id', ondelete="CASCADE"), nullable=False, index=True)
    enrolled_at = db.Column(db.DateTime, default=utcnow, nullable=False)
    completed_at = db.Column(db.DateTime, nullable=True)
    # Cached value only; always recomputed from lesson_progress before being returned
    progress_percentage = db.Column(db.Integer, default=0, nullable=False)

    student = relationship("Profile")
    course = relationship("Course", back_populates="enrollments")
    lesson_progress = relationship("LessonProgress", back_populates="enrollment", cascade="all, delete-orphan")
    certificate = relationship("Certificate", back_populates="enrollment", uselist=False, cascade="all, delete-orphan")

    __table_args__ = (
        db.UniqueConstraint("student_id", "course_id", name="unique_student_course"),
        db.CheckConstraint(
            "progress_percentage >= 0 AND progress_percentage <= 100",
            name="check_progress_percentage",
        ),
    )

    def __repr__(self):
        return f"<Enrollment Student {self.student_id} Course {self.course_id}>"

    def to_dict(self):
        return {
            "id": self.id,
            "student_id": self.student_id,
            "course_id": self.course_id,
            "enrolled_at": format_datetime(self.enrolled_at),
            "completed_at": format_datetime(self.completed_at),
            "progress_percentage": self.progress_percentage,
        }
