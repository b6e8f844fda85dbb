from sqlalchemy.orm import relationship
from coursemarket.models import db
from coursemarket.utils.helpers import generate_id, utcnow


class Lesson(db.Model):
    __tablename__ = "lessons"

    id = db.Column(db.String(36), primary_key=True, default=generate_id)
    section_id = db.Column(db.String(36), db.ForeignKey("course_sections.id", ondelete="CASCADE"), nullable=False, index=True)
    title = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text, nullable=True)
    video_url = db.Column(db.String(512), nullable=False)
    duration_seconds = db.Column(db.Integer, nullable=False, default=0)
    order_index = db.Column(db.Integer, nullable=False)
    is_preview = db.Column(db.Boolean, nullable=False, default=False)
    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)

    section = relationship("Section", back_populates="lessons")
    progress = relationship("LessonProgress", back_populates="lesson", cascade="all, delete-orphan")

    __table_args__ = (
        db.UniqueConstraint("section_id", "order_index", name="unique_section_lesson_order"),
        db.CheckConstraint("duration_seconds >= 0", name="check_lesson_duration"),
    )

    @staticmethod
    def get_next_order(section_id):
        last_lesson = Lesson.query.filter_by(section_id=section_id).order_by(Lesson.order_index.desc()).first()
        return (last_lesson.order_index + 1) if last_lesson else 0

    def __repr__(self):
        return f"<Lesson {self.title} (Section ID {self.section_id})>"

    def to_dict(self):
        return {
            "id": self.id,
            "section_id": self.section_id,
            "title": self.title,
            "description": self.description if self.description is not None else "",
            "duration_seconds": self.duration_seconds,
            "order_index": self.order_index,
            "is_preview": bool(self.is_preview),
            "video_url": self.video_url,
        }
