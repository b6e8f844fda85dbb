from sqlalchemy.orm import relationship
from coursemarket.models import db
from coursemarket.utils.helpers import generate_id, utcnow


class Section(db.Model):
    __tablename__ = "course_sections"

    id = db.Column(db.String(36), primary_key=True, default=generate_id)
    course_id = db.Column(db.String(36), db.ForeignKey("courses.id", ondelete="CASCADE"), nullable=False, index=True)
    title = db.Column(db.String(255), nullable=False)
    order_index = db.Column(db.Integer, nullable=False)
    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)

    course = relationship("Course", back_populates="sections")
    lessons = relationship(
        "Lesson",
        back_populates="section",
        cascade="all, delete-orphan",
        order_by="Lesson.order_index",
    )

    __table_args__ = (
        db.UniqueConstraint("course_id", "order_index", name="unique_course_section_order"),
    )

    @staticmethod
    def get_next_order(course_id):
        last_section = Section.query.filter_by(course_id=course_id).order_by(Section.order_index.desc()).first()
        return (last_section.order_index + 1) if last_section else 0

    def __repr__(self):
        return f"<Section {self.title} (Course ID {self.course_id})>"

    def to_dict(self):
        return {
            "id": self.id,
            "course_id": self.course_id,
            "title": self.title,
            "order_index": self.order_index,
        }
