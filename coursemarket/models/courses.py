from sqlalchemy.orm import relationship
from coursemarket.models import db
from coursemarket.utils.helpers import generate_id, utcnow, format_datetime

COURSE_LEVELS = ("Beginner", "Intermediate", "Advanced")


class Course(db.Model):
    __tablename__ = "courses"

    id = db.Column(db.String(36), primary_key=True, default=generate_id)
    instructor_id = db.Column(db.String(36), db.ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False, index=True)
    title = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text, nullable=False)
    thumbnail_url = db.Column(db.String(512), nullable=True)
    price = db.Column(db.Numeric(10, 2), nullable=False, default=0)
    level = db.Column(db.String(20), nullable=False, default="Beginner")
    category = db.Column(db.String(100), nullable=False, index=True)
    is_published = db.Column(db.Boolean, nullable=False, default=False, index=True)
    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    instructor = relationship("Profile", back_populates="courses")
    sections = relationship(
        "Section",
        back_populates="course",
        cascade="all, delete-orphan",
        order_by="Section.order_index",
    )
    enrollments = relationship("Enrollment", back_populates="course", cascade="all, delete-orphan")
    reviews = relationship("Review", back_populates="course", cascade="all, delete-orphan")

    __table_args__ = (
        db.CheckConstraint("price >= 0", name="check_course_price"),
        db.CheckConstraint("level IN ('Beginner', 'Intermediate', 'Advanced')", name="check_course_level"),
    )

    def __repr__(self):
        return f"<Course {self.title} (Instructor ID {self.instructor_id})>"

    def to_dict(self):
        return {
            "id": self.id,
            "instructor_id": self.instructor_id,
            "title": self.title,
            "description": self.description,
            "thumbnail_url": self.thumbnail_url,
            "price": float(self.price) if self.price is not None else 0.0,
            "level": self.level,
            "category": self.category,
            "is_published": bool(self.is_published),
            "created_at": format_datetime(self.created_at),
            "updated_at": format_datetime(self.updated_at),
        }
