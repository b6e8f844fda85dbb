from werkzeug.security import generate_password_hash, check_password_hash
from coursemarket.models import db
from coursemarket.utils.helpers import generate_id, utcnow, format_datetime

PROFILE_ROLES = ("student", "instructor")


class Profile(db.Model):
    __tablename__ = "profiles"

    id = db.Column(db.String(36), primary_key=True, default=generate_id)
    email = db.Column(db.String(255), nullable=False, unique=True)
    full_name = db.Column(db.String(255), nullable=False)
    role = db.Column(db.String(20), nullable=False, default="student")
    bio = db.Column(db.Text, nullable=True)
    avatar_url = db.Column(db.String(512), nullable=True)
    password_hash = db.Column(db.String(255), nullable=False)
    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)

    courses = db.relationship("Course", back_populates="instructor", cascade="all, delete-orphan")

    __table_args__ = (
        db.CheckConstraint("role IN ('student', 'instructor')", name="check_profile_role"),
    )

    def set_password(self, password):
        """Hashes the password before storing."""
        self.password_hash = generate_password_hash(password, method="pbkdf2:sha256")

    def check_password(self, password):
        """Checks if a given password matches the stored hash."""
        return check_password_hash(self.password_hash, password)

    def __repr__(self):
        return f"<Profile {self.email} ({self.role})>"

    def to_dict(self):
        return {
            "id": self.id,
            "email": self.email,
            "full_name": self.full_name,
            "role": self.role,
            "bio": self.bio,
            "avatar_url": self.avatar_url,
            "created_at": format_datetime(self.created_at),
        }
