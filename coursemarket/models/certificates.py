from sqlalchemy.orm import relationship
from coursemarket.models import db
from coursemarket.utils.helpers import generate_id, utcnow, format_datetime


class Certificate(db.Model):
    __tablename__ = "certificates"

    id = db.Column(db.String(36), primary_key=True, default=generate_id)
    enrollment_id = db.Column(db.String(36), db.ForeignKey("enrollments.id", ondelete="CASCADE"), nullable=False, unique=True)
    certificate_url = db.Column(db.Text, nullable=True)  # null until the artifact has been rendered
    issued_at = db.Column(db.DateTime, default=utcnow, nullable=False)

    enrollment = relationship("Enrollment", back_populates="certificate")

    def __repr__(self):
        return f"<Certificate Enrollment {self.enrollment_id}>"

    def to_dict(self):
        return {
            "id": self.id,
            "enrollment_id": self.enrollment_id,
            "certificate_url": self.certificate_url,
            "issued_at": format_datetime(self.issued_at),
        }
