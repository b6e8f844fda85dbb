from flask import current_app
from sqlalchemy.exc import IntegrityError

from coursemarket.models import db, Certificate, Enrollment
from coursemarket.classes.actor import Actor
from coursemarket.classes.authorization import require, READ, CREATE, WRITE
from coursemarket.classes.errors import (
    DuplicateCertificate, EnrollmentNotCompleted, InvalidInput, NotFound, Unauthenticated, Unauthorized,
)
from coursemarket.classes.storage import transactional
from coursemarket.signals import course_completed


class CertificateManager:
    @staticmethod
    def _existing(enrollment_id):
        return Certificate.query.filter_by(enrollment_id=enrollment_id).first()

    @staticmethod
    def _insert(certificate):
        db.session.add(certificate)
        try:
            db.session.commit()
        except IntegrityError as e:
            db.session.rollback()
            raise DuplicateCertificate() from e

    @staticmethod
    def _owned(actor, operation, enrollment_id):
        # Permission first: only the owner learns whether a certificate exists
        require(actor, operation, Certificate(enrollment_id=enrollment_id), "certificate")
        certificate = CertificateManager._existing(enrollment_id)
        if certificate is None:
            raise NotFound("certificate")
        return certificate

    @staticmethod
    @transactional
    def issue_certificate(actor, enrollment_id):
        """Return the enrollment's certificate, creating it on first call.

        Idempotent: a second call, or a concurrent one that loses the insert
        race on the unique ``enrollment_id``, gets the existing record.
        """
        enrollment = db.session.get(Enrollment, enrollment_id) if enrollment_id else None
        if enrollment is None:
            raise Unauthorized("enrollment")
        require(actor, READ, Certificate(enrollment_id=enrollment.id), "enrollment")

        if enrollment.completed_at is None:
            raise EnrollmentNotCompleted()

        existing = CertificateManager._existing(enrollment.id)
        if existing is not None:
            return existing

        certificate = Certificate(enrollment_id=enrollment.id, certificate_url=None)
        require(actor, CREATE, certificate, "enrollment")

        try:
            CertificateManager._insert(certificate)
        except DuplicateCertificate:
            existing = CertificateManager._existing(enrollment_id)
            if existing is None:
                raise
            current_app.logger.info("Certificate for enrollment %s already issued concurrently", enrollment_id)
            return existing

        current_app.logger.info("Certificate %s issued for enrollment %s", certificate.id, enrollment_id)
        return certificate

    @staticmethod
    @transactional
    def attach_artifact(actor, enrollment_id, certificate_url):
        """Store (or regenerate) the rendered artifact. Nothing else on the record changes."""
        if certificate_url is not None and not isinstance(certificate_url, str):
            raise InvalidInput("Certificate URL must be a string.")

        certificate = CertificateManager._owned(actor, WRITE, enrollment_id)
        certificate.certificate_url = certificate_url or None
        db.session.commit()
        return certificate

    @staticmethod
    @transactional
    def get_certificate(actor, enrollment_id):
        return CertificateManager._owned(actor, READ, enrollment_id)

    @staticmethod
    @transactional
    def list_student_certificates(actor):
        if actor is None:
            raise Unauthenticated()
        return (
            Certificate.query.join(Enrollment, Certificate.enrollment_id == Enrollment.id)
            .filter(Enrollment.student_id == actor.id)
            .order_by(Certificate.issued_at.desc())
            .all()
        )


@course_completed.connect
def issue_on_completion(enrollment, **extra):
    """Issue the certificate as the enrollment's student once completion is committed."""
    if not current_app.config.get("CERTIFICATE_AUTO_ISSUE", True):
        return
    student = Actor(id=enrollment.student_id, role="student")
    CertificateManager.issue_certificate(student, enrollment.id)
