from flask import Blueprint, g, jsonify, request
from coursemarket.classes.certificate_manager import CertificateManager
from coursemarket.classes.dashboard_manager import DashboardManager
from coursemarket.classes.enrollment_manager import EnrollmentManager
from coursemarket.classes.progress_manager import ProgressManager
from coursemarket.utils.utils import login_required

# Students' blueprint
student_bp = Blueprint("student", __name__)

#__________________________________________________________________________________________ * Enrollments *__________________________________________________

@student_bp.route("/courses/<course_id>/enroll", methods=["POST"])
@login_required
def enroll(course_id):
    enrollment = EnrollmentManager.enroll(g.actor, course_id)
    return jsonify({"message": "Enrolled successfully", "enrollment": enrollment.to_dict()}), 201

# The caller's enrollment in a course, if any
@student_bp.route("/courses/<course_id>/enrollment", methods=["GET"])
@login_required
def get_enrollment(course_id):
    enrollment = EnrollmentManager.get_enrollment(g.actor, g.actor.id, course_id)
    return jsonify(enrollment.to_dict()), 200

@student_bp.route("/dashboard", methods=["GET"])
@login_required
def dashboard():
    return jsonify(DashboardManager.student_dashboard(g.actor)), 200

#__________________________________________________________________________________________ * Progress *__________________________________________________

# Playback heartbeat / lesson completion
@student_bp.route("/enrollments/<enrollment_id>/lessons/<lesson_id>/progress", methods=["PUT"])
@login_required
def record_progress(enrollment_id, lesson_id):
    data = request.get_json(silent=True) or {}
    progress = ProgressManager.record_progress(
        g.actor,
        enrollment_id,
        lesson_id,
        data.get("watched_seconds", 0),
        data.get("is_completed", False),
    )
    enrollment = EnrollmentManager.get_enrollment_by_id(g.actor, enrollment_id)
    return jsonify({"progress": progress.to_dict(), "enrollment": enrollment.to_dict()}), 200

@student_bp.route("/enrollments/<enrollment_id>/progress", methods=["GET"])
@login_required
def get_progress(enrollment_id):
    return jsonify(ProgressManager.get_progress(g.actor, enrollment_id)), 200

#__________________________________________________________________________________________ * Certificates *__________________________________________________

@student_bp.route("/certificates", methods=["GET"])
@login_required
def list_certificates():
    certificates = CertificateManager.list_student_certificates(g.actor)
    return jsonify({"certificates": [c.to_dict() for c in certificates]}), 200

@student_bp.route("/enrollments/<enrollment_id>/certificate", methods=["POST"])
@login_required
def issue_certificate(enrollment_id):
    certificate = CertificateManager.issue_certificate(g.actor, enrollment_id)
    return jsonify(certificate.to_dict()), 200

@student_bp.route("/enrollments/<enrollment_id>/certificate", methods=["GET"])
@login_required
def get_certificate(enrollment_id):
    certificate = CertificateManager.get_certificate(g.actor, enrollment_id)
    return jsonify(certificate.to_dict()), 200

# Attach or regenerate the rendered artifact
@student_bp.route("/enrollments/<enrollment_id>/certificate", methods=["PUT"])
@login_required
def attach_certificate_artifact(enrollment_id):
    data = request.get_json(silent=True) or {}
    certificate = CertificateManager.attach_artifact(g.actor, enrollment_id, data.get("certificate_url"))
    return jsonify(certificate.to_dict()), 200
