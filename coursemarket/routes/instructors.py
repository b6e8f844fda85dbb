from flask import Blueprint, g, jsonify, request
from coursemarket.classes.catalog_manager import CatalogManager
from coursemarket.classes.dashboard_manager import DashboardManager
from coursemarket.classes.enrollment_manager import EnrollmentManager
from coursemarket.utils.utils import login_required

# Instructors' blueprint
instructor_bp = Blueprint("instructor", __name__)


def _payload():
    return request.get_json(silent=True) or {}

#__________________________________________________________________________________________ * Courses *__________________________________________________

# fetch all own courses
@instructor_bp.route("/courses", methods=["GET"])
@login_required
def get_my_courses():
    courses = CatalogManager.list_instructor_courses(g.actor)
    return jsonify({"courses": CatalogManager.summarize(courses)}), 200

@instructor_bp.route("/courses", methods=["POST"])
@login_required
def create_course():
    course = CatalogManager.create_course(g.actor, _payload())
    return jsonify({"message": "Course created successfully", "course": course.to_dict()}), 201

@instructor_bp.route("/courses/<course_id>", methods=["PUT"])
@login_required
def update_course(course_id):
    course = CatalogManager.update_course(g.actor, course_id, _payload())
    return jsonify({"message": "Course updated successfully", "course": course.to_dict()}), 200

@instructor_bp.route("/courses/<course_id>/publish", methods=["POST"])
@login_required
def publish_course(course_id):
    published = _payload().get("is_published", True)
    course = CatalogManager.publish_course(g.actor, course_id, published)
    return jsonify({"message": "Course visibility updated", "course": course.to_dict()}), 200

# Delete a course and everything under it
@instructor_bp.route("/courses/<course_id>", methods=["DELETE"])
@login_required
def delete_course(course_id):
    CatalogManager.delete_course(g.actor, course_id)
    return jsonify({"message": "Course deleted successfully"}), 200

@instructor_bp.route("/courses/<course_id>/enrollments", methods=["GET"])
@login_required
def get_course_enrollments(course_id):
    enrollments = EnrollmentManager.list_course_enrollments(g.actor, course_id)
    return jsonify({"enrollments": [e.to_dict() for e in enrollments]}), 200

@instructor_bp.route("/dashboard", methods=["GET"])
@login_required
def dashboard():
    return jsonify(DashboardManager.instructor_dashboard(g.actor)), 200

#__________________________________________________________________________________________ * Sections *__________________________________________________

@instructor_bp.route("/courses/<course_id>/sections", methods=["POST"])
@login_required
def add_section(course_id):
    data = _payload()
    section = CatalogManager.create_section(g.actor, course_id, data.get("title"), data.get("order_index"))
    return jsonify({"message": "Section created successfully", "section": section.to_dict()}), 201

@instructor_bp.route("/courses/<course_id>/sections/order", methods=["PUT"])
@login_required
def reorder_sections(course_id):
    sections = CatalogManager.reorder_sections(g.actor, course_id, _payload().get("section_ids") or [])
    return jsonify({"sections": [s.to_dict() for s in sections]}), 200

@instructor_bp.route("/sections/<section_id>", methods=["PUT"])
@login_required
def edit_section(section_id):
    section = CatalogManager.update_section(g.actor, section_id, _payload())
    return jsonify({"message": "Section updated successfully", "section": section.to_dict()}), 200

@instructor_bp.route("/sections/<section_id>", methods=["DELETE"])
@login_required
def delete_section(section_id):
    CatalogManager.delete_section(g.actor, section_id)
    return jsonify({"message": "Section deleted successfully"}), 200

#__________________________________________________________________________________________ * Lessons *__________________________________________________

@instructor_bp.route("/sections/<section_id>/lessons", methods=["POST"])
@login_required
def add_lesson(section_id):
    lesson = CatalogManager.create_lesson(g.actor, section_id, _payload())
    return jsonify({"message": "Lesson created successfully", "lesson": lesson.to_dict()}), 201

@instructor_bp.route("/sections/<section_id>/lessons/order", methods=["PUT"])
@login_required
def reorder_lessons(section_id):
    lessons = CatalogManager.reorder_lessons(g.actor, section_id, _payload().get("lesson_ids") or [])
    return jsonify({"lessons": [lesson.to_dict() for lesson in lessons]}), 200

@instructor_bp.route("/lessons/<lesson_id>", methods=["PUT"])
@login_required
def edit_lesson(lesson_id):
    lesson = CatalogManager.update_lesson(g.actor, lesson_id, _payload())
    return jsonify({"message": "Lesson updated successfully", "lesson": lesson.to_dict()}), 200

@instructor_bp.route("/lessons/<lesson_id>", methods=["DELETE"])
@login_required
def delete_lesson(lesson_id):
    CatalogManager.delete_lesson(g.actor, lesson_id)
    return jsonify({"message": "Lesson deleted successfully"}), 200
