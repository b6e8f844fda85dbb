from flask import Blueprint, g, jsonify, request
from coursemarket.classes.catalog_manager import CatalogManager
from coursemarket.classes.review_manager import ReviewManager
from coursemarket.utils.utils import login_required, optional_login

# Public catalog blueprint
course_bp = Blueprint("courses", __name__)

#__________________________________________________________________________________________ * Catalog *__________________________________________________

# Browse published courses
@course_bp.route("", methods=["GET"])
def list_courses():
    courses = CatalogManager.list_published_courses(
        search=request.args.get("search"),
        category=request.args.get("category"),
        level=request.args.get("level"),
    )
    return jsonify({"courses": courses}), 200

@course_bp.route("/categories", methods=["GET"])
def list_categories():
    return jsonify({"categories": CatalogManager.list_categories()}), 200

# Course details with computed rating figures
@course_bp.route("/<course_id>", methods=["GET"])
@optional_login
def get_course(course_id):
    course = CatalogManager.get_course(g.actor, course_id)
    return jsonify(CatalogManager.summarize([course])[0]), 200

# Sections and lessons the caller is allowed to see
@course_bp.route("/<course_id>/content", methods=["GET"])
@optional_login
def get_course_content(course_id):
    return jsonify(CatalogManager.get_course_content(g.actor, course_id)), 200

@course_bp.route("/lessons/<lesson_id>", methods=["GET"])
@optional_login
def get_lesson(lesson_id):
    lesson = CatalogManager.get_lesson(g.actor, lesson_id)
    return jsonify(lesson.to_dict()), 200

#__________________________________________________________________________________________ * Reviews *__________________________________________________

@course_bp.route("/<course_id>/reviews", methods=["GET"])
@login_required
def list_reviews(course_id):
    reviews = ReviewManager.list_reviews(g.actor, course_id)
    return jsonify({
        "reviews": [r.to_dict() for r in reviews],
        "statistics": ReviewManager.course_statistics(course_id),
    }), 200

# Create or replace the caller's review
@course_bp.route("/<course_id>/reviews", methods=["POST"])
@login_required
def submit_review(course_id):
    data = request.get_json(silent=True) or {}
    review = ReviewManager.submit_review(g.actor, course_id, data.get("rating"), data.get("comment"))
    return jsonify({"message": "Review saved", "review": review.to_dict()}), 200

@course_bp.route("/reviews/<review_id>", methods=["DELETE"])
@login_required
def delete_review(review_id):
    ReviewManager.delete_review(g.actor, review_id)
    return jsonify({"message": "Review deleted successfully"}), 200
