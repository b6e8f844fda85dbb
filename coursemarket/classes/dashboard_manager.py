from coursemarket.models import db, Certificate, Course, Enrollment
from coursemarket.classes.errors import Unauthenticated, Unauthorized
from coursemarket.classes.progress_manager import ProgressManager
from coursemarket.classes.review_manager import ReviewManager
from coursemarket.classes.storage import transactional


class DashboardManager:
    @staticmethod
    @transactional
    def student_dashboard(actor):
        if actor is None:
            raise Unauthenticated()

        enrollments = [
            ProgressManager.refresh(e)
            for e in Enrollment.query.filter_by(student_id=actor.id).order_by(Enrollment.enrolled_at.desc()).all()
        ]
        certificates = {
            c.enrollment_id: c
            for c in Certificate.query.filter(Certificate.enrollment_id.in_([e.id for e in enrollments])).all()
        } if enrollments else {}

        in_progress, completed = [], []
        for enrollment in enrollments:
            certificate = certificates.get(enrollment.id)
            entry = {
                **enrollment.to_dict(),
                "course": {
                    "id": enrollment.course.id,
                    "title": enrollment.course.title,
                    "thumbnail_url": enrollment.course.thumbnail_url,
                },
                "certificate": certificate.to_dict() if certificate else None,
            }
            (completed if enrollment.completed_at else in_progress).append(entry)

        return {
            "in_progress": in_progress,
            "completed": completed,
            "totals": {
                "enrolled": len(enrollments),
                "completed": len(completed),
                "certificates": len(certificates),
            },
        }

    @staticmethod
    @transactional
    def instructor_dashboard(actor):
        """Per-course enrollment, revenue, rating and completion figures for an instructor."""
        if actor is None:
            raise Unauthenticated()
        if not actor.is_instructor:
            raise Unauthorized("dashboard")

        courses = Course.query.filter_by(instructor_id=actor.id).order_by(Course.created_at.desc()).all()
        ids = [c.id for c in courses]
        ratings = ReviewManager.statistics_for(ids)

        counts = {}
        if ids:
            rows = (
                db.session.query(
                    Enrollment.course_id,
                    db.func.count(Enrollment.id),
                    db.func.count(Enrollment.completed_at),
                )
                .filter(Enrollment.course_id.in_(ids))
                .group_by(Enrollment.course_id)
                .all()
            )
            counts = {course_id: (total, done) for course_id, total, done in rows}

        stats = []
        total_enrollments = 0
        total_revenue = 0.0
        for course in courses:
            enrolled, done = counts.get(course.id, (0, 0))
            revenue = round(enrolled * float(course.price or 0), 2)
            rating = ratings.get(course.id, {"average_rating": None, "review_count": 0})
            stats.append({
                "id": course.id,
                "title": course.title,
                "is_published": bool(course.is_published),
                "enrollments": enrolled,
                "revenue": revenue,
                "average_rating": rating["average_rating"],
                "review_count": rating["review_count"],
                "completion_rate": round(done / enrolled * 100, 2) if enrolled else 0.0,
            })
            total_enrollments += enrolled
            total_revenue += revenue

        rated = [s["average_rating"] for s in stats if s["average_rating"] is not None]
        return {
            "courses": stats,
            "totals": {
                "courses": len(courses),
                "enrollments": total_enrollments,
                "revenue": round(total_revenue, 2),
                "average_rating": round(sum(rated) / len(rated), 2) if rated else None,
            },
        }
