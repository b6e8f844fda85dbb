from flask_sqlalchemy import SQLAlchemy

# Initialize SQLAlchemy
db = SQLAlchemy()

# Import models
from coursemarket.models.profiles import Profile

from coursemarket.models.courses import Course, COURSE_LEVELS
from coursemarket.models.course_sections import Section
from coursemarket.models.course_lessons import Lesson

from coursemarket.models.enrollments import Enrollment
from coursemarket.models.lesson_progress import LessonProgress
from coursemarket.models.certificates import Certificate
from coursemarket.models.reviews import Review
