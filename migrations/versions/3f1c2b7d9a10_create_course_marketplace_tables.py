from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '3f1c2b7d9a10'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        'profiles',
        sa.Column('id', sa.String(length=36), primary_key=True),
        sa.Column('email', sa.String(length=255), nullable=False, unique=True),
        sa.Column('full_name', sa.String(length=255), nullable=False),
        sa.Column('role', sa.String(length=20), nullable=False),
        sa.Column('bio', sa.Text(), nullable=True),
        sa.Column('avatar_url', sa.String(length=512), nullable=True),
        sa.Column('password_hash', sa.String(length=255), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.CheckConstraint("role IN ('student', 'instructor')", name='check_profile_role'),
    )

    op.create_table(
        'courses',
        sa.Column('id', sa.String(length=36), primary_key=True),
        sa.Column('instructor_id', sa.String(length=36), sa.ForeignKey('profiles.id', ondelete='CASCADE'), nullable=False),
        sa.Column('title', sa.String(length=255), nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('thumbnail_url', sa.String(length=512), nullable=True),
        sa.Column('price', sa.Numeric(10, 2), nullable=False),
        sa.Column('level', sa.String(length=20), nullable=False),
        sa.Column('category', sa.String(length=100), nullable=False),
        sa.Column('is_published', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.CheckConstraint('price >= 0', name='check_course_price'),
        sa.CheckConstraint("level IN ('Beginner', 'Intermediate', 'Advanced')", name='check_course_level'),
    )
    op.create_index('ix_courses_instructor_id', 'courses', ['instructor_id'])
    op.create_index('ix_courses_category', 'courses', ['category'])
    op.create_index('ix_courses_is_published', 'courses', ['is_published'])

    op.create_table(
        'course_sections',
        sa.Column('id', sa.String(length=36), primary_key=True),
        sa.Column('course_id', sa.String(length=36), sa.ForeignKey('courses.id', ondelete='CASCADE'), nullable=False),
        sa.Column('title', sa.String(length=255), nullable=False),
        sa.Column('order_index', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.UniqueConstraint('course_id', 'order_index', name='unique_course_section_order'),
    )
    op.create_index('ix_course_sections_course_id', 'course_sections', ['course_id'])

    op.create_table(
        'lessons',
        sa.Column('id', sa.String(length=36), primary_key=True),
        sa.Column('section_id', sa.String(length=36), sa.ForeignKey('course_sections.id', ondelete='CASCADE'), nullable=False),
        sa.Column('title', sa.String(length=255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('video_url', sa.String(length=512), nullable=False),
        sa.Column('duration_seconds', sa.Integer(), nullable=False),
        sa.Column('order_index', sa.Integer(), nullable=False),
        sa.Column('is_preview', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.UniqueConstraint('section_id', 'order_index', name='unique_section_lesson_order'),
        sa.CheckConstraint('duration_seconds >= 0', name='check_lesson_duration'),
    )
    op.create_index('ix_lessons_section_id', 'lessons', ['section_id'])

    op.create_table(
        'enrollments',
        sa.Column('id', sa.String(length=36), primary_key=True),
        sa.Column('student_id', sa.String(length=36), sa.ForeignKey('profiles.id', ondelete='CASCADE'), nullable=False),
        sa.Column('course_id', sa.String(length=36), sa.ForeignKey('courses.id', ondelete='CASCADE'), nullable=False),
        sa.Column('enrolled_at', sa.DateTime(), nullable=False),
        sa.Column('completed_at', sa.DateTime(), nullable=True),
        sa.Column('progress_percentage', sa.Integer(), nullable=False),
        sa.UniqueConstraint('student_id', 'course_id', name='unique_student_course'),
        sa.CheckConstraint('progress_percentage >= 0 AND progress_percentage <= 100', name='check_progress_percentage'),
    )
    op.create_index('ix_enrollments_student_id', 'enrollments', ['student_id'])
    op.create_index('ix_enrollments_course_id', 'enrollments', ['course_id'])

    op.create_table(
        'lesson_progress',
        sa.Column('id', sa.String(length=36), primary_key=True),
        sa.Column('enrollment_id', sa.String(length=36), sa.ForeignKey('enrollments.id', ondelete='CASCADE'), nullable=False),
        sa.Column('lesson_id', sa.String(length=36), sa.ForeignKey('lessons.id', ondelete='CASCADE'), nullable=False),
        sa.Column('watched_seconds', sa.Integer(), nullable=False),
        sa.Column('is_completed', sa.Boolean(), nullable=False),
        sa.Column('last_watched_at', sa.DateTime(), nullable=False),
        sa.UniqueConstraint('enrollment_id', 'lesson_id', name='unique_enrollment_lesson'),
        sa.CheckConstraint('watched_seconds >= 0', name='check_watched_seconds'),
    )
    op.create_index('ix_lesson_progress_enrollment_id', 'lesson_progress', ['enrollment_id'])

    op.create_table(
        'certificates',
        sa.Column('id', sa.String(length=36), primary_key=True),
        sa.Column('enrollment_id', sa.String(length=36), sa.ForeignKey('enrollments.id', ondelete='CASCADE'), nullable=False, unique=True),
        sa.Column('certificate_url', sa.Text(), nullable=True),
        sa.Column('issued_at', sa.DateTime(), nullable=False),
    )

    op.create_table(
        'reviews',
        sa.Column('id', sa.String(length=36), primary_key=True),
        sa.Column('course_id', sa.String(length=36), sa.ForeignKey('courses.id', ondelete='CASCADE'), nullable=False),
        sa.Column('student_id', sa.String(length=36), sa.ForeignKey('profiles.id', ondelete='CASCADE'), nullable=False),
        sa.Column('rating', sa.Integer(), nullable=False),
        sa.Column('comment', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.UniqueConstraint('course_id', 'student_id', name='unique_course_student_review'),
        sa.CheckConstraint('rating >= 1 AND rating <= 5', name='check_review_rating'),
    )
    op.create_index('ix_reviews_course_id', 'reviews', ['course_id'])


def downgrade():
    # Children first
    op.drop_table('reviews')
    op.drop_table('certificates')
    op.drop_table('lesson_progress')
    op.drop_table('enrollments')
    op.drop_table('lessons')
    op.drop_table('course_sections')
    op.drop_table('courses')
    op.drop_table('profiles')
