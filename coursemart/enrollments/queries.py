"""PostgREST select strings for the enrollment read shapes.

Joined tables are aliased so the nested keys line up with the row models in
``models.py`` (``course``, ``student``, ``instructor``, ``lessons``, ``feedback``).
"""

ENROLLMENTS_TABLE = "enrollments"
LESSONS_TABLE = "lessons"
LESSON_PROGRESS_TABLE = "lesson_progress"
COURSES_TABLE = "courses"
PROFILES_TABLE = "profiles"
FEEDBACK_TABLE = "course_feedback"
CERTIFICATES_TABLE = "certificates"

LESSON_PROGRESS_FIELDS = "lesson_id, student_id, is_completed, completed_at, last_accessed_at"

# Enrollment with its course, the course instructor and the lessons with progress rows
STUDENT_ENROLLMENTS_SELECT = f"""
*,
course:courses!enrollments_course_id_fkey(
    id, title, description, thumbnail_url, level, total_duration, lesson_count, instructor_id,
    instructor:profiles!instructor_id(full_name),
    lessons(
        id, course_id, title, order_index, is_published,
        lesson_progress!fk_lesson_progress_lesson_id({LESSON_PROGRESS_FIELDS})
    )
)
"""

COMPLETED_ENROLLMENTS_SELECT = """
*,
course:courses!enrollments_course_id_fkey(
    id, title, description, instructor_id,
    instructor:profiles!instructor_id(full_name)
),
feedback:course_feedback(id, course_id, student_id, rating, comment, created_at)
"""

ADMIN_ENROLLMENTS_SELECT = """
id, enrolled_at, updated_at, progress, completed_at, student_id, course_id,
student:profiles!enrollments_student_id_fkey(full_name, email),
course:courses!enrollments_course_id_fkey(id, title)
"""

ENROLLMENT_DETAILS_SELECT = """
*,
student:profiles!student_id(full_name, email, avatar_url),
course:courses!course_id(
    id, title, description, level, total_duration, lesson_count,
    instructor:profiles!instructor_id(full_name)
)
"""

LESSONS_WITH_PROGRESS_SELECT = f"""
id, course_id, title, order_index,
lesson_progress!fk_lesson_progress_lesson_id({LESSON_PROGRESS_FIELDS})
"""

COURSE_OPTIONS_SELECT = "id, title"

CATALOG_SELECT = """
*,
category:categories!courses_category_id_fkey(name),
instructor:profiles!courses_instructor_id_fkey(full_name)
"""
