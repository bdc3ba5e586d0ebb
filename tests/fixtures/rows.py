"""Builders for raw PostgREST rows as the repository receives them."""

from typing import Any


STUDENT_ID = "student-1"
OTHER_STUDENT_ID = "student-2"
COURSE_ID = "course-1"


def progress_row(
    lesson_id: str,
    student_id: str = STUDENT_ID,
    *,
    completed: bool = True,
    last_accessed_at: str | None = None,
) -> dict[str, Any]:
    return {
        "lesson_id": lesson_id,
        "student_id": student_id,
        "is_completed": completed,
        "completed_at": "2024-03-01T10:00:00+00:00" if completed else None,
        "last_accessed_at": last_accessed_at,
    }


def lesson_row(lesson_id: str, order_index: int, progress: list[dict] | None = None) -> dict[str, Any]:
    return {
        "id": lesson_id,
        "course_id": COURSE_ID,
        "title": f"Lesson {lesson_id}",
        "order_index": order_index,
        "lesson_progress": progress,
    }


def course_row(
    course_id: str = COURSE_ID,
    title: str = "Intro to Python",
    lessons: list[dict] | None = None,
    **fields: Any,
) -> dict[str, Any]:
    row = {
        "id": course_id,
        "title": title,
        "description": "Learn the basics",
        "level": "beginner",
        "thumbnail_url": None,
        "lesson_count": len(lessons or []),
        "total_duration": 120,
        "instructor_id": "instructor-1",
        "instructor": {"full_name": "Ada Lovelace"},
        "lessons": lessons or [],
    }
    row.update(fields)
    return row


def enrollment_row(
    enrollment_id: str = "enrollment-1",
    student_id: str = STUDENT_ID,
    course_id: str = COURSE_ID,
    *,
    progress: float | None = 0,
    course: dict | None = None,
    student: dict | None = None,
    completed_at: str | None = None,
    feedback: list[dict] | None = None,
    enrolled_at: str = "2024-01-15T09:30:00+00:00",
    updated_at: str | None = None,
) -> dict[str, Any]:
    return {
        "id": enrollment_id,
        "student_id": student_id,
        "course_id": course_id,
        "enrolled_at": enrolled_at,
        "updated_at": updated_at,
        "progress": progress,
        "completed_at": completed_at,
        "course": course,
        "student": student,
        "feedback": feedback,
    }
