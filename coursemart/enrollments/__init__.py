"""Enrollment, lesson and lesson-progress rows and their read queries."""

from coursemart.enrollments.models import (
    CatalogCourse,
    CourseOption,
    CourseRef,
    EnrollmentRow,
    FeedbackRow,
    LessonProgressRow,
    LessonRow,
    Profile,
    ProfileRef,
)
from coursemart.enrollments.repository import EnrollmentRepository


__all__ = [
    "CatalogCourse",
    "CourseOption",
    "CourseRef",
    "EnrollmentRepository",
    "EnrollmentRow",
    "FeedbackRow",
    "LessonProgressRow",
    "LessonRow",
    "Profile",
    "ProfileRef",
]
