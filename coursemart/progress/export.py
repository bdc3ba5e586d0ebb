"""Comma separated export of enrollment details.

Values are written verbatim and joined with commas. Embedded commas or quotes
are not escaped; downstream tooling must cope with that until the export format
is revisited.
"""

from collections.abc import Iterable
from datetime import datetime

from coursemart.enrollments.models import EnrollmentRow


EXPORT_COLUMNS = (
    "Student Name",
    "Student Email",
    "Course Title",
    "Course Level",
    "Instructor",
    "Enrolled Date",
    "Progress",
    "Status",
    "Completion Date",
)


def format_date(value: datetime | None) -> str:
    """Format a date as M/D/YYYY."""
    if value is None:
        return ""
    return f"{value.month}/{value.day}/{value.year}"


def export_row(enrollment: EnrollmentRow) -> list[str]:
    """Values of one enrollment in ``EXPORT_COLUMNS`` order."""
    student = enrollment.student
    course = enrollment.course
    instructor = course.instructor if course else None

    values = [
        student.full_name if student else None,
        student.email if student else None,
        course.title if course else None,
        course.level if course else None,
        instructor.full_name if instructor else None,
        format_date(enrollment.enrolled_at),
        f"{enrollment.progress or 0}%",
        "Completed" if enrollment.completed_at else "In Progress",
        format_date(enrollment.completed_at) if enrollment.completed_at else "N/A",
    ]
    return ["" if value is None else str(value) for value in values]


def export_enrollments_csv(enrollments: Iterable[EnrollmentRow]) -> str:
    """Render enrollments as a header line plus one line per enrollment."""
    lines = [",".join(EXPORT_COLUMNS)]
    lines.extend(",".join(export_row(enrollment)) for enrollment in enrollments)
    return "\n".join(lines)
