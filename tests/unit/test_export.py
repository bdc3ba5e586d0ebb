"""Tests for the enrollment CSV export."""

from datetime import datetime

from coursemart.enrollments.models import EnrollmentRow
from coursemart.progress.export import EXPORT_COLUMNS, export_enrollments_csv, format_date
from tests.fixtures.rows import course_row, enrollment_row


HEADER = (
    "Student Name,Student Email,Course Title,Course Level,Instructor,"
    "Enrolled Date,Progress,Status,Completion Date"
)


def _row(**kwargs) -> EnrollmentRow:
    return EnrollmentRow.model_validate(enrollment_row(**kwargs))


def test_header_only_for_empty_list() -> None:
    assert export_enrollments_csv([]) == HEADER


def test_one_line_per_enrollment() -> None:
    enrollments = [
        _row(
            enrollment_id="e1",
            progress=40,
            course=course_row(),
            student={"full_name": "Sam Student", "email": "sam@example.com"},
        ),
        _row(
            enrollment_id="e2",
            progress=100,
            completed_at="2024-03-09T12:00:00+00:00",
            course=course_row(),
            student={"full_name": "Kim Student", "email": "kim@example.com"},
        ),
    ]

    lines = export_enrollments_csv(enrollments).split("\n")

    assert len(lines) == 3
    assert lines[0] == HEADER
    assert lines[1] == "Sam Student,sam@example.com,Intro to Python,beginner,Ada Lovelace,1/15/2024,40%,In Progress,N/A"
    assert lines[2] == "Kim Student,kim@example.com,Intro to Python,beginner,Ada Lovelace,1/15/2024,100%,Completed,3/9/2024"


def test_missing_values_are_blank() -> None:
    enrollment = _row(progress=None, course=course_row(level=None, instructor=None), student=None)

    values = export_enrollments_csv([enrollment]).split("\n")[1].split(",")

    assert len(values) == len(EXPORT_COLUMNS)
    assert values[0] == ""
    assert values[1] == ""
    assert values[3] == ""
    assert values[4] == ""
    assert values[6] == "0%"


def test_format_date_has_no_padding() -> None:
    assert format_date(datetime(2024, 1, 5)) == "1/5/2024"
    assert format_date(None) == ""
