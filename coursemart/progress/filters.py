"""Course and progress-band filters for the admin progress table."""

from collections.abc import Iterable

from coursemart.enrollments.models import EnrollmentRow
from coursemart.exceptions import ValidationError


ALL = "all"

# Bounds are inclusive at both ends, so neighbouring bands share 25, 50 and 75.
PROGRESS_BANDS: dict[str, tuple[int, int]] = {
    "0-25": (0, 25),
    "25-50": (25, 50),
    "50-75": (50, 75),
    "75-100": (75, 100),
}


def parse_band(band: str | None) -> tuple[int, int] | None:
    """Resolve a band name to its ``(min, max)`` bounds; ``None`` for "all"."""
    if band is None or band == ALL:
        return None
    try:
        return PROGRESS_BANDS[band]
    except KeyError:
        allowed = ", ".join([ALL, *PROGRESS_BANDS])
        msg = f"Unknown progress band '{band}'. Expected one of: {allowed}"
        raise ValidationError(msg) from None


def in_band(progress: int | None, bounds: tuple[int, int] | None) -> bool:
    """Check ``min <= progress <= max``; missing progress counts as 0."""
    if bounds is None:
        return True
    low, high = bounds
    return low <= (progress or 0) <= high


def filter_enrollments(
    enrollments: Iterable[EnrollmentRow],
    course_id: str | None = ALL,
    band: str | None = ALL,
) -> list[EnrollmentRow]:
    """Return enrollments matching both the course filter and the progress band."""
    bounds = parse_band(band)
    match_all_courses = course_id is None or course_id == ALL

    return [
        enrollment
        for enrollment in enrollments
        if (match_all_courses or enrollment.course_id == course_id) and in_band(enrollment.progress, bounds)
    ]
