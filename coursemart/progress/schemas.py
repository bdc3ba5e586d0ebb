"""Schemas for progress views."""

from datetime import datetime

from pydantic import BaseModel

from coursemart.mutations.schemas import MutationResult

from .reconciler import ProgressStatus


class ProgressSummaryResponse(BaseModel):
    """Reconciled progress of one student in one course."""

    completed_count: int
    total_count: int
    progress_percent: int
    last_access_at: datetime | None = None


class CourseCard(BaseModel):
    """Enrolled course as shown in the student's course lists."""

    enrollment_id: str
    course_id: str
    title: str
    description: str | None = None
    thumbnail_url: str | None = None
    level: str | None = None
    instructor_name: str | None = None
    lesson_count: int
    total_duration: int
    completed_lessons: int
    progress_percent: int
    status: ProgressStatus
    status_label: str
    enrolled_at: datetime | None = None
    last_access_at: datetime | None = None


class DashboardStats(BaseModel):
    """Headline numbers for the student dashboard."""

    total_enrolled: int
    completed_courses: int
    in_progress_courses: int
    certificates: int


class StudentDashboardResponse(BaseModel):
    """Student dashboard: stats plus the courses to continue."""

    stats: DashboardStats
    recent_courses: list[CourseCard]
    error: str | None = None


class FeedbackResponse(BaseModel):
    """Feedback already left for a course."""

    id: str | None = None
    rating: int
    comment: str | None = None
    created_at: datetime | None = None


class FeedbackCandidate(BaseModel):
    """Completed course the student can leave (or has left) feedback on."""

    enrollment_id: str
    course_id: str
    course_title: str
    course_description: str | None = None
    instructor_name: str | None = None
    progress: int
    completed_at: datetime | None = None
    feedback: FeedbackResponse | None = None


class StudentProgressRow(BaseModel):
    """Row of the admin student progress table."""

    enrollment_id: str
    student_id: str
    student_name: str
    student_email: str
    course_id: str
    course_title: str
    enrolled_at: datetime | None = None
    progress: int
    completed_at: datetime | None = None
    status: ProgressStatus


class LessonBadge(BaseModel):
    """Completion badge of one lesson for one student."""

    lesson_id: str
    title: str
    order_index: int | None = None
    is_completed: bool
    completed_at: datetime | None = None
    last_accessed_at: datetime | None = None


class LessonProgressResponse(BaseModel):
    """Ordered lesson badges with the reconciled summary."""

    course_id: str
    course_title: str | None = None
    student_id: str
    student_name: str | None = None
    student_email: str | None = None
    stored_progress: int | None = None
    lessons: list[LessonBadge]
    summary: ProgressSummaryResponse
    status: ProgressStatus


class EnrollmentStats(BaseModel):
    """Aggregates over all enrollments."""

    total_enrollments: int
    active_students: int
    completed_courses: int
    average_progress: float


class EnrollmentDetailsResponse(BaseModel):
    """Enrollment detail rows plus their aggregates."""

    enrollments: list[StudentProgressRow]
    stats: EnrollmentStats
    error: str | None = None


class LessonCompletionResponse(BaseModel):
    """Result of marking a lesson complete, with refreshed progress when requested."""

    result: MutationResult
    progress: LessonProgressResponse | None = None
