"""Error taxonomy shared by the academics services."""
from __future__ import annotations

from django.core.exceptions import ObjectDoesNotExist


class ServiceError(Exception):
    """Base class for business rule failures surfaced to the caller."""


class InvalidArgument(ServiceError, ValueError):
    pass


class Unparseable(ServiceError, ValueError):
    """A stored field could not be read as the expected type."""


class NotFound(ServiceError, ObjectDoesNotExist):
    pass


class DuplicateRegistration(ServiceError):
    def __init__(self, student_id: str, course_code: str):
        self.student_id = student_id
        self.course_code = course_code
        super().__init__(f"学生 {student_id} 已选课程 {course_code}，不可重复选课。")


class LimitExceeded(ServiceError):
    """Raised when the GPA-derived course cap is already reached."""

    def __init__(self, gpa: float, max_allowed: int, current_count: int):
        self.gpa = gpa
        self.max_allowed = max_allowed
        self.current_count = current_count
        super().__init__(
            f"选课失败：当前绩点 {gpa:.2f} 最多允许选 {max_allowed} 门课程（已选 {current_count} 门）。"
        )


class DuplicateAttempt(ServiceError):
    def __init__(self, quiz_id: str, student_id: str):
        self.quiz_id = quiz_id
        self.student_id = student_id
        super().__init__(f"学生 {student_id} 已提交过测验 {quiz_id}。")
