"""Course registration gated by the student's GPA.

Course cap by GPA: below 2.0 five courses, 2.0 to 3.0 inclusive six courses,
above 3.0 seven courses. The cap counts distinct course codes, so duplicate
enrollment rows for one course count once.
"""
from __future__ import annotations

import logging
from collections.abc import Mapping

from django.db import IntegrityError, transaction
from django.utils import timezone

from .exceptions import DuplicateRegistration, InvalidArgument, LimitExceeded, NotFound
from .models import Enrollment, StudentEntity
from .resolvers import as_number, is_blank

logger = logging.getLogger(__name__)


def max_allowed_courses(gpa: float) -> int:
    if gpa < 2.0:
        return 5
    if gpa <= 3.0:
        return 6
    return 7


def gpa_from_entity(entity: Mapping | None) -> float:
    """Read ``core.gpa``, else the first ``attributes`` entry keyed "gpa" (any case); default 0.0."""

    if not entity:
        return 0.0
    core = entity.get("core")
    if isinstance(core, Mapping):
        gpa = as_number(core.get("gpa"))
        if gpa is not None:
            return gpa
    for attribute in entity.get("attributes") or []:
        if not isinstance(attribute, Mapping):
            continue
        key = attribute.get("key")
        if isinstance(key, str) and key.strip().lower() == "gpa":
            gpa = as_number(attribute.get("value"))
            if gpa is not None:
                return gpa
    return 0.0


class EnrollmentService:
    def __init__(self, enrollments=None, students=None):
        self.enrollments = enrollments if enrollments is not None else Enrollment.objects
        self.students = students if students is not None else StudentEntity.objects

    def list_by_student(self, student_id: str) -> list[dict]:
        return self.enrollments.list_by_student(student_id)

    def list_by_course(self, course_code: str) -> list[dict]:
        return self.enrollments.list_by_course(course_code)

    def is_student_registered_for_course(self, student_id: str, course_code: str) -> bool:
        return self.enrollments.find(student_id, course_code) is not None

    def read_student_gpa(self, student_id: str) -> float:
        try:
            entity = self.students.get_entity_by_id(student_id)
        except NotFound:
            entity = None
        return gpa_from_entity(entity)

    def register_student_to_course(self, student_id: str, course_code: str) -> bool:
        """Register the student, or raise when a rule forbids it.

        Raises InvalidArgument, DuplicateRegistration or LimitExceeded.
        """

        if is_blank(student_id):
            raise InvalidArgument("学生编号不能为空。")
        if is_blank(course_code):
            raise InvalidArgument("课程代码不能为空。")

        with transaction.atomic():
            # serializes concurrent registrations of the same student
            self.students.lock_for_update(student_id)

            if self.enrollments.find(student_id, course_code) is not None:
                raise DuplicateRegistration(student_id, course_code)

            current_count = self.enrollments.count_distinct_courses_by_student(student_id)
            gpa = self.read_student_gpa(student_id)
            max_allowed = max_allowed_courses(gpa)
            logger.info(
                "Registering student=%s course=%s gpa=%.2f max_allowed=%d registered=%d",
                student_id,
                course_code,
                gpa,
                max_allowed,
                current_count,
            )
            if current_count >= max_allowed:
                logger.warning("Registration denied for student=%s course=%s", student_id, course_code)
                raise LimitExceeded(gpa, max_allowed, current_count)

            try:
                with transaction.atomic():
                    self.enrollments.insert_enrollment(
                        {
                            "studentId": student_id,
                            "courseCode": course_code,
                            "registeredAt": timezone.now(),
                        }
                    )
            except IntegrityError as exc:
                raise DuplicateRegistration(student_id, course_code) from exc
        return True

    def unregister_student_from_course(self, student_id: str, course_code: str) -> bool:
        removed = self.enrollments.delete_by_student_and_course(student_id, course_code)
        if removed:
            logger.info("Unregistered student=%s from course=%s", student_id, course_code)
        return removed
