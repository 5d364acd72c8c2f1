"""Data-access layer: thin managers that hand out plain document mappings."""
from __future__ import annotations

from typing import Any

from django.db import IntegrityError, models, transaction
from django.utils import timezone


def parse_pk(object_id: Any) -> int | None:
    """Accept ``12`` or ``"12"``; anything else cannot name a stored row."""

    if isinstance(object_id, bool):
        return None
    if isinstance(object_id, int):
        return object_id
    if isinstance(object_id, str) and object_id.strip().isdigit():
        return int(object_id.strip())
    return None


class DocumentQuerySet(models.QuerySet):
    def documents(self) -> list[dict]:
        return [obj.as_document() for obj in self]


class DocumentManager(models.Manager.from_queryset(DocumentQuerySet)):
    def get_by_id(self, object_id) -> dict | None:
        pk = parse_pk(object_id)
        if pk is None:
            return None
        obj = self.filter(pk=pk).first()
        return obj.as_document() if obj else None

    def insert(self, **fields) -> str:
        return str(self.create(**fields).pk)

    def update_by_id(self, object_id, **changes) -> bool:
        pk = parse_pk(object_id)
        if pk is None:
            return False
        return self.filter(pk=pk).update(**changes) > 0

    def delete_by_id(self, object_id) -> bool:
        pk = parse_pk(object_id)
        if pk is None:
            return False
        deleted, _ = self.filter(pk=pk).delete()
        return deleted > 0


class StudentEntityManager(DocumentManager):
    def get_entity_by_id(self, entity_id: str) -> dict | None:
        if not entity_id:
            return None
        obj = self.filter(entity_id=entity_id).first()
        return obj.as_document() if obj else None

    def lock_for_update(self, entity_id: str) -> None:
        """Hold the entity's row lock until the caller's transaction ends.

        A missing entity row is created so every student has a row to lock.
        The lock is taken with an UPDATE, which SQLite also serializes.
        """

        if self.filter(entity_id=entity_id).update(updated_at=timezone.now()):
            return
        try:
            with transaction.atomic():
                self.create(entity_id=entity_id)
        except IntegrityError:
            # created concurrently; wait for the other transaction's lock
            self.filter(entity_id=entity_id).update(updated_at=timezone.now())

    def list_by_parent(self, parent_id: str) -> list[dict]:
        return self.filter(parent_id=parent_id).documents()


class CourseManager(DocumentManager):
    def find_by_code(self, code: str) -> dict | None:
        if not code:
            return None
        obj = self.filter(code=code).first()
        return obj.as_document() if obj else None

    def list_all(self) -> list[dict]:
        return self.all().documents()

    def list_by_staff(self, staff_id: str) -> list[dict]:
        # JSON containment lookups are not available on SQLite
        return [doc for doc in self.list_all() if staff_id in (doc.get("assignedStaff") or [])]

    def update_by_code(self, code: str, **changes) -> bool:
        return self.filter(code=code).update(**changes) > 0

    def delete_by_code(self, code: str) -> bool:
        deleted, _ = self.filter(code=code).delete()
        return deleted > 0


class AssignmentManager(DocumentManager):
    def list_by_course(self, course_code: str | None) -> list[dict]:
        queryset = self.all()
        if course_code and course_code.strip():
            queryset = queryset.filter(course_code=course_code)
        return queryset.documents()


class SubmissionManager(DocumentManager):
    def list_by_student(self, student_id: str) -> list[dict]:
        return self.filter(student_id=student_id).order_by("submitted_at", "pk").documents()

    def list_by_assignment(self, assignment_id: str) -> list[dict]:
        return self.filter(assignment_id=assignment_id).order_by("submitted_at", "pk").documents()


class QuizManager(DocumentManager):
    def list_by_course(self, course_code: str | None) -> list[dict]:
        queryset = self.order_by("created_at", "pk")
        if course_code and course_code.strip():
            queryset = queryset.filter(course_code=course_code)
        return queryset.documents()


class QuizAttemptManager(DocumentManager):
    def list_for_student(self, student_id: str) -> list[dict]:
        return self.filter(student_id=student_id).order_by("-submitted_at", "-pk").documents()

    def list_by_quiz(self, quiz_id: str) -> list[dict]:
        return self.filter(quiz_id=str(quiz_id)).order_by("submitted_at", "pk").documents()

    def exists_for(self, quiz_id: str, student_id: str) -> bool:
        return self.filter(quiz_id=str(quiz_id), student_id=student_id).exists()


class EnrollmentManager(DocumentManager):
    def find(self, student_id: str, course_code: str) -> dict | None:
        obj = self.filter(student_id=student_id, course_code=course_code).first()
        return obj.as_document() if obj else None

    def list_by_student(self, student_id: str) -> list[dict]:
        return self.filter(student_id=student_id).documents()

    def list_by_course(self, course_code: str) -> list[dict]:
        return self.filter(course_code=course_code).documents()

    def count_distinct_courses_by_student(self, student_id: str) -> int:
        # clear Meta.ordering so it does not leak into SELECT DISTINCT
        return (
            self.filter(student_id=student_id)
            .order_by()
            .values("course_code")
            .distinct()
            .count()
        )

    def insert_enrollment(self, record: dict) -> str:
        return self.insert(
            student_id=record["studentId"],
            course_code=record["courseCode"],
            registered_at=record["registeredAt"],
        )

    def delete_by_student_and_course(self, student_id: str, course_code: str) -> bool:
        deleted, _ = self.filter(student_id=student_id, course_code=course_code).delete()
        return deleted > 0
