"""Parent-facing access to linked students and their grade reports."""
from __future__ import annotations

from django.core.exceptions import PermissionDenied

from .exceptions import InvalidArgument
from .gpa import compute_gpa
from .grading import GradeNormalizer
from .models import StudentEntity
from .permissions import ROLE_ADMIN, ROLE_PARENT, ROLE_STUDENT, AuthContext
from .resolvers import is_blank


class ParentService:
    def __init__(self, students=None, normalizer: GradeNormalizer | None = None):
        self.students = students if students is not None else StudentEntity.objects
        self.normalizer = normalizer if normalizer is not None else GradeNormalizer()

    def get_linked_students(self, parent_id: str) -> list[dict]:
        if is_blank(parent_id):
            return []
        return self.students.list_by_parent(parent_id)

    def grade_report(self, auth: AuthContext, student_id: str) -> dict:
        if is_blank(student_id):
            raise InvalidArgument("学生编号不能为空。")
        self._authorize(auth, student_id)
        grades = self.normalizer.compute_grades(student_id)
        return {
            "student_id": student_id,
            "grades": grades,
            "gpa": compute_gpa(grades),
        }

    def _authorize(self, auth: AuthContext | None, student_id: str) -> None:
        if auth is not None:
            if auth.has_role(ROLE_ADMIN):
                return
            if auth.has_role(ROLE_STUDENT) and auth.linked_entity_id == student_id:
                return
            if auth.has_role(ROLE_PARENT):
                parent_id = auth.linked_entity_id or auth.user_id
                entity = self.students.get_entity_by_id(student_id)
                if entity and entity.get("parentId") == parent_id:
                    return
        raise PermissionDenied("无权查看该学生的成绩。")
