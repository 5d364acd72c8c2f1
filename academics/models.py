"""Document-style models for students, courses, coursework and enrollment.

Each model keeps its identifying columns as real fields and everything else a
record may carry (schema drift from older imports included) in ``data``.
``as_document()`` flattens both into one camelCase mapping, which is what the
services work with.
"""
from __future__ import annotations

from collections.abc import Mapping

from django.core.exceptions import ValidationError
from django.db import models
from django.utils import timezone

from .managers import (
    AssignmentManager,
    CourseManager,
    EnrollmentManager,
    QuizAttemptManager,
    QuizManager,
    StudentEntityManager,
    SubmissionManager,
)


def _iso(value):
    return value.isoformat() if value is not None else None


class DocumentModel(models.Model):
    data = models.JSONField("附加字段", default=dict, blank=True)

    class Meta:
        abstract = True

    def document_fields(self) -> dict:
        raise NotImplementedError

    def as_document(self) -> dict:
        """Merge ``data`` with the column values; a column that is unset never hides a legacy key."""

        document = dict(self.data or {})
        for key, value in self.document_fields().items():
            if value is not None or key not in document:
                document[key] = value
        document["_id"] = str(self.pk)
        return document

    def clean(self):
        super().clean()
        if not isinstance(self.data, Mapping):
            raise ValidationError({"data": "附加字段必须是 JSON 对象。"})


class StudentEntity(DocumentModel):
    entity_id = models.CharField("实体编号", max_length=64, unique=True)
    entity_type = models.CharField("实体类型", max_length=32, default="student")
    core = models.JSONField("基本信息", default=dict, blank=True)
    attributes = models.JSONField("扩展属性", default=list, blank=True)
    parent_id = models.CharField("家长编号", max_length=64, blank=True, db_index=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = StudentEntityManager()

    class Meta:
        verbose_name = "学生档案"
        verbose_name_plural = "学生档案"
        ordering = ["entity_id"]

    def __str__(self) -> str:  # pragma: no cover - human readable labels
        name = (self.core or {}).get("name") if isinstance(self.core, Mapping) else None
        return f"{self.entity_id} - {name}" if name else self.entity_id

    def clean(self):
        super().clean()
        if not isinstance(self.core, Mapping):
            raise ValidationError({"core": "基本信息必须是 JSON 对象。"})
        if not isinstance(self.attributes, list) or not all(
            isinstance(item, Mapping) and "key" in item for item in self.attributes
        ):
            raise ValidationError({"attributes": "扩展属性必须是包含 key/value 的对象列表。"})

    def document_fields(self) -> dict:
        return {
            "entityId": self.entity_id,
            "type": self.entity_type,
            "core": dict(self.core or {}),
            "attributes": list(self.attributes or []),
            "parentId": self.parent_id or None,
            "createdAt": _iso(self.created_at),
            "updatedAt": _iso(self.updated_at),
        }


class Course(DocumentModel):
    code = models.CharField("课程代码", max_length=32, unique=True)
    title = models.CharField("课程名称", max_length=255)
    name = models.CharField("课程简称", max_length=255, blank=True)
    credits = models.DecimalField("学分", max_digits=4, decimal_places=1, null=True, blank=True)
    description = models.TextField("课程简介", blank=True)
    assigned_staff = models.JSONField("任课教师", default=list, blank=True)

    objects = CourseManager()

    class Meta:
        verbose_name = "课程"
        verbose_name_plural = "课程"
        ordering = ["code"]

    def __str__(self) -> str:  # pragma: no cover - human readable labels
        return f"{self.code} - {self.title}"

    def document_fields(self) -> dict:
        return {
            "code": self.code,
            "courseCode": self.code,
            "title": self.title,
            "name": self.name or None,
            "credits": float(self.credits) if self.credits is not None else None,
            "description": self.description,
            "assignedStaff": list(self.assigned_staff or []),
        }


class Assignment(DocumentModel):
    course_code = models.CharField("课程代码", max_length=32, db_index=True)
    subject_id = models.CharField("科目编号", max_length=64, blank=True)
    title = models.CharField("标题", max_length=255)
    assignment_type = models.CharField("类型", max_length=64, blank=True)
    category = models.CharField("类别", max_length=64, blank=True)
    description = models.TextField("说明", blank=True)
    due_date = models.DateTimeField("截止时间", null=True, blank=True)
    points = models.PositiveIntegerField("满分", default=0)
    created_by = models.CharField("创建人", max_length=64, blank=True)
    visible = models.BooleanField("学生可见", default=True)
    created_at = models.DateTimeField(auto_now_add=True)

    objects = AssignmentManager()

    class Meta:
        verbose_name = "作业"
        verbose_name_plural = "作业"
        ordering = ["course_code", "created_at"]

    def __str__(self) -> str:  # pragma: no cover - human readable labels
        return f"{self.course_code} - {self.title}"

    def document_fields(self) -> dict:
        return {
            "courseCode": self.course_code,
            "subjectId": self.subject_id or None,
            "title": self.title,
            "type": self.assignment_type or None,
            "category": self.category or None,
            "description": self.description,
            "dueDate": _iso(self.due_date),
            "points": self.points,
            "createdBy": self.created_by or None,
            "visible": self.visible,
            "createdAt": _iso(self.created_at),
        }


class Submission(DocumentModel):
    STATUS_CHOICES = [
        ("submitted", "已提交"),
        ("graded", "已评分"),
    ]

    student_id = models.CharField("学生编号", max_length=64, db_index=True)
    assignment_id = models.CharField("作业编号", max_length=64, blank=True, db_index=True)
    submitted_at = models.DateTimeField("提交时间", default=timezone.now)
    status = models.CharField("状态", max_length=16, choices=STATUS_CHOICES, default="submitted")
    answers = models.JSONField("答案", default=dict, blank=True)
    grade = models.JSONField("成绩", null=True, blank=True)
    feedback = models.TextField("评语", blank=True)
    grader = models.CharField("评分人", max_length=64, blank=True)
    graded_at = models.DateTimeField("评分时间", null=True, blank=True)

    objects = SubmissionManager()

    class Meta:
        verbose_name = "作业提交"
        verbose_name_plural = "作业提交"
        ordering = ["submitted_at"]

    def __str__(self) -> str:  # pragma: no cover - human readable labels
        return f"{self.student_id} -> {self.assignment_id or '-'} ({self.get_status_display()})"

    def document_fields(self) -> dict:
        return {
            "studentId": self.student_id,
            "assignmentId": self.assignment_id or None,
            "submittedAt": _iso(self.submitted_at),
            "status": self.status,
            "answers": self.answers,
            "grade": self.grade,
            "feedback": self.feedback or None,
            "grader": self.grader or None,
            "gradedAt": _iso(self.graded_at),
        }


class Quiz(DocumentModel):
    course_code = models.CharField("课程代码", max_length=32, db_index=True)
    subject_id = models.CharField("科目编号", max_length=64, blank=True)
    title = models.CharField("标题", max_length=255)
    time_limit_minutes = models.PositiveIntegerField("限时（分钟）", default=0)
    questions = models.JSONField("题目", default=list, blank=True)
    created_by = models.CharField("创建人", max_length=64, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    objects = QuizManager()

    class Meta:
        verbose_name = "测验"
        verbose_name_plural = "测验"
        ordering = ["course_code", "created_at"]

    def __str__(self) -> str:  # pragma: no cover - human readable labels
        return f"{self.course_code} - {self.title}"

    def clean(self):
        super().clean()
        if not isinstance(self.questions, list) or not all(isinstance(q, Mapping) for q in self.questions):
            raise ValidationError({"questions": "题目必须是对象列表。"})

    def document_fields(self) -> dict:
        return {
            "courseCode": self.course_code,
            "subjectId": self.subject_id or None,
            "title": self.title,
            "timeLimitMinutes": self.time_limit_minutes,
            "questions": list(self.questions or []),
            "createdBy": self.created_by or None,
            "createdAt": _iso(self.created_at),
        }


class QuizAttempt(DocumentModel):
    quiz_id = models.CharField("测验编号", max_length=64, db_index=True)
    student_id = models.CharField("学生编号", max_length=64, db_index=True)
    answers = models.JSONField("答案", default=dict, blank=True)
    score = models.FloatField("得分", null=True, blank=True)
    max_score = models.FloatField("满分", null=True, blank=True)
    percent = models.FloatField("得分率", null=True, blank=True)
    graded = models.BooleanField("已评分", default=False)
    grader = models.CharField("评分人", max_length=64, blank=True)
    feedback = models.TextField("评语", blank=True)
    submitted_at = models.DateTimeField("提交时间", default=timezone.now)
    graded_at = models.DateTimeField("评分时间", null=True, blank=True)

    objects = QuizAttemptManager()

    class Meta:
        verbose_name = "测验作答"
        verbose_name_plural = "测验作答"
        ordering = ["-submitted_at"]
        constraints = [
            models.UniqueConstraint(fields=["quiz_id", "student_id"], name="quizattempt_one_per_student"),
        ]

    def __str__(self) -> str:  # pragma: no cover - human readable labels
        return f"{self.student_id} -> quiz {self.quiz_id}"

    def document_fields(self) -> dict:
        return {
            "quizId": self.quiz_id,
            "studentId": self.student_id,
            "answers": self.answers,
            "score": self.score,
            "maxScore": self.max_score,
            "percent": self.percent,
            "graded": self.graded,
            "grader": self.grader or None,
            "feedback": self.feedback or None,
            "submittedAt": _iso(self.submitted_at),
            "gradedAt": _iso(self.graded_at),
        }


class Enrollment(DocumentModel):
    student_id = models.CharField("学生编号", max_length=64, db_index=True)
    course_code = models.CharField("课程代码", max_length=32, db_index=True)
    registered_at = models.DateTimeField("选课时间", default=timezone.now)

    objects = EnrollmentManager()

    class Meta:
        verbose_name = "选课记录"
        verbose_name_plural = "选课记录"
        ordering = ["registered_at"]
        constraints = [
            models.UniqueConstraint(fields=["student_id", "course_code"], name="enrollment_one_per_course"),
        ]

    def __str__(self) -> str:  # pragma: no cover - human readable labels
        return f"{self.student_id} -> {self.course_code}"

    def document_fields(self) -> dict:
        return {
            "studentId": self.student_id,
            "courseCode": self.course_code,
            "registeredAt": _iso(self.registered_at),
        }
