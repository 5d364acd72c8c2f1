"""Per-subject grade aggregation from submissions and quiz attempts.

Every subject grade is built from three buckets with fixed caps: final/exam
work (60 points), quizzes (20) and assignments (20). Record contributions are
summed per bucket, each bucket is clamped to ``[0, cap]`` on its own, and the
three clamped buckets are added, so a subject grade always lies in [0, 100].

Stored submissions do not agree on a schema: the subject may live under any of
several keys or only be reachable through the linked assignment, the
assessment type is free text, and the score may be a score/max pair, a raw
number, a percentage or a string such as ``"85%"``. Aggregation never raises on
such records; unreadable fields fall through to the next source and records
without any subject signal are grouped on their own.
"""
from __future__ import annotations

import logging
import uuid
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from .exceptions import NotFound
from .models import Assignment, Course, Quiz, QuizAttempt, Submission
from .resolvers import (
    as_number,
    as_text,
    first_field,
    first_number,
    is_blank,
    normalize_key,
    parse_percent_text,
    positive_credits,
)

logger = logging.getLogger(__name__)

BUCKET_FINAL = "final"
BUCKET_QUIZ = "quiz"
BUCKET_ASSIGN = "assign"

BUCKET_CAPS = {
    BUCKET_FINAL: 60.0,
    BUCKET_QUIZ: 20.0,
    BUCKET_ASSIGN: 20.0,
}

SUBJECT_CODE_FIELDS = ("subjectId", "subjectCode", "courseCode", "course", "subject")
SUBJECT_NAME_FIELDS = ("subjectName", "courseName")
DISPLAY_NAME_FIELDS = ("subjectName", "courseName", "title")
ASSESSMENT_TYPE_FIELDS = ("type", "itemType", "category", "assessmentType")
ASSIGNMENT_TYPE_FIELDS = ("type", "category", "title")
ASSIGNMENT_COURSE_FIELDS = ("courseCode", "subjectId", "course")
ATTEMPT_CODE_FIELDS = ("courseCode", "course", "subjectId")
QUIZ_COURSE_FIELDS = ("courseCode", "subjectId")
COURSE_NAME_FIELDS = ("title", "name")
SCORE_FIELDS = ("score", "points")
MAX_SCORE_FIELDS = ("maxScore", "pointsPossible")
PERCENT_FIELDS = ("percentage", "percent")

_FINAL_WORDS = ("final", "exam", "midterm", "overall")
_QUIZ_WORDS = ("quiz", "test")
_ASSIGN_WORDS = ("assign", "homework", "project")


@dataclass(frozen=True)
class Grade:
    subject_key: str
    subject_name: str | None
    grade_value: str
    credits: float = 1.0

    @property
    def numeric_value(self) -> float:
        return float(self.grade_value)


def classify_assessment(type_text: str | None, subject_record_count: int) -> str:
    """Pick the bucket for a record from its free-text assessment type."""

    lower = (type_text or "").lower()
    if any(word in lower for word in _FINAL_WORDS):
        return BUCKET_FINAL
    if any(word in lower for word in _QUIZ_WORDS):
        return BUCKET_QUIZ
    if any(word in lower for word in _ASSIGN_WORDS):
        return BUCKET_ASSIGN
    # a lone record most likely is the overall mark for the subject
    return BUCKET_FINAL if subject_record_count == 1 else BUCKET_ASSIGN


def scale_raw_value(value: float, cap: float) -> float:
    """Map a number read without a max score onto a bucket of size ``cap``.

    Values up to the cap are taken as bucket points, values up to 100 as
    percentages, anything larger is clamped to the cap.
    """

    if value <= cap:
        return value
    if value <= 100.0:
        return value / 100.0 * cap
    return cap


def _scaled_pair(score: float | None, max_score: float | None, cap: float) -> float | None:
    if score is None or max_score is None or max_score <= 0:
        return None
    return score / max_score * cap


def _raw_grade_value(record: Mapping[str, Any]) -> float | None:
    grade = record.get("grade")
    numeric = as_number(grade)
    if numeric is not None:
        return numeric
    percent = first_number(record, PERCENT_FIELDS)
    if percent is not None:
        return percent
    return parse_percent_text(grade)


def extract_contribution(record: Mapping[str, Any], cap: float) -> float | None:
    """Points a submission contributes to a bucket of size ``cap``, or None if unscored."""

    paired = _scaled_pair(first_number(record, SCORE_FIELDS), first_number(record, MAX_SCORE_FIELDS), cap)
    if paired is not None:
        return paired

    raw = _raw_grade_value(record)
    if raw is not None:
        return scale_raw_value(raw, cap)

    detail = record.get("scoreDetail")
    if isinstance(detail, Mapping):
        return _scaled_pair(as_number(detail.get("score")), as_number(detail.get("maxScore")), cap)
    return None


def extract_attempt_contribution(attempt: Mapping[str, Any], cap: float = BUCKET_CAPS[BUCKET_QUIZ]) -> float | None:
    score = first_number(attempt, SCORE_FIELDS)
    paired = _scaled_pair(score, first_number(attempt, MAX_SCORE_FIELDS), cap)
    if paired is not None:
        return paired
    raw = score if score is not None else first_number(attempt, PERCENT_FIELDS)
    if raw is None:
        return None
    return scale_raw_value(raw, cap)


def clamp_bucket(total: float, cap: float) -> float:
    return max(0.0, min(total, cap))


@dataclass
class BucketSums:
    raw: dict[str, float] = field(default_factory=lambda: dict.fromkeys(BUCKET_CAPS, 0.0))

    def add(self, bucket: str, amount: float) -> None:
        self.raw[bucket] += amount

    def clamped(self, bucket: str) -> float:
        return clamp_bucket(self.raw[bucket], BUCKET_CAPS[bucket])

    def total(self) -> float:
        return sum(self.clamped(bucket) for bucket in BUCKET_CAPS)


@dataclass
class _SubjectGroup:
    key: str
    submissions: list[tuple[Mapping[str, Any], Mapping[str, Any] | None]] = field(default_factory=list)
    attempts: list[tuple[Mapping[str, Any], float]] = field(default_factory=list)

    @property
    def record_count(self) -> int:
        return len(self.submissions) + len(self.attempts)

    def records(self):
        yield from (record for record, _ in self.submissions)
        yield from (attempt for attempt, _ in self.attempts)


def _subject_sort_key(grade: Grade):
    if grade.subject_name is None:
        return (1, "")
    return (0, grade.subject_name.casefold())


class GradeNormalizer:
    """Builds one :class:`Grade` per subject for a student.

    The stores default to the model managers; any object offering the same
    methods works, which keeps the aggregation testable without a database.
    """

    def __init__(self, submissions=None, attempts=None, quizzes=None, assignments=None, courses=None):
        self.submissions = submissions if submissions is not None else Submission.objects
        self.attempts = attempts if attempts is not None else QuizAttempt.objects
        self.quizzes = quizzes if quizzes is not None else Quiz.objects
        self.assignments = assignments if assignments is not None else Assignment.objects
        self.courses = courses if courses is not None else Course.objects

    def compute_grades(self, student_id: str) -> list[Grade]:
        if is_blank(student_id):
            return []

        assignment_cache: dict[str, Mapping[str, Any] | None] = {}
        quiz_cache: dict[str, Mapping[str, Any] | None] = {}
        groups: dict[str, _SubjectGroup] = {}

        for record in self.submissions.list_by_student(student_id) or []:
            assignment = self._linked_assignment(record, assignment_cache)
            key = self._submission_subject_key(record, assignment)
            groups.setdefault(key, _SubjectGroup(key)).submissions.append((record, assignment))

        for attempt in self.attempts.list_for_student(student_id) or []:
            amount = extract_attempt_contribution(attempt)
            if amount is None:
                logger.debug("Skipping unscored quiz attempt %s", attempt.get("_id"))
                continue
            key = self._attempt_subject_key(attempt, quiz_cache)
            groups.setdefault(key, _SubjectGroup(key)).attempts.append((attempt, amount))

        grades = [self._grade_for(group) for group in groups.values()]
        grades.sort(key=_subject_sort_key)
        return grades

    # ---------- subject keys ----------

    def _submission_subject_key(self, record, assignment) -> str:
        key = first_field(record, SUBJECT_CODE_FIELDS) or first_field(record, SUBJECT_NAME_FIELDS)
        assignment_id = as_text(record.get("assignmentId"))
        if is_blank(key) and not is_blank(assignment_id):
            key = first_field(assignment, ASSIGNMENT_COURSE_FIELDS) or f"assignment::{assignment_id.strip()}"
        if is_blank(key):
            key = f"unknown::{uuid.uuid4().hex}"
        return normalize_key(key)

    def _attempt_subject_key(self, attempt, quiz_cache) -> str:
        key = first_field(attempt, ATTEMPT_CODE_FIELDS)
        quiz_id = as_text(attempt.get("quizId"))
        if is_blank(key) and not is_blank(quiz_id):
            quiz = self._lookup(self.quizzes.get_by_id, quiz_id, quiz_cache, "quiz")
            key = first_field(quiz, QUIZ_COURSE_FIELDS) or f"quiz::{quiz_id.strip()}"
        if is_blank(key):
            key = f"unknown::{uuid.uuid4().hex}"
        return normalize_key(key)

    def _linked_assignment(self, record, cache):
        assignment_id = as_text(record.get("assignmentId"))
        if is_blank(assignment_id):
            return None
        return self._lookup(self.assignments.get_by_id, assignment_id, cache, "assignment")

    @staticmethod
    def _lookup(getter, object_id: str, cache: dict, label: str):
        if object_id not in cache:
            try:
                cache[object_id] = getter(object_id)
            except NotFound:
                cache[object_id] = None
            if cache[object_id] is None:
                logger.debug("Referenced %s %s not found", label, object_id)
        return cache[object_id]

    # ---------- aggregation ----------

    def _grade_for(self, group: _SubjectGroup) -> Grade:
        sums = BucketSums()
        for record, assignment in group.submissions:
            type_text = first_field(record, ASSESSMENT_TYPE_FIELDS) or first_field(assignment, ASSIGNMENT_TYPE_FIELDS)
            bucket = classify_assessment(type_text, group.record_count)
            amount = extract_contribution(record, BUCKET_CAPS[bucket])
            if amount is None:
                logger.debug("No score found on submission %s", record.get("_id"))
                amount = 0.0
            sums.add(bucket, amount)
        for _, amount in group.attempts:
            sums.add(BUCKET_QUIZ, amount)

        subject_name, credits = self._describe(group)
        return Grade(
            subject_key=group.key,
            subject_name=subject_name,
            grade_value=f"{sums.total():.2f}",
            credits=credits,
        )

    def _describe(self, group: _SubjectGroup) -> tuple[str, float]:
        subject_name = None
        credits = None
        for record in group.records():
            subject_name = subject_name or first_field(record, DISPLAY_NAME_FIELDS)
            if credits is None:
                credits = positive_credits(record.get("credits"))
            if subject_name and credits is not None:
                break

        if is_blank(subject_name) or credits is None:
            course = self._lookup(self.courses.find_by_code, group.key, {}, "course")
            if course:
                subject_name = subject_name or first_field(course, COURSE_NAME_FIELDS)
                if credits is None:
                    credits = positive_credits(course.get("credits"))

        return subject_name or group.key, credits if credits is not None else 1.0


def compute_grades(student_id: str) -> list[Grade]:
    return GradeNormalizer().compute_grades(student_id)
