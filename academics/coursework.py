"""Services for courses, assignments, submissions and quizzes."""
from __future__ import annotations

import logging
from collections.abc import Mapping

from django.db import IntegrityError, transaction
from django.utils import timezone

from .exceptions import DuplicateAttempt, InvalidArgument, NotFound, Unparseable
from .models import Assignment, Course, Enrollment, Quiz, QuizAttempt, Submission
from .permissions import ROLE_ADMIN, ROLE_PROFESSOR, AuthContext, require_role
from .resolvers import as_number, as_text, is_blank, to_number

logger = logging.getLogger(__name__)

COURSE_EDITABLE_FIELDS = {"title", "name", "credits", "description", "assigned_staff"}


def _require_score(value, label: str) -> float:
    try:
        return to_number(value)
    except Unparseable as exc:
        raise InvalidArgument(f"{label}必须是数字。") from exc


class CourseService:
    """Course catalogue; writes need the Admin or Professor role."""

    def __init__(self, auth: AuthContext | None, courses=None):
        self.auth = auth
        self.courses = courses if courses is not None else Course.objects

    def list_all(self) -> list[dict]:
        return self.courses.list_all()

    def list_by_staff(self, staff_id: str) -> list[dict]:
        return self.courses.list_by_staff(staff_id)

    def find_by_code(self, code: str) -> dict | None:
        return self.courses.find_by_code(code)

    def create_course(self, code: str, title: str, credits=None, name: str = "", description: str = "") -> str:
        require_role(self.auth, ROLE_ADMIN, ROLE_PROFESSOR, action="创建课程")
        if is_blank(code) or is_blank(title):
            raise InvalidArgument("课程代码和课程名称不能为空。")
        if self.courses.find_by_code(code) is not None:
            raise InvalidArgument(f"课程代码 {code} 已存在。")
        return self.courses.insert(code=code, title=title, name=name, credits=credits, description=description)

    def update_course(self, code: str, /, **changes) -> bool:
        require_role(self.auth, ROLE_ADMIN, ROLE_PROFESSOR, action="修改课程")
        unknown = set(changes) - COURSE_EDITABLE_FIELDS
        if unknown:
            raise InvalidArgument(f"不可修改的字段：{', '.join(sorted(unknown))}")
        if self.courses.find_by_code(code) is None:
            raise NotFound(f"课程 {code} 不存在。")
        return self.courses.update_by_code(code, **changes)

    def delete_course(self, code: str) -> bool:
        require_role(self.auth, ROLE_ADMIN, ROLE_PROFESSOR, action="删除课程")
        return self.courses.delete_by_code(code)

    def assign_staff_to_course(self, code: str, staff_id: str) -> bool:
        require_role(self.auth, ROLE_ADMIN, action="分配任课教师")
        course = self.courses.find_by_code(code)
        if course is None:
            return False
        staff = list(course.get("assignedStaff") or [])
        if staff_id not in staff:
            staff.append(staff_id)
        return self.courses.update_by_code(code, assigned_staff=staff)


class AssignmentService:
    def __init__(self, assignments=None, enrollments=None):
        self.assignments = assignments if assignments is not None else Assignment.objects
        self.enrollments = enrollments if enrollments is not None else Enrollment.objects

    def create_assignment(
        self,
        course_code: str,
        title: str,
        description: str = "",
        due_date=None,
        points: int = 0,
        created_by: str = "",
        assignment_type: str = "",
        category: str = "",
    ) -> str:
        if is_blank(course_code) or is_blank(title):
            raise InvalidArgument("课程代码和作业标题不能为空。")
        return self.assignments.insert(
            course_code=course_code,
            title=title,
            description=description,
            due_date=due_date,
            points=points,
            created_by=created_by,
            assignment_type=assignment_type,
            category=category,
        )

    def get_by_id(self, assignment_id) -> dict | None:
        if is_blank(as_text(assignment_id)):
            return None
        return self.assignments.get_by_id(assignment_id)

    def list_by_course(self, course_code: str | None) -> list[dict]:
        return self.assignments.list_by_course(course_code)

    def list_by_course_for_student(self, course_code: str, student_id: str) -> list[dict]:
        if is_blank(course_code) or is_blank(student_id):
            return []
        if self.enrollments.find(student_id, course_code) is None:
            return []
        return self.assignments.list_by_course(course_code)

    def delete(self, assignment_id) -> bool:
        return self.assignments.delete_by_id(assignment_id)

    @staticmethod
    def subject_id_for(assignment: Mapping | None) -> str | None:
        if not assignment:
            return None
        course_code = as_text(assignment.get("courseCode"))
        if not is_blank(course_code):
            return course_code
        object_id = assignment.get("_id")
        return f"course::{object_id}" if object_id is not None else None


class SubmissionService:
    def __init__(self, submissions=None, assignments=None):
        self.submissions = submissions if submissions is not None else Submission.objects
        self.assignments = assignments if assignments is not None else Assignment.objects

    def submit(self, assignment_id, student_id: str, answers: Mapping | None = None) -> str:
        if is_blank(student_id):
            raise InvalidArgument("学生编号不能为空。")
        if self.assignments.get_by_id(assignment_id) is None:
            raise NotFound(f"作业 {assignment_id} 不存在。")
        return self.submissions.insert(
            assignment_id=str(assignment_id),
            student_id=student_id,
            answers=dict(answers or {}),
            status="submitted",
            submitted_at=timezone.now(),
        )

    def grade_submission(self, submission_id, grade, feedback: str = "", grader: str = "") -> bool:
        value = _require_score(grade, "成绩")
        updated = self.submissions.update_by_id(
            submission_id,
            grade=value,
            feedback=feedback,
            grader=grader,
            graded_at=timezone.now(),
            status="graded",
        )
        if updated:
            logger.info("Submission %s graded %.2f by %s", submission_id, value, grader or "-")
        return updated

    def get_by_id(self, submission_id) -> dict | None:
        return self.submissions.get_by_id(submission_id)

    def list_by_student(self, student_id: str) -> list[dict]:
        return self.submissions.list_by_student(student_id)

    def list_by_assignment(self, assignment_id) -> list[dict]:
        return self.submissions.list_by_assignment(str(assignment_id))

    def get_submission_for_student(self, assignment_id, student_id: str) -> dict | None:
        if assignment_id is None or student_id is None:
            return None
        for submission in self.list_by_assignment(assignment_id):
            if as_text(submission.get("studentId")) == student_id:
                return submission
        return None


def auto_grade(questions, answers: Mapping | None) -> tuple[float, float, bool]:
    """Score multiple-choice questions at one point each.

    Returns ``(score, max_score, fully_graded)``; any non-MCQ question needs a
    human grader, so the attempt is then not fully graded.
    """

    answers = answers or {}
    questions = [question for question in questions or [] if isinstance(question, Mapping)]
    score = 0.0
    fully_graded = True
    for question in questions:
        if str(question.get("type") or "").lower() != "mcq":
            fully_graded = False
            continue
        correct = question.get("correct")
        given = answers.get(question.get("id"))
        if correct is not None and given is not None and str(correct).strip().lower() == str(given).strip().lower():
            score += 1.0
    return score, float(len(questions)), fully_graded


class QuizService:
    def __init__(self, quizzes=None, attempts=None):
        self.quizzes = quizzes if quizzes is not None else Quiz.objects
        self.attempts = attempts if attempts is not None else QuizAttempt.objects

    def create_quiz(
        self,
        course_code: str,
        title: str,
        questions: list | None = None,
        time_limit_minutes: int = 0,
        created_by: str = "",
        subject_id: str = "",
    ) -> str:
        if is_blank(course_code) or is_blank(title):
            raise InvalidArgument("课程代码和测验标题不能为空。")
        return self.quizzes.insert(
            course_code=course_code,
            subject_id=subject_id,
            title=title,
            questions=list(questions or []),
            time_limit_minutes=time_limit_minutes,
            created_by=created_by,
        )

    def get_quiz_by_id(self, quiz_id) -> dict | None:
        return self.quizzes.get_by_id(quiz_id)

    def list_by_course(self, course_code: str | None) -> list[dict]:
        return self.quizzes.list_by_course(course_code)

    def delete_quiz(self, quiz_id) -> bool:
        return self.quizzes.delete_by_id(quiz_id)

    def has_attempt(self, quiz_id, student_id: str) -> bool:
        return self.attempts.exists_for(str(quiz_id), student_id)

    def submit_attempt(self, quiz_id, student_id: str, answers: Mapping | None = None) -> str:
        if is_blank(student_id):
            raise InvalidArgument("学生编号不能为空。")
        if self.has_attempt(quiz_id, student_id):
            raise DuplicateAttempt(str(quiz_id), student_id)
        quiz = self.quizzes.get_by_id(quiz_id)
        if quiz is None:
            raise NotFound(f"测验 {quiz_id} 不存在。")

        score, max_score, fully_graded = auto_grade(quiz.get("questions"), answers)
        percent = score / max_score * 100.0 if max_score > 0 else 0.0
        try:
            with transaction.atomic():
                return self.attempts.insert(
                    quiz_id=quiz["_id"],
                    student_id=student_id,
                    answers=dict(answers or {}),
                    score=score,
                    max_score=max_score,
                    percent=percent,
                    graded=fully_graded,
                    submitted_at=timezone.now(),
                )
        except IntegrityError as exc:
            raise DuplicateAttempt(str(quiz_id), student_id) from exc

    def grade_attempt(self, attempt_id, score, feedback: str = "", grader: str = "") -> bool:
        value = _require_score(score, "得分")
        existing = self.attempts.get_by_id(attempt_id)
        if existing is None:
            raise NotFound(f"作答记录 {attempt_id} 不存在。")
        max_score = as_number(existing.get("maxScore")) or 0.0
        percent = value / max_score * 100.0 if max_score > 0 else 0.0
        return self.attempts.update_by_id(
            attempt_id,
            score=value,
            percent=percent,
            feedback=feedback,
            grader=grader,
            graded=True,
            graded_at=timezone.now(),
        )

    def get_attempt_by_id(self, attempt_id) -> dict | None:
        return self.attempts.get_by_id(attempt_id)

    def list_attempts_for_student(self, student_id: str) -> list[dict]:
        return self.attempts.list_for_student(student_id)

    def list_attempts_for_quiz(self, quiz_id) -> list[dict]:
        return self.attempts.list_by_quiz(quiz_id)
