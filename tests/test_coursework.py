# tests/test_coursework.py

import pytest
from django.core.exceptions import PermissionDenied

from academics.coursework import (
    AssignmentService,
    CourseService,
    QuizService,
    SubmissionService,
    auto_grade,
)
from academics.enrollment import EnrollmentService
from academics.exceptions import DuplicateAttempt, InvalidArgument, NotFound
from academics.grading import compute_grades
from academics.models import QuizAttempt

QUESTIONS = [
    {"id": "q1", "type": "mcq", "correct": "B"},
    {"id": "q2", "type": "MCQ", "correct": "d"},
    {"id": "q3", "type": "mcq", "correct": "a"},
    {"id": "q4", "type": "mcq", "correct": "c"},
]


# === auto grading ===


def test_auto_grade_multiple_choice():
    score, max_score, fully_graded = auto_grade(QUESTIONS, {"q1": " b ", "q2": "D", "q3": "c"})
    assert (score, max_score, fully_graded) == (2.0, 4.0, True)


def test_auto_grade_open_question_needs_a_grader():
    questions = QUESTIONS[:1] + [{"id": "essay", "type": "text"}, "not a question"]
    score, max_score, fully_graded = auto_grade(questions, {"q1": "b", "essay": "..."})
    assert score == 1.0
    assert max_score == 2.0
    assert fully_graded is False


def test_auto_grade_without_questions():
    assert auto_grade(None, None) == (0.0, 0.0, True)


# === courses ===


@pytest.mark.django_db
def test_course_writes_need_staff_role(student_auth, parent_auth):
    for auth in (student_auth, parent_auth, None):
        with pytest.raises(PermissionDenied):
            CourseService(auth).create_course("CS999", "Secret")


@pytest.mark.django_db
def test_professor_manages_courses(professor_auth):
    service = CourseService(professor_auth)
    service.create_course("CS201", "Data Structures", credits=3)

    with pytest.raises(InvalidArgument):
        service.create_course("CS201", "Again")
    with pytest.raises(InvalidArgument):
        service.create_course(" ", "No code")

    assert service.update_course("CS201", title="Data Structures and Algorithms")
    assert service.find_by_code("CS201")["title"] == "Data Structures and Algorithms"
    with pytest.raises(InvalidArgument):
        service.update_course("CS201", code="CS202")
    with pytest.raises(NotFound):
        service.update_course("XX000", title="Missing")

    assert service.delete_course("CS201")
    assert service.find_by_code("CS201") is None


@pytest.mark.django_db
def test_only_admin_assigns_staff(admin_auth, professor_auth, sample_course):
    with pytest.raises(PermissionDenied):
        CourseService(professor_auth).assign_staff_to_course("CS101", "P1001")

    service = CourseService(admin_auth)
    assert service.assign_staff_to_course("CS101", "P1001")
    assert service.assign_staff_to_course("CS101", "P1001")
    assert service.find_by_code("CS101")["assignedStaff"] == ["P1001"]
    assert [c["code"] for c in service.list_by_staff("P1001")] == ["CS101"]
    assert service.assign_staff_to_course("NOPE", "P1001") is False


# === assignments and submissions ===


@pytest.mark.django_db
def test_assignment_visibility_follows_enrollment(make_student):
    make_student(core={"gpa": 3.5})
    assignments = AssignmentService()
    assignment_id = assignments.create_assignment("CS101", "Homework 1", points=10, assignment_type="homework")

    assert assignments.list_by_course_for_student("CS101", "20P1076") == []
    EnrollmentService().register_student_to_course("20P1076", "CS101")
    [visible] = assignments.list_by_course_for_student("CS101", "20P1076")
    assert visible["_id"] == assignment_id
    assert visible["type"] == "homework"

    assert assignments.delete(assignment_id)
    assert assignments.get_by_id(assignment_id) is None
    assert assignments.list_by_course("CS101") == []


@pytest.mark.django_db
def test_assignment_requires_course_and_title():
    with pytest.raises(InvalidArgument):
        AssignmentService().create_assignment("", "Homework")


def test_subject_id_for():
    assert AssignmentService.subject_id_for({"courseCode": "CS101", "_id": "4"}) == "CS101"
    assert AssignmentService.subject_id_for({"courseCode": " ", "_id": "4"}) == "course::4"
    assert AssignmentService.subject_id_for(None) is None


@pytest.mark.django_db
def test_submit_and_grade_flow():
    assignment_id = AssignmentService().create_assignment("CS101", "Final Exam", points=100, assignment_type="final")
    service = SubmissionService()

    submission_id = service.submit(assignment_id, "20P1076", {"text": "answer"})
    assert service.get_by_id(submission_id)["status"] == "submitted"

    assert service.grade_submission(submission_id, "72", feedback="ok", grader="carol")
    graded = service.get_submission_for_student(assignment_id, "20P1076")
    assert graded["status"] == "graded"
    assert graded["grade"] == 72.0
    assert graded["grader"] == "carol"

    [grade] = compute_grades("20P1076")
    assert grade.subject_key == "CS101"
    # 72 of 100 in the final bucket
    assert grade.grade_value == "43.20"


@pytest.mark.django_db
def test_submit_unknown_assignment():
    with pytest.raises(NotFound):
        SubmissionService().submit("999", "20P1076")


@pytest.mark.django_db
def test_grade_must_be_numeric():
    assignment_id = AssignmentService().create_assignment("CS101", "HW")
    service = SubmissionService()
    submission_id = service.submit(assignment_id, "20P1076")
    with pytest.raises(InvalidArgument):
        service.grade_submission(submission_id, "excellent")
    assert service.grade_submission("999", 10) is False


# === quizzes ===


@pytest.mark.django_db
def test_quiz_attempt_is_auto_graded():
    service = QuizService()
    quiz_id = service.create_quiz("CS101", "Quiz 1", questions=QUESTIONS)

    attempt_id = service.submit_attempt(quiz_id, "20P1076", {"q1": "b", "q2": "d", "q3": "a"})
    attempt = service.get_attempt_by_id(attempt_id)
    assert attempt["score"] == 3.0
    assert attempt["maxScore"] == 4.0
    assert attempt["percent"] == 75.0
    assert attempt["graded"] is True

    [grade] = compute_grades("20P1076")
    assert grade.subject_key == "CS101"
    assert grade.grade_value == "15.00"


@pytest.mark.django_db
def test_second_attempt_is_rejected():
    service = QuizService()
    quiz_id = service.create_quiz("CS101", "Quiz 1", questions=QUESTIONS)
    service.submit_attempt(quiz_id, "20P1076", {"q1": "b"})

    with pytest.raises(DuplicateAttempt):
        service.submit_attempt(quiz_id, "20P1076", {"q1": "a"})
    assert QuizAttempt.objects.count() == 1
    assert service.has_attempt(quiz_id, "20P1076")
    assert not service.has_attempt(quiz_id, "20P1077")


@pytest.mark.django_db
def test_attempt_on_missing_quiz():
    with pytest.raises(NotFound):
        QuizService().submit_attempt("404", "20P1076", {})


@pytest.mark.django_db
def test_manual_grading_recomputes_percent():
    service = QuizService()
    quiz_id = service.create_quiz("CS101", "Essay quiz", questions=QUESTIONS[:1] + [{"id": "e1", "type": "text"}])
    attempt_id = service.submit_attempt(quiz_id, "20P1076", {"q1": "b", "e1": "long answer"})
    assert service.get_attempt_by_id(attempt_id)["graded"] is False

    assert service.grade_attempt(attempt_id, 1.5, feedback="partial", grader="carol")
    attempt = service.get_attempt_by_id(attempt_id)
    assert attempt["score"] == 1.5
    assert attempt["percent"] == 75.0
    assert attempt["graded"] is True
    assert [a["_id"] for a in service.list_attempts_for_quiz(quiz_id)] == [attempt_id]

    with pytest.raises(NotFound):
        service.grade_attempt("999", 1)
    with pytest.raises(InvalidArgument):
        service.grade_attempt(attempt_id, None)


@pytest.mark.django_db
def test_delete_quiz():
    service = QuizService()
    quiz_id = service.create_quiz("CS101", "Quiz 1")
    assert [q["_id"] for q in service.list_by_course("CS101")] == [quiz_id]
    assert service.delete_quiz(quiz_id)
    assert service.get_quiz_by_id(quiz_id) is None
