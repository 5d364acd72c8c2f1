# tests/test_managers.py

from datetime import timedelta

import pytest
from django.core.exceptions import ValidationError
from django.utils import timezone

from academics.managers import parse_pk
from academics.models import Course, Enrollment, Quiz, QuizAttempt, StudentEntity, Submission

pytestmark = pytest.mark.django_db


@pytest.mark.parametrize("value, expected", [(7, 7), ("12", 12), (" 3 ", 3), ("abc", None), (True, None), (None, None)])
def test_parse_pk(value, expected):
    assert parse_pk(value) == expected


def test_document_merges_legacy_data_with_columns(sample_course):
    sample_course.data = {"department": "CS", "name": "legacy short name"}
    sample_course.save()

    document = Course.objects.find_by_code("CS101")
    assert document["_id"] == str(sample_course.pk)
    assert document["courseCode"] == "CS101"
    assert document["credits"] == 3.0
    assert document["department"] == "CS"
    # an empty column leaves the legacy value alone
    assert document["name"] == "legacy short name"


def test_get_by_id_accepts_text_ids(sample_course):
    assert Course.objects.get_by_id(str(sample_course.pk))["code"] == "CS101"
    assert Course.objects.get_by_id("not-a-number") is None
    assert Course.objects.get_by_id(sample_course.pk + 100) is None


def test_update_and_delete_by_id(sample_course):
    assert Course.objects.update_by_id(sample_course.pk, title="Programming I")
    assert Course.objects.find_by_code("CS101")["title"] == "Programming I"
    assert Course.objects.delete_by_id(str(sample_course.pk))
    assert not Course.objects.delete_by_id(str(sample_course.pk))


def test_list_by_staff(sample_course):
    Course.objects.create(code="MA101", title="Calculus", assigned_staff=["P2002"])
    sample_course.assigned_staff = ["P1001", "P2002"]
    sample_course.save()

    assert [c["code"] for c in Course.objects.list_by_staff("P2002")] == ["CS101", "MA101"]
    assert [c["code"] for c in Course.objects.list_by_staff("P1001")] == ["CS101"]
    assert Course.objects.list_by_staff("P9999") == []


def test_students_listed_by_parent(make_student):
    make_student("20P1001", parent_id="PAR-1")
    make_student("20P1002", parent_id="PAR-1")
    make_student("20P1003", parent_id="PAR-2")

    assert [s["entityId"] for s in StudentEntity.objects.list_by_parent("PAR-1")] == ["20P1001", "20P1002"]
    assert StudentEntity.objects.get_entity_by_id("20P1003")["parentId"] == "PAR-2"
    assert StudentEntity.objects.get_entity_by_id("") is None


def test_lock_for_update_keeps_existing_entity(make_student):
    make_student("20P1001", core={"gpa": 3.1}, parent_id="PAR-1")
    StudentEntity.objects.lock_for_update("20P1001")
    StudentEntity.objects.lock_for_update("20P1009")

    assert StudentEntity.objects.get_entity_by_id("20P1001")["core"] == {"gpa": 3.1}
    assert StudentEntity.objects.get_entity_by_id("20P1009")["parentId"] is None
    assert StudentEntity.objects.count() == 2


def test_student_entity_validation(make_student):
    student = make_student(attributes=[{"value": "no key"}])
    with pytest.raises(ValidationError):
        student.full_clean()


def test_quiz_attempts_newest_first():
    now = timezone.now()
    QuizAttempt.objects.create(quiz_id="1", student_id="s1", submitted_at=now - timedelta(days=2))
    QuizAttempt.objects.create(quiz_id="2", student_id="s1", submitted_at=now)
    QuizAttempt.objects.create(quiz_id="3", student_id="s2", submitted_at=now)

    assert [a["quizId"] for a in QuizAttempt.objects.list_for_student("s1")] == ["2", "1"]
    assert QuizAttempt.objects.exists_for("1", "s1")
    assert not QuizAttempt.objects.exists_for("1", "s2")


def test_submission_document_exposes_grade():
    Submission.objects.create(student_id="s1", assignment_id="4", grade=17.5, status="graded")
    [document] = Submission.objects.list_by_student("s1")
    assert document["grade"] == 17.5
    assert document["assignmentId"] == "4"


def test_quiz_list_by_course_blank_returns_all():
    Quiz.objects.create(course_code="CS101", title="Q1")
    Quiz.objects.create(course_code="MA101", title="Q2")
    assert len(Quiz.objects.list_by_course("")) == 2
    assert [q["title"] for q in Quiz.objects.list_by_course("MA101")] == ["Q2"]


def test_distinct_course_count():
    for code in ("CS101", "MA101", "PH101"):
        Enrollment.objects.create(student_id="s1", course_code=code)
    Enrollment.objects.create(student_id="s2", course_code="CS101")

    assert Enrollment.objects.count_distinct_courses_by_student("s1") == 3
    assert Enrollment.objects.count_distinct_courses_by_student("nobody") == 0
