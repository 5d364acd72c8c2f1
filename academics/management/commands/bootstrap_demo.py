"""Create a small demo dataset and print each student's grade report."""
from __future__ import annotations

from django.core.management.base import BaseCommand

from academics.coursework import AssignmentService, QuizService, SubmissionService
from academics.enrollment import EnrollmentService
from academics.exceptions import ServiceError
from academics.models import Assignment, Course, Quiz, StudentEntity
from academics.parents import ParentService
from academics.permissions import ROLE_ADMIN, AuthContext


class Command(BaseCommand):
    help = "Seed a small dataset (few dozen records) for quick demo sessions"

    def handle(self, *args, **options):
        self.stdout.write(self.style.WARNING("Creating compact demo data..."))

        courses = [
            ("CS101", "程序设计基础", 3.0),
            ("CS201", "数据结构", 3.0),
            ("MA101", "高等数学", 4.0),
            ("PH101", "大学物理", 2.0),
        ]
        for code, title, credits in courses:
            Course.objects.get_or_create(code=code, defaults={"title": title, "credits": credits})

        students = [
            ("20P1001", "Alice", {"gpa": 3.4}, [], "P9001"),
            ("20P1002", "Bob", {}, [{"key": "GPA", "value": "1.8"}], "P9002"),
        ]
        for entity_id, name, core, attributes, parent_id in students:
            StudentEntity.objects.get_or_create(
                entity_id=entity_id,
                defaults={"core": {"name": name, **core}, "attributes": attributes, "parent_id": parent_id},
            )

        assignments = AssignmentService()
        submissions = SubmissionService()
        quizzes = QuizService()
        enrollment = EnrollmentService()

        homework_id = self._assignment_id(assignments, "CS101", "Homework 1", points=10, assignment_type="homework")
        final_id = self._assignment_id(assignments, "CS101", "Final Exam", points=100, assignment_type="final")
        quiz = Quiz.objects.filter(course_code="CS101", title="Quiz 1").first()
        if quiz is not None:
            quiz_id = str(quiz.pk)
        else:
            quiz_id = quizzes.create_quiz(
                "CS101",
                "Quiz 1",
                questions=[
                    {"id": "q1", "type": "mcq", "correct": "b"},
                    {"id": "q2", "type": "mcq", "correct": "d"},
                ],
            )

        for entity_id, *_ in students:
            for code, *_ in courses[:3]:
                try:
                    enrollment.register_student_to_course(entity_id, code)
                except ServiceError as exc:
                    self.stdout.write(self.style.NOTICE(str(exc)))

            if submissions.get_submission_for_student(homework_id, entity_id) is None:
                homework = submissions.submit(homework_id, entity_id, {"text": "..."})
                submissions.grade_submission(homework, 85, feedback="不错", grader="carol")
            if submissions.get_submission_for_student(final_id, entity_id) is None:
                final = submissions.submit(final_id, entity_id)
                submissions.grade_submission(final, 72, grader="carol")
            if not quizzes.has_attempt(quiz_id, entity_id):
                quizzes.submit_attempt(quiz_id, entity_id, {"q1": "B", "q2": "a"})

        reports = ParentService()
        admin_auth = AuthContext(user_id="admin", roles=frozenset({ROLE_ADMIN}))
        for entity_id, name, *_ in students:
            report = reports.grade_report(admin_auth, entity_id)
            self.stdout.write(f"{name} ({entity_id}) GPA {report['gpa']:.2f}")
            for grade in report["grades"]:
                self.stdout.write(f"  {grade.subject_key} {grade.subject_name}: {grade.grade_value}")

        self.stdout.write(self.style.SUCCESS("Compact demo data ready."))

    @staticmethod
    def _assignment_id(service, course_code, title, **fields):
        existing = Assignment.objects.filter(course_code=course_code, title=title).first()
        if existing is not None:
            return str(existing.pk)
        return service.create_assignment(course_code, title, **fields)
