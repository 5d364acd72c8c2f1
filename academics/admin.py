"""Admin configuration for students, courses, coursework and enrollment."""
from django import forms
from django.contrib import admin, messages
from django.contrib.admin.helpers import ActionForm

from .enrollment import EnrollmentService, gpa_from_entity
from .exceptions import ServiceError
from .gpa import compute_gpa
from .grading import GradeNormalizer
from .models import (
    Assignment,
    Course,
    Enrollment,
    Quiz,
    QuizAttempt,
    StudentEntity,
    Submission,
)


class RegisterCourseActionForm(ActionForm):
    course_code = forms.CharField(label="课程代码", required=False)


@admin.register(StudentEntity)
class StudentEntityAdmin(admin.ModelAdmin):
    list_display = ("entity_id", "entity_type", "parent_id", "recorded_gpa", "coursework_gpa", "updated_at")
    list_filter = ("entity_type",)
    search_fields = ("entity_id", "parent_id")
    action_form = RegisterCourseActionForm
    actions = ["register_to_course"]

    @admin.display(description="档案绩点")
    def recorded_gpa(self, obj):
        return f"{gpa_from_entity(obj.as_document()):.2f}"

    @admin.display(description="课业绩点")
    def coursework_gpa(self, obj):
        return f"{compute_gpa(GradeNormalizer().compute_grades(obj.entity_id)):.2f}"

    @admin.action(description="为选定学生选课（受绩点上限限制）")
    def register_to_course(self, request, queryset):
        course_code = (request.POST.get("course_code") or "").strip()
        if not course_code:
            self.message_user(request, "请先在操作表单中填写课程代码。", level=messages.ERROR)
            return

        service = EnrollmentService()
        total_added = 0
        for entity in queryset:
            try:
                service.register_student_to_course(entity.entity_id, course_code)
            except ServiceError as exc:
                self.message_user(request, f"{entity.entity_id}：{exc}", level=messages.WARNING)
                continue
            total_added += 1

        if total_added:
            self.message_user(request, f"已成功为 {total_added} 位学生选课 {course_code}。", level=messages.SUCCESS)
        else:
            self.message_user(request, "未添加新的选课记录。", level=messages.INFO)


@admin.register(Course)
class CourseAdmin(admin.ModelAdmin):
    list_display = ("code", "title", "credits")
    search_fields = ("code", "title", "name")


@admin.register(Assignment)
class AssignmentAdmin(admin.ModelAdmin):
    list_display = ("title", "course_code", "assignment_type", "category", "due_date", "visible")
    list_filter = ("assignment_type", "visible")
    search_fields = ("title", "course_code")


@admin.register(Submission)
class SubmissionAdmin(admin.ModelAdmin):
    list_display = ("student_id", "assignment_id", "status", "grade", "submitted_at", "graded_at")
    list_filter = ("status",)
    search_fields = ("student_id", "assignment_id")


@admin.register(Quiz)
class QuizAdmin(admin.ModelAdmin):
    list_display = ("title", "course_code", "time_limit_minutes", "created_at")
    search_fields = ("title", "course_code")


@admin.register(QuizAttempt)
class QuizAttemptAdmin(admin.ModelAdmin):
    list_display = ("student_id", "quiz_id", "score", "max_score", "percent", "graded")
    list_filter = ("graded",)
    search_fields = ("student_id", "quiz_id")


@admin.register(Enrollment)
class EnrollmentAdmin(admin.ModelAdmin):
    list_display = ("student_id", "course_code", "registered_at")
    list_filter = ("course_code",)
    search_fields = ("student_id", "course_code")
