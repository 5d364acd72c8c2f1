# Generated manually for initial Django models
from django.db import migrations, models
import django.utils.timezone


class Migration(migrations.Migration):
    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="StudentEntity",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("data", models.JSONField(blank=True, default=dict, verbose_name="附加字段")),
                ("entity_id", models.CharField(max_length=64, unique=True, verbose_name="实体编号")),
                ("entity_type", models.CharField(default="student", max_length=32, verbose_name="实体类型")),
                ("core", models.JSONField(blank=True, default=dict, verbose_name="基本信息")),
                ("attributes", models.JSONField(blank=True, default=list, verbose_name="扩展属性")),
                ("parent_id", models.CharField(blank=True, db_index=True, max_length=64, verbose_name="家长编号")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "verbose_name": "学生档案",
                "verbose_name_plural": "学生档案",
                "ordering": ["entity_id"],
            },
        ),
        migrations.CreateModel(
            name="Course",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("data", models.JSONField(blank=True, default=dict, verbose_name="附加字段")),
                ("code", models.CharField(max_length=32, unique=True, verbose_name="课程代码")),
                ("title", models.CharField(max_length=255, verbose_name="课程名称")),
                ("name", models.CharField(blank=True, max_length=255, verbose_name="课程简称")),
                (
                    "credits",
                    models.DecimalField(blank=True, decimal_places=1, max_digits=4, null=True, verbose_name="学分"),
                ),
                ("description", models.TextField(blank=True, verbose_name="课程简介")),
                ("assigned_staff", models.JSONField(blank=True, default=list, verbose_name="任课教师")),
            ],
            options={
                "verbose_name": "课程",
                "verbose_name_plural": "课程",
                "ordering": ["code"],
            },
        ),
        migrations.CreateModel(
            name="Assignment",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("data", models.JSONField(blank=True, default=dict, verbose_name="附加字段")),
                ("course_code", models.CharField(db_index=True, max_length=32, verbose_name="课程代码")),
                ("subject_id", models.CharField(blank=True, max_length=64, verbose_name="科目编号")),
                ("title", models.CharField(max_length=255, verbose_name="标题")),
                ("assignment_type", models.CharField(blank=True, max_length=64, verbose_name="类型")),
                ("category", models.CharField(blank=True, max_length=64, verbose_name="类别")),
                ("description", models.TextField(blank=True, verbose_name="说明")),
                ("due_date", models.DateTimeField(blank=True, null=True, verbose_name="截止时间")),
                ("points", models.PositiveIntegerField(default=0, verbose_name="满分")),
                ("created_by", models.CharField(blank=True, max_length=64, verbose_name="创建人")),
                ("visible", models.BooleanField(default=True, verbose_name="学生可见")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
            ],
            options={
                "verbose_name": "作业",
                "verbose_name_plural": "作业",
                "ordering": ["course_code", "created_at"],
            },
        ),
        migrations.CreateModel(
            name="Submission",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("data", models.JSONField(blank=True, default=dict, verbose_name="附加字段")),
                ("student_id", models.CharField(db_index=True, max_length=64, verbose_name="学生编号")),
                ("assignment_id", models.CharField(blank=True, db_index=True, max_length=64, verbose_name="作业编号")),
                ("submitted_at", models.DateTimeField(default=django.utils.timezone.now, verbose_name="提交时间")),
                (
                    "status",
                    models.CharField(
                        choices=[("submitted", "已提交"), ("graded", "已评分")],
                        default="submitted",
                        max_length=16,
                        verbose_name="状态",
                    ),
                ),
                ("answers", models.JSONField(blank=True, default=dict, verbose_name="答案")),
                ("grade", models.JSONField(blank=True, null=True, verbose_name="成绩")),
                ("feedback", models.TextField(blank=True, verbose_name="评语")),
                ("grader", models.CharField(blank=True, max_length=64, verbose_name="评分人")),
                ("graded_at", models.DateTimeField(blank=True, null=True, verbose_name="评分时间")),
            ],
            options={
                "verbose_name": "作业提交",
                "verbose_name_plural": "作业提交",
                "ordering": ["submitted_at"],
            },
        ),
        migrations.CreateModel(
            name="Quiz",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("data", models.JSONField(blank=True, default=dict, verbose_name="附加字段")),
                ("course_code", models.CharField(db_index=True, max_length=32, verbose_name="课程代码")),
                ("subject_id", models.CharField(blank=True, max_length=64, verbose_name="科目编号")),
                ("title", models.CharField(max_length=255, verbose_name="标题")),
                ("time_limit_minutes", models.PositiveIntegerField(default=0, verbose_name="限时（分钟）")),
                ("questions", models.JSONField(blank=True, default=list, verbose_name="题目")),
                ("created_by", models.CharField(blank=True, max_length=64, verbose_name="创建人")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
            ],
            options={
                "verbose_name": "测验",
                "verbose_name_plural": "测验",
                "ordering": ["course_code", "created_at"],
            },
        ),
        migrations.CreateModel(
            name="QuizAttempt",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("data", models.JSONField(blank=True, default=dict, verbose_name="附加字段")),
                ("quiz_id", models.CharField(db_index=True, max_length=64, verbose_name="测验编号")),
                ("student_id", models.CharField(db_index=True, max_length=64, verbose_name="学生编号")),
                ("answers", models.JSONField(blank=True, default=dict, verbose_name="答案")),
                ("score", models.FloatField(blank=True, null=True, verbose_name="得分")),
                ("max_score", models.FloatField(blank=True, null=True, verbose_name="满分")),
                ("percent", models.FloatField(blank=True, null=True, verbose_name="得分率")),
                ("graded", models.BooleanField(default=False, verbose_name="已评分")),
                ("grader", models.CharField(blank=True, max_length=64, verbose_name="评分人")),
                ("feedback", models.TextField(blank=True, verbose_name="评语")),
                ("submitted_at", models.DateTimeField(default=django.utils.timezone.now, verbose_name="提交时间")),
                ("graded_at", models.DateTimeField(blank=True, null=True, verbose_name="评分时间")),
            ],
            options={
                "verbose_name": "测验作答",
                "verbose_name_plural": "测验作答",
                "ordering": ["-submitted_at"],
            },
        ),
        migrations.CreateModel(
            name="Enrollment",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("data", models.JSONField(blank=True, default=dict, verbose_name="附加字段")),
                ("student_id", models.CharField(db_index=True, max_length=64, verbose_name="学生编号")),
                ("course_code", models.CharField(db_index=True, max_length=32, verbose_name="课程代码")),
                ("registered_at", models.DateTimeField(default=django.utils.timezone.now, verbose_name="选课时间")),
            ],
            options={
                "verbose_name": "选课记录",
                "verbose_name_plural": "选课记录",
                "ordering": ["registered_at"],
            },
        ),
        migrations.AddConstraint(
            model_name="quizattempt",
            constraint=models.UniqueConstraint(fields=("quiz_id", "student_id"), name="quizattempt_one_per_student"),
        ),
        migrations.AddConstraint(
            model_name="enrollment",
            constraint=models.UniqueConstraint(fields=("student_id", "course_code"), name="enrollment_one_per_course"),
        ),
    ]
