# tests/test_commands.py

from io import StringIO

import pytest
from django.core.management import call_command

from academics.models import Assignment, Enrollment, Quiz, QuizAttempt, Submission

pytestmark = pytest.mark.django_db


def run_bootstrap():
    out = StringIO()
    call_command("bootstrap_demo", stdout=out)
    return [line for line in out.getvalue().splitlines() if line.startswith("  ") or " GPA " in line]


def test_bootstrap_demo_can_be_rerun():
    first_report = run_bootstrap()
    second_report = run_bootstrap()

    assert second_report == first_report
    assert Assignment.objects.count() == 2
    assert Quiz.objects.count() == 1
    assert Submission.objects.count() == 4
    assert QuizAttempt.objects.count() == 2
    assert Enrollment.objects.count() == 6
