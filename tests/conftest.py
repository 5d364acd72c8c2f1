# tests/conftest.py

import pytest

from academics.grading import GradeNormalizer
from academics.models import Course, StudentEntity
from academics.permissions import ROLE_ADMIN, ROLE_PARENT, ROLE_PROFESSOR, ROLE_STUDENT, AuthContext


class FakeStore:
    """In-memory stand-in for the document managers used by the grading core."""

    def __init__(self, documents=None, key="_id"):
        self.documents = list(documents or [])
        self.key = key
        self.lookups = []

    def _find(self, field, value):
        self.lookups.append(value)
        for document in self.documents:
            if str(document.get(field)) == str(value):
                return document
        return None

    def get_by_id(self, object_id):
        return self._find(self.key, object_id)

    def find_by_code(self, code):
        return self._find("code", code)

    def list_by_student(self, student_id):
        return [d for d in self.documents if d.get("studentId") == student_id]

    def list_for_student(self, student_id):
        return self.list_by_student(student_id)


@pytest.fixture
def make_normalizer():
    def factory(submissions=(), attempts=(), quizzes=(), assignments=(), courses=()):
        return GradeNormalizer(
            submissions=FakeStore(submissions),
            attempts=FakeStore(attempts),
            quizzes=FakeStore(quizzes),
            assignments=FakeStore(assignments),
            courses=FakeStore(courses),
        )

    return factory


@pytest.fixture
def admin_auth():
    return AuthContext(user_id="admin", roles=frozenset({ROLE_ADMIN}))


@pytest.fixture
def professor_auth():
    return AuthContext(user_id="P1001", roles=frozenset({ROLE_PROFESSOR}))


@pytest.fixture
def student_auth():
    return AuthContext(user_id="u-20P1076", roles=frozenset({ROLE_STUDENT}), linked_entity_id="20P1076")


@pytest.fixture
def parent_auth():
    return AuthContext(user_id="u-parent", roles=frozenset({ROLE_PARENT}), linked_entity_id="PAR-1")


@pytest.fixture
def make_student(db):
    def factory(entity_id="20P1076", core=None, attributes=None, parent_id=""):
        return StudentEntity.objects.create(
            entity_id=entity_id,
            core=core if core is not None else {},
            attributes=attributes if attributes is not None else [],
            parent_id=parent_id,
        )

    return factory


@pytest.fixture
def sample_course(db):
    return Course.objects.create(code="CS101", title="Intro to Programming", credits=3)
