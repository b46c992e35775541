import os
import sys
from itertools import count
from pathlib import Path

import pytest
from bson import ObjectId

# Must be set before the package reads its configuration
os.environ.setdefault("JWT_SECRET", "test-secret-key-with-enough-length-for-hs256")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("QUESTION_CACHE_TTL_SECONDS", "30")

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from fastapi.testclient import TestClient

from ccc_mocktest.api import dependencies
from ccc_mocktest.core.exceptions import DuplicateUserError
from ccc_mocktest.core.security import create_access_token
from ccc_mocktest.core.utils import QuestionBankCache
from ccc_mocktest.main import app
from ccc_mocktest.services.auth_service import AuthService
from ccc_mocktest.services.question_service import QuestionService
from ccc_mocktest.services.test_service import TestService


_clock = count()


def _matches(document, value):
    return str(document.get("_id")) == str(value)


class FakeUserStore:
    def __init__(self):
        self.users = []

    async def find_by_roll_number(self, roll_number):
        return next((dict(u) for u in self.users if u["rollNumber"] == roll_number), None)

    async def find_by_id(self, user_id):
        return next((dict(u) for u in self.users if _matches(u, user_id)), None)

    async def find_many_by_ids(self, user_ids):
        wanted = {str(value) for value in user_ids}
        return [dict(u) for u in self.users if str(u["_id"]) in wanted]

    async def create(self, document):
        if any(u["rollNumber"] == document["rollNumber"] for u in self.users):
            raise DuplicateUserError()
        stored = dict(document, _id=ObjectId(), createdAt=next(_clock))
        self.users.append(stored)
        return dict(stored)

    async def count_students(self):
        return sum(1 for u in self.users if u.get("role") == "student")


class FakeQuestionStore:
    def __init__(self):
        self.questions = []
        self.list_calls = 0

    async def list_all(self):
        self.list_calls += 1
        return [dict(q) for q in self.questions]

    async def get_by_id(self, question_id):
        return next((dict(q) for q in self.questions if _matches(q, question_id)), None)

    async def get_many(self, question_ids):
        wanted = {str(value) for value in question_ids}
        return [dict(q) for q in self.questions if str(q["_id"]) in wanted]

    async def create(self, document):
        stamp = next(_clock)
        stored = dict(document, _id=ObjectId(), createdAt=stamp, updatedAt=stamp)
        self.questions.append(stored)
        return dict(stored)

    async def update(self, question_id, fields):
        for question in self.questions:
            if _matches(question, question_id):
                question.update(fields, updatedAt=next(_clock))
                return dict(question)
        return None

    async def delete(self, question_id):
        before = len(self.questions)
        self.questions = [q for q in self.questions if not _matches(q, question_id)]
        return len(self.questions) < before

    async def count(self):
        return len(self.questions)


class FakeResultStore:
    def __init__(self):
        self.results = []

    def _newest_first(self, results):
        return sorted(results, key=lambda r: r["createdAt"], reverse=True)

    async def create(self, document):
        stamp = next(_clock)
        stored = dict(document, _id=ObjectId(), createdAt=stamp, updatedAt=stamp)
        self.results.append(stored)
        return dict(stored)

    async def find_by_student(self, student_id):
        mine = [r for r in self.results if str(r["student"]) == str(student_id)]
        return self._newest_first(mine)

    async def latest_by_student(self, student_id):
        mine = await self.find_by_student(student_id)
        return mine[0] if mine else None

    async def latest_by_roll_number(self, roll_number):
        theirs = self._newest_first([r for r in self.results if r["rollNumber"] == roll_number])
        return theirs[0] if theirs else None

    async def count_by_student(self, student_id):
        return len(await self.find_by_student(student_id))

    async def find_all(self):
        return self._newest_first(self.results)

    async def aggregate_scores(self):
        scores = [r["score"] for r in self.results]
        return {
            "count": len(scores),
            "total": sum(scores),
            "highest": max(scores) if scores else 0
        }


@pytest.fixture
def user_store():
    return FakeUserStore()


@pytest.fixture
def question_store():
    return FakeQuestionStore()


@pytest.fixture
def result_store():
    return FakeResultStore()


@pytest.fixture
def question_cache():
    return QuestionBankCache(ttl=30)


@pytest.fixture
def services(user_store, question_store, result_store, question_cache):
    question_service = QuestionService(question_store, question_cache)
    return {
        "auth": AuthService(user_store),
        "questions": question_service,
        "tests": TestService(question_service, result_store, user_store, allow_multiple_attempts=True)
    }


@pytest.fixture
def client(services):
    app.dependency_overrides[dependencies.get_auth_service] = lambda: services["auth"]
    app.dependency_overrides[dependencies.get_question_service] = lambda: services["questions"]
    app.dependency_overrides[dependencies.get_test_service] = lambda: services["tests"]
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


def bearer(user_id, role):
    return {"Authorization": f"Bearer {create_access_token(str(user_id), role)}"}


@pytest.fixture
def token_headers():
    """Build auth headers for an arbitrary id and role"""
    return bearer


@pytest.fixture
def register(client):
    """Register a user through the API and return (user, auth headers)"""

    def _register(roll_number, role="student", name=None, password="secret123"):
        response = client.post("/api/auth/register", json={
            "name": name or f"User {roll_number}",
            "rollNumber": roll_number,
            "password": password,
            "role": role,
        })
        assert response.status_code == 201, response.text
        user = response.json()["user"]
        return user, bearer(user["id"], role)

    return _register


@pytest.fixture
def admin_headers(register):
    _, headers = register("ADMIN-1", role="admin", name="Admin")
    return headers


@pytest.fixture
def add_question(question_store):
    """Insert a raw question document straight into the store"""

    def _add(**fields):
        document = {
            "questionText": fields.pop("questionText", "Question?"),
            "options": fields.pop("options", ["A", "B"]),
            "questionTextHi": fields.pop("questionTextHi", ""),
            "optionsHi": fields.pop("optionsHi", []),
        }
        document.update(fields)
        question = dict(document, _id=ObjectId(), createdAt=next(_clock), updatedAt=next(_clock))
        question_store.questions.append(question)
        return question

    return _add
