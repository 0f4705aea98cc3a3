"""
Shared fixtures and in-memory collaborators for quiz generation tests
"""
import asyncio
import random
import threading
import uuid
from datetime import datetime, timezone

import pytest

from app.models import User
from app.services.quiz_assembler import QuizAssembler
from app.services.quiz_generator_service import AutoQuizGeneratorService


class FakeQuestionService:
    """Returns canned questions; can fail or delay specific calls"""

    def __init__(self, fail_on_calls=(), fail_topics=(), delay_for_call=None, points=1):
        self.fail_on_calls = set(fail_on_calls)
        self.fail_topics = set(fail_topics)
        self.delay_for_call = delay_for_call
        self.points = points
        self.requests = []
        self._lock = threading.Lock()

    async def generate_questions(self, request):
        with self._lock:
            call_index = len(self.requests)
            self.requests.append(request.model_copy())

        if self.delay_for_call is not None:
            await asyncio.sleep(self.delay_for_call(call_index))

        if call_index in self.fail_on_calls or request.topic in self.fail_topics:
            raise RuntimeError(f"backend unavailable for {request.topic}")

        return [
            {
                "question": f"{request.topic} question {i + 1}?",
                "options": ["A", "B", "C", "D"],
                "correct_answer": "A",
                "explanation": None,
                "points": self.points,
                "difficulty": request.difficulty.value,
            }
            for i in range(request.question_count)
        ]


class FakeQuizRepository:
    def __init__(self, fail=False):
        self.fail = fail
        self.saved = []
        self._lock = threading.Lock()

    def save(self, quiz):
        if self.fail:
            raise RuntimeError("database unavailable")
        with self._lock:
            quiz.id = uuid.uuid4()
            self.saved.append(quiz)
        return quiz

    def count(self):
        return len(self.saved)


class FakeUserRepository:
    def __init__(self):
        self.users = {}
        self.create_calls = 0
        self._lock = threading.Lock()

    def find_by_username(self, username):
        return self.users.get(username)

    def save(self, user):
        self.users[user.username] = user
        return user

    def get_or_create_system_user(self):
        with self._lock:
            if "system" not in self.users:
                self.create_calls += 1
                self.save(make_user("system", role="ADMIN"))
            return self.users["system"]


def make_user(username, role="USER"):
    now = datetime.now(timezone.utc)
    return User(
        id=uuid.uuid4(),
        username=username,
        email=f"{username}@example.com",
        first_name=username.title(),
        last_name="Tester",
        role=role,
        enabled=True,
        created_at=now,
        updated_at=now,
    )


@pytest.fixture
def creator():
    return make_user("alice")


@pytest.fixture
def question_service():
    return FakeQuestionService()


@pytest.fixture
def quiz_repository():
    return FakeQuizRepository()


@pytest.fixture
def user_repository():
    return FakeUserRepository()


@pytest.fixture
def generator(question_service, quiz_repository, user_repository):
    return AutoQuizGeneratorService(
        question_service=question_service,
        quiz_repository=quiz_repository,
        user_repository=user_repository,
        assembler=QuizAssembler(rng=random.Random(0), model_label="Gemini-1.5-Flash"),
        rng=random.Random(42),
    )
