import random

import pytest

from app.schemas.quiz_generation import Difficulty, GenerationRequest
from app.services.quiz_assembler import QuizAssembler
from app.services.quiz_generator_service import (
    POPULAR_TOPICS,
    TRENDING_TOPICS,
    AutoQuizGeneratorService,
)
from app.services.request_normalizer import calculate_time_limit
from app.services.topic_classifier import classify_topic
from app.utils.exceptions import (
    AggregateBatchError,
    GenerationBackendError,
    GenerationStage,
    PersistenceError,
)

from conftest import FakeQuestionService, FakeQuizRepository, FakeUserRepository


def _generator(question_service=None, quiz_repository=None, user_repository=None, seed=42):
    return AutoQuizGeneratorService(
        question_service=question_service or FakeQuestionService(),
        quiz_repository=quiz_repository or FakeQuizRepository(),
        user_repository=user_repository or FakeUserRepository(),
        assembler=QuizAssembler(rng=random.Random(0)),
        rng=random.Random(seed),
    )


def _expected_random_topics(seed, count):
    rng = random.Random(seed)
    topics = []
    for _ in range(count):
        topics.append(rng.choice(POPULAR_TOPICS))
        rng.choice(list(Difficulty))
        rng.randint(5, 20)
    return topics


@pytest.mark.asyncio
async def test_custom_quiz_python_basics(generator, creator, quiz_repository):
    request = GenerationRequest(topic="Python Basics", difficulty=Difficulty.MEDIUM, question_count=10)

    quiz = await generator.generate_custom_quiz(request, creator)

    assert quiz.category == "Technology"
    assert quiz.time_limit_minutes == 10
    assert quiz.total_questions == 10
    assert quiz.id is not None
    assert quiz_repository.saved == [quiz]


@pytest.mark.asyncio
async def test_custom_quiz_passes_normalized_request_to_backend(generator, creator, question_service):
    request = GenerationRequest(topic="Linear Algebra", difficulty=Difficulty.HARD, question_count=6)

    await generator.generate_custom_quiz(request, creator)

    sent = question_service.requests[0]
    assert sent.category == "Mathematics"
    assert sent.time_limit_minutes == 9


@pytest.mark.asyncio
async def test_backend_failure_persists_nothing(creator):
    quiz_repository = FakeQuizRepository()
    generator = _generator(question_service=FakeQuestionService(fail_topics={"Python Basics"}),
                           quiz_repository=quiz_repository)
    request = GenerationRequest(topic="Python Basics", difficulty=Difficulty.EASY, question_count=5)

    with pytest.raises(GenerationBackendError) as exc_info:
        await generator.generate_custom_quiz(request, creator)

    error = exc_info.value
    assert error.topic == "Python Basics"
    assert error.stage == GenerationStage.AWAITING_EXTERNAL_GENERATION
    assert isinstance(error.cause, RuntimeError)
    assert quiz_repository.saved == []


@pytest.mark.asyncio
async def test_persistence_failure_is_wrapped(creator):
    generator = _generator(quiz_repository=FakeQuizRepository(fail=True))
    request = GenerationRequest(topic="Python Basics", difficulty=Difficulty.EASY, question_count=5)

    with pytest.raises(PersistenceError) as exc_info:
        await generator.generate_custom_quiz(request, creator)

    assert exc_info.value.stage == GenerationStage.PERSISTING
    assert "database unavailable" in str(exc_info.value)


@pytest.mark.asyncio
async def test_random_quiz_uses_system_user_and_derived_fields(generator, user_repository):
    quiz = await generator.generate_random_quiz()

    assert quiz.creator_username == "system"
    assert quiz.topic in POPULAR_TOPICS
    assert 5 <= quiz.total_questions <= 20
    assert quiz.category == classify_topic(quiz.topic).value
    assert quiz.time_limit_minutes == calculate_time_limit(quiz.total_questions, Difficulty(quiz.difficulty))
    assert user_repository.create_calls == 1


@pytest.mark.asyncio
async def test_random_parameters_stay_in_range():
    generator = _generator(seed=7)

    for _ in range(30):
        quiz = await generator.generate_random_quiz()
        assert quiz.topic in POPULAR_TOPICS
        assert Difficulty(quiz.difficulty) in list(Difficulty)
        assert 5 <= quiz.total_questions <= 20


@pytest.mark.asyncio
async def test_batch_returns_results_in_launch_order():
    count = 6
    # Earlier calls sleep longer, so completion order is reversed
    question_service = FakeQuestionService(delay_for_call=lambda i: 0.01 * (count - i))
    generator = _generator(question_service=question_service, seed=11)

    quizzes = await generator.generate_multiple_random_quizzes(count)

    assert len(quizzes) == count
    assert [quiz.topic for quiz in quizzes] == _expected_random_topics(11, count)
    assert len(question_service.requests) == count


@pytest.mark.asyncio
async def test_batch_launches_exactly_n_tasks():
    for count in range(1, 11):
        question_service = FakeQuestionService()
        quiz_repository = FakeQuizRepository()
        generator = _generator(question_service=question_service, quiz_repository=quiz_repository)

        quizzes = await generator.generate_multiple_random_quizzes(count)

        assert len(quizzes) == count
        assert len(question_service.requests) == count
        assert len(quiz_repository.saved) == count


@pytest.mark.asyncio
async def test_batch_creates_single_system_user():
    user_repository = FakeUserRepository()
    generator = _generator(user_repository=user_repository)

    quizzes = await generator.generate_multiple_random_quizzes(5)

    assert user_repository.create_calls == 1
    assert len({quiz.creator_id for quiz in quizzes}) == 1


@pytest.mark.asyncio
async def test_batch_failure_fails_whole_batch_but_keeps_saved_quizzes():
    quiz_repository = FakeQuizRepository()
    generator = _generator(question_service=FakeQuestionService(fail_on_calls={1}),
                           quiz_repository=quiz_repository)

    with pytest.raises(AggregateBatchError) as exc_info:
        await generator.generate_multiple_random_quizzes(4)

    error = exc_info.value
    assert error.failed == 1
    assert error.succeeded == 3
    assert isinstance(error.cause, GenerationBackendError)
    # Siblings of the failed task were still persisted
    assert len(quiz_repository.saved) == 3


@pytest.mark.asyncio
async def test_batch_failure_reports_first_failure_in_launch_order():
    generator = _generator(question_service=FakeQuestionService(fail_on_calls={0, 1, 2}))

    with pytest.raises(AggregateBatchError) as exc_info:
        await generator.generate_multiple_random_quizzes(3)

    assert exc_info.value.failed == 3
    assert exc_info.value.succeeded == 0
    assert exc_info.value.__cause__ is exc_info.value.cause


@pytest.mark.asyncio
async def test_empty_batch_returns_empty_list(generator, question_service):
    assert await generator.generate_multiple_random_quizzes(0) == []
    assert question_service.requests == []


@pytest.mark.asyncio
async def test_trending_quiz_has_fixed_parameters(creator):
    for seed in range(15):
        generator = _generator(seed=seed)

        quiz = await generator.generate_trending_topic_quiz(creator)

        assert quiz.topic in TRENDING_TOPICS
        assert quiz.difficulty == "MEDIUM"
        assert quiz.total_questions == 10
        assert quiz.category == "Technology"
        assert quiz.time_limit_minutes == 15


@pytest.mark.asyncio
async def test_quick_quiz_derives_everything(generator, creator):
    quiz = await generator.generate_quick_quiz("Olympic Games", Difficulty.EASY, 8, creator)

    assert quiz.category == "Sports"
    assert quiz.time_limit_minutes == 6
    assert quiz.total_questions == 8


def test_popular_topics_listing(generator):
    listing = generator.list_popular_topics()

    assert len(listing["topics"]) == 25
    assert listing["topics"] == POPULAR_TOPICS[:25]
    assert "General Knowledge" in listing["categories"]
    assert listing["difficulties"] == ["EASY", "MEDIUM", "HARD"]
    assert listing["question_counts"] == [5, 10, 15, 20]


def test_topic_pools_have_expected_sizes():
    assert len(POPULAR_TOPICS) == 29
    assert len(TRENDING_TOPICS) == 10


def test_suggestions(generator, creator):
    suggestions = generator.list_suggestions(creator)

    assert len(suggestions) == 5
    assert "Advanced JavaScript" in suggestions


@pytest.mark.asyncio
async def test_custom_quiz_time_limit_never_below_five(generator, creator, question_service):
    request = GenerationRequest(
        topic="Python Basics", difficulty=Difficulty.EASY, question_count=5, time_limit_minutes=1
    )

    quiz = await generator.generate_custom_quiz(request, creator)

    assert quiz.time_limit_minutes == 5
    assert question_service.requests[0].time_limit_minutes == 5
