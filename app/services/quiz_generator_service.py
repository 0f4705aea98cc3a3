"""
Quiz generation orchestration

Single quizzes, random quizzes for the system actor, and concurrent
batches of random quizzes with all-or-nothing failure.
"""
import asyncio
import logging
import random
from typing import List, Dict, Any, Optional

from app.models import Quiz, User
from app.schemas.quiz_generation import Category, Difficulty, GenerationRequest
from app.services.gemini_service import GeminiQuestionService
from app.services.quiz_assembler import QuizAssembler
from app.services.repositories import QuizRepository, UserRepository
from app.services.request_normalizer import calculate_time_limit, normalize_request
from app.services.topic_classifier import classify_topic
from app.utils.exceptions import (
    AggregateBatchError,
    GenerationBackendError,
    GenerationError,
    GenerationStage,
    PersistenceError,
)

logger = logging.getLogger(__name__)


# Pool for unattended generation
POPULAR_TOPICS = [
    "JavaScript Programming", "Python Basics", "Java Fundamentals", "React Development",
    "Data Structures", "Algorithms", "Database Management", "Web Development",
    "Machine Learning", "Artificial Intelligence", "Cybersecurity", "Cloud Computing",
    "World History", "Geography", "Science Facts", "Mathematics", "Physics",
    "Chemistry", "Biology", "Literature", "Current Affairs", "Sports",
    "Movies and Entertainment", "Technology Trends", "Space and Astronomy",
    "Environmental Science", "Health and Medicine", "Psychology", "Philosophy",
]

# Subset advertised to clients
LISTED_TOPIC_COUNT = 25

TRENDING_TOPICS = [
    "ChatGPT and AI Tools", "Cryptocurrency Basics", "Climate Change",
    "Space Exploration 2024", "Sustainable Technology", "Remote Work Culture",
    "Electric Vehicles", "Quantum Computing", "Metaverse", "5G Technology",
]

LISTED_CATEGORIES = [
    "Technology", "Science", "History", "Geography", "Literature",
    "Mathematics", "Sports", "Entertainment", "General Knowledge",
]

QUESTION_COUNT_CHOICES = [5, 10, 15, 20]

SUGGESTIONS = [
    "Advanced JavaScript",
    "Data Science Fundamentals",
    "Modern Web Development",
    "Cloud Computing Basics",
    "Machine Learning Concepts",
]

MIN_RANDOM_QUESTIONS = 5
MAX_RANDOM_QUESTIONS = 20

TRENDING_QUESTION_COUNT = 10
TRENDING_TIME_LIMIT_MINUTES = 15


class AutoQuizGeneratorService:
    """
    Drives quiz generation end to end

    Collaborators are injected so tests can swap in fakes:

    - question_service: ``async generate_questions(request) -> list[dict]``
    - quiz_repository: ``save(quiz)``, ``count()``
    - user_repository: ``get_or_create_system_user()``

    Repository calls block, so they run in worker threads. Every random
    draw comes from ``rng``.
    """

    def __init__(
        self,
        question_service=None,
        quiz_repository=None,
        user_repository=None,
        assembler: Optional[QuizAssembler] = None,
        rng: Optional[random.Random] = None
    ):
        self.rng = rng or random.Random()
        self.question_service = question_service or GeminiQuestionService()
        self.quiz_repository = quiz_repository or QuizRepository()
        self.user_repository = user_repository or UserRepository()
        self.assembler = assembler or QuizAssembler(rng=self.rng)

    async def generate_custom_quiz(self, request: GenerationRequest, creator: User) -> Quiz:
        """
        Generate and persist a quiz for a caller-supplied request

        Raises:
            GenerationBackendError: Question generation failed
            PersistenceError: The quiz could not be stored
            GenerationError: Normalizing or assembling failed
        """
        logger.info(f"Generating custom quiz for topic: {request.topic} by user: {creator.username}")

        stage = GenerationStage.NORMALIZING
        try:
            normalize_request(request)

            stage = GenerationStage.AWAITING_EXTERNAL_GENERATION
            questions = await self.question_service.generate_questions(request)

            stage = GenerationStage.ASSEMBLING
            quiz = self.assembler.assemble(request, questions, creator)

            stage = GenerationStage.PERSISTING
            saved_quiz = await asyncio.to_thread(self.quiz_repository.save, quiz)
        except GenerationError as e:
            logger.error(f"Error generating custom quiz for topic: {request.topic} ({stage.value}): {str(e)}")
            if e.topic is None:
                e.topic = request.topic
            if e.stage is None:
                e.stage = stage
            raise
        except Exception as e:
            logger.error(
                f"Error generating custom quiz for topic: {request.topic} ({stage.value}): {str(e)}",
                exc_info=True
            )
            raise _wrap_failure(stage, request.topic, e) from e

        logger.info(f"Successfully generated quiz: {saved_quiz.title} with {saved_quiz.total_questions} questions")
        return saved_quiz

    async def generate_random_quiz(self) -> Quiz:
        """Generate a quiz with random parameters, attributed to the system actor"""
        # Draw before the first await so a batch consumes the rng in launch order
        request = self._build_random_request()

        try:
            system_user = await asyncio.to_thread(self.user_repository.get_or_create_system_user)
        except Exception as e:
            logger.error(f"Could not obtain system user: {str(e)}")
            raise PersistenceError(
                "Failed to obtain system user",
                topic=request.topic,
                stage=GenerationStage.PENDING,
                cause=e
            ) from e

        quiz = await self.generate_custom_quiz(request, system_user)
        logger.info(f"Auto-generated random quiz: {quiz.title}")
        return quiz

    async def generate_multiple_random_quizzes(self, count: int) -> List[Quiz]:
        """
        Generate ``count`` random quizzes concurrently

        Waits for every task. Results come back in launch order. If any
        task fails the whole batch raises AggregateBatchError, even though
        quizzes from the successful tasks have already been persisted.
        """
        if count <= 0:
            return []

        logger.info(f"Launching {count} random quiz generation tasks")
        tasks = [asyncio.create_task(self.generate_random_quiz()) for _ in range(count)]
        results = await asyncio.gather(*tasks, return_exceptions=True)

        failures = [result for result in results if isinstance(result, BaseException)]
        if failures:
            succeeded = len(results) - len(failures)
            logger.error(
                f"Batch generation failed: {len(failures)} of {count} tasks failed, "
                f"{succeeded} quizzes were persisted anyway"
            )
            raise AggregateBatchError(
                f"{len(failures)} of {count} quiz generation tasks failed",
                cause=failures[0],
                failed=len(failures),
                succeeded=succeeded
            ) from failures[0]

        return list(results)

    async def generate_trending_topic_quiz(self, creator: User) -> Quiz:
        """Generate a medium, 10-question Technology quiz on a trending topic"""
        request = GenerationRequest(
            topic=self.rng.choice(TRENDING_TOPICS),
            difficulty=Difficulty.MEDIUM,
            question_count=TRENDING_QUESTION_COUNT,
            category=Category.TECHNOLOGY.value,
            time_limit_minutes=TRENDING_TIME_LIMIT_MINUTES,
        )
        return await self.generate_custom_quiz(request, creator)

    async def generate_quick_quiz(
        self,
        topic: str,
        difficulty: Difficulty,
        question_count: int,
        creator: User
    ) -> Quiz:
        """Generate a quiz from minimal parameters, deriving everything else"""
        request = GenerationRequest(topic=topic, difficulty=difficulty, question_count=question_count)
        return await self.generate_custom_quiz(request, creator)

    def list_popular_topics(self) -> Dict[str, Any]:
        return {
            "topics": POPULAR_TOPICS[:LISTED_TOPIC_COUNT],
            "categories": list(LISTED_CATEGORIES),
            "difficulties": [difficulty.value for difficulty in Difficulty],
            "question_counts": list(QUESTION_COUNT_CHOICES),
        }

    def list_suggestions(self, user: User) -> List[str]:
        # Same list for everyone until quiz history is tracked per user
        return list(SUGGESTIONS)

    def _build_random_request(self) -> GenerationRequest:
        topic = self.rng.choice(POPULAR_TOPICS)
        difficulty = self.rng.choice(list(Difficulty))
        question_count = self.rng.randint(MIN_RANDOM_QUESTIONS, MAX_RANDOM_QUESTIONS)

        return GenerationRequest(
            topic=topic,
            difficulty=difficulty,
            question_count=question_count,
            category=classify_topic(topic).value,
            time_limit_minutes=calculate_time_limit(question_count, difficulty),
        )


def _wrap_failure(stage: GenerationStage, topic: str, cause: Exception) -> GenerationError:
    if stage == GenerationStage.AWAITING_EXTERNAL_GENERATION:
        return GenerationBackendError("Failed to generate quiz", topic=topic, stage=stage, cause=cause)
    if stage == GenerationStage.PERSISTING:
        return PersistenceError("Failed to save quiz", topic=topic, stage=stage, cause=cause)
    return GenerationError("Failed to generate quiz", topic=topic, stage=stage, cause=cause)


# Global instance
quiz_generator_service = AutoQuizGeneratorService()
