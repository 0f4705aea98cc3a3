"""
Seeds sample quizzes when the service boots with an almost empty store
"""
import asyncio
import logging
from typing import Optional, Set

from app.config import settings
from app.services.quiz_generator_service import AutoQuizGeneratorService, quiz_generator_service
from app.services.repositories import QuizRepository

logger = logging.getLogger(__name__)


class StartupQuizService:
    """
    Generates initial quizzes in the background on startup

    Never blocks or fails startup: every error is logged and dropped.
    """

    def __init__(
        self,
        generator: AutoQuizGeneratorService,
        quiz_repository,
        threshold: int = None,
        seed_count: int = None
    ):
        self.generator = generator
        self.quiz_repository = quiz_repository
        self.threshold = settings.SEED_QUIZ_THRESHOLD if threshold is None else threshold
        self.seed_count = settings.SEED_QUIZ_COUNT if seed_count is None else seed_count
        # Strong references until the tasks finish
        self._background_tasks: Set[asyncio.Task] = set()

    async def generate_initial_quizzes(self) -> Optional[asyncio.Task]:
        """
        Launch batch generation if fewer than ``threshold`` quizzes exist

        Returns:
            The background task, or None when seeding was skipped or failed to start
        """
        if settings.SKIP_SEEDING:
            logger.info("SKIP_SEEDING is set. Skipping initial quiz generation.")
            return None

        try:
            existing_quiz_count = await asyncio.to_thread(self.quiz_repository.count)

            if existing_quiz_count >= self.threshold:
                logger.info(f"Found {existing_quiz_count} existing quizzes, skipping initial generation")
                return None

            logger.info(f"Generating {self.seed_count} initial sample quizzes...")
            task = asyncio.create_task(self._seed(), name="initial-quiz-generation")
        except Exception as e:
            logger.error(f"Error during startup quiz generation: {str(e)}", exc_info=True)
            return None

        self._background_tasks.add(task)
        task.add_done_callback(self._background_tasks.discard)
        return task

    async def _seed(self) -> None:
        try:
            quizzes = await self.generator.generate_multiple_random_quizzes(self.seed_count)
        except Exception as e:
            logger.error(f"Failed to generate initial quizzes: {str(e)}", exc_info=True)
            return

        logger.info(f"Successfully generated {len(quizzes)} initial quizzes")
        for quiz in quizzes:
            logger.info(f"Generated quiz: {quiz.title}")


# Global instance
startup_quiz_service = StartupQuizService(quiz_generator_service, QuizRepository())
