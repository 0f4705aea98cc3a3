"""
Builds quiz records from a normalized request and generated questions
"""
import logging
import random
from datetime import datetime, timezone
from typing import List, Dict, Any, Optional

from app.config import settings
from app.models import Quiz, User
from app.schemas.quiz_generation import GenerationRequest
from app.services.request_normalizer import MIN_TIME_LIMIT_MINUTES, calculate_time_limit
from app.services.topic_classifier import classify_topic

logger = logging.getLogger(__name__)


TITLE_PREFIXES = ["Master", "Test Your Knowledge of", "Challenge:", "Quiz on", "Explore"]


class QuizAssembler:
    """
    Assembles unsaved Quiz rows

    Title prefixes are drawn from the injected random source so tests
    can pin them.
    """

    def __init__(self, rng: Optional[random.Random] = None, model_label: Optional[str] = None):
        self.rng = rng or random.Random()
        self.model_label = model_label or settings.AI_MODEL_LABEL

    def assemble(
        self,
        request: GenerationRequest,
        questions: List[Dict[str, Any]],
        creator: User
    ) -> Quiz:
        """
        Build a quiz for the given request

        Args:
            request: Normalized generation request
            questions: Ordered question payloads from the generation backend
            creator: User the quiz is attributed to

        Returns:
            Quiz instance, not yet persisted
        """
        category = request.category or classify_topic(request.topic).value
        time_limit = request.time_limit_minutes
        if time_limit is None:
            time_limit = calculate_time_limit(request.question_count, request.difficulty)
        time_limit = max(MIN_TIME_LIMIT_MINUTES, time_limit)

        now = datetime.now(timezone.utc)

        quiz = Quiz(
            title=self.build_title(request),
            description=self.build_description(request, time_limit),
            topic=request.topic,
            category=category,
            difficulty=request.difficulty.value,
            questions=list(questions),
            tags=sorted(request.tags) if request.tags else [],
            time_limit_minutes=time_limit,
            total_questions=len(questions),
            total_points=calculate_total_points(questions),
            creator_id=creator.id,
            creator_username=creator.username,
            is_public=True,
            is_active=True,
            ai_prompt=build_generation_prompt(request, category),
            ai_model=self.model_label,
            ai_generated_at=now,
            total_attempts=0,
            created_at=now,
            updated_at=now,
        )

        logger.debug(f"Assembled quiz '{quiz.title}' with {quiz.total_questions} questions")
        return quiz

    def build_title(self, request: GenerationRequest) -> str:
        prefix = self.rng.choice(TITLE_PREFIXES)
        return f"{prefix} {request.topic} ({request.difficulty.value.lower()} Level)"

    def build_description(self, request: GenerationRequest, time_limit: int) -> str:
        return (
            f"An AI-generated {request.difficulty.value.lower()} level quiz on {request.topic} "
            f"with {request.question_count} questions. "
            f"Test your knowledge and learn something new! Time limit: {time_limit} minutes."
        )


def calculate_total_points(questions: List[Dict[str, Any]]) -> int:
    """Sum of question points; a question without points counts as 1"""
    return sum(q.get("points") or 1 for q in questions)


def build_generation_prompt(request: GenerationRequest, category: str) -> str:
    """Prompt summary stored on the quiz for traceability"""
    return (
        f"Generate a comprehensive {request.difficulty.value} level quiz on '{request.topic}' "
        f"with {request.question_count} questions. Category: {category}. "
        f"Make questions engaging and educational. "
        f"Include varied question types and ensure answers are accurate."
    )
