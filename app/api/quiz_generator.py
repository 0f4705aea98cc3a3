"""
Quiz generation API endpoints
"""

from fastapi import APIRouter, Depends, Header, HTTPException, Query
from sqlalchemy.orm import Session
from typing import List, Optional
import logging

from app.config import settings
from app.database import get_db
from app.models import User
from app.schemas.quiz_generation import (
    Difficulty,
    GenerationRequest,
    PopularTopicsResponse,
    QuizResponse,
)
from app.services.quiz_generator_service import AutoQuizGeneratorService, quiz_generator_service
from app.utils.exceptions import AggregateBatchError, GenerationBackendError, GenerationError
from app.utils.rate_limiter import generation_rate_limiter


router = APIRouter(prefix="/api/quiz-generator", tags=["quiz-generator"])
logger = logging.getLogger(__name__)


def get_quiz_generator() -> AutoQuizGeneratorService:
    return quiz_generator_service


def get_current_user(
    x_username: Optional[str] = Header(None),
    db: Session = Depends(get_db)
) -> User:
    """Resolve the calling user from the X-Username header"""
    if not x_username:
        raise HTTPException(status_code=401, detail="Missing X-Username header")

    user = db.query(User).filter(User.username == x_username).first()
    if not user or not user.enabled:
        raise HTTPException(status_code=401, detail="Unknown or disabled user")
    return user


def clamp_batch_size(count: int) -> int:
    """Bound batch fan-out to MAX_BATCH_SIZE"""
    return min(count, settings.MAX_BATCH_SIZE)


def _to_http_error(e: GenerationError) -> HTTPException:
    if isinstance(e, AggregateBatchError):
        return HTTPException(
            status_code=500,
            detail=f"{str(e)} ({e.succeeded} generated before the failure)"
        )
    if isinstance(e, GenerationBackendError):
        return HTTPException(status_code=502, detail=str(e))
    return HTTPException(status_code=500, detail=str(e))


@router.post(
    "/custom",
    response_model=QuizResponse,
    status_code=201,
    dependencies=[Depends(generation_rate_limiter)]
)
async def generate_custom_quiz(
    request: GenerationRequest,
    user: User = Depends(get_current_user),
    generator: AutoQuizGeneratorService = Depends(get_quiz_generator)
):
    """
    Generate a quiz from a caller-supplied request

    - Category is derived from the topic when omitted
    - Time limit is derived from question count and difficulty when omitted
    """
    try:
        return await generator.generate_custom_quiz(request, user)
    except GenerationError as e:
        raise _to_http_error(e)


@router.post(
    "/random",
    response_model=QuizResponse,
    status_code=201,
    dependencies=[Depends(generation_rate_limiter)]
)
async def generate_random_quiz(generator: AutoQuizGeneratorService = Depends(get_quiz_generator)):
    """Generate a quiz on a random popular topic, owned by the system user"""
    try:
        return await generator.generate_random_quiz()
    except GenerationError as e:
        raise _to_http_error(e)


@router.post(
    "/random/batch",
    response_model=List[QuizResponse],
    status_code=201,
    dependencies=[Depends(generation_rate_limiter)]
)
async def generate_multiple_random_quizzes(
    count: int = Query(settings.DEFAULT_BATCH_SIZE, ge=1),
    generator: AutoQuizGeneratorService = Depends(get_quiz_generator)
):
    """
    Generate several random quizzes concurrently

    - Count is capped at MAX_BATCH_SIZE
    - All or nothing: one failed quiz fails the request, although the
      quizzes that did succeed remain stored
    """
    count = clamp_batch_size(count)
    try:
        return await generator.generate_multiple_random_quizzes(count)
    except GenerationError as e:
        raise _to_http_error(e)


@router.post(
    "/trending",
    response_model=QuizResponse,
    status_code=201,
    dependencies=[Depends(generation_rate_limiter)]
)
async def generate_trending_topic_quiz(
    user: User = Depends(get_current_user),
    generator: AutoQuizGeneratorService = Depends(get_quiz_generator)
):
    """Generate a medium, 10-question, 15-minute quiz on a trending topic"""
    try:
        return await generator.generate_trending_topic_quiz(user)
    except GenerationError as e:
        raise _to_http_error(e)


@router.post(
    "/quick",
    response_model=QuizResponse,
    status_code=201,
    dependencies=[Depends(generation_rate_limiter)]
)
async def generate_quick_quiz(
    topic: str = Query(..., min_length=1, max_length=200),
    difficulty: str = Query("MEDIUM"),
    questions: int = Query(10, gt=0, le=50),
    user: User = Depends(get_current_user),
    generator: AutoQuizGeneratorService = Depends(get_quiz_generator)
):
    """Generate a quiz from query parameters only"""
    try:
        level = Difficulty(difficulty.upper())
    except ValueError:
        raise HTTPException(status_code=400, detail=f"Unknown difficulty: {difficulty}")

    try:
        return await generator.generate_quick_quiz(topic, level, questions, user)
    except GenerationError as e:
        raise _to_http_error(e)


@router.get("/topics/popular", response_model=PopularTopicsResponse)
async def get_popular_topics(generator: AutoQuizGeneratorService = Depends(get_quiz_generator)):
    """Topics, categories, difficulties and question counts for generation forms"""
    return generator.list_popular_topics()


@router.get("/suggestions", response_model=List[str])
async def get_quiz_suggestions(
    user: User = Depends(get_current_user),
    generator: AutoQuizGeneratorService = Depends(get_quiz_generator)
):
    return generator.list_suggestions(user)
