"""
Fills derived fields on a generation request
"""
from app.schemas.quiz_generation import Difficulty, GenerationRequest
from app.services.topic_classifier import classify_topic


# Seconds allowed per question
BASE_SECONDS_PER_QUESTION = {
    Difficulty.EASY: 45,
    Difficulty.MEDIUM: 60,
    Difficulty.HARD: 90,
}

MIN_TIME_LIMIT_MINUTES = 5


def calculate_time_limit(question_count: int, difficulty: Difficulty) -> int:
    """Time limit in minutes, never below MIN_TIME_LIMIT_MINUTES"""
    total_seconds = question_count * BASE_SECONDS_PER_QUESTION[Difficulty(difficulty)]
    return max(MIN_TIME_LIMIT_MINUTES, total_seconds // 60)


def normalize_request(request: GenerationRequest) -> GenerationRequest:
    """
    Populate time_limit_minutes and category when the caller left them out

    Mutates and returns the same request. Values already set are kept,
    except that a time limit below MIN_TIME_LIMIT_MINUTES is raised to it.
    Normalizing twice changes nothing.
    """
    if request.time_limit_minutes is None:
        request.time_limit_minutes = calculate_time_limit(request.question_count, request.difficulty)
    else:
        request.time_limit_minutes = max(MIN_TIME_LIMIT_MINUTES, request.time_limit_minutes)

    if request.category is None:
        request.category = classify_topic(request.topic).value

    return request
