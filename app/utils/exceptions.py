"""
Errors raised by the quiz generation pipeline
"""
from enum import Enum
from typing import Optional


class GenerationStage(str, Enum):
    """Stages a single quiz generation call passes through"""
    PENDING = "pending"
    NORMALIZING = "normalizing"
    AWAITING_EXTERNAL_GENERATION = "awaiting_external_generation"
    ASSEMBLING = "assembling"
    PERSISTING = "persisting"
    COMPLETED = "completed"
    FAILED = "failed"


class GenerationError(Exception):
    """
    Base error for a failed generation call

    Carries the topic being generated, the stage that failed and the
    original exception so callers can log the real cause.
    """

    def __init__(
        self,
        message: str,
        topic: Optional[str] = None,
        stage: Optional[GenerationStage] = None,
        cause: Optional[BaseException] = None
    ):
        super().__init__(message)
        self.message = message
        self.topic = topic
        self.stage = stage
        self.cause = cause

    def __str__(self):
        if self.cause is not None:
            return f"{self.message}: {self.cause}"
        return self.message


class GenerationBackendError(GenerationError):
    """The external question generation service failed or returned unusable content"""


class PersistenceError(GenerationError):
    """Reading from or writing to the quiz/user store failed"""


class AggregateBatchError(GenerationError):
    """
    One or more quizzes in a batch failed

    Quizzes from successful tasks in the same batch are already persisted;
    ``succeeded`` reports how many.
    """

    def __init__(
        self,
        message: str,
        cause: Optional[BaseException] = None,
        failed: int = 0,
        succeeded: int = 0
    ):
        super().__init__(message, cause=cause)
        self.failed = failed
        self.succeeded = succeeded
