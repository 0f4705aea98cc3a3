"""
Pydantic schemas for quiz generation requests and responses
"""
from pydantic import BaseModel, Field, field_validator
from typing import List, Dict, Any, Optional, Set
from uuid import UUID
from datetime import datetime
from enum import Enum


class Difficulty(str, Enum):
    """Quiz difficulty levels"""
    EASY = "EASY"
    MEDIUM = "MEDIUM"
    HARD = "HARD"


class Category(str, Enum):
    """Categories the topic classifier can produce"""
    TECHNOLOGY = "Technology"
    HISTORY = "History"
    SCIENCE = "Science"
    GEOGRAPHY = "Geography"
    MATHEMATICS = "Mathematics"
    SPORTS = "Sports"
    ENTERTAINMENT = "Entertainment"
    GENERAL_KNOWLEDGE = "General Knowledge"


class GenerationRequest(BaseModel):
    """Request schema for quiz generation"""
    topic: str = Field(..., min_length=1, max_length=200, description="Quiz topic")
    difficulty: Difficulty = Field(..., description="Quiz difficulty")
    question_count: int = Field(..., gt=0, le=50, description="Number of questions")
    category: Optional[str] = Field(None, max_length=50, description="Derived from topic when omitted")
    time_limit_minutes: Optional[int] = Field(None, ge=1, description="Derived from count and difficulty when omitted")
    tags: Optional[Set[str]] = None


class GeneratedQuestion(BaseModel):
    """Single question as returned by the generation backend"""
    question: str
    options: List[str] = Field(default_factory=list)
    correct_answer: Any
    explanation: Optional[str] = None
    points: Optional[int] = Field(1, ge=1)
    difficulty: Optional[Difficulty] = None

    @field_validator("points", mode="before")
    @classmethod
    def default_missing_points(cls, value):
        """A null points value counts as 1"""
        return 1 if value is None else value


class QuizResponse(BaseModel):
    """Response containing a generated quiz"""
    id: UUID
    title: str
    description: str
    topic: str
    category: str
    difficulty: Difficulty
    questions: List[Dict[str, Any]]
    tags: Optional[List[str]] = None
    time_limit_minutes: int
    total_questions: int
    total_points: int
    creator_id: UUID
    creator_username: str
    is_public: bool
    is_active: bool
    ai_prompt: Optional[str] = None
    ai_model: Optional[str] = None
    ai_generated_at: Optional[datetime] = None
    total_attempts: int
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class PopularTopicsResponse(BaseModel):
    """Options for populating quiz generation forms"""
    topics: List[str]
    categories: List[str]
    difficulties: List[Difficulty]
    question_counts: List[int]
