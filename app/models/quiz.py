"""
Quiz model - stores AI-generated quizzes
"""
from sqlalchemy import Column, String, Integer, Boolean, Text, DateTime, JSON, Uuid, ForeignKey
from app.database import Base
import uuid


class Quiz(Base):
    """
    Quizzes table - one row per generated quiz with its questions inline
    """
    __tablename__ = "quizzes"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    title = Column(String(255), nullable=False)
    description = Column(Text)
    topic = Column(String(200), nullable=False, index=True)
    category = Column(String(50), index=True)
    difficulty = Column(String(20), nullable=False)
    questions = Column(JSON, nullable=False)  # Ordered list of question payloads
    tags = Column(JSON)
    time_limit_minutes = Column(Integer, nullable=False)
    total_questions = Column(Integer, nullable=False)
    total_points = Column(Integer, nullable=False)

    creator_id = Column(Uuid, ForeignKey("users.id"), nullable=False, index=True)
    creator_username = Column(String(50), nullable=False)

    is_public = Column(Boolean, default=True)
    is_active = Column(Boolean, default=True)

    # Generation metadata, kept for traceability only
    ai_prompt = Column(Text)
    ai_model = Column(String(50))
    ai_generated_at = Column(DateTime)

    total_attempts = Column(Integer, default=0)
    created_at = Column(DateTime)
    updated_at = Column(DateTime)

    def __repr__(self):
        return f"<Quiz(id={self.id}, title={self.title}, difficulty={self.difficulty})>"
