"""
Quiz and user stores backed by SQLAlchemy
"""
import logging
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import sessionmaker

from app.config import settings
from app.database import SessionLocal
from app.models import Quiz, User

logger = logging.getLogger(__name__)


class QuizRepository:
    """Persists generated quizzes; one session per call"""

    def __init__(self, session_factory: sessionmaker = SessionLocal):
        self.session_factory = session_factory

    def save(self, quiz: Quiz) -> Quiz:
        """Insert a quiz and return it with its id assigned"""
        db = self.session_factory()
        try:
            db.add(quiz)
            db.commit()
            db.refresh(quiz)
            logger.info(f"Quiz saved: {quiz.id}")
            return quiz
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()

    def count(self) -> int:
        db = self.session_factory()
        try:
            return db.query(func.count(Quiz.id)).scalar() or 0
        finally:
            db.close()


class UserRepository:
    """Looks up quiz creators and owns the system actor"""

    def __init__(self, session_factory: sessionmaker = SessionLocal):
        self.session_factory = session_factory

    def find_by_username(self, username: str) -> Optional[User]:
        db = self.session_factory()
        try:
            return db.query(User).filter(User.username == username).first()
        finally:
            db.close()

    def save(self, user: User) -> User:
        db = self.session_factory()
        try:
            db.add(user)
            db.commit()
            db.refresh(user)
            return user
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()

    def get_or_create_system_user(self) -> User:
        """
        Return the system actor, creating it on first use

        Safe under concurrent first use: the unique constraint on username
        rejects a second insert, and the loser re-reads the winner's row.
        """
        existing = self.find_by_username(settings.SYSTEM_USERNAME)
        if existing is not None:
            return existing

        now = datetime.now(timezone.utc)
        system_user = User(
            username=settings.SYSTEM_USERNAME,
            email=settings.SYSTEM_EMAIL,
            first_name="System",
            last_name="Generator",
            role="ADMIN",
            enabled=True,
            created_at=now,
            updated_at=now,
        )

        try:
            created = self.save(system_user)
            logger.info(f"Created system user: {created.id}")
            return created
        except IntegrityError:
            logger.info("System user created concurrently, re-reading")
            existing = self.find_by_username(settings.SYSTEM_USERNAME)
            if existing is None:
                raise
            return existing
