"""
Database models package
"""
from app.models.user import User
from app.models.quiz import Quiz

__all__ = ["User", "Quiz"]
