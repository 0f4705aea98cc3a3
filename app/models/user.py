"""
User model - quiz creators, including the system actor
"""
from sqlalchemy import Column, String, Boolean, DateTime, Uuid
from app.database import Base
import uuid


class User(Base):
    """
    Users table - username uniqueness guards system actor creation
    """
    __tablename__ = "users"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    username = Column(String(50), unique=True, nullable=False, index=True)
    email = Column(String(255), unique=True, nullable=False)
    first_name = Column(String(100))
    last_name = Column(String(100))
    role = Column(String(20), default="USER")  # USER or ADMIN
    enabled = Column(Boolean, default=True)
    created_at = Column(DateTime)
    updated_at = Column(DateTime)

    def __repr__(self):
        return f"<User(id={self.id}, username={self.username}, role={self.role})>"
