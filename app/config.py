"""
Configuration management using Pydantic Settings
"""
from pydantic_settings import BaseSettings
from typing import List


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    # Database
    DATABASE_URL: str = "sqlite:///./quiz_generator.db"

    # Gemini API
    GEMINI_API_KEY: str = ""
    GEMINI_MODEL: str = "gemini-1.5-flash"
    GEMINI_TEMPERATURE: float = 0.7
    AI_MODEL_LABEL: str = "Gemini-1.5-Flash"  # Stored on every generated quiz

    # Application
    APP_NAME: str = "Quiz Generator Service"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False
    ALLOWED_ORIGINS: List[str] = ["http://localhost:3000", "http://localhost:8000"]

    # Rate Limiting
    GENERATION_RATE_LIMIT_PER_MINUTE: int = 10

    # Generation
    MAX_BATCH_SIZE: int = 10
    DEFAULT_BATCH_SIZE: int = 5

    # Startup seeding
    SEED_QUIZ_THRESHOLD: int = 5
    SEED_QUIZ_COUNT: int = 3
    SKIP_SEEDING: bool = False

    # System actor for unattended generation
    SYSTEM_USERNAME: str = "system"
    SYSTEM_EMAIL: str = "system@quizapp.com"

    # Logging
    LOG_LEVEL: str = "INFO"

    class Config:
        env_file = ".env"
        case_sensitive = True


# Global settings instance
settings = Settings()
