"""
API Configuration
"""
from typing import List
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings from environment"""

    # Application
    ENVIRONMENT: str = "development"
    DEBUG: bool = False

    # Persistence: "file" (JSON array on disk) or "database" (SQLAlchemy)
    STORE_BACKEND: str = "file"
    DATA_FILE: str = "data/expenses-data.json"
    CATEGORIES_FILE: str = "data/categories-data.json"
    DATABASE_URL: str = "sqlite+aiosqlite:///./data/expenses.db"

    # Shared secret for /admin
    ADMIN_TOKEN: str = "change-this-in-production"

    # Lowercase every string field of request bodies (legacy behaviour)
    LOWERCASE_INPUT: bool = False

    # CORS
    ALLOWED_ORIGINS: List[str] = ["*"]

    class Config:
        env_file = ".env"
        case_sensitive = True


settings = Settings()
