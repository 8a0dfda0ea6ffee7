"""Application configuration"""
from pydantic_settings import BaseSettings
from functools import lru_cache


class Settings(BaseSettings):
    """Application settings"""

    # Supabase
    supabase_url: str = ""
    supabase_service_role_key: str = ""
    supabase_anon_key: str = ""

    # Application
    environment: str = "development"
    cors_origins: list[str] = ["*"]

    # Webhook delivery
    webhook_timeout_seconds: float = 30.0
    webhook_max_attempts: int = 3
    webhook_backoff_base_seconds: float = 1.0
    webhook_backoff_max_seconds: float = 10.0

    # Form UI feedback
    copy_feedback_seconds: float = 2.0

    # Results history
    submissions_page_size: int = 12

    class Config:
        env_file = ".env"
        case_sensitive = False


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()
