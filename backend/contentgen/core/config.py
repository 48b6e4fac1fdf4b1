import secrets
from typing import Literal

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_ignore_empty=True,
        extra="ignore",
    )

    PROJECT_NAME: str = "contentgen"
    API_V1_STR: str = "/api/v1"
    ENVIRONMENT: Literal["local", "staging", "production"] = "local"
    FRONTEND_HOST: str = "http://localhost:5173"

    SECRET_KEY: str = secrets.token_urlsafe(32)
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24 * 8

    SQLALCHEMY_DATABASE_URI: str = "sqlite:///./contentgen.db"

    # LLM provider (any OpenAI-compatible endpoint)
    LLM_API_KEY: str | None = None
    LLM_BASE_URL: str | None = None
    MODEL_DEFAULT: str = "gpt-4o-mini"
    IMAGE_MODEL: str = "dall-e-3"

    # Dashboard client policy
    GENERATION_SERVICE_URL: str = "http://localhost:8000/api/v1/functions"
    GENERATION_TIMEOUT_SECONDS: float | None = None
    GENERATION_MAX_RETRIES: int = 0
    GENERATION_BATCH_CONCURRENCY: int = 1
    REALTIME_DEBOUNCE_SECONDS: float = 0.1
    HISTORY_LIMIT: int = 50
    ACTIVITY_LOG_LIMIT: int = 50
    MAX_LIST_LIMIT: int = 500
    REALTIME_STREAM_QUEUE_SIZE: int = 1000

    # Team invitations
    INVITATION_EXPIRE_DAYS: int = 7
    RESEND_API_KEY: str | None = None
    INVITATION_FROM_EMAIL: str = "contentgen <onboarding@resend.dev>"

    @field_validator("GENERATION_MAX_RETRIES")
    @classmethod
    def validate_retries(cls, value: int) -> int:
        if value < 0:
            raise ValueError("GENERATION_MAX_RETRIES must be >= 0")
        return value

    @field_validator("GENERATION_BATCH_CONCURRENCY")
    @classmethod
    def validate_concurrency(cls, value: int) -> int:
        if value < 1:
            raise ValueError("GENERATION_BATCH_CONCURRENCY must be >= 1")
        return value

    @property
    def generation_service_url(self) -> str:
        return self.GENERATION_SERVICE_URL.rstrip("/")


settings = Settings()
