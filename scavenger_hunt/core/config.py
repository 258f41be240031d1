"""
Application configuration loaded from the environment (and an optional .env file).

Services never read the environment themselves: the settings object is built
once and its values are handed to constructors through the dependency layer.
"""
from functools import lru_cache
from typing import Literal, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # ============= Application =============
    APP_NAME: str = "Scavenger Hunt API"
    LOG_LEVEL: str = "INFO"

    # ============= Database =============
    DATABASE_URL: str = "sqlite:///./scavenger_hunt.db"

    # ============= Scoring oracle =============
    LLM_PROVIDER: Literal["openrouter", "huggingface"] = "openrouter"
    OPENROUTER_API_KEY: Optional[str] = None
    OPENROUTER_BASE_URL: str = "https://openrouter.ai/api/v1"
    OPENROUTER_MODEL: str = "google/gemini-2.0-flash-exp:free"
    HF_TOKEN: Optional[str] = None
    HF_REPO_ID: str = "mistralai/Mistral-7B-Instruct-v0.2"
    ORACLE_TIMEOUT_SECONDS: float = Field(default=20.0, gt=0)
    ORACLE_MAX_TOKENS: int = 150
    SCORING_TEMPERATURE: float = 0.0
    HINT_TEMPERATURE: float = 0.7

    # ============= Answer / hint policy =============
    MAX_HINTS: int = Field(default=2, ge=0)
    ANSWER_OVERWRITE_POLICY: Literal["last_write_wins", "keep_correct"] = "last_write_wins"

    # ============= Image uploads =============
    UPLOAD_ROOT: str = "./public"
    DEFAULT_MAX_FILE_SIZE: int = 5 * 1024 * 1024

    # ============= Admin auth =============
    ADMIN_USERNAME: str = "admin"
    ADMIN_PASSWORD: str = "change-me"
    JWT_SECRET: str = "dev-secret-change-me"
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60

    # Participant identity cookie
    USER_COOKIE_MAX_AGE: int = 24 * 60 * 60
    COOKIE_SECURE: bool = False


@lru_cache()
def get_settings() -> Settings:
    return Settings()
