# python
# app/core/config.py
"""Configuration settings for the Chronicle community API.

Uses Pydantic BaseSettings for environment variable management.
"""
import secrets
from enum import Enum

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class EnvironmentEnum(str, Enum):
    development = "development"
    testing = "testing"
    staging = "staging"
    production = "production"


class LogLevelEnum(str, Enum):
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class StoreBackendEnum(str, Enum):
    memory = "memory"
    sql = "sql"


class Settings(BaseSettings):
    # Pydantic v2 settings configuration
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ===== Application Settings =====
    app_name: str = Field(default="Chronicle API", description="Application name")
    environment: EnvironmentEnum = Field(
        default=EnvironmentEnum.development, description="Environment type"
    )
    debug: bool = Field(default=False, description="Debug mode")
    version: str = Field(default="1.0.0", description="Application version")

    # ===== Security Settings =====
    secret_key: str = Field(
        default_factory=lambda: secrets.token_urlsafe(32),
        description="Secret used for password hashing and upload signatures",
    )
    session_cookie_name: str = Field(default="session", description="Session cookie name")
    session_max_age: int = Field(
        default=60 * 60 * 24 * 7, description="Session cookie lifetime in seconds"
    )

    # ===== Record Store Settings =====
    store_backend: StoreBackendEnum = Field(
        default=StoreBackendEnum.memory, description="Record store implementation"
    )
    database_url: str | None = Field(default=None, description="Database connection URL")
    test_database_url: str | None = Field(default=None, description="Test database URL")

    # ===== AI Service (Gemini) =====
    gemini_api_key: str | None = Field(default=None, description="Google Gemini API key")
    gemini_model: str = Field(default="gemini-1.5-flash", description="Gemini model to use")
    gemini_max_tokens: int = Field(default=1000, description="Maximum tokens for Gemini")
    gemini_temperature: float = Field(default=0.7, description="Sampling temperature")
    ai_request_timeout: int = Field(default=30, description="AI transport timeout in seconds")
    ai_response_language: str = Field(default="English", description="Language of AI output")

    # ===== AI Pipeline Limits =====
    ai_summary_window: int = Field(default=50, description="Room messages used for summaries")
    quality_analysis_post_limit: int = Field(
        default=50, description="Posts considered by room quality analysis"
    )

    # ===== File Upload Settings =====
    upload_dir: str = Field(default="public/uploads", description="Upload storage directory")
    max_file_size: int = Field(default=52428800, description="Maximum file size in bytes (50MB)")

    # ===== CORS Settings =====
    allowed_origins: str = Field(
        default="http://localhost:3000,http://localhost:5173,http://127.0.0.1:3000",
        description="Allowed CORS origins (comma-separated)",
    )

    @property
    def allowed_origins_list(self) -> list[str]:
        """Parse CORS origins from comma-separated string."""
        return [origin.strip() for origin in self.allowed_origins.split(",") if origin.strip()]

    # ===== Monitoring & Logging =====
    log_level: LogLevelEnum = Field(default=LogLevelEnum.INFO, description="Logging level")

    # ===== Server Settings =====
    host: str = Field(default="127.0.0.1", description="Host to bind the server")
    port: int = Field(default=8000, description="Port to bind the server")

    # ===== Computed Properties =====
    @property
    def is_development(self) -> bool:
        return self.environment == EnvironmentEnum.development

    @property
    def is_production(self) -> bool:
        return self.environment == EnvironmentEnum.production

    @property
    def is_testing(self) -> bool:
        return self.environment == EnvironmentEnum.testing

    @property
    def has_ai_enabled(self) -> bool:
        return bool(self.gemini_api_key)

    @property
    def uses_sql_store(self) -> bool:
        return self.store_backend == StoreBackendEnum.sql

    @property
    def secret_key_is_generated(self) -> bool:
        """True when no SECRET_KEY was supplied and a per-process key is in use."""
        return "secret_key" not in self.model_fields_set

    # ===== Validation Methods =====
    @field_validator("environment", mode="before")
    @classmethod
    def validate_environment(cls, v):
        if v and isinstance(v, str):
            lv = v.lower()
            if lv in ["dev", "develop"]:
                return "development"
            if lv in ["prod"]:
                return "production"
            if lv in ["test"]:
                return "testing"
            return lv
        return v

    @field_validator("max_file_size")
    @classmethod
    def validate_file_size(cls, v):
        if v > 100 * 1024 * 1024:
            raise ValueError("Maximum file size cannot exceed 100MB")
        return v

    @field_validator("ai_summary_window", "quality_analysis_post_limit")
    @classmethod
    def validate_positive_window(cls, v):
        if v < 1:
            raise ValueError("AI windows must be at least 1")
        return v

    @model_validator(mode="after")
    def check_store_backend(self):
        if self.store_backend == StoreBackendEnum.sql and not (
            self.database_url or self.test_database_url
        ):
            raise ValueError("DATABASE_URL is required when STORE_BACKEND=sql")
        return self


settings = Settings()


class ConfigValidator:
    @staticmethod
    def validate_required_settings():
        errors = []
        if settings.uses_sql_store and not (settings.database_url or settings.test_database_url):
            errors.append("DATABASE_URL is required for the sql store backend")
        if settings.is_production and not settings.gemini_api_key:
            errors.append("GEMINI_API_KEY is required in production")
        if settings.is_production and settings.store_backend == StoreBackendEnum.memory:
            errors.append("The memory store backend is not allowed in production")
        if (settings.uses_sql_store or settings.is_production) and settings.secret_key_is_generated:
            errors.append(
                "SECRET_KEY must be set for the sql store backend and in production; "
                "stored password hashes and upload signatures depend on it"
            )
        if errors:
            raise ValueError(f"Configuration errors: {', '.join(errors)}")

    @staticmethod
    def get_feature_status() -> dict:
        return {
            "ai_enabled": settings.has_ai_enabled,
            "store_backend": settings.store_backend.value,
            "environment": settings.environment.value,
        }


def get_config_summary() -> dict:
    return {
        "app_name": settings.app_name,
        "version": settings.version,
        "environment": settings.environment.value,
        "debug": settings.debug,
        "features": ConfigValidator.get_feature_status(),
        "database_configured": bool(settings.database_url),
    }


__all__ = [
    "settings",
    "Settings",
    "ConfigValidator",
    "get_config_summary",
    "EnvironmentEnum",
    "LogLevelEnum",
    "StoreBackendEnum",
]
