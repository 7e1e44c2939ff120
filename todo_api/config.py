"""
Application Configuration Module

Settings are loaded from environment variables (and an optional ``.env``
file) with defaults suitable for local development. The JWT secret default
is only meant for development; deployments must override it.
"""

from typing import List

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore",
    )

    # App Settings
    PROJECT_NAME: str = "Todo List API"
    ENVIRONMENT: str = "development"
    DEBUG: bool = False
    API_PREFIX: str = "/api"
    DOCS_ENABLED: bool = True

    # Server
    HOST: str = "127.0.0.1"
    PORT: int = 8000
    AUTO_RELOAD: bool = False
    ACCESS_LOG: bool = True

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    # Security
    JWT_SECRET_KEY: str = "dev-secret-key-change-in-production-0123456789"
    JWT_ISSUER: str = "todo-api"
    JWT_AUDIENCE: str = "todo-api-clients"
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_HOURS: int = 3
    BCRYPT_ROUNDS: int = 12

    # Password policy
    PASSWORD_MIN_LENGTH: int = 3
    PASSWORD_REQUIRE_DIGIT: bool = False
    PASSWORD_REQUIRE_LOWERCASE: bool = False
    PASSWORD_REQUIRE_UPPERCASE: bool = False
    PASSWORD_REQUIRE_NON_ALPHANUMERIC: bool = False

    # Database
    DATABASE_URL: str = "sqlite:///./todo_list.db"
    DB_ECHO: bool = False
    DB_POOL_PRE_PING: bool = True

    # CORS
    CORS_ORIGINS: List[str] = []

    @field_validator("ENVIRONMENT")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        """Validate environment value."""
        allowed = ["development", "testing", "staging", "production"]
        if v not in allowed:
            raise ValueError(f"ENVIRONMENT must be one of {allowed}")
        return v

    @field_validator("JWT_SECRET_KEY")
    @classmethod
    def validate_jwt_secret(cls, v: str) -> str:
        if len(v) < 32:
            raise ValueError("JWT secret must be at least 32 characters")
        return v

    @field_validator("JWT_ALGORITHM")
    @classmethod
    def validate_jwt_algorithm(cls, v: str) -> str:
        if v not in ("HS256", "HS384", "HS512"):
            raise ValueError("JWT_ALGORITHM must be an HMAC-SHA2 algorithm")
        return v

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"Invalid LOG_LEVEL: {v}")
        return level


settings = Settings()
