"""
Teacher Dashboard Backend — Application Configuration
======================================================

What:  Centralized configuration management using Pydantic Settings.
How:   Pydantic Settings reads from environment variables (or .env file),
       validates types/ranges, and provides a singleton `settings` object.
Who:   Imported by the application factory, the Alembic environment and tests.
When:  Loaded once at module import time; validated before the app starts.

Security Note:
    The signing secret and the login credential pair below are development
    stand-ins. Deployments override them through the environment
    (JWT_SECRET, LOGIN_USERNAME, LOGIN_PASSWORD).
"""

from typing import List

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings

DEFAULT_JWT_SECRET = "teacher-dashboard-secret-key-2024"


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Attributes are grouped by concern for readability.
    """

    # ── Database ──────────────────────────────────────────────────────────
    # What: SQLite file accessed through the aiosqlite async driver
    # Format: sqlite+aiosqlite:///<path>  (relative paths resolve from CWD)
    database_url: str = Field(
        default="sqlite+aiosqlite:///./database.sqlite",
        description="Async SQLAlchemy URL of the embedded database",
    )

    # What: Seconds an operation waits for the single shared connection
    # before giving up (surfaced as 503 like a locked database)
    db_pool_timeout: int = Field(default=30, ge=1, le=300)

    # What: Insert the six sample students when the table is empty on startup
    seed_sample_data: bool = Field(default=True)

    # ── Authentication ────────────────────────────────────────────────────
    jwt_secret: str = Field(default=DEFAULT_JWT_SECRET, min_length=8)
    jwt_algorithm: str = Field(default="HS256")
    token_ttl_hours: int = Field(default=24, ge=1, le=24 * 30)

    # What: Cookie consulted when no Authorization header is present
    auth_cookie_name: str = Field(default="auth_token")

    # What: The one credential pair accepted by POST /auth/login
    login_username: str = Field(default="teacher")
    login_password: str = Field(default="password123")

    # ── Authorization ─────────────────────────────────────────────────────
    # What: Restrict the Student role to its own record when listing students
    student_self_scope: bool = Field(default=True)

    # ── CORS ──────────────────────────────────────────────────────────────
    # Format: Comma-separated URLs (split by cors_origins_list)
    cors_origins: str = Field(
        default="http://localhost:3000,http://localhost:8080,http://localhost:5173"
    )

    @property
    def cors_origins_list(self) -> List[str]:
        """Splits comma-separated CORS origins into a list."""
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    # ── Server ────────────────────────────────────────────────────────────
    backend_host: str = Field(default="0.0.0.0")
    backend_port: int = Field(default=3001, ge=1024, le=65535)

    # Valid: DEBUG, INFO, WARNING, ERROR, CRITICAL
    log_level: str = Field(default="INFO")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Ensures log level is a valid Python logging level name."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper = v.upper()
        if upper not in valid_levels:
            raise ValueError(f"Invalid log_level '{v}'. Must be one of: {valid_levels}")
        return upper

    @field_validator("jwt_algorithm")
    @classmethod
    def validate_jwt_algorithm(cls, v: str) -> str:
        """Only the shared-secret HS256 scheme is supported."""
        if v.upper() != "HS256":
            raise ValueError("jwt_algorithm must be HS256")
        return "HS256"

    # ── Pydantic Settings Config ──────────────────────────────────────────
    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
    }

    def validate_required_for_production(self) -> None:
        """
        What:  Flags development stand-ins that should not reach production.
        When:  Called during app startup (lifespan); raises ValueError listing problems.
        """
        errors = []
        if self.jwt_secret == DEFAULT_JWT_SECRET:
            errors.append("JWT_SECRET is the built-in development secret.")
        if self.login_password == "password123":
            errors.append("LOGIN_PASSWORD is the built-in development password.")
        if errors:
            raise ValueError(
                "Configuration validation failed:\n" + "\n".join(f"  - {e}" for e in errors)
            )


# Singleton instance — imported throughout the application
settings = Settings()
