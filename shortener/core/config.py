"""
Application configuration management using Pydantic Settings.
All settings can be overridden via environment variables.
"""

from typing import Any, List

from pydantic import AnyHttpUrl, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Asymmetric algorithms accepted for token signing.
SIGNING_ALGORITHMS = {"RS256", "RS384", "RS512", "ES256", "ES384", "ES512"}


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # Application
    PROJECT_NAME: str = "URL Shortener"
    VERSION: str = "0.1.0"
    API_V1_PREFIX: str = "/api/v1"
    DEBUG: bool = False

    # Authentication
    AUTH_PRIVATE_KEY_FILE: str = "./keys/private.pem"
    AUTH_KEY_ID: str = "shortener-key-1"
    AUTH_ALGORITHM: str = "RS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60
    BCRYPT_ROUNDS: int = 12

    @field_validator("AUTH_ALGORITHM", mode="after")
    @classmethod
    def validate_algorithm(cls, v: str) -> str:
        """Only asymmetric algorithms are usable with a key id lookup."""
        if v not in SIGNING_ALGORITHMS:
            raise ValueError(
                f"AUTH_ALGORITHM must be one of {sorted(SIGNING_ALGORITHMS)}, got {v!r}"
            )
        return v

    # Usecases
    CONTEXT_TIMEOUT_SECONDS: float = 5.0
    URL_EXPIRATION_YEARS: int = 1
    SHORT_ID_MAX_ATTEMPTS: int = 10

    # Database
    DATABASE_URL: str = "sqlite+aiosqlite:///./data/shortener.db"

    @property
    def is_sqlite(self) -> bool:
        """Check if using SQLite database."""
        return self.DATABASE_URL.startswith("sqlite")

    # CORS
    BACKEND_CORS_ORIGINS: List[AnyHttpUrl] = []

    @field_validator("BACKEND_CORS_ORIGINS", mode="before")
    @classmethod
    def assemble_cors_origins(cls, v: Any) -> List[str] | str:
        """Parse CORS origins from string or list."""
        if isinstance(v, str) and not v.startswith("["):
            return [i.strip() for i in v.split(",") if i.strip()]
        elif isinstance(v, (list, str)):
            return v
        raise ValueError(v)

    # First superuser (created on startup)
    DISABLE_BOOTSTRAP_USERS: bool = False
    FIRST_SUPERUSER_EMAIL: str = "admin@example.com"
    FIRST_SUPERUSER_PASSWORD: str = "changethis"  # Max 72 bytes for bcrypt

    @field_validator("FIRST_SUPERUSER_PASSWORD", mode="after")
    @classmethod
    def validate_password_length(cls, v: str) -> str:
        """Validate password length for bcrypt (max 72 bytes)."""
        if v and len(v.encode("utf-8")) > 72:
            raise ValueError(
                f"FIRST_SUPERUSER_PASSWORD is too long ({len(v.encode('utf-8'))} bytes). "
                "Bcrypt has a maximum of 72 bytes. Please use a shorter password."
            )
        return v


settings = Settings()
