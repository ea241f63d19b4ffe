"""
Configuration module for the LLM Relay application.
Handles environment variables and application settings.
"""
import os
from dataclasses import dataclass, field
from dotenv import load_dotenv

load_dotenv()


class ConfigError(RuntimeError):
    """Raised when a required setting is missing at startup."""


def _env_int(name: str, default: int) -> int:
    """Read a positive integer env var, falling back to default on missing, invalid or non-positive values."""
    raw = os.getenv(name)
    try:
        value = int(raw) if raw else default
    except ValueError:
        return default
    return value if value > 0 else default


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    try:
        return float(raw) if raw else default
    except ValueError:
        return default


def _env_bool(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class Config:
    """Application configuration, read once at startup and never mutated."""

    # API Keys
    ANTHROPIC_API_KEY: str = ""

    # API Configuration
    ANTHROPIC_API_URL: str = "https://api.anthropic.com/v1/messages"
    ANTHROPIC_VERSION: str = "2023-06-01"
    MODEL: str = "claude-sonnet-4-20250514"
    MAX_TOKENS: int = 1024

    # Application Settings
    APP_TITLE: str = "LLM Relay"
    HOST: str = "0.0.0.0"
    PORT: int = 3000
    ALLOWED_ORIGINS: tuple = field(default=("*",))
    ENVIRONMENT: str = "development"

    # Input limits
    MAX_MESSAGES: int = 50
    MAX_INPUT_LENGTH: int = 4000

    # Timeouts (in seconds)
    UPSTREAM_TIMEOUT: float = 60.0

    # Rate limiting
    RATE_LIMIT_WINDOW_SECONDS: int = 15 * 60
    RATE_LIMIT_MAX_REQUESTS: int = 100
    TRUST_PROXY: bool = False

    @property
    def is_development(self) -> bool:
        """Development posture exposes error details to callers."""
        return self.ENVIRONMENT.lower() == "development"

    @classmethod
    def from_env(cls) -> "Config":
        """Build configuration from environment variables (and .env)."""
        origins = os.getenv("ALLOWED_ORIGINS", "")
        allowed_origins = tuple(o.strip() for o in origins.split(",") if o.strip()) or ("*",)

        return cls(
            ANTHROPIC_API_KEY=os.getenv("ANTHROPIC_API_KEY", ""),
            ANTHROPIC_API_URL=os.getenv("ANTHROPIC_API_URL", cls.ANTHROPIC_API_URL),
            ANTHROPIC_VERSION=os.getenv("ANTHROPIC_VERSION", cls.ANTHROPIC_VERSION),
            MODEL=os.getenv("AI_MODEL", cls.MODEL),
            MAX_TOKENS=_env_int("MAX_TOKENS", cls.MAX_TOKENS),
            HOST=os.getenv("HOST", cls.HOST),
            PORT=_env_int("PORT", cls.PORT),
            ALLOWED_ORIGINS=allowed_origins,
            ENVIRONMENT=os.getenv("APP_ENV", cls.ENVIRONMENT),
            UPSTREAM_TIMEOUT=_env_float("UPSTREAM_TIMEOUT", cls.UPSTREAM_TIMEOUT),
            RATE_LIMIT_WINDOW_SECONDS=_env_int("RATE_LIMIT_WINDOW_SECONDS", cls.RATE_LIMIT_WINDOW_SECONDS),
            RATE_LIMIT_MAX_REQUESTS=_env_int("RATE_LIMIT_MAX_REQUESTS", cls.RATE_LIMIT_MAX_REQUESTS),
            TRUST_PROXY=_env_bool("TRUST_PROXY"),
        )

    def validate(self) -> None:
        """Validate configuration. A missing upstream credential is fatal."""
        if not self.ANTHROPIC_API_KEY:
            raise ConfigError("ANTHROPIC_API_KEY not configured in .env file")
