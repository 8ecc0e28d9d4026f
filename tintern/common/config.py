"""
Client Configuration Module

Centralized configuration management with Pydantic validation.
All environment variables are validated at startup to catch misconfigurations early.
"""

import logging
from functools import lru_cache
from typing import List, Optional

from dotenv import load_dotenv
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Load environment variables from .env file
load_dotenv()

logger = logging.getLogger(__name__)


class ClientSettings(BaseSettings):
    """
    Tintern client configuration with validation.

    All settings can be overridden via environment variables
    (e.g. API_BASE_URL, SESSION_TTL_DAYS).
    """

    model_config = SettingsConfigDict(env_prefix="", case_sensitive=False, extra="ignore")

    # === Backend ===
    api_base_url: str = Field(
        default="https://tintern-server.fly.dev",
        description="Backend host serving the JSON API",
    )
    api_prefix: str = Field(default="/api/v1", description="Path prefix of every API endpoint")
    request_timeout_seconds: float = Field(
        default=30.0,
        ge=1,
        le=300,
        description="Per-request timeout in seconds (1-300)",
    )
    transport_retry_attempts: int = Field(
        default=3,
        ge=1,
        le=10,
        description="Attempts for idempotent requests that fail at the transport level",
    )
    transport_retry_max_wait: float = Field(
        default=4.0,
        ge=0,
        description="Upper bound of the exponential backoff between attempts",
    )

    # === Session persistence ===
    session_ttl_days: int = Field(default=7, ge=1, le=90)
    token_cookie_name: str = Field(default="token")
    user_cookie_name: str = Field(default="user")
    cookie_path: str = Field(default="/")
    session_file: str = Field(
        default="~/.tintern/session.json",
        description="Where the file-backed session store keeps its values",
    )

    # === Navigation ===
    login_path: str = Field(default="/auth/login")
    signup_path: str = Field(default="/auth/signup")
    landing_path: str = Field(default="/profile")
    public_paths: str = Field(
        default="/,/jobs,/auth/login,/auth/signup",
        description="Comma-separated routes reachable without a session",
    )
    callback_param: str = Field(default="callbackUrl")

    # === Interaction ===
    stall_timeout_seconds: float = Field(
        default=10.0,
        gt=0,
        description="Busy flags older than this are treated as stalled and reset",
    )

    # === Logging ===
    log_level: str = Field(default="INFO", description="Root log level (DEBUG, INFO, WARNING, ERROR)")
    log_format: str = Field(default="simple", description="simple or json")

    # === Web frontend ===
    flask_secret_key: Optional[str] = Field(default=None)
    environment: str = Field(
        default="development",
        description="Environment: development, staging, production",
    )

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        """Validate environment is a known value."""
        allowed = {"development", "staging", "production"}
        v_lower = v.lower()
        if v_lower not in allowed:
            raise ValueError(f"environment must be one of: {', '.join(sorted(allowed))}")
        return v_lower

    @field_validator("log_format")
    @classmethod
    def validate_log_format(cls, v: str) -> str:
        if v.lower() not in ("simple", "json"):
            raise ValueError("log_format must be simple or json")
        return v.lower()

    @field_validator("api_base_url")
    @classmethod
    def validate_url_format(cls, v: str) -> str:
        """Basic URL format validation."""
        if not v.startswith(("http://", "https://")):
            raise ValueError(f"Invalid URL format: {v}")
        return v.rstrip("/")

    @field_validator("api_prefix", "login_path", "signup_path", "landing_path", "cookie_path")
    @classmethod
    def validate_absolute_path(cls, v: str) -> str:
        if not v.startswith("/"):
            raise ValueError(f"Path must start with '/': {v}")
        return v

    @property
    def api_root(self) -> str:
        """Base URL every endpoint is resolved against."""
        return f"{self.api_base_url}{self.api_prefix.rstrip('/')}"

    @property
    def public_paths_list(self) -> List[str]:
        """Parse public routes into a list."""
        return [p.strip() for p in self.public_paths.split(",") if p.strip()]

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    def validate_production_config(self) -> List[str]:
        """
        Validate configuration is suitable for production.

        Returns list of warning/error messages.
        """
        issues = []

        if self.is_production:
            if not self.api_base_url.startswith("https://"):
                issues.append("CRITICAL: API_BASE_URL must use https in production")
            if not self.flask_secret_key:
                issues.append("CRITICAL: FLASK_SECRET_KEY required in production")
            if "localhost" in self.api_base_url:
                issues.append("WARNING: Using a localhost backend in production")

        return issues


@lru_cache()
def get_settings() -> ClientSettings:
    """
    Get cached settings instance.

    Settings are loaded once and cached. Tests call get_settings.cache_clear()
    after changing the environment.
    """
    return ClientSettings()


def validate_config_on_startup(settings: Optional[ClientSettings] = None) -> ClientSettings:
    """
    Validate configuration at application startup.

    Checks `settings` when given, otherwise the environment settings.
    Raises ValueError with details if config is invalid.
    Logs warnings for non-critical issues.
    """
    if settings is None:
        try:
            settings = get_settings()
        except Exception as e:
            raise ValueError(f"Configuration validation failed: {e}")

    for issue in settings.validate_production_config():
        if issue.startswith("CRITICAL"):
            raise ValueError(issue)
        logger.warning(issue)

    logger.info(f"Configuration loaded: environment={settings.environment}")
    logger.info(f"  api_root={settings.api_root}")
    logger.info(f"  request_timeout={settings.request_timeout_seconds}s")
    logger.info(f"  session_ttl_days={settings.session_ttl_days}")
    return settings
