"""Configuration management using Pydantic settings.

This module implements a two-layer configuration system:
1. Environment: Loads raw values from environment variables (UPPER_CASE)
2. Settings: Clean application settings with lowercase fields and derived values

Usage:
    # Production: Load from environment
    settings = Settings.load()

    # Tests: Construct directly with test values
    settings = Settings(sse_retry_milliseconds=0, sse_demo_interval_seconds=0.01)
"""

from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Project root directory (parent of eventstream/)
_PROJECT_ROOT = Path(__file__).resolve().parent.parent

# Default secret key that must be changed in production
_DEFAULT_SECRET_KEY = "dev-secret-key-change-in-production"


class Environment(BaseSettings):
    """Raw environment variable loading.

    This class loads values directly from environment variables with UPPER_CASE names.
    It should not contain any derived values or transformation logic.
    """

    model_config = SettingsConfigDict(
        env_file=_PROJECT_ROOT / ".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # ── Core ───────────────────────────────────────────────────────────

    SECRET_KEY: str = Field(default=_DEFAULT_SECRET_KEY)
    FLASK_ENV: str = Field(default="development")
    CORS_ORIGINS: list[str] = Field(
        default=[], description="Origins allowed to open cross-origin event streams"
    )

    # ── SSE ────────────────────────────────────────────────────────────

    SSE_RETRY_MILLISECONDS: int = Field(
        default=0,
        description="Reconnection delay sent as 'retry:' with every message (0 omits the field)"
    )
    SSE_HIGH_WATER_MARK: int = Field(
        default=64,
        description="Buffered chunks per stream before writes report backpressure"
    )
    SSE_HEARTBEAT_SECONDS: float = Field(
        default=15.0,
        description="Idle time before a keep-alive comment is written to an open stream"
    )
    SSE_DEMO_ENABLED: bool = Field(
        default=True,
        description="Register the /demo example streams"
    )
    SSE_DEMO_INTERVAL_SECONDS: float = Field(
        default=1.0,
        description="Delay between messages on the /demo/timer stream"
    )


class Settings(BaseModel):
    """Application settings with lowercase fields and derived values.

    For production, use Settings.load() to load from environment.
    For tests, construct directly with test values (defaults provided for convenience).
    """

    model_config = ConfigDict(from_attributes=True)

    # ── Core ───────────────────────────────────────────────────────────

    secret_key: str = _DEFAULT_SECRET_KEY
    flask_env: str = "development"
    cors_origins: list[str] = Field(default=[])

    # ── SSE ────────────────────────────────────────────────────────────

    sse_retry_milliseconds: int = 0
    sse_high_water_mark: int = 64
    sse_heartbeat_seconds: float = 15.0
    sse_demo_enabled: bool = True
    sse_demo_interval_seconds: float = 1.0

    @property
    def is_testing(self) -> bool:
        """Check if running in testing environment."""
        return self.flask_env == "testing"

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.flask_env == "production"

    def to_flask_config(self) -> "FlaskConfig":
        """Create Flask configuration object from settings."""
        return FlaskConfig(
            SECRET_KEY=self.secret_key,
        )

    def validate_production_config(self) -> None:
        """Validate that the configuration is usable.

        Raises:
            ConfigurationError: If required settings are missing or insecure
        """
        from eventstream.exceptions import ConfigurationError

        errors: list[str] = []

        # SECRET_KEY must be changed from default in production
        if self.is_production and self.secret_key == _DEFAULT_SECRET_KEY:
            errors.append(
                "SECRET_KEY must be set to a secure value in production "
                "(current value is the insecure default)"
            )

        if self.sse_retry_milliseconds < 0:
            errors.append("SSE_RETRY_MILLISECONDS must not be negative")

        if self.sse_high_water_mark <= 0:
            errors.append("SSE_HIGH_WATER_MARK must be greater than zero")

        if self.sse_heartbeat_seconds <= 0:
            errors.append("SSE_HEARTBEAT_SECONDS must be greater than zero")

        if self.sse_demo_interval_seconds <= 0:
            errors.append("SSE_DEMO_INTERVAL_SECONDS must be greater than zero")

        if errors:
            raise ConfigurationError(
                "Configuration validation failed:\n  - " + "\n  - ".join(errors)
            )

    @classmethod
    def load(cls, env: Environment | None = None) -> "Settings":
        """Load settings from environment variables.

        Args:
            env: Optional Environment instance (for testing). If None, loads from environment.

        Returns:
            Settings instance with all values resolved
        """
        if env is None:
            env = Environment()

        # Demo streams are never exposed in production
        sse_demo_enabled = env.SSE_DEMO_ENABLED and env.FLASK_ENV != "production"

        return cls(
            secret_key=env.SECRET_KEY,
            flask_env=env.FLASK_ENV,
            cors_origins=env.CORS_ORIGINS,
            sse_retry_milliseconds=env.SSE_RETRY_MILLISECONDS,
            sse_high_water_mark=env.SSE_HIGH_WATER_MARK,
            sse_heartbeat_seconds=env.SSE_HEARTBEAT_SECONDS,
            sse_demo_enabled=sse_demo_enabled,
            sse_demo_interval_seconds=env.SSE_DEMO_INTERVAL_SECONDS,
        )


class FlaskConfig:
    """Flask-specific configuration for app.config.from_object().

    This is a simple DTO with the UPPER_CASE attributes Flask expects.
    Create via Settings.to_flask_config().
    """

    def __init__(
        self,
        SECRET_KEY: str,
    ) -> None:
        self.SECRET_KEY = SECRET_KEY
