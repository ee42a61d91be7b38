"""
Application configuration management using Pydantic Settings.

This module provides a type-safe, centralized configuration system
that loads from environment variables with sensible defaults.
"""

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppConfig(BaseSettings):
    """
    Application configuration loaded from environment variables.

    All settings can be overridden via .env file or environment variables.
    Settings are validated at startup using Pydantic.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # ===== Supabase Configuration =====
    SUPABASE_URL: str | None = Field(
        default=None,
        description="Supabase project URL"
    )

    SUPABASE_ANON_KEY: str | None = Field(
        default=None,
        description="Supabase anon/public key"
    )

    SUPABASE_SERVICE_KEY: str | None = Field(
        default=None,
        description="Supabase service role key (for server-side operations, bypasses RLS)"
    )

    SCHEDULED_VIDEOS_TABLE: str = Field(
        default="scheduled_videos",
        description="Table holding scheduled video deliveries"
    )

    VIDEO_BUCKET: str = Field(
        default="videos",
        description="Supabase Storage bucket for uploaded videos (public)"
    )

    MAX_VIDEO_BYTES: int = Field(
        default=50 * 1024 * 1024,
        ge=1,
        description="Maximum accepted video upload size (50MB)"
    )

    # ===== Email (Resend) =====
    RESEND_API_KEY: str | None = Field(
        default=None,
        description="Resend API key for email delivery"
    )

    EMAIL_FROM_ADDRESS: str = Field(
        default="onboarding@resend.dev",
        description="Sender address for scheduled video emails"
    )

    # ===== Delivery Scheduler =====
    ENABLE_DELIVERY_SCHEDULER: bool = Field(
        default=True,
        description="Run the delivery scheduler inside the web process"
    )

    @field_validator('ENABLE_DELIVERY_SCHEDULER', 'DEV_MODE', mode='before')
    @classmethod
    def parse_bool_string(cls, v):
        """Parse boolean from string values (platform env vars are strings)."""
        if isinstance(v, bool):
            return v
        if isinstance(v, str):
            return v.lower() in ("true", "1", "yes", "on")
        return False

    DELIVERY_CHECK_INTERVAL_SECONDS: float = Field(
        default=60,
        gt=0,
        description="How often the scheduler looks for due deliveries"
    )

    DELIVERY_BATCH_LIMIT: int = Field(
        default=20,
        ge=1,
        le=500,
        description="Maximum deliveries dispatched per tick"
    )

    DELIVERY_CONCURRENCY: int = Field(
        default=1,
        ge=1,
        le=20,
        description="Deliveries dispatched in parallel within one tick (1 = sequential)"
    )

    DELIVERY_SEND_SPACING_SECONDS: float = Field(
        default=0.6,
        ge=0.0,
        description="Pause between sends; Resend allows max 2 requests/second"
    )

    DELIVERY_SEND_TIMEOUT_SECONDS: float = Field(
        default=120,
        gt=0,
        description="Upper bound for a single gateway send before the delivery is failed"
    )

    # ===== Application Settings =====
    ENVIRONMENT: str = Field(
        default="development",
        description="Environment mode: development or production"
    )

    DEV_MODE: bool = Field(
        default=True,
        description="Dev mode: API key auth is bypassed when no keys are configured"
    )

    LOG_LEVEL: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR)"
    )

    API_HOST: str = Field(
        default="0.0.0.0",
        description="API server host"
    )

    API_PORT: int = Field(
        default=8000,
        ge=1024,
        le=65535,
        description="API server port"
    )

    APP_BASE_URL: str = Field(
        default="http://localhost:8000",
        description="Base URL for the application"
    )

    # ===== Security Settings =====
    API_KEYS: str | None = Field(
        default=None,
        description="Comma-separated list of valid API keys. If empty/None and DEV_MODE=True, auth is bypassed."
    )

    ALLOWED_ORIGINS: str = Field(
        default="*",
        description="Comma-separated list of allowed CORS origins. Use '*' for all (dev only)."
    )

    @property
    def api_keys_list(self) -> list[str]:
        """Get list of valid API keys."""
        if not self.API_KEYS:
            return []
        return [k.strip() for k in self.API_KEYS.split(",") if k.strip()]

    @property
    def allowed_origins_list(self) -> list[str]:
        """Get list of allowed CORS origins.

        In production (DEV_MODE=false), '*' falls back to APP_BASE_URL.
        """
        if self.ALLOWED_ORIGINS == "*":
            if self.DEV_MODE:
                return ["*"]
            return [self.APP_BASE_URL]
        return [o.strip() for o in self.ALLOWED_ORIGINS.split(",") if o.strip()]

    @property
    def auth_required(self) -> bool:
        """Check if authentication is required (False in dev mode with no keys)."""
        return bool(self.api_keys_list) or not self.DEV_MODE

    # ===== Computed Properties =====

    @property
    def supabase_configured(self) -> bool:
        """Check if Supabase is configured for server-side access."""
        return (
            self.SUPABASE_URL is not None
            and self.SUPABASE_SERVICE_KEY is not None
        )

    @property
    def email_configured(self) -> bool:
        """Check if Resend is configured."""
        return self.RESEND_API_KEY is not None


# Global configuration instance
# Import this in other modules: from backend.config import config
config = AppConfig()


# Validation on startup
if __name__ == "__main__":
    print("Configuration loaded successfully!")
    print(f"Supabase: {'✓' if config.supabase_configured else '✗'}")
    print(f"Resend: {'✓' if config.email_configured else '✗'}")
    print(f"Delivery check interval: {config.DELIVERY_CHECK_INTERVAL_SECONDS}s")
    print(f"Delivery concurrency: {config.DELIVERY_CONCURRENCY}")
