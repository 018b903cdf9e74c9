"""Application settings using pydantic-settings."""

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from captcha_relay.enums import RedirectMode

RECAPTCHA_VERIFY_URL = "https://www.google.com/recaptcha/api/siteverify"
DEFAULT_REDIRECT_URL = "https://default-redirect.com"


class APIServerSettings(BaseModel):
    """API server configuration."""

    host: str = Field(default="0.0.0.0", description="Server host")
    port: int = Field(default=8080, ge=1, le=65535, description="Server port")
    cors_allow_origins: list[str] = Field(
        default_factory=list,
        description=(
            "CORS allowed origins. Empty disables CORS, so browser clients served from "
            "another origin need their origin listed here (there is no '*' default)"
        ),
    )
    rate_limit: str = Field(default="100/minute", description="Rate limit for token verification")
    forwarded_allow_ips: str = Field(
        default="127.0.0.1",
        description="Comma separated proxy IPs trusted for X-Forwarded-For ('*' = any)",
    )
    keep_alive_timeout: int = Field(
        default=60, ge=1, description="Seconds to keep idle connections open"
    )
    graceful_shutdown_timeout: int = Field(
        default=30, ge=1, description="Seconds in-flight requests get to finish on shutdown"
    )


class RecaptchaSettings(BaseModel):
    """Verification provider configuration."""

    secret: str | None = Field(
        default=None, description="reCAPTCHA secret key (None = verification disabled)"
    )
    verify_url: str = Field(default=RECAPTCHA_VERIFY_URL, description="siteverify endpoint")
    timeout: float = Field(
        default=2.5, gt=0, le=10, description="Total timeout in seconds for the verify call"
    )
    score_threshold: float = Field(
        default=0.7, ge=0.0, le=1.0, description="Minimum score to accept a token"
    )
    min_token_length: int = Field(default=10, ge=1, description="Minimum accepted token length")
    force_ipv4: bool = Field(
        default=False, description="Make outbound connections over IPv4 only"
    )

    @field_validator("secret")
    @classmethod
    def validate_secret(cls, v: str | None) -> str | None:
        """Treat a blank secret as not configured."""
        if v is None or not v.strip():
            return None
        return v.strip()


class RedirectSettings(BaseModel):
    """Redirect target configuration."""

    url: str = Field(default=DEFAULT_REDIRECT_URL, description="Base redirect URL")
    mode: RedirectMode = Field(
        default=RedirectMode.FRAGMENT,
        description="How the email payload is attached: 'fragment' or 'path'",
    )

    @field_validator("url")
    @classmethod
    def validate_url(cls, v: str) -> str:
        """Validate redirect URL is not empty."""
        if not v or not v.strip():
            raise ValueError("Redirect URL cannot be empty")
        return v.strip()


class LoggingSettings(BaseModel):
    """Logging configuration."""

    loggers: dict[str, str] = Field(default={}, description="Loggers and their levels")
    log_level: str = Field(default="INFO", description="Log level")
    log_format: str = Field(
        default="[%(asctime)s] %(levelname)s [%(name)s] %(message)s",
        description="Log format",
    )
    date_format: str = Field(default="%Y-%m-%d %H:%M:%S", description="Log date format")
    rotate_logs: bool = Field(default=False, description="Rotate logs daily")
    log_file: str | None = Field(default=None, description="Log file to write to")


class AppSettings(BaseSettings):
    """Root application settings."""

    model_config = SettingsConfigDict(
        env_nested_delimiter="__",
        env_prefix="RELAY_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    api_server: APIServerSettings = Field(default_factory=APIServerSettings)
    recaptcha: RecaptchaSettings = Field(default_factory=RecaptchaSettings)
    redirect: RedirectSettings = Field(default_factory=RedirectSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
