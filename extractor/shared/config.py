"""
Configuration Management

Pydantic-settings based configuration for the attachment extractor.
Settings are read once per execution environment and are immutable afterwards.

Environment variables are not prefixed so the function can be deployed with
the same variables as the rest of the mail pipeline:
    ATTACHMENT_BUCKET=my-attachments WEBHOOK_URL=https://... API_KEY=...
"""

from functools import lru_cache
from typing import Literal

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from extractor.shared.exceptions import FatalConfigError

REQUIRED_SETTINGS = ("attachment_bucket", "webhook_url")


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Variable names are case-insensitive. Example: ATTACHMENT_BUCKET=my-bucket
    """

    model_config = SettingsConfigDict(
        env_file=[".env.local", ".env"],  # Try .env.local first
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        frozen=True,
    )

    # Required
    attachment_bucket: str = Field(
        ...,
        min_length=1,
        description="Destination bucket for extracted attachments",
    )
    webhook_url: str = Field(
        ...,
        min_length=1,
        description="Endpoint notified once per stored attachment",
    )

    # Webhook Configuration
    api_key: str | None = Field(
        default=None,
        description="Bearer token for the webhook (unauthenticated when unset)",
    )
    webhook_timeout_seconds: float = Field(
        default=10.0,
        gt=0,
        description="Timeout for the webhook POST",
    )

    # Attachment Configuration
    attachments_prefix: str = Field(
        default="attachments/",
        description="Key prefix for extracted attachments",
    )
    allowed_extensions: tuple[str, ...] = Field(
        default=(".pdf", ".epub"),
        description="Filename extensions that qualify for extraction",
    )
    url_ttl_seconds: int = Field(
        default=15 * 60,
        gt=0,
        le=7 * 24 * 60 * 60,  # SigV4 presign limit
        description="Validity window of presigned attachment URLs",
    )

    # S3 Configuration
    s3_endpoint_url: str | None = Field(
        default=None,
        description="S3 endpoint URL (for local development)",
    )
    s3_connect_timeout_seconds: float = Field(default=5.0, gt=0)
    s3_read_timeout_seconds: float = Field(default=30.0, gt=0)
    s3_max_attempts: int = Field(
        default=3,
        ge=1,
        description="Transport-level attempts per S3 call",
    )

    # AWS Configuration
    aws_region: str = Field(
        default="us-east-1",
        description="AWS region",
    )

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO",
        description="Logging level",
    )

    @field_validator("attachment_bucket", "webhook_url", mode="before")
    @classmethod
    def _strip_required(cls, value: object) -> object:
        if isinstance(value, str):
            return value.strip()
        return value

    @field_validator("api_key", "s3_endpoint_url", mode="before")
    @classmethod
    def _blank_to_none(cls, value: object) -> object:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @field_validator("allowed_extensions")
    @classmethod
    def _normalize_extensions(cls, value: tuple[str, ...]) -> tuple[str, ...]:
        normalized = []
        for ext in value:
            ext = ext.strip().lower()
            if not ext:
                continue
            normalized.append(ext if ext.startswith(".") else f".{ext}")
        return tuple(normalized)

    @field_validator("attachments_prefix")
    @classmethod
    def _normalize_prefix(cls, value: str) -> str:
        value = value.strip().lstrip("/")
        if value and not value.endswith("/"):
            value = f"{value}/"
        return value

    @property
    def s3_config(self) -> dict:
        """S3 client configuration."""
        config = {"region_name": self.aws_region}
        if self.s3_endpoint_url:
            config["endpoint_url"] = self.s3_endpoint_url
        return config


def load_settings(**overrides) -> Settings:
    """
    Build settings from the environment, failing fast on missing values.

    Raises:
        FatalConfigError: If a required setting is missing or invalid
    """
    try:
        return Settings(**overrides)
    except ValidationError as e:
        invalid = sorted({str(err["loc"][0]) for err in e.errors() if err["loc"]})
        missing = [name for name in REQUIRED_SETTINGS if name in invalid] or invalid
        raise FatalConfigError(
            missing=[name.upper() for name in missing],
            error_message=f"{len(e.errors())} invalid setting(s): {', '.join(invalid)}",
        ) from e


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Get cached application settings.

    Uses lru_cache so settings are loaded once per execution environment.
    Call get_settings.cache_clear() in tests after changing the environment.
    """
    return load_settings()
