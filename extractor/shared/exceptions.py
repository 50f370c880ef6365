"""
Custom Exceptions for the Attachment Extractor

Every failure the pipeline can hit maps to one of these errors. They carry
the bucket/key/endpoint context needed to make the log line actionable.

Scope of each error:
- FatalConfigError: startup, aborts the invocation
- RetrievalError, DecodeError: one record is skipped
- WriteError, SigningError, NotifyError: one attachment is skipped
"""

from dataclasses import dataclass
from typing import Any


class ExtractorError(Exception):
    """Base exception for the attachment extractor."""

    def __init__(self, message: str, **context: Any) -> None:
        self.message = message
        self.context = context
        super().__init__(message)

    def __str__(self) -> str:
        if self.context:
            context_str = ", ".join(f"{k}={v!r}" for k, v in self.context.items())
            return f"{self.message} ({context_str})"
        return self.message


@dataclass
class FatalConfigError(ExtractorError):
    """Required configuration is missing or invalid."""

    missing: list[str]

    def __init__(
        self,
        missing: list[str],
        error_message: str | None = None,
    ) -> None:
        self.missing = missing
        super().__init__(
            f"Invalid configuration: {error_message or 'required settings missing'}",
            missing=missing,
        )


@dataclass
class RetrievalError(ExtractorError):
    """Raw email could not be fetched from the source bucket."""

    bucket: str
    key: str

    def __init__(
        self,
        bucket: str,
        key: str,
        error_message: str | None = None,
    ) -> None:
        self.bucket = bucket
        self.key = key
        super().__init__(
            f"Fetch failed for s3://{bucket}/{key}: {error_message or 'Unknown error'}",
            bucket=bucket,
            key=key,
            error_message=error_message,
        )


@dataclass
class DecodeError(ExtractorError):
    """Raw email bytes could not be decoded into an envelope."""

    key: str | None = None

    def __init__(
        self,
        key: str | None = None,
        error_message: str | None = None,
    ) -> None:
        self.key = key
        super().__init__(
            f"Email decode failed{f' for {key}' if key else ''}: "
            f"{error_message or 'Unknown error'}",
            key=key,
            error_message=error_message,
        )


@dataclass
class WriteError(ExtractorError):
    """Attachment could not be written to the destination bucket."""

    bucket: str
    key: str

    def __init__(
        self,
        bucket: str,
        key: str,
        error_message: str | None = None,
    ) -> None:
        self.bucket = bucket
        self.key = key
        super().__init__(
            f"Write failed for s3://{bucket}/{key}: {error_message or 'Unknown error'}",
            bucket=bucket,
            key=key,
            error_message=error_message,
        )


@dataclass
class SigningError(ExtractorError):
    """Presigned URL generation failed."""

    bucket: str
    key: str

    def __init__(
        self,
        bucket: str,
        key: str,
        error_message: str | None = None,
    ) -> None:
        self.bucket = bucket
        self.key = key
        super().__init__(
            f"Presign failed for s3://{bucket}/{key}: {error_message or 'Unknown error'}",
            bucket=bucket,
            key=key,
            error_message=error_message,
        )


@dataclass
class NotifyError(ExtractorError):
    """Webhook POST failed or returned a non-2xx status."""

    endpoint: str
    status_code: int | None = None

    def __init__(
        self,
        endpoint: str,
        status_code: int | None = None,
        error_message: str | None = None,
    ) -> None:
        self.endpoint = endpoint
        self.status_code = status_code
        super().__init__(
            f"Webhook notify failed for {endpoint}: {error_message or 'Unknown error'}",
            endpoint=endpoint,
            status_code=status_code,
            error_message=error_message,
        )
