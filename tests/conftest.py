"""
Pytest Configuration and Shared Fixtures

Provides moto AWS mocking, raw email and S3 event builders, and
fake pipeline collaborators.
"""

import os
from email.message import EmailMessage
from typing import Any, Callable
from urllib.parse import quote_plus

import boto3
import pytest
from moto import mock_aws

# Set test environment before importing application modules
os.environ["ATTACHMENT_BUCKET"] = "test-attachments"
os.environ["WEBHOOK_URL"] = "https://hooks.example.com/ingest"
os.environ.pop("API_KEY", None)
os.environ["AWS_REGION"] = "us-east-1"
os.environ["AWS_DEFAULT_REGION"] = "us-east-1"
os.environ["AWS_ACCESS_KEY_ID"] = "testing"
os.environ["AWS_SECRET_ACCESS_KEY"] = "testing"

SOURCE_BUCKET = "test-raw-mail"
DESTINATION_BUCKET = "test-attachments"


# --- Settings Fixtures ---


@pytest.fixture(autouse=True)
def reset_cached_settings():
    """Settings and the handler's processor are cached per process."""
    from extractor.shared.config import get_settings

    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


# --- AWS Mocking Fixtures ---


@pytest.fixture
def aws_credentials():
    """Mock AWS credentials for moto."""
    return {
        "aws_access_key_id": "testing",
        "aws_secret_access_key": "testing",
        "region_name": "us-east-1",
    }


@pytest.fixture
def mock_s3(aws_credentials):
    """Create mocked source and destination buckets."""
    with mock_aws():
        s3 = boto3.client("s3", **aws_credentials)
        s3.create_bucket(Bucket=SOURCE_BUCKET)
        s3.create_bucket(Bucket=DESTINATION_BUCKET)
        yield s3


# --- Email Fixtures ---


@pytest.fixture
def build_raw_email() -> Callable[..., bytes]:
    """
    Factory for raw MIME emails.

    Attachments are (filename, content) or (filename, content, mime_type) tuples.
    """

    def _build(
        attachments: list[tuple] | None = None,
        *,
        subject: str = "Your documents",
        body: str = "Please find the documents attached.",
    ) -> bytes:
        msg = EmailMessage()
        msg["From"] = "Sender <sender@example.com>"
        msg["To"] = "inbox@mail.example.com"
        msg["Subject"] = subject
        msg["Message-ID"] = "<msg-001@mail.example.com>"
        msg.set_content(body)

        for attachment in attachments or []:
            filename, content, *rest = attachment
            mime_type = rest[0] if rest else "application/octet-stream"
            maintype, subtype = mime_type.split("/", 1)
            msg.add_attachment(
                content,
                maintype=maintype,
                subtype=subtype,
                filename=filename,
            )

        return msg.as_bytes()

    return _build


@pytest.fixture
def sample_email_raw(build_raw_email) -> bytes:
    """Email with one ignored and two qualifying attachments."""
    return build_raw_email(
        [
            ("notes.txt", b"plain notes", "text/plain"),
            ("contract.pdf", b"%PDF-1.7 contract", "application/pdf"),
            ("manual.EPUB", b"PK\x03\x04 epub", "application/epub+zip"),
        ]
    )


# --- Event Fixtures ---


@pytest.fixture
def build_s3_event() -> Callable[..., dict[str, Any]]:
    """Factory for S3 ObjectCreated notifications; keys are URL-encoded like S3 does."""

    def _build(*objects: tuple[str, str]) -> dict[str, Any]:
        return {
            "Records": [
                {
                    "eventVersion": "2.1",
                    "eventSource": "aws:s3",
                    "awsRegion": "us-east-1",
                    "eventName": "ObjectCreated:Put",
                    "s3": {
                        "s3SchemaVersion": "1.0",
                        "bucket": {
                            "name": bucket,
                            "arn": f"arn:aws:s3:::{bucket}",
                        },
                        "object": {
                            "key": quote_plus(key, safe="/"),
                            "size": 1024,
                        },
                    },
                }
                for bucket, key in objects
            ]
        }

    return _build


# --- Fake Collaborators ---


class FakeObjectStore:
    """In-memory object store recording every call."""

    def __init__(self, objects: dict[tuple[str, str], bytes] | None = None) -> None:
        self.objects = dict(objects or {})
        self.writes: list[tuple[str, str]] = []
        self.signed: list[tuple[str, str, int]] = []
        self.fail_fetch: set[str] = set()
        self.fail_store: set[str] = set()
        self.fail_sign: set[str] = set()

    def fetch(self, bucket: str, key: str) -> bytes:
        from extractor.shared.exceptions import RetrievalError

        if key in self.fail_fetch or (bucket, key) not in self.objects:
            raise RetrievalError(bucket=bucket, key=key, error_message="NoSuchKey")
        return self.objects[(bucket, key)]

    def store(self, bucket, key, content, *, content_type=None) -> None:
        from extractor.shared.exceptions import WriteError

        if key in self.fail_store:
            raise WriteError(bucket=bucket, key=key, error_message="AccessDenied")
        self.objects[(bucket, key)] = content
        self.writes.append((bucket, key))

    def sign(self, bucket, key, *, expires_in=900) -> str:
        from extractor.shared.exceptions import SigningError

        if key in self.fail_sign:
            raise SigningError(bucket=bucket, key=key, error_message="no credentials")
        self.signed.append((bucket, key, expires_in))
        return f"https://{bucket}.s3.amazonaws.com/{key}?X-Amz-Expires={expires_in}&n={len(self.signed)}"


class FakeNotifier:
    """Records notifications; optionally fails for selected links."""

    def __init__(self) -> None:
        self.calls: list[tuple[str, str]] = []
        self.fail_for: set[str] = set()

    def notify(self, link: str, directory_marker: str) -> int:
        from extractor.shared.exceptions import NotifyError

        self.calls.append((link, directory_marker))
        if any(fragment in link for fragment in self.fail_for):
            raise NotifyError(endpoint="https://hooks.example.com/ingest", status_code=502)
        return 200


@pytest.fixture
def fake_store() -> FakeObjectStore:
    return FakeObjectStore()


@pytest.fixture
def fake_notifier() -> FakeNotifier:
    return FakeNotifier()
