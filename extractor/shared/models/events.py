"""
Trigger Event Models

Pydantic models for the S3 event notifications that trigger extraction.
Only the fields the pipeline uses are modelled; everything else in the
notification is ignored.
"""

from typing import Any
from urllib.parse import unquote_plus

from pydantic import BaseModel, ConfigDict, Field


class S3Bucket(BaseModel):
    """Bucket entity of an S3 notification record."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    name: str = Field(..., min_length=1, description="Source bucket name")


class S3Object(BaseModel):
    """Object entity of an S3 notification record."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    key: str = Field(
        ...,
        min_length=1,
        description="Object key, URL-encoded as delivered by S3",
    )


class S3Entity(BaseModel):
    """The `s3` block of a notification record."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    bucket: S3Bucket
    object: S3Object


class S3NotificationRecord(BaseModel):
    """One entry of the `Records` array of an S3 event notification."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    s3: S3Entity

    def to_event_record(self) -> "EventRecord":
        """Convert to an EventRecord with the object key URL-decoded."""
        return EventRecord(
            source_bucket=self.s3.bucket.name,
            object_key=unquote_plus(self.s3.object.key),
        )


class EventRecord(BaseModel):
    """
    A raw email object to process.

    Immutable; one invocation carries an ordered sequence of these.
    """

    model_config = ConfigDict(frozen=True)

    source_bucket: str = Field(..., min_length=1)
    object_key: str = Field(..., min_length=1)

    @property
    def s3_uri(self) -> str:
        return f"s3://{self.source_bucket}/{self.object_key}"


def parse_s3_event(
    event: dict[str, Any],
) -> tuple[list[EventRecord], list[tuple[int, str]]]:
    """
    Parse an S3 event notification into event records.

    Each record is validated on its own so one malformed entry does not
    discard the rest of the batch.

    Args:
        event: Lambda event payload

    Returns:
        Tuple of (valid EventRecord list, (index, error) list for invalid records)
    """
    records: list[EventRecord] = []
    invalid: list[tuple[int, str]] = []

    for index, raw in enumerate(event.get("Records") or []):
        try:
            record = S3NotificationRecord.model_validate(raw)
        except ValueError as e:
            invalid.append((index, str(e)))
            continue
        records.append(record.to_event_record())

    return records, invalid
