"""
Batch Report Models

Per-item outcomes of one extraction batch. Failures are data here rather
than control flow: every record and every attachment ends with exactly one
result, and the report aggregates them for the handler response and logs.
"""

from dataclasses import dataclass, field
from enum import Enum


class Outcome(str, Enum):
    """Final outcome of a record or attachment."""

    PROCESSED = "processed"
    SKIPPED = "skipped"
    FAILED = "failed"


class RecordStage(str, Enum):
    """Per-record pipeline stages."""

    PARSING = "parsing"
    FETCHING = "fetching"
    DECODING = "decoding"
    DONE = "done"


class AttachmentStage(str, Enum):
    """Per-attachment pipeline stages."""

    FILTERING = "filtering"
    UPLOADING = "uploading"
    SIGNING = "signing"
    NOTIFYING = "notifying"
    DONE = "done"


@dataclass(frozen=True)
class AttachmentResult:
    """Outcome of one attachment part."""

    filename: str
    outcome: Outcome
    stage: AttachmentStage = AttachmentStage.DONE
    destination_key: str | None = None
    reason: str | None = None
    error_kind: str | None = None
    detail: str | None = None

    @classmethod
    def processed(cls, filename: str, destination_key: str) -> "AttachmentResult":
        return cls(filename=filename, outcome=Outcome.PROCESSED, destination_key=destination_key)

    @classmethod
    def skipped(cls, filename: str, reason: str) -> "AttachmentResult":
        return cls(
            filename=filename,
            outcome=Outcome.SKIPPED,
            stage=AttachmentStage.FILTERING,
            reason=reason,
        )

    @classmethod
    def failed(
        cls,
        filename: str,
        stage: AttachmentStage,
        error: Exception,
        destination_key: str | None = None,
    ) -> "AttachmentResult":
        return cls(
            filename=filename,
            outcome=Outcome.FAILED,
            stage=stage,
            destination_key=destination_key,
            error_kind=type(error).__name__,
            detail=str(error),
        )

    def to_dict(self) -> dict:
        """Convert to dictionary for the handler response."""
        result = {
            "filename": self.filename,
            "outcome": self.outcome.value,
            "stage": self.stage.value,
        }
        if self.destination_key:
            result["destination_key"] = self.destination_key
        if self.reason:
            result["reason"] = self.reason
        if self.error_kind:
            result["error_kind"] = self.error_kind
            result["detail"] = self.detail
        return result


@dataclass(frozen=True)
class RecordResult:
    """Outcome of one event record, including its attachments."""

    source_bucket: str | None
    object_key: str | None
    outcome: Outcome
    stage: RecordStage = RecordStage.DONE
    directory_marker: str | None = None
    attachments: tuple[AttachmentResult, ...] = ()
    error_kind: str | None = None
    detail: str | None = None

    @classmethod
    def failed(
        cls,
        source_bucket: str | None,
        object_key: str | None,
        stage: RecordStage,
        error: Exception | str,
    ) -> "RecordResult":
        return cls(
            source_bucket=source_bucket,
            object_key=object_key,
            outcome=Outcome.FAILED,
            stage=stage,
            error_kind=type(error).__name__ if isinstance(error, Exception) else "InvalidRecord",
            detail=str(error),
        )

    def count(self, outcome: Outcome) -> int:
        """Number of attachments with the given outcome."""
        return sum(1 for att in self.attachments if att.outcome == outcome)

    def to_dict(self) -> dict:
        result = {
            "source_bucket": self.source_bucket,
            "object_key": self.object_key,
            "outcome": self.outcome.value,
            "stage": self.stage.value,
            "attachments": [att.to_dict() for att in self.attachments],
        }
        if self.directory_marker is not None:
            result["directory_marker"] = self.directory_marker
        if self.error_kind:
            result["error_kind"] = self.error_kind
            result["detail"] = self.detail
        return result


@dataclass
class BatchReport:
    """Aggregated outcomes of one invocation."""

    records: list[RecordResult] = field(default_factory=list)

    def add(self, result: RecordResult) -> None:
        self.records.append(result)

    @property
    def records_processed(self) -> int:
        return sum(1 for r in self.records if r.outcome == Outcome.PROCESSED)

    @property
    def records_failed(self) -> int:
        return sum(1 for r in self.records if r.outcome == Outcome.FAILED)

    @property
    def attachments_processed(self) -> int:
        return sum(r.count(Outcome.PROCESSED) for r in self.records)

    @property
    def attachments_skipped(self) -> int:
        return sum(r.count(Outcome.SKIPPED) for r in self.records)

    @property
    def attachments_failed(self) -> int:
        return sum(r.count(Outcome.FAILED) for r in self.records)

    @property
    def has_failures(self) -> bool:
        return self.records_failed > 0 or self.attachments_failed > 0

    def summary(self) -> dict:
        """Counts only, for logging and alerting."""
        return {
            "records_total": len(self.records),
            "records_processed": self.records_processed,
            "records_failed": self.records_failed,
            "attachments_processed": self.attachments_processed,
            "attachments_skipped": self.attachments_skipped,
            "attachments_failed": self.attachments_failed,
        }

    def to_dict(self) -> dict:
        return {
            **self.summary(),
            "records": [r.to_dict() for r in self.records],
        }
