# Shared Models
"""
Trigger event models and per-batch outcome reporting.
"""

from extractor.shared.models.events import (
    EventRecord,
    S3NotificationRecord,
    parse_s3_event,
)
from extractor.shared.models.report import (
    AttachmentResult,
    AttachmentStage,
    BatchReport,
    Outcome,
    RecordResult,
    RecordStage,
)

__all__ = [
    # Events
    "EventRecord",
    "S3NotificationRecord",
    "parse_s3_event",
    # Report
    "AttachmentResult",
    "AttachmentStage",
    "BatchReport",
    "Outcome",
    "RecordResult",
    "RecordStage",
]
