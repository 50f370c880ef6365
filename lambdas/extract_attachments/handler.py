"""
ExtractAttachments Lambda Handler

Main entry point for extracting document attachments from raw emails.

Trigger: S3 ObjectCreated notification on the bucket SES writes raw emails to
Output: attachments in the attachment bucket, one webhook POST per attachment

Flow:
1. Parse S3 event records
2. Fetch and decode each raw email
3. Store .pdf/.epub attachments under attachments/<filename>
4. Presign a download URL for each stored attachment
5. POST the URL and the email's directory marker to the webhook

The invocation succeeds whenever configuration is valid, however many
records or attachments failed. Failures are reported in logs and in the
response body.
"""

import json
import logging
from functools import lru_cache
from typing import Any

import structlog

from extractor.shared.config import get_settings
from extractor.shared.models.events import EventRecord, parse_s3_event
from extractor.shared.models.report import BatchReport, RecordResult, RecordStage
from extractor.shared.tools.s3 import S3ObjectStore
from extractor.shared.tools.webhook import WebhookNotifier
from lambdas.extract_attachments.processor import BatchProcessor

# Configure structured logging
structlog.configure(
    processors=[
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.JSONRenderer(),
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)

log = structlog.get_logger()


@lru_cache(maxsize=1)
def get_processor() -> BatchProcessor:
    """
    Build the processor once per execution environment.

    Raises:
        FatalConfigError: If required settings are missing
    """
    settings = get_settings()
    logging.getLogger().setLevel(settings.log_level)

    log.info(
        "extractor_initialized",
        attachment_bucket=settings.attachment_bucket,
        attachments_prefix=settings.attachments_prefix,
        allowed_extensions=list(settings.allowed_extensions),
        url_ttl_seconds=settings.url_ttl_seconds,
        webhook_authenticated=settings.api_key is not None,
    )

    return BatchProcessor.from_settings(
        settings,
        store=S3ObjectStore.from_settings(settings),
        notifier=WebhookNotifier.from_settings(settings),
    )


def _extract_records(event: dict[str, Any]) -> tuple[list[EventRecord], list[RecordResult]]:
    """
    Pull event records out of the Lambda payload.

    Accepts the S3 notification format and, for manual invocation,
    a bare {"bucket": ..., "key": ...} payload.
    """
    if "Records" in event:
        records, invalid = parse_s3_event(event)
        rejected = []
        for index, error in invalid:
            log.error("invalid_event_record", index=index, error=error)
            rejected.append(
                RecordResult.failed(None, None, RecordStage.PARSING, f"record {index}: {error}")
            )
        return records, rejected

    if "bucket" in event and "key" in event:
        try:
            record = EventRecord(source_bucket=event["bucket"], object_key=event["key"])
        except ValueError as e:
            log.error("invalid_event_record", index=0, error=str(e))
            return [], [RecordResult.failed(None, None, RecordStage.PARSING, f"record 0: {e}")]
        return [record], []

    log.warning("unknown_event_format", event_keys=list(event.keys()))
    return [], []


def lambda_handler(event: dict[str, Any], context: Any) -> dict[str, Any]:
    """
    AWS Lambda handler for attachment extraction.

    Args:
        event: S3 event notification
        context: Lambda context

    Returns:
        Response dict with the batch report

    Raises:
        FatalConfigError: If configuration is missing; no record is processed
    """
    request_id = getattr(context, "aws_request_id", "local")
    structlog.contextvars.bind_contextvars(request_id=request_id)

    try:
        processor = get_processor()

        log.info(
            "processing_batch",
            record_count=len(event.get("Records") or []),
        )

        records, rejected = _extract_records(event)
        report = processor.process_batch(records)
        for result in rejected:
            report.add(result)

        if report.has_failures:
            log.warning("batch_completed_with_failures", **report.summary())

        return _build_response(report)
    finally:
        structlog.contextvars.unbind_contextvars("request_id")


def _build_response(report: BatchReport) -> dict[str, Any]:
    return {
        "statusCode": 200,
        "body": json.dumps(report.to_dict()),
    }
