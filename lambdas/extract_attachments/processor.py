"""
Batch Processor

Drives each event record through the extraction pipeline:

    fetch -> decode -> filter -> per attachment: upload -> sign -> notify

Failures are isolated at the narrowest scope. A record that cannot be
fetched or decoded is reported and skipped; an attachment that fails at any
step is reported and its siblings are still attempted. Nothing is rolled
back: an attachment whose notification fails stays in the destination bucket.
"""

from collections.abc import Iterable
from typing import Protocol

import structlog

from extractor.shared.config import Settings
from extractor.shared.exceptions import DecodeError, RetrievalError
from extractor.shared.models.events import EventRecord
from extractor.shared.models.report import (
    AttachmentResult,
    AttachmentStage,
    BatchReport,
    Outcome,
    RecordResult,
    RecordStage,
)
from extractor.shared.tools.s3 import DEFAULT_URL_TTL_SECONDS
from lambdas.extract_attachments.attachment_filter import ALLOWED_EXTENSIONS, qualifies
from lambdas.extract_attachments.email_parser import (
    AttachmentPart,
    EnvelopeDecoder,
    decode_envelope,
)
from lambdas.extract_attachments.paths import (
    DEFAULT_ATTACHMENTS_PREFIX,
    destination_key,
    directory_marker,
)

log = structlog.get_logger()

SKIP_UNSUPPORTED_EXTENSION = "unsupported_extension"


class ObjectStore(Protocol):
    def fetch(self, bucket: str, key: str) -> bytes: ...

    def store(
        self,
        bucket: str,
        key: str,
        content: bytes,
        *,
        content_type: str | None = None,
    ) -> None: ...

    def sign(self, bucket: str, key: str, *, expires_in: int = ...) -> str: ...


class Notifier(Protocol):
    def notify(self, link: str, directory_marker: str) -> int: ...


class BatchProcessor:
    """
    Extracts qualifying attachments from raw emails and announces them.

    Collaborators are injected so the pipeline can run against fakes:
    `store` for S3, `notifier` for the webhook and `decoder` for MIME.
    """

    def __init__(
        self,
        store: ObjectStore,
        notifier: Notifier,
        *,
        destination_bucket: str,
        decoder: EnvelopeDecoder = decode_envelope,
        attachments_prefix: str = DEFAULT_ATTACHMENTS_PREFIX,
        allowed_extensions: Iterable[str] = ALLOWED_EXTENSIONS,
        url_ttl_seconds: int = DEFAULT_URL_TTL_SECONDS,
    ) -> None:
        self.store = store
        self.notifier = notifier
        self.decoder = decoder
        self.destination_bucket = destination_bucket
        self.attachments_prefix = attachments_prefix
        self.allowed_extensions = frozenset(ext.lower() for ext in allowed_extensions)
        self.url_ttl_seconds = url_ttl_seconds

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        store: ObjectStore,
        notifier: Notifier,
        *,
        decoder: EnvelopeDecoder = decode_envelope,
    ) -> "BatchProcessor":
        return cls(
            store,
            notifier,
            destination_bucket=settings.attachment_bucket,
            decoder=decoder,
            attachments_prefix=settings.attachments_prefix,
            allowed_extensions=settings.allowed_extensions,
            url_ttl_seconds=settings.url_ttl_seconds,
        )

    def process_batch(self, records: Iterable[EventRecord]) -> BatchReport:
        """
        Process records in order.

        Never raises for per-record or per-attachment failures; they are
        collected in the returned report.
        """
        report = BatchReport()

        for record in records:
            report.add(self.process_record(record))

        log.info("batch_processed", **report.summary())

        return report

    def process_record(self, record: EventRecord) -> RecordResult:
        """Run one raw email through the pipeline."""
        bucket = record.source_bucket
        key = record.object_key
        record_log = log.bind(bucket=bucket, key=key)
        stage = RecordStage.FETCHING

        try:
            raw_email = self.store.fetch(bucket, key)

            stage = RecordStage.DECODING
            envelope = self.decoder(raw_email)
        except RetrievalError as e:
            record_log.error("record_fetch_failed", error=str(e))
            return RecordResult.failed(bucket, key, stage, e)
        except DecodeError as e:
            record_log.error("record_decode_failed", error=str(e))
            return RecordResult.failed(bucket, key, stage, e)
        except Exception as e:
            record_log.error(
                "record_processing_failed",
                stage=stage.value,
                error=str(e),
                exc_info=True,
            )
            return RecordResult.failed(bucket, key, stage, e)

        marker = directory_marker(key)

        record_log.info(
            "email_decoded",
            subject=envelope.subject,
            from_address=envelope.from_address,
            message_id=envelope.message_id,
            attachment_count=len(envelope.attachments),
            rm_dir=marker,
        )

        results = tuple(
            self._process_attachment(part, marker, record_log)
            for part in envelope.attachments
        )

        result = RecordResult(
            source_bucket=bucket,
            object_key=key,
            outcome=Outcome.PROCESSED,
            directory_marker=marker,
            attachments=results,
        )

        record_log.info(
            "record_processed",
            processed_count=result.count(Outcome.PROCESSED),
            skipped_count=result.count(Outcome.SKIPPED),
            failed_count=result.count(Outcome.FAILED),
        )

        return result

    def _process_attachment(
        self,
        part: AttachmentPart,
        marker: str,
        record_log,
    ) -> AttachmentResult:
        """Upload, sign and announce one attachment."""
        filename = part.filename

        if not qualifies(filename, self.allowed_extensions):
            record_log.debug("attachment_skipped", filename=filename)
            return AttachmentResult.skipped(filename, SKIP_UNSUPPORTED_EXTENSION)

        dest_key = destination_key(filename, self.attachments_prefix)
        stage = AttachmentStage.UPLOADING

        try:
            self.store.store(
                self.destination_bucket,
                dest_key,
                part.content,
                content_type=part.content_type,
            )

            stage = AttachmentStage.SIGNING
            link = self.store.sign(
                self.destination_bucket,
                dest_key,
                expires_in=self.url_ttl_seconds,
            )

            stage = AttachmentStage.NOTIFYING
            self.notifier.notify(link, marker)
        except Exception as e:
            record_log.error(
                "attachment_processing_failed",
                filename=filename,
                destination_key=dest_key,
                stage=stage.value,
                error=str(e),
            )
            return AttachmentResult.failed(filename, stage, e, destination_key=dest_key)

        record_log.info(
            "attachment_extracted",
            filename=filename,
            destination_key=dest_key,
            size_bytes=part.size_bytes,
        )

        return AttachmentResult.processed(filename, dest_key)
