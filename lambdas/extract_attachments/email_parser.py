"""
Email Parser Module

Decodes raw MIME email bytes into an Envelope exposing the attachment parts.
MIME handling (boundaries, transfer encodings, RFC 2047 filenames) is left
to the standard library email package.
"""

import email
from dataclasses import dataclass, field
from email.message import EmailMessage
from email.policy import default as default_policy
from typing import Protocol

import structlog

from extractor.shared.exceptions import DecodeError

log = structlog.get_logger()


@dataclass(frozen=True)
class AttachmentPart:
    """One file-like part of an email."""

    filename: str
    content: bytes
    content_type: str = "application/octet-stream"

    @property
    def size_bytes(self) -> int:
        return len(self.content)


@dataclass(frozen=True)
class Envelope:
    """Decoded email, read-only once produced."""

    attachments: tuple[AttachmentPart, ...] = ()
    subject: str = ""
    from_address: str = ""
    message_id: str = ""
    defects: tuple[str, ...] = field(default=(), compare=False)


class EnvelopeDecoder(Protocol):
    """Anything that turns raw email bytes into an Envelope."""

    def __call__(self, raw_email: bytes) -> Envelope: ...


def _is_attachment(part: EmailMessage) -> bool:
    """
    Decide whether a leaf part is an attachment.

    Parts with an explicit attachment disposition count. Inline parts do
    not, even when named. Parts without a disposition count when they
    carry a filename.
    """
    disposition = part.get_content_disposition()
    if disposition == "attachment":
        return True
    if disposition == "inline":
        return False
    return bool(part.get_filename())


def _fallback_filename(part: EmailMessage) -> str:
    """Name a part that has no filename after its MIME subtype."""
    return f"attachment.{part.get_content_subtype()}"


def _extract_attachments(msg: EmailMessage) -> list[AttachmentPart]:
    """Collect attachment parts in document order."""
    attachments = []

    for part in msg.walk():
        if part.is_multipart():
            continue

        if not _is_attachment(part):
            continue

        filename = part.get_filename() or _fallback_filename(part)
        content_type = part.get_content_type()

        payload = part.get_payload(decode=True)
        if not payload:
            log.debug("skipping_empty_attachment", filename=filename)
            continue

        attachments.append(
            AttachmentPart(
                filename=filename,
                content=payload,
                content_type=content_type,
            )
        )

        log.debug(
            "extracted_attachment",
            filename=filename,
            content_type=content_type,
            size_bytes=len(payload),
        )

    return attachments


def decode_envelope(raw_email: bytes) -> Envelope:
    """
    Parse raw email content (MIME format) into an Envelope.

    Args:
        raw_email: Raw email content as bytes

    Returns:
        Envelope with attachment parts in document order

    Raises:
        DecodeError: If the content is empty or cannot be parsed as an email
    """
    if not raw_email or not raw_email.strip():
        raise DecodeError(error_message="empty message")

    try:
        msg = email.message_from_bytes(raw_email, policy=default_policy)
        if not msg.keys():
            raise DecodeError(error_message="no headers found")

        attachments = _extract_attachments(msg)
        subject = str(msg.get("Subject", "") or "")
        from_address = str(msg.get("From", "") or "")
        message_id = str(msg.get("Message-ID", "") or "")
    except DecodeError:
        raise
    except Exception as e:
        # The email package raises a wide range of errors on malformed
        # headers and payloads
        log.error("email_parse_failed", error=str(e))
        raise DecodeError(error_message=str(e)) from e

    defects = tuple(type(d).__name__ for d in msg.defects)
    if defects:
        log.warning("email_defects_found", defects=list(defects))

    return Envelope(
        attachments=tuple(attachments),
        subject=subject,
        from_address=from_address,
        message_id=message_id,
        defects=defects,
    )
