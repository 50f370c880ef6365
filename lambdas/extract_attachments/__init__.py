"""
ExtractAttachments Lambda

Extracts document attachments from raw emails written to S3 and announces
each one to a webhook with a presigned download link.

Flow:
    Inbound email
    → SES Receipt Rule (S3 action)
    → S3 ObjectCreated notification
    → This Lambda
    → attachments/<filename> + webhook POST
"""

from lambdas.extract_attachments.attachment_filter import ALLOWED_EXTENSIONS, qualifies
from lambdas.extract_attachments.email_parser import (
    AttachmentPart,
    Envelope,
    decode_envelope,
)
from lambdas.extract_attachments.handler import lambda_handler
from lambdas.extract_attachments.paths import destination_key, directory_marker
from lambdas.extract_attachments.processor import BatchProcessor

__all__ = [
    "ALLOWED_EXTENSIONS",
    "AttachmentPart",
    "BatchProcessor",
    "Envelope",
    "decode_envelope",
    "destination_key",
    "directory_marker",
    "lambda_handler",
    "qualifies",
]
