# Shared Tools
"""
Clients for the external systems the extractor talks to.
"""

from extractor.shared.tools.s3 import S3ObjectStore
from extractor.shared.tools.webhook import WebhookNotifier, build_form, build_headers

__all__ = [
    "S3ObjectStore",
    "WebhookNotifier",
    "build_form",
    "build_headers",
]
