"""
Webhook Tools

Form-encoded POST notifications announcing a newly stored attachment.
Delivery is best effort: failures raise NotifyError and are never retried.
"""

from urllib.parse import urlsplit

import requests
import structlog

from extractor.shared.config import Settings
from extractor.shared.exceptions import NotifyError

log = structlog.get_logger()

FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"
DEFAULT_TIMEOUT_SECONDS = 10.0

# Form field names expected by the receiving endpoint
LINK_FIELD = "Body"
DIRECTORY_FIELD = "rm_dir"


def build_form(link: str, directory_marker: str) -> dict[str, str]:
    """Form fields for one attachment notification."""
    return {LINK_FIELD: link, DIRECTORY_FIELD: directory_marker}


def build_headers(api_key: str | None = None) -> dict[str, str]:
    """Request headers; Authorization is only sent when an API key is set."""
    headers = {"Content-Type": FORM_CONTENT_TYPE}
    if api_key:
        headers["Authorization"] = f"Bearer {api_key}"
    return headers


def _redact(url: str) -> str:
    """Endpoint without query string, for logs and errors."""
    parts = urlsplit(url)
    return f"{parts.scheme}://{parts.netloc}{parts.path}"


class WebhookNotifier:
    """Posts attachment notifications to a single configured endpoint."""

    def __init__(
        self,
        endpoint: str,
        *,
        api_key: str | None = None,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        session: requests.Session | None = None,
    ) -> None:
        self.endpoint = endpoint
        self.api_key = api_key
        self.timeout = timeout
        self._session = session or requests.Session()

    @classmethod
    def from_settings(cls, settings: Settings) -> "WebhookNotifier":
        return cls(
            settings.webhook_url,
            api_key=settings.api_key,
            timeout=settings.webhook_timeout_seconds,
        )

    def notify(self, link: str, directory_marker: str) -> int:
        """
        POST the signed link and directory marker to the endpoint.

        Args:
            link: Presigned URL of the stored attachment
            directory_marker: Normalized parent path of the source email

        Returns:
            HTTP status code of the response

        Raises:
            NotifyError: On transport failure, timeout, or a non-2xx response
        """
        endpoint = _redact(self.endpoint)

        try:
            response = self._session.post(
                self.endpoint,
                data=build_form(link, directory_marker),
                headers=build_headers(self.api_key),
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            log.error(
                "webhook_request_failed",
                endpoint=endpoint,
                error=str(e),
            )
            raise NotifyError(endpoint=endpoint, error_message=str(e)) from e

        try:
            if not 200 <= response.status_code < 300:
                log.error(
                    "webhook_rejected",
                    endpoint=endpoint,
                    status_code=response.status_code,
                )
                raise NotifyError(
                    endpoint=endpoint,
                    status_code=response.status_code,
                    error_message=f"HTTP {response.status_code}",
                )
        finally:
            response.close()

        log.info(
            "webhook_notified",
            endpoint=endpoint,
            status_code=response.status_code,
            rm_dir=directory_marker,
        )

        return response.status_code

    def close(self) -> None:
        self._session.close()
