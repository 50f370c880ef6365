"""
Integration test fixtures and configuration.

Integration tests use real boto3 clients against moto and the real
WebhookNotifier with requests.Session.post patched.
"""

from unittest.mock import MagicMock, patch

import pytest
import requests

from lambdas.extract_attachments import handler


@pytest.fixture
def webhook_calls():
    """Capture every webhook POST; respond 200 by default."""
    response = MagicMock()
    response.status_code = 200

    with patch.object(requests.Session, "post", return_value=response) as post:
        yield post


@pytest.fixture
def fresh_handler(mock_s3, monkeypatch):
    """Handler whose cached processor is rebuilt inside the moto context."""
    monkeypatch.delenv("API_KEY", raising=False)
    handler.get_processor.cache_clear()
    yield handler
    handler.get_processor.cache_clear()
