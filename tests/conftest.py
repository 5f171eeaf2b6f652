"""
Shared fixtures for client tests.
"""

import pytest

from binance_rest.exchange.credentials import Credentials
from binance_rest.exchange.request import RequestBuilder


TEST_API_KEY = "test_key"
TEST_SECRET_KEY = "s3cr3t"
FIXED_TIMESTAMP = 1700000000000


@pytest.fixture
def credentials():
    """Credentials with both keys configured."""
    return Credentials(api_key=TEST_API_KEY, secret_key=TEST_SECRET_KEY)


@pytest.fixture
def request_builder(credentials):
    """RequestBuilder against the production base URL."""
    return RequestBuilder("https://api.binance.com", credentials)


@pytest.fixture
def fixed_timestamp(monkeypatch):
    """Pin the request timestamp."""
    monkeypatch.setattr(
        "binance_rest.exchange.request.timestamp_ms",
        lambda: FIXED_TIMESTAMP
    )
    return FIXED_TIMESTAMP
