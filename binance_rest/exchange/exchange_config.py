"""
Binance REST configuration.

This module contains the exchange-specific settings used by the client:
- API endpoints
- Default transport settings
- Error code mappings
"""

from dataclasses import dataclass, field
from typing import Dict, Type

from .exceptions import (
    ExchangeAPIError,
    RateLimitError,
    AuthenticationError,
    TimestampError,
    InvalidOrderError,
    InsufficientBalanceError
)


API_KEY_HEADER = "X-MBX-APIKEY"


@dataclass(frozen=True)
class ExchangeConfig:
    """
    Endpoint and transport defaults for the Binance Spot REST API.
    """
    name: str

    # Endpoints
    rest_base_url: str
    rest_testnet_url: str

    # Transport
    connect_timeout: float           # seconds
    default_headers: Dict[str, str] = field(default_factory=dict)


# ============================================================================
# BINANCE CONFIGURATION
# ============================================================================

BINANCE_CONFIG = ExchangeConfig(
    name="Binance",

    # REST Endpoints
    rest_base_url="https://api.binance.com",
    rest_testnet_url="https://testnet.binance.vision",

    connect_timeout=300.0,
    default_headers={
        "Content-Type": "application/x-www-form-urlencoded",
    }
)


# ============================================================================
# ERROR CODE MAPPINGS
# ============================================================================

BINANCE_RATE_LIMIT_ERRORS = {
    -1003,  # Too many requests
    -1015,  # Too many new orders
}

BINANCE_AUTH_ERRORS = {
    -1022,  # Invalid signature
    -2014,  # API-key format invalid
    -2015,  # Invalid API-key, IP, or permissions for action
}

BINANCE_TIMESTAMP_ERRORS = {
    -1021,  # Timestamp outside of recvWindow
}

BINANCE_INVALID_ORDER_ERRORS = {
    -1013,  # Filter failure
    -1100,  # Illegal characters in parameter
    -1101,  # Too many parameters
    -1102,  # Mandatory parameter missing
    -1103,  # Unknown parameter
    -1104,  # Unread parameters
    -1105,  # Parameter empty
    -1106,  # Parameter not required
    -1111,  # Bad precision
    -1112,  # No depth
    -1114,  # TimeInForce not required
    -1115,  # Invalid timeInForce
    -1116,  # Invalid orderType
    -1121,  # Invalid symbol
    -2010,  # NEW_ORDER_REJECTED
    -2011,  # CANCEL_REJECTED
    -2013,  # NO_SUCH_ORDER
}

# HTTP statuses Binance uses for request weight limits (429) and IP bans (418)
RATE_LIMIT_STATUSES = {418, 429}


def error_class_for(code: int, message: str, status_code: int) -> Type[ExchangeAPIError]:
    """
    Pick the exception class for a remote error envelope.

    Args:
        code: Binance error code
        message: Binance error message
        status_code: HTTP status of the response

    Returns:
        ExchangeAPIError subclass
    """
    # Check specific error types FIRST (before general invalid order)
    if code in BINANCE_RATE_LIMIT_ERRORS or status_code in RATE_LIMIT_STATUSES:
        return RateLimitError

    if code in BINANCE_AUTH_ERRORS:
        return AuthenticationError

    if code in BINANCE_TIMESTAMP_ERRORS:
        return TimestampError

    if 'insufficient balance' in message.lower():
        return InsufficientBalanceError

    if code in BINANCE_INVALID_ORDER_ERRORS:
        return InvalidOrderError

    return ExchangeAPIError
