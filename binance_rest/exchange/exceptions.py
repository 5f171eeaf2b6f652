"""
Exchange client exception classes.

Every failure of a single request attempt surfaces as one of these.
"""

from typing import Optional


class ExchangeError(Exception):
    """Base exception for all exchange client errors."""
    pass


class MissingCredentialError(ExchangeError):
    """Exception raised when a required API key or secret key is not configured."""

    def __init__(self, which: str):
        self.which = which
        super().__init__(f"Missing credential: {which}")


class EmptyQueryError(ExchangeError):
    """Exception raised when signing a query string that carries no parameters."""

    def __init__(self, message: str = "Empty Query"):
        self.message = message
        super().__init__(self.message)


class UrlConstructionError(ExchangeError):
    """Exception raised when the base URL or path cannot form a valid URL."""
    pass


class TransportError(ExchangeError):
    """Exception raised when the request could not be completed (connection, DNS, TLS, timeout)."""
    pass


class MalformedErrorResponse(TransportError):
    """Exception raised for a non-success response whose body is not a remote error envelope."""

    def __init__(self, message: str, status_code: int, body: bytes = b""):
        self.message = message
        self.status_code = status_code
        self.body = body
        super().__init__(f"HTTP {status_code}: {message}")


class SerializationError(ExchangeError):
    """Exception raised when a successful response does not match the expected payload shape."""

    def __init__(self, message: str, body: bytes = b""):
        self.message = message
        self.body = body
        super().__init__(self.message)


class ExchangeAPIError(ExchangeError):
    """Exception raised when the exchange reports a business error."""

    def __init__(self, code: int, message: str, status_code: Optional[int] = None):
        self.code = code
        self.message = message
        self.status_code = status_code
        super().__init__(f"{code} {message}")


class RateLimitError(ExchangeAPIError):
    """Exception raised when API rate limit is exceeded."""
    pass


class AuthenticationError(ExchangeAPIError):
    """Exception raised for rejected API keys or signatures."""
    pass


class TimestampError(ExchangeAPIError):
    """Exception raised when the request timestamp falls outside the recv window."""
    pass


class InvalidOrderError(ExchangeAPIError):
    """Exception raised for invalid order parameters."""
    pass


class InsufficientBalanceError(InvalidOrderError):
    """Exception raised when account has insufficient balance."""
    pass
