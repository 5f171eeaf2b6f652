"""
HMAC-SHA256 request signing.

Binance validates SIGNED endpoints by recomputing the HMAC over the query
string exactly as it was transmitted, so the signature is computed over the
already-encoded query and appended as the final parameter.
"""

import hashlib
import hmac

from .exceptions import EmptyQueryError


SIGNATURE_PARAM = "signature"


def sign(query: str, secret_key: str) -> str:
    """
    Compute the signature of an encoded query string.

    Args:
        query: Encoded query string, parameters in append order
        secret_key: API secret key

    Returns:
        Lowercase hex HMAC-SHA256 digest

    Raises:
        EmptyQueryError: If query is empty
    """
    if not query:
        raise EmptyQueryError()

    return hmac.new(
        secret_key.encode("utf-8"),
        query.encode("utf-8"),
        hashlib.sha256
    ).hexdigest()


def sign_query(query: str, secret_key: str) -> str:
    """
    Append the ``signature`` parameter to an encoded query string.

    Args:
        query: Encoded query string
        secret_key: API secret key

    Returns:
        Query string ending in ``&signature=<hex>``
    """
    signature = sign(query, secret_key)
    return f"{query}&{SIGNATURE_PARAM}={signature}"


def strip_signature(query: str) -> str:
    """Remove the signature parameter from a query string (for logging)."""
    return "&".join(
        pair for pair in query.split("&")
        if not pair.startswith(f"{SIGNATURE_PARAM}=")
    )
