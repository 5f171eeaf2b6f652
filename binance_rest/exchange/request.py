"""
Request construction for public and SIGNED endpoints.

Query parameters are kept as an ordered sequence of (key, value) pairs:
the byte order of the encoded query is part of the signature contract.
"""

import json
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, Iterable, Iterator, List, Optional, Tuple
from urllib.parse import urlencode

from yarl import URL

from .credentials import Credentials
from .exceptions import EmptyQueryError, UrlConstructionError
from .exchange_config import API_KEY_HEADER
from .signer import sign_query
from ..utils.clock import timestamp_ms


class HttpMethod(Enum):
    """HTTP methods used by the REST API."""
    GET = "GET"
    POST = "POST"


def _stringify(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, Enum):
        return str(value.value)
    if isinstance(value, Decimal):
        return format(value, "f")
    return str(value)


class QueryParams:
    """
    Insertion-ordered query parameters.

    Example:
        params = QueryParams()
        params.append("symbol", "BTCUSDT")
        params.append_optional("recvWindow", recv_window)
        params.append_timestamp()
    """

    def __init__(self, pairs: Optional[Iterable[Tuple[str, Any]]] = None):
        self._pairs: List[Tuple[str, str]] = []
        for key, value in pairs or ():
            self.append(key, value)

    def append(self, key: str, value: Any) -> "QueryParams":
        self._pairs.append((key, _stringify(value)))
        return self

    def append_optional(self, key: str, value: Optional[Any]) -> "QueryParams":
        """Append only if a value was supplied; None contributes nothing."""
        if value is not None:
            self.append(key, value)
        return self

    def append_json(self, key: str, values: Any) -> "QueryParams":
        """Append a value as a compact JSON literal, e.g. ``["BTCUSDT","ETHUSDT"]``."""
        self._pairs.append((key, json.dumps(values, separators=(",", ":"))))
        return self

    def append_optional_json(self, key: str, values: Optional[Any]) -> "QueryParams":
        if values is not None:
            self.append_json(key, values)
        return self

    def append_timestamp(self, value: Optional[int] = None) -> "QueryParams":
        """Append ``timestamp`` (wall-clock milliseconds unless given)."""
        return self.append("timestamp", timestamp_ms() if value is None else value)

    def encode(self) -> str:
        """Encode as application/x-www-form-urlencoded in append order."""
        return urlencode(self._pairs)

    def __iter__(self) -> Iterator[Tuple[str, str]]:
        return iter(self._pairs)

    def __len__(self) -> int:
        return len(self._pairs)

    def __repr__(self) -> str:
        return f"QueryParams({self._pairs!r})"


@dataclass(frozen=True)
class Request:
    """A ready-to-send request. ``query`` is already encoded (and signed, if needed)."""
    method: HttpMethod
    url: str
    query: str = ""
    headers: Dict[str, str] = field(default_factory=dict)

    @property
    def full_url(self) -> str:
        if not self.query:
            return self.url
        return f"{self.url}?{self.query}"

    @property
    def is_signed(self) -> bool:
        return any(pair.startswith("signature=") for pair in self.query.split("&"))


def build_url(base_url: str, path: str) -> str:
    """
    Resolve an endpoint path against the base URL.

    Raises:
        UrlConstructionError: If the result is not an absolute http(s) URL
    """
    try:
        base = URL(base_url)
    except (TypeError, ValueError) as e:
        raise UrlConstructionError(f"Invalid base URL {base_url!r}: {e}") from e

    if base.scheme not in ("http", "https") or not base.host:
        raise UrlConstructionError(f"Invalid base URL {base_url!r}: expected http(s)://host")

    if not path.startswith("/"):
        path = f"/{path}"

    try:
        return str(base.with_path(path))
    except (TypeError, ValueError) as e:
        raise UrlConstructionError(f"Invalid path {path!r}: {e}") from e


class RequestBuilder:
    """
    Builds requests against one base URL with one set of credentials.

    Holds no per-call state; every call produces a fresh Request.
    """

    def __init__(self, base_url: str, credentials: Credentials):
        self.base_url = base_url
        self.credentials = credentials

    def unsigned(
        self,
        method: HttpMethod,
        path: str,
        params: Optional[QueryParams] = None
    ) -> Request:
        """
        Build a request for a public endpoint (no signature, no API key).
        """
        url = build_url(self.base_url, path)
        query = params.encode() if params else ""
        return Request(method=method, url=url, query=query)

    def keyed(
        self,
        method: HttpMethod,
        path: str,
        params: Optional[QueryParams] = None
    ) -> Request:
        """
        Build a request that carries the API key header but no signature.

        Raises:
            MissingCredentialError: If no API key is configured
        """
        request = self.unsigned(method, path, params)
        api_key = self.credentials.require_api_key()
        return Request(
            method=request.method,
            url=request.url,
            query=request.query,
            headers={API_KEY_HEADER: api_key}
        )

    def signed(
        self,
        method: HttpMethod,
        path: str,
        params: QueryParams
    ) -> Request:
        """
        Build a SIGNED request.

        The caller must have appended ``timestamp`` as the last parameter.
        Checks run in order: empty query, secret key, API key.

        Raises:
            UrlConstructionError: If the URL cannot be built
            EmptyQueryError: If params is empty
            MissingCredentialError: If the secret key or API key is missing
        """
        url = build_url(self.base_url, path)
        query = params.encode() if params else ""

        if not query:
            raise EmptyQueryError()

        signed_query = sign_query(query, self.credentials.require_secret_key())
        api_key = self.credentials.require_api_key()

        return Request(
            method=method,
            url=url,
            query=signed_query,
            headers={API_KEY_HEADER: api_key}
        )
