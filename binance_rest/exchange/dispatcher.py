"""
Request dispatch and response classification.

``parse_response`` is a pure function from (HTTP status, body bytes) to a
typed payload or a classified exception, so the decision logic can be
tested without a network. ``Dispatcher`` performs the single HTTP round
trip and hands the result to it.
"""

import asyncio
from functools import lru_cache
from typing import Any, Dict, Optional, Type, TypeVar

import aiohttp
from pydantic import BaseModel, ConfigDict, TypeAdapter, ValidationError
from yarl import URL

from .exceptions import (
    ExchangeAPIError,
    TransportError,
    MalformedErrorResponse,
    SerializationError
)
from .exchange_config import error_class_for
from .request import Request
from .signer import strip_signature
from ..utils.logger import get_logger, EventType


logger = get_logger(__name__)

T = TypeVar("T")


class RemoteErrorEnvelope(BaseModel):
    """Error body returned by Binance: ``{"code": -1121, "msg": "Invalid symbol."}``."""
    # "-1121", true and -1.0 are not error codes
    model_config = ConfigDict(strict=True)

    code: int
    msg: str


@lru_cache(maxsize=None)
def _adapter(response_type: Any) -> TypeAdapter:
    return TypeAdapter(response_type)


def is_success(status: int) -> bool:
    return 200 <= status < 300


def parse_response(status: int, body: bytes, response_type: Type[T]) -> T:
    """
    Classify an HTTP response.

    Args:
        status: HTTP status code
        body: Raw response body
        response_type: Expected payload type on success (pydantic-compatible)

    Returns:
        Deserialized payload

    Raises:
        SerializationError: 2xx response that does not match response_type
        ExchangeAPIError: non-2xx response carrying a remote error envelope
        MalformedErrorResponse: non-2xx response without a valid error envelope
    """
    if is_success(status):
        try:
            return _adapter(response_type).validate_json(body)
        except ValidationError as e:
            raise SerializationError(str(e), body=body) from e

    try:
        envelope = RemoteErrorEnvelope.model_validate_json(body)
    except ValidationError as e:
        raise MalformedErrorResponse(str(e), status_code=status, body=body) from e

    error_class = error_class_for(envelope.code, envelope.msg, status)
    raise error_class(envelope.code, envelope.msg, status_code=status)


class Dispatcher:
    """
    Sends requests over one aiohttp session.

    The session is created on first use inside the running event loop.
    Exactly one round trip is made per ``send``; nothing is retried.
    """

    def __init__(
        self,
        timeout: Optional[aiohttp.ClientTimeout] = None,
        headers: Optional[Dict[str, str]] = None
    ):
        self.timeout = timeout or aiohttp.ClientTimeout()
        self.headers = dict(headers or {})
        self._session: Optional[aiohttp.ClientSession] = None

    @property
    def is_open(self) -> bool:
        return self._session is not None and not self._session.closed

    async def open(self) -> aiohttp.ClientSession:
        """Create the HTTP session if needed and return it."""
        if not self.is_open:
            self._session = aiohttp.ClientSession(
                timeout=self.timeout,
                headers=self.headers
            )
            logger.debug(EventType.SESSION_OPENED, event_type=EventType.SESSION_OPENED)
        return self._session

    async def close(self) -> None:
        """Close the HTTP session."""
        if self._session is not None:
            await self._session.close()
            self._session = None
            logger.debug(EventType.SESSION_CLOSED, event_type=EventType.SESSION_CLOSED)

    async def send(self, request: Request, response_type: Type[T]) -> T:
        """
        Execute a request and deserialize its response.

        Args:
            request: Built request (query already encoded and signed)
            response_type: Expected payload type

        Returns:
            Deserialized payload

        Raises:
            TransportError: Connection, DNS, TLS or timeout failure
            SerializationError, ExchangeAPIError, MalformedErrorResponse:
                see parse_response
        """
        session = await self.open()

        # encoded=True keeps the signed query byte-for-byte
        url = URL(request.full_url, encoded=True)

        logger.debug(
            EventType.REQUEST_SENT,
            event_type=EventType.REQUEST_SENT,
            method=request.method.value,
            url=request.url,
            query=strip_signature(request.query),
            signed=request.is_signed
        )

        try:
            async with session.request(
                request.method.value,
                url,
                headers=request.headers
            ) as response:
                status = response.status
                body = await response.read()
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.debug(
                EventType.TRANSPORT_ERROR,
                event_type=EventType.TRANSPORT_ERROR,
                method=request.method.value,
                url=request.url,
                error=str(e),
                error_type=type(e).__name__
            )
            raise TransportError(f"{type(e).__name__}: {e}") from e

        logger.debug(
            EventType.RESPONSE_RECEIVED,
            event_type=EventType.RESPONSE_RECEIVED,
            url=request.url,
            status=status,
            size=len(body)
        )

        try:
            return parse_response(status, body, response_type)
        except (ExchangeAPIError, MalformedErrorResponse) as e:
            logger.debug(
                EventType.REMOTE_ERROR,
                event_type=EventType.REMOTE_ERROR,
                url=request.url,
                status=status,
                error=str(e),
                error_type=type(e).__name__
            )
            raise
        except SerializationError as e:
            logger.debug(
                EventType.SERIALIZATION_ERROR,
                event_type=EventType.SERIALIZATION_ERROR,
                url=request.url,
                status=status,
                error_type=type(e).__name__
            )
            raise
