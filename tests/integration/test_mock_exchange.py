"""
Integration tests for BinanceClient against a local mock exchange.

The mock exchange is an aiohttp application served by TestServer; it
verifies signatures the way Binance does, over the raw query string.
Run with: pytest tests/integration/ -m integration
"""

import asyncio
import hashlib
import hmac
from decimal import Decimal
from unittest.mock import patch

import pytest
from aiohttp import web
from aiohttp.test_utils import TestServer, unused_port

from binance_rest.exchange.binance_client import ClientBuilder
from binance_rest.exchange.exceptions import (
    AuthenticationError,
    ExchangeAPIError,
    MalformedErrorResponse,
    SerializationError,
    TransportError
)
from binance_rest.exchange.models import OrderSide, OrderStatus, SymbolPrice
from binance_rest.exchange.request import HttpMethod, QueryParams
from binance_rest.utils.logger import EventType


SECRET_KEY = "s3cr3t"
API_KEY = "test_key"

ORDER_RESPONSE = {
    "symbol": "BTCUSDT",
    "orderId": 7,
    "orderListId": -1,
    "clientOrderId": "abc",
    "transactTime": 1700000000001,
    "price": "0.00000000",
    "origQty": "0.00100000",
    "executedQty": "0.00100000",
    "cummulativeQuoteQty": "50.00000000",
    "status": "FILLED",
    "timeInForce": "GTC",
    "type": "MARKET",
    "side": "BUY",
    "workingTime": 1700000000001,
    "selfTradePreventionMode": "EXPIRE_MAKER",
    "fills": [
        {
            "price": "50000.00000000",
            "qty": "0.00100000",
            "commission": "0.00000100",
            "commissionAsset": "BTC",
            "tradeId": 1
        }
    ]
}


def _raw_query(request: web.Request) -> str:
    """Query string exactly as transmitted (still percent-encoded)."""
    _, _, query = request.raw_path.partition("?")
    return query


def _error(status: int, code: int, msg: str) -> web.Response:
    return web.json_response({"code": code, "msg": msg}, status=status)


def _verify_signature(request: web.Request):
    """Return an error response if the request is not correctly signed."""
    if request.headers.get("X-MBX-APIKEY") != API_KEY:
        return _error(401, -2015, "Invalid API-key, IP, or permissions for action.")

    payload, sep, signature = _raw_query(request).rpartition("&signature=")
    if not sep:
        return _error(400, -1102, "Mandatory parameter 'signature' was not sent.")

    expected = hmac.new(
        SECRET_KEY.encode("utf-8"), payload.encode("utf-8"), hashlib.sha256
    ).hexdigest()
    if not hmac.compare_digest(expected, signature):
        return _error(400, -1022, "Signature for this request is not valid.")

    if "timestamp" not in request.query:
        return _error(400, -1102, "Mandatory parameter 'timestamp' was not sent.")

    return None


async def handle_ping(request):
    return web.json_response({})


async def handle_price(request):
    if "symbols" in request.query:
        return web.json_response([
            {"symbol": "BTCUSDT", "price": "50000.00"},
            {"symbol": "ETHUSDT", "price": "3000.00"}
        ])

    symbol = request.query.get("symbol")
    if symbol != "BTCUSDT":
        return _error(400, -1121, "Invalid symbol.")
    return web.json_response({"symbol": symbol, "price": "50000.00"})


async def handle_order(request):
    error = _verify_signature(request)
    if error is not None:
        return error
    return web.json_response(ORDER_RESPONSE)


async def handle_echo(request):
    error = _verify_signature(request)
    if error is not None:
        return error
    return web.json_response({
        "query": _raw_query(request),
        "symbols": request.query.get("symbols")
    })


async def handle_bad_gateway(request):
    return web.Response(status=502, text="<html>502 Bad Gateway</html>", content_type="text/html")


async def handle_unexpected_shape(request):
    return web.json_response({"unexpected": True})


def create_exchange_app() -> web.Application:
    app = web.Application()
    app.router.add_get("/api/v3/ping", handle_ping)
    app.router.add_get("/api/v3/ticker/price", handle_price)
    app.router.add_post("/api/v3/order", handle_order)
    app.router.add_get("/api/v3/echo", handle_echo)
    app.router.add_get("/api/v3/badGateway", handle_bad_gateway)
    app.router.add_get("/api/v3/shape", handle_unexpected_shape)
    return app


def create_unavailable_app() -> web.Application:
    async def unavailable(request):
        return _error(503, -1, "unavailable")

    app = web.Application()
    app.router.add_get("/api/v3/ping", unavailable)
    return app


def create_stalling_app(started: asyncio.Event, release: asyncio.Event) -> web.Application:
    """Ping accepts the request and answers only once released."""
    async def stall(request):
        started.set()
        await release.wait()
        return web.json_response({})

    async def server_time(request):
        return web.json_response({"serverTime": 1700000000000})

    app = web.Application()
    app.router.add_get("/api/v3/ping", stall)
    app.router.add_get("/api/v3/time", server_time)
    return app


@pytest.fixture
async def exchange_url():
    """Base URL of a running mock exchange."""
    async with TestServer(create_exchange_app()) as server:
        yield str(server.make_url("")).rstrip("/")


@pytest.fixture
async def stalling_exchange():
    """Base URL of an exchange whose ping never answers, and its started event."""
    started = asyncio.Event()
    release = asyncio.Event()
    async with TestServer(create_stalling_app(started, release)) as server:
        yield str(server.make_url("")).rstrip("/"), started
        release.set()


@pytest.fixture
async def client(exchange_url):
    """Connected client with valid credentials."""
    client = (
        ClientBuilder()
        .set_base_url(exchange_url)
        .set_api_key(API_KEY)
        .set_secret_key(SECRET_KEY)
        .set_timeout(5)
        .build()
    )
    async with client:
        yield client


# ============================================================================
# Public Endpoint Tests
# ============================================================================

@pytest.mark.asyncio
@pytest.mark.integration
async def test_ping_success(client):
    """Test ping against a healthy exchange."""
    assert await client.ping() == {}


@pytest.mark.asyncio
@pytest.mark.integration
async def test_ping_remote_unavailable():
    """Test 503 with an error envelope is a remote error."""
    async with TestServer(create_unavailable_app()) as server:
        client = ClientBuilder().set_base_url(str(server.make_url(""))).build()
        async with client:
            with pytest.raises(ExchangeAPIError) as exc_info:
                await client.ping()

    assert exc_info.value.code == -1
    assert exc_info.value.message == "unavailable"
    assert exc_info.value.status_code == 503


@pytest.mark.asyncio
@pytest.mark.integration
async def test_price(client):
    """Test price parses into SymbolPrice."""
    price = await client.price("BTCUSDT")

    assert isinstance(price, SymbolPrice)
    assert price.price == Decimal("50000.00")


@pytest.mark.asyncio
@pytest.mark.integration
async def test_prices_with_symbol_list(client):
    """Test prices for a symbol list."""
    prices = await client.prices(["BTCUSDT", "ETHUSDT"])

    assert [p.symbol for p in prices] == ["BTCUSDT", "ETHUSDT"]


@pytest.mark.asyncio
@pytest.mark.integration
async def test_invalid_symbol_is_remote_error(client):
    """Test invalid symbol returns the exchange error code."""
    with pytest.raises(ExchangeAPIError) as exc_info:
        await client.price("NOPE")

    assert exc_info.value.code == -1121
    assert exc_info.value.status_code == 400


@pytest.mark.asyncio
@pytest.mark.integration
async def test_malformed_error_body(client):
    """Test HTML error page is MalformedErrorResponse."""
    request = client.unsigned(HttpMethod.GET, "/api/v3/badGateway")

    with pytest.raises(MalformedErrorResponse) as exc_info:
        await client.send(request, dict)

    assert isinstance(exc_info.value, TransportError)
    assert exc_info.value.status_code == 502


@pytest.mark.asyncio
@pytest.mark.integration
async def test_unexpected_payload_shape(client):
    """Test wrong payload shape is SerializationError."""
    request = client.unsigned(HttpMethod.GET, "/api/v3/shape")

    with pytest.raises(SerializationError):
        await client.send(request, SymbolPrice)


# ============================================================================
# Signed Endpoint Tests
# ============================================================================

@pytest.mark.asyncio
@pytest.mark.integration
async def test_signed_market_order(client):
    """Test signed market order passes server-side verification."""
    order = await client.spot_market_order_with_quote("BTCUSDT", OrderSide.BUY, "50")

    assert order.order_id == 7
    assert order.status == OrderStatus.FILLED
    assert order.average_fill_price == Decimal("50000")


@pytest.mark.asyncio
@pytest.mark.integration
async def test_signed_query_is_transmitted_unchanged(client):
    """The server sees exactly the bytes that were signed."""
    params = (
        QueryParams()
        .append_json("symbols", ["BTCUSDT", "ETHUSDT"])
        .append("note", "a b/c")
        .append_timestamp(1700000000000)
    )
    request = client.signed(HttpMethod.GET, "/api/v3/echo", params)

    echoed = await client.send(request, dict)

    assert echoed["query"] == request.query
    assert echoed["symbols"] == '["BTCUSDT","ETHUSDT"]'


@pytest.mark.asyncio
@pytest.mark.integration
async def test_wrong_secret_is_rejected(exchange_url):
    """Test signature made with the wrong secret is rejected."""
    client = (
        ClientBuilder()
        .set_base_url(exchange_url)
        .set_api_key(API_KEY)
        .set_secret_key("wrong")
        .build()
    )

    async with client:
        with pytest.raises(AuthenticationError) as exc_info:
            await client.spot_market_order_with_base("BTCUSDT", OrderSide.SELL, "0.001")

    assert exc_info.value.code == -1022


# ============================================================================
# Transport Tests
# ============================================================================

@pytest.mark.asyncio
@pytest.mark.integration
async def test_connection_refused_is_transport_error():
    """Test refused connection is a TransportError."""
    client = ClientBuilder().set_base_url(f"http://127.0.0.1:{unused_port()}").build()

    async with client:
        with pytest.raises(TransportError) as exc_info:
            await client.ping()

    assert not isinstance(exc_info.value, MalformedErrorResponse)
    assert exc_info.value.__cause__ is not None


@pytest.mark.asyncio
@pytest.mark.integration
async def test_read_timeout_is_transport_error(stalling_exchange):
    """Test a stalled response hits the read timeout and is a TransportError."""
    base_url, _ = stalling_exchange
    client = ClientBuilder().set_base_url(base_url).set_timeout(5).set_read_timeout(0.2).build()

    async with client:
        with pytest.raises(TransportError) as exc_info:
            await client.ping()

    assert isinstance(exc_info.value.__cause__, asyncio.TimeoutError)


@pytest.mark.asyncio
@pytest.mark.integration
async def test_cancelled_call_releases_connection(stalling_exchange):
    """Test cancelling an in-flight call frees its connection for later calls."""
    base_url, started = stalling_exchange
    client = ClientBuilder().set_base_url(base_url).set_timeout(5).build()

    async with client:
        task = asyncio.create_task(client.ping())
        await asyncio.wait_for(started.wait(), timeout=5)

        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

        connector = client._dispatcher._session.connector
        assert len(connector._acquired) == 0

        server_time = await client.server_time()

    assert server_time.server_time == 1700000000000


# ============================================================================
# Logging Tests
# ============================================================================

@pytest.mark.asyncio
@pytest.mark.integration
async def test_failures_are_logged_at_debug(client):
    """Test remote, serialization and transport failures log at debug level only."""
    with patch("binance_rest.exchange.dispatcher.logger") as mock_logger:
        with pytest.raises(ExchangeAPIError):
            await client.price("NOPE")
        with pytest.raises(MalformedErrorResponse):
            await client.send(client.unsigned(HttpMethod.GET, "/api/v3/badGateway"), dict)
        with pytest.raises(SerializationError):
            await client.send(client.unsigned(HttpMethod.GET, "/api/v3/shape"), SymbolPrice)

    events = [c.args[0] for c in mock_logger.debug.call_args_list]
    assert events.count(EventType.REMOTE_ERROR) == 2
    assert events.count(EventType.SERIALIZATION_ERROR) == 1
    mock_logger.warning.assert_not_called()
    mock_logger.error.assert_not_called()


@pytest.mark.asyncio
@pytest.mark.integration
async def test_transport_failure_is_logged_at_debug():
    """Test transport failures are logged at debug level."""
    client = ClientBuilder().set_base_url(f"http://127.0.0.1:{unused_port()}").build()

    with patch("binance_rest.exchange.dispatcher.logger") as mock_logger:
        async with client:
            with pytest.raises(TransportError):
                await client.ping()

    events = [c.args[0] for c in mock_logger.debug.call_args_list]
    assert EventType.TRANSPORT_ERROR in events
    mock_logger.warning.assert_not_called()


@pytest.mark.asyncio
@pytest.mark.integration
async def test_concurrent_calls_share_one_session(client):
    """Test concurrent calls on one client."""
    results = await asyncio.gather(*(client.price("BTCUSDT") for _ in range(5)))

    assert all(r.price == Decimal("50000.00") for r in results)
    assert client.is_connected is True
