"""
Binance Spot REST client.

``BinanceClient`` exposes the three request primitives (``unsigned``,
``signed``, ``send``) and the market, account and spot-trading endpoints
built on top of them. Clients are configured through ``ClientBuilder``;
a built client's credentials and base URL never change.
"""

import os
from typing import Any, Dict, List, Optional, Type, TypeVar

import aiohttp

from .credentials import Credentials
from .dispatcher import Dispatcher
from .exchange_config import BINANCE_CONFIG, ExchangeConfig
from .models import (
    ApiRestrictions,
    OrderInfo,
    OrderResponseFull,
    OrderSide,
    ServerTime,
    SpotAccount,
    SpotCommission,
    SymbolPrice,
    Trade,
    TradeFee,
    UserAsset
)
from .request import HttpMethod, QueryParams, Request, RequestBuilder
from ..utils.logger import get_logger


logger = get_logger(__name__)

T = TypeVar("T")


class ClientBuilder:
    """
    Configuration-time builder for BinanceClient.

    Example:
        client = (
            ClientBuilder()
            .set_api_key(api_key)
            .set_secret_key(secret_key)
            .build()
        )
    """

    def __init__(self, config: ExchangeConfig = BINANCE_CONFIG):
        self._base_url = config.rest_base_url
        self._timeout = config.connect_timeout
        self._read_timeout: Optional[float] = None
        self._headers: Dict[str, str] = dict(config.default_headers)
        self._credentials = Credentials()

    @classmethod
    def from_env(cls, prefix: str = "BINANCE_") -> "ClientBuilder":
        """
        Create a builder from environment variables.

        Reads ``{prefix}API_KEY``, ``{prefix}SECRET_KEY``, ``{prefix}BASE_URL``
        and ``{prefix}TIMEOUT``; unset variables keep the defaults.
        """
        builder = cls()

        api_key = os.environ.get(f"{prefix}API_KEY")
        if api_key is not None:
            builder.set_api_key(api_key)

        secret_key = os.environ.get(f"{prefix}SECRET_KEY")
        if secret_key is not None:
            builder.set_secret_key(secret_key)

        base_url = os.environ.get(f"{prefix}BASE_URL")
        if base_url:
            builder.set_base_url(base_url)

        timeout = os.environ.get(f"{prefix}TIMEOUT")
        if timeout:
            builder.set_timeout(float(timeout))

        return builder

    def set_base_url(self, value: str) -> "ClientBuilder":
        self._base_url = value
        return self

    def set_testnet(self, config: ExchangeConfig = BINANCE_CONFIG) -> "ClientBuilder":
        """Point the client at the Spot testnet."""
        self._base_url = config.rest_testnet_url
        return self

    def set_timeout(self, seconds: float) -> "ClientBuilder":
        """
        Set the connect timeout in seconds.

        Only connection setup is bounded; a server that accepts the
        connection and then stalls is waited on unless set_read_timeout
        is also used.
        """
        self._timeout = seconds
        return self

    def set_read_timeout(self, seconds: Optional[float]) -> "ClientBuilder":
        """Bound each socket read in seconds (None waits indefinitely)."""
        self._read_timeout = seconds
        return self

    def set_header(self, name: str, value: str) -> "ClientBuilder":
        self._headers[name] = value
        return self

    def set_api_key(self, value: str) -> "ClientBuilder":
        self._credentials = self._credentials.with_api_key(value)
        return self

    def set_secret_key(self, value: str) -> "ClientBuilder":
        self._credentials = self._credentials.with_secret_key(value)
        return self

    def build(self) -> "BinanceClient":
        return BinanceClient(
            base_url=self._base_url,
            credentials=self._credentials,
            timeout=aiohttp.ClientTimeout(
                connect=self._timeout,
                sock_read=self._read_timeout
            ),
            headers=self._headers
        )


class BinanceClient:
    """
    Async client for the Binance Spot REST API.

    Each call builds its own request, makes one HTTP round trip and either
    returns the typed payload or raises an ExchangeError subclass.
    Use as ``async with client:`` or call ``close()`` when done.
    """

    def __init__(
        self,
        base_url: str = BINANCE_CONFIG.rest_base_url,
        credentials: Optional[Credentials] = None,
        timeout: Optional[aiohttp.ClientTimeout] = None,
        headers: Optional[Dict[str, str]] = None
    ):
        """
        Initialize Binance client.

        Args:
            base_url: Scheme and host all endpoint paths are resolved against
            credentials: API key / secret key (public endpoints only if None)
            timeout: aiohttp timeout for the underlying session
            headers: Default headers sent with every request
        """
        self._credentials = credentials or Credentials()
        self._builder = RequestBuilder(base_url, self._credentials)
        self._dispatcher = Dispatcher(
            timeout=timeout or aiohttp.ClientTimeout(connect=BINANCE_CONFIG.connect_timeout),
            headers=BINANCE_CONFIG.default_headers if headers is None else headers
        )

        logger.info(
            "Binance client initialized",
            base_url=base_url,
            has_api_key=self._credentials.api_key is not None,
            has_secret_key=self._credentials.secret_key is not None
        )

    @classmethod
    def builder(cls) -> ClientBuilder:
        return ClientBuilder()

    @property
    def base_url(self) -> str:
        return self._builder.base_url

    @property
    def credentials(self) -> Credentials:
        return self._credentials

    @property
    def is_connected(self) -> bool:
        return self._dispatcher.is_open

    async def connect(self) -> None:
        """Open the HTTP session (otherwise opened on the first request)."""
        await self._dispatcher.open()

    async def close(self) -> None:
        """Close the HTTP session."""
        await self._dispatcher.close()

    async def __aenter__(self) -> "BinanceClient":
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    # ========================================================================
    # Request primitives
    # ========================================================================

    def unsigned(
        self,
        method: HttpMethod,
        path: str,
        params: Optional[QueryParams] = None
    ) -> Request:
        """Build a request for a public endpoint."""
        return self._builder.unsigned(method, path, params)

    def signed(self, method: HttpMethod, path: str, params: QueryParams) -> Request:
        """Build a SIGNED request; params must end with ``timestamp``."""
        return self._builder.signed(method, path, params)

    def keyed(
        self,
        method: HttpMethod,
        path: str,
        params: Optional[QueryParams] = None
    ) -> Request:
        """Build a request that carries the API key but no signature."""
        return self._builder.keyed(method, path, params)

    async def send(self, request: Request, response_type: Type[T]) -> T:
        """Send a request and deserialize the response as response_type."""
        return await self._dispatcher.send(request, response_type)

    # ========================================================================
    # Market Data
    # ========================================================================

    async def ping(self) -> Dict[str, Any]:
        """Test connectivity to the REST API."""
        request = self.unsigned(HttpMethod.GET, "/api/v3/ping")
        return await self.send(request, Dict[str, Any])

    async def server_time(self) -> ServerTime:
        """Get the current server time."""
        request = self.unsigned(HttpMethod.GET, "/api/v3/time")
        return await self.send(request, ServerTime)

    async def price(self, symbol: str) -> SymbolPrice:
        """
        Get the latest price of one symbol.

        Args:
            symbol: Binance symbol (e.g., "BTCUSDT")

        Returns:
            SymbolPrice
        """
        params = QueryParams().append("symbol", symbol)
        request = self.unsigned(HttpMethod.GET, "/api/v3/ticker/price", params)
        return await self.send(request, SymbolPrice)

    async def prices(self, symbols: Optional[List[str]] = None) -> List[SymbolPrice]:
        """
        Get latest prices for several symbols, or all symbols if None.

        Args:
            symbols: Binance symbols (optional)

        Returns:
            List of SymbolPrice
        """
        params = QueryParams().append_optional_json("symbols", symbols)
        request = self.unsigned(HttpMethod.GET, "/api/v3/ticker/price", params)
        return await self.send(request, List[SymbolPrice])

    # ========================================================================
    # Account
    # ========================================================================

    async def user_asset(
        self,
        asset: Optional[str] = None,
        need_btc_valuation: Optional[bool] = None,
        recv_window: Optional[int] = None
    ) -> List[UserAsset]:
        """
        Get the user's positive-balance assets.

        Args:
            asset: Only this asset (optional)
            need_btc_valuation: Include BTC valuation (optional)
            recv_window: Recv window in milliseconds (optional)

        Returns:
            List of UserAsset
        """
        params = (
            QueryParams()
            .append_optional("asset", asset)
            .append_optional("needBtcValuation", need_btc_valuation)
            .append_optional("recvWindow", recv_window)
            .append_timestamp()
        )
        request = self.signed(HttpMethod.POST, "/sapi/v3/asset/getUserAsset", params)
        return await self.send(request, List[UserAsset])

    async def api_restrictions(self, recv_window: Optional[int] = None) -> ApiRestrictions:
        """Get the permissions of the configured API key."""
        params = (
            QueryParams()
            .append_optional("recvWindow", recv_window)
            .append_timestamp()
        )
        request = self.signed(HttpMethod.GET, "/sapi/v1/account/apiRestrictions", params)
        return await self.send(request, ApiRestrictions)

    async def spot_account(
        self,
        omit_zero_balances: Optional[bool] = None,
        recv_window: Optional[int] = None
    ) -> SpotAccount:
        """
        Get spot account information.

        Args:
            omit_zero_balances: Hide zero balances (optional)
            recv_window: Recv window in milliseconds (optional)

        Returns:
            SpotAccount
        """
        params = (
            QueryParams()
            .append_optional("omitZeroBalances", omit_zero_balances)
            .append_optional("recvWindow", recv_window)
            .append_timestamp()
        )
        request = self.signed(HttpMethod.GET, "/api/v3/account", params)
        return await self.send(request, SpotAccount)

    async def spot_commission(self, symbol: str) -> SpotCommission:
        """Get the commission rates of one symbol for this account."""
        params = (
            QueryParams()
            .append("symbol", symbol)
            .append_timestamp()
        )
        request = self.signed(HttpMethod.GET, "/api/v3/account/commission", params)
        return await self.send(request, SpotCommission)

    async def trade_fee(self, symbol: str, recv_window: Optional[int] = None) -> List[TradeFee]:
        """Get maker/taker fees of one symbol."""
        params = (
            QueryParams()
            .append_optional("recvWindow", recv_window)
            .append("symbol", symbol)
            .append_timestamp()
        )
        request = self.signed(HttpMethod.GET, "/sapi/v1/asset/tradeFee", params)
        return await self.send(request, List[TradeFee])

    # ========================================================================
    # Spot Trading
    # ========================================================================

    async def spot_market_order_with_quote(
        self,
        symbol: str,
        side: OrderSide,
        quote_quantity: str,
        recv_window: Optional[int] = None
    ) -> OrderResponseFull:
        """
        Submit a MARKET order sized in the quote asset.

        Args:
            symbol: Binance symbol
            side: Order side (BUY/SELL)
            quote_quantity: Amount of quote asset to spend or receive
            recv_window: Recv window in milliseconds (optional)

        Returns:
            OrderResponseFull
        """
        params = (
            QueryParams()
            .append("symbol", symbol)
            .append("side", side)
            .append("type", "MARKET")
            .append("newOrderRespType", "FULL")
            .append("quoteOrderQty", quote_quantity)
            .append_optional("recvWindow", recv_window)
            .append_timestamp()
        )
        request = self.signed(HttpMethod.POST, "/api/v3/order", params)
        order = await self.send(request, OrderResponseFull)

        logger.info(
            "Order submitted",
            symbol=symbol,
            side=side.value,
            quote_quantity=quote_quantity,
            order_id=order.order_id,
            status=order.status.value
        )
        return order

    async def spot_market_order_with_base(
        self,
        symbol: str,
        side: OrderSide,
        base_quantity: str,
        recv_window: Optional[int] = None
    ) -> OrderResponseFull:
        """
        Submit a MARKET order sized in the base asset.

        Args:
            symbol: Binance symbol
            side: Order side (BUY/SELL)
            base_quantity: Amount of base asset to buy or sell
            recv_window: Recv window in milliseconds (optional)

        Returns:
            OrderResponseFull
        """
        params = (
            QueryParams()
            .append("symbol", symbol)
            .append("side", side)
            .append("type", "MARKET")
            .append("newOrderRespType", "FULL")
            .append("quantity", base_quantity)
            .append_optional("recvWindow", recv_window)
            .append_timestamp()
        )
        request = self.signed(HttpMethod.POST, "/api/v3/order", params)
        order = await self.send(request, OrderResponseFull)

        logger.info(
            "Order submitted",
            symbol=symbol,
            side=side.value,
            base_quantity=base_quantity,
            order_id=order.order_id,
            status=order.status.value
        )
        return order

    async def spot_order_info(
        self,
        symbol: str,
        order_id: int,
        recv_window: Optional[int] = None
    ) -> OrderInfo:
        """Get the status of one order."""
        params = (
            QueryParams()
            .append_optional("recvWindow", recv_window)
            .append("symbol", symbol)
            .append("orderId", order_id)
            .append_timestamp()
        )
        request = self.signed(HttpMethod.GET, "/api/v3/order", params)
        return await self.send(request, OrderInfo)

    async def spot_all_order_info(
        self,
        symbol: str,
        order_id: Optional[int] = None,
        start_time: Optional[int] = None,
        end_time: Optional[int] = None,
        limit: Optional[int] = None,
        recv_window: Optional[int] = None
    ) -> List[OrderInfo]:
        """
        Get all orders of a symbol: active, canceled or filled.

        Args:
            symbol: Binance symbol
            order_id: Return orders with id >= order_id (optional)
            start_time: Start timestamp in ms (optional)
            end_time: End timestamp in ms (optional)
            limit: Maximum number of orders (optional, max 1000)
            recv_window: Recv window in milliseconds (optional)

        Returns:
            List of OrderInfo
        """
        params = (
            QueryParams()
            .append_optional("orderId", order_id)
            .append_optional("startTime", start_time)
            .append_optional("endTime", end_time)
            .append_optional("limit", limit)
            .append_optional("recvWindow", recv_window)
            .append("symbol", symbol)
            .append_timestamp()
        )
        request = self.signed(HttpMethod.GET, "/api/v3/allOrders", params)
        return await self.send(request, List[OrderInfo])

    async def spot_trade(
        self,
        symbol: str,
        order_id: int,
        recv_window: Optional[int] = None
    ) -> List[Trade]:
        """Get the trades of one order."""
        return await self.spot_trades(symbol, order_id=order_id, recv_window=recv_window)

    async def spot_trades(
        self,
        symbol: str,
        order_id: Optional[int] = None,
        start_time: Optional[int] = None,
        end_time: Optional[int] = None,
        from_id: Optional[int] = None,
        limit: Optional[int] = None,
        recv_window: Optional[int] = None
    ) -> List[Trade]:
        """
        Get account trades of a symbol.

        Args:
            symbol: Binance symbol
            order_id: Only trades of this order (optional)
            start_time: Start timestamp in ms (optional)
            end_time: End timestamp in ms (optional)
            from_id: Trade id to fetch from (optional)
            limit: Maximum number of trades (optional, max 1000)
            recv_window: Recv window in milliseconds (optional)

        Returns:
            List of Trade
        """
        params = (
            QueryParams()
            .append_optional("orderId", order_id)
            .append_optional("startTime", start_time)
            .append_optional("endTime", end_time)
            .append_optional("fromId", from_id)
            .append_optional("limit", limit)
            .append_optional("recvWindow", recv_window)
            .append("symbol", symbol)
            .append_timestamp()
        )
        request = self.signed(HttpMethod.GET, "/api/v3/myTrades", params)
        return await self.send(request, List[Trade])
