"""
Exchange client module for Binance Spot REST API integration.
"""

from .binance_client import BinanceClient, ClientBuilder
from .credentials import Credentials
from .request import HttpMethod, QueryParams, Request, RequestBuilder
from .dispatcher import Dispatcher, RemoteErrorEnvelope, parse_response
from .signer import sign, sign_query
from .exceptions import (
    ExchangeError,
    MissingCredentialError,
    EmptyQueryError,
    UrlConstructionError,
    TransportError,
    MalformedErrorResponse,
    SerializationError,
    ExchangeAPIError,
    RateLimitError,
    AuthenticationError,
    TimestampError,
    InvalidOrderError,
    InsufficientBalanceError
)
from .models import (
    OrderSide,
    OrderType,
    OrderStatus,
    TimeInForce,
    SelfTradePreventionMode,
    ServerTime,
    SymbolPrice,
    TradeFee,
    UserAsset,
    ApiRestrictions,
    CommissionRates,
    Balance,
    SpotAccount,
    CommissionDetails,
    DiscountDetails,
    SpotCommission,
    OrderInfo,
    OrderFill,
    OrderResponseFull,
    Trade
)
from .exchange_config import BINANCE_CONFIG, ExchangeConfig, API_KEY_HEADER

__all__ = [
    # Client
    "BinanceClient",
    "ClientBuilder",
    "Credentials",

    # Request primitives
    "HttpMethod",
    "QueryParams",
    "Request",
    "RequestBuilder",
    "Dispatcher",
    "RemoteErrorEnvelope",
    "parse_response",
    "sign",
    "sign_query",

    # Exceptions
    "ExchangeError",
    "MissingCredentialError",
    "EmptyQueryError",
    "UrlConstructionError",
    "TransportError",
    "MalformedErrorResponse",
    "SerializationError",
    "ExchangeAPIError",
    "RateLimitError",
    "AuthenticationError",
    "TimestampError",
    "InvalidOrderError",
    "InsufficientBalanceError",

    # Data models
    "OrderSide",
    "OrderType",
    "OrderStatus",
    "TimeInForce",
    "SelfTradePreventionMode",
    "ServerTime",
    "SymbolPrice",
    "TradeFee",
    "UserAsset",
    "ApiRestrictions",
    "CommissionRates",
    "Balance",
    "SpotAccount",
    "CommissionDetails",
    "DiscountDetails",
    "SpotCommission",
    "OrderInfo",
    "OrderFill",
    "OrderResponseFull",
    "Trade",

    # Config
    "BINANCE_CONFIG",
    "ExchangeConfig",
    "API_KEY_HEADER"
]
