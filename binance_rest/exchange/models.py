"""
Response payload models for the Binance Spot REST endpoints.

Field names follow Python conventions; the wire (camelCase) names are
declared as aliases. Prices and quantities are parsed into Decimal.
"""

from decimal import Decimal
from enum import Enum
from typing import List

from pydantic import BaseModel, ConfigDict, Field


class OrderSide(Enum):
    """Order side enumeration."""
    BUY = "BUY"
    SELL = "SELL"


class OrderType(Enum):
    """Order type enumeration."""
    LIMIT = "LIMIT"
    MARKET = "MARKET"
    STOP_LOSS = "STOP_LOSS"
    STOP_LOSS_LIMIT = "STOP_LOSS_LIMIT"
    TAKE_PROFIT = "TAKE_PROFIT"
    TAKE_PROFIT_LIMIT = "TAKE_PROFIT_LIMIT"
    LIMIT_MAKER = "LIMIT_MAKER"


class TimeInForce(Enum):
    """Time in force enumeration."""
    GTC = "GTC"  # Good Till Cancel
    IOC = "IOC"  # Immediate or Cancel
    FOK = "FOK"  # Fill or Kill


class OrderStatus(Enum):
    """Order status as reported by the exchange."""
    NEW = "NEW"
    PARTIALLY_FILLED = "PARTIALLY_FILLED"
    FILLED = "FILLED"
    CANCELED = "CANCELED"
    PENDING_CANCEL = "PENDING_CANCEL"
    REJECTED = "REJECTED"
    EXPIRED = "EXPIRED"
    EXPIRED_IN_MATCH = "EXPIRED_IN_MATCH"


class SelfTradePreventionMode(Enum):
    NONE = "NONE"
    EXPIRE_TAKER = "EXPIRE_TAKER"
    EXPIRE_MAKER = "EXPIRE_MAKER"
    EXPIRE_BOTH = "EXPIRE_BOTH"
    DECREMENT = "DECREMENT"


class ExchangeModel(BaseModel):
    """Base for payload models: accepts wire aliases or field names."""
    model_config = ConfigDict(populate_by_name=True, frozen=True)


# ============================================================================
# Market
# ============================================================================

class ServerTime(ExchangeModel):
    server_time: int = Field(alias="serverTime")


class SymbolPrice(ExchangeModel):
    symbol: str
    price: Decimal


# ============================================================================
# Account
# ============================================================================

class TradeFee(ExchangeModel):
    symbol: str
    maker_commission: Decimal = Field(alias="makerCommission")
    taker_commission: Decimal = Field(alias="takerCommission")


class UserAsset(ExchangeModel):
    asset: str
    free: Decimal
    locked: Decimal
    freeze: Decimal
    withdrawing: Decimal
    ipoable: Decimal
    btc_valuation: Decimal = Field(alias="btcValuation")


class ApiRestrictions(ExchangeModel):
    ip_restrict: bool = Field(alias="ipRestrict")
    create_time: int = Field(alias="createTime")
    enable_internal_transfer: bool = Field(alias="enableInternalTransfer")
    enable_futures: bool = Field(alias="enableFutures")
    enable_portfolio_margin_trading: bool = Field(alias="enablePortfolioMarginTrading")
    enable_vanilla_options: bool = Field(alias="enableVanillaOptions")
    permits_universal_transfer: bool = Field(alias="permitsUniversalTransfer")
    enable_reading: bool = Field(alias="enableReading")
    enable_spot_and_margin_trading: bool = Field(alias="enableSpotAndMarginTrading")
    enable_withdrawals: bool = Field(alias="enableWithdrawals")
    enable_margin: bool = Field(alias="enableMargin")


class CommissionRates(ExchangeModel):
    maker: Decimal
    taker: Decimal
    buyer: Decimal
    seller: Decimal


class Balance(ExchangeModel):
    """Spot balance of one asset."""
    asset: str
    free: Decimal
    locked: Decimal

    @property
    def total(self) -> Decimal:
        return self.free + self.locked


class SpotAccount(ExchangeModel):
    maker_commission: int = Field(alias="makerCommission")
    taker_commission: int = Field(alias="takerCommission")
    buyer_commission: int = Field(alias="buyerCommission")
    seller_commission: int = Field(alias="sellerCommission")
    commission_rates: CommissionRates = Field(alias="commissionRates")
    can_trade: bool = Field(alias="canTrade")
    can_withdraw: bool = Field(alias="canWithdraw")
    can_deposit: bool = Field(alias="canDeposit")
    brokered: bool
    require_self_trade_prevention: bool = Field(alias="requireSelfTradePrevention")
    prevent_sor: bool = Field(alias="preventSor")
    update_time: int = Field(alias="updateTime")
    account_type: str = Field(alias="accountType")
    balances: List[Balance]
    permissions: List[str]
    uid: int


class CommissionDetails(ExchangeModel):
    maker: Decimal
    taker: Decimal
    buyer: Decimal
    seller: Decimal


class DiscountDetails(ExchangeModel):
    enabled_for_account: bool = Field(alias="enabledForAccount")
    enabled_for_symbol: bool = Field(alias="enabledForSymbol")
    discount_asset: str = Field(alias="discountAsset")
    discount: Decimal


class SpotCommission(ExchangeModel):
    symbol: str
    standard_commission: CommissionDetails = Field(alias="standardCommission")
    tax_commission: CommissionDetails = Field(alias="taxCommission")
    discount: DiscountDetails


# ============================================================================
# Spot trading
# ============================================================================

class OrderInfo(ExchangeModel):
    symbol: str
    order_id: int = Field(alias="orderId")
    order_list_id: int = Field(alias="orderListId")
    client_order_id: str = Field(alias="clientOrderId")
    price: Decimal
    orig_qty: Decimal = Field(alias="origQty")
    executed_qty: Decimal = Field(alias="executedQty")
    cummulative_quote_qty: Decimal = Field(alias="cummulativeQuoteQty")
    status: OrderStatus
    time_in_force: TimeInForce = Field(alias="timeInForce")
    order_type: OrderType = Field(alias="type")
    side: OrderSide
    stop_price: Decimal = Field(alias="stopPrice")
    iceberg_qty: Decimal = Field(alias="icebergQty")
    time: int
    update_time: int = Field(alias="updateTime")
    is_working: bool = Field(alias="isWorking")
    working_time: int = Field(alias="workingTime")
    orig_quote_order_qty: Decimal = Field(alias="origQuoteOrderQty")
    self_trade_prevention_mode: SelfTradePreventionMode = Field(alias="selfTradePreventionMode")

    @property
    def remaining_qty(self) -> Decimal:
        return self.orig_qty - self.executed_qty


class OrderFill(ExchangeModel):
    price: Decimal
    qty: Decimal
    commission: Decimal
    commission_asset: str = Field(alias="commissionAsset")
    trade_id: int = Field(alias="tradeId")


class OrderResponseFull(ExchangeModel):
    symbol: str
    order_id: int = Field(alias="orderId")
    order_list_id: int = Field(alias="orderListId")
    client_order_id: str = Field(alias="clientOrderId")
    transact_time: int = Field(alias="transactTime")
    price: Decimal
    orig_qty: Decimal = Field(alias="origQty")
    executed_qty: Decimal = Field(alias="executedQty")
    cummulative_quote_qty: Decimal = Field(alias="cummulativeQuoteQty")
    status: OrderStatus
    time_in_force: TimeInForce = Field(alias="timeInForce")
    order_type: OrderType = Field(alias="type")
    side: OrderSide
    working_time: int = Field(alias="workingTime")
    self_trade_prevention_mode: SelfTradePreventionMode = Field(alias="selfTradePreventionMode")
    fills: List[OrderFill]

    @property
    def average_fill_price(self) -> Decimal:
        """Quantity-weighted average price of the fills (0 if unfilled)."""
        filled = sum((fill.qty for fill in self.fills), Decimal("0"))
        if filled == 0:
            return Decimal("0")
        return sum((fill.price * fill.qty for fill in self.fills), Decimal("0")) / filled


class Trade(ExchangeModel):
    symbol: str
    id: int
    order_id: int = Field(alias="orderId")
    order_list_id: int = Field(alias="orderListId")
    price: Decimal
    qty: Decimal
    quote_qty: Decimal = Field(alias="quoteQty")
    commission: Decimal
    commission_asset: str = Field(alias="commissionAsset")
    time: int
    is_buyer: bool = Field(alias="isBuyer")
    is_maker: bool = Field(alias="isMaker")
    is_best_match: bool = Field(alias="isBestMatch")
