"""
components/strategies/trading_types.py - Trading Type Definitions

Version: 1.0.0
Date: 2025-11-02
Author: DualBot Team

Description:
    Shared types for the dual-bot engine (Enum, Dataclass, Exception).
    Used by strategies, the risk/position managers, execution modes and
    the datamanager services.

    Contents:
    - Enums: TradingMode, Direction, PositionStatus, ErrorLevel, StrategyName
    - Settings: StrategyToggles, ModeSettings, TradingSettings, ModeSettingsView
    - Records: Position, Trade, BotLog, SystemErrorEntry
    - Transient: TradingOpportunity, PositionSizing, Fill, Quote
    - Exceptions: TradingError and subclasses

Dependencies:
    - dataclasses (stdlib)
    - decimal (stdlib)
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field, replace
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, FrozenSet, Optional


# ============================================================================
# ENUMS
# ============================================================================

class TradingMode(str, Enum):
    """Bot mode"""
    SPOT = "spot"
    LEVERAGE = "leverage"

    def __str__(self) -> str:
        return self.value


class Direction(str, Enum):
    """Position direction (UP = spot buy)"""
    UP = "UP"
    LONG = "LONG"
    SHORT = "SHORT"

    def __str__(self) -> str:
        return self.value

    @property
    def is_long(self) -> bool:
        return self in (Direction.UP, Direction.LONG)


class PositionStatus(str, Enum):
    OPEN = "open"
    CLOSED = "closed"

    def __str__(self) -> str:
        return self.value


class ErrorLevel(str, Enum):
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"

    def __str__(self) -> str:
        return self.value


class StrategyName(str, Enum):
    """Strategy identifiers, declared in tie-break priority order"""
    TREND_FOLLOWING = "trend_following"
    BREAKOUT = "breakout"
    PULLBACK = "pullback"
    MEAN_REVERSION = "mean_reversion"
    AI = "ai"

    def __str__(self) -> str:
        return self.value

    @property
    def priority(self) -> int:
        """Lower wins ties"""
        return list(StrategyName).index(self)


# Directions each mode may open
ALLOWED_DIRECTIONS: Dict[TradingMode, FrozenSet[Direction]] = {
    TradingMode.SPOT: frozenset({Direction.LONG}),
    TradingMode.LEVERAGE: frozenset({Direction.LONG, Direction.SHORT}),
}


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _flatten(record) -> Dict[str, Any]:
    """Dataclass -> JSON-safe dict (Decimal as str, datetime as ISO-8601)"""
    data = asdict(record)
    for key, value in data.items():
        if isinstance(value, Decimal):
            data[key] = str(value)
        elif isinstance(value, datetime):
            data[key] = value.isoformat()
        elif isinstance(value, Enum):
            data[key] = value.value
    return data


# ============================================================================
# EXCEPTIONS
# ============================================================================

class TradingError(Exception):
    """Trading engine base exception"""


class MaxPositionsReached(TradingError):
    def __init__(self, mode: TradingMode, open_count: int, max_positions: int):
        self.mode = mode
        self.open_count = open_count
        self.max_positions = max_positions
        super().__init__(f"Max positions reached for {mode}: {open_count}/{max_positions}")


class DuplicatePosition(TradingError):
    def __init__(self, symbol: str, mode: TradingMode):
        self.symbol = symbol
        self.mode = mode
        super().__init__(f"Already have an open {mode} position in {symbol}")


class OrderSubmissionFailed(TradingError):
    def __init__(self, symbol: str, reason: str):
        self.symbol = symbol
        self.reason = reason
        super().__init__(f"Order submission failed for {symbol}: {reason}")


class QuoteUnavailable(TradingError):
    def __init__(self, symbol: str, reason: str = "no quote"):
        self.symbol = symbol
        self.reason = reason
        super().__init__(f"Quote unavailable for {symbol}: {reason}")


class HistoryUnavailable(TradingError):
    def __init__(self, symbol: str, reason: str = "no candles"):
        self.symbol = symbol
        self.reason = reason
        super().__init__(f"Price history unavailable for {symbol}: {reason}")


class InvalidSettings(TradingError):
    """Settings missing or failing validation"""


# ============================================================================
# SETTINGS
# ============================================================================

@dataclass(frozen=True)
class StrategyToggles:
    trend_following: bool = True
    mean_reversion: bool = True
    breakout_trading: bool = True
    pullback_trading: bool = True

    def is_enabled(self, strategy: StrategyName) -> bool:
        return {
            StrategyName.TREND_FOLLOWING: self.trend_following,
            StrategyName.MEAN_REVERSION: self.mean_reversion,
            StrategyName.BREAKOUT: self.breakout_trading,
            StrategyName.PULLBACK: self.pullback_trading,
        }.get(strategy, False)

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> 'StrategyToggles':
        data = data or {}
        return cls(**{k: bool(v) for k, v in data.items() if k in cls.__dataclass_fields__})


@dataclass(frozen=True)
class ModeSettings:
    """Per-mode switches: spot and leverage each own one instance"""
    strategies: StrategyToggles = field(default_factory=StrategyToggles)
    paper_trading: bool = True
    ai_trading_enabled: bool = False


@dataclass(frozen=True)
class ModeSettingsView:
    """
    Read-only settings for one mode within one tick

    Built by TradingSettings.for_mode(); holds the shared fields plus
    exactly one ModeSettings, so a mode never sees the other's switches.
    """
    mode: TradingMode
    usdt_per_trade: Decimal
    max_positions: int
    risk_per_trade: Decimal
    stop_loss: Decimal
    take_profit: Decimal
    rsi_period: int
    rsi_low: float
    rsi_high: float
    ema_fast: int
    ema_slow: int
    macd_signal: int
    adx_period: int
    timeframe: str
    min_confidence: float
    strategies: StrategyToggles
    paper_trading: bool
    ai_trading_enabled: bool

    @property
    def allowed_directions(self) -> FrozenSet[Direction]:
        return ALLOWED_DIRECTIONS[self.mode]


@dataclass
class TradingSettings:
    """Per-user trading configuration"""
    usdt_per_trade: Decimal = Decimal("100")
    max_positions: int = 10
    risk_per_trade: Decimal = Decimal("2.5")
    stop_loss: Decimal = Decimal("3.0")
    take_profit: Decimal = Decimal("6.0")
    rsi_period: int = 14
    rsi_low: float = 30
    rsi_high: float = 70
    ema_fast: int = 12
    ema_slow: int = 26
    macd_signal: int = 9
    adx_period: int = 14
    timeframe: str = "15m"
    min_confidence: float = 75
    api_key: Optional[str] = None
    api_secret: Optional[str] = None
    spot: ModeSettings = field(default_factory=ModeSettings)
    leverage: ModeSettings = field(default_factory=ModeSettings)

    def validate(self) -> 'TradingSettings':
        """
        Raises:
            InvalidSettings: first violated rule
        """
        checks = [
            (self.usdt_per_trade > 0, "usdt_per_trade must be > 0"),
            (self.max_positions >= 1, "max_positions must be >= 1"),
            (0 < self.risk_per_trade <= 100, "risk_per_trade must be in (0, 100]"),
            (self.stop_loss > 0, "stop_loss must be > 0"),
            (self.take_profit > 0, "take_profit must be > 0"),
            (0 <= self.rsi_low < self.rsi_high <= 100, "rsi bounds must satisfy 0 <= low < high <= 100"),
            (min(self.rsi_period, self.ema_fast, self.ema_slow, self.macd_signal, self.adx_period) >= 1,
             "indicator periods must be >= 1"),
            (self.ema_fast < self.ema_slow, "ema_fast must be < ema_slow"),
            (0 <= self.min_confidence <= 100, "min_confidence must be in [0, 100]"),
            (bool(self.timeframe), "timeframe must not be empty"),
        ]
        for ok, message in checks:
            if not ok:
                raise InvalidSettings(message)
        return self

    def mode_settings(self, mode: TradingMode) -> ModeSettings:
        return self.spot if TradingMode(mode) == TradingMode.SPOT else self.leverage

    def for_mode(self, mode: TradingMode) -> ModeSettingsView:
        mode = TradingMode(mode)
        own = self.mode_settings(mode)
        return ModeSettingsView(
            mode=mode,
            usdt_per_trade=Decimal(self.usdt_per_trade),
            max_positions=int(self.max_positions),
            risk_per_trade=Decimal(self.risk_per_trade),
            stop_loss=Decimal(self.stop_loss),
            take_profit=Decimal(self.take_profit),
            rsi_period=int(self.rsi_period),
            rsi_low=float(self.rsi_low),
            rsi_high=float(self.rsi_high),
            ema_fast=int(self.ema_fast),
            ema_slow=int(self.ema_slow),
            macd_signal=int(self.macd_signal),
            adx_period=int(self.adx_period),
            timeframe=self.timeframe,
            min_confidence=float(self.min_confidence),
            strategies=own.strategies,
            paper_trading=own.paper_trading,
            ai_trading_enabled=own.ai_trading_enabled,
        )

    def with_mode(self, mode: TradingMode, **changes) -> 'TradingSettings':
        """Copy with one mode's switches replaced"""
        mode = TradingMode(mode)
        updated = replace(self.mode_settings(mode), **changes)
        if mode == TradingMode.SPOT:
            return replace(self, spot=updated)
        return replace(self, leverage=updated)


# ============================================================================
# RECORDS
# ============================================================================

@dataclass
class Position:
    symbol: str
    direction: Direction
    entry_price: Decimal
    quantity: Decimal
    trading_mode: TradingMode
    stop_loss: Optional[Decimal] = None
    take_profit: Optional[Decimal] = None
    current_price: Optional[Decimal] = None
    pnl: Decimal = Decimal("0")
    status: PositionStatus = PositionStatus.OPEN
    strategy: Optional[str] = None
    order_id: Optional[str] = None
    is_paper_trade: bool = True
    user_id: str = "default"
    created_at: datetime = field(default_factory=utc_now)
    closed_at: Optional[datetime] = None
    id: Optional[int] = None

    @property
    def is_open(self) -> bool:
        return self.status == PositionStatus.OPEN

    def to_dict(self) -> Dict[str, Any]:
        return _flatten(self)


@dataclass
class Trade:
    position_id: int
    symbol: str
    direction: Direction
    entry_price: Decimal
    exit_price: Decimal
    quantity: Decimal
    pnl: Decimal
    duration: int  # seconds
    trading_mode: TradingMode
    entry_time: datetime
    exit_time: datetime
    strategy: Optional[str] = None
    is_paper_trade: bool = True
    close_reason: Optional[str] = None
    user_id: str = "default"
    id: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return _flatten(self)


@dataclass
class BotLog:
    level: str
    message: str
    symbol: Optional[str] = None
    data: Optional[Dict[str, Any]] = None
    trading_mode: Optional[str] = None
    user_id: str = "default"
    created_at: datetime = field(default_factory=utc_now)
    id: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "level": self.level,
            "message": self.message,
            "symbol": self.symbol,
            "data": self.data,
            "tradingMode": self.trading_mode,
            "createdAt": self.created_at.isoformat(),
        }


@dataclass
class SystemErrorEntry:
    level: ErrorLevel
    title: str
    message: str
    source: str
    error_code: Optional[str] = None
    resolved: bool = False
    user_id: str = "default"
    created_at: datetime = field(default_factory=utc_now)
    resolved_at: Optional[datetime] = None
    id: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "level": str(self.level),
            "title": self.title,
            "message": self.message,
            "source": self.source,
            "errorCode": self.error_code,
            "resolved": self.resolved,
            "createdAt": self.created_at.isoformat(),
            "resolvedAt": self.resolved_at.isoformat() if self.resolved_at else None,
        }


# ============================================================================
# TRANSIENT
# ============================================================================

@dataclass(frozen=True)
class Quote:
    symbol: str
    price: Decimal
    volume: Optional[Decimal] = None
    timestamp: datetime = field(default_factory=utc_now)


@dataclass
class TradingOpportunity:
    """Candidate signal, lives within one tick"""
    symbol: str
    strategy: StrategyName
    direction: Direction
    confidence: float
    description: str
    price: Decimal
    indicators: Dict[str, float] = field(default_factory=dict)


@dataclass(frozen=True)
class PositionSizing:
    quantity: Decimal
    notional: Decimal
    stop_loss: Decimal
    take_profit: Decimal
    direction: Direction
    entry_price: Decimal


@dataclass(frozen=True)
class Fill:
    """Execution acknowledgement"""
    order_id: str
    symbol: str
    price: Decimal
    quantity: Decimal
    is_paper: bool
    timestamp: datetime = field(default_factory=utc_now)


__all__ = [
    'TradingMode', 'Direction', 'PositionStatus', 'ErrorLevel', 'StrategyName',
    'ALLOWED_DIRECTIONS', 'utc_now',
    'TradingError', 'MaxPositionsReached', 'DuplicatePosition', 'OrderSubmissionFailed',
    'QuoteUnavailable', 'HistoryUnavailable', 'InvalidSettings',
    'StrategyToggles', 'ModeSettings', 'ModeSettingsView', 'TradingSettings',
    'Position', 'Trade', 'BotLog', 'SystemErrorEntry',
    'Quote', 'TradingOpportunity', 'PositionSizing', 'Fill',
]
