#!/usr/bin/env python3
"""
components/strategies/test_strategies.py
DualBot - Strategy Evaluator & Signal Aggregator Tests
"""

from dataclasses import replace
from decimal import Decimal

import pytest

from components.indicators.indicator_manager import IndicatorSnapshot
from components.strategies.base_strategy import clamp_confidence
from components.strategies.signal_manager import SignalManager
from components.strategies.templates import (
    BreakoutStrategy,
    MeanReversionStrategy,
    PullbackStrategy,
    TrendFollowingStrategy,
    build_strategies,
)
from components.strategies.trading_types import (
    ALLOWED_DIRECTIONS,
    Direction,
    StrategyName,
    StrategyToggles,
    TradingMode,
    TradingOpportunity,
    TradingSettings,
)

NEUTRAL = IndicatorSnapshot(
    price=100.0, volume=100.0, rsi=50.0,
    ema_fast=100.0, ema_slow=100.0,
    macd=0.0, macd_signal=0.0, macd_histogram=0.0,
    adx=15.0, plus_di=20.0, minus_di=20.0,
    bb_upper=104.0, bb_middle=100.0, bb_lower=96.0,
    range_high=105.0, range_low=95.0, avg_volume=100.0,
)


def snapshot(**changes) -> IndicatorSnapshot:
    return replace(NEUTRAL, **changes)


@pytest.fixture
def view():
    return TradingSettings().for_mode(TradingMode.LEVERAGE)


def test_neutral_market_produces_nothing(view):
    for strategy in build_strategies():
        assert strategy.evaluate("BTCUSDT", NEUTRAL, view) is None


# ============================================================================
# TREND FOLLOWING
# ============================================================================

def test_trend_long(view):
    opp = TrendFollowingStrategy().evaluate(
        "BTCUSDT", snapshot(adx=35, ema_fast=101, macd=1.0, macd_signal=0.5, rsi=60), view
    )
    assert opp.direction == Direction.LONG
    assert opp.strategy == StrategyName.TREND_FOLLOWING
    assert opp.confidence == pytest.approx(80.0)
    assert opp.price == Decimal("100.0")
    assert opp.indicators["adx"] == pytest.approx(35.0)


def test_trend_short(view):
    opp = TrendFollowingStrategy().evaluate(
        "BTCUSDT", snapshot(adx=35, ema_fast=99, macd=-1.0, macd_signal=-0.5, rsi=40), view
    )
    assert opp.direction == Direction.SHORT
    assert opp.confidence == pytest.approx(80.0)


def test_trend_requires_adx_above_floor(view):
    weak = snapshot(adx=25, ema_fast=101, macd=1.0, macd_signal=0.5)
    assert TrendFollowingStrategy().evaluate("BTCUSDT", weak, view) is None


def test_trend_confidence_caps(view):
    strong = snapshot(adx=70, ema_fast=101, macd=1.0, macd_signal=0.5, rsi=60)
    assert TrendFollowingStrategy().evaluate("BTCUSDT", strong, view).confidence == pytest.approx(100.0)

    stretched = snapshot(adx=35, ema_fast=101, macd=1.0, macd_signal=0.5, rsi=75)
    assert TrendFollowingStrategy().evaluate("BTCUSDT", stretched, view).confidence == pytest.approx(70.0)


# ============================================================================
# MEAN REVERSION
# ============================================================================

def test_mean_reversion_long_and_cap(view):
    strategy = MeanReversionStrategy()
    opp = strategy.evaluate("ETHUSDT", snapshot(rsi=20, price=95), view)
    assert opp.direction == Direction.LONG
    assert opp.confidence == pytest.approx(90.0)

    deep = strategy.evaluate("ETHUSDT", snapshot(rsi=10, price=95), view)
    assert deep.confidence == pytest.approx(95.0)


def test_mean_reversion_short(view):
    opp = MeanReversionStrategy().evaluate("ETHUSDT", snapshot(rsi=80, price=105), view)
    assert opp.direction == Direction.SHORT
    assert opp.confidence == pytest.approx(90.0)


def test_mean_reversion_needs_band_break(view):
    assert MeanReversionStrategy().evaluate("ETHUSDT", snapshot(rsi=20, price=97), view) is None


# ============================================================================
# BREAKOUT
# ============================================================================

def test_breakout_long(view):
    opp = BreakoutStrategy().evaluate("SOLUSDT", snapshot(price=106, volume=200), view)
    assert opp.direction == Direction.LONG
    assert opp.confidence == pytest.approx(75.0)


def test_breakout_short(view):
    opp = BreakoutStrategy().evaluate("SOLUSDT", snapshot(price=94, volume=200), view)
    assert opp.direction == Direction.SHORT
    assert opp.confidence == pytest.approx(75.0)


def test_breakout_needs_volume(view):
    assert BreakoutStrategy().evaluate("SOLUSDT", snapshot(price=106, volume=140), view) is None


def test_breakout_confidence_cap(view):
    opp = BreakoutStrategy().evaluate("SOLUSDT", snapshot(price=106, volume=500, adx=40), view)
    assert opp.confidence == pytest.approx(95.0)


# ============================================================================
# PULLBACK
# ============================================================================

def test_pullback_long(view):
    opp = PullbackStrategy().evaluate(
        "BTCUSDT", snapshot(ema_fast=100, ema_slow=98, rsi=50, macd_histogram=0.2, price=101), view
    )
    assert opp.direction == Direction.LONG
    assert opp.confidence == pytest.approx(90.0)


def test_pullback_short(view):
    opp = PullbackStrategy().evaluate(
        "BTCUSDT", snapshot(ema_fast=100, ema_slow=102, rsi=45, macd_histogram=-0.2, price=99), view
    )
    assert opp.direction == Direction.SHORT


def test_pullback_too_far_from_ema(view):
    far = snapshot(ema_fast=100, ema_slow=98, rsi=50, macd_histogram=0.2, price=102)
    assert PullbackStrategy().evaluate("BTCUSDT", far, view) is None


def test_pullback_needs_neutral_rsi(view):
    hot = snapshot(ema_fast=100, ema_slow=98, rsi=65, macd_histogram=0.2, price=101)
    assert PullbackStrategy().evaluate("BTCUSDT", hot, view) is None


# ============================================================================
# TOGGLES
# ============================================================================

def test_toggles_are_per_mode():
    settings = TradingSettings().with_mode(
        TradingMode.SPOT, strategies=StrategyToggles(trend_following=False, breakout_trading=False)
    )
    spot = settings.for_mode(TradingMode.SPOT)
    leverage = settings.for_mode(TradingMode.LEVERAGE)

    enabled_spot = {s.name for s in build_strategies() if s.is_enabled(spot)}
    enabled_leverage = {s.name for s in build_strategies() if s.is_enabled(leverage)}

    assert enabled_spot == {StrategyName.PULLBACK, StrategyName.MEAN_REVERSION}
    assert len(enabled_leverage) == 4


def test_clamp_confidence():
    assert clamp_confidence(120) == 100.0
    assert clamp_confidence(-3) == 0.0
    assert clamp_confidence(77.5) == 77.5


# ============================================================================
# SIGNAL MANAGER
# ============================================================================

def opportunity(strategy: StrategyName, confidence: float, direction=Direction.LONG) -> TradingOpportunity:
    return TradingOpportunity(
        symbol="BTCUSDT", strategy=strategy, direction=direction,
        confidence=confidence, description="", price=Decimal("100"),
    )


def test_spot_never_selects_short():
    manager = SignalManager()
    best = manager.select_best(
        [opportunity(StrategyName.MEAN_REVERSION, 95, Direction.SHORT),
         opportunity(StrategyName.PULLBACK, 80)],
        75, ALLOWED_DIRECTIONS[TradingMode.SPOT],
    )
    assert best.strategy == StrategyName.PULLBACK

    only_short = [opportunity(StrategyName.TREND_FOLLOWING, 99, Direction.SHORT)]
    assert manager.select_best(only_short, 75, ALLOWED_DIRECTIONS[TradingMode.SPOT]) is None
    assert manager.select_best(only_short, 75, ALLOWED_DIRECTIONS[TradingMode.LEVERAGE]) is not None


def test_min_confidence_floor():
    manager = SignalManager()
    allowed = ALLOWED_DIRECTIONS[TradingMode.LEVERAGE]

    assert manager.select_best([opportunity(StrategyName.BREAKOUT, 74.9)], 75, allowed) is None
    assert manager.select_best([opportunity(StrategyName.BREAKOUT, 75)], 75, allowed) is not None
    assert manager.select_best([None, None], 0, allowed) is None
    assert manager.select_best([], 0, allowed) is None


def test_highest_confidence_wins():
    best = SignalManager().select_best(
        [opportunity(StrategyName.TREND_FOLLOWING, 80), opportunity(StrategyName.MEAN_REVERSION, 90)],
        75, ALLOWED_DIRECTIONS[TradingMode.LEVERAGE],
    )
    assert best.strategy == StrategyName.MEAN_REVERSION


@pytest.mark.parametrize("winner, loser", [
    (StrategyName.TREND_FOLLOWING, StrategyName.BREAKOUT),
    (StrategyName.BREAKOUT, StrategyName.PULLBACK),
    (StrategyName.PULLBACK, StrategyName.MEAN_REVERSION),
    (StrategyName.MEAN_REVERSION, StrategyName.AI),
])
def test_ties_follow_priority(winner, loser):
    best = SignalManager().select_best(
        [opportunity(loser, 85), opportunity(winner, 85)],
        75, ALLOWED_DIRECTIONS[TradingMode.LEVERAGE],
    )
    assert best.strategy == winner
