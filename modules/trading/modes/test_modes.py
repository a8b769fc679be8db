#!/usr/bin/env python3
"""
modules/trading/modes/test_modes.py
DualBot - Execution Mode Tests
"""

from decimal import Decimal

import pytest

from components.exchanges.base_api import OrderAck
from components.strategies.trading_types import (
    Direction,
    InvalidSettings,
    OrderSubmissionFailed,
    Position,
    PositionSizing,
    StrategyName,
    TradingMode,
    TradingOpportunity,
)
from modules.trading.modes import LiveMode, PAPER_PREFIX, PaperMode, select_mode


def opportunity(direction=Direction.LONG) -> TradingOpportunity:
    return TradingOpportunity(
        symbol="ETHUSDT", strategy=StrategyName.PULLBACK, direction=direction,
        confidence=90.0, description="", price=Decimal("2000"),
    )


def sizing(direction=Direction.LONG) -> PositionSizing:
    return PositionSizing(
        quantity=Decimal("0.05"), notional=Decimal("100"), stop_loss=Decimal("1940"),
        take_profit=Decimal("2120"), direction=direction, entry_price=Decimal("2000"),
    )


def position(direction, mode=TradingMode.LEVERAGE) -> Position:
    return Position(
        symbol="ETHUSDT", direction=direction, entry_price=Decimal("2000"),
        quantity=Decimal("0.05"), trading_mode=mode,
    )


def test_select_mode():
    assert isinstance(select_mode(True), PaperMode)
    assert isinstance(select_mode(False, object(), TradingMode.LEVERAGE), LiveMode)
    with pytest.raises(InvalidSettings, match="requires an order gateway"):
        select_mode(False, None)


def test_paper_fills_at_quote():
    mode = PaperMode(TradingMode.SPOT)

    fill = mode.open(opportunity(), sizing(Direction.UP), Direction.UP)
    assert fill.order_id.startswith(PAPER_PREFIX)
    assert fill.price == Decimal("2000")
    assert fill.quantity == Decimal("0.05")
    assert fill.is_paper is True

    exit_fill = mode.close(position(Direction.UP, TradingMode.SPOT), Decimal("2100"))
    assert exit_fill.price == Decimal("2100")
    assert exit_fill.order_id != fill.order_id


@pytest.mark.parametrize("mode, direction, category, open_side, close_side", [
    (TradingMode.SPOT, Direction.UP, "spot", "buy", "sell"),
    (TradingMode.LEVERAGE, Direction.LONG, "linear", "buy", "sell"),
    (TradingMode.LEVERAGE, Direction.SHORT, "linear", "sell", "buy"),
])
def test_live_sides_and_categories(gateway, mode, direction, category, open_side, close_side):
    live = LiveMode(gateway, mode)

    fill = live.open(opportunity(direction), sizing(direction), direction)
    live.close(position(direction, mode), Decimal("2050"))

    assert fill.order_id == "EX-1"
    assert fill.is_paper is False
    assert [o["side"] for o in gateway.orders] == [open_side, close_side]
    assert {o["category"] for o in gateway.orders} == {category}


def test_live_failure_is_single_attempt(gateway):
    gateway.fail = ConnectionError("timeout")
    live = LiveMode(gateway, TradingMode.LEVERAGE)

    with pytest.raises(OrderSubmissionFailed) as exc:
        live.open(opportunity(), sizing(), Direction.LONG)

    assert "timeout" in exc.value.reason
    assert len(gateway.orders) == 1


def test_live_rejects_incomplete_ack(gateway):
    live = LiveMode(gateway, TradingMode.SPOT)

    gateway.fill_price = None
    with pytest.raises(OrderSubmissionFailed):
        live.open(opportunity(), sizing(Direction.UP), Direction.UP)

    class NoIdGateway:
        def submit_order(self, symbol, side, quantity, category):
            return OrderAck(order_id="", price=Decimal("2000"), quantity=quantity)

    with pytest.raises(OrderSubmissionFailed):
        LiveMode(NoIdGateway(), TradingMode.SPOT).open(opportunity(), sizing(Direction.UP), Direction.UP)
