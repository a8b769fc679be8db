#!/usr/bin/env python3
"""
components/strategies/base_strategy.py
DualBot - Base Strategy Class

Version: 1.0.0
Date: 2025-11-02
Author: DualBot Team

Description:
    Base class of the technical evaluators.
    Each strategy template inherits from this class and implements
    check_long / check_short against one IndicatorSnapshot.

    A strategy never touches I/O: it reads the snapshot and the mode's
    settings view and either proposes a TradingOpportunity or returns None.

Usage:
    from components.strategies.base_strategy import BaseStrategy

    class MyStrategy(BaseStrategy):
        name = StrategyName.TREND_FOLLOWING

        def check_long(self, snapshot, settings):
            if snapshot.rsi < settings.rsi_low:
                return 80.0, "RSI oversold"
            return None
"""

from abc import ABC, abstractmethod
from decimal import Decimal
from typing import Optional, Tuple

from components.strategies.trading_types import (
    Direction,
    ModeSettingsView,
    StrategyName,
    TradingOpportunity,
)

# (confidence, description)
Verdict = Optional[Tuple[float, str]]


def clamp_confidence(value: float) -> float:
    """Confidence is always within [0, 100]"""
    return max(0.0, min(100.0, float(value)))


class BaseStrategy(ABC):
    """
    Base Strategy

    Attributes:
        name: StrategyName used for toggles, tie-break priority and trade records
    """

    name: StrategyName

    def is_enabled(self, settings: ModeSettingsView) -> bool:
        return settings.strategies.is_enabled(self.name)

    def evaluate(
        self,
        symbol: str,
        snapshot,
        settings: ModeSettingsView
    ) -> Optional[TradingOpportunity]:
        """
        Run both sides of the rule set

        LONG is checked first; the rules are mutually exclusive so at most
        one side can fire.

        Returns:
            TradingOpportunity or None
        """
        for direction, check in ((Direction.LONG, self.check_long), (Direction.SHORT, self.check_short)):
            verdict = check(snapshot, settings)
            if verdict is None:
                continue

            confidence, description = verdict
            return TradingOpportunity(
                symbol=symbol,
                strategy=self.name,
                direction=direction,
                confidence=round(clamp_confidence(confidence), 2),
                description=description,
                price=Decimal(str(snapshot.price)),
                indicators=snapshot.to_dict(),
            )
        return None

    @abstractmethod
    def check_long(self, snapshot, settings: ModeSettingsView) -> Verdict:
        """LONG rule -> (confidence, description) or None"""
        raise NotImplementedError

    @abstractmethod
    def check_short(self, snapshot, settings: ModeSettingsView) -> Verdict:
        """SHORT rule -> (confidence, description) or None"""
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} {self.name}>"


__all__ = ['BaseStrategy', 'Verdict', 'clamp_confidence']
