#!/usr/bin/env python3
"""
components/strategies/signal_manager.py
DualBot - Signal Manager

Version: 1.0.0
Date: 2025-11-02
Author: DualBot Team

Description:
    Picks at most one opportunity per symbol per tick.

    - Direction filter (spot: LONG only, leverage: LONG/SHORT)
    - Confidence floor (min_confidence)
    - Highest confidence wins
    - Ties broken by strategy priority:
      trend_following > breakout > pullback > mean_reversion > ai

Usage:
    from components.strategies.signal_manager import SignalManager

    manager = SignalManager()
    best = manager.select_best(
        candidates,
        min_confidence=view.min_confidence,
        allowed_directions=view.allowed_directions
    )
"""

from __future__ import annotations

from typing import Collection, Iterable, List, Optional

from components.strategies.trading_types import Direction, StrategyName, TradingOpportunity
from core.logger_engine import get_logger

logger = get_logger("components.strategies.signal_manager")


def _priority(opportunity: TradingOpportunity) -> int:
    try:
        return StrategyName(opportunity.strategy).priority
    except ValueError:
        # Unknown source ranks after every known one
        return len(StrategyName)


class SignalManager:
    """Signal aggregator"""

    def filter(
        self,
        candidates: Iterable[Optional[TradingOpportunity]],
        min_confidence: float,
        allowed_directions: Collection[Direction],
    ) -> List[TradingOpportunity]:
        """Candidates that pass the direction and confidence filters"""
        survivors = []
        for candidate in candidates:
            if candidate is None:
                continue
            if candidate.direction not in allowed_directions:
                logger.debug(
                    f"{candidate.symbol} {candidate.strategy} {candidate.direction} dropped: direction not allowed"
                )
                continue
            if candidate.confidence < min_confidence:
                logger.debug(
                    f"{candidate.symbol} {candidate.strategy} dropped: "
                    f"confidence {candidate.confidence} < {min_confidence}"
                )
                continue
            survivors.append(candidate)
        return survivors

    def select_best(
        self,
        candidates: Iterable[Optional[TradingOpportunity]],
        min_confidence: float,
        allowed_directions: Collection[Direction],
    ) -> Optional[TradingOpportunity]:
        """
        Returns:
            TradingOpportunity: Best survivor, None if nothing passes
        """
        survivors = self.filter(candidates, min_confidence, allowed_directions)
        if not survivors:
            return None

        # max confidence first, then lowest priority index
        return min(survivors, key=lambda c: (-c.confidence, _priority(c)))


__all__ = ['SignalManager']
