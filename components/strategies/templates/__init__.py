#!/usr/bin/env python3
"""
components/strategies/templates/__init__.py
DualBot - Strategy Templates

The four technical evaluators. Each template inherits from BaseStrategy.

Usage:
    from components.strategies.templates import build_strategies

    for strategy in build_strategies():
        if strategy.is_enabled(view):
            opportunity = strategy.evaluate(symbol, snapshot, view)
"""

from components.strategies.templates.trend_following import TrendFollowingStrategy
from components.strategies.templates.mean_reversion import MeanReversionStrategy
from components.strategies.templates.breakout import BreakoutStrategy
from components.strategies.templates.pullback import PullbackStrategy

STRATEGY_CLASSES = [
    TrendFollowingStrategy,
    BreakoutStrategy,
    PullbackStrategy,
    MeanReversionStrategy,
]


def build_strategies():
    """Fresh instances, in tie-break priority order"""
    return [cls() for cls in STRATEGY_CLASSES]


__all__ = [
    'TrendFollowingStrategy',
    'MeanReversionStrategy',
    'BreakoutStrategy',
    'PullbackStrategy',
    'STRATEGY_CLASSES',
    'build_strategies',
]
