"""
indicators/__init__.py - Indicators Package

Version: 1.0.0
Date: 2025-11-02
Author: DualBot Team

Description:
    RSI, EMA, MACD, ADX and Bollinger Bands plus the IndicatorEngine that
    turns a price history into a per-tick snapshot.

    Usage:
        from components.indicators import IndicatorEngine, IndicatorParams
"""

from components.indicators.indicator_types import (
    IndicatorError,
    InsufficientHistory,
    InvalidParameterError,
    CalculationError,
)
from components.indicators.indicator_manager import (
    IndicatorEngine,
    IndicatorParams,
    IndicatorSnapshot,
    candles_to_frame,
)

__all__ = [
    'IndicatorEngine',
    'IndicatorParams',
    'IndicatorSnapshot',
    'candles_to_frame',
    'IndicatorError',
    'InsufficientHistory',
    'InvalidParameterError',
    'CalculationError',
]
