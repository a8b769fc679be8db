"""
indicators/indicator_types.py - Type Definitions for Indicators

Version: 1.0.0
Date: 2025-11-02
Author: DualBot Team

Description:
    Shared type definitions (Enum, Exception) for all indicator modules.

    Contents:
    - Enums: IndicatorCategory, IndicatorType
    - Exceptions: IndicatorError, InsufficientHistory, InvalidParameterError,
      CalculationError

    Usage:
        from components.indicators.indicator_types import (
            IndicatorCategory, InsufficientHistory
        )

Dependencies:
    - enum (stdlib)
"""

from enum import Enum
from typing import Any, Optional


OHLCV_COLUMNS = ['timestamp', 'open', 'high', 'low', 'close', 'volume']


# ============================================================================
# ENUMS
# ============================================================================

class IndicatorCategory(Enum):
    """Indicator categories"""
    MOMENTUM = "momentum"
    TREND = "trend"
    VOLATILITY = "volatility"

    def __str__(self) -> str:
        return self.value


class IndicatorType(Enum):
    """Output shape"""
    SINGLE_VALUE = "single_value"      # pd.Series
    MULTIPLE_VALUES = "multiple_values"  # pd.DataFrame (macd, signal, histogram)
    BANDS = "bands"                    # pd.DataFrame (upper, middle, lower)

    def __str__(self) -> str:
        return self.value


# ============================================================================
# EXCEPTIONS
# ============================================================================

class IndicatorError(Exception):
    """Indicator base exception"""
    def __init__(self, message: str, indicator_name: Optional[str] = None):
        self.indicator_name = indicator_name
        super().__init__(f"[{indicator_name}] {message}" if indicator_name else message)


class InsufficientHistory(IndicatorError):
    """
    Not enough candles for the longest configured period.

    Treated by the bot as a skip for the symbol, not as an error.
    """
    def __init__(self, indicator_name: str, required: int, available: int):
        self.required = required
        self.available = available
        message = f"Insufficient history: required {required}, available {available}"
        super().__init__(message, indicator_name)


class InvalidParameterError(IndicatorError):
    """
    Invalid indicator parameter, e.g. RSI period=-5
    """
    def __init__(self, indicator_name: str, param_name: str, param_value: Any, reason: Optional[str] = None):
        self.param_name = param_name
        self.param_value = param_value
        message = f"Invalid parameter '{param_name}' = {param_value}"
        if reason:
            message += f": {reason}"
        super().__init__(message, indicator_name)


class CalculationError(IndicatorError):
    """Calculation failed (e.g. NaN result on valid history)"""
    pass


__all__ = [
    'OHLCV_COLUMNS',
    'IndicatorCategory',
    'IndicatorType',
    'IndicatorError',
    'InsufficientHistory',
    'InvalidParameterError',
    'CalculationError',
]
