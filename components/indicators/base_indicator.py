"""
indicators/base_indicator.py - Base Indicator Class

Version: 1.0.0
Date: 2025-11-02
Author: DualBot Team

Description:
    Abstract base class for all technical indicators.

    Tasks:
    - Input validation (OHLCV columns)
    - Period checking (is there enough data?)
    - Abstract calculate_batch() method (vectorized, full history)
    - calculate(): value of the last bar

    Usage:
        class RSI(BaseIndicator):
            def __init__(self, period: int = 14):
                super().__init__(
                    name='rsi',
                    category=IndicatorCategory.MOMENTUM,
                    params={'period': period}
                )
                self.period = period

            def get_required_periods(self) -> int:
                return self.period + 1

            def calculate_batch(self, data: pd.DataFrame) -> pd.Series:
                ...

Dependencies:
    - pandas>=2.0.0
    - numpy>=1.24.0
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, Optional, Union

import pandas as pd

from components.indicators.indicator_types import (
    OHLCV_COLUMNS,
    CalculationError,
    IndicatorCategory,
    IndicatorError,
    IndicatorType,
    InsufficientHistory,
    InvalidParameterError,
)


# ============================================================================
# BASE INDICATOR CLASS
# ============================================================================

class BaseIndicator(ABC):
    """
    Abstract base class for all indicators

    Attributes:
        name: Indicator name (e.g., 'rsi', 'ema')
        category: Category (momentum, trend, volatility)
        indicator_type: Output type (single_value, bands, ...)
        params: Parameters dictionary
    """

    required_columns = ('close',)

    def __init__(
        self,
        name: str,
        category: IndicatorCategory,
        indicator_type: IndicatorType = IndicatorType.SINGLE_VALUE,
        params: Optional[Dict[str, Any]] = None
    ):
        self.name = name
        self.category = category
        self.indicator_type = indicator_type
        self.params = params or {}

        self._validate_params()

    # ========================================================================
    # ABSTRACT METHODS
    # ========================================================================

    @abstractmethod
    def calculate_batch(self, data: pd.DataFrame) -> Union[pd.Series, pd.DataFrame]:
        """
        Vectorized calculation for all bars.

        Returns:
            pd.Series: Single value indicators (RSI, EMA)
            pd.DataFrame: Multiple value indicators (MACD, Bollinger, ADX)
        """

    @abstractmethod
    def get_required_periods(self) -> int:
        """Minimum number of bars for a defined last value"""

    # ========================================================================
    # OPTIONAL METHODS
    # ========================================================================

    def validate_params(self) -> bool:
        """
        Raises:
            InvalidParameterError: Invalid parameter
        """
        for key, value in self.params.items():
            if key.endswith('period') and (not isinstance(value, int) or value < 1):
                raise InvalidParameterError(self.name, key, value, "must be a positive integer")
        return True

    # ========================================================================
    # CALCULATION
    # ========================================================================

    def calculate(self, data: pd.DataFrame) -> Union[float, Dict[str, float]]:
        """
        Value(s) of the last bar

        Raises:
            InsufficientHistory: Fewer bars than get_required_periods()
            CalculationError: Last value is NaN
        """
        self._validate_data(data)
        result = self.calculate_batch(data)

        if isinstance(result, pd.DataFrame):
            last = {column: float(value) for column, value in result.iloc[-1].items()}
            if any(pd.isna(v) for v in last.values()):
                raise CalculationError(f"NaN in last row: {last}", self.name)
            return last

        last = float(result.iloc[-1])
        if pd.isna(last):
            raise CalculationError("NaN last value", self.name)
        return last

    # ========================================================================
    # DATA VALIDATION
    # ========================================================================

    def _validate_data(self, data: pd.DataFrame) -> None:
        """
        Raises:
            IndicatorError: Not a DataFrame or missing columns
            InsufficientHistory: Not enough bars
        """
        if not isinstance(data, pd.DataFrame):
            raise IndicatorError(f"Data must be pandas DataFrame, got {type(data)}", self.name)

        missing_columns = set(self.required_columns) - set(data.columns)
        if missing_columns:
            raise IndicatorError(f"Missing columns: {sorted(missing_columns)}", self.name)

        required = self.get_required_periods()
        if len(data) < required:
            raise InsufficientHistory(self.name, required, len(data))

    def _validate_params(self) -> None:
        try:
            self.validate_params()
        except InvalidParameterError:
            raise
        except Exception as e:
            raise InvalidParameterError(self.name, 'params', self.params, str(e))

    def __repr__(self) -> str:
        params = ", ".join(f"{k}={v}" for k, v in self.params.items())
        return f"{self.__class__.__name__}({params})"


__all__ = ['BaseIndicator', 'OHLCV_COLUMNS']
