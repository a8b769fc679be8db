#!/usr/bin/env python3
"""
components/strategies/__init__.py
DualBot - Strategy Package

Version: 1.0.0
Date: 2025-11-02
Author: DualBot Team

Strategy evaluators, signal aggregation, risk sizing and PnL.

The position manager is imported from its module directly
(components.strategies.position_manager) since it depends on the datamanager.
"""

from components.strategies.trading_types import (
    TradingMode,
    Direction,
    PositionStatus,
    StrategyName,
    TradingSettings,
    ModeSettings,
    ModeSettingsView,
    StrategyToggles,
    TradingOpportunity,
    TradingError,
    MaxPositionsReached,
    DuplicatePosition,
    OrderSubmissionFailed,
    QuoteUnavailable,
    InvalidSettings,
)
from components.strategies.pnl_calculator import PnLCalculator
from components.strategies.base_strategy import BaseStrategy
from components.strategies.signal_manager import SignalManager
from components.strategies.risk_manager import RiskManager

__all__ = [
    # Types
    'TradingMode',
    'Direction',
    'PositionStatus',
    'StrategyName',
    'TradingSettings',
    'ModeSettings',
    'ModeSettingsView',
    'StrategyToggles',
    'TradingOpportunity',

    # Errors
    'TradingError',
    'MaxPositionsReached',
    'DuplicatePosition',
    'OrderSubmissionFailed',
    'QuoteUnavailable',
    'InvalidSettings',

    # Components
    'PnLCalculator',
    'BaseStrategy',
    'SignalManager',
    'RiskManager',
]

__version__ = '1.0.0'
