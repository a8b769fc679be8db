#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
modules/trading/modes/__init__.py

DualBot - Execution Modes Package
Date: 2025-11-02

MODES:
    PAPER  - Real data, virtual money, simulated fill
    LIVE   - Real data, real money, market order

Usage:
    from modules.trading.modes import select_mode, PaperMode

    # With factory
    mode = select_mode(paper=False, gateway=gateway, trading_mode=TradingMode.LEVERAGE)

    # Using direct import
    mode = PaperMode(TradingMode.SPOT)
"""

from modules.trading.modes.base_mode import (
    ExecutionMode,
    select_mode,
    open_side,
    close_side,
    order_category,
)
from modules.trading.modes.paper_mode import PaperMode, PAPER_PREFIX
from modules.trading.modes.live_mode import LiveMode

__all__ = [
    'ExecutionMode',
    'PaperMode',
    'LiveMode',
    'select_mode',
    'open_side',
    'close_side',
    'order_category',
    'PAPER_PREFIX',
]
