#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
modules/trading/__init__.py

DualBot - Trading Module Package
Date: 2025-11-02

Spot and leverage bots and the operations exposed on them.

Components:
    - BotManager: Owns both bots, exposed operations
    - BotController: One bot, thread loop and tick
    - TradeLogger: Bot logs and system errors (store + bus + logger)

Modes:
    - PAPER: Real data, virtual money, simulated fills
    - LIVE: Real data, real money, market orders

Usage:
    from modules.trading import BotManager

    manager = BotManager(data_manager, market_data, gateways, event_bus, engine_config)
    manager.start("spot")
"""

from modules.trading.trade_logger import TradeLogger
from modules.trading.bot_controller import BotController
from modules.trading.bot_manager import BotManager

__all__ = [
    "BotManager",
    "BotController",
    "TradeLogger",
]
