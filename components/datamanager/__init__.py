#!/usr/bin/env python3
"""
components/datamanager/__init__.py
DualBot - DataManager Package
Author: DualBot Team
Date: 2025-11-02
Version: 1.0.0

Persistence layer with a synchronous SQLAlchemy backend (SQLite).

Architecture:
    DataManager (facade)
    ├── PositionService     - Positions + atomic close
    ├── TradingService      - Trade history, summary, strategy performance
    ├── LogService          - Bot logs and system errors
    └── SettingsService     - Per-user trading settings

Usage:
    from components.datamanager import DataManager

    dm = DataManager({"path": "data/db/dualbot.db"})
    dm.start()

Dependencies:
    - python>=3.10
    - sqlalchemy>=2.0.0
"""

from components.datamanager.manager import DataManager
from components.datamanager.base import Base, DatabaseManager, BaseService
from components.datamanager.services import (
    TradeRecord,
    TradingService,
    PositionRecord,
    PositionService,
    BotLogRecord,
    SystemErrorRecord,
    LogService,
    TradingSettingsRecord,
    SettingsService,
)

__all__ = [
    "DataManager",
    "Base",
    "DatabaseManager",
    "BaseService",
    "TradeRecord",
    "TradingService",
    "PositionRecord",
    "PositionService",
    "BotLogRecord",
    "SystemErrorRecord",
    "LogService",
    "TradingSettingsRecord",
    "SettingsService",
]
