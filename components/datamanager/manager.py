#!/usr/bin/env python3
"""
components/datamanager/manager.py
DualBot - DataManager Facade
Author: DualBot Team
Date: 2025-11-02
Version: 1.0.0

Unified facade for all datamanager services.

Features:
- Single entry point for all persistence operations
- Services created on start()
- Cross-service aggregates (trading stats)

Usage:
    from components.datamanager import DataManager

    dm = DataManager({"path": "data/db/dualbot.db"})
    dm.start()

    positions = dm.position.get_open_positions("default", TradingMode.SPOT)
    stats = dm.get_trading_stats("default")

Dependencies:
    - python>=3.10
    - sqlalchemy>=2.0.0
"""

from __future__ import annotations

import sys
from datetime import datetime, time, timezone
from decimal import Decimal
from pathlib import Path
from typing import Any, Dict, Optional

if __name__ == "__main__":
    project_root = Path(__file__).parent.parent.parent
    sys.path.insert(0, str(project_root))

from components.datamanager.base import DatabaseManager
from components.datamanager.services import (
    LogService,
    PositionService,
    SettingsService,
    TradingService,
)
from components.strategies.trading_types import PositionStatus, TradingMode
from core.logger_engine import get_logger

logger = get_logger("components.datamanager.manager")


class DataManager:
    """
    Unified facade for all datamanager services.

    Attributes:
        position: PositionService - Positions (open/closed lifecycle)
        trading: TradingService - Trade history and performance
        logs: LogService - Bot logs and system errors
        settings: SettingsService - Per-user trading settings
    """

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        """
        Args:
            config: database section (path, echo)
        """
        self.config = config or {}
        self._db = DatabaseManager(self.config)
        self._started = False

        self._position: Optional[PositionService] = None
        self._trading: Optional[TradingService] = None
        self._logs: Optional[LogService] = None
        self._settings: Optional[SettingsService] = None

    # =========================================================================
    # Lifecycle
    # =========================================================================

    def start(self):
        if self._started:
            return

        self._db.start()
        self._init_services()
        self._started = True
        logger.info("✅ DataManager started")

    def stop(self):
        if not self._started:
            return

        self._db.stop()
        self._started = False
        logger.info("🛑 DataManager stopped")

    def _init_services(self):
        self._position = PositionService(self._db)
        self._trading = TradingService(self._db)
        self._logs = LogService(self._db)
        self._settings = SettingsService(self._db)

    # =========================================================================
    # Service Properties
    # =========================================================================

    @property
    def position(self) -> PositionService:
        if not self._position:
            raise RuntimeError("DataManager not started. Call start() first.")
        return self._position

    @property
    def trading(self) -> TradingService:
        if not self._trading:
            raise RuntimeError("DataManager not started. Call start() first.")
        return self._trading

    @property
    def logs(self) -> LogService:
        if not self._logs:
            raise RuntimeError("DataManager not started. Call start() first.")
        return self._logs

    @property
    def settings(self) -> SettingsService:
        if not self._settings:
            raise RuntimeError("DataManager not started. Call start() first.")
        return self._settings

    @property
    def db(self) -> DatabaseManager:
        return self._db

    # =========================================================================
    # Aggregates
    # =========================================================================

    def get_trading_stats(
        self,
        user_id: str,
        trading_mode: Optional[TradingMode] = None,
    ) -> Dict[str, Any]:
        """
        Dashboard numbers

        Returns:
            Dict: open_positions, today_pnl (realized today + open unrealized), win_rate
        """
        open_positions = self.position.get_positions(user_id, trading_mode, PositionStatus.OPEN)
        start_of_day = datetime.combine(datetime.now(timezone.utc).date(), time.min, tzinfo=timezone.utc)

        realized = self.trading.get_realized_pnl_since(start_of_day, user_id, trading_mode)
        unrealized = sum((p.pnl for p in open_positions), Decimal("0"))
        summary = self.trading.get_trading_summary(user_id, trading_mode)

        return {
            "open_positions": len(open_positions),
            "today_pnl": str(realized + unrealized),
            "win_rate": summary["win_rate"],
        }
