#!/usr/bin/env python3
"""
modules/trading/bot_manager.py
DualBot - Bot Manager
Author: DualBot Team
Date: 2025-11-02
Version: 1.0.0

Owns the spot and leverage bots and exposes their operations.

Features:
- Per-mode wiring: TradeLogger, PositionManager, BotController
- Lifecycle: start / stop / stop_all / statuses
- Read side: logs, positions, trades, errors, stats, summary,
  strategy performance
- Manual position close routed to the owning bot's PositionManager
- Live log channel (EventBus subscription)

The two bots share the DataManager and the EventBus only; settings,
execution and positions never cross modes.

Usage:
    from modules.trading.bot_manager import BotManager

    manager = BotManager(
        data_manager=dm,
        market_data={TradingMode.SPOT: spot_feed, TradingMode.LEVERAGE: linear_feed},
        gateways={TradingMode.SPOT: spot_feed, TradingMode.LEVERAGE: linear_feed},
        event_bus=bus,
        engine_config=config.get_engine_config(),
    )
    manager.start("spot")
    channel = manager.subscribe("log.*")
    manager.stop_all()
"""

from __future__ import annotations

import sys
from collections import deque
from pathlib import Path
from typing import Any, Dict, List, Optional

# Add project root to path for direct execution
if __name__ == "__main__":
    project_root = Path(__file__).parent.parent.parent
    sys.path.insert(0, str(project_root))

from components.strategies.position_manager import MANUAL, PositionManager
from components.strategies.trading_types import PositionStatus, TradingMode
from core.logger_engine import get_logger
from modules.trading.bot_controller import BotController
from modules.trading.modes import select_mode
from modules.trading.trade_logger import TradeLogger

logger = get_logger("modules.trading.bot_manager")


def _mode_or_none(mode) -> Optional[TradingMode]:
    return TradingMode(mode) if mode else None


class BotManager:
    """
    Bot Manager

    Attributes:
        controllers: TradingMode -> BotController
        position_managers: TradingMode -> PositionManager
        recent_logs: Ring buffer with the latest bot logs of both modes
    """

    def __init__(
        self,
        data_manager,
        market_data: Dict[TradingMode, Any],
        gateways: Optional[Dict[TradingMode, Any]] = None,
        event_bus=None,
        engine_config: Optional[Dict[str, Any]] = None,
        ai_sources: Optional[Dict[TradingMode, Any]] = None,
        modes: Optional[List[TradingMode]] = None,
    ):
        self.data_manager = data_manager
        self.event_bus = event_bus
        self.config = engine_config or {}
        self.user_id = self.config.get("user_id", "default")

        gateways = gateways or {}
        ai_sources = ai_sources or {}
        symbols = self.config.get("symbols", {})

        self.recent_logs = deque(maxlen=int(self.config.get("log_mirror_size", 100)))
        self.trade_loggers: Dict[TradingMode, TradeLogger] = {}
        self.position_managers: Dict[TradingMode, PositionManager] = {}
        self.controllers: Dict[TradingMode, BotController] = {}

        # Seed default settings so the first tick has something to read
        self.data_manager.settings.ensure_settings(self.user_id)

        for mode in [TradingMode(m) for m in (modes or list(TradingMode))]:
            feed = market_data[mode]
            trade_logger = TradeLogger(
                mode, data_manager, event_bus, user_id=self.user_id, mirror=self.recent_logs
            )
            position_manager = PositionManager(
                mode,
                data_manager,
                self._execution_provider(mode, gateways.get(mode)),
                trade_logger,
                market_data=feed,
                user_id=self.user_id,
            )
            self.trade_loggers[mode] = trade_logger
            self.position_managers[mode] = position_manager
            self.controllers[mode] = BotController(
                mode=mode,
                settings_provider=data_manager.settings.get_settings,
                market_data=feed,
                data_manager=data_manager,
                trade_logger=trade_logger,
                position_manager=position_manager,
                symbols=symbols.get(mode.value, []),
                tick_interval=self.config.get("tick_interval", 60),
                history_limit=self.config.get("history_limit", 200),
                user_id=self.user_id,
                ai_source=ai_sources.get(mode),
            )

        logger.info(f"✅ BotManager ready: {', '.join(m.value for m in self.controllers)}")

    @staticmethod
    def _execution_provider(mode: TradingMode, gateway):
        def provider(paper: bool):
            return select_mode(paper, gateway, mode)
        return provider

    def _controller(self, mode) -> BotController:
        mode = TradingMode(mode)
        if mode not in self.controllers:
            raise ValueError(f"Bot not configured: {mode}")
        return self.controllers[mode]

    # ========================================================================
    # LIFECYCLE
    # ========================================================================

    def start(self, mode) -> Dict[str, Any]:
        return self._controller(mode).start()

    def stop(self, mode) -> Dict[str, Any]:
        return self._controller(mode).stop()

    def get_status(self, mode) -> Dict[str, Any]:
        return self._controller(mode).get_status()

    def get_all_statuses(self) -> Dict[str, Dict[str, Any]]:
        return {mode.value: c.get_status() for mode, c in self.controllers.items()}

    def stop_all(self) -> Dict[str, Dict[str, Any]]:
        statuses = {mode.value: c.stop() for mode, c in self.controllers.items()}
        logger.info("🛑 All bots stopped")
        return statuses

    # ========================================================================
    # LOGS & ERRORS
    # ========================================================================

    def list_logs(self, limit: int = 100) -> List[Dict[str, Any]]:
        """Stored bot logs, newest first"""
        return [entry.to_dict() for entry in self.data_manager.logs.get_logs(self.user_id, limit)]

    def get_recent_logs(self, limit: int = 100) -> List[Dict[str, Any]]:
        """In-memory mirror, newest first"""
        return [entry.to_dict() for entry in list(self.recent_logs)[::-1][:limit]]

    def clear_logs(self) -> int:
        deleted = self.data_manager.logs.clear_logs(self.user_id)
        self.recent_logs.clear()
        return deleted

    def list_errors(self, resolved: Optional[bool] = None) -> List[Dict[str, Any]]:
        return [e.to_dict() for e in self.data_manager.logs.get_errors(self.user_id, resolved)]

    def resolve_error(self, error_id: int) -> Optional[Dict[str, Any]]:
        entry = self.data_manager.logs.resolve_error(error_id)
        return entry.to_dict() if entry else None

    def subscribe(self, pattern: str = "log.*", maxsize: Optional[int] = None):
        """Live channel of bus events matching pattern (log.spot, log.*, error.*)"""
        if self.event_bus is None:
            raise RuntimeError("No event bus configured")
        return self.event_bus.subscribe(pattern, maxsize)

    # ========================================================================
    # POSITIONS & TRADES
    # ========================================================================

    def list_positions(self, mode=None, status=None) -> List[Dict[str, Any]]:
        status = PositionStatus(status) if status else None
        positions = self.data_manager.position.get_positions(self.user_id, _mode_or_none(mode), status)
        return [p.to_dict() for p in positions]

    def list_trades(self, mode=None, limit: int = 50) -> List[Dict[str, Any]]:
        trades = self.data_manager.trading.get_trades(self.user_id, _mode_or_none(mode), limit)
        return [t.to_dict() for t in trades]

    def close_position(self, position_id: int) -> Optional[Dict[str, Any]]:
        """
        Manual close at the latest quote

        Returns:
            Dict: Trade, None if the position was not open or the exit failed
        """
        position = self.data_manager.position.get_position(position_id)
        if position is None:
            logger.warning(f"⚠️ Position not found: #{position_id}")
            return None

        manager = self.position_managers.get(TradingMode(position.trading_mode))
        if manager is None:
            raise ValueError(f"Bot not configured: {position.trading_mode}")

        trade = manager.close_position(position_id, MANUAL)
        return trade.to_dict() if trade else None

    # ========================================================================
    # STATS
    # ========================================================================

    def get_trading_stats(self, mode=None) -> Dict[str, Any]:
        return self.data_manager.get_trading_stats(self.user_id, _mode_or_none(mode))

    def get_trading_summary(self, mode=None) -> Dict[str, Any]:
        return self.data_manager.trading.get_trading_summary(self.user_id, _mode_or_none(mode))

    def get_strategy_performance(self, mode=None) -> Dict[str, Dict[str, Any]]:
        return self.data_manager.trading.get_strategy_performance(self.user_id, _mode_or_none(mode))


__all__ = ['BotManager']
