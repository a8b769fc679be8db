#!/usr/bin/env python3
"""
core/logger_engine.py
DualBot - Central Logging System
Author: DualBot Team
Date: 2025-11-02
Version: 1.0.0

Features:
- Hybrid format (Console: rich/readable, File: JSON)
- Custom log levels (SCAN, SIGNAL, TRADE, ORDER, MONITOR)
- Thread-safe logging (both bot threads share the same handlers)
- Correlation ID tracking (one id per tick)
- Log rotation (50MB)
- Config integration (main.yaml -> logging section)

Usage:
    from core.logger_engine import get_logger

    logger = get_logger("modules.trading.bot_controller")

    logger.info("Bot started")
    logger.scan("Scanning 10 symbols", mode="spot")
    logger.signal("Trend following LONG", symbol="BTCUSDT", confidence=82)
    logger.trade("Position opened", symbol="ETHUSDT", quantity="0.05")

    with get_logger_engine().correlation_context() as tick_id:
        logger.monitor("Refreshing open positions")

Dependencies:
    - rich
"""

import io
import json
import logging
import sys
import threading
import uuid
from contextlib import contextmanager
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Dict, Optional

from rich.console import Console
from rich.logging import RichHandler
from rich.theme import Theme

if __name__ == "__main__" and __package__ is None:  # pragma: no cover
    project_root = Path(__file__).resolve().parent.parent
    if str(project_root) not in sys.path:
        sys.path.insert(0, str(project_root))


# Custom log levels
VERBOSE_LEVEL = 15   # DEBUG < VERBOSE < INFO
SCAN_LEVEL = 21      # Symbol scan outcomes
SIGNAL_LEVEL = 25    # Selected trading signals
TRADE_LEVEL = 26     # Position open/close
ORDER_LEVEL = 27     # Order submission
MONITOR_LEVEL = 28   # Open position monitoring

logging.addLevelName(VERBOSE_LEVEL, "VERBOSE")
logging.addLevelName(SCAN_LEVEL, "SCAN")
logging.addLevelName(SIGNAL_LEVEL, "SIGNAL")
logging.addLevelName(TRADE_LEVEL, "TRADE")
logging.addLevelName(ORDER_LEVEL, "ORDER")
logging.addLevelName(MONITOR_LEVEL, "MONITOR")

# Bot log tag -> python level
TAG_LEVELS: Dict[str, int] = {
    "VERBOSE": VERBOSE_LEVEL,
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "SCAN": SCAN_LEVEL,
    "SIGNAL": SIGNAL_LEVEL,
    "TRADE": TRADE_LEVEL,
    "ORDER": ORDER_LEVEL,
    "MONITOR": MONITOR_LEVEL,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}

TRADING_LEVELS = [SCAN_LEVEL, SIGNAL_LEVEL, TRADE_LEVEL, ORDER_LEVEL, MONITOR_LEVEL]


class JSONFormatter(logging.Formatter):
    """
    JSON log formatter

    Used for file logs - machine-readable format
    """

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "module": record.name,
            "thread": record.threadName,
            "message": record.getMessage(),
            "file": record.filename,
            "line": record.lineno,
            "function": record.funcName
        }

        if hasattr(record, 'correlation_id'):
            log_data['correlation_id'] = record.correlation_id

        if hasattr(record, 'extra_data'):
            log_data['data'] = record.extra_data

        if record.exc_info:
            log_data['exception'] = self.formatException(record.exc_info)

        return json.dumps(log_data, ensure_ascii=False, default=str)


class CorrelationFilter(logging.Filter):
    """
    Correlation ID filter

    Thread-local, so the spot and leverage threads each carry their own tick id.
    """

    _thread_local = threading.local()

    @classmethod
    def set_correlation_id(cls, correlation_id: str):
        cls._thread_local.correlation_id = correlation_id

    @classmethod
    def get_correlation_id(cls) -> Optional[str]:
        return getattr(cls._thread_local, 'correlation_id', None)

    @classmethod
    def clear_correlation_id(cls):
        if hasattr(cls._thread_local, 'correlation_id'):
            delattr(cls._thread_local, 'correlation_id')

    def filter(self, record: logging.LogRecord) -> bool:
        correlation_id = self.get_correlation_id()
        if correlation_id:
            record.correlation_id = correlation_id
        return True


class CustomLogger(logging.Logger):
    """
    Logger extended with the trading levels

    - verbose(): detail logs, only visible with --verbose
    - scan(): per-symbol scan outcome
    - signal(): selected opportunity
    - trade(): position opened/closed
    - order(): order submission
    - monitor(): open position refresh
    """

    def _log_with_data(self, level: int, message: str, kwargs: Dict[str, Any]):
        if self.isEnabledFor(level):
            if kwargs:
                self._log(level, message, (), extra={'extra_data': kwargs})
            else:
                self._log(level, message, ())

    def verbose(self, message: str, **kwargs):
        self._log_with_data(VERBOSE_LEVEL, message, kwargs)

    def scan(self, message: str, **kwargs):
        self._log_with_data(SCAN_LEVEL, message, kwargs)

    def signal(self, message: str, **kwargs):
        self._log_with_data(SIGNAL_LEVEL, message, kwargs)

    def trade(self, message: str, **kwargs):
        self._log_with_data(TRADE_LEVEL, message, kwargs)

    def order(self, message: str, **kwargs):
        self._log_with_data(ORDER_LEVEL, message, kwargs)

    def monitor(self, message: str, **kwargs):
        self._log_with_data(MONITOR_LEVEL, message, kwargs)

    def tagged(self, tag: str, message: str, **kwargs):
        """Log with a free-form bot log tag (SCAN, SIGNAL, ...)"""
        self._log_with_data(TAG_LEVELS.get(tag.upper(), logging.INFO), message, kwargs)


logging.setLoggerClass(CustomLogger)


class LoggerEngine:
    """
    Central logging system

    - Singleton (the whole process shares one instance)
    - Thread-safe
    - Config-driven
    """

    _instance = None
    _lock = threading.Lock()
    _initialized = False

    def __new__(cls, *args, **kwargs):
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        """
        Args:
            config: Config dict (main.yaml logging section)
        """
        if self._initialized:
            return

        self.config = config or {}
        self.log_dir = Path(self.config.get('log_dir', 'data/logs'))

        log_level = self.config.get('level', 'INFO').upper()
        self.log_level = TAG_LEVELS.get(log_level, logging.INFO)

        if sys.platform == 'win32':
            sys.stdout = io.TextIOWrapper(sys.stdout.buffer, encoding='utf-8', errors='replace')

        self.console = Console(
            force_interactive=False,
            theme=Theme({
                "logging.level.scan": "cyan",
                "logging.level.signal": "bold cyan",
                "logging.level.trade": "bold green",
                "logging.level.order": "bold yellow",
                "logging.level.monitor": "bold magenta"
            })
        )

        self.root_logger = logging.getLogger()
        self.root_logger.setLevel(logging.DEBUG)

        self.correlation_filter = CorrelationFilter()

        self._setup_handlers()
        self._initialized = True

    def configure(self, config: Dict[str, Any]):
        """Replace the handlers using a new logging config"""
        with self._lock:
            for handler in list(self.root_logger.handlers):
                if isinstance(handler, (RichHandler, RotatingFileHandler)):
                    self.root_logger.removeHandler(handler)
                    handler.close()

            self.config = config or {}
            self.log_dir = Path(self.config.get('log_dir', 'data/logs'))
            self.log_level = TAG_LEVELS.get(self.config.get('level', 'INFO').upper(), logging.INFO)
            self._setup_handlers()

    def _setup_handlers(self):
        """Console and file handlers"""
        console_handler = RichHandler(
            console=self.console,
            rich_tracebacks=True,
            show_time=self.config.get('console', {}).get('show_time', True),
            show_level=True,
            show_path=False,
            markup=False
        )
        console_handler.setLevel(self.log_level)
        console_handler.addFilter(self.correlation_filter)
        self.root_logger.addHandler(console_handler)

        # File handlers (JSON) only when enabled in config
        if self.config.get('file', False):
            self.log_dir.mkdir(parents=True, exist_ok=True)
            rotation_config = self.config.get('rotation', {})
            max_bytes = rotation_config.get('max_bytes', 52428800)  # 50MB
            backup_count = rotation_config.get('backup_count', 5)

            self._add_file_handler("main.log", logging.DEBUG, max_bytes, backup_count)
            self._add_file_handler(
                "trading.log", SCAN_LEVEL, max_bytes, backup_count,
                filter_levels=TRADING_LEVELS
            )
            self._add_file_handler("errors.log", logging.ERROR, max_bytes, backup_count)

    def _add_file_handler(
        self, filename: str, level: int, max_bytes: int, backup_count: int,
        filter_levels: Optional[list] = None
    ):
        handler = RotatingFileHandler(
            self.log_dir / filename, maxBytes=max_bytes, backupCount=backup_count, encoding='utf-8'
        )
        handler.setLevel(level)
        handler.setFormatter(JSONFormatter())
        handler.addFilter(self.correlation_filter)

        if filter_levels:
            handler.addFilter(lambda record: record.levelno in filter_levels)

        self.root_logger.addHandler(handler)

    def get_logger(self, name: str) -> CustomLogger:
        return logging.getLogger(name)

    @contextmanager
    def correlation_context(self, correlation_id: Optional[str] = None):
        """Correlation ID context manager"""
        if correlation_id is None:
            correlation_id = uuid.uuid4().hex[:12]

        CorrelationFilter.set_correlation_id(correlation_id)
        try:
            yield correlation_id
        finally:
            CorrelationFilter.clear_correlation_id()

    def set_log_level(self, level: str):
        """Change the console log level"""
        log_level = TAG_LEVELS.get(level.upper(), logging.INFO)
        self.log_level = log_level

        for handler in self.root_logger.handlers:
            if isinstance(handler, RichHandler):
                handler.setLevel(log_level)

        self.get_logger("LoggerEngine").info(f"Log level changed: {level}")

    def set_verbose_mode(self, enabled: bool = True):
        self.set_log_level("VERBOSE" if enabled else "INFO")


# ============================================================================
# SINGLETON & HELPER FUNCTIONS
# ============================================================================


_logger_engine_instance: Optional[LoggerEngine] = None
_logger_lock = threading.Lock()


def get_logger_engine(config: Optional[Dict[str, Any]] = None) -> LoggerEngine:
    """
    Return the LoggerEngine singleton.

    A config passed after creation re-applies the handlers.
    """
    global _logger_engine_instance
    if _logger_engine_instance is None:
        with _logger_lock:
            if _logger_engine_instance is None:
                _logger_engine_instance = LoggerEngine(config)
                return _logger_engine_instance
    if config is not None:
        _logger_engine_instance.configure(config)
    return _logger_engine_instance


def get_logger(module_name: str) -> CustomLogger:
    return get_logger_engine().get_logger(module_name)


def set_verbose_mode(enabled: bool = True):
    get_logger_engine().set_verbose_mode(enabled)


def correlation_context(correlation_id: Optional[str] = None):
    """Tag every log line of the current thread (one tick) with an id"""
    return get_logger_engine().correlation_context(correlation_id)


if __name__ == "__main__":
    print("=" * 60)
    print("🧪 LoggerEngine Test")
    print("=" * 60)

    engine = get_logger_engine({"level": "VERBOSE"})
    logger = engine.get_logger("TestModule")

    logger.info("✅ Bot started")
    logger.warning("⚠️  Quote unavailable")
    logger.scan("📊 Scanning", symbols=3)
    logger.signal("📈 LONG signal", symbol="BTCUSDT", confidence=82)
    logger.trade("💰 Position opened", symbol="ETHUSDT")

    with engine.correlation_context() as tick_id:
        logger.monitor(f"Tick: {tick_id}")

    print("\n✅ Test completed!")
    print("=" * 60)
