#!/usr/bin/env python3
"""
core/graceful_shutdown.py
DualBot - Safe Shutdown
Author: DualBot Team
Date: 2025-11-02
Version: 1.0.0

Features:
- Signal handling (SIGTERM, SIGINT, SIGBREAK)
- Pre/post shutdown callbacks (e.g. BotManager.stop_all)
- Blocking wait() for the main thread

The signal handler only flags the shutdown; callbacks run on the thread
that called wait(), so bot threads can be joined safely.

Usage:
    from core.graceful_shutdown import GracefulShutdown

    shutdown = GracefulShutdown()
    shutdown.add_pre_shutdown_callback(manager.stop_all)
    shutdown.register_handlers()
    shutdown.wait()

Dependencies:
    - core.logger_engine
"""

import signal
import sys
import threading
from datetime import datetime
from typing import Callable, List, Optional

from core.logger_engine import get_logger

logger = get_logger(__name__)


class GracefulShutdown:
    """Safe shutdown for the bot process"""

    def __init__(self, logger_instance=None):
        self.logger = logger_instance or logger

        self.is_shutting_down = False
        self.shutdown_initiated_at: Optional[datetime] = None
        self.shutdown_reason: Optional[str] = None

        self._requested = threading.Event()
        self._lock = threading.Lock()

        self.pre_shutdown_callbacks: List[Callable] = []
        self.post_shutdown_callbacks: List[Callable] = []

    def register_handlers(self):
        """Catch SIGTERM, SIGINT (Ctrl+C) and SIGBREAK (Windows)"""
        signal.signal(signal.SIGTERM, self._signal_handler)
        signal.signal(signal.SIGINT, self._signal_handler)

        if sys.platform == "win32":
            signal.signal(signal.SIGBREAK, self._signal_handler)

        self.logger.debug("Signal handlers registered")

    def _signal_handler(self, signum: int, frame):
        signal_name = signal.Signals(signum).name
        self.logger.warning(f"🛑 {signal_name} caught, safe shutdown is starting...")
        self.request(reason=f"{signal_name} received")

    def add_pre_shutdown_callback(self, callback: Callable):
        self.pre_shutdown_callbacks.append(callback)

    def add_post_shutdown_callback(self, callback: Callable):
        self.post_shutdown_callbacks.append(callback)

    def request(self, reason: str = "Unknown"):
        """Flag shutdown (safe to call from a signal handler)"""
        if self.shutdown_reason is None:
            self.shutdown_reason = reason
        self._requested.set()

    def wait(self, timeout: Optional[float] = None) -> bool:
        """
        Block until shutdown is requested, then run the shutdown sequence

        Returns:
            bool: True if the sequence ran
        """
        # Short waits keep the main thread responsive to signals on every platform
        waited = 0.0
        while not self._requested.wait(0.5):
            waited += 0.5
            if timeout is not None and waited >= timeout:
                return False
        self.initiate(self.shutdown_reason or "Unknown")
        return True

    def initiate(self, reason: str = "Unknown"):
        """Run the shutdown sequence once"""
        with self._lock:
            if self.is_shutting_down:
                self.logger.warning("Shutdown is already in progress")
                return
            self.is_shutting_down = True

        self.shutdown_initiated_at = datetime.now()
        self.shutdown_reason = reason
        self._requested.set()

        self.logger.info(f"🛑 Safe shutdown started. Reason: {reason}")

        for callback in self.pre_shutdown_callbacks + self.post_shutdown_callbacks:
            try:
                callback()
            except Exception as e:  # noqa: BLE001
                self.logger.error(f"❌ Shutdown callback error ({callback.__name__}): {e}")

        self.logger.info("✅ Shutdown completed")
