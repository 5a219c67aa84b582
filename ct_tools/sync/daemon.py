"""
Periodic sync loop for ``--daemon`` mode.

Cycles run strictly one after another on the calling thread; the wait for
the next cycle only starts once the current one has finished.
"""

import signal
import threading
from datetime import datetime
from typing import Callable, Optional
import logging

DEFAULT_INTERVAL = 300  # seconds


class SyncDaemon:
    """Runs ``cycle`` every ``interval`` seconds until SIGINT or SIGTERM."""

    def __init__(self, cycle: Callable[[], bool], interval: int = DEFAULT_INTERVAL,
                 logger: Optional[logging.Logger] = None,
                 clock: Callable[[], datetime] = datetime.now):
        self.cycle = cycle
        self.interval = max(1, int(interval))
        self.logger = logger or logging.getLogger(__name__)
        self.clock = clock
        self.stop_event = threading.Event()
        self.running = False
        self.cycles_run = 0
        self._previous_handlers = {}

    def stop(self) -> None:
        self.stop_event.set()

    def _handle_signal(self, signum, frame):
        name = signal.Signals(signum).name
        self.logger.info("Received %s - shutting down after the current cycle...", name)
        print(f"\n👋 Received {name}, shutting down...")
        self.stop()

    def _install_signal_handlers(self) -> None:
        if threading.current_thread() is not threading.main_thread():
            return
        for signum in (signal.SIGINT, signal.SIGTERM):
            self._previous_handlers[signum] = signal.signal(signum, self._handle_signal)

    def _restore_signal_handlers(self) -> None:
        for signum, handler in self._previous_handlers.items():
            signal.signal(signum, handler)
        self._previous_handlers.clear()

    def run_once(self) -> Optional[bool]:
        """Run one cycle; returns None when a cycle is already in progress."""
        if self.running:
            self.logger.warning("Sync cycle already running; skipping this trigger")
            return None

        self.running = True
        stamp = self.clock().strftime("%Y-%m-%d %H:%M:%S")
        print(f"\n{'=' * 50}")
        print(f"🔄 Sync cycle started at {stamp}")
        print(f"{'=' * 50}")
        try:
            ok = bool(self.cycle())
        except Exception as e:
            self.logger.error("Sync cycle failed: %s", e, exc_info=self.logger.isEnabledFor(logging.DEBUG))
            print(f"⚠️  Sync cycle failed: {e}")
            ok = False
        finally:
            self.running = False
            self.cycles_run += 1

        if not ok:
            self.logger.warning("Sync cycle finished with errors")
        return ok

    def run(self) -> int:
        """Loop until stopped; returns 0 on graceful shutdown."""
        print(f"🔁 Daemon mode: syncing every {self.interval} seconds (Ctrl-C to stop)")
        self._install_signal_handlers()
        try:
            while not self.stop_event.is_set():
                self.run_once()
                if self.stop_event.wait(self.interval):
                    break
        finally:
            self._restore_signal_handlers()

        print("✅ Daemon stopped")
        return 0
