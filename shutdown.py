"""
Shutdown coordination shared by the render loop, the poller and signal handlers
"""
import logging
import signal
import threading
from typing import Callable, List, Optional

logger = logging.getLogger(__name__)


class ShutdownCoordinator:
    """One stop flag for the whole process, plus cleanup that runs exactly once"""

    def __init__(self):
        self._event = threading.Event()
        self._lock = threading.Lock()
        self._callbacks: List[Callable[[], None]] = []
        self._cleaned_up = False
        self.reason: Optional[str] = None
        self.error: Optional[BaseException] = None

    def request(self, reason: str):
        """Ask everything to stop. The first reason wins."""
        with self._lock:
            if self.reason is None:
                self.reason = reason
                logger.info("Shutdown requested: %s", reason)
        self._event.set()

    def fail(self, error: BaseException):
        """Stop because of a fatal error raised outside the main thread"""
        with self._lock:
            if self.error is None:
                self.error = error
        self.request('error')

    def is_set(self) -> bool:
        return self._event.is_set()

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Sleep until shutdown is requested or the timeout passes"""
        return self._event.wait(timeout)

    def on_cleanup(self, callback: Callable[[], None]):
        self._callbacks.append(callback)

    def cleanup(self):
        """Run registered callbacks in reverse order, only the first time"""
        with self._lock:
            if self._cleaned_up:
                return
            self._cleaned_up = True
            callbacks = list(reversed(self._callbacks))

        for callback in callbacks:
            try:
                callback()
            except Exception:
                logger.exception("Cleanup callback %r failed", callback)

    def install_signal_handlers(self, signals=(signal.SIGINT, signal.SIGTERM)):
        """Route interrupt signals into a shutdown request. Main thread only."""
        for signum in signals:
            signal.signal(signum, self._handle_signal)

    def _handle_signal(self, signum, frame):
        # Repeat signals must not break out of the shutdown path itself
        if self.is_set():
            logger.info("Signal %s ignored, already shutting down", signum)
            return
        self.request('interrupt')
        # Break out of blocking reads such as the cookie prompt
        raise KeyboardInterrupt
