"""
Live progress line for the tracked order

    ⣷ [Preparing your order][====================>...............][10mins]
"""
import logging
import shutil
import sys
import threading
from typing import Callable, Optional, Sequence, TextIO

from models import SnapshotStore, TerminalState, TrackingSnapshot

logger = logging.getLogger(__name__)

HIDE_CURSOR = "\x1b[?25l"
SHOW_CURSOR = "\x1b[?25h"

SPINNER_FRAMES = ("⣷", "⣯", "⣟", "⡿", "⢿", "⣻", "⣽", "⣾")

# Spinner glyph, the space after it and three pairs of brackets
RESERVED_COLUMNS = 8


def terminal_width() -> int:
    return shutil.get_terminal_size((80, 24)).columns


def hide_cursor(out: TextIO = sys.stdout):
    out.write(HIDE_CURSOR)
    out.flush()


def show_cursor(out: TextIO = sys.stdout):
    out.write(SHOW_CURSOR)
    out.flush()


class Spinner:
    """Cycles spinner frames, wrapping two frames before the end"""

    def __init__(self, frames: Sequence[str] = SPINNER_FRAMES):
        self.frames = frames
        self.index = 0

    def next(self) -> str:
        glyph = self.frames[self.index]
        self.index += 1
        if self.index == len(self.frames) - 2:
            self.index = 0
        return glyph


def bar_width(width: int, title: str, eta: str) -> int:
    """Columns left for the bar, never negative"""
    return max(0, width - len(title) - len(eta) - RESERVED_COLUMNS)


def filled_columns(columns: int, percent: int) -> int:
    percent = min(100, max(0, percent))
    return columns * percent // 100


def render_bar(columns: int, filled: int) -> str:
    chars = []
    for x in range(columns):
        if x < filled:
            chars.append('=')
        elif x == filled:
            chars.append('>')
        else:
            chars.append('.')
    return ''.join(chars)


def format_status_line(snapshot: TrackingSnapshot, width: int, glyph: str) -> str:
    """One frame of the progress line, ending in a carriage return"""
    eta = snapshot.eta
    columns = bar_width(width, snapshot.title, eta)
    bar = render_bar(columns, filled_columns(columns, snapshot.progress_percent))
    return f"{glyph} [{snapshot.title}][{bar}][{eta}]\r"


class ProgressRenderer:
    """Redraws the progress line until the order is delivered or shutdown is requested"""

    def __init__(
        self,
        snapshots: SnapshotStore,
        shutdown,
        delivered_title: str,
        interval: float = 0.3,
        out: TextIO = sys.stdout,
        width_fn: Callable[[], int] = terminal_width,
        console_lock: Optional[threading.RLock] = None,
        spinner: Optional[Spinner] = None,
    ):
        self.snapshots = snapshots
        self.shutdown = shutdown
        self.delivered_title = delivered_title
        self.interval = interval
        self.out = out
        self.width_fn = width_fn
        self.console_lock = console_lock or threading.RLock()
        self.spinner = spinner or Spinner()
        self.frames = 0
        self._warned_progress = None

    def render_once(self) -> TerminalState:
        """Draw one frame from the latest snapshot"""
        snapshot = self.snapshots.current()
        if snapshot is None:
            return TerminalState.ONGOING

        if snapshot.terminal_state(self.delivered_title) is TerminalState.DELIVERED:
            with self.console_lock:
                self.out.write("\n✓ Order delivered. Enjoy your meal!\n")
                self.out.flush()
            return TerminalState.DELIVERED

        if not snapshot.progress_in_range and snapshot.progress_percent != self._warned_progress:
            self._warned_progress = snapshot.progress_percent
            logger.warning("Progress %d%% is outside 0-100, clamping", snapshot.progress_percent)

        line = format_status_line(snapshot, self.width_fn(), self.spinner.next())
        with self.console_lock:
            self.out.write(line)
            self.out.flush()
        self.frames += 1
        return TerminalState.ONGOING

    def run(self) -> TerminalState:
        """Render loop. Returns DELIVERED, or ONGOING when stopped early."""
        while not self.shutdown.is_set():
            if self.render_once() is TerminalState.DELIVERED:
                self.shutdown.request('delivered')
                return TerminalState.DELIVERED
            self.shutdown.wait(self.interval)
        return TerminalState.ONGOING
