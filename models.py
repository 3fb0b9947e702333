"""
Order and tracking data shared between the poller and the renderer
"""
import threading
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple


class TerminalState(Enum):
    """Whether the tracked order still needs polling"""
    ONGOING = 'ongoing'
    DELIVERED = 'delivered'


@dataclass(frozen=True)
class OrderSummary:
    """One entry of the account's order list"""
    order_id: int
    customer_id: str
    shared_order: bool = False


@dataclass(frozen=True)
class OrderIdentity:
    """The order being tracked in this run"""
    order_id: int
    customer_id: str

    @classmethod
    def from_summary(cls, summary: OrderSummary) -> 'OrderIdentity':
        return cls(order_id=summary.order_id, customer_id=summary.customer_id)


@dataclass(frozen=True)
class TrackingSnapshot:
    """Complete tracking status of an order at one point in time"""
    title: str
    progress_percent: int
    eta_text: str = ''
    eta_unit: str = ''

    # Decoded but not rendered
    status_message: str = ''
    messages: Tuple[str, ...] = field(default_factory=tuple)
    polling_interval: Optional[int] = None

    @property
    def eta(self) -> str:
        return self.eta_text + self.eta_unit

    @property
    def progress_in_range(self) -> bool:
        return 0 <= self.progress_percent <= 100

    @property
    def clamped_progress(self) -> int:
        return min(100, max(0, self.progress_percent))

    def terminal_state(self, delivered_title: str) -> TerminalState:
        """Exact title match against the delivered sentinel"""
        if self.title == delivered_title:
            return TerminalState.DELIVERED
        return TerminalState.ONGOING


class SnapshotStore:
    """
    Holder for the latest tracking snapshot.

    Snapshots are immutable and replaced whole, so readers only ever see
    a complete value that was published.
    """

    def __init__(self, initial: Optional[TrackingSnapshot] = None):
        self._lock = threading.Lock()
        self._snapshot = initial
        self._version = 0 if initial is None else 1

    def publish(self, snapshot: TrackingSnapshot):
        """Replace the current snapshot"""
        if not isinstance(snapshot, TrackingSnapshot):
            raise TypeError(f"Expected TrackingSnapshot, got {type(snapshot).__name__}")
        with self._lock:
            self._snapshot = snapshot
            self._version += 1

    def current(self) -> Optional[TrackingSnapshot]:
        """Latest published snapshot, or None before the first publish"""
        with self._lock:
            return self._snapshot

    @property
    def version(self) -> int:
        """Number of snapshots published so far"""
        with self._lock:
            return self._version
