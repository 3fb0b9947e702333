"""
Order tracking service - resolve the latest order, then keep its status fresh
"""
import logging
import threading
from typing import Optional, Tuple

from connectors.base import TrackingConnector
from errors import (
    CredentialMissingError,
    NetworkError,
    NoActiveOrderError,
    PayloadMalformedError,
    SessionInvalidError,
    SessionRejectedError,
)
from models import OrderIdentity, SnapshotStore, TerminalState, TrackingSnapshot

logger = logging.getLogger(__name__)


class OrderTrackingService:
    """Start-up step: find the order worth tracking"""

    def __init__(self, connector: TrackingConnector, delivered_title: str):
        self.connector = connector
        self.delivered_title = delivered_title

    def resolve_latest_order(self) -> Tuple[OrderIdentity, TrackingSnapshot]:
        """
        Pick the latest order and fetch its status once.

        The order list is taken to be most recent first, so index 0 is the
        latest order. Raises NoActiveOrderError when there is no order or the
        latest one is already delivered.
        """
        orders = self.connector.fetch_orders()
        if not orders:
            raise NoActiveOrderError("Cannot find any orders on this account")

        latest = orders[0]
        identity = OrderIdentity.from_summary(latest)
        logger.info(
            "Latest order %s (customer %s, shared=%s)",
            identity.order_id, identity.customer_id, latest.shared_order
        )

        snapshot = self.connector.track_order(identity.order_id, identity.customer_id)
        if snapshot.terminal_state(self.delivered_title) is TerminalState.DELIVERED:
            raise NoActiveOrderError("Cannot find any active orders to track")

        return identity, snapshot


class TrackingPoller:
    """
    Background thread that fetches the order status every interval and
    publishes it to the snapshot store.

    Network and payload failures skip a cycle; the previous snapshot stays
    visible. A session that stays invalid after a refresh (or is rejected with
    refreshing turned off), or a cookie prompt left empty, is fatal and is
    handed to on_fatal.
    """

    def __init__(
        self,
        connector: TrackingConnector,
        identity: OrderIdentity,
        snapshots: SnapshotStore,
        interval: float = 2.0,
        on_fatal=None,
    ):
        self.connector = connector
        self.identity = identity
        self.snapshots = snapshots
        self.interval = interval
        self.on_fatal = on_fatal
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self.cycles = 0
        self.failures = 0

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self):
        self._thread = threading.Thread(
            target=self._background_loop,
            daemon=True,
            name="tracking-poller",
        )
        self._thread.start()

    def stop(self):
        self._stop_event.set()

    def join(self, timeout: Optional[float] = None):
        if self._thread is not None:
            self._thread.join(timeout)

    def poll_once(self) -> bool:
        """Fetch and publish one snapshot. Returns False when the cycle was skipped."""
        self.cycles += 1
        try:
            snapshot = self.connector.track_order(self.identity.order_id, self.identity.customer_id)
        except (NetworkError, PayloadMalformedError) as e:
            self.failures += 1
            logger.warning("Tracking update failed, keeping previous status: %s", e)
            return False

        self.snapshots.publish(snapshot)
        return True

    def _background_loop(self):
        while not self._stop_event.is_set():
            try:
                self.poll_once()
            except (SessionInvalidError, SessionRejectedError, CredentialMissingError) as e:
                logger.error("Stopping tracking: %s", e)
                if self.on_fatal:
                    self.on_fatal(e)
                return
            except Exception:
                self.failures += 1
                logger.exception("Unexpected error while polling order %s", self.identity.order_id)
            self._stop_event.wait(self.interval)
