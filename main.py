"""
Main application - track the latest order until it is delivered
"""
import argparse
import logging
import os
import sys
import threading
from typing import Callable, List, Optional, TextIO, Tuple

import config
from connectors import get_connector
from credentials import CredentialStore, InteractiveRefresh
from display import ProgressRenderer, hide_cursor, show_cursor, terminal_width
from errors import NoActiveOrderError, TrackerError
from models import SnapshotStore, TerminalState
from service import OrderTrackingService, TrackingPoller
from shutdown import ShutdownCoordinator

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_NO_ACTIVE_ORDER = 1
EXIT_FAILURE = 2


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="swiggy-cli",
        description="Track your latest Swiggy order with a live progress bar.",
    )
    parser.add_argument("--config-dir", default=None, help=f"Directory holding the saved cookie (default: {config.CONFIG_DIR})")
    parser.add_argument("--poll-interval", type=float, default=config.POLL_INTERVAL, help="Seconds between status updates")
    parser.add_argument("--log-level", default=config.LOG_LEVEL, help="Log level for the log file")
    parser.add_argument("--log-file", default=None, help="Log file path (default: LOG_FILE, or <config-dir>/swiggy-cli.log)")
    parser.add_argument("--reset-cookie", action="store_true", help="Forget the saved cookie and ask for a new one")
    return parser.parse_args(argv)


def resolve_paths(args: argparse.Namespace) -> Tuple[str, str]:
    """Cookie and log file locations; --config-dir overrides both configured paths"""
    if args.config_dir:
        cookie_file = os.path.join(args.config_dir, 'cookie')
        log_file = os.path.join(args.config_dir, 'swiggy-cli.log')
    else:
        cookie_file = config.COOKIE_FILE
        log_file = config.LOG_FILE
    return cookie_file, args.log_file or log_file


def setup_logging(log_file: str, level: str):
    """Send logs to a file; stdout belongs to the progress line"""
    logging.basicConfig(
        filename=log_file,
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def build_connector(store: CredentialStore, refresh: InteractiveRefresh):
    return get_connector('swiggy', {
        'credentials': store,
        'refresh': refresh,
        'base_url': config.BASE_URL,
        'user_agent': config.USER_AGENT,
        'timeout': config.REQUEST_TIMEOUT,
        'session_header_name': config.SESSION_HEADER_NAME,
        'session_header_count': config.SESSION_HEADER_COUNT,
        'retry_on_rejection': config.SESSION_REFRESH,
    })


def main(
    argv: Optional[List[str]] = None,
    connector=None,
    out: TextIO = sys.stdout,
    width_fn: Callable[[], int] = terminal_width,
    input_fn: Callable[[], str] = input,
    install_signals: bool = True,
) -> int:
    """Run one tracking session and return the process exit code"""
    args = parse_args(argv)

    cookie_file, log_file = resolve_paths(args)
    for path in (cookie_file, log_file):
        directory = os.path.dirname(path)
        if directory:
            os.makedirs(directory, exist_ok=True)
    setup_logging(log_file, args.log_level)

    def say(*parts):
        print(*parts, file=out)
        out.flush()

    console_lock = threading.RLock()
    store = CredentialStore(cookie_file)
    refresh = InteractiveRefresh(store, console_lock=console_lock, input_fn=input_fn, print_fn=say)
    if connector is None:
        connector = build_connector(store, refresh)

    shutdown = ShutdownCoordinator()
    shutdown.on_cleanup(lambda: show_cursor(out))
    if install_signals:
        shutdown.install_signal_handlers()

    snapshots = SnapshotStore()
    poller = None
    hide_cursor(out)

    try:
        if args.reset_cookie:
            store.clear()

        service = OrderTrackingService(connector, config.DELIVERED_TITLE)
        identity, snapshot = service.resolve_latest_order()
        snapshots.publish(snapshot)
        logger.info("Tracking order %s", identity.order_id)

        poller = TrackingPoller(
            connector, identity, snapshots,
            interval=args.poll_interval,
            on_fatal=shutdown.fail,
        )
        poller.start()

        renderer = ProgressRenderer(
            snapshots, shutdown, config.DELIVERED_TITLE,
            interval=config.RENDER_INTERVAL,
            out=out,
            width_fn=width_fn,
            console_lock=console_lock,
        )
        state = renderer.run()

        if shutdown.error is not None:
            say()
            say(f"✗ {shutdown.error}")
            return EXIT_FAILURE
        if state is TerminalState.DELIVERED:
            logger.info("Order %s delivered", identity.order_id)
        return EXIT_OK

    except NoActiveOrderError as e:
        logger.info("%s", e)
        say(str(e))
        return EXIT_NO_ACTIVE_ORDER
    except TrackerError as e:
        logger.error("Fatal: %s", e, exc_info=True)
        say(f"✗ {e}")
        return EXIT_FAILURE
    except KeyboardInterrupt:
        shutdown.request('interrupt')
        say()
        return EXIT_OK
    finally:
        shutdown.request('exit')
        # Restore the terminal before waiting on an in-flight request
        try:
            shutdown.cleanup()
        finally:
            if poller is not None:
                poller.stop()
                poller.join(timeout=1.0)


def run():
    sys.exit(main())


if __name__ == '__main__':
    run()
