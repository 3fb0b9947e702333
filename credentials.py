"""
Session cookie storage and the interactive prompt used to replace it
"""
import logging
import os
import threading
from typing import Callable, Optional

from errors import CredentialMissingError, PersistenceError

logger = logging.getLogger(__name__)

FIRST_TIME_MESSAGE = "Go to the browser and fetch the swiggy cookies here: "
EXPIRED_MESSAGE = "The given cookie has expired. Paste a new one here: "


class CredentialStore:
    """Reads and writes the cookie file. The cookie itself is opaque."""

    def __init__(self, path: str):
        self.path = path

    def load(self) -> str:
        """Load the saved cookie, stripped of surrounding whitespace"""
        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                token = f.read().strip()
        except FileNotFoundError:
            raise CredentialMissingError(f"No saved cookie at {self.path}")
        except OSError as e:
            raise CredentialMissingError(f"Cannot read saved cookie from {self.path}: {e}")

        if not token:
            raise CredentialMissingError(f"Saved cookie at {self.path} is empty")
        return token

    def save(self, token: str):
        """Write the cookie, replacing any previous one"""
        try:
            directory = os.path.dirname(self.path)
            if directory:
                os.makedirs(directory, exist_ok=True)
            with open(self.path, 'w', encoding='utf-8') as f:
                f.write(token)
        except OSError as e:
            raise PersistenceError(f"Can't save cookie to the path: {self.path} ({e})")
        logger.info("Saved session cookie to %s", self.path)

    def clear(self):
        """Forget the saved cookie"""
        try:
            os.remove(self.path)
        except FileNotFoundError:
            pass
        except OSError as e:
            raise PersistenceError(f"Can't remove cookie at {self.path} ({e})")


class InteractiveRefresh:
    """
    Blocking console prompt for a new cookie.

    Holds the console lock for the whole prompt so the progress line is
    not redrawn over the instructions while the operator is typing.
    """

    def __init__(
        self,
        store: CredentialStore,
        console_lock: Optional[threading.RLock] = None,
        input_fn: Callable[[], str] = input,
        print_fn: Callable[..., None] = print,
    ):
        self.store = store
        self.console_lock = console_lock or threading.RLock()
        self.input_fn = input_fn
        self.print_fn = print_fn
        self.prompts = 0

    def __call__(self, first_time: bool) -> str:
        with self.console_lock:
            self.prompts += 1
            logger.info("Prompting for a %s session cookie", "new" if first_time else "replacement")

            # Start on a fresh line in case a progress frame is showing
            self.print_fn()
            self.print_fn(FIRST_TIME_MESSAGE if first_time else EXPIRED_MESSAGE)

            try:
                line = self.input_fn()
            except EOFError:
                raise CredentialMissingError("No cookie entered (end of input)")

            token = line.rstrip('\r\n')
            if not token.strip():
                raise CredentialMissingError("No cookie entered")

            try:
                self.store.save(token)
            except PersistenceError as e:
                logger.warning("%s", e)
                self.print_fn(f"⚠ {e}")
                self.print_fn("  Continuing with the cookie for this run only")

            return token
