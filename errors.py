"""
Error types raised while tracking an order
"""


class TrackerError(Exception):
    """Base class for all tracker failures"""


class CredentialMissingError(TrackerError):
    """No usable session cookie is available"""


class PersistenceError(TrackerError):
    """The session cookie could not be written to disk"""


class SessionRejectedError(TrackerError):
    """Upstream did not accept the session cookie"""


class SessionInvalidError(TrackerError):
    """Upstream rejected the session again after a refresh"""


class NetworkError(TrackerError):
    """Request could not be completed"""


class PayloadMalformedError(TrackerError):
    """Response body does not match the expected shape"""


class NoActiveOrderError(TrackerError):
    """Latest order is already delivered, or there is no order at all"""
