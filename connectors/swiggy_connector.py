"""
Swiggy connector - cookie-authenticated calls to the order tracking API
"""
import logging
from http.cookiejar import DefaultCookiePolicy
from typing import Callable, Dict, List, Optional

import requests

from errors import (
    CredentialMissingError,
    NetworkError,
    PayloadMalformedError,
    SessionInvalidError,
    SessionRejectedError,
)
from models import OrderSummary, TrackingSnapshot
from .base import TrackingConnector

logger = logging.getLogger(__name__)


class SwiggyConnector(TrackingConnector):
    """
    Swiggy connector using the web app's private API.

    Config keys:
        credentials: CredentialStore holding the session cookie
        refresh: callable(first_time) -> new cookie, persists it as well
        base_url, user_agent, timeout
        session_header_name, session_header_count: a valid session sets
            exactly this many headers of that name; None skips the check
        retry_on_rejection: refresh and retry once (default True)
    """

    def __init__(self, config: Dict):
        super().__init__(config)

        self.credentials = config['credentials']
        self.refresh: Callable[[bool], str] = config['refresh']
        self.base_url = config.get('base_url', 'https://www.swiggy.com').rstrip('/')
        self.timeout = config.get('timeout', 10)
        self.session_header_name = config.get('session_header_name', 'Set-Cookie')
        self.session_header_count: Optional[int] = config.get('session_header_count', 3)
        self.retry_on_rejection = config.get('retry_on_rejection', True)

        self.token: Optional[str] = None
        self.requests_sent = 0

        # Setup session; only the operator's cookie is ever sent
        self.session = requests.Session()
        self.session.cookies.set_policy(DefaultCookiePolicy(allowed_domains=[]))
        self.session.headers.update({
            'User-Agent': config.get('user_agent', 'Mozilla/5.0'),
            'Accept': '*/*',
        })

    def fetch_orders(self) -> List[OrderSummary]:
        """Fetch all orders of the account, most recent first"""
        url = f"{self.base_url}/dapi/order/all"
        payload = self.authenticated_get(url, params={'order_id': ''})
        return self._serialize_orders(payload)

    def track_order(self, order_id: int, customer_id: str) -> TrackingSnapshot:
        """Fetch the current tracking status of an order"""
        url = f"{self.base_url}/dapi/order/trackV4"
        params = {
            'order_id': str(order_id),
            'type': 'full',
            'version': 'V2',
            'customer_id': customer_id,
        }
        payload = self.authenticated_get(url, params=params)
        return self._serialize_tracking(payload)

    def authenticated_get(self, url: str, params: Optional[Dict] = None) -> Dict:
        """GET with the session cookie, refreshing it once if upstream rejects it"""
        if self.token is None:
            self.token = self._initial_token()

        response = self._get(url, params, self.token)
        if not self._session_accepted(response):
            if not self.retry_on_rejection:
                raise SessionRejectedError(f"Session rejected by {url}")

            logger.warning("Session rejected by %s, asking for a new cookie", url)
            self.token = self._clean(self.refresh(False))

            response = self._get(url, params, self.token)
            if not self._session_accepted(response):
                raise SessionInvalidError("Session still rejected after refreshing the cookie")

        return self._decode(response)

    def _initial_token(self) -> str:
        """Saved cookie, or a freshly entered one when nothing is saved"""
        try:
            return self.credentials.load()
        except CredentialMissingError as e:
            logger.info("%s", e)
            return self._clean(self.refresh(True))

    @staticmethod
    def _clean(token: str) -> str:
        """Header form of an entered cookie, same as CredentialStore.load returns"""
        return token.strip()

    def _get(self, url: str, params: Optional[Dict], token: str) -> requests.Response:
        self.requests_sent += 1
        try:
            response = self.session.get(
                url,
                params=params,
                headers={'Cookie': token},
                timeout=self.timeout,
            )
        except requests.exceptions.InvalidHeader as e:
            raise CredentialMissingError(f"Session cookie is not a valid header value: {e}") from e
        except requests.exceptions.RequestException as e:
            raise NetworkError(f"Could not talk to swiggy api: {e}") from e

        logger.debug("GET %s -> %s", url, response.status_code)
        return response

    def _session_accepted(self, response: requests.Response) -> bool:
        """Upstream signals a valid session by the number of session headers it sets"""
        if self.session_header_count is None:
            return True

        # requests folds repeated headers together; the raw headers keep each one
        raw_headers = getattr(response.raw, 'headers', None)
        if raw_headers is not None and hasattr(raw_headers, 'getlist'):
            count = len(raw_headers.getlist(self.session_header_name))
        else:
            count = 1 if self.session_header_name in response.headers else 0

        if count != self.session_header_count:
            logger.debug(
                "Got %d %s headers, expected %d",
                count, self.session_header_name, self.session_header_count
            )
            return False
        return True

    def _decode(self, response: requests.Response) -> Dict:
        try:
            payload = response.json()
        except ValueError as e:
            raise PayloadMalformedError(f"Can not unmarshal JSON: {e}") from e

        if not isinstance(payload, dict):
            raise PayloadMalformedError(f"Expected a JSON object, got {type(payload).__name__}")
        return payload

    def _serialize_orders(self, payload: Dict) -> List[OrderSummary]:
        """Convert the order list response to OrderSummary objects"""
        data = self._section(payload, 'data')
        orders = data.get('orders') or []
        if not isinstance(orders, list):
            raise PayloadMalformedError("data.orders is not a list")

        summaries = []
        for order in orders:
            if not isinstance(order, dict):
                raise PayloadMalformedError("Order entry is not an object")
            try:
                order_id = int(order.get('order_id'))
            except (TypeError, ValueError):
                raise PayloadMalformedError(f"Invalid order_id: {order.get('order_id')!r}")

            summaries.append(OrderSummary(
                order_id=order_id,
                customer_id=str(order.get('customer_id') or ''),
                shared_order=bool(order.get('sharedOrder', False)),
            ))

        return summaries

    def _serialize_tracking(self, payload: Dict) -> TrackingSnapshot:
        """Convert the trackV4 response to a TrackingSnapshot"""
        data = self._section(payload, 'data')
        # Error envelopes carry no status; keep the previous snapshot instead
        crouton = data.get('track_crouton')
        if not isinstance(crouton, dict):
            raise PayloadMalformedError("Response has no data.track_crouton status")
        details = self._section(data, 'order_status_details')
        configuration = self._section(data, 'configuration')

        progress = crouton.get('progress_percentage')
        if progress is None:
            progress = 0
        elif not isinstance(progress, int) or isinstance(progress, bool):
            raise PayloadMalformedError(f"Invalid progress_percentage: {progress!r}")

        messages = details.get('messages') or []
        if not isinstance(messages, list):
            raise PayloadMalformedError("order_status_details.messages is not a list")

        polling_interval = configuration.get('polling_interval_seconds')

        return TrackingSnapshot(
            title=str(crouton.get('title') or ''),
            progress_percent=progress,
            eta_text=str(details.get('eta_text') or ''),
            eta_unit=str(details.get('eta_subtext') or ''),
            status_message=str(details.get('status_message') or ''),
            messages=tuple(
                str(m.get('body') or '') if isinstance(m, dict) else str(m)
                for m in messages
            ),
            polling_interval=polling_interval if isinstance(polling_interval, int) else None,
        )

    @staticmethod
    def _section(parent: Dict, key: str) -> Dict:
        """Nested object, treating a missing or null one as empty"""
        value = parent.get(key)
        if value is None:
            return {}
        if not isinstance(value, dict):
            raise PayloadMalformedError(f"{key} is not an object")
        return value
