from __future__ import annotations

import io
import json
from typing import Any

import pytest
import requests
from requests.structures import CaseInsensitiveDict
from urllib3._collections import HTTPHeaderDict
from urllib3.response import HTTPResponse

from models import OrderSummary, TrackingSnapshot


def make_response(payload: Any = None, session_headers: int = 3, body: bytes | None = None,
                  status: int = 200) -> requests.Response:
    """Build a real requests.Response whose raw headers keep repeated Set-Cookie values."""
    if body is None:
        body = json.dumps(payload if payload is not None else {}).encode("utf-8")

    headers = HTTPHeaderDict()
    headers.add("Content-Type", "application/json")
    for idx in range(session_headers):
        headers.add("Set-Cookie", f"_session_{idx}=value{idx}; Path=/")

    raw = HTTPResponse(
        body=io.BytesIO(body),
        headers=headers,
        status=status,
        preload_content=False,
    )

    response = requests.Response()
    response.status_code = status
    response.raw = raw
    response.headers = CaseInsensitiveDict(raw.headers)
    response.encoding = "utf-8"
    response.url = "https://www.swiggy.com/dapi/test"
    return response


def orders_payload(*orders: dict) -> dict:
    return {"statusCode": 0, "data": {"orders": list(orders)}}


def tracking_payload(title: str = "Out for delivery", progress: int = 50,
                     eta_text: str = "10", eta_subtext: str = "mins") -> dict:
    return {
        "statusCode": 0,
        "data": {
            "configuration": {"polling_interval_seconds": 15},
            "order_status_details": {
                "status_message": "Your order is on the way",
                "status_message_colour": "#60b246",
                "body_layout": "default",
                "messages": [{"body": "Delivery partner picked up your order"}],
                "eta_text": eta_text,
                "eta_subtext": eta_subtext,
            },
            "track_crouton": {"title": title, "progress_percentage": progress},
        },
    }


class StubConnector:
    """In-memory connector returning canned orders and a scripted tracking sequence."""

    def __init__(self, orders=None, snapshots=None):
        self.orders = orders if orders is not None else [OrderSummary(42, "c1")]
        self.snapshots = list(snapshots or [TrackingSnapshot("Out for delivery", 50, "10", "mins")])
        self.track_calls = []

    def fetch_orders(self):
        return self.orders

    def track_order(self, order_id, customer_id):
        self.track_calls.append((order_id, customer_id))
        item = self.snapshots.pop(0) if len(self.snapshots) > 1 else self.snapshots[0]
        if isinstance(item, BaseException):
            raise item
        return item


@pytest.fixture
def stub_connector():
    return StubConnector()
