"""
Base connector interface - one per delivery platform
"""
from abc import ABC, abstractmethod
from typing import List, Dict

from models import OrderSummary, TrackingSnapshot


class TrackingConnector(ABC):
    """Base class for all delivery-tracking connectors"""
    
    def __init__(self, config: Dict):
        self.config = config
    
    @abstractmethod
    def fetch_orders(self) -> List[OrderSummary]:
        """Fetch the account's orders, most recent first"""
        pass
    
    @abstractmethod
    def track_order(self, order_id: int, customer_id: str) -> TrackingSnapshot:
        """Fetch the current tracking status of one order"""
        pass
