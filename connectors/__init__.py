"""
Connector factory - add new delivery platforms here
"""
from .swiggy_connector import SwiggyConnector

# Registry of available connectors
CONNECTORS = {
    'swiggy': SwiggyConnector,
}


def get_connector(platform: str, config: dict):
    """Get connector instance for a delivery platform"""
    connector_class = CONNECTORS.get(platform.lower())
    
    if not connector_class:
        raise ValueError(f"Unsupported platform: {platform}")
    
    return connector_class(config)
