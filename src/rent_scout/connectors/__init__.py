"""Source connectors for listing data."""

from .base import ConnectorResult, ListingConnector
from .json_file import JsonFileConnector

__all__ = [
    "ListingConnector",
    "ConnectorResult",
    "JsonFileConnector",
]
