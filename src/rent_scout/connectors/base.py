"""Base connector interface for listing sources."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ..models import PropertyRecord


@dataclass
class ConnectorResult:
    """Result of a connector fetch operation."""

    listings: list[PropertyRecord]
    raw_payloads: list[dict]
    source: str
    errors: list[str]


class ListingConnector(ABC):
    """
    Abstract interface for rental listing sources.
    The engine only sees the normalized PropertyRecords a connector returns.
    """

    @abstractmethod
    def fetch(self) -> ConnectorResult:
        """
        Load listings from the source.
        Returns normalized records + raw payloads for debugging.
        """
        ...

    @property
    @abstractmethod
    def source_name(self) -> str:
        """Identifier for this data source."""
        ...
