from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Mapping


class MarketDataProvider(ABC):
    """Supplies one raw all-markets bundle per call."""

    name: str = "provider"

    @abstractmethod
    def fetch_bundle(self) -> Mapping[str, Any]:
        """Return the raw bundle; raise ``UpstreamUnavailableError`` on failure."""
        raise NotImplementedError
