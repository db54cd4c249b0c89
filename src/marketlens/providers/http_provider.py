"""Primary provider: the all-markets JSON feed over HTTP.

Failures are retried immediately up to ``max_retries`` times (no backoff);
the caller decides what to do when the feed stays unavailable.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Mapping, Optional

import requests

from marketlens.errors import UpstreamUnavailableError
from marketlens.providers.base import MarketDataProvider

logger = logging.getLogger(__name__)


@dataclass
class HttpMarketDataProvider(MarketDataProvider):
    """Fetch the raw bundle from a JSON endpoint.

    Attributes:
        url: all-markets JSON endpoint
        max_retries: number of attempts before giving up
        timeout_sec: HTTP request timeout in seconds
        verify_ssl: whether to verify SSL certificates
    """

    url: str
    max_retries: int = 3
    timeout_sec: float = 15.0
    verify_ssl: bool = True
    name: str = "http"

    def __post_init__(self):
        if self.max_retries < 1:
            raise ValueError("max_retries must be at least 1")

    def fetch_bundle(self) -> Mapping[str, Any]:
        logger.info(f"Fetching market bundle from {self.url}")
        headers = {"Accept": "application/json"}

        last_exc: Optional[Exception] = None
        for attempt in range(1, self.max_retries + 1):
            try:
                resp = requests.get(
                    self.url,
                    headers=headers,
                    timeout=self.timeout_sec,
                    verify=self.verify_ssl,
                )
                resp.raise_for_status()
                payload = resp.json()
            except (requests.exceptions.RequestException, ValueError) as exc:
                last_exc = exc
                logger.warning(
                    f"Market bundle request failed (attempt {attempt}/{self.max_retries}): {exc}"
                )
                continue
            if not isinstance(payload, Mapping):
                last_exc = ValueError(f"expected a JSON object, got {type(payload).__name__}")
                logger.warning(f"Market bundle from {self.url} is not an object")
                continue
            return payload

        raise UpstreamUnavailableError(
            f"Failed to fetch {self.url} after {self.max_retries} attempts: {last_exc}"
        )
