import logging

import httpx

from domain.exceptions.pricing import PricingException
from infrastructure.http_client import DEFAULT_TIMEOUT_SECONDS, fetch_json

logger = logging.getLogger(__name__)


class RelayClient:
    """Second-attempt transport: asks the pricing relay to fetch a provider URL on our behalf."""

    def __init__(self, relay_url: str, client: httpx.AsyncClient, timeout: float = DEFAULT_TIMEOUT_SECONDS):
        self.relay_url = relay_url
        self._client = client
        self.timeout = timeout

    async def fetch_via_relay(self, source: str, symbol: str) -> dict | None:
        """Parsed JSON body relayed from `source`, or None when the relay attempt failed."""
        try:
            return await fetch_json(
                self._client,
                self.relay_url,
                {"source": source, "symbol": symbol},
                origin=f"relay[{source}]",
                timeout=self.timeout,
            )
        except PricingException as e:
            logger.warning(f"Relay fetch failed for {source}/{symbol}: {e}")
            return None
