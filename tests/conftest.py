"""
Shared fixtures: a routed fake httpx client and fixed clocks.
"""
from datetime import UTC, datetime, timedelta
from unittest.mock import AsyncMock, Mock

import httpx
import pytest

RELAY_URL = "http://relay.test/api/pricing-proxy"
FIXED_NOW = datetime(2025, 10, 1, 12, 0, 0, tzinfo=UTC)


class MockResponse:
    """Mock HTTP response for testing"""
    def __init__(self, json_data, status_code=200, text=None):
        self.json_data = json_data
        self.status_code = status_code
        self.text = text or str(json_data)

    def json(self):
        if isinstance(self.json_data, Exception):
            raise self.json_data
        return self.json_data

    def raise_for_status(self):
        if self.status_code >= 400:
            raise httpx.HTTPStatusError(
                f"HTTP {self.status_code}", request=Mock(), response=self
            )


def _route_key(url, params):
    params = params or {}
    if url == RELAY_URL:
        return f"relay:{params.get('source')}:{params.get('symbol')}"
    return params.get("symbol") or params.get("currency") or params.get("ids")


@pytest.fixture
def fake_http():
    """
    AsyncMock httpx client answering from `fake_http.routes`.

    Keys are the Binance pair, the Coinbase currency, the CoinGecko coin id,
    or "relay:<source>:<symbol>" for requests sent to RELAY_URL. Values are
    MockResponse objects or exceptions to raise. Unrouted requests fail with
    ConnectError.
    """
    client = AsyncMock(spec=httpx.AsyncClient)
    client.routes = {}

    async def get(url, params=None, **kwargs):
        outcome = client.routes.get(_route_key(url, params))
        if outcome is None:
            raise httpx.ConnectError(f"No route for {url} {params}")
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome

    client.get.side_effect = get
    return client


@pytest.fixture
def mock_response():
    return MockResponse


@pytest.fixture
def fixed_clock():
    return lambda: FIXED_NOW


class TickingClock:
    """Returns a strictly increasing time on every call."""
    def __init__(self, start=FIXED_NOW, step=timedelta(seconds=1)):
        self.now = start
        self.step = step

    def __call__(self):
        current = self.now
        self.now += self.step
        return current


@pytest.fixture
def ticking_clock():
    return TickingClock()


@pytest.fixture
def fixed_now():
    return FIXED_NOW


@pytest.fixture
def relay_client(fake_http):
    from infrastructure.relay import RelayClient

    return RelayClient(RELAY_URL, fake_http, timeout=10)
