from decimal import Decimal

import httpx
import pytest
from fastapi.testclient import TestClient

import api.dependencies as dependencies
from api.dependencies import IN_PROCESS_RELAY_BASE_URL, create_relay_client, deps, get_http_client
from api.main import app
from config.settings import Settings
from infrastructure.providers import BinanceSource


def upstream_handler(request: httpx.Request) -> httpx.Response:
    """Answers the three provider endpoints the way the live APIs do."""
    if request.url.host == "api.coingecko.com":
        return httpx.Response(200, json={"usd-coin": {"ghs": 12.4}})
    if request.url.host == "api.binance.com":
        prices = {"USDCUSDT": "1.00000000", "USDTGHS": "12.50000000"}
        symbol = request.url.params["symbol"]
        if symbol not in prices:
            return httpx.Response(400, json={"code": -1121, "msg": "Invalid symbol."})
        return httpx.Response(200, json={"symbol": symbol, "price": prices[symbol]})
    if request.url.host == "api.coinbase.com":
        return httpx.Response(200, json={"data": {"currency": "USDC", "rates": {"GHS": "12.45"}}})
    return httpx.Response(404)


def unreachable_handler(request: httpx.Request) -> httpx.Response:
    raise httpx.ConnectError("Connection refused", request=request)


@pytest.fixture
def relay_upstream():
    # The relay route forwards through get_http_client
    client = httpx.AsyncClient(transport=httpx.MockTransport(upstream_handler))
    app.dependency_overrides[get_http_client] = lambda: client
    yield client
    app.dependency_overrides.clear()


@pytest.fixture
def clean_deps(monkeypatch):
    for name in ("http_client", "relay_http_client", "redis_client", "rate_publisher", "sources", "pricing_service"):
        monkeypatch.setattr(deps, name, None)


def test_configured_relay_url_uses_shared_client(clean_deps):
    shared = httpx.AsyncClient()
    settings = Settings(_env_file=None, RELAY_URL="https://relay.example.com/api/pricing-proxy")

    relay = create_relay_client(settings, shared)

    assert relay.relay_url == "https://relay.example.com/api/pricing-proxy"
    assert relay._client is shared
    assert deps.relay_http_client is None


def test_empty_relay_url_needs_an_app(clean_deps):
    with pytest.raises(RuntimeError):
        create_relay_client(Settings(_env_file=None, RELAY_URL=""), httpx.AsyncClient())


@pytest.mark.asyncio
async def test_in_process_relay_serves_adapters_without_a_server(clean_deps, relay_upstream, fake_http):
    relay = create_relay_client(Settings(_env_file=None, RELAY_URL=""), fake_http, relay_app=app)

    try:
        rate = await BinanceSource(fake_http, relay).resolve()
    finally:
        await deps.relay_http_client.aclose()

    assert relay.relay_url.startswith(IN_PROCESS_RELAY_BASE_URL)
    assert rate.rate == Decimal("12.5")
    assert rate.source_label == "binance-proxy"


def test_first_cycle_at_startup_uses_relay(clean_deps, relay_upstream, monkeypatch):
    # Direct provider calls fail; only the relay can reach the upstream APIs
    monkeypatch.setattr(
        dependencies,
        "create_http_client",
        lambda timeout: httpx.AsyncClient(transport=httpx.MockTransport(unreachable_handler)),
    )
    monkeypatch.setattr(dependencies, "get_settings", lambda: Settings(_env_file=None, RELAY_URL="", REDIS_URL=""))

    with TestClient(app) as client:
        current = client.get("/api/rate").json()
        history = client.get("/api/history").json()["observations"]

    assert current["rate"]["source_label"].endswith("-proxy")
    assert sorted(o["source_label"] for o in history) == ["binance-proxy", "coinbase-proxy", "coingecko-proxy"]
