from decimal import Decimal
from unittest.mock import AsyncMock, Mock

import pytest
from fastapi.testclient import TestClient

from api.dependencies import get_pricing_service
from api.main import app
from application.services import PricingService
from domain.models.pricing import ConversionRate


@pytest.fixture
def sources(fixed_now):
    binance = Mock()
    binance.resolve = AsyncMock(return_value=ConversionRate("USDC", "GHS", Decimal("12.5"), fixed_now, "binance"))
    coinbase = Mock()
    coinbase.resolve = AsyncMock(return_value=None)
    return {"binance": binance, "coinbase": coinbase}


@pytest.fixture
def pricing_service(sources, fixed_clock):
    return PricingService(sources, clock=fixed_clock)


@pytest.fixture
def client(pricing_service):
    # Override the real dependency; the lifespan is not run
    app.dependency_overrides[get_pricing_service] = lambda: pricing_service
    client = TestClient(app)
    yield client
    app.dependency_overrides.clear()


def test_rate_is_null_before_first_resolution(client):
    response = client.get("/api/rate")

    assert response.status_code == 200
    assert response.json() == {"rate": None, "age_minutes": 0.0, "is_stale": False}


def test_refresh_resolves_and_returns_rate(client):
    response = client.post("/api/rate/refresh")

    assert response.status_code == 200
    data = response.json()
    assert data["source_label"] == "binance"
    assert data["from_currency"] == "USDC"
    assert data["to_currency"] == "GHS"
    assert Decimal(data["rate"]) == Decimal("12.5")

    current = client.get("/api/rate").json()
    assert current["rate"]["source_label"] == "binance"


def test_history_lists_observations(client):
    client.post("/api/rate/refresh")

    response = client.get("/api/history")

    assert response.status_code == 200
    observations = response.json()["observations"]
    assert len(observations) == 1
    assert observations[0]["currency"] == "GHS"
    assert observations[0]["source_label"] == "binance"


def test_staleness_uses_threshold(client):
    response = client.get("/api/rate/staleness", params={"threshold_minutes": 10})

    assert response.status_code == 200
    assert response.json() == {"age_minutes": 0.0, "threshold_minutes": 10.0, "is_stale": False}


def test_staleness_rejects_non_positive_threshold(client):
    response = client.get("/api/rate/staleness", params={"threshold_minutes": 0})

    assert response.status_code == 422


def test_get_config_returns_defaults(client):
    response = client.get("/api/config")

    assert response.status_code == 200
    data = response.json()
    assert data["base_currency"] == "GHS"
    assert data["target_currency"] == "USDC"
    assert data["refresh_interval_ms"] == 30000
    assert Decimal(data["fallback_rate"]) == Decimal("16.3")
    assert data["sources"] == ["coingecko", "binance", "coinbase"]


def test_patch_config_merges_fields(client, pricing_service):
    response = client.patch("/api/config", json={"fallback_rate": "15.9", "sources": ["Binance"]})

    assert response.status_code == 200
    data = response.json()
    assert data["sources"] == ["binance"]
    assert Decimal(data["fallback_rate"]) == Decimal("15.9")
    assert data["refresh_interval_ms"] == 30000
    assert pricing_service.get_config().sources == ("binance",)


def test_patch_config_unknown_source_is_bad_request(client):
    response = client.patch("/api/config", json={"sources": ["kraken"]})

    assert response.status_code == 400
    assert "kraken" in response.json()["detail"]


def test_patch_config_rejects_unknown_fields(client):
    response = client.patch("/api/config", json={"colour": "blue"})

    assert response.status_code == 422


def test_convert_uses_fallback_until_resolved(client):
    response = client.get("/api/convert/to-base/2")

    assert response.status_code == 200
    data = response.json()
    assert data["from_currency"] == "USDC"
    assert data["to_currency"] == "GHS"
    assert Decimal(data["converted_amount"]) == Decimal("32.6")
    assert data["source"] == "fallback"


def test_convert_to_target_with_current_rate(client):
    client.post("/api/rate/refresh")

    response = client.get("/api/convert/to-target/125")

    assert response.status_code == 200
    data = response.json()
    assert data["from_currency"] == "GHS"
    assert data["to_currency"] == "USDC"
    assert Decimal(data["original_amount"]) == Decimal("125")
    assert Decimal(data["converted_amount"]) == Decimal("10")
    assert Decimal(data["exchange_rate"]) == Decimal("12.5")
    assert data["source"] == "binance"


@pytest.mark.parametrize("amount", ["0", "-5", "abc"])
def test_convert_rejects_invalid_amounts(client, amount):
    response = client.get(f"/api/convert/to-target/{amount}")

    assert response.status_code == 422


@pytest.mark.parametrize("field", ["sources", "fallback_rate", "refresh_interval_ms", "base_currency"])
def test_patch_config_null_value_is_bad_request(client, pricing_service, field):
    response = client.patch("/api/config", json={field: None})

    assert response.status_code == 400
    assert pricing_service.get_config().sources == ("coingecko", "binance", "coinbase")
