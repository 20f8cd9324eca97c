# nosec B101

from datetime import UTC, datetime
from decimal import Decimal

import pytest

from domain.exceptions.pricing import ConfigurationError, ValidationFailure
from domain.models.pricing import ConversionRate, PricingConfiguration, to_positive_decimal

OBSERVED_AT = datetime(2025, 10, 1, 12, 0, tzinfo=UTC)


@pytest.mark.parametrize("value, expected", [
    ("12.5", Decimal("12.5")),
    (" 0.99980000 ", Decimal("0.99980000")),
    (16.3, Decimal("16.3")),
    (3, Decimal("3")),
])
def test_to_positive_decimal_accepts_positive_numbers(value, expected):
    assert to_positive_decimal(value) == expected


@pytest.mark.parametrize("value", [None, True, "", "abc", "NaN", "Infinity", "-1", 0, "0.0", {}, []])
def test_to_positive_decimal_rejects_everything_else(value):
    assert to_positive_decimal(value) is None


def test_conversion_rate_normalises_rate_to_decimal():
    rate = ConversionRate("USDC", "GHS", "12.5125", OBSERVED_AT, "binance")

    assert rate.rate == Decimal("12.5125")
    assert isinstance(rate.rate, Decimal)


@pytest.mark.parametrize("bad_rate", [Decimal("0"), Decimal("-2"), Decimal("NaN"), "nope"])
def test_conversion_rate_rejects_invalid_rate(bad_rate):
    with pytest.raises(ValidationFailure):
        ConversionRate("USDC", "GHS", bad_rate, OBSERVED_AT, "coinbase")


def test_conversion_rate_is_immutable():
    rate = ConversionRate("USDC", "GHS", Decimal("12"), OBSERVED_AT, "coinbase")

    with pytest.raises(AttributeError):
        rate.rate = Decimal("13")


def test_default_configuration():
    config = PricingConfiguration()

    assert config.base_currency == "GHS"
    assert config.target_currency == "USDC"
    assert config.refresh_interval_ms == 30_000
    assert config.fallback_rate == Decimal("16.3")
    assert config.sources == ("coingecko", "binance", "coinbase")


def test_configuration_normalises_values():
    config = PricingConfiguration(base_currency="ghs", refresh_interval_ms="5000", sources=["binance"])

    assert config.base_currency == "GHS"
    assert config.refresh_interval_ms == 5000
    assert config.sources == ("binance",)


@pytest.mark.parametrize("kwargs", [
    {"refresh_interval_ms": 0},
    {"refresh_interval_ms": -10},
    {"refresh_interval_ms": "soon"},
    {"fallback_rate": Decimal("0")},
    {"fallback_rate": "Infinity"},
    {"sources": ()},
    {"sources": ("binance", "kraken")},
    {"sources": ("binance", "binance")},
    {"base_currency": ""},
])
def test_configuration_validation(kwargs):
    with pytest.raises(ConfigurationError):
        PricingConfiguration(**kwargs)


def test_merge_is_shallow_and_returns_new_instance():
    config = PricingConfiguration()

    merged = config.merge(fallback_rate=Decimal("15.9"))

    assert merged is not config
    assert merged.fallback_rate == Decimal("15.9")
    assert merged.refresh_interval_ms == config.refresh_interval_ms
    assert merged.sources == config.sources
    assert config.fallback_rate == Decimal("16.3")


def test_merge_rejects_unknown_fields():
    with pytest.raises(ConfigurationError, match="Unknown configuration fields: colour"):
        PricingConfiguration().merge(colour="blue")


@pytest.mark.parametrize("sources", [None, 42, "binance"])
def test_configuration_rejects_non_list_sources(sources):
    with pytest.raises(ConfigurationError, match="sources must be a list"):
        PricingConfiguration(sources=sources)


@pytest.mark.parametrize("field", ["base_currency", "refresh_interval_ms", "fallback_rate", "sources"])
def test_merge_with_null_value_is_configuration_error(field):
    with pytest.raises(ConfigurationError):
        PricingConfiguration().merge(**{field: None})
