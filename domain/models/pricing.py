from dataclasses import dataclass, fields, replace
from datetime import datetime
from decimal import Decimal, InvalidOperation

from domain.exceptions.pricing import ConfigurationError, ValidationFailure

KNOWN_SOURCES = ("coingecko", "binance", "coinbase")


def to_positive_decimal(value) -> Decimal | None:
    """Coerce a provider value to a finite positive Decimal, or None."""
    if value is None or isinstance(value, bool):
        return None
    try:
        number = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        return None
    if not number.is_finite() or number <= 0:
        return None
    return number


@dataclass(frozen=True)
class ConversionRate:
    from_currency: str
    to_currency: str
    rate: Decimal
    observed_at: datetime
    source_label: str

    def __post_init__(self):
        rate = to_positive_decimal(self.rate)
        if rate is None:
            raise ValidationFailure(f"Rate must be a finite positive number, got {self.rate!r}")
        object.__setattr__(self, "rate", rate)


@dataclass(frozen=True)
class PriceObservation:
    currency: str
    price: Decimal
    observed_at: datetime
    source_label: str


@dataclass(frozen=True)
class PricingConfiguration:
    base_currency: str = "GHS"
    target_currency: str = "USDC"
    refresh_interval_ms: int = 30_000
    fallback_rate: Decimal = Decimal("16.3")
    sources: tuple[str, ...] = KNOWN_SOURCES

    def __post_init__(self):
        if not self.base_currency or not self.target_currency:
            raise ConfigurationError("base_currency and target_currency are required")
        try:
            interval = int(self.refresh_interval_ms)
        except (TypeError, ValueError) as e:
            raise ConfigurationError("refresh_interval_ms must be an integer") from e
        if isinstance(self.refresh_interval_ms, bool) or interval <= 0:
            raise ConfigurationError("refresh_interval_ms must be positive")

        fallback = to_positive_decimal(self.fallback_rate)
        if fallback is None:
            raise ConfigurationError(f"fallback_rate must be a finite positive number, got {self.fallback_rate!r}")

        if isinstance(self.sources, str):
            raise ConfigurationError("sources must be a list of source names")
        try:
            sources = tuple(self.sources)
        except TypeError as e:
            raise ConfigurationError("sources must be a list of source names") from e
        if not sources:
            raise ConfigurationError("At least one pricing source is required")
        unknown = [s for s in sources if s not in KNOWN_SOURCES]
        if unknown:
            raise ConfigurationError(f"Unsupported pricing sources: {', '.join(map(str, unknown))}")
        if len(set(sources)) != len(sources):
            raise ConfigurationError("Pricing sources must not repeat")

        object.__setattr__(self, "base_currency", self.base_currency.upper())
        object.__setattr__(self, "target_currency", self.target_currency.upper())
        object.__setattr__(self, "refresh_interval_ms", interval)
        object.__setattr__(self, "fallback_rate", fallback)
        object.__setattr__(self, "sources", sources)

    def merge(self, **changes) -> "PricingConfiguration":
        """Shallow merge: every given field replaces the current value."""
        allowed = {f.name for f in fields(self)}
        unknown = set(changes) - allowed
        if unknown:
            raise ConfigurationError(f"Unknown configuration fields: {', '.join(sorted(unknown))}")
        return replace(self, **changes)
