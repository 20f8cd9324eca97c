import logging
from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable, Iterable
from decimal import Decimal
from typing import NamedTuple, TypeVar

import httpx

from domain.exceptions.pricing import NetworkFailure, PricingException, ValidationFailure
from domain.models.pricing import ConversionRate, to_positive_decimal
from infrastructure.http_client import DEFAULT_TIMEOUT_SECONDS, fetch_json
from infrastructure.relay.client import RelayClient
from utils.time import Clock, utc_now

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Returns the provider's JSON body for a symbol, or raises a PricingException
Fetch = Callable[[str], Awaitable[dict]]


class Derivation(NamedTuple):
    rate: Decimal
    approximate: bool = False


async def first_success(strategies: Iterable[Callable[[], Awaitable[T | None]]], origin: str) -> T | None:
    """Run strategies in order and return the first non-None result.

    A strategy raising PricingException counts as a miss; the error is logged
    and the next strategy runs. Decimal overflow on extreme provider values is
    reported as a ValidationFailure and treated the same way.
    """
    for strategy in strategies:
        try:
            try:
                result = await strategy()
            except ArithmeticError as e:
                raise ValidationFailure(f"Rate arithmetic failed: {e.__class__.__name__}") from e
        except PricingException as e:
            logger.warning(f"{origin}: {e}")
            continue
        if result is not None:
            return result
    return None


def extract_rate(data: dict, *path: str) -> Decimal:
    """Walk `path` through a JSON object and return the value as a positive Decimal."""
    node = data
    for key in path:
        if not isinstance(node, dict) or key not in node:
            raise ValidationFailure(f"Missing field {'.'.join(path)} in response")
        node = node[key]

    rate = to_positive_decimal(node)
    if rate is None:
        raise ValidationFailure(f"Invalid value for {'.'.join(path)}: {node!r}")
    return rate


class RateSource(ABC):
    """One pricing provider able to produce a coin -> fiat ConversionRate.

    Every attempt goes direct first and then, if a relay is configured,
    through the relay with the same logical request.
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        relay: RelayClient | None = None,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        clock: Clock = utc_now,
    ):
        self._client = client
        self.relay = relay
        self.timeout = timeout
        self._clock = clock

    @property
    @abstractmethod
    def name(self) -> str:
        ...

    @abstractmethod
    def _build_direct_request(self, symbol: str) -> tuple[str, dict]:
        """Provider URL and query parameters for a symbol, as the relay would route it."""
        ...

    @abstractmethod
    async def _derive(self, fetch: Fetch, coin: str, fiat: str) -> Derivation | None:
        """Compute the coin -> fiat rate using `fetch` as transport."""
        ...

    async def resolve(self, base_currency: str = "GHS", target_currency: str = "USDC") -> ConversionRate | None:
        """Rate in `base_currency` per one `target_currency`, or None if every attempt failed."""
        coin, fiat = target_currency, base_currency

        strategies = [lambda: self._attempt(self._fetch_direct, self.name, coin, fiat)]
        if self.relay is not None:
            strategies.append(lambda: self._attempt(self._fetch_via_relay, f"{self.name}-proxy", coin, fiat))

        rate = await first_success(strategies, origin=self.name)
        if rate is None:
            logger.warning(f"{self.name}: no usable {coin}/{fiat} rate")
        return rate

    async def _attempt(self, fetch: Fetch, label: str, coin: str, fiat: str) -> ConversionRate | None:
        derived = await self._derive(fetch, coin, fiat)
        if derived is None:
            return None
        if derived.approximate:
            label = f"{label}-fallback"

        return ConversionRate(
            from_currency=coin,
            to_currency=fiat,
            rate=derived.rate,
            observed_at=self._clock(),
            source_label=label,
        )

    async def _fetch_direct(self, symbol: str) -> dict:
        url, params = self._build_direct_request(symbol)
        return await fetch_json(self._client, url, params, origin=f"{self.name}[{symbol}]", timeout=self.timeout)

    async def _fetch_via_relay(self, symbol: str) -> dict:
        data = await self.relay.fetch_via_relay(self.name, symbol)
        if data is None:
            raise NetworkFailure(f"{self.name}[{symbol}] relay attempt failed")
        return data

    def __repr__(self):
        return f"<{self.__class__.__name__}(name={self.name})>"
