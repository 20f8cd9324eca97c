"""Binance ticker-price adapter.

Binance lists no USDC/GHS market, so the rate is composed from USDT legs:

    1. USDC->GHS = USDCUSDT * USDTGHS
    2. USDC->GHS = USDCUSDT / GHSUSDT
    3. USDC->GHS = USDCUSDT * USDTUSD / (GHS->USD)

Step 3 divides by APPROXIMATE_USD_PER_UNIT, a hardcoded estimate that is never
refreshed. Results from it are labelled "-fallback" and go stale as the cedi
moves; treat them as a last resort.
"""
from decimal import Decimal

from domain.exceptions.pricing import ValidationFailure
from infrastructure.relay.routing import BINANCE_TICKER_PRICE_URL

from .base import Derivation, Fetch, RateSource, extract_rate, first_success

STABLE_QUOTE = "USDT"

# Approximate USD value of one unit of fiat. Not live data.
APPROXIMATE_USD_PER_UNIT = {
    "GHS": Decimal("0.061"),
}


class BinanceSource(RateSource):

    @property
    def name(self) -> str:
        return "binance"

    def _build_direct_request(self, symbol: str) -> tuple[str, dict]:
        return BINANCE_TICKER_PRICE_URL, {"symbol": symbol}

    async def _price(self, fetch: Fetch, symbol: str) -> Decimal:
        data = await fetch(symbol)
        return extract_rate(data, "price")

    async def _derive(self, fetch: Fetch, coin: str, fiat: str) -> Derivation | None:
        # Without the coin leg none of the routes can be priced
        coin_to_usdt = await self._price(fetch, f"{coin}{STABLE_QUOTE}")

        async def via_usdt_pair() -> Derivation:
            usdt_to_fiat = await self._price(fetch, f"{STABLE_QUOTE}{fiat}")
            return Derivation(coin_to_usdt * usdt_to_fiat)

        async def via_inverse_pair() -> Derivation:
            fiat_to_usdt = await self._price(fetch, f"{fiat}{STABLE_QUOTE}")
            return Derivation(coin_to_usdt / fiat_to_usdt)

        async def via_usd_approximation() -> Derivation:
            usd_per_fiat = APPROXIMATE_USD_PER_UNIT.get(fiat)
            if usd_per_fiat is None:
                raise ValidationFailure(f"No approximate USD rate for {fiat}")
            usdt_to_usd = await self._price(fetch, f"{STABLE_QUOTE}USD")
            return Derivation(coin_to_usdt * usdt_to_usd / usd_per_fiat, approximate=True)

        return await first_success(
            [via_usdt_pair, via_inverse_pair, via_usd_approximation],
            origin=f"{self.name}[{coin}{fiat}]",
        )
