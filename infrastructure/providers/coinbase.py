from infrastructure.relay.routing import COINBASE_EXCHANGE_RATES_URL

from .base import Derivation, Fetch, RateSource, extract_rate


class CoinbaseSource(RateSource):
    """Exchange-rates lookup by base currency; the quote lives under data.rates."""

    @property
    def name(self) -> str:
        return "coinbase"

    def _build_direct_request(self, symbol: str) -> tuple[str, dict]:
        return COINBASE_EXCHANGE_RATES_URL, {"currency": symbol}

    async def _derive(self, fetch: Fetch, coin: str, fiat: str) -> Derivation | None:
        data = await fetch(coin)
        return Derivation(extract_rate(data, "data", "rates", fiat))
