from domain.exceptions.pricing import ValidationFailure
from infrastructure.relay.routing import COINGECKO_SIMPLE_PRICE_URL

from .base import Derivation, Fetch, RateSource, extract_rate

COIN_IDS = {
    "USDC": "usd-coin",
    "USDT": "tether",
}


def split_symbol(symbol: str) -> tuple[str, str]:
    """'USDCGHS' -> ('USDC', 'GHS')"""
    for coin in COIN_IDS:
        if symbol.startswith(coin) and len(symbol) > len(coin):
            return coin, symbol[len(coin):]
    raise ValidationFailure(f"Unsupported CoinGecko symbol {symbol}")


class CoinGeckoSource(RateSource):
    """Simple-price lookup keyed by coin id and quote currency."""

    @property
    def name(self) -> str:
        return "coingecko"

    def _build_direct_request(self, symbol: str) -> tuple[str, dict]:
        coin, fiat = split_symbol(symbol)
        return COINGECKO_SIMPLE_PRICE_URL, {"ids": COIN_IDS[coin], "vs_currencies": fiat.lower()}

    async def _derive(self, fetch: Fetch, coin: str, fiat: str) -> Derivation | None:
        coin_id = COIN_IDS.get(coin)
        if coin_id is None:
            raise ValidationFailure(f"No CoinGecko id known for {coin}")

        data = await fetch(f"{coin}{fiat}")
        return Derivation(extract_rate(data, coin_id, fiat.lower()))
