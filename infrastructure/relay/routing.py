from domain.exceptions.pricing import ConfigurationError

COINGECKO_SIMPLE_PRICE_URL = 'https://api.coingecko.com/api/v3/simple/price'
BINANCE_TICKER_PRICE_URL = 'https://api.binance.com/api/v3/ticker/price'
COINBASE_EXCHANGE_RATES_URL = 'https://api.coinbase.com/v2/exchange-rates'

# The relay only serves the pairs this service prices
COINGECKO_SYMBOLS = {
	'USDCGHS': {'ids': 'usd-coin', 'vs_currencies': 'ghs'},
}
COINBASE_SYMBOLS = ('USDC',)


class RelayRoutingError(ConfigurationError):
	pass


def build_upstream_request(source: str | None, symbol: str | None) -> tuple[str, dict[str, str]]:
	"""Map a relay (source, symbol) query onto the provider URL and query parameters."""
	if not source or not symbol:
		raise RelayRoutingError('Missing required parameters: source and symbol')

	if source == 'binance':
		return BINANCE_TICKER_PRICE_URL, {'symbol': symbol}
	if source == 'coingecko':
		params = COINGECKO_SYMBOLS.get(symbol)
		if params is None:
			raise RelayRoutingError('Unsupported symbol for CoinGecko')
		return COINGECKO_SIMPLE_PRICE_URL, dict(params)
	if source == 'coinbase':
		if symbol not in COINBASE_SYMBOLS:
			raise RelayRoutingError('Unsupported symbol for Coinbase')
		return COINBASE_EXCHANGE_RATES_URL, {'currency': symbol}

	raise RelayRoutingError('Unsupported source')
