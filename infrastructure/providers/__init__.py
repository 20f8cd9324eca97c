from .base import RateSource, first_success
from .binance import BinanceSource
from .coinbase import CoinbaseSource
from .coingecko import CoinGeckoSource

__all__ = ['RateSource', 'first_success', 'BinanceSource', 'CoinbaseSource', 'CoinGeckoSource']
