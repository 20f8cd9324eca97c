from decimal import Decimal
from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict

from domain.models.pricing import PricingConfiguration


class Settings(BaseSettings):
	# Pricing
	BASE_CURRENCY: str = 'GHS'
	TARGET_CURRENCY: str = 'USDC'
	REFRESH_INTERVAL_MS: int = 30_000
	FALLBACK_RATE: Decimal = Decimal('16.3')
	PRICING_SOURCES: str = 'coingecko,binance,coinbase'
	PRICE_HISTORY_LIMIT: int = 1000

	# Outbound HTTP
	REQUEST_TIMEOUT_SECONDS: float = 10.0
	# Empty routes relay requests to this app's own pricing-proxy route in-process
	RELAY_URL: str = ''

	# Empty disables the Redis broadcast
	REDIS_URL: str = ''

	# Application
	APP_NAME: str = 'GHS/USDC Pricing Service'
	DEBUG: bool = False
	LOG_LEVEL: str = 'INFO'
	JSON_LOGS: bool = False

	model_config = SettingsConfigDict(env_file='.env', case_sensitive=False, extra='ignore')

	@property
	def source_list(self) -> tuple[str, ...]:
		return tuple(s.strip().lower() for s in self.PRICING_SOURCES.split(',') if s.strip())

	def pricing_configuration(self) -> PricingConfiguration:
		return PricingConfiguration(
			base_currency=self.BASE_CURRENCY,
			target_currency=self.TARGET_CURRENCY,
			refresh_interval_ms=self.REFRESH_INTERVAL_MS,
			fallback_rate=self.FALLBACK_RATE,
			sources=self.source_list,
		)


@lru_cache
def get_settings() -> Settings:
	return Settings()
