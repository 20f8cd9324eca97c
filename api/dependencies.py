import logging

import httpx
from fastapi import FastAPI
from redis.asyncio import Redis

from application.services import PricingService
from config.settings import Settings, get_settings
from infrastructure.cache.redis_cache import RedisRatePublisher
from infrastructure.http_client import create_http_client
from infrastructure.providers import BinanceSource, CoinbaseSource, CoinGeckoSource, RateSource
from infrastructure.relay import RelayClient

logger = logging.getLogger(__name__)

IN_PROCESS_RELAY_BASE_URL = 'http://pricing-relay.internal'
PRICING_PROXY_PATH = '/api/pricing-proxy'


class AppDependencies:
	"""Container for application-wide singleton dependencies."""

	http_client: httpx.AsyncClient | None = None
	relay_http_client: httpx.AsyncClient | None = None
	redis_client: Redis | None = None
	rate_publisher: RedisRatePublisher | None = None
	sources: dict[str, RateSource] | None = None
	pricing_service: PricingService | None = None


deps = AppDependencies()


def create_relay_client(settings: Settings, http_client: httpx.AsyncClient, relay_app: FastAPI | None = None) -> RelayClient:
	"""
	RelayClient for the configured RELAY_URL.

	With RELAY_URL empty the relay is this application's own pricing-proxy
	route, called in-process over an ASGI transport. That works before the
	server socket is bound, so the first refresh cycle at startup can use it.
	"""
	timeout = settings.REQUEST_TIMEOUT_SECONDS
	if settings.RELAY_URL:
		return RelayClient(settings.RELAY_URL, http_client, timeout=timeout)

	if relay_app is None:
		raise RuntimeError('RELAY_URL is empty and no in-process relay app was given')

	deps.relay_http_client = httpx.AsyncClient(
		transport=httpx.ASGITransport(app=relay_app),
		base_url=IN_PROCESS_RELAY_BASE_URL,
	)
	return RelayClient(f'{IN_PROCESS_RELAY_BASE_URL}{PRICING_PROXY_PATH}', deps.relay_http_client, timeout=timeout)


def init_dependencies(relay_app: FastAPI | None = None) -> None:
	"""Initialize all singleton dependencies. Called at app startup."""
	logger.info('Initializing dependencies...')
	settings = get_settings()
	timeout = settings.REQUEST_TIMEOUT_SECONDS

	deps.http_client = create_http_client(timeout)
	relay = create_relay_client(settings, deps.http_client, relay_app)
	logger.info(f'Relay fallback via {relay.relay_url}')

	deps.sources = {
		'coingecko': CoinGeckoSource(deps.http_client, relay, timeout=timeout),
		'binance': BinanceSource(deps.http_client, relay, timeout=timeout),
		'coinbase': CoinbaseSource(deps.http_client, relay, timeout=timeout),
	}

	deps.pricing_service = PricingService(
		sources=deps.sources,
		config=settings.pricing_configuration(),
		history_limit=settings.PRICE_HISTORY_LIMIT,
	)

	if settings.REDIS_URL:
		deps.redis_client = Redis.from_url(settings.REDIS_URL, decode_responses=True)
		deps.rate_publisher = RedisRatePublisher(deps.redis_client)
		deps.pricing_service.subscribe(deps.rate_publisher)
		logger.info('Redis rate broadcast enabled')

	logger.info('Dependencies initialized')


async def cleanup_dependencies() -> None:
	logger.info('Cleaning up dependencies...')

	if deps.pricing_service:
		await deps.pricing_service.destroy()
	if deps.rate_publisher:
		await deps.rate_publisher.drain()
	if deps.redis_client:
		await deps.redis_client.aclose()
	if deps.relay_http_client:
		await deps.relay_http_client.aclose()
	if deps.http_client:
		await deps.http_client.aclose()

	logger.info('Cleanup complete')


def get_pricing_service() -> PricingService:
	if deps.pricing_service is None:
		raise RuntimeError('Pricing service not initialized')
	return deps.pricing_service


def get_http_client() -> httpx.AsyncClient:
	if deps.http_client is None:
		raise RuntimeError('HTTP client not initialized')
	return deps.http_client


def get_rate_publisher() -> RedisRatePublisher | None:
	"""None when the Redis broadcast is disabled."""
	return deps.rate_publisher
