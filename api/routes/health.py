import logging
from typing import Annotated

from fastapi import APIRouter, Depends
from redis.exceptions import RedisError

from api.dependencies import get_pricing_service, get_rate_publisher
from api.schemas import HealthResponse
from application.services import PricingService
from application.services.rate_resolver import FALLBACK_LABEL
from infrastructure.cache.redis_cache import RedisRatePublisher
from utils.time import utc_now

logger = logging.getLogger(__name__)

router = APIRouter(prefix='/api', tags=['health'])


async def broadcast_health(publisher: RedisRatePublisher | None, service: PricingService) -> dict:
	"""Reads the last broadcast rate back from Redis."""
	if publisher is None:
		return {'status': 'disabled'}

	config = service.get_config()
	try:
		latest = await publisher.get_latest_rate(config.target_currency, config.base_currency)
	except RedisError as e:
		logger.error(f'Redis health check failed: {e}')
		return {'status': 'unhealthy', 'error': str(e)}

	return {
		'status': 'healthy',
		'last_source_label': latest.source_label if latest else None,
		'last_observed_at': latest.observed_at.isoformat() if latest else None,
	}


@router.get(
	'/health',
	response_model=HealthResponse,
	summary='Service health check',
	description='Refresh loop status, freshness of the current rate and the Redis broadcast',
)
async def health_check(
	service: Annotated[PricingService, Depends(get_pricing_service)],
	publisher: Annotated[RedisRatePublisher | None, Depends(get_rate_publisher)],
) -> HealthResponse:
	"""
	Overall status:
	- unhealthy: no rate resolved yet, or the refresh loop is not running
	- degraded: serving the fallback rate, the rate is stale, or Redis is unreachable
	- healthy: otherwise
	"""
	current = service.get_current_rate()
	scheduler_running = service.scheduler.is_running
	is_stale = service.is_rate_stale()
	broadcast = await broadcast_health(publisher, service)

	services = {
		'scheduler': {
			'status': 'running' if scheduler_running else 'stopped',
			'interval_ms': service.scheduler.interval_ms,
		},
		'rate': {
			'source_label': current.source_label if current else None,
			'age_minutes': service.get_rate_age(),
			'is_stale': is_stale,
		},
		'subscribers': {'count': len(service.hub)},
		'broadcast': broadcast,
	}

	if current is None or not scheduler_running:
		status = 'unhealthy'
	elif current.source_label == FALLBACK_LABEL or is_stale or broadcast['status'] == 'unhealthy':
		status = 'degraded'
	else:
		status = 'healthy'

	if status != 'healthy':
		logger.warning(f'Health check: {status}')

	return HealthResponse(status=status, timestamp=utc_now(), services=services)
