import asyncio
import json
import logging
from datetime import datetime, timedelta
from decimal import Decimal

from redis import asyncio as redis

from domain.models.pricing import ConversionRate

logger = logging.getLogger(__name__)


def rate_to_dict(rate: ConversionRate) -> dict:
    return {
        "from_currency": rate.from_currency,
        "to_currency": rate.to_currency,
        "rate": str(rate.rate),
        "observed_at": rate.observed_at.isoformat(),
        "source_label": rate.source_label,
    }


def rate_from_dict(data: dict) -> ConversionRate:
    return ConversionRate(
        from_currency=data["from_currency"],
        to_currency=data["to_currency"],
        rate=Decimal(data["rate"]),
        observed_at=datetime.fromisoformat(data["observed_at"]),
        source_label=data["source_label"],
    )


class RedisRatePublisher:
    """Mirrors every resolved rate into Redis: a latest-value key plus a pub/sub message.

    Instances are SubscriptionHub callbacks. Delivery is synchronous, so each
    write is scheduled as a task on the running loop.
    """

    def __init__(self, redis_client: redis.Redis):
        self.redis = redis_client
        self.rate_ttl = timedelta(minutes=5)
        self._pending: set[asyncio.Task] = set()

    def _make_rate_key(self, from_currency: str, to_currency: str) -> str:
        return f"rate:{from_currency}:{to_currency}"

    def _make_channel(self, from_currency: str, to_currency: str) -> str:
        return f"rates:{from_currency}:{to_currency}"

    def __call__(self, rate: ConversionRate) -> None:
        task = asyncio.get_running_loop().create_task(self.publish(rate))
        self._pending.add(task)
        task.add_done_callback(self._on_done)

    def _on_done(self, task: asyncio.Task) -> None:
        self._pending.discard(task)
        if not task.cancelled() and task.exception() is not None:
            logger.error(f"Failed to publish rate to Redis: {task.exception()!r}")

    async def publish(self, rate: ConversionRate) -> None:
        payload = json.dumps(rate_to_dict(rate))
        await self.redis.setex(self._make_rate_key(rate.from_currency, rate.to_currency), self.rate_ttl, payload)
        await self.redis.publish(self._make_channel(rate.from_currency, rate.to_currency), payload)

    async def get_latest_rate(self, from_currency: str, to_currency: str) -> ConversionRate | None:
        data = await self.redis.get(self._make_rate_key(from_currency, to_currency))
        if not data:
            return None
        return rate_from_dict(json.loads(data))

    async def drain(self) -> None:
        """Wait for in-flight publishes."""
        if self._pending:
            await asyncio.gather(*self._pending, return_exceptions=True)
