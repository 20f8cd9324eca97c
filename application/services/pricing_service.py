import logging
from collections.abc import Callable
from decimal import Decimal

from application.services.conversion_service import DEFAULT_STALE_AFTER_MINUTES, ConversionService
from application.services.rate_resolver import RateResolver
from application.services.refresh_scheduler import RefreshScheduler
from application.services.subscription_hub import RateCallback, SubscriptionHub
from domain.models.pricing import ConversionRate, PriceObservation, PricingConfiguration
from infrastructure.providers.base import RateSource
from utils.time import Clock, utc_now

logger = logging.getLogger(__name__)


class PricingService:
    """Query and configuration surface over the resolver, scheduler and hub."""

    def __init__(
        self,
        sources: dict[str, RateSource],
        config: PricingConfiguration | None = None,
        history_limit: int = 1000,
        clock: Clock = utc_now,
    ):
        config = config or PricingConfiguration()
        self.hub = SubscriptionHub()
        self.resolver = RateResolver(sources, self.hub, config, history_limit=history_limit, clock=clock)
        self.scheduler = RefreshScheduler(self.resolver, config.refresh_interval_ms)
        self.conversion = ConversionService(self.resolver, clock=clock)
        self._destroyed = False

    async def start(self) -> None:
        logger.info("Starting pricing service...")
        await self.scheduler.start()
        logger.info(f"Pricing service ready, refreshing every {self.scheduler.interval_ms}ms")

    def get_current_rate(self) -> ConversionRate | None:
        return self.resolver.current_rate

    def get_price_history(self) -> list[PriceObservation]:
        return self.resolver.history

    def get_config(self) -> PricingConfiguration:
        return self.resolver.config

    def update_config(self, **changes) -> PricingConfiguration:
        updated = self.resolver.config.merge(**changes)
        self.resolver.configure(updated)

        if "refresh_interval_ms" in changes:
            if self.scheduler.is_running and not self._destroyed:
                self.scheduler.restart(updated.refresh_interval_ms)
            else:
                self.scheduler.interval_ms = updated.refresh_interval_ms

        logger.info(f"Pricing configuration updated: {', '.join(sorted(changes)) or 'no changes'}")
        return updated

    async def force_update(self) -> ConversionRate:
        return await self.resolver.resolve()

    def subscribe(self, callback: RateCallback) -> Callable[[], None]:
        return self.hub.subscribe(callback)

    def convert_to_target(self, amount: Decimal) -> Decimal:
        return self.conversion.to_target(amount)

    def convert_to_base(self, amount: Decimal) -> Decimal:
        return self.conversion.to_base(amount)

    def get_rate_age(self) -> float:
        return self.conversion.rate_age_minutes()

    def is_rate_stale(self, threshold_minutes: float = DEFAULT_STALE_AFTER_MINUTES) -> bool:
        return self.conversion.is_stale(threshold_minutes)

    async def destroy(self) -> None:
        """Cancel the refresh timer and drop every subscriber."""
        self._destroyed = True
        await self.scheduler.stop()
        self.hub.clear()
        logger.info("Pricing service stopped")
