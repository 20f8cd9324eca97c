import asyncio
import logging
from collections import deque

from application.services.subscription_hub import SubscriptionHub
from domain.models.pricing import ConversionRate, PriceObservation, PricingConfiguration
from infrastructure.monitoring.logger import rate_context
from infrastructure.providers.base import RateSource
from utils.time import Clock, utc_now

logger = logging.getLogger(__name__)

FALLBACK_LABEL = "fallback"


class RateResolver:
    """Owns the current-rate slot and the price history.

    Only the resolver writes them; everything else reads through the
    properties, which hand out immutable values or copies.
    """

    def __init__(
        self,
        sources: dict[str, RateSource],
        hub: SubscriptionHub,
        config: PricingConfiguration,
        history_limit: int = 1000,
        clock: Clock = utc_now,
    ):
        self.sources = sources
        self.hub = hub
        self._config = config
        self._clock = clock
        self._current_rate: ConversionRate | None = None
        self._history: deque[PriceObservation] = deque(maxlen=history_limit)
        self._lock = asyncio.Lock()

    @property
    def config(self) -> PricingConfiguration:
        return self._config

    def configure(self, config: PricingConfiguration) -> None:
        """Takes effect on the next resolution cycle."""
        self._config = config

    @property
    def current_rate(self) -> ConversionRate | None:
        return self._current_rate

    @property
    def history(self) -> list[PriceObservation]:
        return list(self._history)

    async def resolve(self) -> ConversionRate:
        """Run one resolution cycle. Never raises; falls back when no source succeeds."""
        async with self._lock:
            config = self._config
            results = await self._collect(config)

            if not results:
                logger.warning(f"All pricing sources failed ({', '.join(config.sources)}); using fallback rate")
                return self._publish(self._fallback_rate(config))

            for rate in results:
                self._history.append(
                    PriceObservation(
                        currency=config.base_currency,
                        price=rate.rate,
                        observed_at=rate.observed_at,
                        source_label=rate.source_label,
                    )
                )

            chosen = select_latest(results)
            logger.info(
                f"Resolved {chosen.from_currency}->{chosen.to_currency} = {chosen.rate} "
                f"from {chosen.source_label} ({len(results)}/{len(config.sources)} sources succeeded)",
                extra=rate_context(chosen, succeeded=len(results)),
            )
            return self._publish(chosen)

    def apply_fallback(self) -> ConversionRate:
        return self._publish(self._fallback_rate(self._config))

    async def _collect(self, config: PricingConfiguration) -> list[ConversionRate]:
        source_ids = []
        tasks = []
        for source_id in config.sources:
            source = self.sources.get(source_id)
            if source is None:
                logger.warning(f"No adapter registered for pricing source {source_id}")
                continue
            source_ids.append(source_id)
            tasks.append(source.resolve(config.base_currency, config.target_currency))

        results = await asyncio.gather(*tasks, return_exceptions=True)

        rates: list[ConversionRate] = []
        for source_id, result in zip(source_ids, results, strict=True):
            if isinstance(result, BaseException):
                logger.error(f"Pricing source {source_id} failed unexpectedly: {result!r}")
            elif result is not None:
                rates.append(result)
        return rates

    def _fallback_rate(self, config: PricingConfiguration) -> ConversionRate:
        return ConversionRate(
            from_currency=config.target_currency,
            to_currency=config.base_currency,
            rate=config.fallback_rate,
            observed_at=self._clock(),
            source_label=FALLBACK_LABEL,
        )

    def _publish(self, rate: ConversionRate) -> ConversionRate:
        self._current_rate = rate
        self.hub.notify(rate)
        return rate


def select_latest(rates: list[ConversionRate]) -> ConversionRate:
    """Latest observed_at wins; on a tie the earliest entry is kept."""
    chosen = rates[0]
    for rate in rates[1:]:
        if rate.observed_at > chosen.observed_at:
            chosen = rate
    return chosen
