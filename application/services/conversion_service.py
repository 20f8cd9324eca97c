from decimal import Decimal

from application.services.rate_resolver import RateResolver
from utils.time import Clock, minutes_between, utc_now

DEFAULT_STALE_AFTER_MINUTES = 5


class ConversionService:
	"""Converts amounts with the resolver's current rate (base units per one target unit)."""

	def __init__(self, resolver: RateResolver, clock: Clock = utc_now):
		self.resolver = resolver
		self._clock = clock

	def _active_rate(self) -> Decimal:
		current = self.resolver.current_rate
		if current is None:
			return self.resolver.config.fallback_rate
		return current.rate

	def to_target(self, amount_in_base: Decimal) -> Decimal:
		return Decimal(str(amount_in_base)) / self._active_rate()

	def to_base(self, amount_in_target: Decimal) -> Decimal:
		return Decimal(str(amount_in_target)) * self._active_rate()

	def rate_age_minutes(self) -> float:
		current = self.resolver.current_rate
		if current is None:
			return 0.0
		return minutes_between(current.observed_at, self._clock())

	def is_stale(self, threshold_minutes: float = DEFAULT_STALE_AFTER_MINUTES) -> bool:
		return self.rate_age_minutes() > threshold_minutes
