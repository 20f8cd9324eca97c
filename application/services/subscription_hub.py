import logging
from collections.abc import Callable

from domain.models.pricing import ConversionRate

logger = logging.getLogger(__name__)

RateCallback = Callable[[ConversionRate], None]


class SubscriptionHub:
    """Ordered registry of rate callbacks."""

    def __init__(self):
        self._subscribers: list[RateCallback] = []

    def __len__(self) -> int:
        return len(self._subscribers)

    def subscribe(self, callback: RateCallback) -> Callable[[], None]:
        """Register `callback`; the returned handle removes it again."""
        self._subscribers.append(callback)
        removed = False

        def unsubscribe() -> None:
            nonlocal removed
            if removed:
                return
            removed = True
            # Identity, not equality: the same function may be subscribed twice
            for index, subscriber in enumerate(self._subscribers):
                if subscriber is callback:
                    del self._subscribers[index]
                    break

        return unsubscribe

    def notify(self, rate: ConversionRate) -> None:
        # Iterate over a snapshot so callbacks may unsubscribe mid-delivery
        for callback in list(self._subscribers):
            try:
                callback(rate)
            except Exception:
                logger.exception(f"Rate subscriber {callback!r} failed")

    def clear(self) -> None:
        self._subscribers.clear()
