from .conversion_service import ConversionService
from .pricing_service import PricingService
from .rate_resolver import RateResolver
from .refresh_scheduler import RefreshScheduler
from .subscription_hub import SubscriptionHub

__all__ = ['ConversionService', 'PricingService', 'RateResolver', 'RefreshScheduler', 'SubscriptionHub']
