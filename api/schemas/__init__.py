from .requests import ConfigUpdateRequest
from .responses import (
	ConversionRateResponse,
	ConversionResponse,
	CurrentRateResponse,
	HealthResponse,
	PriceHistoryResponse,
	PriceObservationResponse,
	PricingConfigResponse,
	StalenessResponse,
)

__all__ = [
	'ConfigUpdateRequest',
	'ConversionRateResponse',
	'ConversionResponse',
	'CurrentRateResponse',
	'HealthResponse',
	'PriceHistoryResponse',
	'PriceObservationResponse',
	'PricingConfigResponse',
	'StalenessResponse',
]
