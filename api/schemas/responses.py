from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field

from domain.models.pricing import ConversionRate, PriceObservation, PricingConfiguration


class ConversionRateResponse(BaseModel):
	from_currency: str = Field(..., description='Currency one unit of which is priced')
	to_currency: str = Field(..., description='Currency the rate is expressed in')
	rate: Decimal = Field(..., description='to_currency units per one from_currency unit')
	observed_at: datetime = Field(..., description='When the rate was resolved')
	source_label: str = Field(..., description='Source and route that produced the rate')

	@classmethod
	def from_domain(cls, rate: ConversionRate) -> 'ConversionRateResponse':
		return cls(
			from_currency=rate.from_currency,
			to_currency=rate.to_currency,
			rate=rate.rate,
			observed_at=rate.observed_at,
			source_label=rate.source_label,
		)


class CurrentRateResponse(BaseModel):
	rate: ConversionRateResponse | None = Field(None, description='Null until the first resolution')
	age_minutes: float
	is_stale: bool


class StalenessResponse(BaseModel):
	age_minutes: float
	threshold_minutes: float
	is_stale: bool


class PriceObservationResponse(BaseModel):
	currency: str
	price: Decimal
	observed_at: datetime
	source_label: str

	@classmethod
	def from_domain(cls, observation: PriceObservation) -> 'PriceObservationResponse':
		return cls(
			currency=observation.currency,
			price=observation.price,
			observed_at=observation.observed_at,
			source_label=observation.source_label,
		)


class PriceHistoryResponse(BaseModel):
	observations: list[PriceObservationResponse]


class PricingConfigResponse(BaseModel):
	base_currency: str
	target_currency: str
	refresh_interval_ms: int
	fallback_rate: Decimal
	sources: list[str]

	@classmethod
	def from_domain(cls, config: PricingConfiguration) -> 'PricingConfigResponse':
		return cls(
			base_currency=config.base_currency,
			target_currency=config.target_currency,
			refresh_interval_ms=config.refresh_interval_ms,
			fallback_rate=config.fallback_rate,
			sources=list(config.sources),
		)


class ConversionResponse(BaseModel):
	from_currency: str = Field(..., description='Source currency code')
	to_currency: str = Field(..., description='Target currency code')
	original_amount: Decimal = Field(..., description='Original amount requested')
	converted_amount: Decimal = Field(..., description='Converted amount')
	exchange_rate: Decimal = Field(..., description='Base units per one target unit')
	source: str = Field(..., description='Source label of the rate used')


class HealthResponse(BaseModel):
	status: str = Field(..., description='healthy, degraded or unhealthy')
	timestamp: datetime
	services: dict[str, dict]
