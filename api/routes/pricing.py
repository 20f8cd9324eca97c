from decimal import Decimal
from typing import Annotated

from fastapi import APIRouter, Depends, Path, Query, status

from api.dependencies import get_pricing_service
from api.schemas import (
	ConfigUpdateRequest,
	ConversionRateResponse,
	ConversionResponse,
	CurrentRateResponse,
	PriceHistoryResponse,
	PriceObservationResponse,
	PricingConfigResponse,
	StalenessResponse,
)
from application.services import PricingService

router = APIRouter(prefix='/api', tags=['pricing'])

Amount = Annotated[Decimal, Path(gt=0)]
Service = Annotated[PricingService, Depends(get_pricing_service)]


@router.get(
	'/rate',
	response_model=CurrentRateResponse,
	status_code=status.HTTP_200_OK,
	summary='Get the current conversion rate',
)
async def get_current_rate(service: Service) -> CurrentRateResponse:
	current = service.get_current_rate()
	return CurrentRateResponse(
		rate=ConversionRateResponse.from_domain(current) if current else None,
		age_minutes=service.get_rate_age(),
		is_stale=service.is_rate_stale(),
	)


@router.post(
	'/rate/refresh',
	response_model=ConversionRateResponse,
	status_code=status.HTTP_200_OK,
	summary='Resolve the rate now, outside the refresh schedule',
)
async def force_update(service: Service) -> ConversionRateResponse:
	rate = await service.force_update()
	return ConversionRateResponse.from_domain(rate)


@router.get(
	'/rate/staleness',
	response_model=StalenessResponse,
	status_code=status.HTTP_200_OK,
	summary='Check whether the current rate is older than a threshold',
)
async def get_staleness(
	service: Service,
	threshold_minutes: Annotated[float, Query(gt=0)] = 5,
) -> StalenessResponse:
	return StalenessResponse(
		age_minutes=service.get_rate_age(),
		threshold_minutes=threshold_minutes,
		is_stale=service.is_rate_stale(threshold_minutes),
	)


@router.get(
	'/history',
	response_model=PriceHistoryResponse,
	status_code=status.HTTP_200_OK,
	summary='List recent per-source price observations',
)
async def get_price_history(service: Service) -> PriceHistoryResponse:
	return PriceHistoryResponse(
		observations=[PriceObservationResponse.from_domain(o) for o in service.get_price_history()]
	)


@router.get(
	'/config',
	response_model=PricingConfigResponse,
	status_code=status.HTTP_200_OK,
	summary='Get the pricing configuration',
)
async def get_config(service: Service) -> PricingConfigResponse:
	return PricingConfigResponse.from_domain(service.get_config())


@router.patch(
	'/config',
	response_model=PricingConfigResponse,
	status_code=status.HTTP_200_OK,
	summary='Update part of the pricing configuration',
)
async def update_config(request: ConfigUpdateRequest, service: Service) -> PricingConfigResponse:
	updated = service.update_config(**request.changes())
	return PricingConfigResponse.from_domain(updated)


@router.get(
	'/convert/to-target/{amount}',
	response_model=ConversionResponse,
	status_code=status.HTTP_200_OK,
	summary='Convert a base-currency amount into the target currency',
)
async def convert_to_target(amount: Amount, service: Service) -> ConversionResponse:
	config = service.get_config()
	current = service.get_current_rate()
	return ConversionResponse(
		from_currency=config.base_currency,
		to_currency=config.target_currency,
		original_amount=amount,
		converted_amount=service.convert_to_target(amount),
		exchange_rate=current.rate if current else config.fallback_rate,
		source=current.source_label if current else 'fallback',
	)


@router.get(
	'/convert/to-base/{amount}',
	response_model=ConversionResponse,
	status_code=status.HTTP_200_OK,
	summary='Convert a target-currency amount into the base currency',
)
async def convert_to_base(amount: Amount, service: Service) -> ConversionResponse:
	config = service.get_config()
	current = service.get_current_rate()
	return ConversionResponse(
		from_currency=config.target_currency,
		to_currency=config.base_currency,
		original_amount=amount,
		converted_amount=service.convert_to_base(amount),
		exchange_rate=current.rate if current else config.fallback_rate,
		source=current.source_label if current else 'fallback',
	)
