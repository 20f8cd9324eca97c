import asyncio
import json
import logging
from typing import Annotated

from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect

from api.dependencies import get_pricing_service
from application.services import PricingService
from domain.models.pricing import ConversionRate
from infrastructure.cache.redis_cache import rate_to_dict

logger = logging.getLogger(__name__)

router = APIRouter(prefix='/api', tags=['websockets'])


def rate_update_message(rate: ConversionRate) -> str:
	return json.dumps({'type': 'rate_update', **rate_to_dict(rate)})


@router.websocket('/ws/rates')
async def websocket_rates_endpoint(
	websocket: WebSocket,
	service: Annotated[PricingService, Depends(get_pricing_service)],
):
	"""
	Streams every resolved rate to the client.

	Message format sent to client:
	{
		"type": "rate_update",
		"from_currency": "USDC",
		"to_currency": "GHS",
		"rate": "12.5125",
		"observed_at": "2025-10-01T10:00:00+00:00",
		"source_label": "binance"
	}
	"""
	await websocket.accept()

	updates: asyncio.Queue[ConversionRate] = asyncio.Queue()
	unsubscribe = service.subscribe(updates.put_nowait)
	logger.info(f'WebSocket connected; {len(service.hub)} rate subscribers')

	async def forward_updates() -> None:
		while True:
			rate = await updates.get()
			await websocket.send_text(rate_update_message(rate))

	sender: asyncio.Task | None = None
	try:
		current = service.get_current_rate()
		if current is not None:
			await websocket.send_text(rate_update_message(current))

		sender = asyncio.create_task(forward_updates())
		# Client messages are ignored; receiving is how a disconnect is noticed
		while True:
			await websocket.receive_text()
	except WebSocketDisconnect:
		logger.info('Client disconnected')
	finally:
		unsubscribe()
		if sender is not None:
			sender.cancel()
