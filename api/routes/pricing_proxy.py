import logging
from typing import Annotated

import httpx
from fastapi import APIRouter, Depends, Query, Response
from fastapi.responses import JSONResponse

from api.dependencies import get_http_client
from config.settings import get_settings
from infrastructure.relay import RelayRoutingError, build_upstream_request

logger = logging.getLogger(__name__)

router = APIRouter(prefix='/api', tags=['relay'])


@router.get('/pricing-proxy', summary='Forward a pricing request to an upstream provider')
async def pricing_proxy(
	client: Annotated[httpx.AsyncClient, Depends(get_http_client)],
	source: Annotated[str | None, Query()] = None,
	symbol: Annotated[str | None, Query()] = None,
) -> Response:
	try:
		url, params = build_upstream_request(source, symbol)
	except RelayRoutingError as e:
		return JSONResponse(status_code=400, content={'error': str(e)})

	try:
		upstream = await client.get(url, params=params, timeout=get_settings().REQUEST_TIMEOUT_SECONDS)
	except httpx.HTTPError as e:
		logger.error(f'Pricing proxy error for {source}/{symbol}: {e.__class__.__name__}: {e}')
		return JSONResponse(status_code=500, content={'error': 'Failed to fetch pricing data'})

	return Response(
		content=upstream.content,
		status_code=upstream.status_code,
		media_type=upstream.headers.get('content-type', 'application/json'),
	)
