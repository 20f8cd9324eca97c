import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from api.dependencies import cleanup_dependencies, deps, init_dependencies
from api.error_handlers import register_exception_handlers
from api.routes import health, pricing, pricing_proxy, websockets
from config.settings import get_settings
from infrastructure.monitoring.logger import configure_logging

settings = get_settings()

configure_logging('DEBUG' if settings.DEBUG else settings.LOG_LEVEL, json_logs=settings.JSON_LOGS)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
	logger.info('Starting pricing service API...')

	init_dependencies(relay_app=app)
	if deps.pricing_service is None:
		raise RuntimeError('Pricing service not initialized')
	await deps.pricing_service.start()

	logger.info('Application ready')

	yield

	logger.info('Shutting down...')
	await cleanup_dependencies()


app = FastAPI(title=settings.APP_NAME, lifespan=lifespan)


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
	logger.error(f'Unhandled exception: {exc}', exc_info=True)
	return JSONResponse(status_code=500, content={'detail': 'Internal server error'})


app.include_router(health.router)
app.include_router(pricing.router)
app.include_router(pricing_proxy.router)
app.include_router(websockets.router)
register_exception_handlers(app)
