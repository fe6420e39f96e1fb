import logging
import sys
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI

from app.config import Settings
from app.exceptions.custom import ConfigurationError, TransportError, UpstreamError
from app.exceptions.handlers import (
    configuration_error_handler,
    transport_error_handler,
    upstream_error_handler,
)
from app.routers.elevenlabs import router as elevenlabs_router
from app.services.elevenlabs import ElevenLabsGateway

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = Settings()

    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stdout,
    )
    logging.getLogger("httpx").setLevel(logging.WARNING)

    if not settings.elevenlabs_api_key:
        logger.warning("ELEVENLABS_API_KEY is not set; every proxied request will fail")

    async with httpx.AsyncClient(timeout=settings.http_timeout) as client:
        app.state.gateway = ElevenLabsGateway(
            client,
            settings.elevenlabs_api_key,
            api_base=settings.elevenlabs_api_base,
            call_provider=settings.elevenlabs_call_provider,
        )
        yield


app = FastAPI(title="Voice Agent Console", lifespan=lifespan)

app.add_exception_handler(ConfigurationError, configuration_error_handler)
app.add_exception_handler(UpstreamError, upstream_error_handler)
app.add_exception_handler(TransportError, transport_error_handler)

app.include_router(elevenlabs_router)
