import logging

from fastapi import Request
from fastapi.responses import JSONResponse

from .custom import ConfigurationError, RateLimitError, TransportError, UpstreamError

logger = logging.getLogger(__name__)


async def configuration_error_handler(_request: Request, exc: ConfigurationError) -> JSONResponse:
    logger.error("Configuration error: %s", exc.message)
    return JSONResponse(
        status_code=500,
        content={"error": exc.message},
    )


async def upstream_error_handler(_request: Request, exc: UpstreamError) -> JSONResponse:
    if isinstance(exc, RateLimitError):
        logger.warning("Rate limit hit upstream")
    else:
        logger.error("Upstream error (status=%s): %s", exc.status_code, exc.details)
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.message, "details": exc.details},
    )


async def transport_error_handler(_request: Request, exc: TransportError) -> JSONResponse:
    logger.error("Request to upstream failed: %s", exc.details)
    return JSONResponse(
        status_code=500,
        content={"error": exc.message, "details": exc.details},
    )
