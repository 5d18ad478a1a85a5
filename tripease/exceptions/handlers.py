import logging

from fastapi import Request
from fastapi.responses import JSONResponse

from .custom import CatalogError

logger = logging.getLogger(__name__)


async def catalog_error_handler(_request: Request, exc: CatalogError) -> JSONResponse:
    logger.error("Catalog error: %s", exc.message)
    return JSONResponse(
        status_code=503,
        content={"detail": f"Catalog unavailable: {exc.message}"},
    )
