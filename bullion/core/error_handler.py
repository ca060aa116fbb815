"""
Global exception handlers.
HTTPException subclasses from bullion.core.exceptions keep FastAPI's default
handling; everything else is logged and returned as a 500 payload.
"""

import logging
from fastapi import Request, status
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from bullion.core.exceptions import DatabaseError

logger = logging.getLogger(__name__)


async def database_exception_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.error(
        "Database error on %s %s: %s", request.method, request.url.path, exc
    )
    error = DatabaseError()
    return JSONResponse(
        status_code=error.status_code,
        content={"success": False, "message": error.detail},
    )


async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"success": False, "message": str(exc) or "Internal Server Error"},
    )
