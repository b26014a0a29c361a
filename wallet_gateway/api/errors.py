"""Translate domain exceptions into the HTTP error envelope"""

import logging
from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.responses import Response

from wallet_gateway.api.dependencies import get_request_id
from wallet_gateway.domain.exceptions import AccessDenied, DomainException, StoreFailure

logger = logging.getLogger(__name__)


async def domain_exception_handler(request: Request, exc: DomainException) -> Response:
    """
    Map business failures to status codes.

    - AccessDenied → 403 {"message": ...}
    - StoreFailure → 500, empty body (no internal detail leaves the service)
    - any other DomainException → 400 {"message": ...}
    """
    if isinstance(exc, StoreFailure):
        logger.error(
            "Store failure",
            extra={"request_id": get_request_id(request), "error_type": type(exc).__name__, "path": request.url.path},
        )
        return Response(status_code=500)

    status_code = 403 if isinstance(exc, AccessDenied) else 400
    return JSONResponse(status_code=status_code, content={"message": exc.detail})


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(status_code=400, content={"message": jsonable_encoder(exc.errors())})


async def unexpected_exception_handler(request: Request, exc: Exception) -> Response:
    logger.error(
        "Unexpected error",
        exc_info=exc,
        extra={"request_id": get_request_id(request), "error_type": type(exc).__name__, "path": request.url.path},
    )
    return Response(status_code=500)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(DomainException, domain_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, unexpected_exception_handler)
