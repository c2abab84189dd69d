"""Map domain and caller errors onto HTTP responses.

    ValidationError / request validation  -> 400
    NotAuthenticated                      -> 401
    AccessDenied                          -> 403
    ObjectNotFoundError                   -> 404
    ExpectedVersionError                  -> 409 (concurrent update of the same aggregate)

Every error body has the shape ``{"error": ...}``.
"""

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from protean.exceptions import ExpectedVersionError, ObjectNotFoundError, ValidationError
from protean.integrations.fastapi import register_exception_handlers

from storefront.shared.exceptions import AccessDenied, NotAuthenticated
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


def _error(status_code: int, error) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": jsonable_encoder(error)})


async def _validation_error(request: Request, exc: ValidationError) -> JSONResponse:
    return _error(400, getattr(exc, "messages", None) or str(exc))


async def _request_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    return _error(400, exc.errors())


async def _not_authenticated(request: Request, exc: NotAuthenticated) -> JSONResponse:
    return _error(401, exc.message)


async def _access_denied(request: Request, exc: AccessDenied) -> JSONResponse:
    logger.info("access_denied", path=request.url.path, reason=exc.message)
    return _error(403, exc.message)


async def _not_found(request: Request, exc: ObjectNotFoundError) -> JSONResponse:
    return _error(404, getattr(exc, "messages", None) or str(exc))


async def _version_conflict(request: Request, exc: ExpectedVersionError) -> JSONResponse:
    logger.warning("concurrent_update_rejected", path=request.url.path)
    return _error(409, "The resource was modified by another request; retry")


def register_error_handlers(app: FastAPI) -> None:
    """Install Protean's handlers, then this application's mapping on top."""
    register_exception_handlers(app)

    app.add_exception_handler(ValidationError, _validation_error)
    app.add_exception_handler(RequestValidationError, _request_validation_error)
    app.add_exception_handler(NotAuthenticated, _not_authenticated)
    app.add_exception_handler(AccessDenied, _access_denied)
    app.add_exception_handler(ObjectNotFoundError, _not_found)
    app.add_exception_handler(ExpectedVersionError, _version_conflict)
