# app/api/errors.py
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import DisconnectionError, OperationalError
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.domain.errors import StoreError
from app.utils.logging import get_logger

logger = get_logger(__name__)


def _message(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"message": message})


async def store_error_handler(request: Request, exc: StoreError):
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path}: {exc.message}")
    return _message(exc.status_code, exc.message)


async def request_validation_handler(request: Request, exc: RequestValidationError):
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ()) if p != "body")
        parts.append(f"{loc}: {err.get('msg')}" if loc else str(err.get("msg")))
    return _message(400, "; ".join(parts) or "Invalid request")


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return _message(exc.status_code, str(exc.detail))


async def datastore_error_handler(request: Request, exc: Exception):
    logger.error(f"Database error on {request.method} {request.url.path}: {exc}")
    datastore = getattr(request.app.state, "datastore", None)
    if datastore is not None:
        datastore.check()
    return _message(503, "Unable to connect to the database. Please check your database connection.")


async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return _message(500, "Internal server error")


def register_error_handlers(app: FastAPI):
    app.add_exception_handler(StoreError, store_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(OperationalError, datastore_error_handler)
    app.add_exception_handler(DisconnectionError, datastore_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
