"""Map domain errors to the API error contract.

Every failure leaves the API as::

    {"error": {"code": "INVALID_CREDENTIALS", "message": "Invalid email or password."}}

with the HTTP status taken from STATUS_BY_CODE.
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pymongo.errors import PyMongoError

from adapter.jsonfile.store import CorruptStoreError
from domain.model.errors import DomainError

logger = logging.getLogger(__name__)

STORAGE_UNAVAILABLE = "STORAGE_UNAVAILABLE"

STATUS_BY_CODE = {
    "VALIDATION_ERROR": status.HTTP_400_BAD_REQUEST,
    "NOT_FOUND": status.HTTP_404_NOT_FOUND,
    "DUPLICATE": status.HTTP_409_CONFLICT,
    "DUPLICATE_EMAIL": status.HTTP_409_CONFLICT,
    "PERMISSION_DENIED": status.HTTP_403_FORBIDDEN,
    "AUTHENTICATION_FAILED": status.HTTP_401_UNAUTHORIZED,
    "INVALID_CREDENTIALS": status.HTTP_401_UNAUTHORIZED,
    "INVALID_SESSION": status.HTTP_401_UNAUTHORIZED,
    "USER_NOT_FOUND": status.HTTP_401_UNAUTHORIZED,
    "FEDERATED_LOGIN_FAILED": status.HTTP_401_UNAUTHORIZED,
    "INVALID_TOKEN": status.HTTP_401_UNAUTHORIZED,
    "AUDIENCE_MISMATCH": status.HTTP_401_UNAUTHORIZED,
    "INCOMPLETE_PROFILE": 422,
    "IDENTITY_PROVIDER_ERROR": status.HTTP_502_BAD_GATEWAY,
    "ACCOUNT_LINK_REFUSED": status.HTTP_409_CONFLICT,
    STORAGE_UNAVAILABLE: status.HTTP_503_SERVICE_UNAVAILABLE,
}


def error_response(code: str, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=STATUS_BY_CODE.get(code, status.HTTP_400_BAD_REQUEST),
        content={"error": {"code": code, "message": message}},
    )


async def handle_domain_error(request: Request, exc: DomainError) -> JSONResponse:
    logger.info("Request rejected", extra={"code": exc.code, "path": request.url.path})
    return error_response(exc.code, exc.message)


async def handle_storage_error(request: Request, exc: Exception) -> JSONResponse:
    logger.error(
        "Storage failure",
        extra={"path": request.url.path, "error": str(exc)[:200]},
        exc_info=exc,
    )
    return error_response(STORAGE_UNAVAILABLE, "Storage is temporarily unavailable")


async def handle_request_validation(request: Request, exc: RequestValidationError) -> JSONResponse:
    fields = [".".join(str(p) for p in err.get("loc", ())[1:]) for err in exc.errors()]
    message = "Invalid request: " + ", ".join(f for f in fields if f) if fields else "Invalid request"
    return error_response("VALIDATION_ERROR", message)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(DomainError, handle_domain_error)
    app.add_exception_handler(PyMongoError, handle_storage_error)
    app.add_exception_handler(OSError, handle_storage_error)
    app.add_exception_handler(CorruptStoreError, handle_storage_error)
    app.add_exception_handler(RequestValidationError, handle_request_validation)
