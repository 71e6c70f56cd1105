"""Translate engine errors into HTTP responses.

Every RegistryError leaves the API as

    {"error": "<kind>", "detail": "<message>", "field": "<field>"}

with ``field`` present only for InvalidPayload.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from credential_registry.core.errors import InvalidPayloadError, RegistryError
from credential_registry.core.metrics import REGISTRY_ERRORS

logger = logging.getLogger(__name__)

STATUS_BY_KIND: dict[str, int] = {
    "Unauthorized": status.HTTP_403_FORBIDDEN,
    "RoleMismatch": status.HTTP_403_FORBIDDEN,
    "AlreadyRegistered": status.HTTP_409_CONFLICT,
    "AlreadyRegisteredIssuer": status.HTTP_409_CONFLICT,
    "NotRegistered": status.HTTP_404_NOT_FOUND,
    "InvalidPayload": status.HTTP_422_UNPROCESSABLE_CONTENT,
    "InvalidState": status.HTTP_409_CONFLICT,
    "NotFound": status.HTTP_404_NOT_FOUND,
}


def error_body(exc: RegistryError) -> dict[str, str]:
    body = {"error": exc.kind, "detail": exc.message}
    if isinstance(exc, InvalidPayloadError):
        body["field"] = exc.field
    return body


async def registry_error_handler(request: Request, exc: Exception) -> JSONResponse:
    assert isinstance(exc, RegistryError)
    status_code = STATUS_BY_KIND.get(exc.kind, status.HTTP_400_BAD_REQUEST)
    REGISTRY_ERRORS.labels(kind=exc.kind).inc()
    logger.info(
        "%s %s rejected: %s %s",
        request.method,
        request.url.path,
        exc.kind,
        exc.message,
    )
    return JSONResponse(status_code=status_code, content=error_body(exc))


def install_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(RegistryError, registry_error_handler)
