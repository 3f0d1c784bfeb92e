import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from resume_forge.app.core.exceptions import (
    CheckoutFailed,
    GenerationFailed,
    GeneratorError,
    InsufficientCredits,
    InvalidInput,
    InvalidSignature,
    MalformedEvent,
    PaymentsNotConfigured,
    ResumeForgeError,
    StorageUnavailable,
)

log = logging.getLogger(__name__)

# Checked in order; subclasses must come before their bases.
STATUS_BY_ERROR: list[tuple[type[ResumeForgeError], int]] = [
    (InvalidInput, status.HTTP_400_BAD_REQUEST),
    (InsufficientCredits, status.HTTP_402_PAYMENT_REQUIRED),
    (GenerationFailed, status.HTTP_502_BAD_GATEWAY),
    (GeneratorError, status.HTTP_502_BAD_GATEWAY),
    (InvalidSignature, status.HTTP_400_BAD_REQUEST),
    (MalformedEvent, status.HTTP_400_BAD_REQUEST),
    (StorageUnavailable, status.HTTP_503_SERVICE_UNAVAILABLE),
    (PaymentsNotConfigured, status.HTTP_503_SERVICE_UNAVAILABLE),
    (CheckoutFailed, status.HTTP_502_BAD_GATEWAY),
]


def status_for(error: ResumeForgeError) -> int:
    """Return the HTTP status code for an application error."""
    for error_type, status_code in STATUS_BY_ERROR:
        if isinstance(error, error_type):
            return status_code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


def error_body(error: ResumeForgeError) -> dict:
    """Build the JSON error body.

    Args:
        error (ResumeForgeError): The error to render.

    Returns:
        dict: `{"error": {"kind", "message", "retryable", ...}}`. Generation failures
            add the failure `cause` and whether the credit was `refunded`; credit
            shortfalls add the `cost`.

    """
    detail = {
        "kind": error.kind,
        "message": error.message,
        "retryable": error.retryable,
    }
    if isinstance(error, GenerationFailed):
        detail["cause"] = error.cause.kind
        detail["refunded"] = error.refunded
    if isinstance(error, InsufficientCredits):
        detail["cost"] = error.cost
    return {"error": detail}


async def resume_forge_error_handler(request: Request, exc: ResumeForgeError) -> JSONResponse:
    """Render an application error as a JSON response."""
    status_code = status_for(exc)
    _msg = f"{request.method} {request.url.path} failed with {exc.kind} ({status_code}): {exc.message}"
    if status_code >= 500:
        log.error(_msg)
    else:
        log.info(_msg)
    return JSONResponse(status_code=status_code, content=error_body(exc))


def register_error_handlers(app: FastAPI) -> None:
    """Install the application error handler on a FastAPI app."""
    app.add_exception_handler(ResumeForgeError, resume_forge_error_handler)
