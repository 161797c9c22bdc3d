"""
Maps commission exceptions to HTTP responses.

Services raise typed exceptions only; this is the one place that turns
them into status codes.
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from commission_ledger.errors import (
    ActorNotFound,
    AlreadyDistributed,
    CommissionError,
    ConfigNotFound,
    ConfigNotFoundById,
    DistributionNotFound,
    HierarchyIncomplete,
    HierarchyIntegrityError,
    InsufficientBalance,
    InvalidCommissionConfig,
    InvalidCommissionInput,
    PrivilegeRequired,
)

logger = logging.getLogger(__name__)

# Checked in order, so subclasses must come before their bases
STATUS_CODES = (
    (ConfigNotFound, status.HTTP_404_NOT_FOUND),
    (ConfigNotFoundById, status.HTTP_404_NOT_FOUND),
    (ActorNotFound, status.HTTP_404_NOT_FOUND),
    (DistributionNotFound, status.HTTP_404_NOT_FOUND),
    (HierarchyIntegrityError, status.HTTP_409_CONFLICT),
    (AlreadyDistributed, status.HTTP_409_CONFLICT),
    (InsufficientBalance, status.HTTP_409_CONFLICT),
    (HierarchyIncomplete, status.HTTP_422_UNPROCESSABLE_ENTITY),
    (InvalidCommissionInput, status.HTTP_422_UNPROCESSABLE_ENTITY),
    (InvalidCommissionConfig, status.HTTP_422_UNPROCESSABLE_ENTITY),
    (PrivilegeRequired, status.HTTP_403_FORBIDDEN),
)


def status_for(exc: CommissionError) -> int:
    for exc_type, code in STATUS_CODES:
        if isinstance(exc, exc_type):
            return code
    return status.HTTP_400_BAD_REQUEST


async def commission_error_handler(request: Request, exc: CommissionError) -> JSONResponse:
    code = status_for(exc)
    logger.info(f"{request.method} {request.url.path} -> {code}: {exc}")
    return JSONResponse(
        status_code=code,
        content={"detail": str(exc), "error": type(exc).__name__},
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(CommissionError, commission_error_handler)
