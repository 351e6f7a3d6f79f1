"""
Custom exceptions for the interview coach backend.

Provider failures from both families (question generation and transcription)
share one taxonomy so the API layer can key user-facing messages on the kind
alone, whichever vendor produced the failure.
"""
import logging
from enum import Enum
from typing import Optional
from fastapi import Request, HTTPException
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


# ============================================================================
# Custom Exception Classes
# ============================================================================

class AppError(Exception):
    """Base exception for all application errors."""
    def __init__(self, message: str, details: Optional[dict] = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class ErrorKind(str, Enum):
    """Shared provider error taxonomy."""
    INVALID_API_KEY = "INVALID_API_KEY"
    RATE_LIMIT = "RATE_LIMIT"
    INVALID_REQUEST = "INVALID_REQUEST"
    PROVIDER_ERROR = "PROVIDER_ERROR"


class ProviderError(AppError):
    """
    Raised for request validation and provider-call failures.

    Carries the taxonomy kind and the id of the provider that produced it
    (``"unknown"`` when no provider could be determined).
    """
    def __init__(self, kind: ErrorKind, message: str, provider: str = "unknown"):
        self.kind = ErrorKind(kind)
        self.provider = provider
        super().__init__(message, details={"code": self.kind.value, "provider": provider})

    def __repr__(self) -> str:
        return f"ProviderError(kind={self.kind.value}, provider={self.provider!r}, message={self.message!r})"


class StorageError(AppError):
    """Exception raised when an object cannot be fetched from object storage."""
    pass


class RecordingNotFoundError(AppError):
    """Exception raised when a recording id does not exist in the record store."""
    pass


class ConfigurationError(AppError):
    """Exception raised when configuration is invalid or missing."""
    pass


# ============================================================================
# FastAPI Exception Handlers
# ============================================================================

PROVIDER_ERROR_STATUS = {
    ErrorKind.INVALID_API_KEY: 401,
    ErrorKind.RATE_LIMIT: 429,
    ErrorKind.INVALID_REQUEST: 400,
    ErrorKind.PROVIDER_ERROR: 502,
}


async def provider_exception_handler(request: Request, exc: ProviderError):
    logger.warning(f"Provider error [{exc.kind.value}] from {exc.provider}: {exc.message}")
    return JSONResponse(
        status_code=PROVIDER_ERROR_STATUS[exc.kind],
        content={"detail": exc.message, "code": exc.kind.value, "provider": exc.provider},
    )


async def not_found_exception_handler(request: Request, exc: RecordingNotFoundError):
    logger.warning(f"Not found: {exc.message}")
    return JSONResponse(status_code=404, content={"detail": exc.message})


async def app_exception_handler(request: Request, exc: AppError):
    logger.error(f"Application error: {exc.message}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content={"detail": exc.message, **exc.details},
    )


async def global_exception_handler(request: Request, exc: Exception):
    logger.error(f"Global exception: {exc}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal Server Error", "error": str(exc)},
    )


async def http_exception_handler(request: Request, exc: HTTPException):
    logger.warning(f"HTTP exception: {exc.detail}")
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail},
    )
