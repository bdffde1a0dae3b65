# =============================================================================
# app/exceptions.py - Custom Exceptions and Handlers
# =============================================================================
# Gateway-side errors (configuration, authentication, bad input) and the
# FastAPI handlers that turn anything escaping a route into the standard
# failure envelope. Errors coming back from the ERP are represented by
# lib.erp_client.ERPClientError and classified in core.services.error_mapping.
# =============================================================================

import logging
from typing import Any

from fastapi import Request
from fastapi.responses import JSONResponse

from core.models.envelope import ErrorEnvelope, ErrorKind

logger = logging.getLogger(__name__)


class GatewayException(Exception):
    """
    Base exception for the gateway.

    All custom exceptions inherit from this class. The code is one of the
    ErrorKind values so the classifier can pass it through untouched.
    """

    def __init__(
        self,
        message: str,
        code: ErrorKind = ErrorKind.APPLICATION_ERROR,
        status_code: int = 500,
        suggestion: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.status_code = status_code
        self.suggestion = suggestion
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to the failure envelope body."""
        return ErrorEnvelope(
            error=self.message,
            details=self.details or None,
            status_code=self.status_code,
            kind=self.code,
            suggestion=self.suggestion,
        ).to_content()


# =============================================================================
# Configuration / Authentication
# =============================================================================

class ConfigurationError(GatewayException):
    """Raised when the ERP connection variables are not set."""

    def __init__(self, missing: list[str] | None = None):
        super().__init__(
            message="Missing ERP API environment variables",
            code=ErrorKind.CONFIGURATION_MISSING,
            status_code=500,
            suggestion="Set ERP_API_URL, ERP_API_KEY and ERP_API_SECRET and restart the gateway",
            details={"missing": missing} if missing else None,
        )


class AuthenticationError(GatewayException):
    """
    Raised when an endpoint requires an ERP session and none is available.

    `failed=True` means the logged-in-user lookup itself raised; otherwise
    it simply returned no user.
    """

    def __init__(self, reason: str | None = None, failed: bool = False):
        super().__init__(
            message="Authentication failed" if failed else "Authentication required",
            code=ErrorKind.AUTHENTICATION_FAILED if failed else ErrorKind.AUTHENTICATION_REQUIRED,
            status_code=401,
            suggestion="Check that the ERP API key belongs to an enabled user",
            details={"reason": reason} if reason else None,
        )


# =============================================================================
# Request / Application Errors
# =============================================================================

class ApplicationError(GatewayException):
    """Raised by a route for a condition it detected itself."""

    def __init__(self, message: str, status_code: int = 400, details: dict[str, Any] | None = None):
        super().__init__(
            message=message,
            code=ErrorKind.APPLICATION_ERROR,
            status_code=status_code,
            details=details,
        )


class MissingFieldsError(ApplicationError):
    """Raised before any ERP call when required input is absent."""

    def __init__(self, fields: list[str]):
        super().__init__(
            message=f"Missing required fields: {', '.join(fields)}",
            status_code=400,
            details={"fields": fields},
        )
        self.fields = fields


class DocumentNotFoundError(ApplicationError):
    """Raised when the ERP answers a lookup with an empty document."""

    def __init__(self, doctype: str, name: str):
        super().__init__(
            message=f"{doctype} not found: {name}",
            status_code=404,
            details={"doctype": doctype, "name": name},
        )


class FileTooLargeError(ApplicationError):
    """Raised when an uploaded file exceeds MAX_UPLOAD_SIZE_MB."""

    def __init__(self, size_mb: float, max_size_mb: int):
        super().__init__(
            message=f"File too large ({size_mb:.1f}MB). Maximum size is {max_size_mb}MB.",
            status_code=413,
            details={"size_mb": round(size_mb, 2), "max_size_mb": max_size_mb},
        )


# =============================================================================
# Exception Handlers
# =============================================================================

async def gateway_exception_handler(
    request: Request,
    exc: GatewayException
) -> JSONResponse:
    """Convert a GatewayException raised outside a wrapped route."""
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict()
    )


async def unhandled_exception_handler(
    request: Request,
    exc: Exception
) -> JSONResponse:
    """Last resort: nothing reaches the HTTP layer as a bare 500."""
    logger.exception(f"Unexpected error on {request.url.path}: {exc}")
    envelope = ErrorEnvelope(
        error="Unknown Error",
        details=str(exc),
        status_code=500,
        kind=ErrorKind.UNKNOWN_ERROR,
    )
    return JSONResponse(status_code=500, content=envelope.to_content())
