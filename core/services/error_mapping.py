# =============================================================================
# core/services/error_mapping.py - Failure Classification
# =============================================================================
# Turns any exception raised while serving a request into a ClassifiedError:
# the ErrorKind, HTTP status, short error text and raw details that make up
# the failure envelope.
#
# ERP errors are matched against UPSTREAM_RULES, checking Frappe's structured
# exc_type first and falling back to case-insensitive substrings of the
# message. The first matching rule wins; rule order is part of the contract.
# =============================================================================

from dataclasses import dataclass, field
from typing import Any

import httpx

from app.exceptions import GatewayException
from core.models.envelope import ErrorEnvelope, ErrorKind
from lib.erp_client import ERPClientError


@dataclass(frozen=True)
class UpstreamRule:
    """One row of the upstream classification table."""
    kind: ErrorKind
    status_code: int
    error: str
    exc_types: tuple[str, ...]
    substrings: tuple[str, ...]

    def matches_type(self, exc_type: str | None) -> bool:
        return bool(exc_type) and exc_type in self.exc_types

    def matches_text(self, text: str) -> bool:
        return any(needle in text for needle in self.substrings)


UPSTREAM_RULES: tuple[UpstreamRule, ...] = (
    UpstreamRule(
        kind=ErrorKind.UPSTREAM_NOT_FOUND,
        status_code=404,
        error="The requested resource was not found",
        exc_types=("DoesNotExistError",),
        substrings=("does not exist", "not found"),
    ),
    UpstreamRule(
        kind=ErrorKind.UPSTREAM_PERMISSION_DENIED,
        status_code=403,
        error="You do not have permission to perform this action",
        exc_types=("PermissionError",),
        substrings=("permission", "access"),
    ),
    UpstreamRule(
        kind=ErrorKind.UPSTREAM_DUPLICATE,
        status_code=409,
        error="A record with these details already exists",
        exc_types=("DuplicateEntryError", "UniqueValidationError"),
        substrings=("duplicate", "already exists"),
    ),
    UpstreamRule(
        kind=ErrorKind.UPSTREAM_VALIDATION_FAILED,
        status_code=400,
        error="Required fields are missing or invalid",
        exc_types=("MandatoryError",),
        substrings=("required", "mandatory"),
    ),
)

UPSTREAM_DEFAULT_ERROR = "ERP API Error"
UNKNOWN_ERROR = "Unknown Error"


@dataclass
class ClassifiedError:
    """Everything needed to render a failure envelope."""
    kind: ErrorKind
    status_code: int
    error: str
    details: Any = None
    suggestion: str | None = None
    cause: dict[str, Any] | None = field(default=None)

    def to_envelope(self) -> ErrorEnvelope:
        return ErrorEnvelope(
            error=self.error,
            details=self.details,
            status_code=self.status_code,
            kind=self.kind,
            suggestion=self.suggestion,
            cause=self.cause or None,
        )


def match_upstream_rule(
    message: str | None,
    exc_type: str | None = None,
) -> UpstreamRule | None:
    """
    Find the classification rule for an ERP error.

    Args:
        message: The ERP's error text (any case)
        exc_type: Frappe's exception class name, when provided

    Returns:
        The matching rule, or None for an unrecognized error
    """
    for rule in UPSTREAM_RULES:
        if rule.matches_type(exc_type):
            return rule

    text = (message or "").lower()
    for rule in UPSTREAM_RULES:
        if rule.matches_text(text):
            return rule
    return None


def classify_upstream_error(exc: ERPClientError) -> ClassifiedError:
    """Classify an error answer from the ERP."""
    text = " ".join(part for part in (exc.message, exc.exception) if part)
    rule = match_upstream_rule(text, exc.exc_type)

    if rule is None:
        return ClassifiedError(
            kind=ErrorKind.UPSTREAM_UNKNOWN,
            status_code=exc.http_status or 500,
            error=UPSTREAM_DEFAULT_ERROR,
            details=exc.message,
            cause=exc.to_cause(),
        )

    return ClassifiedError(
        kind=rule.kind,
        status_code=rule.status_code,
        error=rule.error,
        details=exc.message,
        cause=exc.to_cause(),
    )


def classify_error(exc: BaseException) -> ClassifiedError:
    """
    Classify any exception raised while serving a request.

    - GatewayException: keeps its own kind, status and message
    - ERPClientError: looked up in UPSTREAM_RULES
    - httpx.RequestError: ERP unreachable, unknown upstream error
    - anything else: UNKNOWN_ERROR / 500
    """
    if isinstance(exc, GatewayException):
        return ClassifiedError(
            kind=exc.code,
            status_code=exc.status_code,
            error=exc.message,
            details=exc.details or None,
            suggestion=exc.suggestion,
        )

    if isinstance(exc, ERPClientError):
        return classify_upstream_error(exc)

    if isinstance(exc, httpx.RequestError):
        return ClassifiedError(
            kind=ErrorKind.UPSTREAM_UNKNOWN,
            status_code=500,
            error=UPSTREAM_DEFAULT_ERROR,
            details=f"{type(exc).__name__}: {exc}",
            suggestion="Check that ERP_API_URL is reachable from the gateway",
        )

    return ClassifiedError(
        kind=ErrorKind.UNKNOWN_ERROR,
        status_code=500,
        error=UNKNOWN_ERROR,
        details=str(exc) or type(exc).__name__,
    )
