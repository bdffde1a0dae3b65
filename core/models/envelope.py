# =============================================================================
# core/models/envelope.py - Response Envelope Schemas
# =============================================================================
# Every gateway endpoint answers with one of two shapes:
#
#   {"success": true,  "data": ..., "message": "Request successful"}
#   {"success": false, "error": "...", "details": ..., "statusCode": 404}
#
# ErrorKind enumerates every way a request can fail. The HTTP status of a
# failure always equals the statusCode in its body.
# =============================================================================

from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

SUCCESS_MESSAGE = "Request successful"


class ErrorKind(str, Enum):
    """
    Classification of a failed request.

    Upstream kinds come from the ERP's answer; the rest are raised by the
    gateway itself before or after talking to the ERP.
    """
    CONFIGURATION_MISSING = "CONFIGURATION_MISSING"
    AUTHENTICATION_REQUIRED = "AUTHENTICATION_REQUIRED"
    AUTHENTICATION_FAILED = "AUTHENTICATION_FAILED"
    UPSTREAM_NOT_FOUND = "UPSTREAM_NOT_FOUND"
    UPSTREAM_PERMISSION_DENIED = "UPSTREAM_PERMISSION_DENIED"
    UPSTREAM_DUPLICATE = "UPSTREAM_DUPLICATE"
    UPSTREAM_VALIDATION_FAILED = "UPSTREAM_VALIDATION_FAILED"
    UPSTREAM_UNKNOWN = "UPSTREAM_UNKNOWN"
    APPLICATION_ERROR = "APPLICATION_ERROR"
    UNKNOWN_ERROR = "UNKNOWN_ERROR"


class SuccessEnvelope(BaseModel):
    """Body of every successful response."""
    success: Literal[True] = True
    data: Any = None
    message: str = SUCCESS_MESSAGE


class ErrorEnvelope(BaseModel):
    """
    Body of every failed response.

    `error` is a short human string, `details` carries the raw underlying
    message (or structured context), `cause` the upstream exception info
    when the ERP supplied any.
    """
    model_config = ConfigDict(populate_by_name=True)

    success: Literal[False] = False
    error: str
    details: Any = None
    status_code: int = Field(default=500, serialization_alias="statusCode")
    kind: ErrorKind | None = None
    suggestion: str | None = None
    cause: dict[str, Any] | None = None

    def to_content(self) -> dict[str, Any]:
        """Serialize for a JSONResponse (camelCase statusCode, no empty keys)."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
