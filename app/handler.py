# =============================================================================
# app/handler.py - Request Handler Wrapper
# =============================================================================
# Every ERP-backed endpoint funnels through handle_api_request():
#
#   1. ERP configuration present         -> else CONFIGURATION_MISSING (500)
#   2. (require_auth) ERP user logged in -> else AUTHENTICATION_* (401)
#   3. run the route's producer
#   4. 200 {"success": true, "data": ..., "message": "Request successful"}
#      or  {"success": false, "error": ..., "statusCode": N} at status N
#
# The producer is a zero-argument coroutine function so nothing runs, and no
# ERP document is touched, until both checks have passed.
#
# Usage:
#   @router.get("/customers/{name}")
#   async def get_customer(name: str, ctx: ApiContext):
#       async def produce():
#           return await DocumentService.fetch_document(ctx.erp, "Customer", name)
#       return await handle_api_request(ctx, produce)
# =============================================================================

import logging
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, TypeVar

from fastapi import Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from app.dependencies import RequestContext, get_request_context
from app.exceptions import AuthenticationError, ConfigurationError
from core.models.envelope import ErrorEnvelope, ErrorKind, SuccessEnvelope
from core.services.error_mapping import classify_error

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


async def ensure_authenticated(ctx: RequestContext) -> str:
    """
    Confirm the ERP recognizes the configured API user.

    Returns:
        The logged-in user id

    Raises:
        AuthenticationError: If the lookup fails or returns no user
    """
    try:
        user = await ctx.erp.auth.get_logged_in_user()
    except Exception as e:
        raise AuthenticationError(reason=str(e), failed=True) from e

    if not user:
        raise AuthenticationError()
    return user


async def handle_api_request(
    ctx: RequestContext,
    handler: Callable[[], Awaitable[T]],
    *,
    require_auth: bool = False,
) -> JSONResponse:
    """
    Run a route's producer and wrap the outcome in the response envelope.

    Args:
        ctx: Request context (settings, ERP client, endpoint label)
        handler: Zero-argument coroutine function producing the payload
        require_auth: Check the ERP session before calling handler

    Returns:
        JSONResponse with the success or failure envelope. Never raises.
    """
    logger.info(
        f"API Call: {ctx.endpoint}",
        extra={"endpoint": ctx.endpoint, "timestamp": _timestamp()},
    )

    try:
        ctx.check_configuration()
        if require_auth:
            await ensure_authenticated(ctx)

        data: Any = await handler()

    except Exception as e:
        failure = classify_error(e)
        log_extra = {
            "endpoint": ctx.endpoint,
            "error_kind": failure.kind.value,
            "status_code": failure.status_code,
            "timestamp": _timestamp(),
        }
        if failure.status_code >= 500:
            logger.exception(f"API Error on {ctx.endpoint}: {failure.error}", extra=log_extra)
        else:
            logger.warning(f"API Error on {ctx.endpoint}: {failure.error} ({failure.details})", extra=log_extra)

        return JSONResponse(
            status_code=failure.status_code,
            content=failure.to_envelope().to_content(),
        )

    envelope = SuccessEnvelope(data=jsonable_encoder(data))
    return JSONResponse(status_code=200, content=envelope.model_dump(mode="json"))


async def validation_exception_handler(
    request: Request,
    exc: RequestValidationError
) -> JSONResponse:
    """
    Handle malformed request bodies and parameters.

    FastAPI rejects these before the route body runs, so the configuration
    check is repeated here against the context the route would have
    received. A configured gateway answers 400 APPLICATION_ERROR in the
    envelope instead of FastAPI's own 422 shape.
    """
    context_factory = request.app.dependency_overrides.get(get_request_context, get_request_context)
    ctx: RequestContext = context_factory(request)
    try:
        ctx.check_configuration()
    except ConfigurationError as e:
        logger.warning(f"API Error on {ctx.endpoint}: {e.message}")
        return JSONResponse(status_code=e.status_code, content=e.to_dict())

    logger.info(f"Rejected request to {ctx.endpoint}: {exc.errors()}")
    envelope = ErrorEnvelope(
        error="Invalid request",
        details=jsonable_encoder(exc.errors()),
        status_code=400,
        kind=ErrorKind.APPLICATION_ERROR,
    )
    return JSONResponse(status_code=400, content=envelope.to_content())
