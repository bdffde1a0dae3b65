# =============================================================================
# app/routers/health.py - Health Check and Diagnostic Endpoints
# =============================================================================
# Health endpoints for monitoring and load balancers, plus two diagnostics:
# - /test-env reports which ERP variables are set (never their values,
#   except the URL)
# - /test-api checks the ERP session of the configured API user
# =============================================================================

from datetime import datetime, timezone

from fastapi import APIRouter
from pydantic import BaseModel

from app.config import settings
from app.dependencies import ApiContext
from app.handler import ensure_authenticated, handle_api_request
from core.models.envelope import SuccessEnvelope

router = APIRouter()

NOT_SET = "Not set"


# =============================================================================
# Response Models
# =============================================================================

class HealthResponse(BaseModel):
    status: str
    timestamp: str
    environment: str
    version: str


class ChecksResponse(BaseModel):
    """Outcome per readiness check ("healthy", "unknown" or the failure)."""
    configuration: str
    erp: str


class ReadinessResponse(BaseModel):
    status: str
    checks: ChecksResponse
    timestamp: str


class LivenessResponse(BaseModel):
    status: str
    timestamp: str


class EnvironmentReport(BaseModel):
    """Which ERP connection variables are configured."""
    url: str
    key: str
    secret: str


# =============================================================================
# Endpoints
# =============================================================================

@router.get("/health", response_model=HealthResponse)
async def health_check():
    """Static health answer for load balancers; never calls the ERP."""
    return HealthResponse(
        status="healthy",
        timestamp=datetime.now(timezone.utc).isoformat(),
        environment=settings.ENVIRONMENT,
        version="1.0.0",
    )


@router.get("/health/ready", response_model=ReadinessResponse)
async def readiness_check(ctx: ApiContext):
    """
    Ready when the ERP settings are present and the ERP accepts the
    credentials (a logged-in user comes back). Anything else is "degraded"
    with the failing check spelled out.
    """
    checks = ChecksResponse(configuration="unknown", erp="unknown")

    missing = ctx.settings.missing_erp_settings
    if missing:
        checks.configuration = f"missing: {', '.join(missing)}"
    elif ctx.client is None:
        checks.configuration = "client not initialized"
    else:
        checks.configuration = "healthy"

    if checks.configuration == "healthy":
        try:
            await ensure_authenticated(ctx)
            checks.erp = "healthy"
        except Exception as e:
            checks.erp = f"unhealthy: {str(e)[:50]}"

    all_healthy = checks.configuration == "healthy" and checks.erp == "healthy"

    return ReadinessResponse(
        status="ready" if all_healthy else "degraded",
        checks=checks,
        timestamp=datetime.now(timezone.utc).isoformat(),
    )


@router.get("/health/live", response_model=LivenessResponse)
async def liveness_check():
    """The process answers; nothing else is checked."""
    return LivenessResponse(
        status="alive",
        timestamp=datetime.now(timezone.utc).isoformat(),
    )


@router.get("/test-env")
async def test_env(ctx: ApiContext):
    """
    Report the ERP configuration without leaking secrets.

    Works even when nothing is configured, so it does not go through the
    configuration check.
    """
    report = EnvironmentReport(
        url=ctx.settings.ERP_API_URL or NOT_SET,
        key="Set" if ctx.settings.ERP_API_KEY else NOT_SET,
        secret="Set" if ctx.settings.ERP_API_SECRET else NOT_SET,
    )
    return SuccessEnvelope(data=report.model_dump())


@router.get("/test-api")
async def test_api(ctx: ApiContext):
    """Return the ERP user the gateway is logged in as."""
    async def produce():
        user = await ctx.erp.auth.get_logged_in_user()
        return {"user": user, "timestamp": datetime.now(timezone.utc).isoformat()}

    return await handle_api_request(ctx, produce)
