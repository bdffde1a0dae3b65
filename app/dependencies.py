# =============================================================================
# app/dependencies.py - Shared Dependencies
# =============================================================================
# FastAPI dependency injection for shared resources.
# The ERP client is created once in the app lifespan and stored on
# app.state; routes receive it through RequestContext instead of reaching
# for a module global.
# =============================================================================

from dataclasses import dataclass
from typing import Annotated, Any

from fastapi import Body, Depends, Request

from app.config import Settings, get_settings
from app.exceptions import ConfigurationError
from lib.erp_client import ERPClient


@dataclass
class RequestContext:
    """
    Per-request handle on the gateway's shared resources.

    Attributes:
        settings: Application settings
        client: The process-wide ERP client (None when not configured)
        endpoint: "METHOD /path" label used in logs
    """
    settings: Settings
    client: ERPClient | None
    endpoint: str = "unknown"

    def check_configuration(self) -> None:
        """
        Raises:
            ConfigurationError: If URL, key or secret is missing
        """
        missing = self.settings.missing_erp_settings
        if missing or self.client is None:
            raise ConfigurationError(missing)

    @property
    def erp(self) -> ERPClient:
        """The ERP client, checked for configuration."""
        self.check_configuration()
        return self.client


def get_request_context(request: Request) -> RequestContext:
    """
    Build the RequestContext for the current request.

    Returns the client stored by the lifespan handler (or None).
    """
    return RequestContext(
        settings=get_settings(),
        client=getattr(request.app.state, "erp_client", None),
        endpoint=f"{request.method} {request.url.path}",
    )


# Type aliases for dependency injection
ApiContext = Annotated[RequestContext, Depends(get_request_context)]

# Free-form JSON object body; presence of required keys is checked by the
# route so missing fields come back as an application error envelope
JsonBody = Annotated[dict[str, Any], Body()]
