# =============================================================================
# lib/erp_client.py - Frappe/ERPNext Client Wrapper
# =============================================================================
# Async wrapper around the two HTTP surfaces of a Frappe site:
#
#   REST:  /api/resource/<doctype>[/<name>]   (document CRUD and lists)
#   RPC:   /api/method/<dotted.path>          (whitelisted server methods)
#
# One ERPClient is created per process (see app.main lifespan) and shared by
# every request. It holds no per-request state, adds no caching and never
# retries; an error answer from the ERP becomes a single ERPClientError.
#
# Usage:
#   client = ERPClient.from_settings()
#   customer = await client.db.get_doc("Customer", "CUST-0001")
#   user = await client.auth.get_logged_in_user()
# =============================================================================

from __future__ import annotations

import json
import logging
from typing import Any
from urllib.parse import quote

import httpx

from app.config import Settings, get_settings
from app.exceptions import ConfigurationError

# Set up logging for this module
logger = logging.getLogger(__name__)


class ERPClientError(Exception):
    """
    Error answer from the ERP.

    Carries everything Frappe tells us about the failure so the caller can
    classify it: the user-facing message, the HTTP status, the structured
    exception type (e.g. "DoesNotExistError") and the raw exception text.
    """

    def __init__(
        self,
        message: str,
        http_status: int | None = None,
        http_status_text: str | None = None,
        exc_type: str | None = None,
        exception: str | None = None,
        server_messages: list[str] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.http_status = http_status
        self.http_status_text = http_status_text
        self.exc_type = exc_type
        self.exception = exception
        self.server_messages = server_messages or []

    def __str__(self) -> str:
        if self.http_status:
            return f"[{self.http_status}] {self.message}"
        return self.message

    @classmethod
    def from_response(cls, response: httpx.Response) -> "ERPClientError":
        """
        Build the error from a non-2xx Frappe response.

        Frappe error bodies look like:
            {"exc_type": "DoesNotExistError",
             "exception": "frappe.exceptions.DoesNotExistError: Customer X not found",
             "_server_messages": "[\"{\\\"message\\\": \\\"Customer X not found\\\"}\"]"}
        Any part may be missing, and proxies in front of the ERP may answer
        with HTML instead of JSON.
        """
        try:
            body = response.json()
        except ValueError:
            body = {}
        if not isinstance(body, dict):
            body = {}

        server_messages = _parse_server_messages(body.get("_server_messages"))
        exception = body.get("exception") or None
        exc_type = body.get("exc_type") or None

        if server_messages:
            message = server_messages[0]
        elif isinstance(body.get("message"), str) and body["message"]:
            message = body["message"]
        elif body.get("_error_message"):
            message = str(body["_error_message"])
        elif exception:
            # "frappe.exceptions.X: text" -> "text"
            message = exception.split(": ", 1)[-1]
        else:
            message = response.reason_phrase or f"HTTP {response.status_code}"

        return cls(
            message=message,
            http_status=response.status_code,
            http_status_text=response.reason_phrase,
            exc_type=exc_type,
            exception=exception,
            server_messages=server_messages,
        )

    def to_cause(self) -> dict[str, Any]:
        """Upstream details safe to hand back to API clients."""
        cause = {
            "httpStatus": self.http_status,
            "httpStatusText": self.http_status_text,
            "excType": self.exc_type,
            "exception": self.exception,
        }
        return {key: value for key, value in cause.items() if value}


def _parse_server_messages(raw: Any) -> list[str]:
    """
    Decode Frappe's doubly JSON-encoded _server_messages field.

    Returns the list of message strings (possibly empty).
    """
    if not raw:
        return []
    try:
        entries = json.loads(raw) if isinstance(raw, str) else raw
    except ValueError:
        return [str(raw)]

    messages = []
    for entry in entries if isinstance(entries, list) else [entries]:
        if isinstance(entry, str):
            try:
                entry = json.loads(entry)
            except ValueError:
                messages.append(entry)
                continue
        if isinstance(entry, dict):
            text = entry.get("message")
            if text:
                messages.append(str(text))
        elif entry:
            messages.append(str(entry))
    return messages


def _encode_params(params: dict[str, Any] | None) -> dict[str, Any]:
    """
    Encode query parameters the way Frappe expects them.

    Lists and dicts (fields, filters) travel as JSON strings; None values
    are dropped.
    """
    encoded = {}
    for key, value in (params or {}).items():
        if value is None:
            continue
        if isinstance(value, (list, dict)):
            encoded[key] = json.dumps(value)
        elif isinstance(value, bool):
            encoded[key] = int(value)
        else:
            encoded[key] = value
    return encoded


# =============================================================================
# Sub-clients
# =============================================================================

class DatabaseAPI:
    """Document CRUD, lists and counts."""

    def __init__(self, client: ERPClient):
        self._client = client

    async def get_doc(self, doctype: str, name: str) -> dict[str, Any]:
        """
        Fetch one full document (child tables included).

        Raises:
            ERPClientError: If the document does not exist or is not readable
        """
        body = await self._client.request("GET", _resource_path(doctype, name))
        return body.get("data") or {}

    async def get_doc_list(
        self,
        doctype: str,
        fields: list[str] | None = None,
        filters: list[list[Any]] | dict[str, Any] | None = None,
        order_by: str | None = None,
        limit: int | None = None,
        limit_start: int | None = None,
    ) -> list[dict[str, Any]]:
        """
        List documents of a doctype.

        Args:
            doctype: e.g. "Customer"
            fields: Field names to return (default: ["name"])
            filters: [[field, operator, value], ...] or {field: value}
            order_by: e.g. "modified desc"
            limit: Page size (Frappe's limit_page_length)
            limit_start: Offset of the page

        Returns:
            List of partial documents containing only `fields`
        """
        body = await self._client.request(
            "GET",
            _resource_path(doctype),
            params={
                "fields": fields or ["name"],
                "filters": filters or None,
                "order_by": order_by,
                "limit_page_length": limit,
                "limit_start": limit_start,
            },
        )
        return body.get("data") or []

    async def get_count(
        self,
        doctype: str,
        filters: list[list[Any]] | dict[str, Any] | None = None,
    ) -> int:
        """Count documents matching filters."""
        body = await self._client.call.get(
            "frappe.client.get_count",
            {"doctype": doctype, "filters": filters or None},
        )
        return int(body.get("message") or 0)

    async def create_doc(self, doctype: str, doc: dict[str, Any]) -> dict[str, Any]:
        """Insert a document and return it as saved (with its generated name)."""
        body = await self._client.request("POST", _resource_path(doctype), json=doc)
        return body.get("data") or {}

    async def update_doc(self, doctype: str, name: str, doc: dict[str, Any]) -> dict[str, Any]:
        """Save changed fields of an existing document."""
        body = await self._client.request("PUT", _resource_path(doctype, name), json=doc)
        return body.get("data") or {}

    async def delete_doc(self, doctype: str, name: str) -> Any:
        """Delete a document (Frappe answers {"message": "ok"})."""
        body = await self._client.request("DELETE", _resource_path(doctype, name))
        return body.get("message")

    async def cancel(self, doctype: str, name: str) -> Any:
        """Cancel a submitted document (docstatus 1 -> 2)."""
        body = await self._client.call.post(
            "frappe.client.cancel",
            {"doctype": doctype, "name": name},
        )
        return body.get("message")


class CallAPI:
    """Raw access to whitelisted server methods."""

    def __init__(self, client: ERPClient):
        self._client = client

    async def get(self, method: str, params: dict[str, Any] | None = None) -> dict[str, Any]:
        """
        Call a method over GET.

        Returns the whole response body; the method's return value is under
        "message".
        """
        return await self._client.request("GET", _method_path(method), params=params)

    async def post(self, method: str, params: dict[str, Any] | None = None) -> dict[str, Any]:
        """Call a method over POST with a JSON body."""
        return await self._client.request("POST", _method_path(method), json=params or {})


class AuthAPI:
    """Session information for the configured API user."""

    def __init__(self, client: ERPClient):
        self._client = client

    async def get_logged_in_user(self) -> str | None:
        """
        Return the user the API key belongs to.

        Raises:
            ERPClientError: If the ERP rejects the credentials
        """
        body = await self._client.call.get("frappe.auth.get_logged_user")
        return body.get("message") or None


class FileAPI:
    """Attachment uploads."""

    def __init__(self, client: ERPClient):
        self._client = client

    async def upload_file(
        self,
        content: bytes,
        filename: str,
        doctype: str | None = None,
        docname: str | None = None,
        is_private: bool = False,
        content_type: str | None = None,
    ) -> dict[str, Any]:
        """
        Upload a file, optionally attaching it to a document.

        Returns:
            The created File document (file_url, file_name, ...)
        """
        data = {"is_private": "1" if is_private else "0"}
        if doctype and docname:
            data["doctype"] = doctype
            data["docname"] = docname

        body = await self._client.request(
            "POST",
            _method_path("upload_file"),
            data=data,
            files={"file": (filename, content, content_type or "application/octet-stream")},
        )
        return body.get("message") or {}


# =============================================================================
# Client
# =============================================================================

class ERPClient:
    """
    Token-authenticated client for a Frappe site.

    Construct once per process and close with aclose() on shutdown.
    Passing a transport (e.g. httpx.MockTransport) replaces the network.
    """

    def __init__(
        self,
        base_url: str,
        api_key: str,
        api_secret: str,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        missing = [
            name for name, value in (
                ("ERP_API_URL", base_url),
                ("ERP_API_KEY", api_key),
                ("ERP_API_SECRET", api_secret),
            )
            if not value
        ]
        if missing:
            raise ConfigurationError(missing)

        self.base_url = base_url.rstrip("/")
        self._http = httpx.AsyncClient(
            base_url=self.base_url,
            headers={
                "Authorization": f"token {api_key}:{api_secret}",
                "Accept": "application/json",
            },
            timeout=httpx.Timeout(timeout),
            transport=transport,
        )

        self.db = DatabaseAPI(self)
        self.call = CallAPI(self)
        self.auth = AuthAPI(self)
        self.file = FileAPI(self)

    @classmethod
    def from_settings(
        cls,
        settings: Settings | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> "ERPClient":
        """
        Build the client from application settings.

        Raises:
            ConfigurationError: If URL, key or secret is not set
        """
        settings = settings or get_settings()
        return cls(
            base_url=settings.ERP_API_URL,
            api_key=settings.ERP_API_KEY,
            api_secret=settings.ERP_API_SECRET,
            timeout=settings.ERP_TIMEOUT_SECONDS,
            transport=transport,
        )

    async def request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        json: Any = None,
        data: dict[str, Any] | None = None,
        files: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """
        Send one request to the ERP and decode the JSON body.

        Raises:
            ERPClientError: On any non-2xx answer
            httpx.RequestError: On transport failures (propagated unchanged)
        """
        logger.debug(f"ERP {method} {path}")
        response = await self._http.request(
            method,
            path,
            params=_encode_params(params),
            json=json,
            data=data,
            files=files,
        )

        if response.is_error:
            error = ERPClientError.from_response(response)
            logger.warning(f"ERP {method} {path} failed: {error}")
            raise error

        if not response.content:
            return {}
        body = response.json()
        return body if isinstance(body, dict) else {"data": body}

    async def aclose(self) -> None:
        """Close the underlying connection pool."""
        await self._http.aclose()


def _resource_path(doctype: str, name: str | None = None) -> str:
    path = f"/api/resource/{quote(doctype, safe='')}"
    if name is not None:
        path += f"/{quote(str(name), safe='')}"
    return path


def _method_path(method: str) -> str:
    return f"/api/method/{method}"
