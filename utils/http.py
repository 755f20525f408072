"""
HTTP Client Wrapper for the task API.

Wraps a single httpx.AsyncClient bound to the API base URL. The session
authenticator installs the bearer token and switches on error normalization;
after that every failed request surfaces as an ApiError carrying
message/status/details.
"""

import logging
from typing import Any, Optional

import httpx

from utils.errors import DEFAULT_ERROR_MESSAGE, NO_RESPONSE_MESSAGE, ApiError

logger = logging.getLogger(__name__)


def normalize_error(exc: Exception) -> ApiError:
    """Convert an httpx failure into an ApiError and log it.

    Args:
        exc: Exception raised while sending a request or checking its status

    Returns:
        ApiError with message, status and details filled from the response
    """
    if isinstance(exc, httpx.HTTPStatusError):
        response = exc.response
        try:
            body = response.json()
        except ValueError:
            body = response.text or None

        message = DEFAULT_ERROR_MESSAGE
        details = body
        if isinstance(body, dict):
            message = body.get("message") or DEFAULT_ERROR_MESSAGE
            details = body.get("details") or body

        error = ApiError(message=message, status=response.status_code, details=details)
    elif isinstance(exc, httpx.RequestError):
        error = ApiError(message=NO_RESPONSE_MESSAGE)
    else:
        error = ApiError(message=str(exc))

    logger.error(
        "Task API request failed",
        extra={
            "error_message": error.message,
            "status": error.status,
            "details": error.details,
        },
    )
    return error


class ApiClient:
    """Async HTTP client bound to the task API base URL."""

    def __init__(
        self,
        base_url: str,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        """Initialize API client.

        Args:
            base_url: Task API base URL
            timeout: Per-request timeout in seconds, None disables it
            transport: Optional httpx transport (tests)
        """
        self.base_url = base_url.rstrip("/")
        self.normalize_errors = False
        self.client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout,
            transport=transport,
        )

    def set_bearer_token(self, token: str) -> None:
        """Attach `Authorization: Bearer <token>` to all subsequent requests."""
        self.client.headers["Authorization"] = f"Bearer {token}"

    def enable_error_normalization(self) -> None:
        """Raise ApiError instead of raw httpx errors from now on."""
        self.normalize_errors = True

    async def get(self, path: str, params: Optional[dict[str, Any]] = None) -> Any:
        """GET `path` and return the decoded JSON body."""
        return await self.request("GET", path, params=params)

    async def post(self, path: str, json: Optional[dict[str, Any]] = None) -> Any:
        """POST `json` to `path` and return the decoded JSON body."""
        return await self.request("POST", path, json=json)

    async def request(
        self,
        method: str,
        path: str,
        params: Optional[dict[str, Any]] = None,
        json: Optional[dict[str, Any]] = None,
    ) -> Any:
        """Send a request and return the decoded JSON body.

        Query parameters whose value is None are omitted.

        Raises:
            ApiError: On any failure once error normalization is enabled
            httpx.HTTPError: On any failure before that
        """
        if params is not None:
            params = {key: value for key, value in params.items() if value is not None}

        try:
            response = await self.client.request(method, path, params=params, json=json)
            response.raise_for_status()
        except httpx.HTTPError as e:
            if self.normalize_errors:
                raise normalize_error(e) from e
            raise

        return response.json()

    async def close(self) -> None:
        """Close the underlying httpx client."""
        await self.client.aclose()

    async def __aenter__(self) -> "ApiClient":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()
