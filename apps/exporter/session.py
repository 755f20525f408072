"""
Session Authenticator

Exchanges API credentials for a bearer token and installs it on the shared
ApiClient, together with global error normalization. Runs once per export;
the token is never refreshed mid-run.
"""

import logging

from utils.errors import ApiError
from utils.http import ApiClient

logger = logging.getLogger(__name__)

LOGIN_PATH = "/auth/login"


async def login(client: ApiClient, username: str, password: str) -> None:
    """
    Authenticate against the task API.

    Args:
        client: Shared API client for the run
        username: API username
        password: API password

    Raises:
        httpx.HTTPError: If the login request fails (no retry)
        ApiError: If the login response carries no access token
    """
    data = await client.post(LOGIN_PATH, json={"username": username, "password": password})

    token = data.get("access_token") if isinstance(data, dict) else None
    if not token:
        raise ApiError(message="Login response did not include an access token", details=data)

    client.set_bearer_token(token)
    client.enable_error_normalization()

    logger.info("Authenticated with task API", extra={"base_url": client.base_url})
