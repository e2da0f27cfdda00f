"""Client for the Syncthing REST API."""

from typing import Optional

import httpx
from loguru import logger
from pydantic import ValidationError

from syncwatch.config import WatcherConfig
from syncwatch.exceptions import ConfigurationError, SyncthingAPIError
from syncwatch.schemas import Configuration


class SyncthingClient:
    """Reads the folder configuration and requests rescans.

    The same credentials are attached to every request: CSRF token header,
    basic auth and API key, whichever are configured.
    """

    def __init__(
        self,
        base_url: str,
        *,
        user: Optional[str] = None,
        password: Optional[str] = None,
        api_key: Optional[str] = None,
        csrf_token: Optional[str] = None,
        timeout: Optional[float] = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        headers = {}
        if csrf_token:
            headers["X-CSRF-Token"] = csrf_token
        if api_key:
            headers["X-API-Key"] = api_key
        auth = httpx.BasicAuth(user, password or "") if user else None

        self.client = httpx.AsyncClient(
            base_url=base_url,
            headers=headers,
            auth=auth,
            timeout=timeout,
            transport=transport,
        )

    async def __aenter__(self) -> "SyncthingClient":
        return self

    async def __aexit__(self, *exc) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self.client.aclose()

    async def _request(self, method: str, url: str, **kwargs) -> httpx.Response:
        try:
            response = await self.client.request(method, url, **kwargs)
        except httpx.HTTPError as e:
            raise SyncthingAPIError(f"{method} {url} failed: {e}") from e

        if not response.is_success:
            raise SyncthingAPIError(f"Status {response.status_code} != 200 for {method} {url}")
        return response

    async def get_config(self) -> Configuration:
        """Fetch and validate GET /rest/config."""
        response = await self._request("GET", "/rest/config")
        try:
            return Configuration.model_validate(response.json())
        except (ValueError, ValidationError) as e:
            raise ConfigurationError(f"Invalid configuration from {self.client.base_url}: {e}") from e

    async def rescan(self, repo: str, sub: str = "") -> None:
        """Ask Syncthing to rescan ``sub`` of ``repo``; "" rescans the whole repo."""
        await self._request("POST", "/rest/scan", params={"repo": repo, "sub": sub})
        logger.info(f"Syncthing is indexing change in {repo}: {sub}")


def create_client(config: WatcherConfig, transport: Optional[httpx.AsyncBaseTransport] = None) -> SyncthingClient:
    """Create a client from configuration."""
    logger.debug(f"Creating Syncthing client for {config.base_url}")
    return SyncthingClient(
        config.base_url,
        user=config.user,
        password=config.password,
        api_key=config.api_key,
        csrf_token=config.csrf_token,
        timeout=config.request_timeout,
        transport=transport,
    )
