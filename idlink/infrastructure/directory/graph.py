"""Microsoft Graph adapter for DirectoryClient."""

import logging
import time
from typing import Any

import httpx
import logfire

from idlink.config import GraphConfig
from idlink.domain.link.model.value import DirectoryUser
from idlink.domain.link.port.directory import DirectoryClient
from idlink.domain.shared.error import DirectoryLookupError

logger = logging.getLogger(__name__)

GRAPH_SCOPE = "https://graph.microsoft.com/.default"
USER_FIELDS = "id,displayName,userPrincipalName,userType,mail"

# Refresh the app token this many seconds before Graph says it expires
_TOKEN_EXPIRY_MARGIN = 60.0


class GraphDirectoryClient(DirectoryClient):
    """DirectoryClient backed by Microsoft Graph, using app-only credentials."""

    def __init__(self, config: GraphConfig, http_client: httpx.AsyncClient) -> None:
        self._config = config
        self._http = http_client
        self._token: str | None = None
        self._token_expires_at = 0.0

    async def get_user_by_id(self, aad_id: str) -> DirectoryUser:
        with logfire.span("graph.get_user", aad_id=aad_id):
            data = await self._get_json(f"/users/{aad_id}", params={"$select": USER_FIELDS})
            if data is None:
                raise DirectoryLookupError(
                    f"User {aad_id} not found in the directory", code="directory_user_not_found"
                )
            return _to_directory_user(data)

    async def get_user_and_manager_by_id(self, aad_id: str) -> DirectoryUser:
        user = await self.get_user_by_id(aad_id)
        with logfire.span("graph.get_manager", aad_id=aad_id):
            manager = await self._get_json(
                f"/users/{aad_id}/manager", params={"$select": USER_FIELDS}
            )
        if manager is None:
            return user
        return user.model_copy(update={"manager": _to_directory_user(manager)})

    async def _get_json(self, path: str, params: dict[str, str]) -> dict[str, Any] | None:
        """GET a Graph resource. Returns None on 404."""
        token = await self._get_token()
        try:
            response = await self._http.get(
                f"{self._config.base_url}{path}",
                params=params,
                headers={"Authorization": f"Bearer {token}", "Accept": "application/json"},
            )
        except httpx.RequestError as e:
            logger.exception("Graph request failed: path=%s", path)
            raise DirectoryLookupError(
                "Failed to connect to the directory", code="directory_unavailable"
            ) from e

        if response.status_code == 404:
            return None
        if response.status_code != 200:
            logger.error(
                "Graph request failed: path=%s, status=%d, body=%s",
                path,
                response.status_code,
                response.text,
            )
            raise DirectoryLookupError(
                f"Directory request failed: {response.status_code}",
                code="directory_unavailable",
            )
        return response.json()

    async def _get_token(self) -> str:
        if self._token and time.monotonic() < self._token_expires_at:
            return self._token

        token_url = f"{self._config.authority}/{self._config.tenant_id}/oauth2/v2.0/token"
        data = {
            "client_id": self._config.client_id,
            "client_secret": self._config.client_secret,
            "grant_type": "client_credentials",
            "scope": GRAPH_SCOPE,
        }

        try:
            response = await self._http.post(
                token_url, data=data, headers={"Accept": "application/json"}
            )
        except httpx.RequestError as e:
            logger.exception("Graph token request failed: %s", e)
            raise DirectoryLookupError(
                "Failed to connect to the identity authority", code="directory_unavailable"
            ) from e

        if response.status_code != 200:
            logger.error(
                "Graph token request failed: status=%d, body=%s",
                response.status_code,
                response.text,
            )
            raise DirectoryLookupError(
                f"Directory token request failed: {response.status_code}",
                code="directory_unavailable",
            )

        token_data = response.json()
        access_token = token_data.get("access_token")
        if not access_token:
            raise DirectoryLookupError(
                "Directory token response missing access_token", code="directory_unavailable"
            )

        expires_in = float(token_data.get("expires_in", 3600))
        self._token = access_token
        self._token_expires_at = time.monotonic() + max(expires_in - _TOKEN_EXPIRY_MARGIN, 0.0)
        return access_token


def _to_directory_user(data: dict[str, Any]) -> DirectoryUser:
    return DirectoryUser(
        id=data["id"],
        user_type=data.get("userType"),
        display_name=data.get("displayName"),
        user_principal_name=data.get("userPrincipalName"),
        mail=data.get("mail"),
    )
