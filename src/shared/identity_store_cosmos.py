from typing import Any, Dict, Optional

import backoff
from azure.cosmos import exceptions
from azure.cosmos.aio import CosmosClient

from src.shared.settings import CosmosSettings
from src.shared.logging_utils import info as log_info, error as log_error
from src.specs.common.errors import ExternalServiceError
from src.specs.models.post import IdentityLink


class RetryableCosmosError(Exception):
    """Indicates a Cosmos DB operation that should be retried"""
    pass


def _retryable(e: exceptions.CosmosHttpResponseError) -> bool:
    return e.status_code in (429, 503)  # Too Many Requests or Service Unavailable


class CosmosIdentityLinkStore:
    """Identity links stored one document per local user, ``id`` = local user id."""

    MAX_RETRIES = 3
    OPERATION_TIMEOUT = 10.0

    def __init__(self, container: Any = None, settings: Optional[CosmosSettings] = None):
        self._container = container
        self._settings = settings
        self._client: Optional[CosmosClient] = None

    def _ensure_container(self) -> Any:
        if self._container is not None:
            return self._container

        settings = self._settings or CosmosSettings.from_env()
        client = CosmosClient.from_connection_string(settings.connection_string)
        db = client.get_database_client(settings.database_name)
        self._container = db.get_container_client(settings.users_container)
        self._client = client
        log_info(None, "cosmos:users:init", container=settings.users_container)
        return self._container

    async def close(self) -> None:
        if self._client is not None:
            await self._client.close()

    @backoff.on_exception(backoff.expo, RetryableCosmosError, max_tries=MAX_RETRIES, max_time=OPERATION_TIMEOUT)
    async def _read(self, local_user_id: str) -> Optional[Dict[str, Any]]:
        container = self._ensure_container()
        try:
            return await container.read_item(item=local_user_id, partition_key=local_user_id)
        except exceptions.CosmosResourceNotFoundError:
            return None
        except exceptions.CosmosHttpResponseError as e:
            if _retryable(e):
                raise RetryableCosmosError(f"Retriable error reading link '{local_user_id}': {e}") from e
            log_error(local_user_id, "cosmos:users:read_failed", error=str(e))
            raise ExternalServiceError(f"Failed to read identity link: {e}") from e

    @backoff.on_exception(backoff.expo, RetryableCosmosError, max_tries=MAX_RETRIES, max_time=OPERATION_TIMEOUT)
    async def _upsert(self, body: Dict[str, Any]) -> None:
        container = self._ensure_container()
        try:
            await container.upsert_item(body)
        except exceptions.CosmosHttpResponseError as e:
            if _retryable(e):
                raise RetryableCosmosError(f"Retriable error writing link '{body['id']}': {e}") from e
            log_error(body["id"], "cosmos:users:upsert_failed", error=str(e))
            raise ExternalServiceError(f"Failed to write identity link: {e}") from e

    async def get(self, local_user_id: str) -> Optional[IdentityLink]:
        item = await self._read(local_user_id)
        if not item:
            return None
        return IdentityLink(
            localUserId=item.get("localUserId") or local_user_id,
            remoteUserId=item.get("notionUserId"),
            lastSyncedAt=item.get("lastSyncedAt"),
        )

    async def set(self, link: IdentityLink, merge: bool = True) -> None:
        """Write the link; with ``merge`` other fields on the user document are kept."""
        body: Dict[str, Any] = {}
        if merge:
            body = dict(await self._read(link.localUserId) or {})
            for key in [k for k in body if k.startswith("_")]:
                body.pop(key)
        body.update(
            {
                "id": link.localUserId,
                "localUserId": link.localUserId,
                "notionUserId": link.remoteUserId,
                "lastSyncedAt": link.lastSyncedAt.isoformat() if link.lastSyncedAt else None,
            }
        )
        await self._upsert(body)
        log_info(link.localUserId, "cosmos:users:upsert_link", notionUserId=link.remoteUserId)
