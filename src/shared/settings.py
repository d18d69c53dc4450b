"""Environment configuration, read when a service is first built."""
import os
from dataclasses import dataclass
from typing import Optional

from src.specs.common.errors import ConfigurationError

DEFAULT_COMPLETE_STATUS = "complete"
DEFAULT_USERS_CONTAINER = "users"


def _optional(name: str) -> Optional[str]:
    value = (os.environ.get(name) or "").strip()
    return value or None


@dataclass(frozen=True)
class NotionSettings:
    api_key: str
    posts_database_id: str
    directory_database_id: Optional[str] = None
    complete_status: str = DEFAULT_COMPLETE_STATUS

    @classmethod
    def from_env(cls) -> "NotionSettings":
        api_key = _optional("NOTION_API_KEY")
        database_id = _optional("NOTION_DATABASE_ID")
        missing = [
            name
            for name, value in (("NOTION_API_KEY", api_key), ("NOTION_DATABASE_ID", database_id))
            if not value
        ]
        if missing:
            raise ConfigurationError(
                f"{', '.join(missing)} is not configured.",
                details={"missing": missing},
            )
        return cls(
            api_key=api_key,
            posts_database_id=database_id,
            directory_database_id=_optional("NOTION_USERS_DATABASE_ID"),
            complete_status=_optional("NOTION_COMPLETE_STATUS") or DEFAULT_COMPLETE_STATUS,
        )


@dataclass(frozen=True)
class CosmosSettings:
    connection_string: str
    database_name: str
    users_container: str = DEFAULT_USERS_CONTAINER

    @classmethod
    def is_configured(cls) -> bool:
        return bool(_optional("COSMOS_DB_CONNECTION_STRING") and _optional("COSMOS_DB_NAME"))

    @classmethod
    def from_env(cls) -> "CosmosSettings":
        conn = _optional("COSMOS_DB_CONNECTION_STRING")
        db_name = _optional("COSMOS_DB_NAME")
        if not conn or not db_name:
            raise ConfigurationError("Missing Cosmos DB connection string or database name")
        return cls(
            connection_string=conn,
            database_name=db_name,
            users_container=_optional("COSMOS_DB_CONTAINER_USERS") or DEFAULT_USERS_CONTAINER,
        )
