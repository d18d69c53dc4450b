"""Resolve local users to Notion users by email and cache the result."""
from typing import Optional, Protocol

from src.shared.identity_store import IdentityLinkStore
from src.shared.logging_utils import info as log_info, warning as log_warning, error as log_error
from src.shared.notion_client import NotionClient
from src.specs.common.datetime_utils import utc_now
from src.specs.common.errors import NotionPostsError
from src.specs.models.post import IdentityLink
from src.specs.notion.properties import EmailProperty, PeopleProperty, parse_property, property_bag
from src.specs.notion.schema import DirectoryProperties


class UserLookup(Protocol):
    async def find_user_id(self, email: str) -> Optional[str]: ...


class WorkspaceUserLookup:
    """Scan every workspace user for a person whose email matches exactly."""

    def __init__(self, notion: NotionClient):
        self._notion = notion

    async def find_user_id(self, email: str) -> Optional[str]:
        for user in await self._notion.list_users():
            if not isinstance(user, dict):
                continue
            person = user.get("person") or {}
            if isinstance(person, dict) and person.get("email") == email:
                return user.get("id")
        return None


class DirectoryDatabaseLookup:
    """Query the users directory database by its Email property.

    Notion applies the ``equals`` filter server side; the decoded Email is
    compared again here so a match is always exact and case-sensitive.
    """

    def __init__(self, notion: NotionClient, database_id: str):
        self._notion = notion
        self._database_id = database_id

    async def find_user_id(self, email: str) -> Optional[str]:
        records = await self._notion.query_database(
            self._database_id,
            filter={"property": DirectoryProperties.EMAIL, "email": {"equals": email}},
        )
        for record in records:
            props = property_bag(record)
            if props is None:
                continue
            stored = parse_property(props.get(DirectoryProperties.EMAIL))
            if not isinstance(stored, EmailProperty) or stored.email != email:
                continue
            people = parse_property(props.get(DirectoryProperties.USER))
            if not isinstance(people, PeopleProperty):
                return None
            for person in people.people or []:
                if person.id:
                    return person.id
            return None
        return None


def build_user_lookup(notion: NotionClient, directory_database_id: Optional[str]) -> UserLookup:
    if directory_database_id:
        return DirectoryDatabaseLookup(notion, directory_database_id)
    return WorkspaceUserLookup(notion)


class IdentityResolver:
    def __init__(self, lookup: UserLookup, links: IdentityLinkStore):
        self._lookup = lookup
        self._links = links

    async def resolve(self, email: str) -> Optional[str]:
        """Notion user id whose email equals ``email`` exactly, or None."""
        return await self._lookup.find_user_id(email)

    async def sync(self, local_user_id: str, email: Optional[str]) -> Optional[str]:
        """Resolve ``email`` and store the link for ``local_user_id`` on a hit.

        A miss writes nothing, so an earlier link survives. Notion failures
        propagate to the caller.
        """
        if not email:
            log_info(local_user_id, "identity:sync:no_email")
            return None

        try:
            remote_user_id = await self.resolve(email)
        except NotionPostsError as exc:
            log_error(local_user_id, "identity:sync:resolve_failed", error=str(exc))
            raise

        if not remote_user_id:
            log_info(local_user_id, "identity:sync:no_match", email=email)
            return None

        await self._links.set(
            IdentityLink(localUserId=local_user_id, remoteUserId=remote_user_id, lastSyncedAt=utc_now()),
            merge=True,
        )
        log_info(local_user_id, "identity:sync:linked", notionUserId=remote_user_id)
        return remote_user_id

    async def lookup_remote_user_id(self, email: Optional[str]) -> Optional[str]:
        """Read-path resolution: any failure is logged and reported as no match."""
        if not email:
            return None
        try:
            return await self.resolve(email)
        except NotionPostsError as exc:
            log_warning(None, "identity:lookup:failed", email=email, error=str(exc))
            return None

    async def get_linked_remote_user_id(self, local_user_id: str) -> Optional[str]:
        link = await self._links.get(local_user_id)
        if link is None or not link.is_linked():
            return None
        return link.remoteUserId
