from typing import Any, Dict, List, Optional

from src.services.identity_resolver import IdentityResolver
from src.services.property_codec import decode_post, encode_post_properties, first_file_url
from src.shared.logging_utils import info as log_info, error as log_error
from src.shared.notion_client import NotionClient
from src.specs.common.errors import ExternalServiceError, InvalidArgumentError, NotionAPIError, ResourceNotFoundError
from src.specs.models.post import Post, ScopedPostList, UpsertPostInput
from src.specs.notion.properties import property_bag
from src.specs.notion.schema import CREATED_TIME_DESC, PostProperties


class PostService:
    """List, read and write posts in the Notion posts database."""

    def __init__(
        self,
        notion: NotionClient,
        database_id: str,
        resolver: IdentityResolver,
        complete_status: str = "complete",
    ):
        self._notion = notion
        self._database_id = database_id
        self._resolver = resolver
        self._complete_status = complete_status

    async def _query_posts(self, filter: Optional[Dict[str, Any]], action: str) -> List[Post]:
        try:
            pages = await self._notion.query_database(self._database_id, filter=filter, sorts=CREATED_TIME_DESC)
        except NotionAPIError as exc:
            log_error(None, f"posts:{action}:query_failed", databaseId=self._database_id, error=str(exc))
            raise ExternalServiceError(f"Failed to fetch posts from Notion: {exc}", details=exc.details) from exc
        # Query results may include entries without a property bag; those are not posts.
        return [decode_post(page) for page in pages if property_bag(page) is not None]

    def _author_filter(self, remote_user_id: str) -> Dict[str, Any]:
        return {
            "and": [
                {"property": PostProperties.AUTHORS, "people": {"contains": remote_user_id}},
                {"property": PostProperties.STATUS, "status": {"equals": self._complete_status}},
            ]
        }

    async def list_posts(self) -> List[Post]:
        posts = await self._query_posts(None, "list")
        log_info(None, "posts:list:fetched", count=len(posts))
        return posts

    async def _retrieve(self, page_id: str, action: str) -> Dict[str, Any]:
        if not page_id or not page_id.strip():
            raise InvalidArgumentError("pageId is required.")
        try:
            page = await self._notion.retrieve_page(page_id)
        except NotionAPIError as exc:
            if exc.http_status == 400:
                # Notion rejects ids that are not page UUIDs with validation_error.
                raise InvalidArgumentError(f"Invalid pageId: {page_id}", details=exc.details) from exc
            log_error(None, f"posts:{action}:retrieve_failed", pageId=page_id, error=str(exc))
            raise ExternalServiceError(f"Failed to fetch post from Notion: {exc}", details=exc.details) from exc
        if property_bag(page) is None:
            raise ResourceNotFoundError("Page", page_id)
        return page

    async def get_post(self, page_id: str) -> Post:
        page = await self._retrieve(page_id, "get")
        return decode_post(page)

    async def get_media_url(self, page_id: str) -> Optional[str]:
        page = await self._retrieve(page_id, "media_url")
        return first_file_url(page)

    async def upsert_post(self, data: UpsertPostInput) -> str:
        """Update the page named by ``data.id``, or create one; returns the page id."""
        if not data.title or not data.title.strip():
            raise InvalidArgumentError("title is required.")

        properties = encode_post_properties(data)
        try:
            if data.is_update():
                page_id = data.id.strip()
                await self._notion.update_page(page_id, properties)
                log_info(None, "posts:upsert:updated", pageId=page_id, fields=sorted(properties))
                return page_id

            page_id = await self._notion.create_page(self._database_id, properties)
            log_info(None, "posts:upsert:created", pageId=page_id)
            return page_id
        except NotionAPIError as exc:
            log_error(None, "posts:upsert:failed", pageId=data.id, error=str(exc))
            raise ExternalServiceError(f"Failed to upsert post to Notion: {exc}", details=exc.details) from exc

    async def list_my_posts(self, email: Optional[str]) -> ScopedPostList:
        """Completed posts authored by the Notion user matching ``email``."""
        remote_user_id = await self._resolver.lookup_remote_user_id(email)
        if not remote_user_id:
            return ScopedPostList(reason="No Notion user matches the caller's email.")
        posts = await self._query_posts(self._author_filter(remote_user_id), "mine")
        log_info(None, "posts:mine:fetched", notionUserId=remote_user_id, count=len(posts))
        return ScopedPostList(posts=posts)

    async def list_posts_by_local_user(self, local_user_id: str) -> ScopedPostList:
        """Completed posts for a local user, using the stored identity link only."""
        if not local_user_id:
            raise InvalidArgumentError("localUserId is required.")
        remote_user_id = await self._resolver.get_linked_remote_user_id(local_user_id)
        if not remote_user_id:
            return ScopedPostList(reason="User is not linked to a Notion user.")
        posts = await self._query_posts(self._author_filter(remote_user_id), "by_user")
        log_info(local_user_id, "posts:by_user:fetched", notionUserId=remote_user_id, count=len(posts))
        return ScopedPostList(posts=posts)
