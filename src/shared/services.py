from dataclasses import dataclass
from functools import lru_cache

from src.services.identity_resolver import IdentityResolver, build_user_lookup
from src.services.post_service import PostService
from src.shared.identity_store import IdentityLinkStore, select_identity_store
from src.shared.logging_utils import info as log_info
from src.shared.notion_client import NotionClient
from src.shared.settings import NotionSettings


@dataclass
class Services:
    notion: NotionClient
    links: IdentityLinkStore
    identity: IdentityResolver
    posts: PostService


def build_services(settings: NotionSettings, notion: NotionClient, links: IdentityLinkStore) -> Services:
    identity = IdentityResolver(build_user_lookup(notion, settings.directory_database_id), links)
    posts = PostService(
        notion,
        settings.posts_database_id,
        identity,
        complete_status=settings.complete_status,
    )
    return Services(notion=notion, links=links, identity=identity, posts=posts)


# Built once per worker process on first use
@lru_cache(maxsize=1)
def get_services() -> Services:
    """Get or create the process-wide service container"""
    settings = NotionSettings.from_env()
    services = build_services(settings, NotionClient(settings.api_key), select_identity_store())
    log_info(
        None,
        "services:init",
        lookup="directory" if settings.directory_database_id else "workspace_users",
        links=type(services.links).__name__,
    )
    return services
