import azure.functions as func

from src.function_blueprints.callable import run_callable
from src.shared.auth import CallerContext
from src.shared.services import Services
from src.specs.models.http import (
    EmptyRequest,
    LocalUserRequest,
    MediaUrlResponse,
    PageRequest,
    PostListResponse,
    PostResponse,
    UpsertPostResponse,
)
from src.specs.models.post import UpsertPostInput


bp = func.Blueprint()


async def handle_list_posts(caller: CallerContext, request: EmptyRequest, services: Services) -> PostListResponse:
    posts = await services.posts.list_posts()
    return PostListResponse(posts=posts)


async def handle_get_post(caller: CallerContext, request: PageRequest, services: Services) -> PostResponse:
    post = await services.posts.get_post(request.pageId)
    return PostResponse(post=post)


async def handle_upsert_post(caller: CallerContext, request: UpsertPostInput, services: Services) -> UpsertPostResponse:
    page_id = await services.posts.upsert_post(request)
    message = "Post updated successfully." if request.is_update() else "Post created successfully."
    return UpsertPostResponse(message=message, id=page_id)


async def handle_list_my_posts(caller: CallerContext, request: EmptyRequest, services: Services) -> PostListResponse:
    result = await services.posts.list_my_posts(caller.email)
    return PostListResponse(posts=result.posts, reason=result.reason)


async def handle_list_posts_by_local_user(
    caller: CallerContext, request: LocalUserRequest, services: Services
) -> PostListResponse:
    local_user_id = (request.localUserId or "").strip() or caller.userId
    result = await services.posts.list_posts_by_local_user(local_user_id)
    return PostListResponse(posts=result.posts, reason=result.reason)


async def handle_get_media_url(caller: CallerContext, request: PageRequest, services: Services) -> MediaUrlResponse:
    url = await services.posts.get_media_url(request.pageId)
    return MediaUrlResponse(url=url)


@bp.function_name(name="list_posts")
@bp.route(route="posts/list", methods=["POST"], auth_level=func.AuthLevel.ANONYMOUS)
async def list_posts(req: func.HttpRequest) -> func.HttpResponse:
    return await run_callable(req, "posts:list", EmptyRequest, handle_list_posts)


@bp.function_name(name="get_post")
@bp.route(route="posts/get", methods=["POST"], auth_level=func.AuthLevel.ANONYMOUS)
async def get_post(req: func.HttpRequest) -> func.HttpResponse:
    return await run_callable(req, "posts:get", PageRequest, handle_get_post)


@bp.function_name(name="upsert_post")
@bp.route(route="posts/upsert", methods=["POST"], auth_level=func.AuthLevel.ANONYMOUS)
async def upsert_post(req: func.HttpRequest) -> func.HttpResponse:
    return await run_callable(req, "posts:upsert", UpsertPostInput, handle_upsert_post)


@bp.function_name(name="list_my_posts")
@bp.route(route="posts/mine", methods=["POST"], auth_level=func.AuthLevel.ANONYMOUS)
async def list_my_posts(req: func.HttpRequest) -> func.HttpResponse:
    return await run_callable(req, "posts:mine", EmptyRequest, handle_list_my_posts)


@bp.function_name(name="list_posts_by_local_user")
@bp.route(route="posts/by-user", methods=["POST"], auth_level=func.AuthLevel.ANONYMOUS)
async def list_posts_by_local_user(req: func.HttpRequest) -> func.HttpResponse:
    return await run_callable(req, "posts:by_user", LocalUserRequest, handle_list_posts_by_local_user)


@bp.function_name(name="get_media_url")
@bp.route(route="posts/media-url", methods=["POST"], auth_level=func.AuthLevel.ANONYMOUS)
async def get_media_url(req: func.HttpRequest) -> func.HttpResponse:
    return await run_callable(req, "posts:media_url", PageRequest, handle_get_media_url)
