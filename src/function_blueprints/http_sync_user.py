import azure.functions as func

from src.function_blueprints.callable import run_callable
from src.shared.auth import CallerContext
from src.shared.services import Services
from src.specs.models.http import EmptyRequest, SyncUserResponse


bp = func.Blueprint()


async def handle_sync_user(caller: CallerContext, request: EmptyRequest, services: Services) -> SyncUserResponse:
    notion_user_id = await services.identity.sync(caller.userId, caller.email)
    return SyncUserResponse(success=bool(notion_user_id), notionUserId=notion_user_id)


@bp.function_name(name="sync_user")
@bp.route(route="users/sync", methods=["POST"], auth_level=func.AuthLevel.ANONYMOUS)
async def sync_user(req: func.HttpRequest) -> func.HttpResponse:
    return await run_callable(req, "users:sync", EmptyRequest, handle_sync_user)
