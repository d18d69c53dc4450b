import azure.functions as func

from src.shared.logging_utils import info as log_info, error as log_error
from src.shared.services import Services, get_services
from src.specs.queue.message import UserCreatedMessage


bp = func.Blueprint()


async def process_user_created(body: bytes, services: Services) -> None:
    msg = UserCreatedMessage.model_validate_json(body)
    log_info(msg.localUserId, "users:created:sync_start")
    notion_user_id = await services.identity.sync(msg.localUserId, msg.email)
    log_info(msg.localUserId, "users:created:sync_done", linked=bool(notion_user_id))


@bp.queue_trigger(
    arg_name="msg",
    queue_name="%USER_CREATED_QUEUE%",
    connection="AzureWebJobsStorage",
)
async def on_user_created(msg: func.QueueMessage) -> None:
    try:
        await process_user_created(msg.get_body(), get_services())
    except Exception as exc:
        # Host retries, then moves the message to the poison queue.
        log_error(None, "users:created:sync_failed", messageId=msg.id, error=str(exc))
        raise
