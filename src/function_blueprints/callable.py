"""Shared request handling for the callable HTTP functions.

Every callable runs the same steps in order: authenticate the caller, parse
and validate the JSON payload, build the services (which checks
configuration), run the operation. Errors are returned as ``ErrorResponse``
bodies with the status code of their error class.
"""
import json
from time import perf_counter
from typing import Any, Awaitable, Callable, Dict, Type, TypeVar

import azure.functions as func
from pydantic import BaseModel, ValidationError

from src.shared.auth import CallerContext, get_caller_context
from src.shared.logging_utils import info as log_info, error as log_error
from src.shared.services import Services, get_services
from src.specs.common.error_response_spec import ErrorResponse
from src.specs.common.errors import ExternalServiceError, InvalidArgumentError, NotionPostsError

RequestT = TypeVar("RequestT", bound=BaseModel)

Handler = Callable[[CallerContext, Any, Services], Awaitable[BaseModel]]


def json_response(model: BaseModel, status_code: int = 200) -> func.HttpResponse:
    return func.HttpResponse(
        body=model.model_dump_json(),
        mimetype="application/json",
        status_code=status_code,
    )


def error_response(exc: NotionPostsError) -> func.HttpResponse:
    return json_response(ErrorResponse.from_error(exc), status_code=exc.status_code)


def read_payload(req: func.HttpRequest) -> Dict[str, Any]:
    """JSON body as a dict; a Firebase-style ``{"data": {...}}`` envelope is unwrapped."""
    raw = req.get_body()
    if not raw or not raw.strip():
        return {}
    try:
        body = json.loads(raw)
    except ValueError as exc:
        raise InvalidArgumentError("Invalid JSON body") from exc
    if body is None:
        return {}
    if not isinstance(body, dict):
        raise InvalidArgumentError("Request body must be a JSON object")
    if set(body) == {"data"}:
        body = body["data"] if body["data"] is not None else {}
        if not isinstance(body, dict):
            raise InvalidArgumentError("data must be a JSON object")
    return body


def parse_request(model: Type[RequestT], payload: Dict[str, Any]) -> RequestT:
    try:
        return model.model_validate(payload)
    except ValidationError as exc:
        first = exc.errors()[0] if exc.errors() else {}
        field = ".".join(str(part) for part in first.get("loc", ()))
        message = first.get("msg", "Invalid request")
        if field:
            message = f"{field}: {message}"
        raise InvalidArgumentError(message, details={"errors": exc.errors(include_url=False, include_context=False, include_input=False)}) from exc


async def run_callable(
    req: func.HttpRequest,
    operation: str,
    request_model: Type[BaseModel],
    handler: Handler,
    services_provider: Callable[[], Services] = get_services,
) -> func.HttpResponse:
    start = perf_counter()
    caller_id = None
    try:
        caller = get_caller_context(req.headers)
        caller_id = caller.userId
        log_info(caller_id, f"{operation}:request")
        request = parse_request(request_model, read_payload(req))
        result = await handler(caller, request, services_provider())
    except NotionPostsError as exc:
        log_error(caller_id, f"{operation}:failed", code=exc.code, error=str(exc))
        return error_response(exc)
    except Exception as exc:
        log_error(caller_id, f"{operation}:unexpected_error", error=repr(exc))
        return error_response(ExternalServiceError(f"Unexpected error in {operation}: {exc}"))

    duration_ms = int((perf_counter() - start) * 1000)
    log_info(caller_id, f"{operation}:completed", durationMs=duration_ms)
    return json_response(result)
