import logging
from typing import Any, Dict, Optional


_LOGGER = logging.getLogger("notionposts")


def log(level: int, caller_id: Optional[str], message: str, **dimensions: Any) -> None:
    dims: Dict[str, Any] = {"callerId": caller_id} if caller_id else {}
    dims.update(dimensions)
    _LOGGER.log(level, message, extra={"custom_dimensions": dims})



def info(caller_id: Optional[str], message: str, **dimensions: Any) -> None:
    log(logging.INFO, caller_id, message, **dimensions)


def warning(caller_id: Optional[str], message: str, **dimensions: Any) -> None:
    log(logging.WARNING, caller_id, message, **dimensions)


def error(caller_id: Optional[str], message: str, **dimensions: Any) -> None:
    log(logging.ERROR, caller_id, message, **dimensions)
