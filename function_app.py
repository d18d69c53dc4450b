import os
import logging
import azure.functions as func

from src.function_blueprints.http_posts import bp as posts_bp
from src.function_blueprints.http_sync_user import bp as sync_user_bp
from src.function_blueprints.q_user_created import bp as user_created_bp

app = func.FunctionApp()


def _configure_logging() -> None:
    lvl = (os.getenv("AZURE_SDK_LOG_LEVEL") or "").upper()
    if lvl:
        level = getattr(logging, lvl, logging.INFO)
        logging.getLogger("azure").setLevel(level)
        logging.getLogger("azure.cosmos").setLevel(level)
    httpx_lvl = (os.getenv("HTTPX_LOG_LEVEL") or "WARNING").upper()
    logging.getLogger("httpx").setLevel(getattr(logging, httpx_lvl, logging.WARNING))
    logging.getLogger("notionposts").setLevel(logging.INFO)


_configure_logging()

app.register_functions(posts_bp)
app.register_functions(sync_user_bp)
app.register_functions(user_created_bp)
