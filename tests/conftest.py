"""Shared fixtures: a fake Notion workspace and services wired against it."""

import sys
from pathlib import Path

import pytest

TESTS_DIR = Path(__file__).resolve().parent
if str(TESTS_DIR) not in sys.path:
    sys.path.insert(0, str(TESTS_DIR))

from notion_fakes import DIRECTORY_DB, POSTS_DB, FakeNotion, MemoryLinkStore  # noqa: E402
from src.shared.services import build_services  # noqa: E402
from src.shared.settings import NotionSettings  # noqa: E402


@pytest.fixture
def fake_notion():
    return FakeNotion()


@pytest.fixture
def link_store():
    return MemoryLinkStore()


@pytest.fixture
def make_services(fake_notion, link_store):
    """Factory for a service container; ``directory=True`` selects the directory database lookup."""

    def _make(directory: bool = False, complete_status: str = "complete"):
        settings = NotionSettings(
            api_key="secret-test",
            posts_database_id=POSTS_DB,
            directory_database_id=DIRECTORY_DB if directory else None,
            complete_status=complete_status,
        )
        return build_services(settings, fake_notion.client(), link_store)

    return _make


@pytest.fixture(autouse=True)
def _clear_notion_env(monkeypatch):
    for name in (
        "NOTION_API_KEY",
        "NOTION_DATABASE_ID",
        "NOTION_USERS_DATABASE_ID",
        "NOTION_COMPLETE_STATUS",
        "COSMOS_DB_CONNECTION_STRING",
        "COSMOS_DB_NAME",
        "COSMOS_DB_CONTAINER_USERS",
        "IDENTITY_STORE_BACKEND",
    ):
        monkeypatch.delenv(name, raising=False)
