from __future__ import annotations

from dataclasses import dataclass
from typing import List, Type

from pydantic import BaseModel

from .models.http import (
    EmptyRequest,
    LocalUserRequest,
    MediaUrlResponse,
    PageRequest,
    PostListResponse,
    PostResponse,
    SyncUserResponse,
    UpsertPostResponse,
)
from .models.post import UpsertPostInput


@dataclass(frozen=True)
class CallableDef:
    name: str
    route: str
    description: str
    input_model: Type[BaseModel]
    output_model: Type[BaseModel]


CALLABLES: List[CallableDef] = [
    CallableDef(
        name="sync_user",
        route="users/sync",
        description="Link the caller to the Notion user with the same email",
        input_model=EmptyRequest,
        output_model=SyncUserResponse,
    ),
    CallableDef(
        name="list_posts",
        route="posts/list",
        description="List every post, newest first",
        input_model=EmptyRequest,
        output_model=PostListResponse,
    ),
    CallableDef(
        name="get_post",
        route="posts/get",
        description="Read one post by Notion page id",
        input_model=PageRequest,
        output_model=PostResponse,
    ),
    CallableDef(
        name="upsert_post",
        route="posts/upsert",
        description="Create a post, or update it when id is given",
        input_model=UpsertPostInput,
        output_model=UpsertPostResponse,
    ),
    CallableDef(
        name="list_my_posts",
        route="posts/mine",
        description="Completed posts authored by the caller",
        input_model=EmptyRequest,
        output_model=PostListResponse,
    ),
    CallableDef(
        name="list_posts_by_local_user",
        route="posts/by-user",
        description="Completed posts authored by a linked local user",
        input_model=LocalUserRequest,
        output_model=PostListResponse,
    ),
    CallableDef(
        name="get_media_url",
        route="posts/media-url",
        description="First attached media URL of a post",
        input_model=PageRequest,
        output_model=MediaUrlResponse,
    ),
]
