from __future__ import annotations

from typing import Dict, Type

from pydantic import BaseModel

from .post import Post, UpsertPostInput, IdentityLink, ScopedPostList
from ..common.error_response_spec import ErrorResponse
from .http import (
    EmptyRequest,
    PageRequest,
    LocalUserRequest,
    PostListResponse,
    PostResponse,
    UpsertPostResponse,
    MediaUrlResponse,
    SyncUserResponse,
)
from ..queue.message import UserCreatedMessage


# Registry mapping output schema filenames to models for generation
SCHEMA_MODELS: Dict[str, Type[BaseModel]] = {
    "post.schema.json": Post,
    "upsert_post.request.schema.json": UpsertPostInput,
    "identity_link.schema.json": IdentityLink,
    "empty.request.schema.json": EmptyRequest,
    "page.request.schema.json": PageRequest,
    "local_user.request.schema.json": LocalUserRequest,
    "post_list.response.schema.json": PostListResponse,
    "post.response.schema.json": PostResponse,
    "upsert_post.response.schema.json": UpsertPostResponse,
    "media_url.response.schema.json": MediaUrlResponse,
    "sync_user.response.schema.json": SyncUserResponse,
    "error.response.schema.json": ErrorResponse,
    "user_created.message.schema.json": UserCreatedMessage,
}

__all__ = [
    "Post",
    "UpsertPostInput",
    "IdentityLink",
    "ScopedPostList",
    "SCHEMA_MODELS",
]
