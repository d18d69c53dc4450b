"""Translation between Notion post pages and ``Post`` records.

``decode_post`` reads a page into a ``Post`` and never raises: a property that
is missing, carries an unexpected type tag or holds an empty payload simply
yields that field's default. ``encode_post_properties`` turns an
``UpsertPostInput`` into the ``properties`` patch sent to Notion.
"""
from typing import Any, Dict, List, Optional, Type, TypeVar

from src.specs.common.datetime_utils import parse_iso_datetime
from src.specs.models.post import Post, UpsertPostInput
from src.specs.notion.properties import (
    CheckboxProperty,
    FilesProperty,
    MultiSelectProperty,
    PeopleProperty,
    RichTextProperty,
    SelectProperty,
    StatusProperty,
    TitleProperty,
    UrlProperty,
    parse_property,
    property_bag,
)
from src.specs.notion.schema import PostProperties

P = TypeVar("P")


def _typed(props: Dict[str, Any], key: str, kind: Type[P]) -> Optional[P]:
    value = parse_property(props.get(key))
    return value if isinstance(value, kind) else None


def _title(props: Dict[str, Any], key: str) -> str:
    prop = _typed(props, key, TitleProperty)
    return prop.text() if prop else ""


def _rich_text(props: Dict[str, Any], key: str) -> Optional[str]:
    prop = _typed(props, key, RichTextProperty)
    if prop is None:
        return None
    return prop.text() or None


def _checkbox(props: Dict[str, Any], key: str) -> bool:
    prop = _typed(props, key, CheckboxProperty)
    return bool(prop and prop.checkbox)


def _url(props: Dict[str, Any], key: str) -> Optional[str]:
    prop = _typed(props, key, UrlProperty)
    return (prop.url or None) if prop else None


def _status(props: Dict[str, Any], key: str) -> Optional[str]:
    prop = _typed(props, key, StatusProperty)
    if prop is None or prop.status is None:
        return None
    return prop.status.name or None


def _categories(props: Dict[str, Any], key: str) -> List[str]:
    value = parse_property(props.get(key))
    if isinstance(value, SelectProperty):
        if value.select and value.select.name:
            return [value.select.name]
        return []
    if isinstance(value, MultiSelectProperty):
        return [opt.name for opt in value.multi_select or [] if opt.name]
    return []


def _people_names(props: Dict[str, Any], key: str) -> List[str]:
    prop = _typed(props, key, PeopleProperty)
    if prop is None:
        return []
    names = [person.name for person in prop.people or [] if person.name]
    return list(dict.fromkeys(names))


def _file_urls(props: Dict[str, Any], key: str) -> List[str]:
    prop = _typed(props, key, FilesProperty)
    return prop.urls() if prop else []


def decode_post(page: Dict[str, Any]) -> Post:
    """Build a ``Post`` from a Notion page object."""
    props = property_bag(page) or {}
    page = page if isinstance(page, dict) else {}
    page_id = page.get("id")

    return Post(
        id=page_id if isinstance(page_id, str) else "",
        title=_title(props, PostProperties.TITLE),
        firstCheck=_checkbox(props, PostProperties.FIRST_CHECK),
        secondCheck=_checkbox(props, PostProperties.SECOND_CHECK),
        canvaUrl=_url(props, PostProperties.CANVA_URL),
        categories=_categories(props, PostProperties.CATEGORY),
        secondCheckAssignees=_people_names(props, PostProperties.SECOND_CHECK_ASSIGNEES),
        authors=_people_names(props, PostProperties.AUTHORS),
        fileUrls=_file_urls(props, PostProperties.FILES),
        status=_status(props, PostProperties.STATUS),
        createdTime=parse_iso_datetime(page.get("created_time")),
        lastEditedTime=parse_iso_datetime(page.get("last_edited_time")),
        imagePath=_rich_text(props, PostProperties.IMAGE_PATH),
    )


def first_file_url(page: Dict[str, Any], key: str = PostProperties.FILES) -> Optional[str]:
    """First attached media URL of a page, without decoding the rest of it."""
    props = property_bag(page)
    if props is None:
        return None
    urls = _file_urls(props, key)
    return urls[0] if urls else None


def _clean(value: Optional[str]) -> str:
    return (value or "").strip()


def encode_post_properties(data: UpsertPostInput) -> Dict[str, Any]:
    """Build the Notion ``properties`` patch for a create or update.

    Title and both checks are always written. Optional fields are written
    only when the caller sent them; sent-but-empty clears the stored value.
    """
    supplied = data.model_fields_set
    props: Dict[str, Any] = {
        PostProperties.TITLE: {"title": [{"text": {"content": data.title.strip()}}]},
        PostProperties.FIRST_CHECK: {"checkbox": data.firstCheck},
        PostProperties.SECOND_CHECK: {"checkbox": data.secondCheck},
    }

    if "canvaUrl" in supplied:
        url = _clean(data.canvaUrl)
        props[PostProperties.CANVA_URL] = {"url": url or None}

    if "categories" in supplied:
        # Category is a Notion select, which holds a single option: only the
        # first entry is stored and the rest are dropped.
        name = _clean(data.categories[0]) if data.categories else ""
        props[PostProperties.CATEGORY] = {"select": {"name": name}} if name else {"select": None}

    if "status" in supplied:
        status = _clean(data.status)
        props[PostProperties.STATUS] = {"status": {"name": status} if status else None}

    if "imagePath" in supplied:
        path = _clean(data.imagePath)
        props[PostProperties.IMAGE_PATH] = {
            "rich_text": [{"text": {"content": path}}] if path else []
        }

    return props
