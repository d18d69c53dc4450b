"""PropertyCodec: decoding Notion pages and encoding post patches."""

from datetime import datetime, timezone

import pytest

from notion_fakes import (
    checkbox,
    external_file,
    files,
    hosted_file,
    multi_select,
    page,
    people,
    person,
    rich_text,
    select,
    status,
    title,
    url,
)
from src.services.property_codec import decode_post, encode_post_properties, first_file_url
from src.specs.models.post import Post, UpsertPostInput
from src.specs.notion.schema import PostProperties as P


def full_page():
    return page(
        "page-1",
        {
            P.TITLE: title("Launch post"),
            P.FIRST_CHECK: checkbox(True),
            P.SECOND_CHECK: checkbox(False),
            P.CANVA_URL: url("https://canva.example/d/1"),
            P.CATEGORY: select("News"),
            P.SECOND_CHECK_ASSIGNEES: people(person("u2", "Bo")),
            P.AUTHORS: people(person("u1", "Ann"), person("u3", "Cy")),
            P.FILES: files(hosted_file("https://files.example/a.png"), external_file("https://cdn.example/b.png")),
            P.STATUS: status("complete"),
            P.IMAGE_PATH: rich_text("/assets/launch"),
        },
        created="2024-03-01T09:30:00.000Z",
    )


def test_decode_reads_every_field():
    post = decode_post(full_page())

    assert post.id == "page-1"
    assert post.title == "Launch post"
    assert post.firstCheck is True
    assert post.secondCheck is False
    assert post.canvaUrl == "https://canva.example/d/1"
    assert post.categories == ["News"]
    assert post.secondCheckAssignees == ["Bo"]
    assert post.authors == ["Ann", "Cy"]
    assert post.fileUrls == ["https://files.example/a.png", "https://cdn.example/b.png"]
    assert post.status == "complete"
    assert post.imagePath == "/assets/launch"
    assert post.createdTime == datetime(2024, 3, 1, 9, 30, tzinfo=timezone.utc)


DEFAULTS = {
    P.TITLE: ("title", ""),
    P.FIRST_CHECK: ("firstCheck", False),
    P.SECOND_CHECK: ("secondCheck", False),
    P.CANVA_URL: ("canvaUrl", None),
    P.CATEGORY: ("categories", []),
    P.SECOND_CHECK_ASSIGNEES: ("secondCheckAssignees", []),
    P.AUTHORS: ("authors", []),
    P.FILES: ("fileUrls", []),
    P.STATUS: ("status", None),
    P.IMAGE_PATH: ("imagePath", None),
}

WRONG_TAG = {"type": "number", "number": 3}

EMPTY_PAYLOAD = {
    P.TITLE: title(""),
    P.FIRST_CHECK: checkbox(None),
    P.SECOND_CHECK: checkbox(None),
    P.CANVA_URL: url(None),
    P.CATEGORY: select(None),
    P.SECOND_CHECK_ASSIGNEES: people(),
    P.AUTHORS: people(),
    P.FILES: files(),
    P.STATUS: status(None),
    P.IMAGE_PATH: {"type": "rich_text", "rich_text": []},
}


@pytest.mark.parametrize("prop_name", list(DEFAULTS))
@pytest.mark.parametrize("damage", ["missing", "wrong_tag", "empty", "garbage"])
def test_decode_degrades_each_field_to_its_default(prop_name, damage):
    doc = full_page()
    props = doc["properties"]
    if damage == "missing":
        del props[prop_name]
    elif damage == "wrong_tag":
        props[prop_name] = WRONG_TAG
    elif damage == "empty":
        props[prop_name] = EMPTY_PAYLOAD[prop_name]
    else:
        kind = props[prop_name]["type"]
        props[prop_name] = {"type": kind, kind: {"unexpected": True}}

    post = decode_post(doc)

    field, default = DEFAULTS[prop_name]
    assert getattr(post, field) == default
    # The other fields are untouched.
    assert post.id == "page-1"
    if prop_name != P.TITLE:
        assert post.title == "Launch post"


@pytest.mark.parametrize("doc", [{}, {"object": "database"}, {"properties": None}, None, "nonsense"])
def test_decode_never_raises_on_missing_structure(doc):
    post = decode_post(doc)
    assert post == Post(id="")


def test_decode_category_falls_back_to_multi_select():
    doc = page("p", {P.CATEGORY: multi_select("A", "", "B")})
    assert decode_post(doc).categories == ["A", "B"]


def test_decode_people_drops_nameless_entries_and_duplicates():
    doc = page("p", {P.AUTHORS: people(person("u1", "Ann"), person("u2"), person("u1", "Ann"), person("u4", ""))})
    assert decode_post(doc).authors == ["Ann"]


def test_decode_files_reads_url_from_the_declared_subfield():
    doc = page(
        "p",
        {
            P.FILES: files(
                {"type": "file", "external": {"url": "https://wrong.example"}},
                {"type": "external", "external": {}},
                {"type": "external", "external": {"url": "https://ok.example/x"}},
                {"type": "file", "file": {"url": ""}},
            )
        },
    )
    assert decode_post(doc).fileUrls == ["https://ok.example/x"]


def test_decode_malformed_list_entries_are_dropped_one_by_one():
    doc = page(
        "p",
        {
            P.FILES: files({"type": "file", "file": "oops"}, external_file("https://ok.example/x"), 42),
            P.AUTHORS: people(person("u1", "Ann"), {"id": "u2", "name": 7}, "u3"),
            P.SECOND_CHECK_ASSIGNEES: people(None, person("u4", "Dee")),
            P.CATEGORY: {"type": "multi_select", "multi_select": [{"name": "A"}, {"name": ["x"]}, {"name": "B"}]},
            P.TITLE: {"type": "title", "title": [{"plain_text": "Kept"}, {"plain_text": {"bad": 1}}, "junk"]},
        },
    )

    post = decode_post(doc)

    assert post.fileUrls == ["https://ok.example/x"]
    assert post.authors == ["Ann"]
    assert post.secondCheckAssignees == ["Dee"]
    assert post.categories == ["A", "B"]
    assert post.title == "Kept"
    assert first_file_url(doc) == "https://ok.example/x"


def test_decode_title_joins_all_segments():
    doc = page("p", {P.TITLE: {"type": "title", "title": [{"plain_text": "Hello "}, {"plain_text": "world"}]}})
    assert decode_post(doc).title == "Hello world"


def test_decode_string_checkbox_is_not_coerced():
    doc = page("p", {P.FIRST_CHECK: checkbox("true")})
    assert decode_post(doc).firstCheck is False


def test_first_file_url_returns_first_usable_url():
    doc = page("p", {P.FILES: files({"type": "file"}, external_file("https://cdn.example/1"), hosted_file("https://f/2"))})
    assert first_file_url(doc) == "https://cdn.example/1"
    assert first_file_url(page("p", {})) is None
    assert first_file_url({"object": "database"}) is None


def test_encode_always_includes_title_and_checks():
    patch = encode_post_properties(UpsertPostInput(title="  T  ", firstCheck=True, secondCheck=False))

    assert patch == {
        P.TITLE: {"title": [{"text": {"content": "T"}}]},
        P.FIRST_CHECK: {"checkbox": True},
        P.SECOND_CHECK: {"checkbox": False},
    }


def test_encode_omits_fields_that_were_not_sent():
    patch = encode_post_properties(UpsertPostInput.model_validate({"title": "T"}))

    for omitted in (P.CANVA_URL, P.CATEGORY, P.STATUS, P.IMAGE_PATH):
        assert omitted not in patch


def test_encode_writes_only_the_first_category():
    patch = encode_post_properties(UpsertPostInput(title="T", categories=["A", "B"]))
    assert patch[P.CATEGORY] == {"select": {"name": "A"}}


@pytest.mark.parametrize("categories", [[], None, ["  "]])
def test_encode_empty_categories_clear_the_select(categories):
    patch = encode_post_properties(UpsertPostInput(title="T", categories=categories))
    assert patch[P.CATEGORY] == {"select": None}


@pytest.mark.parametrize("value", ["", "   ", None])
def test_encode_blank_url_status_and_image_path_clear_the_stored_value(value):
    patch = encode_post_properties(UpsertPostInput(title="T", canvaUrl=value, status=value, imagePath=value))

    assert patch[P.CANVA_URL] == {"url": None}
    assert patch[P.STATUS] == {"status": None}
    assert patch[P.IMAGE_PATH] == {"rich_text": []}


def test_encode_trims_free_text_fields():
    patch = encode_post_properties(
        UpsertPostInput(title="T", canvaUrl=" https://canva.example/x ", status=" draft ", imagePath=" /a ")
    )

    assert patch[P.CANVA_URL] == {"url": "https://canva.example/x"}
    assert patch[P.STATUS] == {"status": {"name": "draft"}}
    assert patch[P.IMAGE_PATH] == {"rich_text": [{"text": {"content": "/a"}}]}


def test_blank_title_is_rejected_by_the_input_model():
    with pytest.raises(ValueError):
        UpsertPostInput(title="   ")
