import pytest

from memos_wox.core.config import ClientConfig, normalize_host
from memos_wox.core.exceptions import ActionPayloadException
from memos_wox.core.models import ApiResult, Attachment, Memo
from memos_wox.core.payloads import (
    ACTION_KEY, CreateMemoPayload, DeleteMemoPayload, EditMemoPayload, OpenMemoPayload,
    decode_payload, encode_payload
)
from memos_wox.services.memos_api import ListPayloadShape, decode_list_payload


def test_memo_from_dict_reads_attachments():
    memo = Memo.from_dict({
        "name": "memos/abc",
        "content": "Hello #work",
        "createTime": "2024-03-01T08:00:00Z",
        "attachments": [
            {"name": "attachments/1", "filename": "photo.png", "type": "image/png", "size": "2048"},
            {"name": "attachments/2", "filename": "doc.pdf", "type": "application/pdf",
             "externalLink": "https://cdn.example.com/doc.pdf"},
            "not-an-attachment"
        ]
    })

    assert memo.name == "memos/abc"
    assert memo.create_time == "2024-03-01T08:00:00Z"
    assert len(memo.attachments) == 2
    assert memo.attachments[0].is_image
    assert not memo.attachments[1].is_image
    assert memo.attachments[1].external_link == "https://cdn.example.com/doc.pdf"


def test_memo_from_dict_falls_back_to_resources_and_created_ts():
    memo = Memo.from_dict({
        "name": "memos/1",
        "content": "old server",
        "createdTs": 1700000000,
        "resources": [{"name": "resources/9", "filename": "a.jpg", "type": "image/jpeg"}]
    })

    assert memo.create_time is None
    assert memo.created_ts == "1700000000"
    assert memo.attachments == (Attachment(name="resources/9", filename="a.jpg", type="image/jpeg"),)


def test_memo_from_dict_tolerates_missing_fields():
    memo = Memo.from_dict({})
    assert memo.name == ""
    assert memo.content == ""
    assert memo.attachments == ()


def test_failed_api_result_requires_error():
    with pytest.raises(ValueError):
        ApiResult(success=False)
    assert ApiResult.fail("boom").error == "boom"
    assert ApiResult.ok({"a": 1}).data == {"a": 1}


@pytest.mark.parametrize("raw,expected", [
    ("https://memos.example.com/", "https://memos.example.com"),
    ("  https://memos.example.com//  ", "https://memos.example.com"),
    ("", ""),
    (None, "")
])
def test_normalize_host(raw, expected):
    assert normalize_host(raw) == expected


def test_client_config_completeness():
    assert ClientConfig.from_settings("https://m.example.com/", " token ") == ClientConfig("https://m.example.com", "token")
    assert ClientConfig.from_settings("https://m.example.com", "").is_complete is False
    assert ClientConfig.from_settings("", "token").is_complete is False
    assert ClientConfig.from_settings("https://m.example.com", "token").is_complete is True


def test_payload_encoding_carries_action_kind():
    data = encode_payload(EditMemoPayload(name="memos/1", content="text"))
    assert data == {ACTION_KEY: "edit", "name": "memos/1", "content": "text"}
    assert decode_payload(data) == EditMemoPayload(name="memos/1", content="text")


def test_payload_decoding_returns_typed_payloads():
    assert decode_payload({"action": "open", "url": "https://m/memos/1"}) == OpenMemoPayload(url="https://m/memos/1")
    assert decode_payload({"action": "delete", "name": "memos/1"}) == DeleteMemoPayload(name="memos/1")
    assert decode_payload({"action": "create", "content": " "}) == CreateMemoPayload(content=" ")


@pytest.mark.parametrize("data", [
    None,
    "open",
    {},
    {"action": "explode"},
    {"action": "edit", "name": "memos/1"},
    {"action": "delete", "name": ""},
    {"action": "open", "url": 42}
])
def test_payload_decoding_rejects_malformed_data(data):
    with pytest.raises(ActionPayloadException):
        decode_payload(data)


def test_decode_list_payload_shapes():
    assert decode_list_payload([{"name": "a"}]).shape is ListPayloadShape.ARRAY
    assert decode_list_payload({"memos": []}).shape is ListPayloadShape.WRAPPED_MEMOS
    assert decode_list_payload({"data": [1]}).items == [1]

    unrecognized = decode_list_payload({"foo": 1, "bar": 2})
    assert unrecognized.shape is ListPayloadShape.UNRECOGNIZED
    assert unrecognized.keys == ["foo", "bar"]
    assert decode_list_payload("text").shape is ListPayloadShape.UNRECOGNIZED
