"""Tests for the request encoder (JSON body vs multipart form)."""

import io
import json
from dataclasses import dataclass
from typing import Any

import pytest

from gramvibe import (
    EncodingError,
    GetUpdatesParams,
    InlineKeyboardButton,
    InlineKeyboardMarkup,
    InputFileString,
    InputFileUpload,
    SendMessageParams,
    SendPhotoParams,
    SetWebhookParams,
    encode_params,
    param,
)
from gramvibe.fields import field_specs, is_empty
from gramvibe.params import _unquote, encode_multipart, should_use_multipart

BOUNDARY = "testboundary"


def render(params: Any) -> bytes:
    return b"".join(encode_multipart(params, boundary=BOUNDARY).body)


@dataclass
class WithCallable:
    chat_id: int = param("chat_id")
    hook: Any = param("hook", default=None)


@dataclass
class WithNestedUpload:
    chat_id: int = param("chat_id")
    media: Any = param("media", default=None)


class TestFieldSpecs:
    def test_wire_names_and_flags(self):
        specs = {s.attr: s for s in field_specs(SendMessageParams)}
        assert specs["chat_id"].wire_name == "chat_id"
        assert not specs["chat_id"].omit_empty
        assert specs["parse_mode"].omit_empty

    def test_table_is_cached(self):
        assert field_specs(SendPhotoParams) is field_specs(SendPhotoParams)

    @pytest.mark.parametrize("value", [None, "", 0, 0.0, False, [], {}, ()])
    def test_empty_values(self, value):
        assert is_empty(value)

    @pytest.mark.parametrize("value", ["x", 1, True, [0], InputFileString("id")])
    def test_non_empty_values(self, value):
        assert not is_empty(value)


class TestJSONMode:
    def test_omits_empty_flagged_fields(self):
        body = encode_params(SendMessageParams(chat_id=1, text="hi"))
        assert body.content_type == "application/json"
        assert not body.multipart
        assert json.loads(body.body) == {"chat_id": 1, "text": "hi"}

    def test_get_updates_defaults_encode_to_empty_object(self):
        body = encode_params(GetUpdatesParams())
        assert json.loads(body.body) == {}

    def test_get_updates_negative_offset_is_kept(self):
        body = encode_params(GetUpdatesParams(offset=-1, limit=1, timeout=1))
        assert json.loads(body.body) == {"offset": -1, "limit": 1, "timeout": 1}

    def test_nested_composite_uses_wire_names(self):
        markup = InlineKeyboardMarkup([[InlineKeyboardButton("Go", callback_data="go")]])
        body = encode_params(SendMessageParams(chat_id=1, text="hi", reply_markup=markup))
        assert json.loads(body.body)["reply_markup"] == {
            "inline_keyboard": [[{"text": "Go", "callback_data": "go"}]],
        }

    def test_file_reference_stays_json(self):
        params = SendPhotoParams(chat_id=1, photo=InputFileString("AgACfileid"))
        assert not should_use_multipart(params)
        assert json.loads(encode_params(params).body) == {"chat_id": 1, "photo": "AgACfileid"}

    def test_no_params(self):
        body = encode_params(None)
        assert body.body is None
        assert encode_params({}).body is None

    def test_dict_params(self):
        body = encode_params({"chat_id": 5, "text": "ünïcode"})
        assert json.loads(body.body.decode("utf-8")) == {"chat_id": 5, "text": "ünïcode"}

    def test_unsupported_value_names_the_field(self):
        with pytest.raises(EncodingError) as exc_info:
            encode_params(WithCallable(chat_id=1, hook=lambda: None))
        assert exc_info.value.field == "hook"
        assert "hook" in str(exc_info.value)

    def test_non_request_object_is_rejected(self):
        with pytest.raises(EncodingError):
            encode_params(42)


class TestMultipartMode:
    def test_upload_switches_to_multipart(self):
        params = SendPhotoParams(chat_id=7, photo=InputFileUpload("a.jpg", b"\xff\xd8data"), caption="hi")
        body = encode_params(params)
        assert body.multipart
        assert body.content_type.startswith("multipart/form-data; boundary=")

    def test_rendered_parts(self):
        data = render(SendPhotoParams(chat_id=7, photo=InputFileUpload("a.jpg", b"JPEGDATA"), caption="hi"))
        assert data == (
            b"--testboundary\r\n"
            b'Content-Disposition: form-data; name="chat_id"\r\n\r\n'
            b"7\r\n"
            b"--testboundary\r\n"
            b'Content-Disposition: form-data; name="photo"; filename="a.jpg"\r\n'
            b"Content-Type: application/octet-stream\r\n\r\n"
            b"JPEGDATA\r\n"
            b"--testboundary\r\n"
            b'Content-Disposition: form-data; name="caption"\r\n\r\n'
            b"hi\r\n"
            b"--testboundary--\r\n"
        )

    def test_omitted_fields_have_no_part(self):
        data = render(SendPhotoParams(chat_id=7, photo=InputFileUpload("a.jpg", b"x"), reply_to_message_id=0))
        assert b'name="caption"' not in data
        assert b'name="has_spoiler"' not in data
        assert b'name="reply_to_message_id"' not in data

    def test_non_zero_number_has_part(self):
        data = render(SendPhotoParams(chat_id=7, photo=InputFileUpload("a.jpg", b"x"), reply_to_message_id=5))
        assert b'name="reply_to_message_id"\r\n\r\n5\r\n' in data

    def test_empty_collection_has_no_part(self):
        cert = InputFileUpload("cert.pem", b"-----BEGIN CERTIFICATE-----")
        data = render(SetWebhookParams(url="https://example.com/hook", certificate=cert, allowed_updates=[]))
        assert b'name="certificate"; filename="cert.pem"' in data
        assert b'name="allowed_updates"' not in data
        assert b'name="max_connections"' not in data

        data = render(SetWebhookParams(url="https://example.com/hook", certificate=cert,
                                       allowed_updates=["message"], max_connections=40))
        assert b'name="allowed_updates"\r\n\r\n["message"]\r\n' in data
        assert b'name="max_connections"\r\n\r\n40\r\n' in data

    def test_booleans_and_composites_as_text(self):
        markup = InlineKeyboardMarkup([[InlineKeyboardButton("Go", callback_data="go")]])
        params = SendPhotoParams(chat_id=7, photo=InputFileUpload("a.jpg", b"x"),
                                 has_spoiler=True, reply_markup=markup)
        data = render(params)
        assert b'name="has_spoiler"\r\n\r\ntrue\r\n' in data
        assert b'{"inline_keyboard": [[{"text": "Go", "callback_data": "go"}]]}' in data

    def test_stream_source_is_read_in_chunks(self):
        payload = b"a" * (64 * 1024 + 10)
        upload = InputFileUpload("big.bin", io.BytesIO(payload))
        chunks = list(upload.iter_chunks())
        assert [len(c) for c in chunks] == [64 * 1024, 10]

    def test_stream_source_is_not_read_before_iteration(self):
        source = io.BytesIO(b"content")
        body = encode_params(SendPhotoParams(chat_id=1, photo=InputFileUpload("f.txt", source)))
        assert source.tell() == 0
        assert b"content" in b"".join(body.body)

    def test_nested_upload_is_rejected(self):
        params = WithNestedUpload(chat_id=1, media=[InputFileUpload("a.jpg", b"x")])
        with pytest.raises(EncodingError) as exc_info:
            encode_params(params)
        assert exc_info.value.field == "media[0]"

    def test_missing_file_data(self):
        with pytest.raises(EncodingError):
            encode_params(SendPhotoParams(chat_id=1, photo=InputFileUpload("a.jpg", None)))


class TestUnquote:
    @pytest.mark.parametrize("text,expected", [
        ('"abc"', "abc"),
        ('""', ""),
        ('"', '"'),
        ("abc", "abc"),
        ('"a"b"', 'a"b'),
        ("[1, 2]", "[1, 2]"),
    ])
    def test_strips_one_surrounding_pair(self, text, expected):
        assert _unquote(text) == expected
