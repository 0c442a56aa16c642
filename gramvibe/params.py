"""
Request encoder.

An outgoing request (a dataclass built with `fields.param`, or a plain dict)
becomes one of two bodies:

 - structured body: a single JSON document using the declared wire names;
 - multi-part form: one part per field, used as soon as any field holds a
   value whose `is_upload` is true (an InputFileUpload, even when the field
   is declared as the generic InputFile).

Fields flagged omit_empty are left out of both bodies when their value is
empty (None, "", 0, False, empty collection).
"""

from __future__ import annotations

import dataclasses
import json
from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterable, Iterator, List, Optional, Tuple, Union

from urllib3.fields import RequestField
from urllib3.filepost import choose_boundary

from .errors import EncodingError
from .fields import field_specs, is_empty
from .types.input_file import CHUNK_SIZE, InputFile, InputFileString, InputFileUpload

JSON_CONTENT_TYPE = "application/json"
FILE_CONTENT_TYPE = "application/octet-stream"


@dataclass
class EncodedBody:
    content_type: Optional[str]
    body: Union[bytes, Iterable[bytes], None]
    multipart: bool = False


def _is_upload(value: Any) -> bool:
    return bool(getattr(value, "is_upload", False))


def _raw_fields(params: Any) -> List[Tuple[str, Any, bool]]:
    """(wire name, value, omit_empty) for every top-level field of a request."""
    if isinstance(params, dict):
        return [(str(k), v, False) for k, v in params.items()]
    if dataclasses.is_dataclass(params) and not isinstance(params, type):
        return [(s.wire_name, getattr(params, s.attr), s.omit_empty) for s in field_specs(type(params))]
    raise EncodingError("<params>", f"request must be a dataclass or a dict, got {type(params).__name__}")


def _present_fields(params: Any) -> Iterator[Tuple[str, Any]]:
    for name, value, omit_empty in _raw_fields(params):
        if omit_empty and is_empty(value):
            continue
        yield name, value


def should_use_multipart(params: Any) -> bool:
    if params is None:
        return False
    return any(_is_upload(value) for _, value in _present_fields(params))


def to_wire(value: Any, field: str = "<value>") -> Any:
    """Convert a request value into JSON-compatible data using wire names."""
    if value is None or isinstance(value, (str, bool, int, float)):
        return value
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, InputFileString):
        return value.data
    if isinstance(value, InputFile):
        # uploads only travel as file parts
        raise EncodingError(field, "file upload cannot be nested inside another value")
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return {name: to_wire(v, f"{field}.{name}") for name, v in _present_fields(value)}
    if isinstance(value, dict):
        return {str(k): to_wire(v, f"{field}.{k}") for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_wire(v, f"{field}[{i}]") for i, v in enumerate(value)]
    raise EncodingError(field, f"unsupported field type {type(value).__name__}")


def encode_json(params: Any) -> EncodedBody:
    if params is None or (isinstance(params, dict) and not params):
        return EncodedBody(content_type=JSON_CONTENT_TYPE, body=None)
    payload = {name: to_wire(value, name) for name, value in _present_fields(params)}
    try:
        data = json.dumps(payload, ensure_ascii=False).encode("utf-8")
    except (TypeError, ValueError) as e:
        raise EncodingError("<params>", str(e)) from e
    return EncodedBody(content_type=JSON_CONTENT_TYPE, body=data)


# ---- multi-part ----
def _unquote(text: str) -> str:
    if len(text) >= 2 and text[0] == '"' and text[-1] == '"':
        return text[1:-1]
    return text


def _form_text(name: str, value: Any) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return str(value)
    if isinstance(value, Enum):
        return str(value.value)
    if isinstance(value, InputFileString):
        return value.data
    if isinstance(value, (list, tuple, dict)) or (dataclasses.is_dataclass(value) and not isinstance(value, type)):
        return _unquote(json.dumps(to_wire(value, name), ensure_ascii=False))
    raise EncodingError(name, f"unsupported field type {type(value).__name__}")


def _part_headers(name: str, filename: Optional[str] = None, content_type: Optional[str] = None) -> bytes:
    rf = RequestField(name=name, data=b"", filename=filename)
    rf.make_multipart(content_type=content_type)
    return rf.render_headers().encode("utf-8")


class _TextPart:
    def __init__(self, name: str, text: str):
        self.headers = _part_headers(name)
        self.text = text

    def chunks(self) -> Iterator[bytes]:
        yield self.text.encode("utf-8")


class _FilePart:
    def __init__(self, name: str, upload: InputFileUpload):
        if upload.data is None:
            raise EncodingError(name, "file data is empty")
        self.headers = _part_headers(name, filename=upload.filename or name, content_type=FILE_CONTENT_TYPE)
        self.upload = upload

    def chunks(self) -> Iterator[bytes]:
        return self.upload.iter_chunks(CHUNK_SIZE)


class MultipartStream:
    """
    Lazily rendered multipart/form-data body.

    Parts are validated when the stream is built; file contents are read one
    chunk at a time while the HTTP client consumes the iterator, so at most
    one chunk of an upload is held in memory.
    """

    def __init__(self, parts: List[Union[_TextPart, _FilePart]], boundary: Optional[str] = None):
        self.parts = parts
        self.boundary = boundary or choose_boundary()

    @property
    def content_type(self) -> str:
        return f"multipart/form-data; boundary={self.boundary}"

    def __iter__(self) -> Iterator[bytes]:
        delimiter = f"--{self.boundary}\r\n".encode("latin-1")
        for part in self.parts:
            yield delimiter
            yield part.headers
            yield from part.chunks()
            yield b"\r\n"
        yield f"--{self.boundary}--\r\n".encode("latin-1")


def encode_multipart(params: Any, boundary: Optional[str] = None) -> EncodedBody:
    parts: List[Union[_TextPart, _FilePart]] = []
    for name, value in _present_fields(params):
        if value is None:
            continue
        if _is_upload(value):
            parts.append(_FilePart(name, value))
        else:
            parts.append(_TextPart(name, _form_text(name, value)))
    stream = MultipartStream(parts, boundary)
    return EncodedBody(content_type=stream.content_type, body=stream, multipart=True)


def encode_params(params: Any) -> EncodedBody:
    if should_use_multipart(params):
        return encode_multipart(params)
    return encode_json(params)
