from __future__ import annotations

from dataclasses import dataclass
from typing import BinaryIO, Iterator, Union

CHUNK_SIZE = 64 * 1024


class InputFile:
    """
    Value accepted by file fields of outgoing requests.

    Subclasses set `is_upload`; the request encoder switches to multi-part
    mode when any field holds a value with is_upload = True.
    """

    is_upload = False


@dataclass
class InputFileString(InputFile):
    """A file already known to the platform (file_id) or reachable by URL."""

    data: str


@dataclass
class InputFileUpload(InputFile):
    """Raw bytes or a binary stream sent as a file part."""

    filename: str
    data: Union[bytes, BinaryIO]

    is_upload = True

    def iter_chunks(self, chunk_size: int = CHUNK_SIZE) -> Iterator[bytes]:
        if self.data is None:
            raise ValueError("file data is empty")
        if isinstance(self.data, (bytes, bytearray, memoryview)):
            view = memoryview(self.data)
            for start in range(0, len(view), chunk_size):
                yield bytes(view[start:start + chunk_size])
            return
        while True:
            chunk = self.data.read(chunk_size)
            if not chunk:
                break
            yield chunk
