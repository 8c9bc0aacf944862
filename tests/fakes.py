from __future__ import annotations

import io
from typing import Optional


class FakePart:
    """
    In-memory stand-in for a multipart file part.
    """

    def __init__(
        self,
        filename: Optional[str],
        content: bytes,
        content_type: Optional[str] = None,
        fail_after: Optional[int] = None,
        read_size: Optional[int] = None,
    ) -> None:
        self.filename = filename
        self.content_type = content_type
        self._buffer = io.BytesIO(content)
        # raise OSError once more than this many bytes have been handed out
        self._fail_after = fail_after
        # cap every read, to mimic short reads from a socket
        self._read_size = read_size
        self.closed = False

    async def read(self, size: int = -1) -> bytes:
        if self._read_size is not None and (size < 0 or size > self._read_size):
            size = self._read_size
        data = self._buffer.read(size)
        if self._fail_after is not None and self._buffer.tell() > self._fail_after:
            raise OSError(28, "No space left on device")
        return data

    async def close(self) -> None:
        self.closed = True


async def iterate_parts(parts):
    for part in parts:
        yield part


class FakePartSource:
    def __init__(self, parts) -> None:
        self._parts = list(parts)

    def parts(self):
        return iterate_parts(self._parts)
