from typing import AsyncIterable, AsyncIterator

from http_toolkit.errors import SizeLimitExceeded


async def limit_stream(stream: AsyncIterable[bytes], max_bytes: int) -> AsyncIterator[bytes]:
    """Yield chunks from `stream`, failing once more than `max_bytes` have been seen.

    The offending chunk is never yielded.
    """
    received = 0
    async for chunk in stream:
        received += len(chunk)
        if received > max_bytes:
            raise SizeLimitExceeded(f"request body must not be larger than {max_bytes} bytes")
        yield chunk
