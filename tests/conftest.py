import io

import pytest
from PIL import Image
from starlette.requests import Request

BOUNDARY = "toolkit-test-boundary"


def encode_multipart(files=(), fields=(), boundary=BOUNDARY):
    """Build a multipart/form-data body.

    `files` holds (field name, filename, content, declared content type) tuples
    and `fields` holds (name, value) pairs for plain form fields.
    """
    body = b""
    for name, value in fields:
        body += (
            f"--{boundary}\r\n"
            f'Content-Disposition: form-data; name="{name}"\r\n\r\n'
        ).encode() + value.encode() + b"\r\n"
    for name, filename, content, content_type in files:
        body += (
            f"--{boundary}\r\n"
            f'Content-Disposition: form-data; name="{name}"; filename="{filename}"\r\n'
            f"Content-Type: {content_type}\r\n\r\n"
        ).encode() + content + b"\r\n"
    body += f"--{boundary}--\r\n".encode()
    return body, f"multipart/form-data; boundary={boundary}"


def build_request(body: bytes, content_type: str = None, chunk_size: int = 1024, disconnect: bool = False):
    chunks = [body[i : i + chunk_size] for i in range(0, len(body), chunk_size)] or [b""]
    messages = [
        {
            "type": "http.request",
            "body": chunk,
            "more_body": disconnect or index < len(chunks) - 1,
        }
        for index, chunk in enumerate(chunks)
    ]

    async def receive():
        if messages:
            return messages.pop(0)
        return {"type": "http.disconnect"}

    headers = []
    if content_type is not None:
        headers.append((b"content-type", content_type.encode("latin-1")))

    scope = {
        "type": "http",
        "method": "POST",
        "path": "/",
        "query_string": b"",
        "headers": headers,
    }
    return Request(scope, receive)


@pytest.fixture
def png_bytes() -> bytes:
    buffer = io.BytesIO()
    Image.effect_noise((64, 64), 64).convert("RGB").save(buffer, format="PNG")
    return buffer.getvalue()


@pytest.fixture
def upload_dir(tmp_path):
    return tmp_path / "uploads"


@pytest.fixture
def multipart_request():
    def _make(files=(), fields=(), **kwargs):
        body, content_type = encode_multipart(files, fields)
        return build_request(body, content_type, **kwargs)

    return _make
