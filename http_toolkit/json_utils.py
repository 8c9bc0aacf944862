import json
import logging
from typing import Any, Mapping, Optional, Type, TypeVar

import requests
from fastapi import Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ValidationError

from http_toolkit.errors import JSONBodyError, SizeLimitExceeded
from http_toolkit.stream_utils import limit_stream

logger = logging.getLogger(__name__)

DEFAULT_MAX_JSON_SIZE = 1024 * 1024  # 1MB

ModelT = TypeVar("ModelT", bound=BaseModel)


class JSONPayload(BaseModel):
    error: bool = False
    message: str
    data: Optional[Any] = None


def _known_keys(model: Type[BaseModel]) -> set[str]:
    keys = set()
    for name, info in model.model_fields.items():
        keys.add(name)
        if info.alias:
            keys.add(info.alias)
    return keys


def _decode_single_value(body: bytes) -> Any:
    if not body.strip():
        raise JSONBodyError("body must not be empty")

    try:
        text = body.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise JSONBodyError(f"body contains badly-formed JSON (at character {exc.start})") from exc

    decoder = json.JSONDecoder()
    start = len(text) - len(text.lstrip())
    try:
        value, end = decoder.raw_decode(text, start)
    except json.JSONDecodeError as exc:
        if exc.pos >= len(text.rstrip()):
            raise JSONBodyError("body contains badly-formed JSON") from exc
        raise JSONBodyError(f"body contains badly-formed JSON (at character {exc.pos})") from exc

    if text[end:].strip():
        raise JSONBodyError("body must only contain a single JSON value")
    return value


async def read_json(
    request: Request,
    model: Type[ModelT],
    max_size: int = DEFAULT_MAX_JSON_SIZE,
    allow_unknown_fields: bool = False,
) -> ModelT:
    """Read exactly one JSON value from the request body into `model`.

    Failures raise JSONBodyError with a message suitable for returning to the
    client.
    """
    body = b""
    try:
        async for chunk in limit_stream(request.stream(), max_size):
            body += chunk
    except SizeLimitExceeded as exc:
        raise JSONBodyError(
            f"body must not be larger than {max_size} bytes",
            status_code=status.HTTP_413_CONTENT_TOO_LARGE,
        ) from exc

    value = _decode_single_value(body)

    if not allow_unknown_fields and isinstance(value, dict):
        unknown = [key for key in value if key not in _known_keys(model)]
        if unknown:
            raise JSONBodyError(f'body contains unknown key "{unknown[0]}"')

    try:
        return model.model_validate_json(body, strict=True)
    except ValidationError as exc:
        first = exc.errors()[0]
        field_name = ".".join(str(part) for part in first["loc"])
        if first["type"] == "missing":
            raise JSONBodyError(f'body is missing field "{field_name}"') from exc
        if field_name:
            raise JSONBodyError(f'body contains incorrect JSON type for field "{field_name}"') from exc
        raise JSONBodyError("body contains incorrect JSON type") from exc


def write_json(
    data: Any,
    status_code: int = status.HTTP_200_OK,
    headers: Optional[Mapping[str, str]] = None,
) -> JSONResponse:
    if isinstance(data, JSONPayload):
        content = data.model_dump(mode="json", exclude_none=True)
    else:
        content = jsonable_encoder(data)
    return JSONResponse(content=content, status_code=status_code, headers=dict(headers or {}))


def error_json(exc: Exception, status_code: int = status.HTTP_400_BAD_REQUEST) -> JSONResponse:
    return write_json(JSONPayload(error=True, message=str(exc)), status_code=status_code)


def push_json_to_remote(
    uri: str,
    data: Any,
    session: Optional[requests.Session] = None,
    timeout: float = 10,
) -> tuple[requests.Response, int]:
    """POST `data` as JSON to `uri` and return the response with its status code."""
    payload = data.model_dump(mode="json") if isinstance(data, BaseModel) else jsonable_encoder(data)
    sender = session or requests
    response = sender.post(
        uri,
        data=json.dumps(payload),
        headers={"Content-Type": "application/json"},
        timeout=timeout,
    )
    logger.debug("Pushed JSON to %s: %s", uri, response.status_code)
    return response, response.status_code
