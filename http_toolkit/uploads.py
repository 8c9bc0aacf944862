import logging
from contextlib import aclosing, suppress
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import AsyncIterable, AsyncIterator, Optional, Protocol

import aiofiles
from fastapi import Request
from fastapi.routing import APIRouter
from starlette.datastructures import UploadFile as StarletteUploadFile
from starlette.formparsers import MultiPartException, MultiPartParser
from starlette.requests import ClientDisconnect

from http_toolkit import config
from http_toolkit.errors import (
    CountMismatch,
    ParseError,
    SizeLimitExceeded,
    TypeRejected,
    UploadIOError,
)
from http_toolkit.json_utils import JSONPayload, write_json
from http_toolkit.sniffing import base_type, sniff_stream
from http_toolkit.storage_utils import (
    PathLike,
    base_name,
    create_dir_if_not_exists,
    file_extension,
)
from http_toolkit.stream_utils import limit_stream
from http_toolkit.token_utils import random_string

logger = logging.getLogger(__name__)

router = APIRouter()

CHUNK_SIZE = 65536
RANDOM_NAME_LENGTH = 25
DEFAULT_MAX_UPLOAD_SIZE = config.DEFAULT_MAX_UPLOAD_SIZE


@dataclass(frozen=True)
class UploadPolicy:
    """What a single upload call accepts.

    An empty ``allowed_file_types`` accepts any sniffed type. ``max_file_size``
    caps the number of request body bytes read for the whole call.
    """

    allowed_file_types: frozenset[str] = field(default_factory=frozenset)
    max_file_size: int = DEFAULT_MAX_UPLOAD_SIZE

    def __post_init__(self) -> None:
        normalized = frozenset(
            filter(None, (base_type(mime) for mime in self.allowed_file_types))
        )
        object.__setattr__(self, "allowed_file_types", normalized)
        if self.max_file_size <= 0:
            raise ValueError("max_file_size must be positive")

    def allows(self, mime: str) -> bool:
        if not self.allowed_file_types:
            return True
        return base_type(mime) in self.allowed_file_types


@dataclass(frozen=True)
class UploadedFile:
    original_file_name: str
    new_file_name: str
    file_size: int


class FilePart(Protocol):
    filename: Optional[str]
    content_type: Optional[str]

    async def read(self, size: int = -1) -> bytes: ...

    async def close(self) -> None: ...


class PartSource(Protocol):
    def parts(self) -> AsyncIterator[FilePart]: ...


def _is_multipart(content_type: Optional[str]) -> bool:
    return base_type(content_type) == "multipart/form-data"


class FormPartSource:
    """File parts of a multipart/form-data request.

    Parsing is delegated to Starlette's MultiPartParser, which spools every
    part into a SpooledTemporaryFile so memory use stays bounded.
    """

    def __init__(self, request: Request, max_bytes: int) -> None:
        self._request = request
        self._max_bytes = max_bytes

    async def _parse(self):
        content_type = self._request.headers.get("content-type")
        if not _is_multipart(content_type):
            raise ParseError("request content type is not multipart/form-data")
        if "boundary=" not in content_type.lower():
            raise ParseError("multipart request has no boundary")

        parser = MultiPartParser(
            self._request.headers,
            limit_stream(self._request.stream(), self._max_bytes),
        )
        try:
            return await parser.parse()
        except SizeLimitExceeded:
            # the parser only releases its spooled files on MultiPartException
            for spooled in parser._files_to_close_on_error:
                with suppress(OSError):
                    spooled.close()
            raise
        except (MultiPartException, ValueError) as exc:
            raise ParseError(f"could not parse multipart body: {exc}") from exc
        except ClientDisconnect as exc:
            raise UploadIOError("client disconnected before the upload completed") from exc

    async def parts(self) -> AsyncIterator[FilePart]:
        form = await self._parse()
        try:
            for _, value in form.multi_items():
                if isinstance(value, StarletteUploadFile):
                    yield value
        finally:
            await form.close()


def _new_file_name(original_name: str, rename_files: bool) -> str:
    if not rename_files:
        return original_name
    return random_string(RANDOM_NAME_LENGTH) + file_extension(original_name)


async def _write_part(part: FilePart, prefix: bytes, destination: Path) -> int:
    written_bytes = 0
    try:
        async with aiofiles.open(destination, "wb") as output:
            chunk = prefix
            while chunk:
                await output.write(chunk)
                written_bytes += len(chunk)
                chunk = await part.read(CHUNK_SIZE)
    except Exception as exc:
        with suppress(OSError):
            destination.unlink(missing_ok=True)
        if isinstance(exc, OSError):
            raise UploadIOError(f"could not write uploaded file: {exc.strerror or exc}") from exc
        raise
    return written_bytes


async def _store_part(
    part: FilePart,
    destination_dir: PathLike,
    rename_files: bool,
    policy: UploadPolicy,
) -> UploadedFile:
    original_name = base_name(part.filename)
    detected_mime, prefix = await sniff_stream(part)

    declared_mime = base_type(part.content_type)
    if declared_mime and declared_mime != base_type(detected_mime):
        logger.debug(
            "Declared content type %s differs from sniffed %s for %r",
            declared_mime,
            detected_mime,
            original_name,
        )

    if not policy.allows(detected_mime):
        logger.warning("Rejected upload %r with type %s", original_name, detected_mime)
        raise TypeRejected(f"the uploaded file type {base_type(detected_mime)} is not permitted")

    new_name = _new_file_name(original_name, rename_files)
    directory = create_dir_if_not_exists(destination_dir)
    destination = directory / new_name

    try:
        size = await _write_part(part, prefix, destination)
    except UploadIOError:
        logger.warning("Failed to store upload %r as %s", original_name, new_name)
        raise

    logger.info(
        "Stored upload %r as %s (%d bytes, %s)",
        original_name,
        new_name,
        size,
        detected_mime,
    )
    return UploadedFile(
        original_file_name=original_name,
        new_file_name=new_name,
        file_size=size,
    )


async def ingest_parts(
    parts: AsyncIterable[FilePart],
    destination_dir: PathLike,
    rename_files: bool = True,
    policy: Optional[UploadPolicy] = None,
) -> list[UploadedFile]:
    """Validate and store every file part yielded by `parts`.

    The first failing part aborts the call; files stored for earlier parts are
    left on disk and it is up to the caller to remove them.
    """
    policy = policy or UploadPolicy()
    uploaded: list[UploadedFile] = []
    async for part in parts:
        try:
            uploaded.append(await _store_part(part, destination_dir, rename_files, policy))
        finally:
            await part.close()
    return uploaded


async def upload_files(
    request: Request,
    destination_dir: PathLike,
    rename_files: bool = True,
    policy: Optional[UploadPolicy] = None,
    source: Optional[PartSource] = None,
) -> list[UploadedFile]:
    """Store all files of a multipart/form-data request under `destination_dir`."""
    policy = policy or UploadPolicy()
    source = source or FormPartSource(request, policy.max_file_size)
    async with aclosing(source.parts()) as parts:
        return await ingest_parts(parts, destination_dir, rename_files, policy)


async def upload_one_file(
    request: Request,
    destination_dir: PathLike,
    rename_files: bool = True,
    policy: Optional[UploadPolicy] = None,
    source: Optional[PartSource] = None,
) -> UploadedFile:
    files = await upload_files(request, destination_dir, rename_files, policy, source)
    if len(files) != 1:
        raise CountMismatch(f"expected exactly one uploaded file, got {len(files)}")
    return files[0]


def configured_policy() -> UploadPolicy:
    return UploadPolicy(
        allowed_file_types=config.UPLOAD_ALLOWED_TYPES,
        max_file_size=config.UPLOAD_MAX_SIZE,
    )


async def receive_files(request: Request):
    files = await upload_files(
        request,
        config.UPLOAD_DIR,
        config.UPLOAD_RENAME_FILES,
        configured_policy(),
    )
    return write_json(
        JSONPayload(
            message=f"{len(files)} file(s) uploaded",
            data=[asdict(uploaded) for uploaded in files],
        )
    )


async def receive_one_file(request: Request):
    uploaded = await upload_one_file(
        request,
        config.UPLOAD_DIR,
        config.UPLOAD_RENAME_FILES,
        configured_policy(),
    )
    return write_json(JSONPayload(message="file uploaded", data=asdict(uploaded)))


router.post("/files")(receive_files)
router.post("/file")(receive_one_file)
