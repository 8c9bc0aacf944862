import logging
from pathlib import Path
from typing import Optional

from fastapi import Query
from fastapi.responses import FileResponse
from fastapi.routing import APIRouter

from http_toolkit import config
from http_toolkit.errors import FileNotFound
from http_toolkit.storage_utils import PathLike, resolve_within

logger = logging.getLogger(__name__)

router = APIRouter()


def download_static_file(
    directory: PathLike,
    file_name: str,
    display_name: Optional[str] = None,
) -> FileResponse:
    """Serve `directory/file_name` as an attachment named `display_name`."""
    try:
        target_path = resolve_within(directory, file_name)
    except ValueError as exc:
        logger.warning("Refused download outside %s: %r", directory, file_name)
        raise FileNotFound("file not found") from exc

    if not target_path.is_file():
        raise FileNotFound("file not found")

    download_name = Path(display_name or target_path.name).name
    return FileResponse(
        path=str(target_path),
        filename=download_name,
        content_disposition_type="attachment",
    )


async def get_file(
    name: str = Query(...),
    display_name: Optional[str] = Query(None),
):
    return download_static_file(config.UPLOAD_DIR, name, display_name)


router.get("/file")(get_file)
