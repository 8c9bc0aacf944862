import logging
from pathlib import Path
from typing import Union

from http_toolkit.errors import UploadIOError

logger = logging.getLogger(__name__)

DIR_MODE = 0o755

PathLike = Union[str, Path]


def create_dir_if_not_exists(path: PathLike, mode: int = DIR_MODE) -> Path:
    """Create `path` (and parents) if missing. An existing directory is left untouched."""
    directory = Path(path)
    try:
        directory.mkdir(mode=mode, parents=True, exist_ok=True)
    except OSError as exc:
        raise UploadIOError(f"could not create directory {directory}: {exc.strerror or exc}") from exc
    return directory


def base_name(filename: str | None) -> str:
    """Strip any directory components from a client supplied filename."""
    if not filename:
        return ""
    name = Path(filename.replace("\\", "/")).name
    if name in (".", ".."):
        return ""
    return name


def file_extension(filename: str) -> str:
    """Suffix of the base name from its last dot, dot included; "" when there is none."""
    name = base_name(filename)
    dot = name.rfind(".")
    return name[dot:] if dot != -1 else ""


def resolve_within(base_dir: PathLike, name: str) -> Path:
    """Resolve `name` under `base_dir`, refusing anything that escapes it."""
    if not name or not name.strip():
        raise ValueError("empty path")

    base = Path(base_dir).resolve()
    resolved = (base / name).resolve()
    # raises ValueError when resolved is outside base
    resolved.relative_to(base)
    return resolved
