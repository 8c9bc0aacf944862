import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

DEFAULT_MAX_UPLOAD_SIZE = 1024 * 1024 * 1024  # 1GB


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes")


UPLOAD_DIR = Path(os.getenv("UPLOAD_DIR", "./uploads"))
UPLOAD_MAX_SIZE = int(os.getenv("UPLOAD_MAX_SIZE", DEFAULT_MAX_UPLOAD_SIZE))
UPLOAD_ALLOWED_TYPES = frozenset(
    mime.strip().lower()
    for mime in os.getenv("UPLOAD_ALLOWED_TYPES", "image/jpeg,image/png,image/gif").split(",")
    if mime.strip()
)
UPLOAD_RENAME_FILES = _env_bool("UPLOAD_RENAME_FILES", True)
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
HOST = os.getenv("HOST", "127.0.0.1")
PORT = int(os.getenv("PORT", "8000"))
