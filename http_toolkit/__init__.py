from http_toolkit.downloads import download_static_file
from http_toolkit.errors import (
    CountMismatch,
    FileNotFound,
    JSONBodyError,
    ParseError,
    SizeLimitExceeded,
    SlugError,
    ToolkitError,
    TypeRejected,
    UploadIOError,
)
from http_toolkit.json_utils import JSONPayload, error_json, push_json_to_remote, read_json, write_json
from http_toolkit.sniffing import sniff_content_type
from http_toolkit.slug_utils import slugify
from http_toolkit.storage_utils import create_dir_if_not_exists
from http_toolkit.token_utils import random_string
from http_toolkit.uploads import (
    UploadedFile,
    UploadPolicy,
    ingest_parts,
    upload_files,
    upload_one_file,
)

__all__ = [
    "CountMismatch",
    "FileNotFound",
    "JSONBodyError",
    "JSONPayload",
    "ParseError",
    "SizeLimitExceeded",
    "SlugError",
    "ToolkitError",
    "TypeRejected",
    "UploadIOError",
    "UploadPolicy",
    "UploadedFile",
    "create_dir_if_not_exists",
    "download_static_file",
    "error_json",
    "ingest_parts",
    "push_json_to_remote",
    "random_string",
    "read_json",
    "slugify",
    "sniff_content_type",
    "upload_files",
    "upload_one_file",
    "write_json",
]
