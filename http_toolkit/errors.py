from fastapi import status


class ToolkitError(Exception):
    """Base error for the toolkit; carries the HTTP status it maps to."""

    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        if status_code is not None:
            self.status_code = status_code


class ParseError(ToolkitError):
    status_code = status.HTTP_400_BAD_REQUEST


class SizeLimitExceeded(ToolkitError):
    status_code = status.HTTP_413_CONTENT_TOO_LARGE


class TypeRejected(ToolkitError):
    status_code = status.HTTP_415_UNSUPPORTED_MEDIA_TYPE


class UploadIOError(ToolkitError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR


class CountMismatch(ToolkitError):
    status_code = status.HTTP_400_BAD_REQUEST


class JSONBodyError(ToolkitError):
    status_code = status.HTTP_400_BAD_REQUEST


class SlugError(ToolkitError):
    status_code = status.HTTP_400_BAD_REQUEST


class FileNotFound(ToolkitError):
    status_code = status.HTTP_404_NOT_FOUND
