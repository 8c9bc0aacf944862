import logging

from fastapi import FastAPI, Query, Request

from http_toolkit import config
from http_toolkit.downloads import router as downloads_router
from http_toolkit.errors import ToolkitError
from http_toolkit.json_utils import JSONPayload, error_json, write_json
from http_toolkit.slug_utils import slugify
from http_toolkit.uploads import router as uploads_router

logging.basicConfig(level=config.LOG_LEVEL)
logger = logging.getLogger(__name__)


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(ToolkitError)
    async def toolkit_error(_: Request, exc: ToolkitError):
        if exc.status_code >= 500:
            logger.error("Request failed: %s", exc)
        return error_json(exc, status_code=exc.status_code)


app = FastAPI(title="HTTP Toolkit")
app.include_router(uploads_router)
app.include_router(downloads_router)
register_exception_handlers(app)


@app.get("/health")
def health():
    return {"status": "ok"}


@app.get("/slug")
def make_slug(text: str = Query(...)):
    return write_json(JSONPayload(message="ok", data={"slug": slugify(text)}))


@app.get("/upload", tags=["upload"])
def upload_info():
    return {"message": "Use POST /files to upload several files or POST /file for exactly one."}
