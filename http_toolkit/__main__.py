import uvicorn

from http_toolkit import config
from http_toolkit.main import app


def main() -> None:
    uvicorn.run(app, host=config.HOST, port=config.PORT, log_level=config.LOG_LEVEL.lower())


if __name__ == "__main__":
    main()
