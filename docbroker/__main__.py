"""Run the broker with uvicorn: ``python -m docbroker``."""

import uvicorn

from .infrastructure.config.settings import get_settings


def main() -> None:
    settings = get_settings()
    uvicorn.run("docbroker.interfaces.main:app", host=settings.HOST, port=settings.PORT)


if __name__ == "__main__":
    main()
