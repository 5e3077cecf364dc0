"""Run the API with uvicorn: `python -m armory`."""

import uvicorn

from armory.config import settings


def main() -> None:
    uvicorn.run(
        "armory.main:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
