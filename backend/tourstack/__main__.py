"""`python -m tourstack` starts the API server on HOST:PORT."""

import uvicorn

from tourstack.config import settings


def main() -> None:
    uvicorn.run(
        "tourstack.main:app",
        host=settings.host,
        port=settings.port,
        reload=not settings.is_production,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
