"""Run the catalog API with uvicorn."""

import uvicorn

from storecatalog.infrastructure.config import settings


def main() -> None:
    """Start the HTTP server."""
    uvicorn.run(
        "storecatalog.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        log_config=None,
    )


if __name__ == "__main__":
    main()
