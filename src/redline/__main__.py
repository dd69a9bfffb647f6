"""Run the redline API server."""

import uvicorn

from redline.config import get_settings


def main() -> None:
    """Serve the API with the configured host and port."""
    settings = get_settings()
    uvicorn.run(
        "redline.main:app",
        host=settings.api_host,
        port=settings.api_port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
