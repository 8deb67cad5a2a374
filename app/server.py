"""
Run the API with uvicorn. From project root:
  python -m app.server
or, once installed, the `credentia-server` console script.
"""

import sys

import uvicorn

from app.core.config import get_settings


def main() -> int:
    """Serve app.main:app on HOST:PORT; auto-reload only when DEBUG is on."""
    settings = get_settings()
    uvicorn.run(
        "app.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
        log_level=settings.LOG_LEVEL.lower(),
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
