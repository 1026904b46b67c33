"""Run the natega-search HTTP API under uvicorn.

Usage:
    python -m scripts.serve                       # API_HOST / API_PORT from .env
    python -m scripts.serve --host 0.0.0.0 --port 8080
"""

import argparse
import sys

import uvicorn

from natega.config.settings import get_settings

APP_PATH = "natega.api.main:app"


def main(argv: list[str] | None = None) -> int:
    settings = get_settings()
    parser = argparse.ArgumentParser(description="Serve the student search API.")
    parser.add_argument("--host", default=settings.API_HOST, help="Host to bind to.")
    parser.add_argument("--port", type=int, default=settings.API_PORT, help="Port to listen on.")
    args = parser.parse_args(argv)

    uvicorn.run(
        APP_PATH,
        host=args.host,
        port=args.port,
        log_level=settings.LOG_LEVEL.lower(),
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
