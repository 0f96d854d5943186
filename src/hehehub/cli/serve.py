"""CLI command running the HTTP API with uvicorn.

Usage:
    python -m hehehub.cli serve [--reload]
"""

from argparse import ArgumentParser, Namespace

import uvicorn

from hehehub.core.config import Settings


def add_arguments(parser: ArgumentParser) -> None:
    parser.add_argument("--reload", action="store_true", help="Reload on code changes")


def main(args: Namespace) -> int:
    settings = Settings()  # type: ignore[call-arg]
    uvicorn.run(
        "hehehub.app:app",
        host=settings.host,
        port=settings.port,
        reload=args.reload,
        log_level="debug" if args.verbose else settings.log_level.lower(),
    )
    return 0
