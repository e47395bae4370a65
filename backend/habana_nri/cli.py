"""Command line entry point serving the injector."""

from __future__ import annotations

import argparse
import sys

import uvicorn
from pydantic import ValidationError

from .core.config import get_settings
from .main import create_app


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Inject Habana accelerator devices and hooks into containers.",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument("--name", default="", help="plugin name to register with the runtime")
    parser.add_argument("--idx", default="", help="plugin index to register with the runtime")
    parser.add_argument("--host", default="127.0.0.1")
    parser.add_argument("--port", type=int, default=8585)
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    try:
        settings = get_settings()
    except ValidationError as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        return 1

    # flags win over the environment
    overrides = {}
    if args.name:
        overrides["plugin_name"] = args.name
    if args.idx:
        overrides["plugin_idx"] = args.idx
    if overrides:
        settings = settings.model_copy(update=overrides)

    uvicorn.run(create_app(settings), host=args.host, port=args.port, log_level=settings.log_level.lower())
    return 0


if __name__ == "__main__":
    sys.exit(main())
