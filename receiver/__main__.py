"""Command line entry point: ``python -m receiver``."""
from __future__ import annotations

import argparse
import dataclasses
import sys
from typing import Optional, Sequence

from receiver.config import ConfigError, Settings, load_settings, parse_log_level, parse_port
from receiver.main import run
from receiver.utils.logging import build_logger


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Receive webhook deliveries and log them")
    parser.add_argument("--host", help="Interface to listen on (overrides HOST)")
    parser.add_argument("--port", type=parse_port, help="Port to listen on (overrides PORT)")
    parser.add_argument("--log-level", type=parse_log_level, help="Logging threshold (overrides LOG_LEVEL)")
    return parser.parse_args(argv)


def apply_overrides(settings: Settings, args: argparse.Namespace) -> Settings:
    overrides = {}
    if args.host:
        overrides["host"] = args.host
    if args.port is not None:
        overrides["port"] = args.port
    if args.log_level:
        overrides["log_level"] = args.log_level
    return dataclasses.replace(settings, **overrides)


def main(argv: Optional[Sequence[str]] = None) -> None:
    args = parse_args(argv)
    try:
        settings = apply_overrides(load_settings(), args)
    except ConfigError as exc:
        build_logger().error("Invalid configuration", extra={"error": str(exc)})
        sys.exit(2)

    run(settings, build_logger(settings.log_level))


if __name__ == "__main__":
    main()
