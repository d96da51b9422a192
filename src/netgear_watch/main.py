#!/usr/bin/env python3
"""netgear-watch - Main entry point."""

import argparse
import logging
import sys

from .client import RouterClient
from .commands import cmd_devices, cmd_watch
from .config import load_config, load_known_devices

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logging(verbosity: int = 0) -> None:
    """Send log records to stderr. -v enables INFO, -vv enables DEBUG."""
    if verbosity >= 2:
        level = logging.DEBUG
    elif verbosity == 1:
        level = logging.INFO
    else:
        level = logging.WARNING

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT))

    logger = logging.getLogger("netgear_watch")
    logger.handlers.clear()
    logger.addHandler(handler)
    logger.setLevel(level)


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser."""
    parser = argparse.ArgumentParser(
        prog="netgear-watch",
        description="Watch devices attached to a Netgear router",
    )
    parser.add_argument("--host", help="Router address (default: 192.168.1.1)")
    parser.add_argument("--user", help="Router username (default: admin)")
    parser.add_argument("--pass", dest="password", help="Router password")
    parser.add_argument("--port", type=int, help="SOAP port (default: 5000)")
    parser.add_argument(
        "--json", action="store_true", help="Output JSON instead of text"
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Increase log verbosity (repeat for debug output)",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    subparsers.add_parser("devices", help="List devices attached to the router")

    watch_parser = subparsers.add_parser(
        "watch", help="Report devices joining and leaving the network"
    )
    watch_parser.add_argument(
        "--interval",
        "-i",
        type=int,
        metavar="SECONDS",
        help="Seconds between polls (default: 10)",
    )

    return parser


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 0

    setup_logging(args.verbose)

    try:
        config = load_config(
            cli_host=args.host,
            cli_user=args.user,
            cli_pass=args.password,
            cli_port=args.port,
            cli_interval=getattr(args, "interval", None),
        )
    except (FileNotFoundError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    client = RouterClient(
        host=config["host"],
        username=config["username"],
        password=config["password"],
        port=config["port"],
    )

    known_devices = load_known_devices()

    if args.command == "devices":
        return cmd_devices(client, known_devices, json_output=args.json)
    elif args.command == "watch":
        return cmd_watch(
            client, config["interval"], known_devices, json_output=args.json
        )

    return 0


if __name__ == "__main__":
    sys.exit(main())
