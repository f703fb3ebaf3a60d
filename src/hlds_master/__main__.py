"""Command-line entry point for the master server.

Usage:
    python -m hlds_master --port 27010 --web-port 8080
"""

import argparse
import asyncio
import logging
import signal
import sys

from hlds_master.server import MasterServer, MasterServerOptions

logger = logging.getLogger(__name__)


def parse_prefix(value: str) -> bytes:
    r"""Parse a heartbeat prefix argument, honouring escapes such as ``\n``."""
    return value.encode("latin-1").decode("unicode_escape").encode("latin-1")


def build_parser() -> argparse.ArgumentParser:
    """Build the command-line argument parser."""
    defaults = MasterServerOptions()
    parser = argparse.ArgumentParser(
        prog="hlds-master",
        description="Game server master: tracks heartbeats and queries server status.",
    )
    parser.add_argument("--host", default=defaults.host, help="heartbeat interface")
    parser.add_argument("--port", type=int, default=defaults.port, help="heartbeat UDP port")
    parser.add_argument("--web-host", default=defaults.web_host, help="status page interface")
    parser.add_argument("--web-port", type=int, default=defaults.web_port, help="status page port")
    parser.add_argument("--no-web", action="store_true", help="disable the status page")
    parser.add_argument(
        "--sweep-interval",
        type=float,
        default=defaults.sweep_interval,
        help="seconds between liveness sweeps",
    )
    parser.add_argument(
        "--stale-threshold",
        type=float,
        default=defaults.stale_threshold,
        help="seconds without heartbeat before eviction",
    )
    parser.add_argument("--dial-timeout", type=float, default=defaults.dial_timeout)
    parser.add_argument("--read-timeout", type=float, default=defaults.read_timeout)
    parser.add_argument(
        "--max-concurrent-queries",
        type=int,
        default=defaults.max_concurrent_queries,
    )
    parser.add_argument(
        "--heartbeat-prefix",
        action="append",
        type=parse_prefix,
        default=[],
        dest="heartbeat_prefixes",
        help="accept only heartbeats starting with this prefix (repeatable)",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
    )
    return parser


def options_from_args(args: argparse.Namespace) -> MasterServerOptions:
    """Create server options from parsed arguments."""
    return MasterServerOptions(
        host=args.host,
        port=args.port,
        web_host=args.web_host,
        web_port=args.web_port,
        enable_web=not args.no_web,
        sweep_interval=args.sweep_interval,
        stale_threshold=args.stale_threshold,
        dial_timeout=args.dial_timeout,
        read_timeout=args.read_timeout,
        max_concurrent_queries=args.max_concurrent_queries,
        heartbeat_prefixes=tuple(args.heartbeat_prefixes),
    )


async def run(options: MasterServerOptions) -> None:
    """Run the master server until a shutdown signal arrives."""
    server = MasterServer(options)

    shutdown_event = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGTERM, signal.SIGINT):
        loop.add_signal_handler(sig, shutdown_event.set)

    await server.start()
    try:
        await shutdown_event.wait()
        logger.info("Shutdown signal received")
    finally:
        await server.stop()


def main(argv: list[str] | None = None) -> int:
    """Run the command-line interface."""
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    try:
        options = options_from_args(args)
    except ValueError as e:
        logger.error("Invalid options: %s", e)  # noqa: TRY400
        return 2

    try:
        asyncio.run(run(options))
    except OSError:
        logger.exception("Failed to start master server")
        return 1
    except KeyboardInterrupt:
        logger.info("Exiting")
    return 0


if __name__ == "__main__":
    sys.exit(main())
