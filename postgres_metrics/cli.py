"""
Command-line entry point for the PostgreSQL metrics plugin.

Prints one metric snapshot to stdout, or the graph definitions when run
with --graphdef (or with MACKEREL_AGENT_PLUGIN_META set by the agent).
Diagnostics go to stderr.
"""

import argparse
import logging
import os
import signal
import sys
from typing import List, Optional

from postgres_metrics.config import settings
from postgres_metrics.core.db import ConnectionParams
from postgres_metrics.core.errors import PluginError, TransportWriteError
from postgres_metrics.core.runner import PluginRunner
from postgres_metrics.core.source import PostgresPlugin

logger = logging.getLogger("postgres_metrics")

EXIT_OK = 0
EXIT_FAILURE = 1


def positive_int(value: str) -> int:
    """argparse type for timeouts: an integer of at least 1."""
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid int value: {value!r}") from None
    if number < 1:
        raise argparse.ArgumentTypeError(f"must be at least 1, got {number}")
    return number


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="postgres-metrics",
        description="PostgreSQL metric plugin for mackerel-agent",
    )
    parser.add_argument("--hostname", default=settings.DEFAULT_HOST, help="Hostname to login to")
    parser.add_argument("--port", default=settings.DEFAULT_PORT, help="Database port")
    parser.add_argument("--user", default="", help="Postgres User")
    parser.add_argument("--database", default="", help="Database name")
    parser.add_argument("--password", default=settings.default_password(),
                        help=f"Postgres Password (default: ${settings.PASSWORD_ENV_VAR})")
    parser.add_argument("--metric-key-prefix", default=settings.DEFAULT_PREFIX,
                        help="Metric key prefix")
    parser.add_argument("--sslmode", default=settings.DEFAULT_SSLMODE,
                        help="Whether or not to use SSL")
    parser.add_argument("--connect_timeout", "--connect-timeout", dest="connect_timeout",
                        type=positive_int, default=settings.DEFAULT_CONNECT_TIMEOUT,
                        help="Maximum wait for connection, in seconds.")
    parser.add_argument("--tempfile", default="", help="Temp file name")
    parser.add_argument("--option", action="append", default=[], metavar="KEY=VALUE",
                        help="Extra libpq connection option (repeatable)")
    parser.add_argument("--graphdef", action="store_true",
                        help="Print graph definitions instead of values")
    parser.add_argument("--log-level", default=settings.LOG_LEVEL,
                        help="Logging level for stderr diagnostics")
    return parser


def _handle_sigterm(signum, frame):
    # Unwind through the connection's cleanup instead of dying mid-fetch
    raise SystemExit(128 + signum)


def _silence_stdout():
    # The interpreter flushes stdout again at exit; point it at devnull so the
    # unsent buffer does not fail a second time
    try:
        fd = sys.stdout.fileno()
    except (AttributeError, OSError, ValueError):
        return
    devnull = os.open(os.devnull, os.O_WRONLY)
    try:
        os.dup2(devnull, fd)
    finally:
        os.close(devnull)


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, str(args.log_level).upper(), logging.WARNING),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        stream=sys.stderr,
    )

    if not args.user:
        logger.warning("user is required")
        parser.print_help(sys.stderr)
        return EXIT_FAILURE

    try:
        extra_options = settings.parse_extra_options(args.option)
    except ValueError as e:
        logger.error("%s", e)
        return EXIT_FAILURE

    params = ConnectionParams(
        username=args.user,
        host=args.hostname,
        port=args.port,
        password=args.password,
        sslmode=args.sslmode,
        connect_timeout=args.connect_timeout,
        database=args.database or None,
        extra_options=extra_options,
    )

    previous_handler = signal.signal(signal.SIGTERM, _handle_sigterm)
    try:
        plugin = PostgresPlugin(params, prefix=args.metric_key_prefix, logger=logger)
        runner = PluginRunner(plugin, tempfile=args.tempfile or None, logger=logger)
        runner.run(graphdef=args.graphdef or settings.plugin_meta_requested())
    except TransportWriteError as e:
        logger.error("%s", e)
        _silence_stdout()
        return EXIT_FAILURE
    except PluginError as e:
        logger.error("%s", e)
        return EXIT_FAILURE
    finally:
        signal.signal(signal.SIGTERM, previous_handler)

    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
