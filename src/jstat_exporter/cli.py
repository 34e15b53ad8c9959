"""Command-line interface for jstat exporter."""

import argparse
import dataclasses
import logging
import sys
from typing import List, Optional

import psutil

from . import __version__
from .config import LOG_LEVELS, ConfigError, ConfigManager, ExporterConfig
from .server import serve

logger = logging.getLogger("jstat-exporter")


def setup_logging(level: str = "info") -> None:
    """Configure root logging for the exporter process."""
    logging.basicConfig(
        level=getattr(logging, level.upper()),
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="jstat-exporter",
        description="Prometheus exporter for JVM garbage collection statistics from jstat",
        argument_default=argparse.SUPPRESS,
    )

    parser.add_argument("--version", action="version", version=f"jstat-exporter {__version__}")

    parser.add_argument(
        "--web.listen-address",
        dest="listen_address",
        help="Address on which to expose metrics and web interface (default: :9010)",
    )
    parser.add_argument(
        "--web.telemetry-path",
        dest="metrics_path",
        help="Path under which to expose metrics (default: /metrics)",
    )
    parser.add_argument(
        "--web.max-requests",
        dest="max_requests",
        type=int,
        help="Maximum number of parallel scrape requests, 0 disables the limit (default: 40)",
    )
    parser.add_argument(
        "--jstat.path",
        dest="jstat_path",
        help="Path to the jstat executable (default: /usr/bin/jstat)",
    )
    parser.add_argument(
        "--jstat.timeout",
        dest="jstat_timeout",
        type=float,
        help="Seconds to wait for each jstat run, 0 waits forever (default: 0)",
    )
    parser.add_argument(
        "--target.pid",
        dest="target_pid",
        help="Process id (or jstat vmid) of the JVM to monitor",
    )
    parser.add_argument(
        "--no-exit-on-error",
        dest="exit_on_error",
        action="store_false",
        help="Answer failed scrapes with HTTP 500 and keep running instead of exiting",
    )
    parser.add_argument(
        "--log.level",
        dest="log_level",
        choices=LOG_LEVELS,
        help="Only log messages with the given severity or above (default: info)",
    )
    parser.add_argument(
        "--config.file",
        dest="config_file",
        help="JSON configuration file, overridden by command-line flags",
    )

    return parser


def load_config(args: argparse.Namespace) -> ExporterConfig:
    """Merge the optional config file with flags given on the command line."""
    overrides = vars(args).copy()
    config_file = overrides.pop("config_file", None)

    config = ConfigManager(config_file).load() if config_file else ExporterConfig()
    config = dataclasses.replace(config, **overrides)
    config.validate()
    return config


def check_target(target_pid: str) -> None:
    """Warn when a local target pid does not exist yet."""
    if target_pid.isdigit() and not psutil.pid_exists(int(target_pid)):
        logger.warning(f"Target process {target_pid} is not running, scrapes will fail until it is")


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        config = load_config(args)
    except (ConfigError, FileNotFoundError, TypeError, ValueError) as e:
        setup_logging()
        logger.error(f"Invalid configuration: {e}")
        return 1

    setup_logging(config.log_level)
    logger.info(f"Starting jstat exporter {__version__} for pid {config.target_pid}")
    check_target(config.target_pid)

    try:
        serve(config)
    except OSError as e:
        logger.critical(f"Failed to listen on {config.listen_address}: {e}")
        return 1
    except KeyboardInterrupt:
        logger.info("Interrupted, shutting down")

    return 0


if __name__ == "__main__":
    sys.exit(main())
