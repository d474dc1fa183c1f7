"""
=============================================================================
COMMAND-LINE ENTRY POINT
=============================================================================

    # Run from ./data, reading ./data/web.toml
    python -m statichttpd

    # Another working directory
    python -m statichttpd -d /srv/site

    # Override single settings
    python -m statichttpd --listen 0.0.0.0:8080 --threads 8

Startup order:

    1. Parse arguments
    2. chdir into the working directory
    3. Load web.toml ← environment ← CLI overrides      (bad config: exit 1)
    4. Configure logging
    5. Bind and serve                                    (bind failure: exit 1)

=============================================================================
"""

import argparse
import logging
import os
import sys
from typing import Optional, Sequence

from . import __version__
from .config import ConfigError, DEFAULT_CONFIG_FILE, LOG_FORMATS, LOG_LEVELS, load_config
from .server import HTTPServer, setup_logging


logger = logging.getLogger("statichttpd")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="statichttpd",
        description="Very simple static file web server",
    )

    parser.add_argument(
        "--workingdir", "-d",
        dest="working_dir",
        default="data",
        help=(
            "Working directory. The config file, webroot and error.html are "
            "looked up relative to it (default: data)"
        ),
    )
    parser.add_argument(
        "--config", "-c",
        default=None,
        help=f"Config file, relative to the working directory (default: {DEFAULT_CONFIG_FILE})",
    )
    parser.add_argument(
        "--listen",
        dest="listen_addr",
        default=None,
        help="Address to listen on, host:port (overrides listen_addr)",
    )
    parser.add_argument(
        "--threads", "-t",
        dest="threads_max",
        type=int,
        default=None,
        help="Number of worker threads (overrides threads_max)",
    )
    parser.add_argument(
        "--log-level", "-l",
        choices=LOG_LEVELS,
        default=None,
        help="Logging level (overrides log_level)",
    )
    parser.add_argument(
        "--log-format",
        choices=LOG_FORMATS,
        default=None,
        help="Access log format (overrides log_format)",
    )
    parser.add_argument(
        "--version", "-v",
        action="version",
        version=f"statichttpd {__version__}",
    )

    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        os.chdir(args.working_dir)
    except OSError as e:
        print(f"Couldn't set working directory to {args.working_dir}: {e}", file=sys.stderr)
        return 1

    try:
        config = load_config(
            args.config or DEFAULT_CONFIG_FILE,
            overrides={
                "working_dir": args.working_dir,
                "listen_addr": args.listen_addr,
                "threads_max": args.threads_max,
                "log_level": args.log_level,
                "log_format": args.log_format,
            },
            required=args.config is not None,
        )
    except ConfigError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 1

    # From here on, errors are logged rather than printed
    setup_logging(config.log_level)

    logger.info("Starting up.")
    server = HTTPServer(config)
    try:
        server.run()
    except OSError:
        # Already logged by the socket server
        return 1

    logger.info("Shutting down.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
