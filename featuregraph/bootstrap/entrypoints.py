"""
bootstrap/entrypoints.py - Application entry points

Logging setup and the `featuregraph` console script. Command output goes to
stdout; logs go to stderr (and optionally a file) so --json output can be
piped.
"""

from __future__ import annotations
from typing import List, Optional
import argparse
import json
import logging
import sys

logger = logging.getLogger("bootstrap.entrypoints")

LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR"]


class JSONFormatter(logging.Formatter):
    """One JSON object per log record."""

    def format(self, record):
        entry = {
            "timestamp": self.formatTime(record),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry)


class _FeatureGraphHandler:
    """Marker mixed into handlers installed by setup_logging()."""


class _StreamHandler(_FeatureGraphHandler, logging.StreamHandler):
    pass


class _FileHandler(_FeatureGraphHandler, logging.FileHandler):
    pass


def setup_logging(
    level: str = "INFO",
    log_file: Optional[str] = None,
    json_format: bool = False,
    fmt: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
) -> None:
    """
    Configure root logging for a CLI run.

    Handlers from an earlier call are replaced, so repeated runs in one
    process do not duplicate output.

    Args:
        level: DEBUG, INFO, WARNING or ERROR (unknown names fall back to INFO)
        log_file: Also append records to this file
        json_format: Emit JSONFormatter records instead of plain text
        fmt: Format string for plain-text records
    """
    log_level = getattr(logging, level.upper(), logging.INFO)
    formatter = JSONFormatter() if json_format else logging.Formatter(fmt)

    root = logging.getLogger()
    for handler in [h for h in root.handlers if isinstance(h, _FeatureGraphHandler)]:
        root.removeHandler(handler)
        handler.close()

    handlers: List[logging.Handler] = [_StreamHandler(sys.stderr)]
    if log_file:
        handlers.append(_FileHandler(log_file))
    for handler in handlers:
        handler.setFormatter(formatter)
        handler.setLevel(log_level)
        root.addHandler(handler)
    root.setLevel(log_level)


def build_parser(registry) -> argparse.ArgumentParser:
    """Global options plus one subparser per registered command."""
    parser = argparse.ArgumentParser(
        prog="featuregraph",
        description="Cycle detection, critical path and build ordering for feature dependencies",
    )
    parser.add_argument("-c", "--config", default=None,
                        help="JSON config file (default: search standard locations)")
    parser.add_argument("-v", "--verbose", action="store_true",
                        help="Shortcut for --log-level DEBUG")
    parser.add_argument("--log-level", choices=LOG_LEVELS, default=None,
                        help="Log level (default from config)")
    parser.add_argument("--log-file", default=None,
                        help="Also write logs to this file")
    parser.add_argument("--json", action="store_true",
                        help="Print results as JSON")

    subparsers = parser.add_subparsers(dest="command", metavar="COMMAND")
    subparsers.required = True
    for command in registry:
        sub = subparsers.add_parser(command.name, aliases=command.aliases, help=command.description)
        command.configure_parser(sub)
    return parser


def cli_main(args: Optional[List[str]] = None) -> int:
    """
    Run one featuregraph command.

    Args:
        args: Argument list (defaults to sys.argv[1:])

    Returns:
        Process exit code: 0 on success, 1 on rejected input, 2 on usage errors
        or an unreadable config file, 130 if interrupted
    """
    from featuregraph.bootstrap.config import load_config
    from featuregraph.cli import (
        CLIContext,
        CommandRegistry,
        OutputFormat,
        format_output,
        register_default_commands,
    )

    registry = register_default_commands(CommandRegistry())
    parsed = build_parser(registry).parse_args(args)

    try:
        config = load_config(parsed.config)
    except (OSError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2
    setup_logging(
        level="DEBUG" if parsed.verbose else (parsed.log_level or config.logging.level),
        log_file=parsed.log_file or config.logging.log_file,
        json_format=config.logging.json_logs,
        fmt=config.logging.format,
    )

    ctx = CLIContext(
        config=config,
        output_format=OutputFormat.JSON if parsed.json else OutputFormat.TEXT,
        verbose=parsed.verbose,
    )
    command = registry.get(parsed.command)
    logger.debug(f"Running {command.name} ({config.environment})")

    try:
        result = command.execute(ctx, parsed)
    except KeyboardInterrupt:
        print("\nInterrupted", file=sys.stderr)
        return 130

    print(format_output(result, ctx.output_format))
    return result.exit_code


def main() -> None:
    """Console script wrapper."""
    sys.exit(cli_main())
