"""CLI entry point and startup wiring."""

from __future__ import annotations

import argparse
import logging
import sys
from typing import Optional

from .constants import APP_NAME, APP_VERSION, DEFAULT_HOST, ENV_HOST, ENV_TIMEOUT
from .dispatcher import Cli, HandlerSet
from .errors import DaolictlError, NoSuchCommandError
from .logging_utils import log_event, sanitize_error_message, setup_logging
from .policy import DaoliCli

_USAGE = f"""\
Usage: {APP_NAME} [OPTIONS] COMMAND [arg...]

A command line client for daolinet network policies.

Options:
  -D, --debug          Enable debug logging to stderr
  -H, --host HOST      API endpoint (default: ${ENV_HOST} or {DEFAULT_HOST})
  --timeout SEC        Request timeout in seconds, 0 waits forever
                       (default: ${ENV_TIMEOUT} or 30)
  -l, --log FILE       Write structured logs to FILE
  -v, --version        Print version information and quit
  -h, --help           Print usage

Commands:
  policy    Manage container policies
  help      Show help for a command

Run '{APP_NAME} COMMAND --help' for more information on a command.
"""


def print_usage() -> None:
    print(_USAGE, end="")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog=APP_NAME, add_help=False, allow_abbrev=False)
    parser.add_argument("-D", "--debug", action="store_true")
    parser.add_argument("-H", "--host")
    parser.add_argument("--timeout")
    parser.add_argument("-l", "--log")
    parser.add_argument("-v", "--version", action="store_true")
    parser.add_argument("-h", "--help", dest="show_help", action="store_true")
    parser.add_argument("command", nargs=argparse.REMAINDER)
    return parser


def main(argv: Optional[list[str]] = None) -> int:
    """Application entry point. Returns the process exit status."""
    args = _build_parser().parse_args(argv)

    if args.version:
        print(f"{APP_NAME} version {APP_VERSION}")
        return 0

    try:
        setup_logging(args.log, debug=args.debug)
    except OSError as exc:
        print(f"Error: Could not open log file: {exc}", file=sys.stderr)
        return 1

    log_event(
        "app_start",
        host=args.host,
        timeout=args.timeout,
        command=" ".join(args.command[:2]),
        log_file=args.log,
    )

    handler = DaoliCli(host=args.host, timeout=args.timeout)
    cli = Cli(HandlerSet.from_object(handler), usage=print_usage)

    exit_code = 0
    error: Optional[BaseException] = None
    try:
        if args.show_help:
            cli.help(args.command)
        else:
            cli.run(args.command)
    except NoSuchCommandError as exc:
        error = exc
        print(str(exc), file=sys.stderr)
        exit_code = 1
    except DaolictlError as exc:
        error = exc
        print(f"Error: {sanitize_error_message(str(exc))}", file=sys.stderr)
        exit_code = 1
    except KeyboardInterrupt:
        print()
        print("Interrupted.")
        exit_code = 130
    finally:
        handler.close()

    log_event(
        "app_stop",
        level=logging.INFO if exit_code == 0 else logging.ERROR,
        reason="normal" if error is None else "error",
        exit_code=exit_code,
        error_type=type(error).__name__ if error is not None else None,
        error=sanitize_error_message(str(error)) if error is not None else None,
    )
    return exit_code
