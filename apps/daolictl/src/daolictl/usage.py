"""Sub-command usage blocks and flag parsing."""

from __future__ import annotations

import argparse
import sys
from typing import NoReturn, Optional, Sequence, TextIO

from .constants import APP_NAME
from .errors import UsageError


def build_usage(name: str, synopses: Optional[Sequence[str]], description: str) -> str:
    """Format the usage block for command *name*.

    Example for ``build_usage("policy create", ["CONTAINER:CONTAINER"], "...")``::

        Usage:	daolictl policy create CONTAINER:CONTAINER

        ...
    """
    lines = []
    for i, synopsis in enumerate(list(synopses or []) or [""]):
        # Only the first line carries the word "Usage".
        lead = "Usage:\t" if i == 0 else "\t"
        if synopsis:
            synopsis = " " + synopsis
        lines.append(f"\n{lead}{APP_NAME} {name}{synopsis}")
    return "".join(lines) + f"\n\n{description}\n"


class FlagSet(argparse.ArgumentParser):
    """Argument parser for one sub-command.

    ``print_usage`` is the usage callback: it prints the usage block followed
    by the recognized options.
    """

    def __init__(
        self,
        name: str,
        synopses: Optional[Sequence[str]],
        description: str,
        exit_on_error: bool,
    ) -> None:
        super().__init__(
            prog=f"{APP_NAME} {name}",
            description=description,
            add_help=False,
            allow_abbrev=False,
            exit_on_error=exit_on_error,
        )
        self.command_name = name
        self.synopses = list(synopses or []) or [""]
        self.add_argument("-h", "--help", action="store_true", help="Print usage")

    def format_options(self) -> str:
        formatter = self._get_formatter()
        formatter.start_section("Options")
        formatter.add_arguments([a for a in self._actions if a.option_strings])
        formatter.end_section()
        return formatter.format_help()

    def format_usage(self) -> str:
        return build_usage(self.command_name, self.synopses, self.description or "") + (
            self.format_options()
        )

    def format_help(self) -> str:
        return self.format_usage()

    def error(self, message: str) -> NoReturn:
        if self.exit_on_error:
            self.print_usage(sys.stderr)
            self.exit(2, f"{self.prog}: {message}\n")
        raise UsageError(f"{self.prog}: {message}")


def subcmd(
    name: str,
    synopses: Optional[Sequence[str]],
    description: str,
    exit_on_error: bool,
) -> FlagSet:
    """Create the flag set for sub-command *name*.

    *exit_on_error* chooses between exiting with status 2 on malformed flags
    and raising UsageError.
    """
    return FlagSet(name, synopses, description, exit_on_error)


def parse_flags(
    flags: FlagSet,
    args: Sequence[str],
    out: Optional[TextIO] = None,
) -> Optional[argparse.Namespace]:
    """Parse *args*. Returns None after printing usage if --help was given."""
    try:
        namespace = flags.parse_args(list(args))
    except argparse.ArgumentError as exc:
        raise UsageError(f"{flags.prog}: {exc}") from exc
    if namespace.help:
        flags.print_usage(out)
        return None
    return namespace
