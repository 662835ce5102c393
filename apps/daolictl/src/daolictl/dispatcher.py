"""Command resolution and dispatching for daolictl.

A command line such as ``daolictl policy list -q`` is dispatched by mapping
the leading tokens to a capability name (``CmdPolicyList``) and calling the
operation registered under that name with the remaining arguments.  The
two-token form is always tried before the one-token form.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Optional, Sequence

from .constants import APP_NAME, COMMAND_PREFIX, HELP_COMMAND, HELP_FLAG
from .errors import (
    CommandNotFoundError,
    EmptyCommandError,
    InitializationError,
    NoSuchCommandError,
    ResolutionError,
)
from .logging_utils import log_event

Operation = Callable[[list[str]], Any]
Initializer = Callable[[], Any]

_COMMAND_ATTR = "_daolictl_command"
_MAX_COMMAND_TOKENS = 2


def command(name: str) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
    """Mark a handler method as the operation for command *name*.

    Example: ``@command("policy list")`` on a method makes it reachable as
    ``daolictl policy list``.
    """

    def decorator(fn: Callable[..., Any]) -> Callable[..., Any]:
        setattr(fn, _COMMAND_ATTR, name)
        return fn

    return decorator


def capability_name(tokens: Sequence[str]) -> str:
    """Build the capability name for command tokens.

    Each token is title-cased on its own and the results are joined, so
    ``["POLICY", "list"]`` becomes ``CmdPolicyList``.

    Raises:
        EmptyCommandError: If any token is empty.
    """
    parts: list[str] = []
    for token in tokens:
        if not token:
            raise EmptyCommandError()
        parts.append(token[:1].upper() + token[1:].lower())
    return COMMAND_PREFIX + "".join(parts)


class HandlerSet:
    """Operations keyed by capability name, plus an optional initializer."""

    def __init__(self, initializer: Optional[Initializer] = None) -> None:
        self.initializer = initializer
        self._operations: dict[str, Operation] = {}
        self._names: dict[str, str] = {}

    @classmethod
    def from_object(cls, handler: Any) -> HandlerSet:
        """Collect the ``@command`` methods of *handler*.

        A callable ``initialize`` attribute becomes the initializer.
        """
        initializer = getattr(handler, "initialize", None)
        handlers = cls(initializer if callable(initializer) else None)
        handler_type = type(handler)
        for attr in dir(handler_type):
            name = getattr(getattr(handler_type, attr), _COMMAND_ATTR, None)
            if name is not None:
                handlers.register(name, getattr(handler, attr))
        return handlers

    def register(self, name: str, operation: Operation) -> None:
        """Register *operation* under a one- or two-word command *name*."""
        tokens = name.split()
        if not tokens or len(tokens) > _MAX_COMMAND_TOKENS:
            raise ValueError(f"Command name must have 1 or 2 words: {name!r}")
        capability = capability_name(tokens)
        if capability in self._operations:
            raise ValueError(f"Command already registered: {name!r}")
        self._operations[capability] = operation
        self._names[capability] = " ".join(token.lower() for token in tokens)

    def get(self, capability: str) -> Optional[Operation]:
        return self._operations.get(capability)

    def __contains__(self, name: str) -> bool:
        try:
            return capability_name(name.split()) in self._operations
        except EmptyCommandError:
            return False

    def command_names(self) -> list[str]:
        return sorted(self._names.values())


class Cli:
    """Resolve and run commands against a HandlerSet.

    The handler set is never modified.  A ``help`` command is always
    available: when the handler set does not provide one, ``Cli.help`` is
    used.
    """

    def __init__(
        self,
        handlers: HandlerSet,
        usage: Optional[Callable[[], None]] = None,
    ) -> None:
        self.handlers = handlers
        self.usage = usage

    def _lookup(self, capability: str) -> Optional[Operation]:
        operation = self.handlers.get(capability)
        if operation is None and capability == capability_name([HELP_COMMAND]):
            return self.help
        return operation

    def resolve(self, tokens: Sequence[str]) -> Operation:
        """Map command tokens to an operation, running the initializer first.

        The initializer runs on every successful lookup and never when the
        command is unknown.

        Raises:
            EmptyCommandError: If a token is empty.
            CommandNotFoundError: If no operation matches.
            InitializationError: If the initializer raised.
        """
        capability = capability_name(tokens)
        command_text = " ".join(tokens)
        operation = self._lookup(capability)
        if operation is None:
            log_event(
                "command_not_found",
                level=logging.DEBUG,
                command=command_text,
                capability=capability,
            )
            raise CommandNotFoundError(command_text)

        initializer = self.handlers.initializer
        if initializer is not None:
            try:
                initializer()
            except Exception as exc:
                log_event(
                    "command_init_failed",
                    level=logging.DEBUG,
                    command=command_text,
                    error_type=type(exc).__name__,
                    error=str(exc),
                )
                raise InitializationError(exc) from exc

        log_event(
            "command_resolved",
            level=logging.DEBUG,
            command=command_text,
            capability=capability,
            initializer=initializer is not None,
        )
        return operation

    def _resolve_args(self, args: list[str]) -> tuple[Operation, list[str]]:
        """Resolve the two-token form, then the one-token form.

        Only the last attempt turns a failed lookup into NoSuchCommandError.
        An initializer failure is re-raised as its original exception.
        """
        try:
            if len(args) > 1:
                try:
                    return self.resolve(args[:2]), args[2:]
                except ResolutionError:
                    pass
            try:
                return self.resolve(args[:1]), args[1:]
            except ResolutionError:
                raise NoSuchCommandError(args[0]) from None
        except InitializationError as exc:
            raise exc.cause from None

    def run(self, args: Sequence[str]) -> None:
        """Execute the command named by the leading tokens of *args*.

        With no arguments this is the same as ``run(["help"])``.

        Raises:
            NoSuchCommandError: If no command matches.
        """
        args = list(args)
        if not args:
            args = [HELP_COMMAND]
        operation, rest = self._resolve_args(args)
        operation(rest)

    def help(self, args: Sequence[str]) -> None:
        """Usage: daolictl help COMMAND or daolictl COMMAND --help

        ``help --help`` prints the top-level usage, like ``help`` alone.
        """
        args = list(args)
        if args and args != [HELP_FLAG]:
            operation, _ = self._resolve_args(args)
            operation([HELP_FLAG])
            return

        if self.usage is not None:
            self.usage()
        else:
            self.print_default_usage()

    def print_default_usage(self) -> None:
        names = set(self.handlers.command_names())
        names.add(HELP_COMMAND)
        print(f"Usage: {APP_NAME} COMMAND [arg...]")
        print()
        print("Commands:")
        for name in sorted(names):
            print(f"  {name}")
