"""Custom exception hierarchy for daolictl."""

from __future__ import annotations

from .constants import APP_NAME


class DaolictlError(Exception):
    """Base class for all daolictl errors."""


class ResolutionError(DaolictlError):
    """A command name could not be mapped to an operation."""


class EmptyCommandError(ResolutionError):
    def __init__(self) -> None:
        super().__init__("empty command")


class CommandNotFoundError(ResolutionError):
    def __init__(self, name: str) -> None:
        super().__init__("command not found")
        self.name = name


class InitializationError(DaolictlError):
    """The handler set's initializer failed while resolving a command.

    Kept outside ``ResolutionError`` so callers never mistake a setup failure
    for an unknown command.
    """

    def __init__(self, cause: BaseException) -> None:
        super().__init__(str(cause))
        self.cause = cause


class NoSuchCommandError(DaolictlError):
    def __init__(self, command: str) -> None:
        super().__init__(
            f"{APP_NAME}: '{command}' is not a {APP_NAME} command.\n"
            f"See '{APP_NAME} --help'."
        )
        self.command = command


class UsageError(ValueError, DaolictlError):
    """Command usage or user-input errors."""


class ConfigError(ValueError, DaolictlError):
    """Invalid settings from flags or environment."""


class ApiError(DaolictlError):
    def __init__(self, status_code: int, message: str) -> None:
        super().__init__(f"API error {status_code}: {message}")
        self.status_code = status_code


class ApiConnectionError(DaolictlError):
    """The API could not be reached after retrying."""
