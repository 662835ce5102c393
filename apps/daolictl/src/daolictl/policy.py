"""Policy commands: policy, policy list, policy create, policy delete."""

from __future__ import annotations

import sys
from typing import Callable, Mapping, Optional, TextIO, cast

from .client import DaoliClient
from .config import ClientConfig, resolve_config
from .constants import APP_NAME
from .dispatcher import command
from .errors import UsageError
from .usage import parse_flags, subcmd

POLICY_COMMANDS = (
    ("list", "List all policy"),
    ("create", "Create a rule"),
    ("delete", "Delete a rule"),
)

_PEER_COLUMN_WIDTH = 20
_PEER_COLUMN_PADDING = 3


def policy_usage() -> str:
    """Description shown by ``daolictl policy``."""
    lines = ["Commands:"]
    for name, summary in POLICY_COMMANDS:
        lines.append(f"  {name:<25.25}{summary}")
    lines.append("")
    lines.append(f"Run '{APP_NAME} policy COMMAND --help' for more information on a command.")
    return "\n".join(lines)


def validate_peer(peer: str) -> str:
    """Check that *peer* has the form CONTAINER:CONTAINER."""
    parts = peer.split(":")
    if len(parts) != 2 or not all(part.strip() for part in parts):
        raise UsageError(f"Invalid peer '{peer}': expected CONTAINER:CONTAINER")
    return peer


def format_policy_rows(policies: list[str]) -> list[str]:
    """Render ``a:b`` entries as two aligned columns; skip anything else."""
    width = _PEER_COLUMN_WIDTH + _PEER_COLUMN_PADDING
    rows = []
    for policy in policies:
        parts = policy.split(":")
        if len(parts) == 2:
            rows.append(f"{parts[0]:<{width}}{parts[1]}".rstrip())
    return rows


class DaoliCli:
    """Handler for the policy commands.

    ``initialize`` runs before every resolved command; it re-reads the
    settings and replaces the API client.
    """

    def __init__(
        self,
        host: Optional[str] = None,
        timeout: Optional[str] = None,
        env: Optional[Mapping[str, str]] = None,
        out: Optional[TextIO] = None,
        client_factory: Callable[[ClientConfig], DaoliClient] = DaoliClient,
    ) -> None:
        self._host = host
        self._timeout = timeout
        self._env = env
        self._out = out
        self._client_factory = client_factory
        self.config: Optional[ClientConfig] = None
        self.client: Optional[DaoliClient] = None

    @property
    def out(self) -> TextIO:
        return self._out if self._out is not None else sys.stdout

    def initialize(self) -> None:
        config = resolve_config(host=self._host, timeout=self._timeout, env=self._env)
        self.close()
        self.config = config
        self.client = self._client_factory(config)

    def close(self) -> None:
        if self.client is not None:
            self.client.close()
            self.client = None

    def _require_client(self) -> DaoliClient:
        if self.client is None:
            self.initialize()
        return cast(DaoliClient, self.client)

    # Usage: daolictl policy
    @command("policy")
    def cmd_policy(self, args: list[str]) -> None:
        flags = subcmd("policy", ["COMMAND [OPTIONS]"], policy_usage(), False)
        flags.add_argument("command", nargs="*")
        if parse_flags(flags, args, self.out) is None:
            return
        flags.print_usage(self.out)

    # Usage: daolictl policy list
    @command("policy list")
    def cmd_policy_list(self, args: list[str]) -> None:
        flags = subcmd("policy list", None, "Lists policies", True)
        if parse_flags(flags, args, self.out) is None:
            return

        policies = self._require_client().policy_list()
        for row in format_policy_rows(policies):
            print(row, file=self.out)

    # Usage: daolictl policy create CONTAINER:CONTAINER
    @command("policy create")
    def cmd_policy_create(self, args: list[str]) -> None:
        flags = subcmd(
            "policy create",
            ["CONTAINER:CONTAINER"],
            "Creates a policy with container peer",
            False,
        )
        flags.add_argument("peer", nargs="?")
        opts = parse_flags(flags, args, self.out)
        if opts is None:
            return
        if not opts.peer:
            flags.print_usage(self.out)
            return

        peer = validate_peer(opts.peer)
        self._require_client().policy_create(peer)
        print(peer, file=self.out)

    # Usage: daolictl policy delete CONTAINER:CONTAINER
    @command("policy delete")
    def cmd_policy_delete(self, args: list[str]) -> None:
        flags = subcmd(
            "policy delete",
            ["CONTAINER:CONTAINER"],
            "Delete a policy with container peer",
            False,
        )
        flags.add_argument("peer", nargs="?")
        opts = parse_flags(flags, args, self.out)
        if opts is None:
            return
        if not opts.peer:
            flags.print_usage(self.out)
            return

        peer = validate_peer(opts.peer)
        self._require_client().policy_delete(peer)
        print(peer, file=self.out)
