"""Tests for the command line entry point."""

import pytest

import daolictl.cli as cli_module
from daolictl.policy import DaoliCli


@pytest.fixture
def fake_handler(monkeypatch, fake_client):
    """Route cli.main through a DaoliCli backed by the fake client."""

    def build(**kwargs):
        return DaoliCli(client_factory=lambda config: fake_client, **kwargs)

    monkeypatch.setattr(cli_module, "DaoliCli", build)
    return fake_client


def test_version(capsys):
    assert cli_module.main(["--version"]) == 0

    assert capsys.readouterr().out.startswith("daolictl version ")


@pytest.mark.parametrize("argv", [[], ["--help"], ["-h"], ["help"]])
def test_top_level_usage(argv, fake_handler, capsys):
    assert cli_module.main(argv) == 0

    out = capsys.readouterr().out
    assert out.startswith("Usage: daolictl [OPTIONS] COMMAND [arg...]")
    assert "  policy    Manage container policies" in out


def test_unknown_command_writes_one_message(fake_handler, capsys):
    assert cli_module.main(["badcmd"]) == 1

    captured = capsys.readouterr()
    assert captured.err == (
        "daolictl: 'badcmd' is not a daolictl command.\n"
        "See 'daolictl --help'.\n"
    )
    assert captured.err.count("badcmd") == 1
    assert captured.out == ""
    assert fake_handler.created == []


def test_policy_create(fake_handler, capsys):
    assert cli_module.main(["policy", "create", "web1:db1"]) == 0

    assert fake_handler.created == ["web1:db1"]
    assert capsys.readouterr().out == "web1:db1\n"


def test_policy_list(fake_handler, capsys):
    assert cli_module.main(["-H", "api.example.com", "Policy", "LIST"]) == 0

    out = capsys.readouterr().out
    assert "web1" in out
    assert "cache1" in out


def test_subcommand_help_flag(fake_handler, capsys):
    assert cli_module.main(["policy", "create", "--help"]) == 0

    out = capsys.readouterr().out
    assert "Usage:\tdaolictl policy create CONTAINER:CONTAINER" in out
    assert fake_handler.created == []


def test_help_command_with_topic(fake_handler, capsys):
    assert cli_module.main(["help", "policy", "delete"]) == 0

    assert "Delete a policy with container peer" in capsys.readouterr().out


def test_global_help_flag_with_topic(fake_handler, capsys):
    assert cli_module.main(["-h", "policy"]) == 0

    assert "Usage:\tdaolictl policy COMMAND [OPTIONS]" in capsys.readouterr().out


def test_initialization_failure_is_reported_as_error(fake_handler, capsys):
    assert cli_module.main(["--host", "", "policy", "list"]) == 1

    err = capsys.readouterr().err
    assert err == "Error: Host must not be empty\n"
    assert "is not a daolictl command" not in err


def test_unparseable_host_is_reported_as_error(fake_handler, capsys):
    assert cli_module.main(["-H", "api.example.com:abc", "policy", "list"]) == 1

    err = capsys.readouterr().err
    assert err.startswith("Error: Invalid host 'api.example.com:abc'")
    assert "Traceback" not in err


def test_help_for_help_prints_top_level_usage(fake_handler, capsys):
    assert cli_module.main(["help", "help"]) == 0

    captured = capsys.readouterr()
    assert captured.out.startswith("Usage: daolictl [OPTIONS] COMMAND [arg...]")
    assert captured.err == ""


def test_invalid_timeout_from_environment(fake_handler, monkeypatch, capsys):
    monkeypatch.setenv("DAOLICTL_TIMEOUT", "soon")

    assert cli_module.main(["policy", "list"]) == 1

    assert "Error: Timeout must be a number" in capsys.readouterr().err


def test_usage_error_exit_code(fake_handler, capsys):
    assert cli_module.main(["policy", "create", "web1"]) == 1

    assert "expected CONTAINER:CONTAINER" in capsys.readouterr().err


def test_log_file_records_run(fake_handler, tmp_path, restore_root_logging):
    log_path = tmp_path / "logs" / "run.log"

    assert cli_module.main(["--log", str(log_path), "badcmd"]) == 1

    text = log_path.read_text(encoding="utf-8")
    assert "=== app_start ===" in text
    assert "=== app_stop ===" in text
    assert "error_type: NoSuchCommandError" in text
