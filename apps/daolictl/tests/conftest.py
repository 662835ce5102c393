"""Pytest configuration and fixtures for daolictl tests."""

import logging

import pytest

from test_helpers import FakeClient, RecordingHandler


@pytest.fixture
def recording_handler():
    return RecordingHandler()


@pytest.fixture
def fake_client():
    return FakeClient(policies=["web1:db1", "web2:cache1"])


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep developer DAOLICTL_* settings out of the tests."""
    for name in ("DAOLICTL_HOST", "DAOLICTL_TIMEOUT", "DAOLICTL_RETRY_ATTEMPTS"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def restore_root_logging():
    """Undo logging.basicConfig(force=True) done by the code under test."""
    root = logging.getLogger()
    saved_handlers = root.handlers[:]
    saved_level = root.level
    yield
    for handler in root.handlers:
        if handler not in saved_handlers:
            handler.close()
    root.handlers[:] = saved_handlers
    root.setLevel(saved_level)
