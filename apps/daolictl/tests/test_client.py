"""Tests for the policy API client."""

import json
import logging

import httpx
import pytest
from tenacity import wait_none

from daolictl.client import DaoliClient
from daolictl.config import ClientConfig
from daolictl.errors import ApiConnectionError, ApiError


def _client(handler, retry_attempts=3):
    config = ClientConfig(host="http://api.test", timeout=5, retry_attempts=retry_attempts)
    return DaoliClient(config, transport=httpx.MockTransport(handler), wait=wait_none())


def test_policy_list():
    seen = []

    def handler(request):
        seen.append(request)
        return httpx.Response(200, json=["web1:db1", "web2:cache1"])

    with _client(handler) as client:
        assert client.policy_list() == ["web1:db1", "web2:cache1"]

    assert seen[0].method == "GET"
    assert seen[0].url.path == "/v1/policies"
    assert seen[0].headers["user-agent"].startswith("daolictl/")


def test_policy_create_posts_peer():
    seen = []

    def handler(request):
        seen.append(request)
        return httpx.Response(201, json={"peer": "web1:db1"})

    with _client(handler) as client:
        client.policy_create("web1:db1")

    assert seen[0].method == "POST"
    assert seen[0].url.path == "/v1/policies"
    assert json.loads(seen[0].content) == {"peer": "web1:db1"}


def test_policy_delete_quotes_peer():
    seen = []

    def handler(request):
        seen.append(request)
        return httpx.Response(204)

    with _client(handler) as client:
        client.policy_delete("web1:db1")

    assert seen[0].method == "DELETE"
    assert seen[0].url.path == "/v1/policies/web1:db1"
    assert seen[0].url.raw_path == b"/v1/policies/web1%3Adb1"


def test_error_status_uses_json_message():
    def handler(request):
        return httpx.Response(404, json={"message": "policy not found"})

    with _client(handler) as client:
        with pytest.raises(ApiError, match="policy not found") as exc_info:
            client.policy_delete("a:b")

    assert exc_info.value.status_code == 404


def test_error_status_falls_back_to_body_text():
    def handler(request):
        return httpx.Response(500, text="internal failure")

    with _client(handler) as client:
        with pytest.raises(ApiError, match="internal failure"):
            client.policy_list()


def test_error_status_is_not_retried():
    calls = []

    def handler(request):
        calls.append(request)
        return httpx.Response(503, json={"error": "maintenance"})

    with _client(handler) as client:
        with pytest.raises(ApiError, match="maintenance"):
            client.policy_list()

    assert len(calls) == 1


def test_list_rejects_non_array():
    def handler(request):
        return httpx.Response(200, json={"policies": []})

    with _client(handler) as client:
        with pytest.raises(ApiError, match="JSON array"):
            client.policy_list()


def test_transport_errors_are_retried(caplog):
    caplog.set_level(logging.WARNING, logger="daolictl")
    calls = []

    def handler(request):
        calls.append(request)
        if len(calls) < 3:
            raise httpx.ConnectError("connection refused", request=request)
        return httpx.Response(200, json=[])

    with _client(handler, retry_attempts=3) as client:
        assert client.policy_list() == []

    assert len(calls) == 3
    events = [json.loads(r.getMessage()) for r in caplog.records]
    assert [e["event"] for e in events] == ["api_request_retry", "api_request_retry"]
    assert events[0]["operation"] == "policy_list"
    assert events[0]["error_type"] == "ConnectError"


def test_transport_errors_give_up_after_attempts():
    calls = []

    def handler(request):
        calls.append(request)
        raise httpx.ConnectError("connection refused", request=request)

    with _client(handler, retry_attempts=2) as client:
        with pytest.raises(ApiConnectionError, match="http://api.test"):
            client.policy_create("a:b")

    assert len(calls) == 2
