"""CLI tests — click commands against a mocked API.

Learn: The CLI is a thin httpx client. _client() is swapped for one
backed by httpx.MockTransport, so each command's request and output
can be checked without a running server.
"""

import json

import httpx
import pytest
from click.testing import CliRunner

from itemvault.cli import main as cli


@pytest.fixture()
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture()
def api(monkeypatch):
    """Record requests and answer them from a route table."""
    seen: list[httpx.Request] = []
    routes: dict[tuple[str, str], httpx.Response] = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return routes.get(
            (request.method, request.url.path),
            httpx.Response(404, json={"detail": "Not found"}),
        )

    def fake_client(token=None):
        headers = {"Authorization": f"Bearer {token}"} if token else {}
        return httpx.AsyncClient(
            transport=httpx.MockTransport(handler),
            base_url="http://api.test/api/v1",
            headers=headers,
        )

    monkeypatch.setattr(cli, "_client", fake_client)
    monkeypatch.delenv("ITEMVAULT_TOKEN", raising=False)
    return seen, routes


def test_gen_secret(runner):
    result = runner.invoke(cli.main, ["gen-secret"])
    assert result.exit_code == 0
    assert len(result.output.strip()) >= 48


def test_gen_secret_is_random(runner):
    a = runner.invoke(cli.main, ["gen-secret"]).output
    b = runner.invoke(cli.main, ["gen-secret"]).output
    assert a != b


def test_signup_prints_token(runner, api):
    seen, routes = api
    routes[("POST", "/api/v1/auth/signup")] = httpx.Response(
        201,
        json={
            "token": "tok-123",
            "token_type": "bearer",
            "user": {"id": "u-1", "email": "a@x.com", "username": "alice"},
        },
    )
    result = runner.invoke(
        cli.main, ["signup", "a@x.com", "alice", "--password", "longenough1"]
    )
    assert result.exit_code == 0, result.output
    assert "tok-123" in result.output
    assert json.loads(seen[0].content) == {
        "email": "a@x.com",
        "username": "alice",
        "password": "longenough1",
    }


def test_login_failure_exits_nonzero(runner, api):
    _, routes = api
    routes[("POST", "/api/v1/auth/login")] = httpx.Response(
        401, json={"detail": "Invalid email or password", "code": "authentication_failed"}
    )
    result = runner.invoke(cli.main, ["login", "a@x.com", "--password", "nope"])
    assert result.exit_code == 1
    assert "Invalid email or password" in result.output


def test_items_list_requires_token(runner, api):
    result = runner.invoke(cli.main, ["items", "list"])
    assert result.exit_code == 1
    assert "--token required" in result.output


def test_items_list_sends_bearer_and_filter(runner, api):
    seen, routes = api
    routes[("GET", "/api/v1/items")] = httpx.Response(
        200, json=[{"id": "i-1", "status": "done", "title": "ship it"}]
    )
    result = runner.invoke(
        cli.main, ["items", "list", "--token", "tok-abc", "--status", "done"]
    )
    assert result.exit_code == 0, result.output
    assert "ship it" in result.output
    assert seen[0].headers["Authorization"] == "Bearer tok-abc"
    assert seen[0].url.params["status"] == "done"


def test_items_token_from_env(runner, api, monkeypatch):
    seen, routes = api
    routes[("GET", "/api/v1/items")] = httpx.Response(200, json=[])
    monkeypatch.setenv("ITEMVAULT_TOKEN", "env-token")
    result = runner.invoke(cli.main, ["items", "list"])
    assert result.exit_code == 0
    assert "No items." in result.output
    assert seen[0].headers["Authorization"] == "Bearer env-token"


def test_items_update_sends_only_given_fields(runner, api):
    seen, routes = api
    routes[("PUT", "/api/v1/items/i-1")] = httpx.Response(
        200, json={"id": "i-1", "status": "done", "title": "t"}
    )
    result = runner.invoke(
        cli.main, ["items", "update", "i-1", "--token", "t", "--status", "done"]
    )
    assert result.exit_code == 0, result.output
    assert json.loads(seen[0].content) == {"status": "done"}


def test_items_rm_not_found(runner, api):
    result = runner.invoke(cli.main, ["items", "rm", "missing", "--token", "t"])
    assert result.exit_code == 1
    assert "Error 404" in result.output
