"""ItemVault CLI — run the server and talk to its API.

Usage:
    itemvault serve                              # Run the API with uvicorn
    itemvault init-db                            # Create tables (dev; use Alembic in prod)
    itemvault gen-secret                         # Print a fresh signing secret
    itemvault signup a@x.com alice               # Create an account, print token
    itemvault login a@x.com                      # Log in, print token
    itemvault me                                 # Current user (needs a token)
    itemvault items list --status pending        # Your items
    itemvault items add "buy milk"               # Create an item
    itemvault items update <id> --status done    # Partial update
    itemvault items rm <id>                      # Delete an item

API commands read the token from --token or ITEMVAULT_TOKEN.
"""

from __future__ import annotations

import asyncio
import concurrent.futures
import json
import os
import secrets
import sys
from typing import Optional

import click
import httpx

# ---------------------------------------------------------------------------
# Config
# ---------------------------------------------------------------------------

DEFAULT_API_URL = "http://localhost:8000"


def _api_url() -> str:
    return os.environ.get("ITEMVAULT_API_URL", DEFAULT_API_URL).rstrip("/")


def _client(token: Optional[str] = None) -> httpx.AsyncClient:
    """Build an async HTTP client pointed at the ItemVault backend."""
    headers = {"Authorization": f"Bearer {token}"} if token else {}
    return httpx.AsyncClient(
        base_url=f"{_api_url()}/api/v1", headers=headers, timeout=30.0
    )


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _run(coro):
    """Run an async coroutine from synchronous Click handler.

    Handles nested event loops (e.g. when invoked via Click CliRunner
    inside an existing async context like tests) by offloading to a thread.
    """
    try:
        asyncio.get_running_loop()
    except RuntimeError:
        return asyncio.run(coro)
    else:
        with concurrent.futures.ThreadPoolExecutor(max_workers=1) as pool:
            return pool.submit(asyncio.run, coro).result()


def _require_token(token: Optional[str]) -> str:
    if not token:
        click.secho(
            "Error: --token required (or set ITEMVAULT_TOKEN env var)",
            fg="red",
            err=True,
        )
        sys.exit(1)
    return token


def _pretty_json(data: dict | list) -> str:
    return json.dumps(data, indent=2, default=str)


def _check(r: httpx.Response) -> dict | list | None:
    """Exit with the server's message on any non-2xx response."""
    if r.is_success:
        return r.json() if r.content else None
    try:
        detail = r.json().get("detail", r.text)
    except ValueError:
        detail = r.text
    click.secho(f"Error {r.status_code}: {detail}", fg="red", err=True)
    sys.exit(1)


def _print_table(rows: list[dict], columns: list[tuple[str, str, int]]):
    """Print a simple ASCII table.

    columns: list of (header, dict_key, width)
    """
    header = "  ".join(h.ljust(w) for h, _, w in columns)
    click.secho(header, bold=True)
    click.echo("-" * len(header))
    for row in rows:
        line = "  ".join(str(row.get(k) or "—")[:w].ljust(w) for _, k, w in columns)
        click.echo(line)


def _status_color(status: str) -> str:
    return {"pending": "yellow", "in_progress": "cyan", "done": "green"}.get(
        status, "white"
    )


token_option = click.option(
    "--token", envvar="ITEMVAULT_TOKEN", help="Bearer token (or set ITEMVAULT_TOKEN)"
)


# ---------------------------------------------------------------------------
# CLI group
# ---------------------------------------------------------------------------


@click.group()
@click.version_option(version="0.1.0", prog_name="itemvault")
def main():
    """ItemVault — owner-scoped item store with token auth."""


# ---------------------------------------------------------------------------
# Server-side commands
# ---------------------------------------------------------------------------


@main.command()
@click.option("--host", default=None, help="Bind host (default from settings)")
@click.option("--port", default=None, type=int, help="Bind port (default from settings)")
@click.option("--reload", is_flag=True, help="Auto-reload on code changes")
def serve(host: Optional[str], port: Optional[int], reload: bool):
    """Run the API server."""
    import uvicorn

    from itemvault.config import settings

    uvicorn.run(
        "itemvault.main:app",
        host=host or settings.host,
        port=port or settings.port,
        reload=reload,
    )


@main.command("init-db")
def init_db():
    """Create all tables directly from the models."""
    from itemvault.db.engine import engine
    from itemvault.db.models import Base

    async def _create():
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        await engine.dispose()

    _run(_create())
    click.secho("Tables created.", fg="green")


@main.command("gen-secret")
def gen_secret():
    """Print a random value suitable for ITEMVAULT_JWT_SECRET."""
    click.echo(secrets.token_urlsafe(48))


# ---------------------------------------------------------------------------
# Auth commands
# ---------------------------------------------------------------------------


@main.command()
@click.argument("email")
@click.argument("username")
@click.password_option()
def signup(email: str, username: str, password: str):
    """Create an account and print its token."""
    async def _impl():
        async with _client() as c:
            data = _check(await c.post("/auth/signup", json={
                "email": email, "username": username, "password": password,
            }))
        click.secho(f"Signed up as {data['user']['username']} ({data['user']['id']})", fg="green")
        click.echo(data["token"])

    _run(_impl())


@main.command()
@click.argument("email")
@click.option("--password", prompt=True, hide_input=True)
def login(email: str, password: str):
    """Log in and print a fresh token."""
    async def _impl():
        async with _client() as c:
            data = _check(await c.post("/auth/login", json={
                "email": email, "password": password,
            }))
        click.echo(data["token"])

    _run(_impl())


@main.command()
@token_option
def me(token: Optional[str]):
    """Show the user the token belongs to."""
    async def _impl():
        async with _client(_require_token(token)) as c:
            click.echo(_pretty_json(_check(await c.get("/auth/me"))))

    _run(_impl())


# ---------------------------------------------------------------------------
# itemvault items ...
# ---------------------------------------------------------------------------


@main.group()
def items():
    """Manage your items."""


@items.command("list")
@token_option
@click.option("--status", type=click.Choice(["pending", "in_progress", "done"]))
@click.option("--json", "as_json", is_flag=True, help="Raw JSON output")
def list_items(token: Optional[str], status: Optional[str], as_json: bool):
    """List your items, newest first."""
    async def _impl():
        params = {"status": status} if status else {}
        async with _client(_require_token(token)) as c:
            rows = _check(await c.get("/items", params=params))
        if as_json:
            click.echo(_pretty_json(rows))
            return
        if not rows:
            click.echo("No items.")
            return
        _print_table(rows, [
            ("ID", "id", 36),
            ("STATUS", "status", 12),
            ("TITLE", "title", 40),
        ])

    _run(_impl())


@items.command("add")
@token_option
@click.argument("title")
@click.option("--description", "-d", help="Longer description")
def add_item(token: Optional[str], title: str, description: Optional[str]):
    """Create an item."""
    async def _impl():
        async with _client(_require_token(token)) as c:
            item = _check(await c.post("/items", json={
                "title": title, "description": description,
            }))
        click.secho(f"Created {item['id']}", fg="green")

    _run(_impl())


@items.command("show")
@token_option
@click.argument("item_id")
def show_item(token: Optional[str], item_id: str):
    """Show one item."""
    async def _impl():
        async with _client(_require_token(token)) as c:
            item = _check(await c.get(f"/items/{item_id}"))
        click.secho(f"[{item['status']}] ", fg=_status_color(item["status"]), nl=False)
        click.echo(item["title"])
        if item.get("description"):
            click.echo(item["description"])

    _run(_impl())


@items.command("update")
@token_option
@click.argument("item_id")
@click.option("--title")
@click.option("--description", "-d")
@click.option("--status", type=click.Choice(["pending", "in_progress", "done"]))
def update_item(token: Optional[str], item_id: str, title: Optional[str],
                description: Optional[str], status: Optional[str]):
    """Update fields of an item; omitted fields are left as they are."""
    body = {k: v for k, v in (
        ("title", title), ("description", description), ("status", status),
    ) if v is not None}
    if not body:
        click.secho("Nothing to update.", fg="yellow")
        return

    async def _impl():
        async with _client(_require_token(token)) as c:
            item = _check(await c.put(f"/items/{item_id}", json=body))
        click.secho(f"Updated {item['id']}", fg="green")

    _run(_impl())


@items.command("rm")
@token_option
@click.argument("item_id")
def remove_item(token: Optional[str], item_id: str):
    """Delete an item."""
    async def _impl():
        async with _client(_require_token(token)) as c:
            _check(await c.delete(f"/items/{item_id}"))
        click.secho(f"Deleted {item_id}", fg="green")

    _run(_impl())


if __name__ == "__main__":
    main()
