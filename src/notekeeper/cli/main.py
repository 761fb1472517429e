"""Notekeeper CLI — run the server, manage the database, talk to the API.

Usage:
    notekeeper serve                                  # Run the API with uvicorn
    notekeeper init-db                                # Create tables (dev/test)
    notekeeper create-identity jo jo@x.com            # Register an identity (prompts for password)
    notekeeper login jo@x.com                         # Print a token
    notekeeper notes                                  # List your notes (needs NOTEKEEPER_TOKEN)
    notekeeper search jo                              # Search identities by username
"""

from __future__ import annotations

import asyncio
import concurrent.futures
import json
import os
import sys
from typing import Optional

import click
import httpx

from notekeeper import __version__

# ---------------------------------------------------------------------------
# Config
# ---------------------------------------------------------------------------

DEFAULT_API_URL = "http://localhost:4000"


def _api_url() -> str:
    return os.environ.get("NOTEKEEPER_API_URL", DEFAULT_API_URL).rstrip("/")


def _client(token: Optional[str] = None) -> httpx.AsyncClient:
    """Build an async HTTP client pointed at the Notekeeper API."""
    from notekeeper.config import get_settings

    headers = {get_settings().token_header: token} if token else {}
    return httpx.AsyncClient(base_url=_api_url(), headers=headers, timeout=30.0)


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
        # No running loop — normal CLI invocation
        return asyncio.run(coro)
    else:
        # Already inside an event loop (e.g. test runner) — run in a thread
        with concurrent.futures.ThreadPoolExecutor(max_workers=1) as pool:
            return pool.submit(asyncio.run, coro).result()


def _token_from_ctx(token: Optional[str]) -> str:
    """Resolve token from flag or NOTEKEEPER_TOKEN env var."""
    tok = token or os.environ.get("NOTEKEEPER_TOKEN")
    if not tok:
        click.secho(
            "Error: --token required (or set NOTEKEEPER_TOKEN env var)",
            fg="red",
            err=True,
        )
        sys.exit(1)
    return tok


def _check(r: httpx.Response) -> None:
    """Exit with the API's error detail on a non-2xx response."""
    if r.is_success:
        return
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
    # Header
    header = "  ".join(h.ljust(w) for h, _, w in columns)
    click.secho(header, bold=True)
    click.echo("-" * len(header))
    # Rows
    for row in rows:
        line = "  ".join(str(row.get(k, "—"))[:w].ljust(w) for _, k, w in columns)
        click.echo(line)


# ---------------------------------------------------------------------------
# CLI group
# ---------------------------------------------------------------------------


@click.group()
@click.version_option(version=__version__, prog_name="notekeeper")
def main():
    """Notekeeper — personal notes behind a signed-token gate."""


# ---------------------------------------------------------------------------
# Server & database (local)
# ---------------------------------------------------------------------------


@main.command()
@click.option("--host", default=None, help="Bind address (default: NOTEKEEPER_HOST)")
@click.option("--port", type=int, default=None, help="Port (default: NOTEKEEPER_PORT)")
@click.option("--reload", is_flag=True, help="Auto-reload on code changes")
def serve(host: Optional[str], port: Optional[int], reload: bool):
    """Run the API server."""
    import uvicorn

    from notekeeper.config import get_settings

    settings = get_settings()
    uvicorn.run(
        "notekeeper.main:build_default_app",
        factory=True,
        host=host or settings.host,
        port=port or settings.port,
        reload=reload,
    )


@main.command("init-db")
def init_db():
    """Create all tables in NOTEKEEPER_DATABASE_URL."""
    _run(_init_db_impl())
    click.secho("Database initialized", fg="green")


async def _init_db_impl():
    from notekeeper.config import get_settings
    from notekeeper.db.engine import Database

    database = Database(get_settings().database_url)
    try:
        await database.create_all()
    finally:
        await database.dispose()


@main.command("create-identity")
@click.argument("username")
@click.argument("email")
@click.password_option()
def create_identity(username: str, email: str, password: str):
    """Register an identity directly in the database."""
    from notekeeper.errors import Conflict

    try:
        identity_id = _run(_create_identity_impl(username, email, password))
    except Conflict as e:
        click.secho(f"Error: {e.message}", fg="red", err=True)
        sys.exit(1)
    click.secho(f"Identity #{identity_id} created", fg="green")


async def _create_identity_impl(username: str, email: str, password: str) -> int:
    from notekeeper.auth.service import AuthService
    from notekeeper.auth.tokens import TokenService
    from notekeeper.config import get_settings
    from notekeeper.db.engine import Database

    settings = get_settings()
    database = Database(settings.database_url)
    tokens = TokenService(settings.jwt_secret, settings.jwt_algorithm)
    try:
        async with database.session() as session:
            svc = AuthService(session, tokens, bcrypt_rounds=settings.bcrypt_rounds)
            identity = await svc.register(username, email, password)
            return identity.id
    finally:
        await database.dispose()


# ---------------------------------------------------------------------------
# API client commands
# ---------------------------------------------------------------------------


@main.command()
@click.argument("email")
@click.password_option(confirmation_prompt=False)
def login(email: str, password: str):
    """Exchange email/password for a token and print it."""
    _run(_login_impl(email, password))


async def _login_impl(email: str, password: str):
    async with _client() as c:
        r = await c.post("/api/auth/login", json={"email": email, "password": password})
        _check(r)
        click.echo(r.json()["token"])


@main.command()
@click.option("--token", help="Session token (or set NOTEKEEPER_TOKEN)")
@click.option("--shared", is_flag=True, help="Notes shared with you instead of your own")
@click.option("--json", "as_json", is_flag=True, help="Raw JSON output")
def notes(token: Optional[str], shared: bool, as_json: bool):
    """List your notes."""
    _run(_notes_impl(_token_from_ctx(token), shared, as_json))


async def _notes_impl(token: str, shared: bool, as_json: bool):
    async with _client(token) as c:
        r = await c.get("/api/notes/shared" if shared else "/api/notes")
        _check(r)
        rows = r.json()
        if as_json:
            click.echo(json.dumps(rows, indent=2, default=str))
            return
        if not rows:
            click.echo("No notes.")
            return
        _print_table(rows, [("ID", "id", 6), ("TITLE", "title", 40), ("UPDATED", "updated_at", 20)])


@main.command()
@click.argument("query")
@click.option("--token", help="Session token (or set NOTEKEEPER_TOKEN)")
def search(query: str, token: Optional[str]):
    """Search identities by username."""
    _run(_search_impl(query, _token_from_ctx(token)))


async def _search_impl(query: str, token: str):
    async with _client(token) as c:
        r = await c.get("/api/search", params={"q": query})
        _check(r)
        rows = r.json()
        if not rows:
            click.echo("No matches.")
            return
        _print_table(rows, [("ID", "id", 6), ("USERNAME", "username", 24), ("EMAIL", "email", 32)])


if __name__ == "__main__":
    main()
