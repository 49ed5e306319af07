"""tasktrack CLI — run the server, create the schema, manage your tasks.

Usage:
    tasktrack serve --port 5001                  # Run the API (uvicorn)
    tasktrack init-db                            # Create tables from the ORM models

    tasktrack register "Ann" ann@x.com           # Create an account (prompts for password)
    tasktrack login ann@x.com                    # Print a token → export TASKTRACK_TOKEN=...
    tasktrack tasks                              # List your tasks
    tasktrack add "Write spec" -d "first draft"  # Create a task
    tasktrack toggle <task-id>                   # pending ⇄ completed
    tasktrack update <task-id> --status completed
    tasktrack rm <task-id>                       # Delete a task
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

from tasktrack import __version__

# ---------------------------------------------------------------------------
# Config
# ---------------------------------------------------------------------------

DEFAULT_API_URL = "http://localhost:5001"


def _api_url() -> str:
    return os.environ.get("TASKTRACK_API_URL", DEFAULT_API_URL).rstrip("/")


def _client(token: Optional[str] = None) -> httpx.AsyncClient:
    """Build an async HTTP client pointed at the tasktrack backend."""
    headers = {"Authorization": f"Bearer {token}"} if token else {}
    return httpx.AsyncClient(base_url=_api_url(), timeout=30.0, headers=headers)


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


def _require_token(token: Optional[str]) -> str:
    """Resolve the token from --token or the TASKTRACK_TOKEN env var."""
    tok = token or os.environ.get("TASKTRACK_TOKEN")
    if not tok:
        click.secho(
            "Error: --token required (or set TASKTRACK_TOKEN; get one with `tasktrack login`)",
            fg="red",
            err=True,
        )
        sys.exit(1)
    return tok


def _check(r: httpx.Response) -> dict | list:
    """Return the JSON body, or print the server's message and exit."""
    if r.is_success:
        return r.json()
    try:
        message = r.json().get("message", r.text)
    except ValueError:
        message = r.text
    click.secho(f"Error ({r.status_code}): {message}", fg="red", err=True)
    sys.exit(1)


def _pretty_json(data: dict | list) -> str:
    return json.dumps(data, indent=2, default=str)


def _print_table(rows: list[dict], columns: list[tuple[str, str, int]]):
    """Print a simple ASCII table.

    columns: list of (header, dict_key, width)
    """
    header = "  ".join(h.ljust(w) for h, _, w in columns)
    click.secho(header, bold=True)
    click.echo("-" * len(header))
    for row in rows:
        line = "  ".join(str(row.get(k, "—"))[:w].ljust(w) for _, k, w in columns)
        click.secho(line, fg=_status_color(row.get("status", "")))


def _status_color(status: str) -> str:
    """Map status strings to click colors."""
    colors = {
        "pending": "yellow",
        "completed": "green",
    }
    return colors.get(status, "white")


def _print_task(task: dict, verb: str) -> None:
    click.secho(f"{verb}: {task['title']}", fg=_status_color(task["status"]))
    click.echo(f"  id:     {task['id']}")
    click.echo(f"  status: {task['status']}")
    if task.get("description"):
        click.echo(f"  desc:   {task['description']}")


token_option = click.option(
    "--token", "-T", help="Bearer token (or set TASKTRACK_TOKEN)"
)


# ---------------------------------------------------------------------------
# CLI group
# ---------------------------------------------------------------------------


@click.group()
@click.version_option(version=__version__, prog_name="tasktrack")
def main():
    """tasktrack — multi-user task tracker."""


# ---------------------------------------------------------------------------
# Server-side commands
# ---------------------------------------------------------------------------


@main.command()
@click.option("--host", default=None, help="Bind address (default: TASKTRACK_HOST)")
@click.option("--port", type=int, default=None, help="Port (default: TASKTRACK_PORT)")
@click.option("--reload", is_flag=True, help="Auto-reload on code changes (dev)")
def serve(host: Optional[str], port: Optional[int], reload: bool):
    """Run the API server."""
    import uvicorn

    from tasktrack.config import get_settings

    settings = get_settings()
    uvicorn.run(
        "tasktrack.main:create_app",
        factory=True,
        host=host or settings.host,
        port=port or settings.port,
        reload=reload,
        log_level=settings.log_level.lower(),
    )


@main.command("init-db")
def init_db():
    """Create all tables from the ORM models (dev convenience)."""
    from tasktrack.config import get_settings
    from tasktrack.context import AppContext
    from tasktrack.db.engine import create_tables

    async def _init():
        ctx = AppContext.from_settings(get_settings())
        try:
            await create_tables(ctx.engine)
        finally:
            await ctx.close()

    _run(_init())
    click.secho("Tables created", fg="green")


# ---------------------------------------------------------------------------
# Account commands
# ---------------------------------------------------------------------------


@main.command()
@click.argument("name")
@click.argument("email")
@click.password_option()
def register(name: str, email: str, password: str):
    """Create an account and print its token."""
    data = _run(_post_json("/api/register", {
        "name": name, "email": email, "password": password,
    }))
    click.secho(data["message"], fg="green")
    click.echo(f"  id:    {data['user']['id']}")
    click.echo(f"export TASKTRACK_TOKEN={data['token']}")


@main.command()
@click.argument("email")
@click.option("--password", prompt=True, hide_input=True)
def login(email: str, password: str):
    """Log in and print a token."""
    data = _run(_post_json("/api/login", {"email": email, "password": password}))
    click.secho(f"Logged in as {data['user']['name']}", fg="green", err=True)
    click.echo(f"export TASKTRACK_TOKEN={data['token']}")


@main.command()
@token_option
def me(token: Optional[str]):
    """Show the account behind the token."""
    tok = _require_token(token)

    async def _impl():
        async with _client(tok) as c:
            return _check(await c.get("/api/me"))

    click.echo(_pretty_json(_run(_impl())))


async def _post_json(path: str, body: dict) -> dict:
    async with _client() as c:
        return _check(await c.post(path, json=body))


# ---------------------------------------------------------------------------
# Task commands
# ---------------------------------------------------------------------------


@main.command()
@token_option
@click.option("--json", "as_json", is_flag=True, help="Output raw JSON")
def tasks(token: Optional[str], as_json: bool):
    """List your tasks (newest first)."""
    tok = _require_token(token)

    async def _impl():
        async with _client(tok) as c:
            return _check(await c.get("/api/tasks"))

    rows = _run(_impl())
    if as_json:
        click.echo(_pretty_json(rows))
        return
    if not rows:
        click.echo("No tasks yet. Add one with `tasktrack add`.")
        return
    _print_table(rows, [
        ("ID", "id", 36),
        ("Status", "status", 10),
        ("Title", "title", 40),
    ])


@main.command()
@click.argument("title")
@click.option("--description", "-d", default=None, help="Task description")
@token_option
def add(title: str, description: Optional[str], token: Optional[str]):
    """Create a task."""
    tok = _require_token(token)
    body: dict = {"title": title}
    if description is not None:
        body["description"] = description

    async def _impl():
        async with _client(tok) as c:
            return _check(await c.post("/api/tasks", json=body))

    _print_task(_run(_impl()), "Created")


@main.command()
@click.argument("task_id")
@token_option
def toggle(task_id: str, token: Optional[str]):
    """Flip a task between pending and completed."""
    tok = _require_token(token)

    async def _impl():
        async with _client(tok) as c:
            return _check(await c.patch(f"/api/tasks/{task_id}/toggle"))

    _print_task(_run(_impl()), "Toggled")


@main.command()
@click.argument("task_id")
@click.option("--title", default=None)
@click.option("--description", "-d", default=None)
@click.option("--status", type=click.Choice(["pending", "completed"]), default=None)
@token_option
def update(task_id: str, title: Optional[str], description: Optional[str],
           status: Optional[str], token: Optional[str]):
    """Change a task's title, description and/or status."""
    tok = _require_token(token)
    body = {
        k: v for k, v in
        {"title": title, "description": description, "status": status}.items()
        if v is not None
    }
    if not body:
        click.secho("Nothing to update: pass --title, --description or --status", fg="red", err=True)
        sys.exit(1)

    async def _impl():
        async with _client(tok) as c:
            return _check(await c.put(f"/api/tasks/{task_id}", json=body))

    _print_task(_run(_impl()), "Updated")


@main.command()
@click.argument("task_id")
@token_option
def rm(task_id: str, token: Optional[str]):
    """Delete a task."""
    tok = _require_token(token)

    async def _impl():
        async with _client(tok) as c:
            return _check(await c.delete(f"/api/tasks/{task_id}"))

    click.secho(_run(_impl())["message"], fg="green")


@main.command()
def health():
    """Check the backend's health endpoint."""
    async def _impl():
        async with _client() as c:
            return _check(await c.get("/health"))

    try:
        data = _run(_impl())
    except httpx.ConnectError:
        click.secho(f"Backend not reachable at {_api_url()}", fg="red", err=True)
        sys.exit(1)
    color = "green" if data.get("status") == "healthy" else "yellow"
    click.secho(f"{data['status']} (database: {data['databaseStatus']})", fg=color)
    click.echo(_pretty_json(data))


if __name__ == "__main__":
    main()
