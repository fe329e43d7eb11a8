"""CLI entry point for organized-ai.

Invoked as::

    organized-ai [OPTIONS] COMMAND [ARGS]...

or, during development::

    python -m organized_ai.cli.main

Commands
--------
- version   — Show version information
- servers   — List, inspect, enable/disable servers and edit their URL
- keys      — Manage API keys
- env       — Manage environment variables
- config    — Show or change general settings
- session   — Create, inspect and converse in sessions
- tool      — Call a server tool outside of any session
"""
from __future__ import annotations

import asyncio
import json
import logging
import sys
from collections.abc import Coroutine
from typing import TYPE_CHECKING, Any, NoReturn, TypeVar

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from organized_ai.errors import OrganizedAIError

if TYPE_CHECKING:
    from organized_ai.app import OrganizedAI

T = TypeVar("T")

console = Console()
err_console = Console(stderr=True)

_LOG_LEVELS = ["debug", "info", "warning", "error"]
_GENERAL_KEYS = {
    "default-server-id": "default_server_id",
    "log-level": "log_level",
    "data-storage-path": "data_storage_path",
    "request-timeout": "request_timeout",
}

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _configure_logging(level: str) -> None:
    """Route the package's log records through rich on stderr."""
    package_logger = logging.getLogger("organized_ai")
    package_logger.handlers[:] = [
        RichHandler(console=err_console, show_path=False, show_time=False)
    ]
    package_logger.setLevel(level.upper())


def _get_app(ctx: click.Context) -> OrganizedAI:
    """Build (once per invocation) the ``OrganizedAI`` facade."""
    from organized_ai.app import OrganizedAI

    obj = ctx.find_object(dict)
    if "app" not in obj:
        if obj.get("log_level"):
            _configure_logging(obj["log_level"])
        try:
            app = OrganizedAI(obj.get("config_dir"))
        except OrganizedAIError as exc:
            _fail(exc)
        if not obj.get("log_level"):
            _configure_logging(app.get_general_settings().log_level)
        obj["app"] = app
    return obj["app"]


def _fail(exc: Exception | str) -> NoReturn:
    console.print(f"[red]Error:[/red] {escape(str(exc))}")
    sys.exit(1)


def _mask(value: str) -> str:
    """Show only the first and last four characters of a secret."""
    if len(value) <= 8:
        return "•" * len(value)
    return value[:4] + "•" * (len(value) - 8) + value[-4:]


def _run(app: OrganizedAI, coro: Coroutine[Any, Any, T]) -> T:
    """Run ``coro`` to completion, then close the app's clients."""

    async def runner() -> T:
        try:
            return await coro
        finally:
            await app.aclose()

    return asyncio.run(runner())


# ---------------------------------------------------------------------------
# Root group
# ---------------------------------------------------------------------------


@click.group()
@click.option(
    "--config-dir",
    envvar="ORGANIZED_AI_HOME",
    default=None,
    type=click.Path(file_okay=False),
    help="Configuration directory (default: ~/.organized-ai).",
)
@click.option(
    "--log-level",
    default=None,
    type=click.Choice(_LOG_LEVELS, case_sensitive=False),
    help="Override the persisted log level.",
)
@click.pass_context
def cli(ctx: click.Context, config_dir: str | None, log_level: str | None) -> None:
    """Manage MCP servers, API keys and conversation sessions."""
    ctx.ensure_object(dict)
    ctx.obj["config_dir"] = config_dir
    ctx.obj["log_level"] = log_level


@cli.command(name="version")
def version_command() -> None:
    """Show version information."""
    from organized_ai import __version__

    console.print(f"[bold]organized-ai[/bold] v{__version__}")


# ---------------------------------------------------------------------------
# servers
# ---------------------------------------------------------------------------


@cli.group(name="servers")
def servers_group() -> None:
    """Server management commands."""


@servers_group.command(name="list")
@click.pass_context
def servers_list(ctx: click.Context) -> None:
    """List configured servers."""
    app = _get_app(ctx)
    servers = app.get_all_server_settings()
    if not servers:
        console.print("[yellow]No servers configured.[/yellow]")
        return

    table = Table(title="Servers")
    table.add_column("ID", style="cyan")
    table.add_column("Name")
    table.add_column("URL")
    table.add_column("Status")
    table.add_column("Required API Keys")
    for server in servers.values():
        status = "[green]Enabled[/green]" if server.enabled else "[dim]Disabled[/dim]"
        table.add_row(
            server.id,
            server.name,
            server.url,
            status,
            ", ".join(server.required_api_keys) or "None",
        )
    console.print(table)


@servers_group.command(name="catalog")
@click.pass_context
def servers_catalog(ctx: click.Context) -> None:
    """List the predefined server catalog."""
    app = _get_app(ctx)
    for server in app.get_predefined_servers():
        console.print(f"[bold]{server.name}[/bold] ({server.id})")
        console.print(f"  {server.description}")
        console.print(f"  Default URL: {server.default_url}")
        console.print(f"  Required API Keys: {', '.join(server.required_api_keys) or 'None'}")


@servers_group.command(name="show")
@click.argument("server_id")
@click.pass_context
def servers_show(ctx: click.Context, server_id: str) -> None:
    """Show details for SERVER_ID."""
    app = _get_app(ctx)
    server = app.get_server_settings(server_id)
    if server is None:
        _fail(f"Server not found: {server_id}")

    console.print(f"Server: {server.name} ({server.id})")
    console.print(f"URL: {server.url}")
    console.print(f"Status: {'Enabled' if server.enabled else 'Disabled'}")
    console.print(f"Required API Keys: {', '.join(server.required_api_keys) or 'None'}")


@servers_group.command(name="enable")
@click.argument("server_id")
@click.pass_context
def servers_enable(ctx: click.Context, server_id: str) -> None:
    """Enable SERVER_ID (all its required API keys must be set)."""
    app = _get_app(ctx)
    try:
        app.enable_server(server_id, True)
    except OrganizedAIError as exc:
        _fail(exc)
    console.print(f"[green]Enabled[/green] {server_id}")


@servers_group.command(name="disable")
@click.argument("server_id")
@click.pass_context
def servers_disable(ctx: click.Context, server_id: str) -> None:
    """Disable SERVER_ID."""
    app = _get_app(ctx)
    try:
        app.enable_server(server_id, False)
    except OrganizedAIError as exc:
        _fail(exc)
    console.print(f"[yellow]Disabled[/yellow] {server_id}")


@servers_group.command(name="set-url")
@click.argument("server_id")
@click.argument("url")
@click.pass_context
def servers_set_url(ctx: click.Context, server_id: str, url: str) -> None:
    """Point SERVER_ID at URL."""
    app = _get_app(ctx)
    try:
        server = app.update_server_settings(server_id, url=url)
    except OrganizedAIError as exc:
        _fail(exc)
    console.print(f"[green]URL updated for {server.name}:[/green] {server.url}")


# ---------------------------------------------------------------------------
# keys
# ---------------------------------------------------------------------------


@cli.group(name="keys")
def keys_group() -> None:
    """API key management commands."""


@keys_group.command(name="list")
@click.pass_context
def keys_list(ctx: click.Context) -> None:
    """List API keys with their values masked."""
    app = _get_app(ctx)
    keys = app.get_all_api_keys()
    if not keys:
        console.print("[yellow]No API keys configured.[/yellow]")
        return
    for name, value in keys.items():
        console.print(f"{name}: {_mask(value)}", markup=False)


@keys_group.command(name="set")
@click.argument("name")
@click.argument("value")
@click.pass_context
def keys_set(ctx: click.Context, name: str, value: str) -> None:
    """Add or update API key NAME."""
    if not name.strip() or not value.strip():
        _fail("Key name and value are required.")
    app = _get_app(ctx)
    try:
        app.set_api_key(name, value)
    except OrganizedAIError as exc:
        _fail(exc)
    console.print(f"[green]API key {name} saved.[/green]")


@keys_group.command(name="remove")
@click.argument("name")
@click.pass_context
def keys_remove(ctx: click.Context, name: str) -> None:
    """Remove API key NAME."""
    app = _get_app(ctx)
    try:
        app.remove_api_key(name)
    except OrganizedAIError as exc:
        _fail(exc)
    console.print(f"API key {name} removed.")


# ---------------------------------------------------------------------------
# env
# ---------------------------------------------------------------------------


@cli.group(name="env")
def env_group() -> None:
    """Environment variable management commands."""


@env_group.command(name="list")
@click.pass_context
def env_list(ctx: click.Context) -> None:
    """List environment variables."""
    app = _get_app(ctx)
    variables = app.get_all_environment_variables()
    if not variables:
        console.print("[yellow]No environment variables configured.[/yellow]")
        return
    for name, value in variables.items():
        console.print(f"{name}: {value}", markup=False)


@env_group.command(name="set")
@click.argument("name")
@click.argument("value")
@click.pass_context
def env_set(ctx: click.Context, name: str, value: str) -> None:
    """Add or update environment variable NAME."""
    if not name.strip() or not value.strip():
        _fail("Variable name and value are required.")
    app = _get_app(ctx)
    try:
        app.set_environment_variable(name, value)
    except OrganizedAIError as exc:
        _fail(exc)
    console.print(f"[green]Environment variable {name} saved.[/green]")


@env_group.command(name="remove")
@click.argument("name")
@click.pass_context
def env_remove(ctx: click.Context, name: str) -> None:
    """Remove environment variable NAME."""
    app = _get_app(ctx)
    try:
        app.remove_environment_variable(name)
    except OrganizedAIError as exc:
        _fail(exc)
    console.print(f"Environment variable {name} removed.")


# ---------------------------------------------------------------------------
# config
# ---------------------------------------------------------------------------


@cli.group(name="config")
def config_group() -> None:
    """General settings commands."""


@config_group.command(name="show")
@click.pass_context
def config_show(ctx: click.Context) -> None:
    """Show general settings."""
    app = _get_app(ctx)
    general = app.get_general_settings()
    table = Table(title="General Settings")
    table.add_column("Key", style="bold cyan")
    table.add_column("Value")
    for option, field in _GENERAL_KEYS.items():
        value = getattr(general, field)
        table.add_row(option, "-" if value is None else str(value))
    console.print(table)


@config_group.command(name="set")
@click.argument("key", type=click.Choice(sorted(_GENERAL_KEYS)))
@click.argument("value", required=False)
@click.pass_context
def config_set(ctx: click.Context, key: str, value: str | None) -> None:
    """Set general setting KEY to VALUE (omit VALUE to clear it)."""
    app = _get_app(ctx)
    try:
        app.update_general_settings(**{_GENERAL_KEYS[key]: value})
    except (OrganizedAIError, ValueError) as exc:
        _fail(exc)
    console.print(f"[green]{key}[/green] = {value if value is not None else '-'}")


# ---------------------------------------------------------------------------
# session
# ---------------------------------------------------------------------------


@cli.group(name="session")
def session_group() -> None:
    """Session management commands."""


@session_group.command(name="create")
@click.option("--server", "server_id", default=None, help="Server ID (default: general setting).")
@click.option("--title", default=None, help="Session title.")
@click.pass_context
def session_create(ctx: click.Context, server_id: str | None, title: str | None) -> None:
    """Create a new session.

    Prints the new session ID on success.
    """
    app = _get_app(ctx)
    server_id = server_id or app.get_general_settings().default_server_id
    if not server_id:
        _fail("No --server given and no default server configured.")
    if app.get_server_settings(server_id) is None:
        _fail(f"Server not found: {server_id}")
    try:
        session = app.create_session(server_id, title)
    except OrganizedAIError as exc:
        _fail(exc)
    console.print(f"[green]Session created:[/green] {session.id}")


@session_group.command(name="list")
@click.option("--server", "server_id", default=None, help="Filter by server ID.")
@click.pass_context
def session_list(ctx: click.Context, server_id: str | None) -> None:
    """List all sessions."""
    app = _get_app(ctx)
    sessions = app.list_sessions()
    if server_id:
        sessions = [s for s in sessions if s.server_id == server_id]
    if not sessions:
        console.print("[yellow]No sessions found.[/yellow]")
        return

    table = Table(title="Sessions")
    table.add_column("Session ID", style="cyan", no_wrap=True)
    table.add_column("Title")
    table.add_column("Server", style="green")
    table.add_column("Messages", justify="right")
    table.add_column("Updated")
    for session in sessions:
        table.add_row(
            session.id[:8],
            session.title,
            session.server_id,
            str(len(session.messages)),
            session.updated_at.strftime("%Y-%m-%d %H:%M"),
        )
    console.print(table)


@session_group.command(name="show")
@click.argument("session_id")
@click.option("--json-output", is_flag=True, help="Output raw JSON instead of formatted view.")
@click.pass_context
def session_show(ctx: click.Context, session_id: str, json_output: bool) -> None:
    """Display SESSION_ID and its messages."""
    app = _get_app(ctx)
    session = app.get_session(session_id)
    if session is None:
        _fail(f"Session not found: {session_id}")

    if json_output:
        click.echo(session.model_dump_json(by_alias=True, indent=2))
        return

    table = Table(title=f"Session {session.id[:8]}", show_lines=True)
    table.add_column("Field", style="bold cyan")
    table.add_column("Value")
    table.add_row("title", session.title)
    table.add_row("server", session.server_id)
    table.add_row("context", session.context_id or "-")
    table.add_row("messages", str(len(session.messages)))
    table.add_row("created_at", session.created_at.isoformat())
    table.add_row("updated_at", session.updated_at.isoformat())
    console.print(table)

    role_styles = {"user": "green", "assistant": "blue", "system": "yellow"}
    for message in session.messages:
        style = role_styles.get(message.role.value, "white")
        title = f"[{style}]{message.role.value.upper()}[/{style}]"
        console.print(Panel(Text(message.content), title=title, expand=False))


@session_group.command(name="rename")
@click.argument("session_id")
@click.argument("title")
@click.pass_context
def session_rename(ctx: click.Context, session_id: str, title: str) -> None:
    """Rename SESSION_ID to TITLE."""
    app = _get_app(ctx)
    if not app.rename_session(session_id, title):
        _fail(f"Session not found: {session_id}")
    console.print(f"[green]Session renamed:[/green] {title}")


@session_group.command(name="delete")
@click.argument("session_id")
@click.pass_context
def session_delete(ctx: click.Context, session_id: str) -> None:
    """Delete SESSION_ID locally."""
    app = _get_app(ctx)
    if not app.delete_session(session_id):
        _fail(f"Session not found: {session_id}")
    console.print(f"Session deleted: {session_id}")


@session_group.command(name="reset-context")
@click.argument("session_id")
@click.pass_context
def session_reset_context(ctx: click.Context, session_id: str) -> None:
    """Detach SESSION_ID from its remote context."""
    app = _get_app(ctx)
    if not app.reset_context(session_id):
        _fail(f"Session not found: {session_id}")
    console.print(f"Context cleared for session {session_id}")


@session_group.command(name="send")
@click.argument("session_id")
@click.argument("message")
@click.pass_context
def session_send(ctx: click.Context, session_id: str, message: str) -> None:
    """Send MESSAGE in SESSION_ID and print the assistant's reply."""
    app = _get_app(ctx)
    try:
        reply = _run(app, app.send_message(session_id, message))
    except OrganizedAIError as exc:
        _fail(exc)
    console.print(Panel(Text(reply.content), title="[blue]ASSISTANT[/blue]", expand=False))


@session_group.command(name="export")
@click.argument("session_id")
@click.option(
    "--format",
    "fmt",
    default="json",
    show_default=True,
    type=click.Choice(["json", "yaml"], case_sensitive=False),
    help="Output format.",
)
@click.option(
    "--output",
    "output_file",
    default=None,
    type=click.Path(dir_okay=False),
    help="Write to a file instead of stdout.",
)
@click.pass_context
def session_export(
    ctx: click.Context, session_id: str, fmt: str, output_file: str | None
) -> None:
    """Export SESSION_ID as JSON or YAML."""
    from pathlib import Path

    from organized_ai.session.serializer import SessionSerializer

    app = _get_app(ctx)
    session = app.get_session(session_id)
    if session is None:
        _fail(f"Session not found: {session_id}")

    document = SessionSerializer().serialize([session], format=fmt.lower())
    if output_file is None:
        click.echo(document)
        return
    output_path = Path(output_file)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(document, encoding="utf-8")
    console.print(f"[green]Exported ({fmt}):[/green] {output_file}")


# ---------------------------------------------------------------------------
# tool
# ---------------------------------------------------------------------------


@cli.group(name="tool")
def tool_group() -> None:
    """Tool invocation commands."""


@tool_group.command(name="call")
@click.argument("server_id")
@click.argument("tool_name")
@click.option("--params", default="{}", show_default=True, help="Tool parameters as a JSON object.")
@click.pass_context
def tool_call(ctx: click.Context, server_id: str, tool_name: str, params: str) -> None:
    """Call TOOL_NAME on SERVER_ID."""
    try:
        parameters = json.loads(params)
    except ValueError as exc:
        _fail(f"--params is not valid JSON: {exc}")
    if not isinstance(parameters, dict):
        _fail("--params must be a JSON object.")

    app = _get_app(ctx)
    try:
        response = _run(app, app.call_tool(server_id, tool_name, parameters))
    except OrganizedAIError as exc:
        _fail(exc)
    if response.error is not None:
        _fail(f"Tool {tool_name} failed: {response.error.message}")
    console.print_json(json.dumps(response.result, default=str))


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


if __name__ == "__main__":
    cli()
