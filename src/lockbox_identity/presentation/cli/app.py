"""Lockbox operator CLI using Typer.

This module provides command-line utilities for operating the identity
service: secret generation, schema creation and the privileged account
commands that bypass the user-facing token workflow.
"""

import asyncio
import logging
import secrets
import sys
from collections.abc import Awaitable, Callable
from typing import TypeVar

import typer
from rich.console import Console
from rich.table import Table

from lockbox_config import ConfigurationError, Settings, load_settings
from lockbox_identity.application.results import EmailStatusReport, OperationResult
from lockbox_identity.application.services import AccountLifecycleService
from lockbox_identity.domain.user import AccountStatistics
from lockbox_identity.infrastructure.factory import (
    build_account_lifecycle_service,
    create_engine,
    create_session_maker,
    create_tables,
)

T = TypeVar("T")

app = typer.Typer(
    name="lockbox",
    help="Lockbox - account credential and token lifecycle CLI",
    no_args_is_help=True,
)
console = Console()

secrets_app = typer.Typer(
    name="secrets",
    help="Secret generation utilities",
    no_args_is_help=True,
)
db_app = typer.Typer(
    name="db",
    help="Database schema management",
    no_args_is_help=True,
)
admin_app = typer.Typer(
    name="admin",
    help="Privileged account operations",
    no_args_is_help=True,
)
app.add_typer(secrets_app)
app.add_typer(db_app)
app.add_typer(admin_app)


def configure_logging(settings: Settings) -> None:
    """Configure the root logger from settings."""
    log_level = getattr(logging, settings.log_level.upper(), logging.INFO)

    logging.basicConfig(
        level=log_level,
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stderr,
        force=True,
    )

    logging.getLogger("lockbox_identity").setLevel(log_level)
    logging.getLogger("lockbox_config").setLevel(log_level)

    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("aiosqlite").setLevel(logging.WARNING)


def _load_settings() -> Settings:
    try:
        settings = load_settings()
    except ConfigurationError as e:
        console.print(f"[bold red]Configuration error:[/bold red] {e.message}")
        raise typer.Exit(code=2) from e
    configure_logging(settings)
    return settings


async def _with_service(
    settings: Settings,
    action: Callable[[AccountLifecycleService], Awaitable[T]],
) -> T:
    engine = create_engine(settings)
    try:
        session_maker = create_session_maker(engine)
        async with session_maker() as session:
            service = build_account_lifecycle_service(session, settings)
            return await action(service)
    finally:
        await engine.dispose()


@secrets_app.command("generate")
def generate_secrets() -> None:
    """Generate secure secrets for Lockbox configuration.

    Copy the output to your .env file.
    """
    console.print("\n[bold green]Lockbox Secret Generation[/bold green]")
    console.print("=" * 60)

    # 64 bytes of entropy for the HS512 signing key
    console.print(f"[cyan]JWT_SECRET[/cyan]={secrets.token_urlsafe(64)}")
    console.print(f"[cyan]POSTGRES_PASSWORD[/cyan]={secrets.token_urlsafe(32)}")

    console.print("=" * 60)
    console.print(
        "[yellow]Keep these secrets out of version control.[/yellow]\n"
        "[dim]Copy them to config/.env (deployment) or config/.env.dev (local).[/dim]\n"
    )


@db_app.command("init")
def db_init() -> None:
    """Create the identity tables if they do not exist."""
    settings = _load_settings()

    async def _run() -> None:
        engine = create_engine(settings)
        try:
            await create_tables(engine)
        finally:
            await engine.dispose()

    asyncio.run(_run())
    console.print("[green]Database schema is up to date.[/green]")


@admin_app.command("delete-account")
def admin_delete_account(
    email: str = typer.Argument(..., help="Email of the account to delete"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
) -> None:
    """Permanently delete an account without the confirmation email flow."""
    if not yes:
        typer.confirm(f"Permanently delete the account {email}?", abort=True)

    settings = _load_settings()
    result: OperationResult[None] = asyncio.run(
        _with_service(settings, lambda service: service.admin_delete_account(email)),
    )

    if not result.is_success:
        console.print(f"[red]No account registered for {email}.[/red]")
        raise typer.Exit(code=1)
    console.print(f"[green]Account {email} deleted.[/green]")


@admin_app.command("email-status")
def email_status(
    email: str = typer.Argument(..., help="Email address to look up"),
) -> None:
    """Show the registration status of an email address."""
    settings = _load_settings()
    result: OperationResult[EmailStatusReport] = asyncio.run(
        _with_service(settings, lambda service: service.check_email_status(email)),
    )
    report = result.data

    table = Table(title="Email status")
    table.add_column("Email")
    table.add_column("Status")
    table.add_column("Registered at")
    table.add_row(
        report.email,
        report.status.value,
        report.registered_at.isoformat() if report.registered_at else "-",
    )
    console.print(table)


@admin_app.command("stats")
def account_stats() -> None:
    """Show aggregate account counts. No per-account data is printed."""
    settings = _load_settings()
    result: OperationResult[AccountStatistics] = asyncio.run(
        _with_service(settings, lambda service: service.account_statistics()),
    )
    stats = result.data

    table = Table(title="Accounts")
    table.add_column("Metric")
    table.add_column("Count", justify="right")
    for label, value in (
        ("total", stats.total),
        ("verified", stats.verified),
        ("unverified", stats.unverified),
        ("pending", stats.pending_verification),
        ("expired", stats.pending_expired),
        ("deleting", stats.marked_for_deletion),
        ("resets", stats.pending_password_resets),
    ):
        table.add_row(label, str(value))
    console.print(table)


def cli() -> None:
    """Entry point for the CLI application."""
    app()


if __name__ == "__main__":
    cli()
