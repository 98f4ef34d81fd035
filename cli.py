#!/usr/bin/env python3
"""
Newsdesk CLI.

Entry point for running the API and the operational commands.

Usage:
    python cli.py --help
    python cli.py --service server --reload --verbose
    python cli.py --service config
    python cli.py --service migrate --migrate-action upgrade
    python cli.py --service backfill-slugs
"""

import asyncio
import subprocess
import sys
from pathlib import Path
from typing import Any

import click
import structlog

from newsdesk.backend.core.logging import get_logger, setup_logging

PROJECT_ROOT = Path(__file__).parent
ALEMBIC_INI = PROJECT_ROOT / "newsdesk" / "backend" / "migrations" / "alembic.ini"

SERVICES = {
    "server": "FastAPI server (uvicorn)",
    "config": "Display configuration",
    "migrate": "Database migrations",
    "backfill-slugs": "Assign slugs to users that have none",
    "info": "Show this information",
}

# Alembic arguments per --migrate-action; autogenerate is built separately
MIGRATE_ACTIONS = {
    "upgrade": lambda revision: ["upgrade", revision],
    "downgrade": lambda revision: ["downgrade", revision],
    "current": lambda revision: ["current"],
    "history": lambda revision: ["history", "--verbose"],
}


def fail(message: str, code: int = 1) -> None:
    click.echo(click.style(f"Error: {message}", fg="red"), err=True)
    sys.exit(code)


@click.command()
@click.option("--service", "-s", type=click.Choice(list(SERVICES)), default="info",
              help="Service or command to run.")
@click.option("--verbose", "-v", is_flag=True, help="INFO level logging.")
@click.option("--debug", "-d", is_flag=True, help="DEBUG level logging.")
@click.option("--host", default=None, help="Server host (default from application.yaml).")
@click.option("--port", default=None, type=int, help="Server port (default from application.yaml).")
@click.option("--reload", is_flag=True, help="Auto-reload on code changes (server only).")
@click.option("--migrate-action",
              type=click.Choice([*MIGRATE_ACTIONS, "autogenerate"]),
              default="current", help="Migration action.")
@click.option("--revision", default="head", help="Target revision for upgrade/downgrade.")
@click.option("-m", "--message", default=None, help="Revision message for autogenerate.")
def main(
    service: str,
    verbose: bool,
    debug: bool,
    host: str | None,
    port: int | None,
    reload: bool,
    migrate_action: str,
    revision: str,
    message: str | None,
) -> None:
    """
    Newsdesk CLI.

    \b
    Examples:
        python cli.py --service server --reload
        python cli.py --service migrate --migrate-action autogenerate -m "add tags index"
        python cli.py --service backfill-slugs --verbose
    """
    if not (PROJECT_ROOT / ".project_root").exists():
        fail(".project_root not found. Run from project root.")

    log_level = "DEBUG" if debug else "INFO" if verbose else "WARNING"
    setup_logging(level=log_level, format_type="console")
    structlog.contextvars.bind_contextvars(source="cli")
    logger = get_logger(__name__)
    logger.debug("CLI invoked", extra={"service": service, "log_level": log_level})

    if service == "server":
        run_server(logger, host, port, reload)
    elif service == "config":
        show_config(logger)
    elif service == "migrate":
        run_migrations(logger, migrate_action, revision, message)
    elif service == "backfill-slugs":
        backfill_slugs(logger)
    else:
        show_info(logger)


def _app_config(logger: Any) -> Any:
    from newsdesk.backend.core.config import get_app_config

    try:
        return get_app_config()
    except Exception as e:
        logger.error("Failed to load configuration", extra={"error": str(e)})
        fail(f"Could not load config/settings: {e}")


def run_server(logger: Any, host: str | None, port: int | None, reload: bool) -> None:
    server = _app_config(logger).application.server
    host = host or server.host
    port = port or server.port

    cmd = [
        sys.executable, "-m", "uvicorn", "newsdesk.backend.main:app",
        "--host", host, "--port", str(port),
    ]
    if reload:
        cmd.append("--reload")

    logger.info("Starting server", extra={"host": host, "port": port, "reload": reload})
    click.echo(f"Starting server at http://{host}:{port}\nPress Ctrl+C to stop\n")
    try:
        subprocess.run(cmd, check=True)
    except KeyboardInterrupt:
        logger.info("Server stopped")
    except subprocess.CalledProcessError as e:
        logger.error("Server failed to start", extra={"exit_code": e.returncode})
        sys.exit(e.returncode)


def _echo_tree(values: dict[str, Any], indent: int = 2) -> None:
    for key, value in values.items():
        if isinstance(value, dict):
            click.echo(f"{' ' * indent}{key}:")
            _echo_tree(value, indent + 2)
        else:
            click.echo(f"{' ' * indent}{key}: {value}")


def show_config(logger: Any) -> None:
    """Print the YAML configuration. Secrets from config/.env are never shown."""
    config = _app_config(logger)
    sections = {
        "Application Settings": config.application,
        "Database Settings": config.database,
        "Logging Settings": config.logging,
        "Feature Flags": config.features,
        "Security Settings": config.security,
        "Remote Services": config.services,
    }
    click.echo("Application Configuration:")
    for title, section in sections.items():
        click.echo(f"\n{title}:\n{'-' * 40}")
        _echo_tree(section.model_dump())


def run_migrations(logger: Any, action: str, revision: str, message: str | None) -> None:
    if not ALEMBIC_INI.exists():
        fail("newsdesk/backend/migrations/alembic.ini not found.")

    if action == "autogenerate":
        if not message:
            fail("--message/-m required for autogenerate.")
        args = ["revision", "--autogenerate", "-m", message]
    else:
        args = MIGRATE_ACTIONS[action](revision)

    logger.info("Running migrations", extra={"action": action, "revision": revision})
    click.echo(f"alembic {' '.join(args)}\n")

    try:
        result = subprocess.run(
            [sys.executable, "-m", "alembic", "-c", str(ALEMBIC_INI), *args],
            cwd=PROJECT_ROOT,
        )
    except FileNotFoundError:
        logger.error("alembic not found")
        fail("alembic not found. Install the project dependencies.")

    if result.returncode != 0:
        logger.error("Migration failed", extra={"exit_code": result.returncode})
        sys.exit(result.returncode)
    logger.info("Migration completed")


async def _backfill_slugs() -> dict[str, int]:
    from newsdesk.backend.clients.crypto import get_crypto_client
    from newsdesk.backend.core.database import dispose_engine, get_session_factory
    from newsdesk.backend.services.user import UserService

    crypto = get_crypto_client()
    try:
        async with get_session_factory()() as session:
            counters = await UserService(session, crypto).backfill_slugs()
            await session.commit()
        return counters
    finally:
        await crypto.close()
        await dispose_engine()


def backfill_slugs(logger: Any) -> None:
    """Give every user without a slug one built from their decrypted name."""
    click.echo("Backfilling user slugs...\n")
    try:
        counters = asyncio.run(_backfill_slugs())
    except Exception as e:
        logger.error("Slug backfill failed", extra={"error": str(e)})
        fail(str(e))

    click.echo(click.style(f"  Assigned: {counters['assigned']}", fg="green"))
    click.echo(f"  Skipped (missing name): {counters['skipped']}")
    if counters["failed"]:
        click.echo(click.style(f"  Failed: {counters['failed']}", fg="yellow"))


def show_info(logger: Any) -> None:
    application = _app_config(logger).application

    click.echo(f"Newsdesk Backend\n{'=' * 40}")
    click.echo(f"Name: {application.name}")
    click.echo(f"Version: {application.version}")
    click.echo(f"Description: {application.description}")
    click.echo(f"Environment: {application.environment}")

    click.echo("\nServices (--service):")
    for name, summary in SERVICES.items():
        click.echo(f"  {name:<16}{summary}")
    click.echo("\nOptions:\n  --verbose, -v  INFO level logging\n  --debug, -d    DEBUG level logging")


if __name__ == "__main__":
    main()
