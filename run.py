#!/usr/bin/env python3
"""
Application Entry Script.

Main entry point for the Notes API. All functionality is accessible
through command-line options.

Usage:
    python run.py --help
    python run.py --action server --verbose
    python run.py --action health --debug
    python run.py --action config
    python run.py --action seed
"""

import asyncio
import subprocess
import sys
from pathlib import Path

import click

# Ensure project root is in path for absolute imports
PROJECT_ROOT = Path(__file__).parent
sys.path.insert(0, str(PROJECT_ROOT))

from notes_api.core.logging import get_logger, log_with_source, setup_logging


def validate_project_root() -> Path:
    """Validate that we're running from the project root."""
    if not (PROJECT_ROOT / ".project_root").exists():
        click.echo(
            click.style("Error: .project_root not found. Run from project root.", fg="red"),
            err=True,
        )
        sys.exit(1)
    return PROJECT_ROOT


@click.command()
@click.option(
    "--action",
    type=click.Choice(["server", "health", "config", "seed", "info"]),
    default="info",
    help="Action to perform.",
)
@click.option(
    "--verbose", "-v",
    is_flag=True,
    help="Enable verbose output (INFO level logging).",
)
@click.option(
    "--debug", "-d",
    is_flag=True,
    help="Enable debug output (DEBUG level logging).",
)
@click.option(
    "--host",
    default=None,
    help="Server host (for server action).",
)
@click.option(
    "--port",
    default=None,
    type=int,
    help="Server port (for server action).",
)
@click.option(
    "--reload",
    is_flag=True,
    help="Enable auto-reload (for server action).",
)
def main(
    action: str,
    verbose: bool,
    debug: bool,
    host: str | None,
    port: int | None,
    reload: bool,
) -> None:
    """
    Notes API Entry Point.

    Run the API server, check health, view configuration or load the
    sample notes.

    Examples:

        # Start development server
        python run.py --action server --reload --verbose

        # Check configuration, secrets and database connectivity
        python run.py --action health --debug

        # View loaded configuration
        python run.py --action config

        # Replace all notes with the sample set
        python run.py --action seed
    """
    validate_project_root()

    if debug:
        log_level = "DEBUG"
    elif verbose:
        log_level = "INFO"
    else:
        log_level = "WARNING"

    setup_logging(level=log_level, format_type="console")
    logger = get_logger(__name__)

    logger.debug("Starting application", extra={"action": action, "log_level": log_level})

    if action == "server":
        run_server(logger, host, port, reload)
    elif action == "health":
        check_health(logger)
    elif action == "config":
        show_config(logger)
    elif action == "seed":
        run_seed(logger)
    elif action == "info":
        show_info(logger)


def run_server(logger, host: str | None, port: int | None, reload: bool) -> None:
    """Start the API server under uvicorn."""
    from notes_api.core.config import get_app_config

    server = get_app_config().application.server
    server_host = host or server.host
    server_port = port or server.port

    logger.info(
        "Starting server",
        extra={"host": server_host, "port": server_port, "reload": reload},
    )

    cmd = [
        sys.executable, "-m", "uvicorn",
        "notes_api.main:app",
        "--host", server_host,
        "--port", str(server_port),
    ]

    if reload:
        cmd.append("--reload")

    click.echo(f"Starting server at http://{server_host}:{server_port}")
    click.echo("Press Ctrl+C to stop\n")

    try:
        subprocess.run(cmd, check=True)
    except KeyboardInterrupt:
        logger.info("Server stopped")
    except subprocess.CalledProcessError as e:
        logger.error("Server failed to start", extra={"exit_code": e.returncode})
        sys.exit(e.returncode)


async def _ping_once() -> None:
    from notes_api.core.database import dispose_engine, ping_database

    try:
        await ping_database()
    finally:
        await dispose_engine()


def check_health(logger) -> None:
    """Check configuration, secrets, the app factory and the database."""
    click.echo("Checking application health...\n")

    checks = []

    try:
        from notes_api.core.config import get_app_config
        app_config = get_app_config()
        checks.append(("YAML configuration", True, f"App: {app_config.application.name}"))
        logger.debug("Configuration loaded", extra={"app_name": app_config.application.name})
    except Exception as e:
        checks.append(("YAML configuration", False, str(e)))
        logger.error("Configuration failed", extra={"error": str(e)})

    try:
        from notes_api.core.config import get_settings
        get_settings()
        checks.append(("Secrets (config/.env)", True, None))
    except Exception as e:
        checks.append(("Secrets (config/.env)", False, str(e)))
        logger.error("Secrets not configured", extra={"error": str(e)})

    try:
        from notes_api.main import get_app
        app = get_app()
        checks.append(("FastAPI application", True, f"Title: {app.title}"))
        logger.debug("FastAPI app loaded", extra={"title": app.title})
    except Exception as e:
        checks.append(("FastAPI application", False, str(e)))
        logger.error("FastAPI app failed", extra={"error": str(e)})

    try:
        asyncio.run(_ping_once())
        checks.append(("Database connection", True, None))
    except Exception as e:
        checks.append(("Database connection", False, str(e)))
        logger.error("Database unreachable", extra={"error": str(e)})

    click.echo("Health Check Results:")
    click.echo("-" * 50)

    all_passed = True
    for name, passed, detail in checks:
        status = click.style("✓ PASS", fg="green") if passed else click.style("✗ FAIL", fg="red")
        detail_str = f" ({detail})" if detail else ""
        click.echo(f"  {status}  {name}{detail_str}")
        if not passed:
            all_passed = False

    click.echo("-" * 50)

    if all_passed:
        click.echo(click.style("\nAll checks passed!", fg="green"))
    else:
        click.echo(click.style("\nSome checks failed. See details above.", fg="yellow"))
        sys.exit(1)


def _echo_section(values: dict, indent: int = 2) -> None:
    for key, value in values.items():
        if isinstance(value, dict):
            click.echo(f"{' ' * indent}{key}:")
            _echo_section(value, indent + 2)
        else:
            click.echo(f"{' ' * indent}{key}: {value}")


def show_config(logger) -> None:
    """Display loaded configuration. Secrets are never printed."""
    click.echo("Application Configuration:\n")

    try:
        from notes_api.core.config import get_app_config

        app_config = get_app_config()
        sections = [
            ("Application Settings", app_config.application),
            ("Database Settings", app_config.database),
            ("Logging Settings", app_config.logging),
            ("Feature Flags", app_config.features),
            ("Security Settings", app_config.security),
        ]
        for title, section in sections:
            click.echo(f"{title} (from YAML):")
            click.echo("-" * 40)
            _echo_section(section.model_dump())
            click.echo()

        logger.info("Configuration displayed successfully")

    except Exception as e:
        logger.error("Failed to load configuration", extra={"error": str(e)})
        click.echo(click.style(f"Error loading configuration: {e}", fg="red"))
        sys.exit(1)


async def _seed() -> tuple[int, int]:
    from notes_api.core.database import dispose_engine, get_session_factory
    from notes_api.services.seed import seed_notes

    try:
        async with get_session_factory()() as session:
            removed, created = await seed_notes(session)
            await session.commit()
        return removed, len(created)
    finally:
        await dispose_engine()


def run_seed(logger) -> None:
    """Delete every note and insert the sample notes."""
    try:
        removed, created = asyncio.run(_seed())
    except Exception as e:
        log_with_source(logger, "seed", "error", "Seeding failed", error=str(e))
        click.echo(click.style(f"Seeding failed: {e}", fg="red"), err=True)
        sys.exit(1)

    log_with_source(logger, "seed", "info", "Sample notes inserted", removed=removed, created=created)
    click.echo(f"Removed {removed} existing notes")
    click.echo(click.style(f"Inserted {created} sample notes", fg="green"))


def show_info(logger) -> None:
    """Display application information."""
    click.echo("Notes API")
    click.echo("=" * 40)

    try:
        from notes_api.core.config import get_app_config
        application = get_app_config().application
        click.echo(f"Name: {application.name}")
        click.echo(f"Version: {application.version}")
        click.echo(f"Description: {application.description}")
    except Exception as e:
        logger.warning("Could not load configuration", extra={"error": str(e)})
        click.echo("Configuration unavailable")

    click.echo()
    click.echo("Available Actions:")
    click.echo("  --action server   Start the API server")
    click.echo("  --action health   Check configuration and database")
    click.echo("  --action config   Display configuration")
    click.echo("  --action seed     Replace all notes with sample notes")
    click.echo("  --action info     Show this information")
    click.echo()
    click.echo("Logging Options:")
    click.echo("  --verbose, -v     Enable INFO level logging")
    click.echo("  --debug, -d       Enable DEBUG level logging")
    click.echo()
    click.echo("Examples:")
    click.echo("  python run.py --action server --reload --verbose")
    click.echo("  python run.py --action health --debug")
    click.echo("  python run.py --action seed")

    logger.debug("Info displayed")


if __name__ == "__main__":
    main()
