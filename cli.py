#!/usr/bin/env python3
"""
Telegram Relay CLI.

Primary entry point for all relay operations.
Use --service to select what to run, --action to control lifecycle.

Usage:
    python cli.py --help
    python cli.py --service backend --verbose
    python cli.py --service gateway --verbose
    python cli.py --service gateway --action stop
    python cli.py --service set-webhook
    python cli.py --service health --debug
    python cli.py --service config
"""

import asyncio
import os
import signal
import subprocess
import sys
from pathlib import Path

import click
import structlog

PROJECT_ROOT = Path(__file__).parent
sys.path.insert(0, str(PROJECT_ROOT))

from modules.backend.core.logging import get_logger, setup_logging

LONG_RUNNING_SERVICES = {"backend", "gateway"}

APP_TARGETS = {
    "backend": "modules.backend.main:app",
    "gateway": "modules.telegram.app:app",
}


def validate_project_root() -> Path:
    """Validate that we're running from the project root."""
    if not (PROJECT_ROOT / ".project_root").exists():
        click.echo(
            click.style("Error: .project_root not found. Run from project root.", fg="red"),
            err=True,
        )
        sys.exit(1)
    return PROJECT_ROOT


def _find_process_on_port(port: int) -> list[int]:
    """Find PIDs listening on a port."""
    result = subprocess.run(
        ["lsof", "-ti", f":{port}"],
        capture_output=True, text=True,
    )
    pids = result.stdout.strip().split("\n")
    return [int(p) for p in pids if p.strip()]


def _service_stop(logger, service: str, port: int) -> None:
    """Stop a running service by finding its process on the port."""
    pids = _find_process_on_port(port)
    if not pids:
        click.echo(f"No {service} running on port {port}.")
        return

    for pid in pids:
        os.kill(pid, signal.SIGINT)
        logger.info("Sent SIGINT", extra={"service": service, "pid": pid, "port": port})

    click.echo(f"{service.title()} on port {port} stopped (PID: {', '.join(str(p) for p in pids)}).")


def _service_status(service: str, port: int) -> None:
    """Check if a service is running on a port."""
    pids = _find_process_on_port(port)
    if pids:
        click.echo(f"{service.title()} is running on port {port} (PID: {', '.join(str(p) for p in pids)}).")
    else:
        click.echo(f"{service.title()} is not running on port {port}.")


def _server_config(service: str):
    """Server host/port block for a service."""
    from modules.backend.core.config import get_app_config

    config = get_app_config()
    if service == "gateway":
        return config.gateway.server
    return config.application.server


@click.command()
@click.option(
    "--service", "-s",
    type=click.Choice(["backend", "gateway", "set-webhook", "health", "config", "info"]),
    default="info",
    help="Service or command to run.",
)
@click.option(
    "--action", "-a",
    type=click.Choice(["start", "stop", "restart", "status"]),
    default="start",
    help="Lifecycle action for long-running services (backend, gateway).",
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
    help="Server host.",
)
@click.option(
    "--port",
    default=None,
    type=int,
    help="Server port.",
)
@click.option(
    "--reload",
    is_flag=True,
    help="Enable auto-reload (backend, gateway).",
)
@click.option(
    "--drop-pending",
    is_flag=True,
    help="Drop updates queued at Telegram (set-webhook only).",
)
def main(
    service: str,
    action: str,
    verbose: bool,
    debug: bool,
    host: str | None,
    port: int | None,
    reload: bool,
    drop_pending: bool,
) -> None:
    """
    Telegram Relay CLI.

    Use --service to select what to run. For long-running services
    (backend, gateway), use --action to control lifecycle
    (start/stop/restart/status).

    \b
    Examples:
        python cli.py --service backend --verbose
        python cli.py --service gateway --reload
        python cli.py --service gateway --action status
        python cli.py --service set-webhook --drop-pending
        python cli.py --service health --debug
        python cli.py --service config
    """
    validate_project_root()

    if debug:
        log_level = "DEBUG"
    elif verbose:
        log_level = "INFO"
    else:
        log_level = "WARNING"

    setup_logging(level=log_level, format_type="console")

    structlog.contextvars.bind_contextvars(source="cli")

    logger = get_logger(__name__)

    logger.debug("CLI invoked", extra={"service": service, "action": action, "log_level": log_level})

    if service in LONG_RUNNING_SERVICES and action != "start":
        service_port = port or _server_config(service).port

        if action == "stop":
            _service_stop(logger, service, service_port)
            return
        elif action == "status":
            _service_status(service, service_port)
            return
        elif action == "restart":
            _service_stop(logger, service, service_port)
            import time
            time.sleep(2)

    if service in LONG_RUNNING_SERVICES:
        run_server(logger, service, host, port, reload)
    elif service == "set-webhook":
        set_webhook(logger, drop_pending)
    elif service == "health":
        check_health(logger)
    elif service == "config":
        show_config(logger)
    elif service == "info":
        show_info(logger)


def run_server(logger, service: str, host: str | None, port: int | None, reload: bool) -> None:
    """Start the backend or gateway server under uvicorn."""
    try:
        server_config = _server_config(service)
    except Exception as e:
        logger.error("Failed to load configuration.", extra={"error": str(e)})
        click.echo(
            click.style("Error: Could not load config/settings.", fg="red"),
            err=True,
        )
        sys.exit(1)

    server_host = host or server_config.host
    server_port = port or server_config.port

    logger.info(
        "Starting server",
        extra={"service": service, "host": server_host, "port": server_port, "reload": reload},
    )

    cmd = [
        sys.executable, "-m", "uvicorn",
        APP_TARGETS[service],
        "--host", server_host,
        "--port", str(server_port),
    ]

    if reload:
        cmd.append("--reload")

    click.echo(f"Starting {service} at http://{server_host}:{server_port}")
    click.echo("Press Ctrl+C to stop\n")

    try:
        subprocess.run(cmd, check=True)
    except KeyboardInterrupt:
        logger.info("Server stopped", extra={"service": service})
    except subprocess.CalledProcessError as e:
        logger.error("Server failed to start", extra={"service": service, "exit_code": e.returncode})
        sys.exit(e.returncode)


def set_webhook(logger, drop_pending: bool) -> None:
    """Register the gateway's public webhook URL with Telegram."""
    from modules.backend.core.config import get_settings, get_webhook_url

    webhook_url = get_webhook_url()
    if not webhook_url:
        click.echo(
            click.style(
                "Error: gateway.yaml webhook.public_url is empty. "
                "Set it to the gateway's public HTTPS address.",
                fg="red",
            ),
            err=True,
        )
        sys.exit(1)

    try:
        asyncio.run(_set_webhook(webhook_url, get_settings().telegram_webhook_secret, drop_pending))
    except Exception as e:
        logger.error("Failed to set webhook", extra={"error": str(e)})
        click.echo(click.style(f"Error: {e}", fg="red"), err=True)
        sys.exit(1)

    click.echo(f"Webhook set to {webhook_url}")


async def _set_webhook(url: str, secret: str, drop_pending: bool) -> None:
    from modules.telegram.bot import close_bot
    from modules.telegram.services.delivery import DeliveryService

    try:
        await DeliveryService().set_webhook(
            url,
            secret_token=secret,
            drop_pending_updates=drop_pending,
        )
    finally:
        await close_bot()


def check_health(logger) -> None:
    """Check relay health by testing imports and configuration."""
    click.echo("Checking relay health...\n")

    checks = []

    try:
        from modules.backend.core.config import get_app_config, get_settings
        checks.append(("Core imports", True, None))
        logger.debug("Core imports successful")
    except Exception as e:
        checks.append(("Core imports", False, str(e)))
        logger.error("Core imports failed", extra={"error": str(e)})

    try:
        app_config = get_app_config()
        app_name = app_config.application.name
        checks.append(("YAML configuration", True, f"App: {app_name}"))
        logger.debug("Configuration loaded", extra={"app_name": app_name})
    except Exception as e:
        checks.append(("YAML configuration", False, str(e)))
        logger.error("Configuration failed", extra={"error": str(e)})

    try:
        token_set = bool(get_settings().telegram_bot_token)
        checks.append(("Telegram bot token", token_set, None if token_set else "TELEGRAM_BOT_TOKEN is empty"))
    except Exception as e:
        checks.append(("Telegram bot token", False, str(e)))
        logger.error("Settings failed", extra={"error": str(e)})

    try:
        from modules.backend.main import get_app
        app = get_app()
        checks.append(("Backend application", True, f"Title: {app.title}"))
        logger.debug("Backend app loaded", extra={"title": app.title})
    except Exception as e:
        checks.append(("Backend application", False, str(e)))
        logger.error("Backend app failed", extra={"error": str(e)})

    try:
        from modules.telegram.app import get_app as get_gateway_app
        gateway = get_gateway_app()
        checks.append(("Gateway application", True, f"Title: {gateway.title}"))
        logger.debug("Gateway app loaded", extra={"title": gateway.title})
    except Exception as e:
        checks.append(("Gateway application", False, str(e)))
        logger.error("Gateway app failed", extra={"error": str(e)})

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
        click.echo("Note: secrets are read from config/.env (see config/.env.example).")


def show_config(logger) -> None:
    """Display loaded configuration."""
    click.echo("Relay Configuration:\n")

    try:
        from modules.backend.core.config import get_app_config

        app_config = get_app_config()
        sections = {
            "Application": app_config.application,
            "Database": app_config.database,
            "Logging": app_config.logging,
            "Gateway": app_config.gateway,
        }

        for title, section in sections.items():
            click.echo(f"{title} Settings (from YAML):")
            click.echo("-" * 40)
            _echo_section(section.model_dump())
            click.echo()

        logger.info("Configuration displayed successfully")

    except Exception as e:
        logger.error("Failed to load configuration", extra={"error": str(e)})
        click.echo(click.style(f"Error loading configuration: {e}", fg="red"))
        sys.exit(1)


def _echo_section(values: dict, indent: int = 2) -> None:
    for key, value in values.items():
        if isinstance(value, dict):
            click.echo(f"{' ' * indent}{key}:")
            _echo_section(value, indent + 2)
        else:
            click.echo(f"{' ' * indent}{key}: {value}")


def show_info(logger) -> None:
    """Display relay information."""
    click.echo("Telegram Relay")
    click.echo("=" * 40)

    try:
        from modules.backend.core.config import get_app_config
        application = get_app_config().application
        click.echo(f"Name: {application.name}")
        click.echo(f"Version: {application.version}")
        click.echo(f"Description: {application.description}")
    except Exception as e:
        logger.error(
            "Failed to load application configuration",
            extra={"error": str(e)},
        )
        click.echo(
            click.style(
                "Error: Could not load application.yaml configuration.",
                fg="red",
            ),
            err=True,
        )
        sys.exit(1)

    click.echo()
    click.echo("Services (--service):")
    click.echo("  backend        Backend service (update routing, persistence)")
    click.echo("  gateway        Bot gateway (Telegram webhook, delivery)")
    click.echo("  set-webhook    Register the webhook URL with Telegram")
    click.echo("  health         Check relay health")
    click.echo("  config         Display configuration")
    click.echo("  info           Show this information")
    click.echo()
    click.echo("Lifecycle actions (--action, for backend and gateway):")
    click.echo("  start          Start the service (default)")
    click.echo("  stop           Stop a running service")
    click.echo("  restart        Stop then start")
    click.echo("  status         Check if running")

    logger.debug("Info displayed")


if __name__ == "__main__":
    main()
