"""CLI entry point for perimeter-proxy."""

import json
import sys
from datetime import datetime

from rich.console import Console

from app import create_app
from core.claims import claims_from_header
from core.config import CONFIG_FILE, load_config, validate_config
from core.exceptions import ConfigurationError, MalformedCredential
from ui.dashboard import Dashboard
from ui.log_utils import clear_logs, write_cli_log

console = Console()


def main():
    """Main CLI entry point."""
    config = load_config()

    # Handle CLI arguments
    if len(sys.argv) > 1:
        arg = sys.argv[1]

        if arg == "--config":
            console.print(f"[bold]Config:[/bold] {CONFIG_FILE}")
            return

        if arg == "--decode":
            if len(sys.argv) < 3:
                console.print("[red][ERROR][/red] --decode needs a token")
                sys.exit(2)
            _print_claims(sys.argv[2], config)
            return

        if arg in ("--help", "-h"):
            _print_help()
            return

        console.print(f"[red][ERROR][/red] Unknown argument: {arg}")
        _print_help()
        sys.exit(2)

    try:
        validate_config(config)
    except ConfigurationError as e:
        console.print(f"[red][ERROR][/red] {e}")
        console.print(f"[dim]Edit {CONFIG_FILE}[/dim]")
        sys.exit(1)

    if config.identity.verification is None:
        console.print("[yellow]Warning:[/yellow] Bearer token signatures are not verified")

    # Clear previous logs and start dashboard
    clear_logs()
    dashboard = Dashboard(config)

    import uvicorn

    app = create_app(config, dashboard)

    # Run with dashboard
    uvicorn_config = uvicorn.Config(
        app,
        host=config.proxy.host,
        port=config.proxy.port,
        log_level="warning",
        timeout_keep_alive=config.limits.keep_alive_timeout,
    )
    server = uvicorn.Server(uvicorn_config)

    dashboard.start()
    start_time = datetime.now()
    write_cli_log(
        "STARTUP",
        "Proxy started",
        port=config.proxy.port,
        destination=config.destination.url,
    )
    try:
        server.run()
    finally:
        duration = datetime.now() - start_time
        write_cli_log("SHUTDOWN", "Proxy stopped", duration=str(duration))
        dashboard.stop()


def _print_claims(token: str, config) -> None:
    """Print the decoded claim set of a token."""
    try:
        claims = claims_from_header(f"Bearer {token}", config.identity.verification)
    except MalformedCredential as e:
        console.print(f"[red][ERROR][/red] {e}")
        sys.exit(1)
    console.print_json(json.dumps(claims, default=str))


def _print_help():
    """Print help message."""
    help_text = """
[bold cyan]Perimeter Proxy[/bold cyan]

Replaces the bearer token with an identity header, rewrites the body
and forwards the request to a fixed destination.

[bold]Usage:[/bold]
    perimeter-proxy                  Start with live dashboard
    perimeter-proxy --decode TOKEN   Print the claims of a token
    perimeter-proxy --config         Show config location
    perimeter-proxy --help           Show this help
"""
    console.print(help_text)


if __name__ == "__main__":
    main()
