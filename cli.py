"""CLI entry point for dynamic-proxy."""

import asyncio
import sys
from datetime import datetime

from rich.console import Console

from app import create_app
from core.config import CONFIG_FILE, Config, load_config
from services.store import create_store
from services.targets import TargetStore
from ui.console_logger import ConsoleLogger
from ui.dashboard import Dashboard
from ui.log_utils import clear_logs, write_cli_log

console = Console()


def main():
    """Main CLI entry point."""
    config = load_config()
    headless = False

    # Handle CLI arguments
    if len(sys.argv) > 1:
        arg = sys.argv[1]

        if arg == "--target":
            _print_target(config)
            return

        if arg == "--config":
            console.print(f"[bold]Config:[/bold] {CONFIG_FILE}")
            if config.store.backend == "file":
                console.print(f"[bold]Store:[/bold] {config.store.path}")
            else:
                console.print("[bold]Store:[/bold] in-memory")
            return

        if arg in ("--help", "-h"):
            _print_help()
            return

        if arg == "--headless":
            headless = True
        else:
            console.print(f"[red][ERROR][/red] Unknown argument: {arg}")
            _print_help()
            sys.exit(2)

    store = create_store(config.store)
    target = asyncio.run(TargetStore(store).get_target()) or config.target.default_url

    # Clear previous logs and start logging
    clear_logs()
    import uvicorn

    if headless:
        logger = ConsoleLogger()
        dashboard = None
    else:
        logger = dashboard = Dashboard(config)

    app = create_app(config, logger, store=store)

    uvicorn_config = uvicorn.Config(
        app,
        host=config.proxy.host,
        port=config.proxy.port,
        log_level="warning",
        timeout_keep_alive=config.limits.keep_alive_timeout,
    )
    server = uvicorn.Server(uvicorn_config)

    if dashboard:
        dashboard.start(target)
    else:
        console.print(f"[bold cyan]Dynamic Proxy[/bold cyan] listening on {config.proxy.host}:{config.proxy.port}")
        console.print(f"[bold]Target:[/bold] {target or '[yellow]not set[/yellow]'}")
    start_time = datetime.now()
    write_cli_log("STARTUP", "Proxy started", port=config.proxy.port, target=target)
    try:
        server.run()
    finally:
        duration = datetime.now() - start_time
        write_cli_log("SHUTDOWN", "Proxy stopped", duration=str(duration))
        if dashboard:
            dashboard.stop()


def _print_target(config: Config) -> None:
    """Print the stored target URL."""
    target = asyncio.run(TargetStore(create_store(config.store)).get_target())
    if target:
        console.print(f"[green]Target:[/green] {target}")
    else:
        console.print("[yellow]No target set[/yellow]")
        console.print(f"[dim]Set one with:[/dim] curl 'http://localhost:{config.proxy.port}/?{config.proxy.control_key}=<url>'")


def _print_help():
    """Print help message."""
    help_text = """
[bold cyan]Dynamic Proxy[/bold cyan]

Forwards /proxy/... requests to a target URL that can be changed at runtime.

[bold]Usage:[/bold]
    dynamic-proxy              Start with live dashboard
    dynamic-proxy --headless   Start with plain console logging
    dynamic-proxy --target     Show the stored target URL
    dynamic-proxy --config     Show config locations
    dynamic-proxy --help       Show this help

[bold]Setting the target:[/bold]
    curl 'http://localhost:8000/?setUrl=https://api.example.com'
"""
    console.print(help_text)


if __name__ == "__main__":
    main()
