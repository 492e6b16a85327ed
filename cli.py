"""CLI entry point for api-tester-proxy."""

import socket
import sys
from datetime import datetime

from rich.console import Console

from app import create_app
from core.config import CONFIG_FILE, Config, load_config
from ui.console_logger import ConsoleLogger
from ui.dashboard import Dashboard
from ui.log_utils import CLI_LOG_FILE, clear_logs, write_cli_log

console = Console()


def main():
    """Main CLI entry point."""
    config = load_config()
    plain = False

    # Handle CLI arguments
    args = sys.argv[1:]
    while args:
        arg = args.pop(0)

        if arg == "--config":
            console.print(f"[bold]Config:[/bold] {CONFIG_FILE}")
            console.print(f"[bold]Log:[/bold] {CLI_LOG_FILE}")
            return

        if arg in ("--help", "-h"):
            _print_help()
            return

        if arg == "--plain":
            plain = True
        elif arg == "--port" and args and args[0].isdigit():
            config.proxy.port = int(args.pop(0))
        else:
            console.print(f"[red][ERROR][/red] Unknown argument: {arg}")
            _print_help()
            sys.exit(2)

    # Clear previous logs and pick the request observer
    clear_logs()
    observer = ConsoleLogger(console) if plain else Dashboard(config)

    import uvicorn

    app = create_app(config, observer)

    uvicorn_config = uvicorn.Config(
        app,
        host=config.proxy.host,
        port=config.proxy.port,
        log_level="info" if config.proxy.debug else "warning",
        timeout_keep_alive=config.limits.keep_alive_timeout,
    )
    server = uvicorn.Server(uvicorn_config)

    _print_banner(config)
    if isinstance(observer, Dashboard):
        observer.start()
    start_time = datetime.now()
    write_cli_log("STARTUP", "Proxy started", port=config.proxy.port)
    try:
        server.run()
    finally:
        duration = datetime.now() - start_time
        write_cli_log("SHUTDOWN", "Proxy stopped", duration=str(duration))
        if isinstance(observer, Dashboard):
            observer.stop()


def get_local_ip() -> str:
    """Best-effort address of this machine on the local network."""
    try:
        with socket.socket(socket.AF_INET, socket.SOCK_DGRAM) as s:
            # No packet is sent; connect() only selects the outgoing interface
            s.connect(("10.255.255.255", 1))
            return s.getsockname()[0]
    except OSError:
        return "127.0.0.1"


def _print_banner(config: Config) -> None:
    port = config.proxy.port
    console.rule("[bold cyan]PROXY SERVER RUNNING[/bold cyan]")
    console.print(f"Local:   http://localhost:{port}")
    console.print(f"Network: http://{get_local_ip()}:{port}")
    console.print(f"Proxy endpoint: http://localhost:{port}/proxy")
    console.print(f"Health check:   http://localhost:{port}/health")
    console.print(f"Server info:    http://localhost:{port}/info")
    console.rule()


def _print_help():
    """Print help message."""
    help_text = """
[bold cyan]API Tester Proxy[/bold cyan]

Forwards requests described as JSON to any HTTP endpoint and relays the
response back in a normalized envelope.

[bold]Usage:[/bold]
    api-tester-proxy               Start with live dashboard
    api-tester-proxy --plain       Start with one log line per request
    api-tester-proxy --port 5004   Listen on another port
    api-tester-proxy --config      Show config and log locations
    api-tester-proxy --help        Show this help

[bold]Request:[/bold]
    POST /proxy  {"url": "https://api.example.com", "method": "GET"}
    GET  /proxy?url=https://api.example.com
"""
    console.print(help_text)


if __name__ == "__main__":
    main()
