"""Plain console request logger, used when the dashboard is disabled."""

from datetime import datetime

from rich.console import Console
from rich.markup import escape

from core.request_types import ProxyRequest
from ui.log_utils import write_cli_log


class ConsoleLogger:
    """Print one line per proxy event."""

    def __init__(self, console: Console | None = None):
        self.console = console or Console()

    def on_request(self, request: ProxyRequest) -> None:
        self.console.print(f"[dim]{_now()}[/dim] [cyan]->[/cyan] {request.method} {escape(request.url)}")
        write_cli_log("PROXY", f"{request.method} {request.url}")

    def on_response(self, request: ProxyRequest, status: int, duration_ms: int) -> None:
        self.console.print(
            f"[dim]{_now()}[/dim] [green]<-[/green] {request.method} {escape(request.url)} "
            f"- {status} ({duration_ms}ms)"
        )
        write_cli_log("OK", f"{request.method} {request.url}", status=status, duration=f"{duration_ms}ms")

    def on_error(
        self,
        method: str,
        url: str | None,
        status: int,
        code: str,
        message: str,
    ) -> None:
        target = escape(url or '-')
        self.console.print(f"[dim]{_now()}[/dim] [red]x[/red] {method} {target} - {status} {code}: {escape(message)}")
        write_cli_log("ERROR", message[:200], method=method, url=url, status=status, code=code)


def _now() -> str:
    return datetime.now().strftime("%H:%M:%S")
