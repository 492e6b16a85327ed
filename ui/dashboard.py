"""Real-time CLI dashboard for proxy monitoring."""

from datetime import datetime
from threading import Lock

from rich.console import Console
from rich.layout import Layout
from rich.live import Live
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from core.config import Config
from core.request_types import ProxyRequest
from ui.log_utils import shorten, write_cli_log

console = Console()


class RequestInfo:
    """Info about a single proxied request."""

    def __init__(self, method: str, url: str, timestamp: datetime):
        self.method = method
        self.url = shorten(url, 60)
        self.timestamp = timestamp
        self.status: int | None = None
        self.duration_ms: int | None = None


class Dashboard:
    """Real-time dashboard showing recent proxied requests and errors."""

    def __init__(self, config: Config):
        self.config = config
        self._lock = Lock()
        self._requests: list[RequestInfo] = []
        self._max_requests = 10
        self._counts = {"total": 0, "ok": 0, "failed": 0}
        self._errors: list[str] = []
        self._live: Live | None = None

    def start(self) -> "Dashboard":
        """Start the live dashboard."""
        self._live = Live(
            self._build_layout(),
            console=console,
            refresh_per_second=4,
            screen=False,
        )
        self._live.start()
        return self

    def stop(self) -> None:
        """Stop the live dashboard."""
        if self._live:
            self._live.stop()

    def on_request(self, request: ProxyRequest) -> None:
        """Log a request about to be forwarded."""
        with self._lock:
            self._counts["total"] += 1
            self._requests.insert(0, RequestInfo(request.method, request.url, datetime.now()))
            self._requests = self._requests[: self._max_requests]
            self._refresh()
            write_cli_log("PROXY", f"{request.method} {request.url}")

    def on_response(self, request: ProxyRequest, status: int, duration_ms: int) -> None:
        """Log a relayed upstream response."""
        with self._lock:
            self._counts["ok"] += 1
            info = self._find(request)
            if info:
                info.status = status
                info.duration_ms = duration_ms
            self._refresh()
            write_cli_log(
                "OK",
                f"{request.method} {request.url}",
                status=status,
                duration=f"{duration_ms}ms",
            )

    def on_error(
        self,
        method: str,
        url: str | None,
        status: int,
        code: str,
        message: str,
    ) -> None:
        """Log a rejected or failed request."""
        with self._lock:
            self._counts["failed"] += 1
            self._errors.insert(0, f"{method} {status} {code}: {shorten(message, 50)}")
            self._errors = self._errors[:3]
            self._refresh()
            write_cli_log("ERROR", message[:200], method=method, url=url, status=status, code=code)

    def _find(self, request: ProxyRequest) -> RequestInfo | None:
        url = shorten(request.url, 60)
        return next(
            (r for r in self._requests if r.status is None and r.url == url and r.method == request.method),
            None,
        )

    def _refresh(self) -> None:
        """Refresh the display."""
        if self._live:
            self._live.update(self._build_layout())

    def _build_layout(self) -> Layout:
        """Build the dashboard layout."""
        layout = Layout()

        layout.split_column(
            Layout(name="header", size=3),
            Layout(name="body"),
            Layout(name="footer", size=5),
        )

        layout["header"].update(self._build_header())
        layout["body"].update(self._build_requests_panel())
        layout["footer"].update(self._build_footer())

        return layout

    def _build_header(self) -> Panel:
        """Build header with stats."""
        stats = Text()
        stats.append("API Tester Proxy", style="bold cyan")
        stats.append("  |  ")
        stats.append(f"Requests: {self._counts['total']}", style="blue")
        stats.append("  |  ")
        stats.append(f"Relayed: {self._counts['ok']}", style="green")
        stats.append("  |  ")
        stats.append(f"Failed: {self._counts['failed']}", style="red")
        stats.append("  |  ")
        stats.append(f"Port: {self.config.proxy.port}", style="dim")

        return Panel(stats, style="cyan")

    def _build_requests_panel(self) -> Panel:
        """Build recent requests panel."""
        if self._requests:
            table = Table(show_header=True, header_style="bold", expand=True, box=None)
            table.add_column("Time", style="dim", width=8)
            table.add_column("Method", width=7)
            table.add_column("URL", ratio=3)
            table.add_column("Status", width=6)
            table.add_column("Duration", width=9)

            for req in self._requests:
                table.add_row(
                    req.timestamp.strftime("%H:%M:%S"),
                    req.method,
                    escape(req.url),
                    str(req.status) if req.status is not None else "[dim]...[/dim]",
                    f"{req.duration_ms}ms" if req.duration_ms is not None else "",
                )

            content = table
        else:
            content = Text("Waiting for requests...", style="dim")

        return Panel(content, title="[blue]Recent Requests[/blue]", border_style="blue")

    def _build_footer(self) -> Panel:
        """Build footer with errors and help."""
        if self._errors:
            error_text = Text()
            for err in self._errors:
                error_text.append("! ", style="red bold")
                error_text.append(err + "\n", style="red")
            content = error_text
        else:
            content = Text(
                f"POST http://localhost:{self.config.proxy.port}/proxy with a JSON body to proxy",
                style="dim",
            )

        return Panel(content, title="[dim]Status[/dim]", border_style="dim")
