"""Real-time CLI dashboard for proxy monitoring."""

from datetime import datetime
from threading import Lock

from rich.console import Console
from rich.layout import Layout
from rich.live import Live
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from core.config import Config
from ui.log_utils import write_cli_log, write_forward_log

console = Console()


class ForwardInfo:
    """Info about a single forwarded request."""

    def __init__(self, method: str, upstream_url: str, status: int, size: int, timestamp: datetime):
        self.method = method
        self.upstream_url = upstream_url
        self.status = status
        self.size = size
        self.timestamp = timestamp


def _status_style(status: int) -> str:
    if status >= 500:
        return "red"
    if status >= 400:
        return "yellow"
    return "green"


def _format_size(size: int) -> str:
    if size < 1024:
        return f"{size} B"
    if size < 1024 * 1024:
        return f"{size / 1024:.1f} KB"
    return f"{size / (1024 * 1024):.1f} MB"


class Dashboard:
    """Real-time dashboard showing the current target and recent forwards."""

    def __init__(self, config: Config):
        self.config = config
        self._lock = Lock()
        self._target: str | None = None
        self._forwards: list[ForwardInfo] = []
        self._max_forwards = 10
        self._request_count = {"total": 0, "forwarded": 0, "errors": 0}
        self._errors: list[str] = []
        self._live: Live | None = None

    def start(self, target: str | None = None) -> "Dashboard":
        """Start the live dashboard."""
        self._target = target
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

    def log_request(self, method: str, path: str, query: str) -> None:
        """Count an incoming request."""
        with self._lock:
            self._request_count["total"] += 1
            write_cli_log("REQUEST", f"{method} {path}{'?' + query if query else ''}")
            self._refresh()

    def log_forward(
        self,
        method: str,
        upstream_url: str,
        status: int,
        size: int,
        *,
        headers: dict[str, str] | None = None,
    ) -> None:
        """Log a request relayed to the upstream target."""
        with self._lock:
            self._request_count["forwarded"] += 1
            info = ForwardInfo(method, upstream_url, status, size, datetime.now())
            self._forwards.insert(0, info)
            self._forwards = self._forwards[: self._max_forwards]

            write_forward_log(method, upstream_url, status, size, headers or {})
            write_cli_log("FORWARD", f"{method} {upstream_url}", status=status, bytes=size)

            self._refresh()

    def log_target_update(self, url: str) -> None:
        """Show a new proxy target."""
        with self._lock:
            self._target = url
            write_cli_log("TARGET", url)
            self._refresh()

    def log_warning(self, route: str, message: str) -> None:
        """Log a recovered problem."""
        with self._lock:
            write_cli_log("WARNING", message[:200], route=route)

    def log_error(self, route: str, status: int, message: str) -> None:
        """Log an error."""
        with self._lock:
            self._request_count["errors"] += 1
            truncated = message[:50] + "..." if len(message) > 50 else message
            self._errors.insert(0, f"{route} {status}: {truncated}")
            self._errors = self._errors[:3]
            self._refresh()
            write_cli_log("ERROR", message[:200], route=route, status=status)

    def _refresh(self) -> None:
        """Refresh the display."""
        if self._live:
            self._live.update(self._build_layout())

    def _build_layout(self) -> Layout:
        """Build the dashboard layout."""
        layout = Layout()

        layout.split_column(
            Layout(name="header", size=3),
            Layout(name="target", size=3),
            Layout(name="body"),
            Layout(name="footer", size=5),
        )

        layout["header"].update(self._build_header())
        layout["target"].update(self._build_target_panel())
        layout["body"].update(self._build_forwards_panel())
        layout["footer"].update(self._build_footer())

        return layout

    def _build_header(self) -> Panel:
        """Build header with stats."""
        stats = Text()
        stats.append("Dynamic Proxy", style="bold cyan")
        stats.append("  |  ")
        stats.append(f"Requests: {self._request_count['total']}", style="blue")
        stats.append("  |  ")
        stats.append(f"Forwarded: {self._request_count['forwarded']}", style="magenta")
        stats.append("  |  ")
        stats.append(f"Errors: {self._request_count['errors']}", style="red")
        stats.append("  |  ")
        stats.append(f"Port: {self.config.proxy.port}", style="dim")

        return Panel(stats, style="cyan")

    def _build_target_panel(self) -> Panel:
        """Build panel with the current target URL."""
        if self._target:
            content = Text(self._target, style="bold")
        else:
            content = Text("Not set", style="yellow")
        return Panel(content, title="[blue]Target[/blue]", border_style="blue")

    def _build_forwards_panel(self) -> Panel:
        """Build recent forwards panel."""
        if self._forwards:
            table = Table(show_header=True, header_style="bold", expand=True, box=None)
            table.add_column("Time", style="dim", width=8)
            table.add_column("Method", width=7)
            table.add_column("Upstream URL", ratio=3)
            table.add_column("Status", width=6)
            table.add_column("Size", width=9)

            for fw in self._forwards:
                table.add_row(
                    fw.timestamp.strftime("%H:%M:%S"),
                    fw.method,
                    fw.upstream_url[:80] + "..." if len(fw.upstream_url) > 80 else fw.upstream_url,
                    Text(str(fw.status), style=_status_style(fw.status)),
                    _format_size(fw.size),
                )

            content = table
        else:
            content = Text("Waiting for requests...", style="dim")

        return Panel(content, title="[magenta]Forwarded[/magenta]", border_style="magenta")

    def _build_footer(self) -> Panel:
        """Build footer with errors and help."""
        if self._errors:
            error_text = Text()
            for err in self._errors:
                error_text.append("! ", style="red bold")
                error_text.append(err + "\n", style="red")
            content = error_text
        else:
            proxy = self.config.proxy
            content = Text(
                f"Forward: http://localhost:{proxy.port}{proxy.prefix}/...\n"
                f"Set target: http://localhost:{proxy.port}/?{proxy.control_key}=<url>",
                style="dim",
            )

        return Panel(content, title="[dim]Status[/dim]", border_style="dim")
