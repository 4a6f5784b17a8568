"""Line-per-event request logger for headless runs."""

from datetime import datetime

from rich.console import Console

from ui.log_utils import write_cli_log, write_forward_log

console = Console()


class ConsoleLogger:
    """Print one console line per event and mirror it to the log file."""

    def log_request(self, method: str, path: str, query: str) -> None:
        line = f"{method} {path}{'?' + query if query else ''}"
        console.print(f"[dim]{_now()}[/dim] {line}", highlight=False)
        write_cli_log("REQUEST", line)

    def log_forward(
        self,
        method: str,
        upstream_url: str,
        status: int,
        size: int,
        *,
        headers: dict[str, str] | None = None,
    ) -> None:
        style = "red" if status >= 500 else "yellow" if status >= 400 else "green"
        console.print(
            f"[dim]{_now()}[/dim] [magenta]->[/magenta] {method} {upstream_url} "
            f"[{style}]{status}[/{style}] [dim]{size} B[/dim]",
            highlight=False,
        )
        write_forward_log(method, upstream_url, status, size, headers or {})
        write_cli_log("FORWARD", f"{method} {upstream_url}", status=status, bytes=size)

    def log_target_update(self, url: str) -> None:
        console.print(f"[dim]{_now()}[/dim] [blue]Target set:[/blue] {url}", highlight=False)
        write_cli_log("TARGET", url)

    def log_warning(self, route: str, message: str) -> None:
        console.print(f"[dim]{_now()}[/dim] [yellow]Warning[/yellow] {route}: {message}", highlight=False)
        write_cli_log("WARNING", message[:200], route=route)

    def log_error(self, route: str, status: int, message: str) -> None:
        console.print(f"[dim]{_now()}[/dim] [red]Error[/red] {route} {status}: {message}", highlight=False)
        write_cli_log("ERROR", message[:200], route=route, status=status)


def _now() -> str:
    return datetime.now().strftime("%H:%M:%S")
