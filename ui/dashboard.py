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
from ui.log_utils import body_preview, write_cli_log, write_forward_log

console = Console()


class RequestInfo:
    """Info about a single forwarded request."""

    def __init__(self, identity: str | None, path: str, body: str, timestamp: datetime):
        self.identity = identity or "?"
        self.path = path
        self.body = body_preview(body)
        self.timestamp = timestamp


class Dashboard:
    """Real-time dashboard showing forwarded and rejected requests."""

    def __init__(self, config: Config):
        self.config = config
        self._lock = Lock()
        self._recent: list[RequestInfo] = []
        self._max_recent = 8
        self._request_count = {"forwarded": 0, "rejected": 0, "upstream_errors": 0}
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

    def log_forward(
        self,
        identity: str | None,
        body: str,
        headers: dict[str, str],
        *,
        path: str,
    ) -> None:
        """Log a request about to be forwarded to the destination."""
        with self._lock:
            self._request_count["forwarded"] += 1
            info = RequestInfo(identity=identity, path=path, body=body, timestamp=datetime.now())
            self._recent.insert(0, info)
            self._recent = self._recent[: self._max_recent]

            write_forward_log(identity, body, headers, path=path)
            write_cli_log("FORWARD", body_preview(body, 200), identity=identity, path=path)

            self._refresh()

    def log_rejected(self, path: str, status: int, message: str) -> None:
        """Log a request refused before forwarding."""
        with self._lock:
            self._request_count["rejected"] += 1
            self._push_error(f"{path} {status}: {message}")
            self._refresh()
            write_cli_log("REJECTED", message[:200], path=path, status=status)

    def log_error(self, route: str, status: int, message: str) -> None:
        """Log a destination error."""
        with self._lock:
            self._request_count["upstream_errors"] += 1
            self._push_error(f"{route} {status}: {message}")
            self._refresh()
            write_cli_log("ERROR", message[:200], route=route, status=status)

    def _push_error(self, line: str) -> None:
        truncated = line[:70] + "..." if len(line) > 70 else line
        self._errors.insert(0, truncated)
        self._errors = self._errors[:3]

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
        stats.append("Perimeter Proxy", style="bold cyan")
        stats.append("  |  ")
        stats.append(f"Forwarded: {self._request_count['forwarded']}", style="green")
        stats.append("  |  ")
        stats.append(f"Rejected: {self._request_count['rejected']}", style="yellow")
        stats.append("  |  ")
        stats.append(f"Upstream errors: {self._request_count['upstream_errors']}", style="red")
        stats.append("  |  ")
        stats.append(f"Port: {self.config.proxy.port}", style="dim")

        return Panel(stats, style="cyan")

    def _build_requests_panel(self) -> Panel:
        """Build recent requests panel."""
        if self._recent:
            table = Table(show_header=True, header_style="bold", expand=True, box=None)
            table.add_column("Time", style="dim", width=8)
            table.add_column("Identity", width=24)
            table.add_column("Path", ratio=1)
            table.add_column("Rewritten body", ratio=2)

            for info in self._recent:
                table.add_row(
                    info.timestamp.strftime("%H:%M:%S"),
                    Text(info.identity[:24]),
                    Text(info.path),
                    Text(info.body),
                )

            content = table
        else:
            content = Text("Waiting for requests...", style="dim")

        return Panel(
            content,
            title=f"[green]Forwarding to {self.config.destination.url}[/green]",
            border_style="green",
        )

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
                f"POST to http://{self.config.proxy.host}:{self.config.proxy.port}"
                "/api/jwt-terminate-rewrite-and-forward",
                style="dim",
            )

        return Panel(content, title="[dim]Status[/dim]", border_style="dim")
