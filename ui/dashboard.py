"""Real-time CLI dashboard for gateway monitoring."""

from collections.abc import Callable
from datetime import datetime
from threading import Lock

from rich.console import Console
from rich.layout import Layout
from rich.live import Live
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from core.config import Config
from ui.log_utils import write_cli_log

console = Console()


class RequestInfo:
    """Info about a single forwarded request."""

    def __init__(self, method: str, path: str, target: str, timestamp: datetime):
        self.method = method
        self.full_path = path
        self.path = path[:60] + "..." if len(path) > 60 else path
        self.target = target
        self.status: int | None = None
        self.timestamp = timestamp


class Dashboard:
    """Real-time dashboard showing the active backend and recent traffic."""

    def __init__(self, config: Config, backend_url: Callable[[], str] | None = None):
        self.config = config
        self._backend_url = backend_url
        self._lock = Lock()
        self._requests: list[RequestInfo] = []
        self._max_requests = 10
        self._counts = {"forwarded": 0, "failed": 0, "config": 0}
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

    def log_proxy(self, method: str, path: str, target: str) -> None:
        """Record a request about to be forwarded."""
        with self._lock:
            self._counts["forwarded"] += 1
            self._requests.insert(0, RequestInfo(method, path, target, datetime.now()))
            self._requests = self._requests[: self._max_requests]
            self._refresh()

    def log_response(self, method: str, path: str, status: int) -> None:
        """Attach the backend status to the pending request with this method and path."""
        with self._lock:
            for info in self._requests:
                if info.status is None and info.method == method and info.full_path == path:
                    info.status = status
                    break
            self._refresh()

    def log_error(self, route: str, status: int, message: str) -> None:
        """Log an error."""
        with self._lock:
            self._counts["failed"] += 1
            for info in self._requests:
                if info.status is None:
                    info.status = status
                    break
            truncated = message[:50] + "..." if len(message) > 50 else message
            self._errors.insert(0, f"{route} {status}: {truncated}")
            self._errors = self._errors[:3]
            self._refresh()
            write_cli_log("ERROR", message[:200], route=route, status=status)

    def log_config_change(self, backend_url: str, persisted: bool) -> None:
        """Log a backend switch."""
        with self._lock:
            self._counts["config"] += 1
            if not persisted:
                self._errors.insert(0, f"backend {backend_url} not persisted (session only)")
                self._errors = self._errors[:3]
            self._refresh()
            write_cli_log("CONFIG", "Backend URL changed", backend_url=backend_url, persisted=persisted)

    def _refresh(self) -> None:
        """Refresh the display."""
        if self._live:
            self._live.update(self._build_layout())

    def _build_layout(self) -> Layout:
        """Build the dashboard layout."""
        layout = Layout()

        layout.split_column(
            Layout(name="header", size=3),
            Layout(name="requests"),
            Layout(name="footer", size=4),
        )

        layout["header"].update(self._build_header())
        layout["requests"].update(self._build_requests_panel())
        layout["footer"].update(self._build_footer())

        return layout

    def _build_header(self) -> Panel:
        """Build header with stats."""
        backend = self._backend_url() if self._backend_url else "—"
        stats = Text()
        stats.append("Luo Gateway", style="bold cyan")
        stats.append("  |  ")
        stats.append(f"Backend: {backend}", style="blue")
        stats.append("  |  ")
        stats.append(f"Forwarded: {self._counts['forwarded']}", style="green")
        stats.append("  |  ")
        stats.append(f"Failed: {self._counts['failed']}", style="red")
        stats.append("  |  ")
        stats.append(f"Port: {self.config.server.port}", style="dim")

        return Panel(stats, style="cyan")

    def _build_requests_panel(self) -> Panel:
        """Build recent requests panel."""
        if self._requests:
            table = Table(show_header=True, header_style="bold", expand=True, box=None)
            table.add_column("Time", style="dim", width=8)
            table.add_column("Method", width=7)
            table.add_column("Path", ratio=2)
            table.add_column("Backend", ratio=1)
            table.add_column("Status", width=6)

            for req in self._requests:
                if req.status is None:
                    status = "[dim]…[/dim]"
                elif req.status >= 500:
                    status = f"[red]{req.status}[/red]"
                else:
                    status = str(req.status)
                table.add_row(
                    req.timestamp.strftime("%H:%M:%S"),
                    req.method,
                    req.path,
                    req.target,
                    status,
                )

            content = table
        else:
            content = Text("Waiting for requests...", style="dim")

        return Panel(content, title="[green]Requests[/green]", border_style="green")

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
                f"POST http://localhost:{self.config.server.port}/config/backend to switch backend",
                style="dim",
            )

        return Panel(content, title="[dim]Status[/dim]", border_style="dim")
