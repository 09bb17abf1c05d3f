"""iowaittop - Interactive Textual view."""

from textual.app import App, ComposeResult
from textual.containers import Container
from textual.timer import Timer
from textual.widgets import DataTable, Footer, Static

from iowaittop.display import UNKNOWN_NAME
from iowaittop.errors import EnumerationError
from iowaittop.logging import get_logger
from iowaittop.models import Row
from iowaittop.monitor import IowaitMonitor, MonitorState

log = get_logger(__name__)


class StatusLine(Static):
    """One-line summary of the sampler state."""

    DEFAULT_CSS = """
    StatusLine {
        height: 1;
        padding: 0 1;
        background: $surface;
    }
    """

    def set_state(self, state: MonitorState, tasks: int, interval: float, paused: bool) -> None:
        """Render the current sampler state."""
        if state is MonitorState.BOOTSTRAP:
            text = "Collecting baseline..."
        else:
            text = f"{tasks} tasks sampled, every {interval:g}s"
        if paused:
            text += "  [yellow]paused[/yellow]"
        self.update(text)


class RankTable(Container):
    """Container for the ranked I/O-wait table."""

    DEFAULT_CSS = """
    RankTable {
        height: 1fr;
        border: solid $primary;
    }
    """

    def compose(self) -> ComposeResult:
        """Compose the rank table."""
        yield DataTable(id="rank-table")

    def on_mount(self) -> None:
        """Initialize the data table when mounted."""
        table = self.query_one("#rank-table", DataTable)
        table.cursor_type = "row"
        table.add_column("IOWAIT-COUNT", key="delta", width=12)
        table.add_column("PID", key="pid", width=8)
        table.add_column("NAME", key="name")

    def update_rows(self, rows: list[Row]) -> None:
        """Replace the table contents with the ranked rows, in order."""
        table = self.query_one("#rank-table", DataTable)
        table.clear()
        for row in rows:
            table.add_row(
                f"{row.delta:>12}",
                f"{row.pid:>6}",
                row.name or UNKNOWN_NAME,
                key=str(row.pid),
            )


class IowaitTopApp(App):
    """Main iowaittop application."""

    TITLE = "iowaittop"
    SUB_TITLE = "Processes with the most I/O-wait growth"

    BINDINGS = [
        ("q", "quit", "Quit"),
        ("p", "pause", "Pause"),
    ]

    def __init__(self, monitor: IowaitMonitor | None = None) -> None:
        """Initialize the IowaitTopApp."""
        super().__init__()
        self._monitor = monitor or IowaitMonitor()
        self._paused = False
        self._timer: Timer | None = None
        self.last_rows: list[Row] = []

    @property
    def paused(self) -> bool:
        """Whether refreshing is suspended."""
        return self._paused

    def compose(self) -> ComposeResult:
        """Compose the application layout."""
        yield StatusLine(id="status")
        yield RankTable()
        yield Footer()

    def on_mount(self) -> None:
        """Take the baseline sample and start the refresh timer."""
        self.refresh_frame()
        self._timer = self.set_interval(self._monitor.interval, self.refresh_frame)

    def refresh_frame(self) -> None:
        """Run one monitor tick and show its rows."""
        if self._paused:
            return
        try:
            rows = self._monitor.tick()
        except EnumerationError as e:
            log.error("process enumeration failed", error=str(e))
            self.exit(return_code=1, message=str(e))
            return

        self.last_rows = rows
        self.query_one(RankTable).update_rows(rows)
        self._update_status()

    def _update_status(self) -> None:
        previous = self._monitor.previous
        self.query_one("#status", StatusLine).set_state(
            self._monitor.state,
            len(previous) if previous is not None else 0,
            self._monitor.interval,
            self._paused,
        )

    def action_pause(self) -> None:
        """Toggle refreshing; the next tick after resuming diffs against a fresh baseline."""
        self._paused = not self._paused
        if not self._paused:
            self._monitor.reset()
            self.refresh_frame()
        self._update_status()
        self.notify("Paused" if self._paused else "Resumed")

    def action_quit(self) -> None:
        """Handle quit action."""
        if self._timer is not None:
            self._timer.stop()
        self.exit()
