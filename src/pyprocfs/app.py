"""pyprocfs - Textual snapshot viewer."""

import argparse
import logging
import os
from enum import Enum

from textual.app import App, ComposeResult
from textual.containers import Container, Horizontal
from textual.widgets import DataTable, Footer, Static

from pyprocfs.errors import ProcfsError
from pyprocfs.logging_config import setup_logging
from pyprocfs.models import ProcessRecord
from pyprocfs.procfs import DEFAULT_PROC_ROOT, HostSnapshot, ProcFS, VanishedProcessPolicy

logger = logging.getLogger(__name__)

PAGE_SIZE = os.sysconf("SC_PAGE_SIZE")


class SortKey(Enum):
    """Sort keys for the process table."""

    PID = "pid"
    RSS = "rss"
    TIME = "time"
    NAME = "name"


def format_bytes(size: int) -> str:
    """Format bytes as human-readable string."""
    for unit in ["B", "K", "M", "G", "T"]:
        if size < 1024:
            return f"{size:5.1f}{unit}" if unit != "B" else f"{size:5d}{unit}"
        size = size / 1024
    return f"{size:.1f}P"


def format_uptime(seconds: float) -> str:
    days = int(seconds // 86400)
    hours = int((seconds % 86400) // 3600)
    minutes = int((seconds % 3600) // 60)
    secs = int(seconds % 60)
    if days > 0:
        return f"{days} days, {hours:02d}:{minutes:02d}:{secs:02d}"
    return f"{hours:02d}:{minutes:02d}:{secs:02d}"


def usage_bar(used: int, total: int, color: str) -> str:
    """Render a 20-cell bar for used/total."""
    bar_len = min(int(used * 20 / total), 20) if total > 0 else 0
    return f"[{color}]█[/{color}]" * bar_len + "[dim]░[/dim]" * (20 - bar_len)


class HeaderStats(Static):
    """Header widget showing load, CPU ticks, memory and swap."""

    DEFAULT_CSS = """
    HeaderStats {
        height: auto;
        min-height: 5;
        padding: 1;
        background: $surface;
    }
    """

    def __init__(self, *args, **kwargs) -> None:
        """Initialize HeaderStats."""
        super().__init__(*args, **kwargs)
        self._snapshot: HostSnapshot | None = None

    def compose(self) -> ComposeResult:
        """Compose the header stats layout."""
        yield Horizontal(
            Static(self._get_system_info(), id="system-info"),
            Static(self._get_mem_info(), id="mem-info"),
        )

    def update_stats(self, snapshot: HostSnapshot) -> None:
        """Update the statistics from a host snapshot."""
        self._snapshot = snapshot
        self.query_one("#system-info", Static).update(self._get_system_info())
        self.query_one("#mem-info", Static).update(self._get_mem_info())

    def _get_system_info(self) -> str:
        if self._snapshot is None:
            return "Reading /proc..."
        load = self._snapshot.load
        cpu = self._snapshot.cpu_times
        return (
            f"Load average: {load.one:.2f} {load.five:.2f} {load.fifteen:.2f}\n"
            f"Tasks: {load.runnable}/{load.total_tasks}, last pid {load.last_pid}\n"
            f"CPU ticks: usr {cpu.user} sys {cpu.system} idle {cpu.idle} iow {cpu.iowait}\n"
            f"Kernel: {self._snapshot.kernel_release}"
        )

    def _get_mem_info(self) -> str:
        if self._snapshot is None:
            return ""
        mem = self._snapshot.memory
        mem_bar = usage_bar(mem.used, mem.total, "cyan")
        lines = [f"Mem\\[{mem_bar}] {mem.used / 1024**2:.1f}G/{mem.total / 1024**2:.1f}G"]

        swap = self._snapshot.swap
        if swap is None:
            lines.append("Swp: none")
        else:
            swap_bar = usage_bar(swap.used, swap.size, "yellow")
            lines.append(f"Swp\\[{swap_bar}] {swap.used / 1024**2:.1f}G/{swap.size / 1024**2:.1f}G")

        lines.append(f"Uptime: {format_uptime(self._snapshot.uptime.system)}")
        return "\n".join(lines)


class ProcessTable(Container):
    """Container for the process data table."""

    DEFAULT_CSS = """
    ProcessTable {
        height: 1fr;
        border: solid $primary;
    }
    """

    def __init__(self, *args, **kwargs) -> None:
        """Initialize ProcessTable."""
        super().__init__(*args, **kwargs)
        self._records: list[ProcessRecord] = []
        self._current_pids: set[int] = set()
        self._sort_key: SortKey = SortKey.PID
        self._sort_reverse: bool = False

    @property
    def sort_key(self) -> SortKey:
        """Get current sort key."""
        return self._sort_key

    def cycle_sort(self) -> SortKey:
        """Cycle to the next sort key, re-render, and return it."""
        keys = list(SortKey)
        next_index = (keys.index(self._sort_key) + 1) % len(keys)
        self._sort_key = keys[next_index]
        # Largest first for resource columns
        self._sort_reverse = self._sort_key in (SortKey.RSS, SortKey.TIME)
        self._render_rows()
        return self._sort_key

    def compose(self) -> ComposeResult:
        """Compose the process table."""
        yield DataTable(id="process-table")

    def on_mount(self) -> None:
        """Initialize the data table when mounted."""
        table = self.query_one("#process-table", DataTable)
        table.cursor_type = "row"

        table.add_column("PID", key="pid", width=8)
        table.add_column("PPID", key="ppid", width=8)
        table.add_column("S", key="state", width=3)
        table.add_column("PRI", key="priority", width=4)
        table.add_column("NI", key="nice", width=4)
        table.add_column("THR", key="threads", width=5)
        table.add_column("VIRT", key="vsize", width=8)
        table.add_column("RES", key="rss", width=8)
        table.add_column("TICKS", key="ticks", width=10)
        table.add_column("Command", key="comm")

    def update_processes(self, records: list[ProcessRecord]) -> None:
        """Replace the table contents with a new set of records."""
        self._records = list(records)
        self._current_pids = {record.pid for record in self._records}
        self._render_rows()

    def _sort_records(self, records: list[ProcessRecord]) -> list[ProcessRecord]:
        key_func = {
            SortKey.PID: lambda r: r.pid,
            SortKey.RSS: lambda r: r.rss,
            SortKey.TIME: lambda r: r.utime + r.stime,
            SortKey.NAME: lambda r: r.comm.lower(),
        }
        return sorted(records, key=key_func[self._sort_key], reverse=self._sort_reverse)

    def _render_rows(self) -> None:
        table = self.query_one("#process-table", DataTable)
        table.clear()
        for record in self._sort_records(self._records):
            table.add_row(
                str(record.pid),
                str(record.ppid),
                record.state,
                str(record.priority),
                str(record.nice),
                str(record.num_threads),
                format_bytes(record.vsize),
                format_bytes(record.rss * PAGE_SIZE),
                str(record.utime + record.stime),
                record.comm[:50],
                key=str(record.pid),
            )


class ProcfsApp(App):
    """Main pyprocfs application."""

    TITLE = "pyprocfs"
    SUB_TITLE = "/proc snapshot"

    CSS = """
    Screen {
        layout: vertical;
    }

    #header-stats {
        dock: top;
        height: auto;
        min-height: 6;
    }

    Horizontal {
        height: auto;
    }

    #system-info {
        width: 1fr;
        padding-right: 2;
    }

    #mem-info {
        width: 1fr;
        padding-left: 2;
    }
    """

    BINDINGS = [
        ("q", "quit", "Quit"),
        ("r", "refresh", "Refresh"),
        ("f6", "sort", "Sort"),
    ]

    def __init__(
        self,
        proc_root: str = DEFAULT_PROC_ROOT,
        vanished_policy: VanishedProcessPolicy = VanishedProcessPolicy.SKIP,
    ) -> None:
        """Initialize the ProcfsApp."""
        super().__init__()
        self._procfs = ProcFS(proc_root, vanished_policy=vanished_policy)
        self._snapshot: HostSnapshot | None = None

    def compose(self) -> ComposeResult:
        """Compose the application layout."""
        yield HeaderStats(id="header-stats")
        yield ProcessTable()
        yield Footer()

    def on_mount(self) -> None:
        """Take the first snapshot once the widgets are mounted."""
        self.call_after_refresh(self.action_refresh)

    def action_refresh(self) -> None:
        """Read /proc once and show the result; read failures are reported."""
        try:
            snapshot = self._procfs.snapshot()
        except ProcfsError as err:
            logger.warning("Snapshot of %s failed: %s", self._procfs.proc_root, err)
            self.notify(str(err), title="Read failed", severity="error")
            return

        self._snapshot = snapshot
        self.query_one("#header-stats", HeaderStats).update_stats(snapshot)
        self.query_one(ProcessTable).update_processes(snapshot.processes)

    def action_sort(self) -> None:
        """Handle sort action - cycle through sort keys."""
        new_sort_key = self.query_one(ProcessTable).cycle_sort()
        self.notify(f"Sort: {new_sort_key.value.upper()}")


def main(argv: list[str] | None = None) -> None:
    """Entry point for the pyprocfs viewer."""
    parser = argparse.ArgumentParser(description="Show a snapshot of /proc.")
    parser.add_argument("--proc-root", default=DEFAULT_PROC_ROOT, help="Where procfs is mounted.")
    parser.add_argument("--log-level", default="WARNING", help="Log level (default: WARNING).")
    parser.add_argument(
        "--on-vanished",
        choices=[policy.value for policy in VanishedProcessPolicy],
        default=VanishedProcessPolicy.SKIP.value,
        help="Skip processes that exit mid-read, or fail the snapshot.",
    )
    args = parser.parse_args(argv)

    setup_logging(args.log_level)
    app = ProcfsApp(args.proc_root, vanished_policy=VanishedProcessPolicy(args.on_vanished))
    app.run()


if __name__ == "__main__":
    main()
