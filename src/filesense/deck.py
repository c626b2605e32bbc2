"""Scan Deck - a TUI for watching content-type identification run over a folder."""

from __future__ import annotations

import time
from collections import Counter
from dataclasses import dataclass, field, replace
from datetime import datetime
from pathlib import Path

from textual import work
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical
from textual.message import Message
from textual.widgets import DataTable, Footer, Header, Input, Log, ProgressBar, Static

from filesense.exceptions import FileSenseError
from filesense.magika import Magika
from filesense.models import MagikaResult
from filesense.utils.paths import iter_directory_files

SCAN_BATCH_SIZE = 32

GROUP_COLORS = {
    "document": "magenta",
    "executable": "green",
    "archive": "red",
    "audio": "yellow",
    "image": "yellow",
    "video": "yellow",
    "code": "blue",
    "text": "cyan",
}

STATUS_COLORS = {"loading": "yellow", "running": "green", "complete": "cyan", "error": "red"}


@dataclass
class ScanStats:
    """Counters for one scan."""

    files_discovered: int = 0
    files_processed: int = 0
    model_predictions: int = 0
    fast_path: int = 0
    low_confidence: int = 0
    total_bytes: int = 0
    groups: Counter = field(default_factory=Counter)
    current_file: str = ""
    status: str = "idle"
    seconds: float = 0.0

    def record(self, result: MagikaResult, size: int) -> None:
        """Account for one identified file."""
        self.files_processed += 1
        self.total_bytes += size
        self.groups[result.output.group] += 1
        if result.prediction_skipped:
            self.fast_path += 1
        else:
            self.model_predictions += 1
            if result.dl.ct_label != result.output.ct_label:
                self.low_confidence += 1

    def copy(self) -> ScanStats:
        return replace(self, groups=Counter(self.groups))


class StatsPanel(Static):
    """Scan counters and per-group totals."""

    def on_mount(self) -> None:
        self.update_stats(ScanStats())

    def update_stats(self, stats: ScanStats) -> None:
        color = STATUS_COLORS.get(stats.status, "dim")
        groups = "\n".join(
            f"  {group:<11} [{GROUP_COLORS.get(group, 'white')}]{count:,}[/]"
            for group, count in stats.groups.most_common(8)
        ) or "  [dim]--[/]"
        rate = stats.files_processed / stats.seconds if stats.seconds else 0.0
        current = Path(stats.current_file).name if stats.current_file else "--"

        self.update(
            f"[b]STATUS[/b]  [{color}]{stats.status.upper()}[/]\n"
            f"[b]NOW[/b]     [dim]{current}[/]\n"
            f"[b]TIME[/b]    {stats.seconds:.1f}s  {rate:.1f} files/s\n\n"
            f"[b]FILES[/b]\n"
            f"  Found       [cyan]{stats.files_discovered:,}[/]\n"
            f"  Processed   [green]{stats.files_processed:,}[/]\n"
            f"  Model       [blue]{stats.model_predictions:,}[/]\n"
            f"  Fast path   [dim]{stats.fast_path:,}[/]\n"
            f"  Low conf.   [yellow]{stats.low_confidence:,}[/]\n"
            f"  Size        [cyan]{stats.total_bytes / 1024:.1f} KB[/]\n\n"
            f"[b]GROUPS[/b]\n{groups}"
        )


class ResultTable(DataTable):
    """One row per identified file."""

    def on_mount(self) -> None:
        self.add_columns("File", "Label", "Group", "Score")
        self.cursor_type = "row"

    def add_result(self, result: MagikaResult) -> None:
        out = result.output
        label = f"[{GROUP_COLORS.get(out.group, 'white')}]{out.ct_label}[/]"
        if result.prediction_skipped:
            score = "[dim]--[/]"
        elif result.dl.ct_label != out.ct_label:
            # low confidence: show what the model would have said
            score = f"[yellow]{out.score:.2f}[/] [dim]({result.dl.ct_label})[/]"
        else:
            score = f"{out.score:.2f}"
        self.add_row(Path(result.path).name, label, out.group, score)
        self.scroll_end()


class ScanDeck(App):
    """The filesense Scan Deck."""

    # Posted from the scan worker thread
    class StatsUpdated(Message):
        def __init__(self, stats: ScanStats) -> None:
            self.stats = stats
            super().__init__()

    class LogMessage(Message):
        def __init__(self, message: str) -> None:
            self.message = message
            super().__init__()

    class FileIdentified(Message):
        def __init__(self, result: MagikaResult) -> None:
            self.result = result
            super().__init__()

    CSS = """
    #sidebar {
        width: 36;
        padding: 1;
        border-right: solid $primary-darken-2;
    }

    StatsPanel {
        height: auto;
        margin-top: 1;
        padding: 1;
        border: round $primary;
    }

    #main {
        padding: 1;
    }

    ResultTable {
        height: 1fr;
    }

    #log-panel {
        height: 8;
        border: round $primary-darken-2;
    }
    """

    BINDINGS = [
        Binding("s", "scan", "Scan"),
        Binding("c", "clear", "Clear"),
        Binding("q", "quit", "Quit"),
        Binding("d", "toggle_dark", "Toggle Dark Mode"),
    ]

    TITLE = "filesense Scan Deck"

    def __init__(
        self,
        model_dir: str | None = None,
        directory: str | None = None,
        magika: Magika | None = None,
    ) -> None:
        super().__init__()
        self.model_dir = model_dir
        self.initial_directory = directory
        self._magika = magika

    def compose(self) -> ComposeResult:
        yield Header()
        with Horizontal():
            with Vertical(id="sidebar"):
                yield Input(
                    value=self.initial_directory or "",
                    placeholder="Folder to scan, then Enter",
                    id="source-input",
                )
                yield StatsPanel()
            with Vertical(id="main"):
                yield ProgressBar(id="progress-bar", show_eta=False)
                yield ResultTable(id="results")
                yield Log(id="log-panel", auto_scroll=True)
        yield Footer()

    def on_mount(self) -> None:
        if self.initial_directory:
            self.action_scan()
        else:
            self._log("Type a folder and press Enter")

    def on_unmount(self) -> None:
        if self._magika is not None:
            self._magika.close()

    def _log(self, message: str) -> None:
        timestamp = datetime.now().strftime("%H:%M:%S")
        self.query_one("#log-panel", Log).write_line(f"[{timestamp}] {message}")

    def on_scan_deck_stats_updated(self, event: StatsUpdated) -> None:
        stats = event.stats
        self.query_one(StatsPanel).update_stats(stats)
        self.query_one("#progress-bar", ProgressBar).update(
            total=max(stats.files_discovered, 1), progress=stats.files_processed
        )

    def on_scan_deck_log_message(self, event: LogMessage) -> None:
        self._log(event.message)

    def on_scan_deck_file_identified(self, event: FileIdentified) -> None:
        self.query_one("#results", ResultTable).add_result(event.result)

    def on_input_submitted(self, event: Input.Submitted) -> None:
        self.action_scan()

    def action_toggle_dark(self) -> None:
        self.theme = "textual-light" if self.theme == "textual-dark" else "textual-dark"

    def action_clear(self) -> None:
        self.query_one(StatsPanel).update_stats(ScanStats())
        self.query_one("#results", ResultTable).clear()
        self.query_one("#log-panel", Log).clear()
        self.query_one("#progress-bar", ProgressBar).update(progress=0)

    def action_scan(self) -> None:
        source = self.query_one("#source-input", Input).value.strip()
        if not source:
            self._log("No folder given")
            return
        self.run_scan(source)

    @work(exclusive=True, thread=True)
    def run_scan(self, source: str) -> None:
        """Identify every file below source in a background thread."""
        source_path = Path(source)
        stats = ScanStats(status="loading")
        start = time.perf_counter()

        def publish() -> None:
            stats.seconds = time.perf_counter() - start
            self.post_message(self.StatsUpdated(stats.copy()))

        def fail(message: str) -> None:
            stats.status = "error"
            publish()
            self.post_message(self.LogMessage(f"ERROR: {message}"))

        publish()
        if not source_path.is_dir():
            fail(f"Not a folder: {source}")
            return

        if self._magika is None:
            self.post_message(self.LogMessage("Loading model..."))
            try:
                self._magika = Magika(model_dir=self.model_dir)
            except FileSenseError as e:
                fail(f"Failed to load model: {e}")
                return
        magika = self._magika

        paths = [str(p) for p in iter_directory_files(source_path)]
        stats.files_discovered = len(paths)
        stats.status = "running"
        publish()
        self.post_message(
            self.LogMessage(f"Found {len(paths)} files, model {magika.get_model_name()}")
        )

        for offset in range(0, len(paths), SCAN_BATCH_SIZE):
            batch = paths[offset : offset + SCAN_BATCH_SIZE]
            stats.current_file = batch[0]
            publish()
            try:
                results = magika.identify_paths(batch)
            except FileSenseError as e:
                fail(f"Identification failed: {e}")
                return

            for result in results:
                try:
                    size = Path(result.path).stat().st_size
                except OSError:
                    size = 0
                stats.record(result, size)
                self.post_message(self.FileIdentified(result))

        stats.status = "complete"
        stats.current_file = ""
        publish()
        self.post_message(
            self.LogMessage(
                f"Done: {stats.files_processed} files, "
                f"{stats.model_predictions} scored by the model"
            )
        )


def main(model_dir: str | None = None, directory: str | None = None) -> None:
    """Run the Scan Deck TUI."""
    ScanDeck(model_dir=model_dir, directory=directory).run()


if __name__ == "__main__":
    main()
