"""Report screen — the comparison table with a change summary."""

from collections import Counter

from textual.app import ComposeResult
from textual.screen import Screen
from textual.widgets import DataTable, Footer, Header, Label, Static

from bundle_diff.models import ChangeType, Report


class ReportScreen(Screen):
    """Shows every reconciled gem in a scrollable table."""

    CSS = """
    ReportScreen {
        layout: vertical;
    }
    #report-header {
        height: 3;
        background: $primary;
        color: $text;
        text-align: center;
        padding: 1 2;
        text-style: bold;
    }
    #summary-label {
        margin: 1 2;
        color: $text-muted;
    }
    #report-table {
        height: 1fr;
    }
    """

    BINDINGS = [
        ("q", "app.quit", "Quit"),
        ("u", "toggle_unchanged", "Toggle unchanged"),
    ]

    def __init__(self, report: Report, source: str, target: str, **kwargs) -> None:  # type: ignore[no-untyped-def]
        super().__init__(**kwargs)
        self.report = report
        self.source = source
        self.target = target
        self.show_unchanged = True

    def compose(self) -> ComposeResult:
        yield Header(show_clock=True)
        yield Static(f"  📦  {self.source} → {self.target}  ", id="report-header")
        yield Label(self.summary, id="summary-label")
        yield DataTable(id="report-table", zebra_stripes=True)
        yield Footer()

    def on_mount(self) -> None:
        table = self.query_one("#report-table", DataTable)
        table.add_columns(*self.report.header)
        self._fill_table()

    @property
    def summary(self) -> str:
        counts = Counter(self.report.column("ChangeType"))
        parts = [f"{ct.value}: {counts.get(ct.value, 0)}" for ct in ChangeType]
        return f"Gems: {len(self.report.rows)}  ·  " + "  ·  ".join(parts)

    def visible_rows(self) -> list[list[str]]:
        if self.show_unchanged:
            return list(self.report.rows)
        idx = self.report.header.index("ChangeType")
        return [r for r in self.report.rows if r[idx] != ChangeType.unchanged.value]

    def _fill_table(self) -> None:
        table = self.query_one("#report-table", DataTable)
        table.clear()
        for row in self.visible_rows():
            table.add_row(*row)

    def action_toggle_unchanged(self) -> None:
        self.show_unchanged = not self.show_unchanged
        self._fill_table()
