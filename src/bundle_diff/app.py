"""Textual viewer for a finished comparison report."""

from textual.app import App

from bundle_diff.models import Report
from bundle_diff.screens.report import ReportScreen


class BundleDiffApp(App):
    """TUI application showing one lock file comparison."""

    TITLE = "Bundle Diff"
    SUB_TITLE = "Added · Removed · Updated · Health"

    CSS = """
    Screen {
        background: $background;
    }
    """

    BINDINGS = [
        ("q", "quit", "Quit"),
    ]

    def __init__(self, report: Report, source: str, target: str) -> None:
        super().__init__()
        self.report = report
        self.source = source
        self.target = target

    def on_mount(self) -> None:
        self.push_screen(ReportScreen(self.report, self.source, self.target))
