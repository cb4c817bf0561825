from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.prompt import Prompt
from rich.table import Table
from rich.text import Text

from .navigator import Item
from .paging import PageView

ONE_MB = 1024**2
HUNDRED_MB = 100 * ONE_MB
ONE_GB = 1024**3
TEN_GB = 10 * ONE_GB

OPTIONS_BAR = (
    "[H]: Help | [0-9]: Select item | [N]: New Bucket | [B]: Back | "
    "[P]: Prev Page | [F]: Next Page | [Q]: Quit"
)

HELP_TEXT = """\
[0-9] to select item (folders are opened, files are downloaded)
[Q] to quit
[N] to change bucket
[B] to go back
[P] to prev page
[F] to next page"""


def format_size(size: Optional[int]) -> str:
    if size is None:
        return ""
    units = ["B", "KB", "MB", "GB", "TB", "PB"]
    value = float(size)
    for unit in units:
        if value < 1024 or unit == units[-1]:
            if unit == "B":
                return f"{int(value)} {unit}"
            return f"{value:.1f} {unit}"
        value /= 1024
    return f"{value:.1f} PB"


def size_style(size: int) -> str:
    if size < ONE_MB:
        return "green"
    if size < HUNDRED_MB:
        return "#ffd700"
    if size < ONE_GB:
        return "#ff8c00"
    if size < TEN_GB:
        return "red"
    return "bold red"


def format_time(value: Optional[datetime]) -> str:
    if not value:
        return ""
    return value.strftime("%Y-%m-%d %H:%M:%S")


def modified_style(value: Optional[datetime]) -> str:
    if not value:
        return ""
    if value.tzinfo is not None:
        now = datetime.now(tz=value.tzinfo)
    else:
        now = datetime.now()
    age_days = max(0.0, (now - value).total_seconds()) / 86400.0
    thresholds = [1, 7, 30, 90, 180, 365]
    colors = [
        "#f0f0f0",
        "#dddddd",
        "#c7c7c7",
        "#b1b1b1",
        "#9b9b9b",
        "#858585",
        "#6f6f6f",
    ]
    index = 0
    for cutoff in thresholds:
        if age_days <= cutoff:
            break
        index += 1
    return colors[min(index, len(colors) - 1)]


def item_icon(item: Item) -> str:
    return "📁" if item.is_folder else "📄"


def page_hint(view: PageView) -> str:
    if view.page_count <= 1:
        return ""
    if not view.has_previous:
        return "(Press 'F' for next page.)"
    if not view.has_next:
        return "(Press 'P' for previous page.)"
    return "(Press 'P' for previous page. Press 'F' for next page.)"


class RichConsole:
    def __init__(self, console: Optional[Console] = None, clear: bool = True) -> None:
        self.console = console or Console()
        self._clear = clear

    def prompt_line(self, message: str, default: str = "") -> str:
        if default:
            return Prompt.ask(escape(message), console=self.console, default=default)
        return Prompt.ask(
            escape(message), console=self.console, default="", show_default=False
        )

    def read_command(self) -> str:
        return Prompt.ask("Input", console=self.console, default="", show_default=False)

    def _pause(self) -> None:
        self.console.input("[dim]Press Enter to continue...[/dim]")

    def render_listing(self, bucket: str, path: str, view: PageView) -> None:
        if self._clear:
            self.console.clear()
        self.console.print(
            f"[bold]Current Bucket:[/bold] {escape(bucket)} /{escape(path)} "
            f"(Page {view.page + 1} of {view.page_count})",
            highlight=False,
        )
        table = Table(expand=False, show_edge=False, pad_edge=False)
        table.add_column("#", justify="right", style="cyan")
        table.add_column("", width=2)
        table.add_column("Name")
        table.add_column("Size", justify="right")
        table.add_column("Modified")
        for index, item in view.numbered():
            size = Text(format_size(item.size))
            if item.size is not None:
                size.stylize(size_style(item.size))
            table.add_row(
                Text(f"[{index}]"),
                item_icon(item),
                Text(item.name, style="bold blue" if item.is_folder else ""),
                size,
                Text(
                    format_time(item.last_modified),
                    style=modified_style(item.last_modified),
                ),
            )
        if view.items:
            self.console.print(table)
        else:
            self.console.print("[yellow]No items to display in this folder.[/yellow]")
        hint = page_hint(view)
        if hint:
            self.console.print(hint, highlight=False)
        self.console.print(Text(OPTIONS_BAR, style="reverse"))

    def render_transient_message(self, text: str, error: bool = False) -> None:
        style = "red" if error else "green"
        self.console.print(Text(text, style=style))
        self._pause()

    def render_help(self) -> None:
        self.console.print(Panel(Text(HELP_TEXT), title="Help", expand=False))
        self._pause()

    def choose(self, title: str, options: Sequence[str]) -> Optional[int]:
        self.console.print(Text(title, style="bold green"))
        for number, option in enumerate(options, start=1):
            self.console.print(f"  {number}. {option}", markup=False, highlight=False)
        answer = Prompt.ask(
            "Select an option", console=self.console, default="", show_default=False
        ).strip()
        try:
            index = int(answer) - 1
        except ValueError:
            return None
        if not 0 <= index < len(options):
            return None
        return index

    def goodbye(self) -> None:
        self.console.print("\nExiting...")
