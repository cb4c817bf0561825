import io
import unittest
from datetime import datetime, timedelta, timezone
from unittest import mock

from rich.console import Console

from ss3.console import (
    OPTIONS_BAR,
    RichConsole,
    format_size,
    format_time,
    modified_style,
    page_hint,
    size_style,
)
from ss3.navigator import Item
from ss3.paging import PageView


def _console() -> tuple[RichConsole, io.StringIO]:
    buffer = io.StringIO()
    console = Console(file=buffer, width=160, color_system=None, force_terminal=False)
    return RichConsole(console, clear=False), buffer


class TestFormatting(unittest.TestCase):
    def test_format_size(self) -> None:
        self.assertEqual(format_size(None), "")
        self.assertEqual(format_size(512), "512 B")
        self.assertEqual(format_size(2048), "2.0 KB")
        self.assertEqual(format_size(5 * 1024**3), "5.0 GB")

    def test_size_style(self) -> None:
        self.assertEqual(size_style(1), "green")
        self.assertEqual(size_style(50 * 1024**2), "#ffd700")
        self.assertEqual(size_style(20 * 1024**3), "bold red")

    def test_format_time(self) -> None:
        self.assertEqual(format_time(None), "")
        self.assertEqual(
            format_time(datetime(2024, 3, 4, 5, 6, 7, tzinfo=timezone.utc)),
            "2024-03-04 05:06:07",
        )

    def test_modified_style_fades_with_age(self) -> None:
        now = datetime.now(tz=timezone.utc)
        self.assertEqual(modified_style(None), "")
        self.assertEqual(modified_style(now), "#f0f0f0")
        self.assertEqual(modified_style(now - timedelta(days=1000)), "#6f6f6f")

    def test_page_hint(self) -> None:
        items = list(range(45))
        self.assertEqual(page_hint(PageView.build(items[:5], 0)), "")
        self.assertEqual(page_hint(PageView.build(items, 0)), "(Press 'F' for next page.)")
        self.assertEqual(
            page_hint(PageView.build(items, 2)), "(Press 'P' for previous page.)"
        )
        self.assertIn("'P'", page_hint(PageView.build(items, 1)))
        self.assertIn("'F'", page_hint(PageView.build(items, 1)))


class TestRichConsole(unittest.TestCase):
    def test_render_listing(self) -> None:
        rich_console, buffer = _console()
        items = [
            Item("img/"),
            Item("[draft].txt", size=2048, last_modified=datetime(2024, 1, 2, 3, 4, 5)),
        ]

        rich_console.render_listing("bucket", "docs/", PageView.build(items, 0))

        output = buffer.getvalue()
        self.assertIn("Current Bucket: bucket /docs/ (Page 1 of 1)", output)
        self.assertIn("img/", output)
        self.assertIn("[draft].txt", output)
        self.assertIn("2.0 KB", output)
        self.assertIn("2024-01-02 03:04:05", output)
        self.assertIn("[1]", output)
        self.assertIn(OPTIONS_BAR, output)

    def test_render_empty_listing(self) -> None:
        rich_console, buffer = _console()

        rich_console.render_listing("bucket", "", PageView.build([], 0))

        self.assertIn("No items to display in this folder.", buffer.getvalue())

    def test_transient_message_waits_for_enter(self) -> None:
        rich_console, buffer = _console()

        with mock.patch.object(rich_console.console, "input", return_value="") as pause:
            rich_console.render_transient_message("Downloaded 'a.txt'.")

        pause.assert_called_once()
        self.assertIn("Downloaded 'a.txt'.", buffer.getvalue())

    def test_help(self) -> None:
        rich_console, buffer = _console()

        with mock.patch.object(rich_console.console, "input", return_value=""):
            rich_console.render_help()

        self.assertIn("[N] to change bucket", buffer.getvalue())

    def test_choose(self) -> None:
        rich_console, buffer = _console()
        options = ["Change AWS Region (Current: [eu])", "Quit"]

        with mock.patch("ss3.console.Prompt.ask", side_effect=["2", "abc", "7"]):
            self.assertEqual(rich_console.choose("Menu", options), 1)
            self.assertIsNone(rich_console.choose("Menu", options))
            self.assertIsNone(rich_console.choose("Menu", options))

        self.assertIn("1. Change AWS Region (Current: [eu])", buffer.getvalue())

    def test_prompt_line_passes_default(self) -> None:
        rich_console, _ = _console()

        with mock.patch("ss3.console.Prompt.ask", return_value="bucket") as ask:
            self.assertEqual(
                rich_console.prompt_line("Enter a new bucket name", default="bucket"),
                "bucket",
            )

        self.assertEqual(ask.call_args.kwargs["default"], "bucket")

    def test_prompt_line_shows_bracketed_names_literally(self) -> None:
        rich_console, _ = _console()
        message = "Enter a new name for the file or press Enter to keep '[b]report.csv'"

        with mock.patch("ss3.console.Prompt.get_input", return_value="") as get_input:
            self.assertEqual(rich_console.prompt_line(message), "")

        shown = get_input.call_args.args[1]
        self.assertIn("'[b]report.csv'", shown.plain)

    def test_goodbye(self) -> None:
        rich_console, buffer = _console()

        rich_console.goodbye()

        self.assertIn("Exiting...", buffer.getvalue())


if __name__ == "__main__":
    unittest.main()
