from __future__ import annotations

import enum
import logging
import os
import re
from dataclasses import replace
from typing import Callable, Optional, Protocol, Sequence

from .errors import StorageError
from .navigator import Item, Navigator, base_name
from .paging import DEFAULT_PAGE_SIZE, PageView, clamp_page, has_next_page
from .s3 import S3Config, S3Service

LOGGER = logging.getLogger(__name__)

INVALID_OPTION = "Invalid option. Press 'H' for help."
NOT_SET = "NOT SET"

_INDEX_RE = re.compile(r"[0-9]+")


class Console(Protocol):
    def prompt_line(self, message: str, default: str = "") -> str: ...

    def render_listing(self, bucket: str, path: str, view: PageView) -> None: ...

    def render_transient_message(self, text: str, error: bool = False) -> None: ...

    def render_help(self) -> None: ...

    def read_command(self) -> str: ...

    def choose(self, title: str, options: Sequence[str]) -> Optional[int]: ...

    def goodbye(self) -> None: ...


ServiceFactory = Callable[[S3Config], S3Service]


class State(enum.Enum):
    SELECTING_BUCKET = "selecting_bucket"
    BROWSING = "browsing"
    AWAITING_DOWNLOAD_NAME = "awaiting_download_name"
    EXITING = "exiting"


class SessionController:
    """Interactive loop driving a :class:`Navigator` through a console."""

    def __init__(
        self,
        navigator: Navigator,
        console: Console,
        *,
        config: Optional[S3Config] = None,
        service_factory: ServiceFactory = S3Service,
        page_size: int = DEFAULT_PAGE_SIZE,
        download_dir: str = "",
        initial_bucket: Optional[str] = None,
    ) -> None:
        self.navigator = navigator
        self.console = console
        self.config = config or navigator.service.config
        self._service_factory = service_factory
        self.page_size = page_size
        self.download_dir = download_dir
        self.state = State.SELECTING_BUCKET
        self.page = 0
        self.items: list[Item] = []
        self.selected: Optional[Item] = None
        self._candidate = initial_bucket.strip() if initial_bucket else None
        self._ask_bucket = False

    def run(self) -> None:
        try:
            while self.state is not State.EXITING:
                self.step()
        except (KeyboardInterrupt, EOFError):
            LOGGER.info("Session interrupted")
            self.state = State.EXITING
        self.console.goodbye()

    def step(self) -> None:
        if self.state is State.SELECTING_BUCKET:
            self._select_bucket()
        elif self.state is State.BROWSING:
            self.refresh()
            self.render()
            self.dispatch(self.console.read_command())
        elif self.state is State.AWAITING_DOWNLOAD_NAME:
            self._download_selected()

    # Bucket selection / main menu

    def _select_bucket(self) -> None:
        if self._candidate:
            candidate, self._candidate = self._candidate, None
            self.connect(candidate)
            return
        if self._ask_bucket:
            self._ask_bucket = False
            self.prompt_bucket()
            return

        entries: list[tuple[str, Callable[[], None]]] = [
            (
                f"Change AWS Region (Current: {self._current_region() or NOT_SET})",
                self.change_region,
            ),
            (
                f"Change AWS Profile (Current: {self._current_profile() or NOT_SET})",
                self.change_profile,
            ),
        ]
        bucket = self.navigator.bucket
        if bucket is None:
            entries.append(("Enter Bucket Name", self.prompt_bucket))
        else:
            entries.append(("Change Bucket Name", self.prompt_bucket))
            entries.append((f"Enter '{bucket}'", lambda: self.connect(bucket)))
        entries.append(("Quit", self.quit))

        choice = self.console.choose("SS3 Main Menu", [label for label, _ in entries])
        if choice is None or not 0 <= choice < len(entries):
            self.console.render_transient_message(INVALID_OPTION, error=True)
            return
        entries[choice][1]()

    def prompt_bucket(self) -> None:
        current = self.navigator.bucket or ""
        if current:
            name = self.console.prompt_line("Enter a new bucket name", default=current)
        else:
            name = self.console.prompt_line("Enter the name of the bucket")
        name = name.strip()
        if not name:
            return
        self.connect(name)

    def connect(self, bucket: str) -> bool:
        error = self.navigator.probe(bucket)
        if error is not None:
            self.console.render_transient_message(error.message, error=True)
            return False
        LOGGER.info("Browsing bucket '%s'", bucket)
        self.navigator.change_bucket(bucket)
        self.page = 0
        self.state = State.BROWSING
        return True

    def change_region(self) -> None:
        try:
            regions = self.navigator.service.available_regions()
        except StorageError as exc:
            self.console.render_transient_message(exc.message, error=True)
            return
        if not regions:
            self.console.render_transient_message("No AWS regions available.", error=True)
            return
        current = self._current_region() or NOT_SET
        choice = self.console.choose(f"Select a new region (Current: {current})", regions)
        if choice is None or not 0 <= choice < len(regions):
            self.console.render_transient_message(INVALID_OPTION, error=True)
            return
        self.apply_config(replace(self.config, region=regions[choice]))

    def change_profile(self) -> None:
        profiles = self.navigator.service.available_profiles()
        if not profiles:
            self.console.render_transient_message(
                "No AWS profiles found. Run `aws configure` outside of ss3.",
                error=True,
            )
            return
        current = self._current_profile() or NOT_SET
        choice = self.console.choose(
            f"Select a new profile (Current: {current})", profiles
        )
        if choice is None or not 0 <= choice < len(profiles):
            self.console.render_transient_message(INVALID_OPTION, error=True)
            return
        self.apply_config(replace(self.config, profile=profiles[choice]))

    def apply_config(self, config: S3Config) -> None:
        LOGGER.info("Using region=%s profile=%s", config.region, config.profile)
        self.config = config
        self.navigator.rebind(self._service_factory(config))

    def _current_region(self) -> str:
        return self.navigator.service.current_region()

    def _current_profile(self) -> str:
        return self.navigator.service.current_profile()

    # Browsing

    def refresh(self) -> None:
        listing = self.navigator.list_items()
        if not listing.ok:
            self.items = []
            self.console.render_transient_message(listing.error.message, error=True)
        else:
            self.items = listing.items
        self.page = clamp_page(self.page, len(self.items), self.page_size)

    def view(self) -> PageView:
        return PageView.build(self.items, self.page, self.page_size)

    def render(self) -> None:
        self.console.render_listing(
            self.navigator.bucket or "", self.navigator.current_path(), self.view()
        )

    def dispatch(self, command: str) -> None:
        token = command.strip().lower()
        if token == "q":
            self.quit()
        elif token == "h":
            self.console.render_help()
        elif token == "n":
            self.navigator.clear_history()
            self.page = 0
            self._ask_bucket = True
            self.state = State.SELECTING_BUCKET
        elif token == "b":
            self.navigator.go_back()
            self.page = 0
        elif token == "f":
            if has_next_page(self.page, len(self.items), self.page_size):
                self.page += 1
        elif token == "p":
            if self.page > 0:
                self.page -= 1
        elif _INDEX_RE.fullmatch(token) and int(token) < len(self.items):
            self.select(self.items[int(token)])
        else:
            self.console.render_transient_message(INVALID_OPTION, error=True)

    def select(self, item: Item) -> None:
        if item.is_folder:
            self.navigator.enter_folder(item.name)
            self.page = 0
            return
        self.selected = item
        self.state = State.AWAITING_DOWNLOAD_NAME

    def quit(self) -> None:
        self.state = State.EXITING

    # Download

    def _download_selected(self) -> None:
        item = self.selected
        self.selected = None
        self.state = State.BROWSING
        if item is None:
            return
        self.download(item)

    def download(self, item: Item) -> bool:
        default_name = base_name(self.navigator.key_for(item.name))
        name = self.console.prompt_line(
            f"Enter a new name for the file or press Enter to keep '{default_name}'"
        ).strip()
        name = name or default_name
        if self.download_dir:
            destination = os.path.join(os.path.expanduser(self.download_dir), name)
        else:
            destination = name
        error = self.navigator.download(item.name, destination)
        if error is not None:
            self.console.render_transient_message(error.message, error=True)
            return False
        self.console.render_transient_message(f"Downloaded '{name}'.")
        return True
