from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.text import Text

from .config import AppSettings, SettingsStorage, default_log_path
from .console import RichConsole
from .errors import StorageError
from .navigator import Navigator
from .s3 import S3Config, S3Service
from .session import SessionController

LOGGER = logging.getLogger(__name__)

DESCRIPTION = """\
Explore an S3 bucket and download files from it without having to
memorize AWS CLI commands.

For the best results, ensure that AWS_REGION and AWS_PROFILE are set
in your terminal and that you have run `aws configure` at least once
on your machine."""

EPILOG = """\
examples:
  ss3
  ss3 my-super-secret-bucket-name"""

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ss3",
        description=DESCRIPTION,
        epilog=EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter,
        add_help=False,
    )
    parser.add_argument(
        "bucket",
        nargs="?",
        help="Immediately provide the S3 bucket name.",
    )
    parser.add_argument(
        "-h",
        "--help",
        action="store_true",
        help="Show this help message.",
    )
    return parser


def configure_logging(level: str, log_path: Optional[Path] = None) -> None:
    path = log_path or default_log_path()
    logger = logging.getLogger("ss3")
    for existing in list(logger.handlers):
        logger.removeHandler(existing)
        existing.close()
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        handler: logging.Handler = logging.FileHandler(path, encoding="utf-8")
    except OSError:
        handler = logging.NullHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(handler)
    logger.setLevel(level)
    logger.propagate = False


def load_settings(storage: Optional[SettingsStorage] = None) -> AppSettings:
    storage = storage or SettingsStorage()
    settings = storage.load()
    if not storage.path.exists():
        storage.save(settings)
    return settings


def _run_browser_command(bucket: Optional[str], settings: AppSettings) -> int:
    config = S3Config(
        connect_timeout=settings.connect_timeout,
        read_timeout=settings.read_timeout,
        max_attempts=settings.max_attempts,
    )
    service = S3Service(config)
    try:
        service.client()
    except StorageError as exc:
        LOGGER.error("Could not initialise the S3 client: %s", exc.message)
        Console(stderr=True).print(Text(f"ss3: {exc.message}", style="red"))
        return 1
    navigator = Navigator(service, folder_timestamps=settings.folder_timestamps)
    session = SessionController(
        navigator,
        RichConsole(),
        config=config,
        page_size=settings.page_size,
        download_dir=settings.download_dir,
        initial_bucket=bucket,
    )
    session.run()
    return 0


def main(argv: Optional[list[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.help:
        parser.print_help()
        return 0
    configure_logging(AppSettings().log_level)
    settings = load_settings()
    logging.getLogger("ss3").setLevel(settings.log_level)
    try:
        return _run_browser_command(args.bucket, settings)
    except KeyboardInterrupt:
        print("\nExiting...")
        return 0


if __name__ == "__main__":
    sys.exit(main())
