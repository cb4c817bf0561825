from __future__ import annotations

import json
import logging
import os
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Optional

LOGGER = logging.getLogger(__name__)

LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


@dataclass
class AppSettings:
    page_size: int = 20
    folder_timestamps: bool = False
    download_dir: str = ""
    connect_timeout: int = 10
    read_timeout: int = 60
    max_attempts: int = 3
    log_level: str = "WARNING"


def config_base_dir() -> Path:
    config_home = os.environ.get("XDG_CONFIG_HOME")
    if config_home:
        base = Path(config_home).expanduser()
    else:
        base = Path.home() / ".config"
    return base / "ss3"


def default_config_path() -> Path:
    return config_base_dir() / "config.json"


def default_log_path() -> Path:
    return config_base_dir() / "ss3.log"


def _positive_int(value: object, default: int) -> int:
    if isinstance(value, bool):
        return default
    try:
        number = int(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return default
    if number <= 0:
        return default
    return number


class SettingsStorage:
    """JSON-backed persistence for :class:`AppSettings`."""

    def __init__(self, path: Optional[Path] = None) -> None:
        self._path = Path(path) if path is not None else default_config_path()

    @property
    def path(self) -> Path:
        return self._path

    def _read_payload(self) -> dict[str, object]:
        try:
            payload = json.loads(self._path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return {}
        except (OSError, ValueError) as exc:
            LOGGER.warning("Ignoring unreadable settings file %s: %s", self._path, exc)
            return {}
        if not isinstance(payload, dict):
            return {}
        return payload

    def load(self) -> AppSettings:
        payload = self._read_payload()
        defaults = AppSettings()
        folder_timestamps = payload.get("folder_timestamps", defaults.folder_timestamps)
        download_dir = payload.get("download_dir", defaults.download_dir)
        log_level = payload.get("log_level", defaults.log_level)
        if isinstance(log_level, str) and log_level.strip().upper() in LOG_LEVELS:
            log_level = log_level.strip().upper()
        else:
            log_level = defaults.log_level
        return AppSettings(
            page_size=_positive_int(payload.get("page_size"), defaults.page_size),
            folder_timestamps=(
                folder_timestamps
                if isinstance(folder_timestamps, bool)
                else defaults.folder_timestamps
            ),
            download_dir=(
                download_dir.strip()
                if isinstance(download_dir, str)
                else defaults.download_dir
            ),
            connect_timeout=_positive_int(
                payload.get("connect_timeout"), defaults.connect_timeout
            ),
            read_timeout=_positive_int(
                payload.get("read_timeout"), defaults.read_timeout
            ),
            max_attempts=_positive_int(
                payload.get("max_attempts"), defaults.max_attempts
            ),
            log_level=log_level,
        )

    def save(self, settings: AppSettings) -> bool:
        payload = self._read_payload()
        known = {field.name for field in fields(AppSettings)}
        payload = {key: value for key, value in payload.items() if key not in known}
        payload.update(asdict(settings))
        payload["page_size"] = max(int(settings.page_size), 1)
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            temp_path = self._path.with_suffix(".tmp")
            temp_path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
            temp_path.replace(self._path)
        except OSError as exc:
            LOGGER.warning("Could not save settings to %s: %s", self._path, exc)
            return False
        return True
