from __future__ import annotations

import enum
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from .errors import StorageError
from .s3 import DELIMITER, S3Service

LOGGER = logging.getLogger(__name__)

ROOT = ""


class ItemKind(enum.Enum):
    FOLDER = "folder"
    FILE = "file"


@dataclass(frozen=True)
class Item:
    name: str
    last_modified: Optional[datetime] = None
    size: Optional[int] = None
    delimiter: str = DELIMITER

    @property
    def kind(self) -> ItemKind:
        if self.name.endswith(self.delimiter):
            return ItemKind.FOLDER
        return ItemKind.FILE

    @property
    def is_folder(self) -> bool:
        return self.kind is ItemKind.FOLDER


@dataclass
class Listing:
    """Result of one listing call: either ``items`` or ``error`` is meaningful."""

    bucket: str
    prefix: str
    items: list[Item] = field(default_factory=list)
    error: Optional[StorageError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def _sort_key(item: Item) -> tuple[bool, object]:
    # Untimestamped items compare lowest, like the epoch.
    if item.last_modified is None:
        return (False, 0)
    return (True, item.last_modified)


def folder_name(common_prefix: str, prefix: str, delimiter: str = DELIMITER) -> str:
    name = common_prefix
    if prefix and name.startswith(prefix):
        name = name[len(prefix) :]
    if name.endswith(delimiter):
        name = name[: -len(delimiter)]
    return f"{name}{delimiter}"


def file_name(key: str, prefix: str) -> str:
    if prefix and key.startswith(prefix):
        return key[len(prefix) :]
    return key


def base_name(key: str, delimiter: str = DELIMITER) -> str:
    return key.rstrip(delimiter).rsplit(delimiter, 1)[-1]


class Navigator:
    def __init__(
        self,
        service: S3Service,
        bucket: Optional[str] = None,
        *,
        delimiter: str = DELIMITER,
        folder_timestamps: bool = False,
    ) -> None:
        self._service = service
        self._bucket = bucket
        self._delimiter = delimiter
        self._folder_timestamps = folder_timestamps
        self._path_stack: list[str] = [ROOT]

    @property
    def service(self) -> S3Service:
        return self._service

    @property
    def bucket(self) -> Optional[str]:
        return self._bucket

    @property
    def delimiter(self) -> str:
        return self._delimiter

    def rebind(self, service: S3Service) -> None:
        self._service = service

    def change_bucket(self, name: str) -> None:
        self._bucket = name
        self.clear_history()

    def clear_history(self) -> None:
        self._path_stack = [ROOT]

    def current_path(self) -> str:
        return self._path_stack[-1]

    def is_at_root(self) -> bool:
        return len(self._path_stack) == 1

    def enter_folder(self, name: str) -> str:
        if not name.endswith(self._delimiter):
            raise ValueError(f"'{name}' is not a folder")
        path = f"{self.current_path()}{name}"
        self._path_stack.append(path)
        return path

    def go_back(self) -> bool:
        if self.is_at_root():
            return False
        self._path_stack.pop()
        return True

    def probe(self, bucket: str) -> Optional[StorageError]:
        try:
            self._service.probe_bucket(bucket)
        except StorageError as exc:
            return exc
        return None

    def list_items(self) -> Listing:
        if self._bucket is None:
            raise RuntimeError("No bucket selected")
        return self.list_items_at(self._bucket, self.current_path())

    def list_items_at(self, bucket: str, prefix: str) -> Listing:
        try:
            prefixes, objects = self._service.list_prefixes_and_objects(
                bucket, prefix, self._delimiter
            )
        except StorageError as exc:
            return Listing(bucket=bucket, prefix=prefix, error=exc)

        folders = [
            Item(
                name=folder_name(common_prefix, prefix, self._delimiter),
                last_modified=self._folder_last_modified(bucket, common_prefix),
                delimiter=self._delimiter,
            )
            for common_prefix in prefixes
        ]
        files: list[Item] = []
        for obj in objects:
            name = file_name(obj.key, prefix)
            if not name:
                continue
            if self._delimiter in name and name != prefix:
                continue
            files.append(
                Item(
                    name=name,
                    last_modified=obj.last_modified,
                    size=obj.size,
                    delimiter=self._delimiter,
                )
            )
        items = folders + files
        items.sort(key=_sort_key, reverse=True)
        return Listing(bucket=bucket, prefix=prefix, items=items)

    def _folder_last_modified(self, bucket: str, prefix: str) -> Optional[datetime]:
        if not self._folder_timestamps:
            return None
        try:
            return self._service.latest_modified(bucket, prefix)
        except StorageError as exc:
            LOGGER.info("Skipping timestamp for %s: %s", prefix, exc.message)
            return None

    def key_for(self, name: str) -> str:
        return f"{self.current_path()}{name}"

    def download(self, name: str, destination: str) -> Optional[StorageError]:
        if self._bucket is None:
            raise RuntimeError("No bucket selected")
        try:
            self._service.download_object(self._bucket, self.key_for(name), destination)
        except StorageError as exc:
            return exc
        return None
