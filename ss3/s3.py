from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional

import boto3
from boto3.exceptions import Boto3Error
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from .errors import ErrorKind, StorageError, translate_error

LOGGER = logging.getLogger(__name__)

DELIMITER = "/"
REGION_PARTITIONS = ("aws", "aws-us-gov")


@dataclass(frozen=True)
class S3Config:
    region: Optional[str] = None
    profile: Optional[str] = None
    connect_timeout: int = 10
    read_timeout: int = 60
    max_attempts: int = 3


@dataclass(frozen=True)
class ObjectInfo:
    key: str
    size: int
    last_modified: Optional[datetime]


class S3Service:
    def __init__(
        self,
        config: Optional[S3Config] = None,
        session_factory: Optional[Callable[..., object]] = None,
    ) -> None:
        self.config = config or S3Config()
        self._session_factory = session_factory or boto3.session.Session
        self._session = None
        self._client = None

    def session(self):
        if self._session is None:
            try:
                if self.config.profile:
                    self._session = self._session_factory(
                        profile_name=self.config.profile
                    )
                else:
                    self._session = self._session_factory()
            except (BotoCoreError, ClientError) as exc:
                raise translate_error(exc) from exc
        return self._session

    def client(self):
        if self._client is None:
            session = self.session()
            region = self.config.region or session.region_name
            if not region:
                raise StorageError(
                    ErrorKind.MISSING_REGION,
                    "No AWS region configured. Set AWS_REGION or choose a region.",
                )
            boto_config = Config(
                connect_timeout=self.config.connect_timeout,
                read_timeout=self.config.read_timeout,
                retries={"max_attempts": self.config.max_attempts, "mode": "standard"},
            )
            try:
                self._client = session.client(
                    "s3", region_name=region, config=boto_config
                )
            except (BotoCoreError, ClientError) as exc:
                raise translate_error(exc) from exc
        return self._client

    def current_region(self) -> str:
        if self.config.region:
            return self.config.region
        try:
            return self.session().region_name or ""
        except StorageError:
            return ""

    def current_profile(self) -> str:
        if self.config.profile:
            return self.config.profile
        try:
            session = self.session()
        except StorageError:
            return ""
        profile = getattr(session, "profile_name", None) or ""
        if profile == "default" and "default" not in self.available_profiles():
            return ""
        return profile

    def available_regions(self) -> list[str]:
        session = self.session()
        regions: list[str] = []
        for partition in REGION_PARTITIONS:
            for region in session.get_available_regions(
                "s3", partition_name=partition
            ):
                if region not in regions:
                    regions.append(region)
        return regions

    def available_profiles(self) -> list[str]:
        try:
            profiles = list(self.session().available_profiles)
        except StorageError:
            return []
        normalized: list[str] = []
        for profile in profiles:
            if profile not in normalized:
                normalized.append(profile)
        return normalized

    def probe_bucket(self, bucket: str) -> None:
        try:
            self.client().list_objects_v2(Bucket=bucket, Prefix="", MaxKeys=1)
        except (BotoCoreError, ClientError) as exc:
            raise translate_error(exc, bucket=bucket) from exc
        LOGGER.debug("Bucket '%s' is reachable", bucket)

    def list_prefixes_and_objects(
        self, bucket: str, prefix: str, delimiter: str = DELIMITER
    ) -> tuple[list[str], list[ObjectInfo]]:
        try:
            return self._list_prefixes_and_objects(bucket, prefix, delimiter)
        except (BotoCoreError, ClientError) as exc:
            raise translate_error(exc, bucket=bucket) from exc

    def _list_prefixes_and_objects(
        self, bucket: str, prefix: str, delimiter: str
    ) -> tuple[list[str], list[ObjectInfo]]:
        client = self.client()
        prefixes: list[str] = []
        objects: list[ObjectInfo] = []
        continuation: Optional[str] = None
        while True:
            kwargs = {
                "Bucket": bucket,
                "Delimiter": delimiter,
                "Prefix": prefix,
                "MaxKeys": 1000,
            }
            if continuation:
                kwargs["ContinuationToken"] = continuation
            response = client.list_objects_v2(**kwargs)
            for entry in response.get("CommonPrefixes", []):
                value = entry.get("Prefix")
                if value:
                    prefixes.append(value)
            for entry in response.get("Contents", []):
                key = entry.get("Key")
                if not key:
                    continue
                objects.append(
                    ObjectInfo(
                        key=key,
                        size=int(entry.get("Size", 0)),
                        last_modified=entry.get("LastModified"),
                    )
                )
            if response.get("IsTruncated"):
                continuation = response.get("NextContinuationToken")
            else:
                break
        LOGGER.debug(
            "Listed s3://%s/%s: %d prefixes, %d objects",
            bucket,
            prefix,
            len(prefixes),
            len(objects),
        )
        return prefixes, objects

    def latest_modified(self, bucket: str, prefix: str) -> Optional[datetime]:
        try:
            return self._latest_modified(bucket, prefix)
        except (BotoCoreError, ClientError) as exc:
            raise translate_error(exc, bucket=bucket) from exc

    def _latest_modified(self, bucket: str, prefix: str) -> Optional[datetime]:
        client = self.client()
        continuation: Optional[str] = None
        latest: Optional[datetime] = None
        while True:
            kwargs = {"Bucket": bucket, "Prefix": prefix, "MaxKeys": 1000}
            if continuation:
                kwargs["ContinuationToken"] = continuation
            response = client.list_objects_v2(**kwargs)
            for entry in response.get("Contents", []):
                last_modified = entry.get("LastModified")
                if last_modified and (latest is None or last_modified > latest):
                    latest = last_modified
            if response.get("IsTruncated"):
                continuation = response.get("NextContinuationToken")
            else:
                break
        return latest

    def download_object(self, bucket: str, key: str, destination: str) -> str:
        dest_path = str(destination)
        parent = os.path.dirname(dest_path)
        try:
            if parent:
                os.makedirs(parent, exist_ok=True)
            self.client().download_file(bucket, key, dest_path)
        except (BotoCoreError, ClientError, Boto3Error) as exc:
            raise translate_error(exc, bucket=bucket, key=key) from exc
        except OSError as exc:
            LOGGER.warning("Could not write %s: %s", dest_path, exc)
            raise StorageError(
                ErrorKind.UNKNOWN, f"Could not write '{dest_path}': {exc.strerror or exc}"
            ) from exc
        LOGGER.debug("Downloaded s3://%s/%s to %s", bucket, key, dest_path)
        return dest_path
