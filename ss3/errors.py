from __future__ import annotations

import enum
import logging
from typing import Optional

from botocore.exceptions import (
    ClientError,
    ConnectTimeoutError,
    ConnectionError as BotoConnectionError,
    NoCredentialsError,
    NoRegionError,
    PartialCredentialsError,
    ProfileNotFound,
    ReadTimeoutError,
)

LOGGER = logging.getLogger(__name__)


class ErrorKind(enum.Enum):
    NO_SUCH_BUCKET = "no_such_bucket"
    INVALID_BUCKET_NAME = "invalid_bucket_name"
    ACCESS_DENIED = "access_denied"
    THROTTLED = "throttled"
    NETWORK_ERROR = "network_error"
    TIMEOUT = "timeout"
    MISSING_CREDENTIALS = "missing_credentials"
    MISSING_REGION = "missing_region"
    NO_SUCH_KEY = "no_such_key"
    UNKNOWN = "unknown"


class StorageError(Exception):
    """A backend failure reduced to one kind and one user-facing message."""

    def __init__(self, kind: ErrorKind, message: str) -> None:
        super().__init__(message)
        self.kind = kind
        self.message = message

    def __repr__(self) -> str:
        return f"StorageError({self.kind.name}, {self.message!r})"


_CLIENT_ERROR_KINDS = {
    "NoSuchBucket": ErrorKind.NO_SUCH_BUCKET,
    "InvalidBucketName": ErrorKind.INVALID_BUCKET_NAME,
    "AccessDenied": ErrorKind.ACCESS_DENIED,
    "AllAccessDisabled": ErrorKind.ACCESS_DENIED,
    "InvalidAccessKeyId": ErrorKind.MISSING_CREDENTIALS,
    "SignatureDoesNotMatch": ErrorKind.MISSING_CREDENTIALS,
    "ExpiredToken": ErrorKind.MISSING_CREDENTIALS,
    "403": ErrorKind.ACCESS_DENIED,
    "Throttling": ErrorKind.THROTTLED,
    "ThrottlingException": ErrorKind.THROTTLED,
    "SlowDown": ErrorKind.THROTTLED,
    "RequestLimitExceeded": ErrorKind.THROTTLED,
    "TooManyRequestsException": ErrorKind.THROTTLED,
    "RequestTimeout": ErrorKind.TIMEOUT,
    "RequestTimeTooSkewed": ErrorKind.TIMEOUT,
    "NoSuchKey": ErrorKind.NO_SUCH_KEY,
    "404": ErrorKind.NO_SUCH_KEY,
}

_SSO_EXPIRED_MARKERS = (
    "unauthorizedssotokenerror",
    "sso session",
    "sso token",
    "token has expired",
    "token is expired",
    "error loading sso token",
)


def is_sso_expired_error(exc: BaseException) -> bool:
    text = f"{type(exc).__name__}: {exc}".lower()
    return any(marker in text for marker in _SSO_EXPIRED_MARKERS)


def error_message(
    kind: ErrorKind,
    detail: str = "",
    *,
    bucket: Optional[str] = None,
    key: Optional[str] = None,
) -> str:
    if kind is ErrorKind.NO_SUCH_BUCKET:
        return f"Bucket '{bucket}' does not exist. Please check the name."
    if kind is ErrorKind.INVALID_BUCKET_NAME:
        return "Invalid bucket name format. Please enter a valid bucket name."
    if kind is ErrorKind.ACCESS_DENIED:
        if key:
            return "Access denied. You do not have permission to download this file."
        return f"Access denied to bucket '{bucket}'. Check your permissions."
    if kind is ErrorKind.THROTTLED:
        return "Rate limit exceeded. Please wait a moment and try again."
    if kind is ErrorKind.NETWORK_ERROR:
        return "Network error: Unable to connect to AWS S3. Check your connection."
    if kind is ErrorKind.TIMEOUT:
        return "Request timed out. The network may be slow. Try again later."
    if kind is ErrorKind.MISSING_CREDENTIALS:
        if detail:
            return f"Missing AWS credentials: {detail}"
        return "Missing AWS credentials. Run `aws configure` outside of ss3."
    if kind is ErrorKind.MISSING_REGION:
        return "No AWS region configured. Set AWS_REGION or choose a region."
    if kind is ErrorKind.NO_SUCH_KEY:
        return "The file does not exist in the bucket."
    return f"An unexpected error occurred: {detail}"


def _client_error_code(exc: ClientError) -> str:
    error = exc.response.get("Error", {}) if isinstance(exc.response, dict) else {}
    code = error.get("Code")
    if code:
        return str(code)
    status = exc.response.get("ResponseMetadata", {}).get("HTTPStatusCode")
    return str(status) if status else ""


def classify(exc: BaseException) -> ErrorKind:
    if isinstance(exc, StorageError):
        return exc.kind
    if isinstance(exc, ClientError):
        return _CLIENT_ERROR_KINDS.get(_client_error_code(exc), ErrorKind.UNKNOWN)
    # Timeouts subclass the connection errors, so they are checked first.
    if isinstance(exc, (ConnectTimeoutError, ReadTimeoutError)):
        return ErrorKind.TIMEOUT
    if isinstance(exc, BotoConnectionError):
        return ErrorKind.NETWORK_ERROR
    if isinstance(exc, (NoCredentialsError, PartialCredentialsError, ProfileNotFound)):
        return ErrorKind.MISSING_CREDENTIALS
    if isinstance(exc, NoRegionError):
        return ErrorKind.MISSING_REGION
    if is_sso_expired_error(exc):
        return ErrorKind.MISSING_CREDENTIALS
    return ErrorKind.UNKNOWN


def translate_error(
    exc: BaseException,
    *,
    bucket: Optional[str] = None,
    key: Optional[str] = None,
) -> StorageError:
    if isinstance(exc, StorageError):
        return exc
    kind = classify(exc)
    detail = str(exc)
    if kind is ErrorKind.MISSING_CREDENTIALS and is_sso_expired_error(exc):
        detail = "the SSO session has expired, run `aws sso login`."
    elif kind is ErrorKind.MISSING_CREDENTIALS and isinstance(exc, ClientError):
        detail = ""
    LOGGER.warning("S3 call failed (%s): %s", kind.name, exc)
    return StorageError(kind, error_message(kind, detail, bucket=bucket, key=key))
