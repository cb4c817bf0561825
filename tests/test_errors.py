import unittest

from botocore.exceptions import (
    ClientError,
    ConnectTimeoutError,
    EndpointConnectionError,
    NoCredentialsError,
    NoRegionError,
    ProfileNotFound,
    ReadTimeoutError,
)

from ss3.errors import ErrorKind, StorageError, classify, translate_error


def _client_error(code: str, operation: str = "ListObjectsV2") -> ClientError:
    return ClientError({"Error": {"Code": code, "Message": code}}, operation)


class TestClassify(unittest.TestCase):
    def test_client_error_codes(self) -> None:
        cases = {
            "NoSuchBucket": ErrorKind.NO_SUCH_BUCKET,
            "InvalidBucketName": ErrorKind.INVALID_BUCKET_NAME,
            "AccessDenied": ErrorKind.ACCESS_DENIED,
            "403": ErrorKind.ACCESS_DENIED,
            "SlowDown": ErrorKind.THROTTLED,
            "Throttling": ErrorKind.THROTTLED,
            "RequestTimeout": ErrorKind.TIMEOUT,
            "NoSuchKey": ErrorKind.NO_SUCH_KEY,
            "404": ErrorKind.NO_SUCH_KEY,
            "InternalError": ErrorKind.UNKNOWN,
        }
        for code, kind in cases.items():
            with self.subTest(code=code):
                self.assertEqual(classify(_client_error(code)), kind)

    def test_connection_and_timeout_errors(self) -> None:
        self.assertEqual(
            classify(EndpointConnectionError(endpoint_url="https://s3.example")),
            ErrorKind.NETWORK_ERROR,
        )
        self.assertEqual(
            classify(ConnectTimeoutError(endpoint_url="https://s3.example")),
            ErrorKind.TIMEOUT,
        )
        self.assertEqual(
            classify(ReadTimeoutError(endpoint_url="https://s3.example")),
            ErrorKind.TIMEOUT,
        )

    def test_credential_and_region_errors(self) -> None:
        self.assertEqual(classify(NoCredentialsError()), ErrorKind.MISSING_CREDENTIALS)
        self.assertEqual(
            classify(ProfileNotFound(profile="ghost")), ErrorKind.MISSING_CREDENTIALS
        )
        self.assertEqual(classify(NoRegionError()), ErrorKind.MISSING_REGION)

    def test_expired_sso_token(self) -> None:
        exc = Exception(
            "UnauthorizedSSOTokenError: The SSO session associated with "
            "this profile has expired or is otherwise invalid."
        )
        self.assertEqual(classify(exc), ErrorKind.MISSING_CREDENTIALS)

    def test_unexpected_exception(self) -> None:
        self.assertEqual(classify(ValueError("boom")), ErrorKind.UNKNOWN)


class TestTranslateError(unittest.TestCase):
    def test_no_such_bucket_message_names_bucket(self) -> None:
        error = translate_error(_client_error("NoSuchBucket"), bucket="missing")
        self.assertIsInstance(error, StorageError)
        self.assertEqual(error.kind, ErrorKind.NO_SUCH_BUCKET)
        self.assertIn("'missing' does not exist", error.message)

    def test_access_denied_on_download_mentions_file(self) -> None:
        error = translate_error(
            _client_error("AccessDenied", "GetObject"), bucket="b", key="a.txt"
        )
        self.assertEqual(error.kind, ErrorKind.ACCESS_DENIED)
        self.assertIn("download this file", error.message)

    def test_unknown_keeps_detail(self) -> None:
        error = translate_error(RuntimeError("something odd"))
        self.assertEqual(error.kind, ErrorKind.UNKNOWN)
        self.assertEqual(error.message, "An unexpected error occurred: something odd")

    def test_storage_error_passes_through(self) -> None:
        original = StorageError(ErrorKind.THROTTLED, "slow down")
        self.assertIs(translate_error(original), original)

    def test_sso_expiry_suggests_login(self) -> None:
        error = translate_error(Exception("Error loading SSO Token: token is expired"))
        self.assertEqual(error.kind, ErrorKind.MISSING_CREDENTIALS)
        self.assertIn("aws sso login", error.message)


if __name__ == "__main__":
    unittest.main()
