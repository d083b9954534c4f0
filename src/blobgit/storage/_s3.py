"""S3-compatible object store backed by boto3."""

from typing import TYPE_CHECKING, Any, Final

import boto3
from botocore.config import Config as BotoConfig
from botocore.exceptions import BotoCoreError, ClientError

from blobgit.exceptions import ObjectNotFoundError, StorageError

if TYPE_CHECKING:
    from blobgit.storage._credentials import CredentialCache, StorageCredentials

_NOT_FOUND_CODES: Final = frozenset({"NoSuchKey", "NoSuchBucket", "404", "NotFound"})
_EXPIRED_CODES: Final = frozenset({"ExpiredToken", "ExpiredTokenException"})


def _error_code(error: ClientError) -> str:
    return str(error.response.get("Error", {}).get("Code", ""))


class S3ObjectStore:
    """Object store over the S3 API.

    Containers map to buckets. When a CredentialCache is supplied the client
    is built from its credentials and rebuilt whenever they go stale;
    otherwise boto3's default credential chain is used.
    """

    __slots__ = (
        "_cached_for",
        "_client",
        "_credentials",
        "_endpoint_url",
        "_max_attempts",
        "_region",
        "_timeout",
    )

    def __init__(
        self,
        *,
        region: str | None = None,
        endpoint_url: str | None = None,
        request_timeout_s: float = 30.0,
        max_attempts: int = 5,
        credentials: "CredentialCache | None" = None,
        client: Any | None = None,  # noqa: ANN401
    ) -> None:
        """Initialize the store.

        Args:
            region: AWS region name.
            endpoint_url: Custom endpoint for S3-compatible services.
            request_timeout_s: Connect and read timeout in seconds.
            max_attempts: botocore retry attempts per request.
            credentials: Optional credential cache used to build the client.
            client: Pre-built boto3 S3 client. Skips client construction.
        """
        self._region = region
        self._endpoint_url = endpoint_url
        self._timeout = request_timeout_s
        self._max_attempts = max_attempts
        self._credentials = credentials
        self._client = client
        self._cached_for: StorageCredentials | None = None

    def list_keys(self, container: str, prefix: str) -> list[str]:
        keys: list[str] = []
        try:
            paginator = self._get_client().get_paginator("list_objects_v2")
            for page in paginator.paginate(Bucket=container, Prefix=prefix):
                keys.extend(obj["Key"] for obj in page.get("Contents", []))
        except ClientError as e:
            raise self._translate(e, f"list {container}/{prefix}", container) from e
        except BotoCoreError as e:
            msg = f"Failed to list {container}/{prefix}: {e}"
            raise StorageError(msg, container=container) from e
        return sorted(keys)

    def read_object(self, container: str, key: str) -> bytes:
        try:
            response = self._get_client().get_object(Bucket=container, Key=key)
            body: bytes = response["Body"].read()
        except ClientError as e:
            raise self._translate(e, f"read {container}/{key}", container, key) from e
        except BotoCoreError as e:
            msg = f"Failed to read {container}/{key}: {e}"
            raise StorageError(msg, container=container, key=key) from e
        return body

    def write_object(self, container: str, key: str, data: bytes) -> None:
        try:
            _ = self._get_client().put_object(Bucket=container, Key=key, Body=data)
        except ClientError as e:
            raise self._translate(e, f"write {container}/{key}", container, key) from e
        except BotoCoreError as e:
            msg = f"Failed to write {container}/{key}: {e}"
            raise StorageError(msg, container=container, key=key) from e

    def _get_client(self) -> Any:  # noqa: ANN401
        if self._credentials is None:
            if self._client is None:
                self._client = self._build_client(None)
            return self._client

        current = self._credentials.get()
        if self._client is None or current is not self._cached_for:
            self._client = self._build_client(current)
            self._cached_for = current
        return self._client

    def _build_client(self, credentials: "StorageCredentials | None") -> Any:  # noqa: ANN401
        session_kwargs: dict[str, str | None] = {"region_name": self._region}
        if credentials is not None:
            session_kwargs.update(
                aws_access_key_id=credentials.access_key_id,
                aws_secret_access_key=credentials.secret_access_key,
                aws_session_token=credentials.session_token,
            )
        session = boto3.session.Session(**session_kwargs)
        return session.client(
            "s3",
            region_name=self._region,
            endpoint_url=self._endpoint_url,
            config=BotoConfig(
                connect_timeout=self._timeout,
                read_timeout=self._timeout,
                retries={"max_attempts": self._max_attempts, "mode": "standard"},
            ),
        )

    def _translate(
        self,
        error: ClientError,
        action: str,
        container: str,
        key: str | None = None,
    ) -> StorageError:
        code = _error_code(error)
        if code in _NOT_FOUND_CODES:
            return ObjectNotFoundError(
                f"No such object: {container}/{key or ''}", container=container, key=key
            )
        if code in _EXPIRED_CODES and self._credentials is not None:
            self._credentials.invalidate()
        return StorageError(f"Failed to {action}: {error}", container=container, key=key)
