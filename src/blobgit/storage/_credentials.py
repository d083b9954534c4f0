"""Credential caching for object storage clients.

Temporary storage credentials carry an expiry. A CredentialCache holds the
current set, answers whether it is still usable at a given instant, and
refreshes it from a provider on demand. Callers own the cache instance and
pass it to the adapters that need it.
"""

import threading
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Final, TypeAlias

_DEFAULT_REFRESH_MARGIN: Final = timedelta(minutes=5)


@dataclass(frozen=True, slots=True)
class StorageCredentials:
    """A set of object storage credentials.

    Attributes:
        access_key_id: Access key identifier.
        secret_access_key: Secret access key.
        session_token: Session token for temporary credentials.
        expires_at: Expiry instant (timezone-aware). None means no expiry.
    """

    access_key_id: str
    secret_access_key: str
    session_token: str | None = None
    expires_at: datetime | None = None


CredentialProvider: TypeAlias = Callable[[], StorageCredentials]


class CredentialCache:
    """Holds storage credentials between calls and refreshes them when stale.

    Example:
        >>> cache = CredentialCache(fetch_credentials)
        >>> creds = cache.get()  # fetches on first use
        >>> cache.is_valid(datetime.now(UTC))
        True
    """

    __slots__ = ("_clock", "_credentials", "_lock", "_margin", "_provider")

    def __init__(
        self,
        provider: CredentialProvider,
        *,
        refresh_margin: timedelta = _DEFAULT_REFRESH_MARGIN,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        """Initialize an empty cache.

        Args:
            provider: Callable returning fresh credentials.
            refresh_margin: Credentials expiring within this margin are
                treated as already expired.
            clock: Source of the current time (UTC). Defaults to datetime.now.
        """
        self._provider = provider
        self._margin = refresh_margin
        self._clock = clock or (lambda: datetime.now(UTC))
        self._credentials: StorageCredentials | None = None
        self._lock = threading.Lock()

    @property
    def credentials(self) -> StorageCredentials | None:
        """The cached credentials, or None before the first refresh."""
        return self._credentials

    def is_valid(self, now: datetime) -> bool:
        """Check whether cached credentials can still be used at `now`.

        Args:
            now: The instant to check against (timezone-aware).

        Returns:
            False when nothing is cached or expiry falls within the margin.
        """
        credentials = self._credentials
        if credentials is None:
            return False
        if credentials.expires_at is None:
            return True
        return now + self._margin < credentials.expires_at

    def refresh(self) -> StorageCredentials:
        """Fetch new credentials from the provider and cache them."""
        with self._lock:
            self._credentials = self._provider()
            return self._credentials

    def get(self) -> StorageCredentials:
        """Return cached credentials, refreshing first if they are stale."""
        credentials = self._credentials
        if credentials is not None and self.is_valid(self._clock()):
            return credentials
        return self.refresh()

    def invalidate(self) -> None:
        """Drop cached credentials so the next get() refreshes."""
        with self._lock:
            self._credentials = None
