"""Object storage path resolution."""

from dataclasses import dataclass
from typing import Final

from blobgit.exceptions import ObjectPathError

_SEPARATOR: Final = "/"


@dataclass(frozen=True, slots=True)
class ObjectLocation:
    """A container plus the key prefix everything for one repository lives under.

    Attributes:
        container: The container (bucket) name.
        key_prefix: Key prefix without leading or trailing separators. May be
            empty when the repository sits at the container root.
    """

    container: str
    key_prefix: str

    def join(self, *parts: str) -> str:
        """Build a key under this location's prefix.

        Args:
            parts: Key segments to append. Empty segments are dropped.

        Returns:
            The joined key, never starting with a separator.
        """
        segments = [self.key_prefix, *parts]
        return _SEPARATOR.join(s.strip(_SEPARATOR) for s in segments if s.strip(_SEPARATOR))


def resolve_object_path(object_path: str) -> ObjectLocation:
    """Split an object storage path into container and key prefix.

    The path is normalized to start with a single separator, then split.
    The first segment names the container; the remaining segments, rejoined,
    form the key prefix.

    Args:
        object_path: Path such as "/bucket/apps/a1" or "bucket/apps/a1".

    Returns:
        The resolved ObjectLocation.

    Raises:
        ObjectPathError: If no container name is present.

    Example:
        >>> resolve_object_path("/bucket/apps/a1")
        ObjectLocation(container='bucket', key_prefix='apps/a1')
    """
    normalized = object_path
    if not normalized.startswith(_SEPARATOR):
        normalized = f"{_SEPARATOR}{normalized}"

    parts = normalized.split(_SEPARATOR)
    if len(parts) < 2 or not parts[1]:  # noqa: PLR2004
        msg = f"Invalid object storage path {object_path!r}: must contain a container name"
        raise ObjectPathError(msg, object_path=object_path)

    container = parts[1]
    key_prefix = _SEPARATOR.join(p for p in parts[2:] if p)
    return ObjectLocation(container=container, key_prefix=key_prefix)
