"""Conversions for values dulwich returns as bytes."""

from dulwich.refs import LOCAL_BRANCH_PREFIX


def decode_bytes(value: bytes | str, *, errors: str = "strict") -> str:
    """Decode a dulwich value (SHA, path, ref name) to str as UTF-8."""
    if isinstance(value, bytes):
        return value.decode("utf-8", errors=errors)
    return value


def branch_from_ref(ref: bytes | str) -> str | None:
    """Short branch name of a local branch ref.

    Args:
        ref: A full ref name such as b"refs/heads/main".

    Returns:
        "main" for b"refs/heads/main", None for anything outside refs/heads/.
    """
    name = ref if isinstance(ref, bytes) else ref.encode()
    if not name.startswith(LOCAL_BRANCH_PREFIX) or name == LOCAL_BRANCH_PREFIX:
        return None
    return decode_bytes(name[len(LOCAL_BRANCH_PREFIX) :])
