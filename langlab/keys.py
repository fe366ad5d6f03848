"""Content addressing for stored media.

Identical inputs always map to the same object key, so a cached artifact can be
found again without any index. Bumping ``VERSION`` moves every new key into a
fresh namespace; old objects stay where they are.
"""
import base64
import hashlib
from typing import Sequence

VERSION = "v1"
DELIMITER = "|"


def _b64url(digest: bytes) -> str:
    return base64.urlsafe_b64encode(digest).decode("ascii").rstrip("=")


def hash_fields(fields: Sequence[str], version: str = VERSION) -> str:
    # NOTE: fields are not escaped, so a "|" inside text can collide with another split
    if isinstance(fields, str):
        raise TypeError("cache key fields must be a sequence of str, not a str")
    for f in fields:
        if not isinstance(f, str):
            raise TypeError(f"cache key fields must be str, got {type(f).__name__}")
    joined = DELIMITER.join(fields)
    return version + _b64url(hashlib.md5(joined.encode("utf-8")).digest())


def derive_key(namespace: str, fields: Sequence[str], ext: str, version: str = VERSION) -> str:
    """Return ``{namespace}/{version}{hash}.{ext}`` for the given fields."""
    return f"{namespace}/{hash_fields(fields, version)}.{ext}"
