import logging
from typing import Callable, Sequence

from .keys import VERSION, derive_key

logger = logging.getLogger(__name__)

Producer = Callable[[], bytes]


class ArtifactCache:
    """Get-or-create over a blob store.

    DERIVE -> PROBE -> HIT, or DERIVE -> PROBE -> PRODUCE -> STORE -> DONE.
    Nothing is shared between calls: two concurrent misses for the same key
    both produce and both upload, and the last upload wins.
    """

    def __init__(self, store, version: str = VERSION):
        self.store = store
        self.version = version

    def get_or_create(
        self,
        namespace: str,
        key_fields: Sequence[str],
        ext: str,
        producer: Producer,
        content_type: str = "application/octet-stream",
    ) -> str:
        key = derive_key(namespace, key_fields, ext, self.version)
        url = self.store.probe(key)
        if url:
            logger.debug("cache hit %s", key)
            return url
        logger.debug("cache miss %s, producing", key)
        data = producer()
        return self.store.put(key, data, content_type)
