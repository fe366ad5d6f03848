import base64
import logging
from typing import Optional, Tuple
from urllib.parse import unquote_to_bytes

import httpx
from botocore.exceptions import ClientError

from .errors import StoreError, error_code

logger = logging.getLogger(__name__)

_MISSING = {"404", "NoSuchKey", "NotFound"}


class S3BlobStore:
    """Key-addressed S3 bucket that hands out time-limited signed URLs."""

    def __init__(self, client, bucket: str, url_expiration: int = 3600, http: Optional[httpx.Client] = None):
        self.client = client
        self.bucket = bucket
        self.url_expiration = url_expiration
        self.http = http

    def sign(self, key: str) -> str:
        try:
            return self.client.generate_presigned_url(
                "get_object",
                Params={"Bucket": self.bucket, "Key": key},
                ExpiresIn=self.url_expiration,
            )
        except Exception as e:
            raise StoreError(f"Failed to generate signed URL for {key}: {error_code(e)}") from e

    def exists(self, key: str) -> bool:
        try:
            self.client.head_object(Bucket=self.bucket, Key=key)
            return True
        except ClientError as e:
            if error_code(e) not in _MISSING:
                raise
            return False

    def probe(self, key: str) -> Optional[str]:
        """Signed URL if the object is there, otherwise None.

        Any failure counts as a miss so the caller regenerates instead of failing.
        """
        try:
            if not self.exists(key):
                return None
            return self.sign(key)
        except Exception as e:
            logger.warning("S3 probe for %s failed (%s), treating as missing", key, error_code(e))
            return None

    def upload(self, key: str, data: bytes, content_type: str = "application/octet-stream") -> None:
        try:
            self.client.put_object(Bucket=self.bucket, Key=key, Body=data, ContentType=content_type)
        except Exception as e:
            raise StoreError(f"Failed to upload {key} to S3: {error_code(e)}") from e

    def put(self, key: str, data: bytes, content_type: str = "application/octet-stream") -> str:
        self.upload(key, data, content_type)
        return self.sign(key)

    def store_url(self, url: str, key: str) -> str:
        """Copy a remote file (or a data: URI) into the bucket."""
        data, content_type = self._fetch(url)
        return self.put(key, data, content_type)

    def _fetch(self, url: str) -> Tuple[bytes, str]:
        if url.startswith("data:"):
            header, _, payload = url.partition(",")
            content_type = header[5:].split(";")[0] or "application/octet-stream"
            if ";base64" in header:
                return base64.b64decode(payload), content_type
            return unquote_to_bytes(payload), content_type
        http = self.http or httpx.Client(timeout=30)
        try:
            r = http.get(url)
            r.raise_for_status()
        except httpx.HTTPError as e:
            raise StoreError(f"Failed to fetch {url}: {e}") from e
        finally:
            if self.http is None:
                http.close()
        return r.content, r.headers.get("content-type", "application/octet-stream")
