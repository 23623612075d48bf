"""
Storage Service - S3-compatible object storage for product images

Supports AWS S3, Cloudflare R2, MinIO, and other S3-compatible services.
The catalog only ever removes objects here; uploads happen client-side and
the resulting public URLs are stored on the product.
"""
import logging
from typing import Iterable, List, Optional
from urllib.parse import urlparse, unquote

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from app.core.config import settings
from app.core.exceptions import ExternalServiceError

logger = logging.getLogger(__name__)

# S3 DeleteObjects accepts at most 1000 keys per call
DELETE_BATCH_SIZE = 1000


class StorageService:
    """
    S3-compatible storage service.

    The client is created lazily so constructing the service never touches
    the network.
    """

    def __init__(self, bucket: Optional[str] = None, client=None):
        self._client = client
        self._bucket = bucket or settings.S3_BUCKET
        self._region = settings.S3_REGION

    @property
    def bucket(self) -> str:
        return self._bucket

    @property
    def client(self):
        """Lazy-load S3 client."""
        if self._client is None:
            config = Config(
                signature_version='s3v4',
                retries={'max_attempts': 3, 'mode': 'standard'}
            )

            client_kwargs = {
                'service_name': 's3',
                'region_name': self._region,
                'aws_access_key_id': settings.S3_ACCESS_KEY,
                'aws_secret_access_key': settings.S3_SECRET_KEY,
                'config': config,
            }

            # Custom endpoint for R2/MinIO
            if settings.S3_ENDPOINT:
                client_kwargs['endpoint_url'] = settings.S3_ENDPOINT

            self._client = boto3.client(**client_kwargs)

        return self._client

    def is_configured(self) -> bool:
        """
        Check if S3 is configured.

        Missing access/secret keys are allowed; boto3 falls back to the
        default credential chain.
        """
        return bool(self._bucket)

    def key_from_url(self, url: str) -> Optional[str]:
        """
        Derive the object key from a public URL.

        Path style (`.../<bucket>/<key>`): everything after the first path
        segment equal to the bucket name. Virtual-hosted style
        (`https://<bucket>.s3...amazonaws.com/<key>`): the whole path.
        Returns None when the bucket cannot be located.
        """
        if not url or not self._bucket:
            return None

        parsed = urlparse(url.strip())
        segments = [unquote(s) for s in parsed.path.split("/") if s]

        if self._bucket in segments:
            key = "/".join(segments[segments.index(self._bucket) + 1:])
            return key or None

        host = (parsed.hostname or "").lower()
        if host.startswith(f"{self._bucket.lower()}.") and segments:
            return "/".join(segments)

        return None

    def keys_from_urls(self, urls: Iterable[str]) -> List[str]:
        keys = []
        for url in urls or []:
            key = self.key_from_url(url)
            if key is None:
                logger.warning(f"Skipping image outside bucket {self._bucket}: {url}")
                continue
            if key not in keys:
                keys.append(key)
        return keys

    async def delete_objects(self, keys: List[str]) -> int:
        """
        Delete objects by key.

        Returns the number of keys S3 reported as deleted. Raises
        ExternalServiceError when the call fails or S3 reports per-key errors.
        """
        if not keys:
            return 0
        if not self.is_configured():
            raise ExternalServiceError("Object storage is not configured", service="s3", keys=keys)

        deleted = 0
        failed: List[str] = []
        for start in range(0, len(keys), DELETE_BATCH_SIZE):
            batch = keys[start:start + DELETE_BATCH_SIZE]
            try:
                response = self.client.delete_objects(
                    Bucket=self._bucket,
                    Delete={"Objects": [{"Key": k} for k in batch], "Quiet": False},
                )
            except (ClientError, BotoCoreError) as e:
                logger.error(f"S3 delete_objects failed for {len(batch)} keys: {e}")
                raise ExternalServiceError(
                    f"Object storage delete failed: {e}", service="s3", keys=batch
                ) from e

            deleted += len(response.get("Deleted", []))
            failed.extend(err.get("Key") for err in response.get("Errors", []))

        if failed:
            raise ExternalServiceError(
                f"Object storage could not delete {len(failed)} object(s)",
                service="s3",
                keys=failed,
            )

        logger.info(f"Deleted {deleted} object(s) from {self._bucket}")
        return deleted

    async def delete_images(self, urls: Iterable[str]) -> int:
        """Delete the objects behind a list of public image URLs."""
        return await self.delete_objects(self.keys_from_urls(urls))


_storage_service: Optional[StorageService] = None


def get_storage_service() -> StorageService:
    """Process-wide StorageService (FastAPI dependency)."""
    global _storage_service
    if _storage_service is None:
        _storage_service = StorageService()
    return _storage_service
