import asyncio
import logging
from typing import Optional, Protocol

import boto3
from botocore.client import Config
from botocore.exceptions import BotoCoreError, ClientError

from app.core.config import settings
from app.core.exceptions import StorageError

logger = logging.getLogger(__name__)


class ObjectStorage(Protocol):
    """Read access to recorded media by object key."""

    async def download_object(self, key: str) -> bytes: ...


class S3ObjectStorage:
    """
    MinIO / S3 backed object storage. boto3 is blocking, so every call runs
    in a worker thread.
    """

    def __init__(self, bucket: Optional[str] = None, client=None):
        self.bucket = bucket or settings.MINIO_BUCKET
        self._client = client or boto3.client(
            's3',
            endpoint_url=settings.MINIO_ENDPOINT or None,
            aws_access_key_id=settings.MINIO_ACCESS_KEY,
            aws_secret_access_key=settings.MINIO_SECRET_KEY,
            region_name=settings.MINIO_REGION,
            verify=settings.MINIO_VERIFY_TLS,
            # MinIO needs path-style addressing
            config=Config(signature_version='s3v4', s3={'addressing_style': 'path'}),
        )

    def _download(self, key: str) -> bytes:
        obj = self._client.get_object(Bucket=self.bucket, Key=key)
        return obj['Body'].read()

    async def download_object(self, key: str) -> bytes:
        """
        Fetch an object's bytes.

        Raises:
            StorageError: If the object is missing or the store is unreachable.
        """
        try:
            data = await asyncio.to_thread(self._download, key)
        except (ClientError, BotoCoreError) as e:
            logger.error(f"Failed to download s3://{self.bucket}/{key}: {e}")
            raise StorageError(f"Failed to download object '{key}'", details={"bucket": self.bucket}) from e
        logger.debug(f"Downloaded {len(data)} bytes from s3://{self.bucket}/{key}")
        return data
