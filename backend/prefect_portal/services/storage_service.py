"""
Storage Service - avatar blobs on local disk or S3/MinIO

Keys look like ``avatars/{user_id}-{timestamp}.{ext}``. The local backend
writes under STORAGE_LOCAL_PATH (served at /media); the s3 and minio
backends use boto3 against the configured bucket.
"""

import asyncio
import time
from pathlib import Path
from typing import Optional

import aiofiles
import aiofiles.os
import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from prefect_portal.core.config import settings
from prefect_portal.core.exceptions import StorageError
from prefect_portal.core.logging_config import logger

AVATAR_PREFIX = "avatars"


def avatar_key(user_id: str, extension: str, timestamp: Optional[int] = None) -> str:
    timestamp = timestamp if timestamp is not None else int(time.time() * 1000)
    return f"{AVATAR_PREFIX}/{user_id}-{timestamp}.{extension.lower().lstrip('.')}"


class StorageService:
    """Unified blob storage for local disk, S3 and MinIO"""

    def __init__(self, backend: Optional[str] = None, local_dir: Optional[Path] = None,
                 public_url: Optional[str] = None):
        self.backend = (backend or settings.STORAGE_BACKEND).lower()
        self.local_dir = Path(local_dir) if local_dir else settings.STORAGE_LOCAL_DIR
        self.public_url = (public_url or settings.STORAGE_PUBLIC_URL).rstrip("/")
        self._bucket_name = settings.S3_BUCKET_NAME
        self._client = None

    @property
    def is_local(self) -> bool:
        return self.backend == "local"

    def _get_client(self):
        """Lazy initialization of S3/MinIO client"""
        if self._client is None:
            if self.backend == "minio":
                self._client = boto3.client(
                    's3',
                    endpoint_url=f"http://{settings.MINIO_ENDPOINT}",
                    aws_access_key_id=settings.AWS_ACCESS_KEY_ID,
                    aws_secret_access_key=settings.AWS_SECRET_ACCESS_KEY,
                    config=Config(signature_version='s3v4', s3={'addressing_style': 'path'}),
                    region_name=settings.AWS_REGION
                )
            elif settings.AWS_ACCESS_KEY_ID and settings.AWS_SECRET_ACCESS_KEY:
                self._client = boto3.client(
                    's3',
                    aws_access_key_id=settings.AWS_ACCESS_KEY_ID,
                    aws_secret_access_key=settings.AWS_SECRET_ACCESS_KEY,
                    region_name=settings.AWS_REGION
                )
            else:
                # IAM role credentials
                self._client = boto3.client('s3', region_name=settings.AWS_REGION)
        return self._client

    def url_for(self, key: str) -> str:
        if self.is_local:
            return f"{self.public_url}/{key}"
        if self.backend == "minio":
            return f"http://{settings.MINIO_ENDPOINT}/{self._bucket_name}/{key}"
        return f"https://{self._bucket_name}.s3.{settings.AWS_REGION}.amazonaws.com/{key}"

    def key_from_url(self, url: Optional[str]) -> Optional[str]:
        """Storage key for a URL this service produced, else None"""
        if not url:
            return None
        marker = f"{AVATAR_PREFIX}/"
        index = url.find(marker)
        return url[index:] if index >= 0 else None

    def _local_path(self, key: str) -> Path:
        path = (self.local_dir / key).resolve()
        if self.local_dir.resolve() not in path.parents:
            raise StorageError("Invalid storage key", key=key)
        return path

    async def save(self, key: str, content: bytes, content_type: str = "application/octet-stream") -> str:
        """Store ``content`` under ``key`` and return its public URL"""
        try:
            if self.is_local:
                path = self._local_path(key)
                await aiofiles.os.makedirs(path.parent, exist_ok=True)
                async with aiofiles.open(path, "wb") as f:
                    await f.write(content)
            else:
                client = self._get_client()
                await asyncio.get_event_loop().run_in_executor(
                    None,
                    lambda: client.put_object(
                        Bucket=self._bucket_name, Key=key, Body=content, ContentType=content_type
                    ),
                )
        except (OSError, ClientError, BotoCoreError) as e:
            logger.error(f"[Storage] Upload failed for {key}: {e}")
            raise StorageError(f"Failed to store file: {e}", key=key) from e

        logger.info(f"[Storage] Stored {key} ({len(content)} bytes, backend={self.backend})")
        return self.url_for(key)

    async def delete(self, key: str) -> bool:
        try:
            if self.is_local:
                path = self._local_path(key)
                if not await aiofiles.os.path.exists(path):
                    return False
                await aiofiles.os.remove(path)
            else:
                client = self._get_client()
                await asyncio.get_event_loop().run_in_executor(
                    None, lambda: client.delete_object(Bucket=self._bucket_name, Key=key)
                )
        except (OSError, ClientError, BotoCoreError) as e:
            logger.warning(f"[Storage] Delete failed for {key}: {e}")
            return False
        logger.info(f"[Storage] Deleted {key}")
        return True


# Singleton instance
storage_service = StorageService()
