"""
Media Store

Uploads, removes and resolves public URLs for video blobs in a
Supabase Storage bucket.
"""

import asyncio
from typing import Optional

from supabase import Client

from backend.config import config
from backend.delivery.errors import StoreError
from backend.utils.logging import storage_logger as logger
from .client import get_supabase_admin_client


class MediaStore:
    """Public Supabase Storage bucket holding uploaded videos."""

    def __init__(
        self,
        client: Optional[Client] = None,
        bucket: Optional[str] = None,
        file_size_limit: Optional[int] = None,
    ):
        self._client = client
        self.bucket = bucket or config.VIDEO_BUCKET
        self.file_size_limit = file_size_limit or config.MAX_VIDEO_BYTES

    @property
    def client(self) -> Client:
        if self._client is None:
            self._client = get_supabase_admin_client()
        return self._client

    async def put(self, key: str, content: bytes, content_type: str) -> str:
        """Upload a blob and return its public URL."""
        storage = self.client.storage.from_(self.bucket)
        try:
            await asyncio.to_thread(
                storage.upload,
                key,
                content,
                {
                    "content-type": content_type,
                    "cache-control": "3600",
                    "upsert": "false",
                },
            )
        except Exception as e:
            raise StoreError(f"Failed to upload {key} to {self.bucket}: {e}") from e

        public_url = storage.get_public_url(key)
        logger.info("Video uploaded", key=key, bucket=self.bucket)
        return public_url

    async def remove(self, key: str) -> None:
        try:
            await asyncio.to_thread(self.client.storage.from_(self.bucket).remove, [key])
        except Exception as e:
            raise StoreError(f"Failed to remove {key} from {self.bucket}: {e}") from e
        logger.info("Video removed", key=key, bucket=self.bucket)

    def ensure_bucket(self) -> bool:
        """
        Create the bucket if it does not exist yet.

        Returns True if the bucket was created, False if it was already there.
        """
        buckets = self.client.storage.list_buckets()
        if any(b.name == self.bucket for b in buckets):
            logger.info("Storage bucket ready", bucket=self.bucket)
            return False

        self.client.storage.create_bucket(
            self.bucket,
            options={"public": True, "file_size_limit": self.file_size_limit},
        )
        logger.info("Storage bucket created", bucket=self.bucket)
        return True
